"""Base service class for domain services."""


class Service:
    """Base class for domain services.

    Services hold repositories, never local view state, and wrap each
    operation in a logfire span named ``<service>.<operation>``.
    """
