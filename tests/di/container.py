"""Test container builder with selective unmocking."""

from dishka import AsyncContainer, make_async_container

from clubhouse.util.di import Component, mockable_components, select_providers


def build_test_container(unmock: set[Component] | None = None) -> AsyncContainer:
    """Build a container that mocks every component not named in ``unmock``.

    Examples:
        # Unit tests - in-memory stores
        container = build_test_container()

        # Integration tests - PostgreSQL document store
        container = build_test_container(unmock={"persistence"})

    Raises:
        ValueError: If unknown components are named
    """
    unmock = unmock or set()
    unknown = unmock - mockable_components()
    if unknown:
        raise ValueError(f"Unknown components: {unknown}")

    return make_async_container(*select_providers(mocked=mockable_components() - unmock))
