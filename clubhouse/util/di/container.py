"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from clubhouse.util.di import select_providers


def create_container() -> AsyncContainer:
    """Build the production container.

    Settings are read from the environment by the config provider. The
    engine and document store live for the container's lifetime; close
    the container to dispose of them.
    """
    return make_async_container(*select_providers())
