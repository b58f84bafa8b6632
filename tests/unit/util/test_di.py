"""Unit tests for provider selection."""

import pytest

from clubhouse.domain.repository import CommentRepository, DocumentStore
from clubhouse.persistence.repository.inmemory import InMemoryDocumentStore
from clubhouse.util.di import (
    PersistenceProvider,
    ProdConfigProvider,
    ProdPersistenceProvider,
    get_provider,
    mockable_components,
    select_providers,
)
from clubhouse.util.error import DependencyInjectionError
from tests.di import MockPersistenceProvider, build_test_container
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestGetProvider:
    """Tests for get_provider."""

    def test_concrete_provider_is_returned_as_is(self):
        assert get_provider(ProdConfigProvider) is ProdConfigProvider

    def test_selects_by_mock_flag(self):
        assert get_provider(PersistenceProvider) is ProdPersistenceProvider
        assert get_provider(PersistenceProvider, use_mock=True) is MockPersistenceProvider


class TestSelectProviders:
    """Tests for select_providers."""

    def test_persistence_is_mockable(self):
        assert mockable_components() == {"persistence"}

    def test_mocked_component_uses_mock_provider(self):
        providers = select_providers(mocked={"persistence"})

        assert any(isinstance(p, MockPersistenceProvider) for p in providers)
        assert not any(isinstance(p, ProdPersistenceProvider) for p in providers)

    def test_unknown_component_raises(self):
        with pytest.raises(DependencyInjectionError) as exc_info:
            select_providers(mocked={"search"})

        assert exc_info.value.component == "search"

    def test_test_container_rejects_unknown_component(self):
        with pytest.raises(ValueError):
            build_test_container(unmock={"search"})


class TestMockContainer:
    """The unit container wires in-memory persistence."""

    @pytest.mark.asyncio
    async def test_store_is_in_memory(self, unit_env):
        store = await unit_env.get(DocumentStore)

        assert isinstance(store, InMemoryDocumentStore)

    @pytest.mark.asyncio
    async def test_comment_repository_shares_the_store(self, unit_env):
        store = await unit_env.get(DocumentStore)
        repository = await unit_env.get(CommentRepository)

        assert repository.store is store
