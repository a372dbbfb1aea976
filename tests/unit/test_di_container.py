"""
Tests for the dependency injection container
"""

import httpx
import pytest

from bcconnector.config import Settings
from bcconnector.di_container import DIContainer
from bcconnector.factories import SecureStoreFactory
from bcconnector.storage import InMemorySecureStore, KeyringSecureStore, SQLiteSecureStore

from conftest import Recorder, collection


@pytest.mark.unit
class TestDIContainer:
    async def test_services_are_cached_and_shared(self, settings):
        async with DIContainer(settings) as container:
            store = container.get_secure_store()
            token_store = container.get_token_store()
            client = container.get_client()

            assert isinstance(store, InMemorySecureStore)
            assert container.get_secure_store() is store
            assert container.get_token_store() is token_store
            assert container.get_client() is client
            assert client.token_provider is token_store
            assert token_store.secure_store is store
            assert set(container.get_container_info()["cached_services"]) == {
                "http_client", "secure_store", "token_store", "client"
            }

    async def test_injected_http_client_left_open(self, settings):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(lambda r: collection([]))))
        container = DIContainer(settings, http_client=http_client)

        assert container.get_http_client() is http_client
        await container.close()

        assert not http_client.is_closed
        await http_client.aclose()

    async def test_owned_http_client_closed(self, settings):
        container = DIContainer(settings)
        http_client = container.get_http_client()

        await container.close()

        assert http_client.is_closed
        assert container.get_container_info()["cached_services"] == []


@pytest.mark.unit
class TestSecureStoreFactory:
    def test_sqlite_store_at_configured_path(self, settings, tmp_path):
        configured = settings.model_copy(update={
            "secure_store": "sqlite",
            "secure_store_path": str(tmp_path / "creds.db"),
        })

        store = SecureStoreFactory.create(configured)

        assert isinstance(store, SQLiteSecureStore)
        assert store.db_path == (tmp_path / "creds.db").resolve()
        assert store.service == "BCConnector"
        store.close()

    def test_available_stores(self):
        assert SecureStoreFactory.get_available_stores() == ["keyring", "sqlite", "memory"]

    def test_keyring_store_is_default(self, settings, memory_keyring):
        default = Settings.model_fields["secure_store"].default
        configured = settings.model_copy(update={"secure_store": default})

        assert default == "keyring"

        store = SecureStoreFactory.create(configured)

        assert isinstance(store, KeyringSecureStore)
        assert store.service == settings.secure_store_service
