"""
Tests for the storage clients.

The Azure client is exercised against a stubbed ContainerClient so we can
check exactly which SDK calls are made and how SDK failures are wrapped,
without network access.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from azure.core.exceptions import ResourceNotFoundError

from blob_gateway.core.errors import BackendError
from blob_gateway.infrastructure.storage.client import (
    AzureBlobStorageClient,
    MockStorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)


async def async_iter(items):
    for item in items:
        yield item


@pytest.fixture
def config() -> StorageConfig:
    return StorageConfig(
        account_name="acct",
        sas_token="?sv=2022-11-02&sig=abc",
        container_name="uploads",
    )


@pytest.fixture
def container() -> MagicMock:
    container = MagicMock()
    container.upload_blob = AsyncMock(
        return_value=SimpleNamespace(
            url="https://acct.blob.core.windows.net/uploads/report.txt?sv=2022-11-02&sig=abc"
        )
    )
    container.delete_blob = AsyncMock()
    container.close = AsyncMock()
    return container


@pytest.fixture
def azure_client(config, container) -> AzureBlobStorageClient:
    return AzureBlobStorageClient(config, container_client=container)


# ---------------------------------------------------------------------------
# StorageConfig
# ---------------------------------------------------------------------------

class TestStorageConfig:

    def test_account_url_from_account_name(self, config):
        assert config.account_url == "https://acct.blob.core.windows.net"

    def test_credential_strips_leading_question_mark(self, config):
        assert config.credential == "sv=2022-11-02&sig=abc"

    def test_config_is_immutable(self, config):
        with pytest.raises(AttributeError):
            config.container_name = "other"


# ---------------------------------------------------------------------------
# Azure client
# ---------------------------------------------------------------------------

class TestAzureBlobStorageClient:

    @pytest.mark.asyncio
    async def test_upload_overwrites_with_content_type(self, azure_client, container):
        descriptor = await azure_client.upload("report.txt", b"hello", "text/plain")

        kwargs = container.upload_blob.await_args.kwargs
        assert kwargs["name"] == "report.txt"
        assert kwargs["data"] == b"hello"
        assert kwargs["overwrite"] is True
        assert kwargs["content_settings"].content_type == "text/plain"
        assert descriptor.name == "report.txt"
        assert descriptor.url.startswith("https://acct.blob.core.windows.net/uploads/report.txt")

    @pytest.mark.asyncio
    async def test_upload_failure_keeps_backend_message(self, azure_client, container):
        container.upload_blob.side_effect = RuntimeError("network unreachable")

        with pytest.raises(StorageError, match="network unreachable"):
            await azure_client.upload("report.txt", b"hello")

    @pytest.mark.asyncio
    async def test_list_names_in_backend_order(self, azure_client, container):
        container.list_blobs = MagicMock(return_value=async_iter([
            SimpleNamespace(name="a.txt"),
            SimpleNamespace(name="b/c.txt"),
        ]))

        assert await azure_client.list_names() == ["a.txt", "b/c.txt"]

    @pytest.mark.asyncio
    async def test_list_empty_container(self, azure_client, container):
        container.list_blobs = MagicMock(return_value=async_iter([]))

        assert await azure_client.list_names() == []

    @pytest.mark.asyncio
    async def test_open_download_is_lazy(self, azure_client, container):
        downloader = MagicMock()
        downloader.size = 5
        downloader.properties.content_settings.content_type = "text/plain"
        downloader.chunks = MagicMock(return_value=async_iter([b"he", b"llo"]))
        container.download_blob = AsyncMock(return_value=downloader)

        download = await azure_client.open_download("report.txt")

        container.download_blob.assert_awaited_once_with("report.txt")
        downloader.chunks.assert_not_called()
        assert download.content_type == "text/plain"
        assert download.size == 5
        assert [chunk async for chunk in download.chunks] == [b"he", b"llo"]

    @pytest.mark.asyncio
    async def test_open_download_defaults_content_type(self, azure_client, container):
        downloader = MagicMock()
        downloader.size = 0
        downloader.properties.content_settings.content_type = None
        downloader.chunks = MagicMock(return_value=async_iter([]))
        container.download_blob = AsyncMock(return_value=downloader)

        download = await azure_client.open_download("blob")

        assert download.content_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_missing_blob_is_storage_error(self, azure_client, container):
        container.download_blob = AsyncMock(
            side_effect=ResourceNotFoundError("The specified blob does not exist.")
        )

        with pytest.raises(StorageError) as exc_info:
            await azure_client.open_download("ghost.txt")

        assert "does not exist" in str(exc_info.value)
        assert isinstance(exc_info.value, BackendError)

    @pytest.mark.asyncio
    async def test_failure_mid_stream_is_storage_error(self, azure_client, container):
        async def broken_chunks():
            yield b"partial"
            raise ConnectionResetError("peer closed")

        downloader = MagicMock()
        downloader.size = 100
        downloader.properties.content_settings.content_type = "text/plain"
        downloader.chunks = MagicMock(return_value=broken_chunks())
        container.download_blob = AsyncMock(return_value=downloader)

        download = await azure_client.open_download("big.txt")

        received = []
        with pytest.raises(StorageError, match="peer closed"):
            async for chunk in download.chunks:
                received.append(chunk)
        assert received == [b"partial"]

    @pytest.mark.asyncio
    async def test_delete(self, azure_client, container):
        await azure_client.delete("report.txt")

        container.delete_blob.assert_awaited_once_with("report.txt")

    @pytest.mark.asyncio
    async def test_delete_missing_is_storage_error(self, azure_client, container):
        container.delete_blob.side_effect = ResourceNotFoundError("The specified blob does not exist.")

        with pytest.raises(StorageError, match="does not exist"):
            await azure_client.delete("ghost.txt")

    @pytest.mark.asyncio
    async def test_close_closes_container(self, azure_client, container):
        await azure_client.close()

        container.close.assert_awaited_once()


# ---------------------------------------------------------------------------
# Mock client
# ---------------------------------------------------------------------------

class TestMockStorageClient:

    @pytest.mark.asyncio
    async def test_listing_is_sorted(self):
        store = MockStorageClient()
        for name in ["zeta", "alpha", "mid"]:
            await store.upload(name, b"x")

        assert await store.list_names() == ["alpha", "mid", "zeta"]

    @pytest.mark.asyncio
    async def test_empty_object_streams_nothing(self):
        store = MockStorageClient()
        await store.upload("empty", b"")

        download = await store.open_download("empty")

        assert [chunk async for chunk in download.chunks] == []
        assert download.size == 0


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

class TestCreateStorageClient:

    def test_mock_mode_returns_mock(self, config):
        store = create_storage_client(config=config, mock_mode=True)

        assert isinstance(store, MockStorageClient)

    def test_mock_mode_without_config(self):
        assert isinstance(create_storage_client(mock_mode=True), MockStorageClient)

    def test_real_mode_requires_config(self):
        with pytest.raises(ValueError, match="config is required"):
            create_storage_client()
