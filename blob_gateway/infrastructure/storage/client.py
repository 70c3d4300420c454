"""
Object storage client for the gateway.

Supports Azure Blob Storage (SAS token auth) with a mock mode for local
development. Both implementations satisfy core.gateway.ObjectStore.

Mock mode stores objects in memory, enabling API testing without
provisioning a storage account.
"""

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import ContainerClient, StorageStreamDownloader

from ...core.errors import BackendError
from ...core.models import DEFAULT_CONTENT_TYPE, ObjectDescriptor, ObjectDownload

logger = logging.getLogger(__name__)


DEFAULT_CHUNK_SIZE = 4 * 1024 * 1024

MISSING_BLOB_MESSAGE = "The specified blob does not exist."


class StorageError(BackendError):
    """Raised when storage operations fail."""
    pass


@dataclass(frozen=True)
class StorageConfig:
    """
    Configuration for Azure Blob Storage.

    Built once at startup and never mutated. The SAS token may be given
    with or without its leading '?'.
    """
    account_name: str
    sas_token: str
    container_name: str
    chunk_size: int = DEFAULT_CHUNK_SIZE

    @property
    def account_url(self) -> str:
        return f"https://{self.account_name}.blob.core.windows.net"

    @property
    def credential(self) -> str:
        """SAS token without the query-string prefix."""
        return self.sas_token.strip().lstrip("?")


def _backend_message(error: Exception) -> str:
    """Pull the human-readable text out of an SDK exception."""
    message = getattr(error, "message", None)
    return str(message) if message else str(error)


class AzureBlobStorageClient:
    """
    Azure Blob Storage client bound to a single container.

    Uses the asyncio flavour of azure-storage-blob so a slow backend call
    only suspends the request waiting on it. One ContainerClient is
    created at startup and shared by every request; it keeps no
    per-call state.
    """

    def __init__(
        self,
        config: StorageConfig,
        container_client: Optional[ContainerClient] = None,
    ) -> None:
        self._config = config

        if container_client is None:
            container_client = ContainerClient(
                account_url=config.account_url,
                container_name=config.container_name,
                credential=config.credential,
                max_single_get_size=config.chunk_size,
                max_chunk_get_size=config.chunk_size,
            )

        self._container = container_client

        # Never log the credential itself
        logger.info(
            "Initialized Azure blob storage client",
            extra={
                "account_url": config.account_url,
                "container": config.container_name,
            }
        )

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> ObjectDescriptor:
        """
        Upload data as a block blob named `name`.

        overwrite=True: a same-named blob is replaced without warning.
        """
        try:
            blob_client = await self._container.upload_blob(
                name=name,
                data=data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except Exception as e:
            logger.error(
                "Failed to upload blob",
                extra={"blob_name": name, "error": _backend_message(e)}
            )
            raise StorageError(_backend_message(e)) from e

        logger.debug(
            "Uploaded blob",
            extra={"blob_name": name, "size_bytes": len(data)}
        )

        return ObjectDescriptor(name=name, url=blob_client.url)

    async def list_names(self) -> list[str]:
        """List every blob name in the container (Azure returns them sorted)."""
        names: list[str] = []
        try:
            async for blob in self._container.list_blobs():
                names.append(blob.name)
        except Exception as e:
            logger.error(
                "Failed to list blobs",
                extra={"container": self._config.container_name, "error": _backend_message(e)}
            )
            raise StorageError(_backend_message(e)) from e

        return names

    async def open_download(self, name: str) -> ObjectDownload:
        """
        Start a download and return a lazy chunk stream.

        The initial request is awaited here so a missing blob fails before
        any bytes are sent to the client. Remaining chunks are fetched
        only as the caller iterates.
        """
        try:
            downloader = await self._container.download_blob(name)
        except Exception as e:
            logger.error(
                "Failed to open blob download",
                extra={"blob_name": name, "error": _backend_message(e)}
            )
            raise StorageError(_backend_message(e)) from e

        content_settings = downloader.properties.content_settings
        content_type = (
            content_settings.content_type if content_settings else None
        ) or DEFAULT_CONTENT_TYPE

        return ObjectDownload(
            name=name,
            chunks=self._iter_chunks(name, downloader),
            content_type=content_type,
            size=downloader.size,
        )

    async def _iter_chunks(
        self,
        name: str,
        downloader: StorageStreamDownloader,
    ) -> AsyncIterator[bytes]:
        try:
            async for chunk in downloader.chunks():
                yield chunk
        except Exception as e:
            logger.error(
                "Blob download interrupted",
                extra={"blob_name": name, "error": _backend_message(e)}
            )
            raise StorageError(_backend_message(e)) from e

    async def delete(self, name: str) -> None:
        """Delete a blob. Deleting a missing blob is a backend error."""
        try:
            await self._container.delete_blob(name)
        except Exception as e:
            logger.error(
                "Failed to delete blob",
                extra={"blob_name": name, "error": _backend_message(e)}
            )
            raise StorageError(_backend_message(e)) from e

    async def close(self) -> None:
        """Close the shared HTTP transport."""
        await self._container.close()
        logger.info("Closed Azure blob storage client")


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    Mirrors the Azure client's observable behavior: uploads overwrite,
    listing is sorted by name, and downloading or deleting a missing
    object raises StorageError. "URLs" are mock URIs.

    Not suitable for production, but perfect for development and testing.
    """

    def __init__(
        self,
        container_name: str = "mock",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        # {name: (data, content_type)}
        self._objects: dict[str, tuple[bytes, str]] = {}
        self._container_name = container_name
        self._chunk_size = chunk_size
        logger.info("Initialized mock storage client (in-memory)")

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> ObjectDescriptor:
        """Store object in memory."""
        self._objects[name] = (bytes(data), content_type or DEFAULT_CONTENT_TYPE)

        logger.debug(
            "Stored object in mock storage",
            extra={"blob_name": name, "size_bytes": len(data)}
        )

        return ObjectDescriptor(name=name, url=self._url_for(name))

    async def list_names(self) -> list[str]:
        return sorted(self._objects)

    async def open_download(self, name: str) -> ObjectDownload:
        """Retrieve object from memory as a chunked stream."""
        if name not in self._objects:
            raise StorageError(MISSING_BLOB_MESSAGE)

        data, content_type = self._objects[name]

        return ObjectDownload(
            name=name,
            chunks=self._iter_chunks(data),
            content_type=content_type,
            size=len(data),
        )

    async def _iter_chunks(self, data: bytes) -> AsyncIterator[bytes]:
        for offset in range(0, len(data), self._chunk_size):
            yield data[offset:offset + self._chunk_size]

    async def delete(self, name: str) -> None:
        """Delete object from memory."""
        if name not in self._objects:
            raise StorageError(MISSING_BLOB_MESSAGE)

        del self._objects[name]

        logger.debug("Deleted object from mock storage", extra={"blob_name": name})

    async def close(self) -> None:
        logger.debug("Closed mock storage client")

    def _url_for(self, name: str) -> str:
        return f"mock://storage/{self._container_name}/{name}"


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> AzureBlobStorageClient | MockStorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return in-memory client for testing

    Returns:
        ObjectStore implementation (Azure or Mock)
    """
    if mock_mode:
        if config is None:
            return MockStorageClient()
        return MockStorageClient(
            container_name=config.container_name or "mock",
            chunk_size=config.chunk_size,
        )

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return AzureBlobStorageClient(config)
