"""
The gateway: four storage operations behind one stateless service.

This module is framework-agnostic. It doesn't know about HTTP, FastAPI or
Azure; it only knows the ObjectStore protocol. Each method is a single
delegation to the store, with input checks in front and logging around it.
"""

import logging
from typing import Optional, Protocol

from .errors import ClientInputError
from .models import ObjectDescriptor, ObjectDownload, UploadRequest

logger = logging.getLogger(__name__)


UPLOAD_SUCCESS_MESSAGE = "File uploaded successfully"
NO_FILE_MESSAGE = "No file uploaded"


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """
    Interface for the object-storage backend.

    Implementations must raise BackendError (or a subclass) for every
    backend failure so callers have a single thing to catch.
    """

    async def upload(
        self,
        name: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> ObjectDescriptor:
        """Write data under name, replacing any existing object."""
        ...

    async def list_names(self) -> list[str]:
        """Return every object name in backend order."""
        ...

    async def open_download(self, name: str) -> ObjectDownload:
        """Open a lazy read stream for name."""
        ...

    async def delete(self, name: str) -> None:
        """Remove the named object."""
        ...

    async def close(self) -> None:
        """Release connections held by the store."""
        ...


# ---------------------------------------------------------------------------
# Gateway Service
# ---------------------------------------------------------------------------

class BlobGateway:
    """
    Maps upload/list/download/delete onto an ObjectStore.

    Holds no per-request state, so one instance is shared by every
    concurrent request.
    """

    def __init__(self, store: ObjectStore) -> None:
        self._store = store

    @property
    def store(self) -> ObjectStore:
        return self._store

    async def upload(self, request: Optional[UploadRequest]) -> ObjectDescriptor:
        """
        Store an uploaded file under its original filename.

        Same-named uploads overwrite silently. Raises ClientInputError when
        no file was attached, before touching the backend.
        """
        if request is None or not request.filename:
            raise ClientInputError(NO_FILE_MESSAGE)

        descriptor = await self._store.upload(
            name=request.filename,
            data=request.data,
            content_type=request.content_type,
        )

        logger.info(
            "Uploaded object",
            extra={
                "blob_name": descriptor.name,
                "content_type": request.content_type,
                "size_bytes": request.size_bytes,
            }
        )

        return descriptor

    async def list_names(self) -> list[str]:
        """List all object names. An empty container yields []."""
        names = await self._store.list_names()
        logger.debug("Listed objects", extra={"count": len(names)})
        return names

    async def download(self, name: str) -> ObjectDownload:
        """
        Open a read stream for name.

        No existence check happens first; a missing object surfaces as the
        store's BackendError when the stream is opened.
        """
        download = await self._store.open_download(name)
        logger.info(
            "Opened download stream",
            extra={"blob_name": name, "size_bytes": download.size}
        )
        return download

    async def delete(self, name: str) -> str:
        """Delete name and return a confirmation message."""
        await self._store.delete(name)
        logger.info("Deleted object", extra={"blob_name": name})
        return deletion_message(name)


def deletion_message(name: str) -> str:
    """Confirmation text returned after a successful delete."""
    return f"{name} deleted successfully"
