"""
Domain values passed between the HTTP layer and the object store.

All of these are request-scoped: they are created while handling one
request and dropped when it completes. Nothing here is persisted.
"""

from dataclasses import dataclass
from typing import AsyncIterator, Optional
from urllib.parse import quote


DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class UploadRequest:
    """
    A single named binary payload taken from a multipart upload.

    The filename becomes the object key verbatim.
    """
    data: bytes
    filename: str
    content_type: Optional[str] = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ObjectDescriptor:
    """An object's name within the container plus a URL to reach it."""
    name: str
    url: str


@dataclass
class ObjectDownload:
    """
    An opened read stream for one object.

    `chunks` is lazy: bytes are pulled from the backend only as the
    consumer iterates, so the whole object is never held in memory.
    """
    name: str
    chunks: AsyncIterator[bytes]
    content_type: str = DEFAULT_CONTENT_TYPE
    size: Optional[int] = None

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        """Yield chunks, closing the upstream stream on completion or error."""
        try:
            async for chunk in self.chunks:
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        aclose = getattr(self.chunks, "aclose", None)
        if aclose is not None:
            await aclose()

    @property
    def content_disposition(self) -> str:
        """Header value telling the client to save the stream as `name`."""
        return attachment_disposition(self.name)


def attachment_disposition(name: str) -> str:
    """
    Build a Content-Disposition value for `name`.

    Header values must be latin-1, so non-ASCII names get an ASCII
    `filename` fallback plus an RFC 6266 `filename*` carrying the UTF-8 name.
    """
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    if name.isascii():
        return f'attachment; filename="{escaped}"'

    fallback = "".join(c if c.isascii() else "_" for c in escaped)
    return (
        f'attachment; filename="{fallback}"; '
        f"filename*=UTF-8''{quote(name, safe='')}"
    )
