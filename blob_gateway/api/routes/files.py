"""
File API endpoints.

Four routes, one per storage operation:

- POST   /upload          store a multipart `file` under its filename
- GET    /files           list object names
- GET    /download/{name} stream an object back as an attachment
- DELETE /delete/{name}   remove an object

Each handler catches backend failures itself and answers with
{"error": <backend message>} and status 500. A missing object is not
distinguished from any other backend failure.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from ...core.errors import BackendError, ClientInputError
from ...core.gateway import UPLOAD_SUCCESS_MESSAGE
from ...core.models import UploadRequest, attachment_disposition
from ..dependencies import BlobGatewayDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class UploadResponse(BaseModel):
    """Response after a successful upload."""
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(description="Status message")
    blob_name: str = Field(alias="blobName", description="Name the object was stored under")
    url: str = Field(description="Access URL of the stored object")


class MessageResponse(BaseModel):
    """Plain confirmation message."""
    message: str


class ErrorResponse(BaseModel):
    """Error body shared by every failure response."""
    error: str


ERROR_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "description": "Object store failure",
        "model": ErrorResponse,
    },
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a file",
    description="Store the multipart `file` field under its original filename, overwriting any same-named object",
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "No file attached", "model": ErrorResponse},
        **ERROR_RESPONSES,
    },
)
async def upload_file(
    gateway: BlobGatewayDep,
    file: Annotated[Optional[UploadFile], File(description="File to store")] = None,
):
    """
    Upload a single file.

    The whole part is read into memory, then written to the container in
    one call. No renaming and no collision detection.
    """
    upload_request = None
    if file is not None:
        upload_request = UploadRequest(
            data=await file.read(),
            filename=file.filename or "",
            content_type=file.content_type,
        )

    try:
        descriptor = await gateway.upload(upload_request)
    except ClientInputError as e:
        logger.warning("Upload rejected", extra={"reason": str(e)})
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))
    except BackendError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return UploadResponse(
        message=UPLOAD_SUCCESS_MESSAGE,
        blob_name=descriptor.name,
        url=descriptor.url,
    )


@router.get(
    "/files",
    response_model=list[str],
    summary="List files",
    description="Names of every object in the container, in backend order",
    responses=ERROR_RESPONSES,
)
async def list_files(gateway: BlobGatewayDep):
    try:
        return await gateway.list_names()
    except BackendError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))


@router.get(
    "/download/{name}",
    summary="Download a file",
    description="Stream an object back as an attachment named after it",
    responses={
        status.HTTP_200_OK: {"content": {"application/octet-stream": {}}},
        **ERROR_RESPONSES,
    },
)
async def download_file(name: str, gateway: BlobGatewayDep):
    """
    Stream an object to the client.

    The backend stream is opened before the response starts, so a failure
    to open (including a missing object) still produces a JSON error.
    After that, bytes are forwarded chunk by chunk as they arrive.
    """
    # Computed before the backend stream is opened
    headers = {"Content-Disposition": attachment_disposition(name)}

    try:
        download = await gateway.download(name)
    except BackendError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    if download.size is not None:
        headers["Content-Length"] = str(download.size)

    return StreamingResponse(
        download.iter_bytes(),
        media_type=download.content_type,
        headers=headers,
    )


@router.delete(
    "/delete/{name}",
    response_model=MessageResponse,
    summary="Delete a file",
    description="Remove an object from the container",
    responses=ERROR_RESPONSES,
)
async def delete_file(name: str, gateway: BlobGatewayDep):
    try:
        message = await gateway.delete(name)
    except BackendError as e:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))

    return MessageResponse(message=message)
