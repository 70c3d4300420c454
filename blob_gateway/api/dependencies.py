"""
FastAPI dependency injection.

Settings and the gateway are created once at startup and stored on
app.state. Dependencies hand them to route handlers, so handlers never
reach into module globals or re-read the environment. Tests can build an
app with their own Settings and store and nothing here changes.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from ..config.settings import Settings
from ..core.gateway import BlobGateway
from ..infrastructure.storage.client import StorageConfig, create_storage_client

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Construction (startup only)
# ---------------------------------------------------------------------------

def build_storage_config(settings: Settings) -> StorageConfig:
    """Translate settings into the storage client's immutable config."""
    return StorageConfig(
        account_name=settings.azure_storage_account_name,
        sas_token=settings.azure_storage_sas_token,
        container_name=settings.azure_container_name,
        chunk_size=settings.download_chunk_size,
    )


def build_gateway(settings: Settings) -> BlobGateway:
    """
    Create the process-wide gateway.

    Returns either an Azure-backed or in-memory gateway based on
    settings.storage_mock_mode.
    """
    store = create_storage_client(
        config=build_storage_config(settings),
        mock_mode=settings.storage_mock_mode,
    )
    logger.debug(
        "Created storage client",
        extra={"mock_mode": settings.storage_mock_mode}
    )
    return BlobGateway(store)


# ---------------------------------------------------------------------------
# Request Dependencies
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    """Provide the settings the application was created with."""
    return request.app.state.settings


def get_gateway(request: Request) -> BlobGateway:
    """Provide the shared gateway created during startup."""
    return request.app.state.gateway


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
BlobGatewayDep = Annotated[BlobGateway, Depends(get_gateway)]
