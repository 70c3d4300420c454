"""
Object storage integration for uploaded files.

Wraps Azure Blob Storage via azure-storage-blob's asyncio client.
Includes mock mode for local development without credentials.
"""

from .client import (
    AzureBlobStorageClient,
    MockStorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "AzureBlobStorageClient",
    "MockStorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
