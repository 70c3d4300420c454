"""
Core gateway logic.

This module is framework-agnostic - it doesn't import FastAPI or the Azure
SDK. Routes depend on BlobGateway; storage backends implement ObjectStore.
"""

from .errors import BackendError, ClientInputError, ConfigurationError, GatewayError
from .gateway import BlobGateway, ObjectStore
from .models import ObjectDescriptor, ObjectDownload, UploadRequest

__all__ = [
    "BackendError",
    "BlobGateway",
    "ClientInputError",
    "ConfigurationError",
    "GatewayError",
    "ObjectDescriptor",
    "ObjectDownload",
    "ObjectStore",
    "UploadRequest",
]
