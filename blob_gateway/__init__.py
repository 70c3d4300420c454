"""
Blob Gateway - a minimal HTTP facade over Azure Blob Storage.

This package contains the complete application:
- core: Framework-agnostic gateway logic
- infrastructure: Object storage integration
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
