"""
Infrastructure layer - external service integrations.

- storage: Object storage (Azure Blob Storage, or in-memory mock)

These wrappers translate between SDK types and our domain models.
"""
