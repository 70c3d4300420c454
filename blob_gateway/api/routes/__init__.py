"""
API routers.

- files: upload, list, download and delete
- health: liveness and readiness probes
"""
