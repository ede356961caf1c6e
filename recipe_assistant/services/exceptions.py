from __future__ import annotations

class ServiceError(RuntimeError):
    """Base class for service-layer errors."""

class LLMError(ServiceError):
    """Errors from the generation service adapter."""

class RepoError(ServiceError):
    """Errors from repositories (I/O, parse, schema)."""
