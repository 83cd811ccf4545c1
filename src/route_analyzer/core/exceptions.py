"""Exception hierarchy for the route analyzer."""

from typing import Any, Dict, Optional


class RouteAnalyzerError(Exception):
    """Base error. Carries a machine-readable code for structured output."""

    code = "route_analyzer_error"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ConfigError(RouteAnalyzerError):
    code = "config_error"


class ProviderError(RouteAnalyzerError):
    """A remote lookup failed (network, timeout, 4xx/5xx, bad payload)."""

    code = "provider_error"

    def __init__(self, provider: str, message: str, details: Optional[Any] = None):
        super().__init__(f"{provider}: {message}", details)
        self.provider = provider


class StorageError(RouteAnalyzerError):
    code = "storage_error"


class BatchInProgressError(RouteAnalyzerError):
    code = "batch_in_progress"
