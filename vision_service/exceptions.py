"""
Exception hierarchy for the service.

Lifecycle failures are raised by the controller and escalated to process
exit by the command-line entry point.
"""
from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for service errors."""

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
        }
        if self.context:
            result["context"] = self.context
        if self.original_error is not None:
            result["original_error"] = str(self.original_error)
        return result


class LifecycleError(ServiceError):
    """The HTTP listener could not be started or stopped."""


class StartupError(LifecycleError):
    """Binding the listener to its address failed."""


class ShutdownTimeoutError(LifecycleError):
    """In-flight requests did not drain before the shutdown deadline."""
