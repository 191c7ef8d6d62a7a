"""
Tests for the service exception hierarchy.
"""
from vision_service.exceptions import (
    LifecycleError,
    ServiceError,
    ShutdownTimeoutError,
    StartupError,
)


class TestServiceError:

    def test_basic_initialization(self):
        exc = ServiceError("Test error message")
        assert exc.message == "Test error message"
        assert exc.context == {}
        assert exc.original_error is None
        assert str(exc) == "Test error message"

    def test_to_dict(self):
        original = OSError(98, "Address already in use")
        exc = StartupError("Failed to start server", context={"port": 8080}, original_error=original)

        assert exc.to_dict() == {
            "error": "StartupError",
            "message": "Failed to start server",
            "context": {"port": 8080},
            "original_error": str(original),
        }

    def test_to_dict_minimal(self):
        assert ShutdownTimeoutError("timeout").to_dict() == {
            "error": "ShutdownTimeoutError",
            "message": "timeout",
        }


def test_lifecycle_hierarchy():
    assert issubclass(StartupError, LifecycleError)
    assert issubclass(ShutdownTimeoutError, LifecycleError)
    assert issubclass(LifecycleError, ServiceError)
