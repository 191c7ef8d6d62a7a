"""
Application factory module.
"""
from vision_service.app.factory import create_app

__all__ = ["create_app"]
