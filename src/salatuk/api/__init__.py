"""Web API layer."""

from salatuk.api.app import create_app
from salatuk.api.dependencies import get_app_state

__all__ = ["create_app", "get_app_state"]
