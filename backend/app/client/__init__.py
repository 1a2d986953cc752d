"""Python dashboard client that polls, caches and renders the portal API."""

from .api import PortalApiClient, PortalApiError
from .cache import FetchCache
from .controller import DashboardState, PortalController
from .poller import DashboardPoller
from .view import DashboardView

__all__ = [
    "DashboardPoller",
    "DashboardState",
    "DashboardView",
    "FetchCache",
    "PortalApiClient",
    "PortalApiError",
    "PortalController",
]
