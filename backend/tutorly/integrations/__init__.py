"""Third-party calendar and video provider clients."""

from .google_calendar_client import GoogleCalendarClient
from .oauth_client import OAuthProviderClient, OAuthProviderError, TokenSet
from .zoom_client import ZoomClient

__all__ = [
    "GoogleCalendarClient",
    "OAuthProviderClient",
    "OAuthProviderError",
    "TokenSet",
    "ZoomClient",
]
