# backend/tutorly/schemas/integration.py
"""Calendar/video integration schemas."""

from .base import StandardizedModel


class AuthorizationUrlResponse(StandardizedModel):
    """Where to send the user to grant access."""

    provider: str
    authorization_url: str


class DisconnectResponse(StandardizedModel):
    provider: str
    disconnected: bool
