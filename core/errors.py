"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Error taxonomy shared by services and routers.

Every class carries the HTTP status it maps to; the API layer renders any
`ApiError` as ``{"error": message}`` and nothing else.
"""
from __future__ import annotations


class ApiError(Exception):
    """Base class for errors that are safe to show to the caller."""

    http_status = 500

    def __init__(self, message: str = "Erro interno do servidor.") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ApiError):
    """Missing or malformed required input."""

    http_status = 400


class Unauthenticated(ApiError):
    """Missing, malformed, invalid or expired credential."""

    http_status = 401


class NotFoundError(ApiError):
    """An owned resource does not exist."""

    http_status = 404


class UpstreamError(ApiError):
    """Store or AI-service failure not otherwise classified."""

    http_status = 400


class InvalidAIResponse(UpstreamError):
    """The model answered, but no usable JSON object could be read from it."""


class GenerationError(UpstreamError):
    """The text-generation service rejected or failed the request."""


class IdentityProviderError(UpstreamError):
    """The identity provider refused to create or look up an identity."""


class InternalError(ApiError):
    """Unexpected failure; the caller only sees a generic message."""

    http_status = 500
