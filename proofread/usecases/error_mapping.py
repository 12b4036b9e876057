"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from proofread.adapters.api_errors import (
    ApiError,
    AuthError,
    ProviderError,
    TransportError,
    extract_error_hint,
)
from proofread.domain.ports import UseCaseError


def map_api_error(
    exc: BaseException,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by the adapter or the use case itself.
        default_code: Code used for exceptions outside the adapter hierarchy.
        default_message: Message used when ``exc`` has no text.

    Returns:
        A ``UseCaseError`` whose message can be shown to the user verbatim.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, TransportError):
        return UseCaseError("TRANSPORT_ERROR", _compose_error_message("Could not reach the AI service", str(exc)))
    if isinstance(exc, AuthError):
        return UseCaseError("AUTH_FAILED", "The AI service rejected the API key. Check ~/.authinfo.")
    if isinstance(exc, ProviderError):
        status = exc.status or 0
        hint = exc.hint or extract_error_hint(getattr(exc, "payload", None))
        if status == 429:
            return UseCaseError("RATE_LIMITED", _compose_error_message("Rate limit or quota exceeded", hint))
        if status >= 500:
            return UseCaseError("SERVER_ERROR", _compose_error_message("AI service error, try again", hint))
        if status:
            return UseCaseError(
                "PROVIDER_ERROR",
                _compose_error_message(f"Request failed (HTTP {status})", hint),
            )
        return UseCaseError("PROVIDER_ERROR", _compose_error_message("Unexpected response", str(exc)))
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return UseCaseError(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    """Compose a user-facing error message with optional hint text."""
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
