from __future__ import annotations
from typing import Any, Optional


class YotpoError(Exception):
    """Base class for errors raised by the Yotpo client."""


class ConfigError(YotpoError):
    """Missing or malformed configuration (api key, secret, additional headers)."""


class ApiRequestError(YotpoError):
    """Generic API request error (4xx/5xx not otherwise classified)."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.error_response = error_response


class ApiAuthError(ApiRequestError):
    """Authentication or authorization failure (401/403)."""


class ApiRateLimitError(ApiRequestError):
    """Rate limiting encountered (429)."""


def identity_error_mapper(exception: Exception, error_response: Any) -> Exception:
    return exception


def _error_detail(error_response: Any) -> str:
    # Yotpo answers either {"status": {"message": ...}} or {"errors": [...]}
    if isinstance(error_response, dict):
        status = error_response.get('status')
        if isinstance(status, dict) and status.get('message'):
            return str(status['message'])
        errors = error_response.get('errors')
        if errors:
            return str(errors)[:200]
    return ''


def map_status_error(exception: Exception, error_response: Any) -> Exception:
    """Translate an HTTP error into the client's exception hierarchy by status code."""
    response = getattr(exception, 'response', None)
    status_code = getattr(response, 'status_code', None)
    detail = _error_detail(error_response) or (response.text[:200] if response is not None else str(exception))
    if status_code in (401, 403):
        return ApiAuthError(f"Auth error {status_code}: {detail}", status_code, error_response)
    if status_code == 429:
        return ApiRateLimitError(f"Rate limit hit (429): {detail}", status_code, error_response)
    if status_code is not None and status_code >= 500:
        return ApiRequestError(f"Server error {status_code}: {detail}", status_code, error_response)
    return ApiRequestError(f"Client error {status_code}: {detail}", status_code, error_response)
