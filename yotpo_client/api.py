from __future__ import annotations
import json
import time
import logging
from typing import Any, Callable, Dict, Optional
import requests
from .cache import MemoryCache
from .exceptions import identity_error_mapper
from .options import merge_options
from .transport import HttpTransport

logger = logging.getLogger(__name__)

TOKEN_HEADER = 'X-Yotpo-Token'

ErrorMapper = Callable[[Exception, Any], Exception]


def _decode_json(body: Optional[str]) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class YotpoApi:
    """Request path shared by every Yotpo resource.

    Holds the credentials, the memoized access token and the collaborators
    (transport, cache store, clock). A non-empty token is kept for the
    lifetime of the instance and never refreshed; an empty one is requested
    again on the next authenticated call.
    """
    BASE_URLS: Dict[str, str] = {
        'store': 'https://api.yotpo.com/core/v3/stores',
        'reviews': 'https://api.yotpo.com/v1/apps',
    }
    DEFAULT_OPTIONS: Dict[str, Any] = {
        'headers': {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        },
    }

    def __init__(self, api_key: str, api_secret: str, *, additional_headers: Dict[str, str] | None = None, transport: Any = None, cache: Any = None, clock: Callable[[], float] = time.time, error_mapper: ErrorMapper = identity_error_mapper, timeout: float = 30):
        self.api_key = api_key
        self.api_secret = api_secret
        self.additional_headers = dict(additional_headers or {})
        self.transport = transport or HttpTransport(timeout=timeout)
        self.cache = cache if cache is not None else MemoryCache(clock)
        self.clock = clock
        self.error_mapper = error_mapper
        self._access_token: Optional[str] = None

    def base_url(self, resource_type: str) -> str:
        try:
            return self.BASE_URLS[resource_type]
        except KeyError:
            raise ValueError(f"Unknown resource type {resource_type!r}, expected one of {sorted(self.BASE_URLS)}") from None

    def get_access_token(self) -> str:
        if not self._access_token:
            options = {'body': json.dumps({'secret': self.api_secret})}
            token_json = self.call_api('access_tokens', 'POST', options)
            self._access_token = token_json.get('access_token') or ''
            logger.debug('Obtained Yotpo access token')
        return self._access_token

    def reset_access_token(self) -> None:
        self._access_token = None

    def _cached_body(self, cache_key: str) -> Optional[str]:
        entry = self.cache.get(cache_key)
        if entry is None or not entry.payload:
            return None
        if entry.expires_at <= self.clock():
            return None
        logger.debug('Cache hit for %s', cache_key)
        return entry.payload

    def call_api(self, endpoint: str, method: str = 'GET', options: Dict[str, Any] | None = None, access_token: bool = False, resource_type: str = 'store', cache: bool = False, cache_key: Optional[str] = None, cache_ttl: int = 0) -> Dict[str, Any]:
        if cache and not cache_key:
            raise ValueError('cache_key is required for cached calls')

        body = self._cached_body(cache_key) if cache else None  # type: ignore[arg-type]
        if body is None:
            defaults = self.DEFAULT_OPTIONS
            if access_token:
                defaults = merge_options(defaults, None, {'headers': {TOKEN_HEADER: self.get_access_token()}})
            merged = merge_options(defaults, self.additional_headers, options)
            url = f"{self.base_url(resource_type)}/{self.api_key}/{endpoint}"
            try:
                resp = self.transport.request(method, url, headers=merged.get('headers'), params=merged.get('query'), data=merged.get('body'))
            except requests.RequestException as e:
                exception: Exception = e
                if isinstance(e, requests.HTTPError) and e.response is not None:
                    error_response = _decode_json(e.response.text)
                    exception = self.error_mapper(e, error_response)
                logger.error('Failed %s. Exception: %s', endpoint, exception)
                if exception is e:
                    raise
                raise exception from e
            body = resp.text
            if cache:
                self.cache.set(cache_key, body, self.clock() + cache_ttl)
                logger.debug('Cached %s for %ss', cache_key, cache_ttl)

        decoded = _decode_json(body)
        return decoded if isinstance(decoded, dict) else {}
