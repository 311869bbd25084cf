from __future__ import annotations
import logging
from typing import Any, Dict, Optional
import requests

logger = logging.getLogger(__name__)


class HttpTransport:
    """Blocking HTTP transport on top of a requests session.

    Raises ``requests.HTTPError`` (with the response attached) for 4xx/5xx
    statuses and other ``requests.RequestException`` subclasses for
    connection level failures. No retries.
    """

    def __init__(self, timeout: float = 30, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.timeout = timeout

    def request(self, method: str, url: str, *, headers: Dict[str, str] | None = None, params: Dict[str, Any] | None = None, data: Any | None = None) -> requests.Response:
        logger.debug('%s %s params=%s', method.upper(), url, params)
        resp = self.session.request(method.upper(), url, params=params, headers=headers, data=data, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def close(self) -> None:
        self.session.close()
