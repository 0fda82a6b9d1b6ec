# vine_ui/geo_blocking.py
from __future__ import annotations

import logging
from typing import Optional

import requests

from .domain import GeoBlockResponse
from .errors import GeoCheckError


logger = logging.getLogger("vine_ui.geo_blocking")


class GeoBlockingService:
    """
    Asks the regional-compliance endpoint whether this client may use the app.

    The endpoint returns JSON like {"blocked": false, "country": "US", "region": "TX", "reason": ""}.
    Any transport or payload problem raises GeoCheckError; deciding what to do about it is the
    caller's business.
    """

    def __init__(self, url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.url = url
        self.timeout = timeout
        self._session = session

    def _http(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def check_geo_block(self) -> GeoBlockResponse:
        if not self.url:
            raise GeoCheckError("No geo-check URL configured")
        try:
            resp = self._http().get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            payload = resp.json()
        except requests.RequestException as e:
            raise GeoCheckError(f"Geo check request failed: {e}") from e
        except ValueError as e:
            raise GeoCheckError(f"Geo check returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or "blocked" not in payload:
            raise GeoCheckError(f"Unexpected geo check payload: {payload!r}")
        if not isinstance(payload["blocked"], bool):
            raise GeoCheckError(f"Geo check returned non-boolean blocked: {payload['blocked']!r}")

        result = GeoBlockResponse.from_dict(payload)
        logger.info("Geo check: blocked=%s country=%s", result.blocked, result.country_code or "?")
        return result
