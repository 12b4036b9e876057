"""Shared HTTP transport for the remote transform client.

This module provides a thin wrapper around ``requests.Session`` so the
provider adapter keeps timeout policy and bearer-header construction in one
place.

Dependencies:
    - ``requests`` for network I/O.
    - ``proofread.adapters.api_errors.TransportError`` for typed transport
      failures.

Call context:
    - Constructed by ``proofread/adapters/openai_rest.py``.
    - Used from worker threads only; the UI thread never blocks on it.

Every request is attempted exactly once. One user action must never turn
into several billed provider calls, so there is no retry loop here.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from proofread.adapters.api_errors import TransportError


@dataclass
class HttpConfig:
    """Timeout configuration for provider calls.

    Attributes:
        request_timeout_s: Timeout in seconds for a completion round trip.
        list_timeout_s: Timeout in seconds for the model listing.
    """
    request_timeout_s: float = 60
    list_timeout_s: float = 15


class ApiSession:
    """``requests`` wrapper that adds bearer auth and JSON headers.

    This class is transport-only. Callers provide endpoint URLs and decide
    how to map non-2xx responses into typed errors.
    """

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        """Create a session.

        Args:
            api_key: Token sent as ``Authorization: Bearer <key>``, or ``None``.
            cfg: Shared timeout settings.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def _headers(self, json_body: bool = False) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get(self, url: str, *, timeout: Optional[float] = None) -> requests.Response:
        """Send one GET request.

        Raises:
            TransportError: On timeout, connection or other transport failure.
        """
        context = f"GET {url}"
        try:
            return self.session.get(
                url,
                headers=self._headers(),
                timeout=timeout or self.cfg.list_timeout_s,
            )
        except req_exc.Timeout as exc:
            raise TransportError(f"Timeout contacting {url}", context=context) from exc
        except req_exc.RequestException as exc:
            raise TransportError(f"Could not reach {url}: {exc}", context=context) from exc

    def post(
        self,
        url: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send one JSON POST request.

        Raises:
            TransportError: On timeout, connection or other transport failure.

        Side Effects:
            Serializes ``json_body`` with ``json.dumps`` before sending.
        """
        context = f"POST {url}"
        data = None if json_body is None else json.dumps(json_body)
        try:
            return self.session.post(
                url,
                data=data,
                headers=self._headers(json_body=json_body is not None),
                timeout=timeout or self.cfg.request_timeout_s,
            )
        except req_exc.Timeout as exc:
            raise TransportError(f"Timeout contacting {url}", context=context) from exc
        except req_exc.RequestException as exc:
            raise TransportError(f"Could not reach {url}: {exc}", context=context) from exc

    def close(self) -> None:
        self.session.close()


__all__ = ["ApiSession", "HttpConfig"]
