"""SQL-over-HTTP gateway client.

Posts parameterised statements to a remote SQL gateway. The client manages
OAuth2 client-credentials authentication, an HTTP session with retries, and
structured error reporting so the SQL adapter can treat it exactly like a
local database connection.
"""
from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import requests
from requests import Response
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .base import Statement, StoreAPIError, StoreAuthError, StoreClientError

__all__ = ["SQLGatewayClient", "TokenData"]


logger = logging.getLogger(__name__)


DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS = 60
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.5

DEFAULT_GATEWAY_URL = os.getenv("MEDICONNECT_SQL_GATEWAY_URL", "")
DEFAULT_TOKEN_URL = os.getenv("MEDICONNECT_TOKEN_URL", "")
DEFAULT_CLIENT_ID = os.getenv("MEDICONNECT_CLIENT_ID")
DEFAULT_CLIENT_SECRET = os.getenv("MEDICONNECT_CLIENT_SECRET")
DEFAULT_SCOPE = os.getenv("MEDICONNECT_SCOPE", "")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TokenData:
    """Container for OAuth2 token information."""

    access_token: str
    expires_at: datetime

    def is_valid(self, buffer_seconds: int) -> bool:
        return _utc_now() + timedelta(seconds=buffer_seconds) < self.expires_at


class SQLGatewayClient:
    """Runs SQL statements through the gateway's ``query``, ``execute`` and ``batch`` endpoints."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_GATEWAY_URL,
        token_url: str = DEFAULT_TOKEN_URL,
        client_id: Optional[str] = DEFAULT_CLIENT_ID,
        client_secret: Optional[str] = DEFAULT_CLIENT_SECRET,
        scope: Optional[str] = DEFAULT_SCOPE,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        token_refresh_buffer: int = DEFAULT_TOKEN_REFRESH_BUFFER_SECONDS,
    ) -> None:
        if not base_url:
            raise ValueError("base_url must be provided")
        if not token_url:
            raise ValueError("token_url must be provided")
        if not client_id or not client_secret:
            raise ValueError("client_id and client_secret must be provided")

        self.base_url = base_url.rstrip("/")
        self.token_url = token_url
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope or ""
        self.timeout = timeout
        self.token_refresh_buffer = token_refresh_buffer

        self._session = self._build_session(max_retries=max_retries, backoff_factor=backoff_factor)
        self._token_lock = threading.Lock()
        self._token: Optional[TokenData] = None

    def _build_session(self, *, max_retries: int, backoff_factor: float) -> requests.Session:
        session = requests.Session()
        # POST is only retried on connect errors.
        retry_strategy = Retry(
            total=max_retries,
            read=max_retries,
            connect=max_retries,
            status=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=(429, 502, 503, 504),
            allowed_methods=("GET", "OPTIONS"),
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    # ------------------------------------------------------------------
    # SQL client surface
    # ------------------------------------------------------------------
    def fetch_all(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        if not query or not isinstance(query, str):
            raise ValueError("query must be a non-empty string")

        payload = {"query": query, "params": dict(params or {})}
        data = self._json(self._request("POST", "query", json_payload=payload))
        rows = data.get("rows", [])
        if not isinstance(rows, list):
            raise StoreAPIError("Gateway response field 'rows' is not a list")
        return [dict(row) for row in rows]

    def execute(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        if not query or not isinstance(query, str):
            raise ValueError("query must be a non-empty string")

        payload = {"query": query, "params": dict(params or {})}
        data = self._json(self._request("POST", "execute", json_payload=payload))
        try:
            return int(data.get("rowcount", 0))
        except (TypeError, ValueError) as exc:
            raise StoreAPIError("Gateway response field 'rowcount' is not an integer") from exc

    def execute_many(self, statements: Sequence[Statement]) -> None:
        payload = {
            "statements": [
                {"query": query, "params": dict(params or {})} for query, params in statements
            ]
        }
        self._request("POST", "batch", json_payload=payload, expected_status=(200, 204))

    def ping(self) -> bool:
        try:
            self._request("GET", "health")
        except StoreClientError as exc:
            logger.warning("SQL gateway at %s is unreachable: %s", self.base_url, exc)
            return False
        return True

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------
    def _get_access_token(self) -> str:
        token = self._token
        if token and token.is_valid(self.token_refresh_buffer):
            return token.access_token

        with self._token_lock:
            token = self._token
            if token and token.is_valid(self.token_refresh_buffer):
                return token.access_token

            logger.debug("Refreshing SQL gateway OAuth2 token")
            try:
                payload = {
                    "grant_type": "client_credentials",
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                }
                if self.scope:
                    payload["scope"] = self.scope

                response = self._session.post(self.token_url, data=payload, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except requests.RequestException as exc:
                logger.error("Failed to obtain SQL gateway token: %s", exc)
                raise StoreAuthError("Failed to obtain SQL gateway token") from exc
            except ValueError as exc:
                logger.error("Invalid token response received from SQL gateway: %s", exc)
                raise StoreAuthError("Invalid token response from SQL gateway") from exc

            access_token = data.get("access_token")
            expires_in = data.get("expires_in")
            if not access_token or not isinstance(access_token, str):
                logger.error("Token response did not include access_token")
                raise StoreAuthError("Token response missing access_token")
            if not expires_in:
                logger.warning("Token response missing expires_in; defaulting to 5 minutes")
                expires_in = 300

            try:
                expires_in_int = int(expires_in)
            except (TypeError, ValueError) as exc:
                logger.error("Invalid expires_in value in token response: %s", expires_in)
                raise StoreAuthError("Invalid expires_in value in token response") from exc

            expires_at = _utc_now() + timedelta(seconds=expires_in_int)
            token = TokenData(access_token=access_token, expires_at=expires_at)
            self._token = token
            logger.info("SQL gateway token refreshed; expires at %s", expires_at.isoformat())
            return token.access_token

    def _request(
        self,
        method: str,
        path: str,
        *,
        json_payload: Optional[Dict[str, Any]] = None,
        expected_status: Union[int, Tuple[int, ...]] = (200,),
    ) -> Response:
        if isinstance(expected_status, int):
            expected_status = (expected_status,)

        token = self._get_access_token()
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

        try:
            response = self._session.request(
                method=method.upper(),
                url=url,
                json=json_payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Request to SQL gateway failed: %s", exc)
            raise StoreAPIError("Failed to execute request to SQL gateway") from exc

        if response.status_code not in expected_status:
            self._log_error_response(response)
            raise StoreAPIError(
                f"SQL gateway responded with unexpected status {response.status_code}"
            )

        return response

    @staticmethod
    def _json(response: Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise StoreAPIError("SQL gateway returned a non-JSON body") from exc
        if not isinstance(data, dict):
            raise StoreAPIError("SQL gateway returned an unexpected payload")
        return data

    @staticmethod
    def _log_error_response(response: Response) -> None:
        content_type = response.headers.get("Content-Type", "")
        if "json" in content_type:
            try:
                parsed = response.json()
                logger.error("SQL gateway error response: status=%s body=%s", response.status_code, parsed)
                return
            except ValueError:
                pass
        logger.error(
            "SQL gateway error response: status=%s body=%s", response.status_code, response.text[:2048]
        )
