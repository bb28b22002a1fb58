# floatchat/api.py — client for the FloatChat backend API
from __future__ import annotations

import logging
from typing import Any, BinaryIO, Dict, List, Optional, Union

import requests
from pydantic import ValidationError
from requests.utils import quote

from floatchat.config import Settings
from floatchat.errors import BackendError, FormatError, TransportError
from floatchat.models import FloatRecord, ProfileRecord, QueryResult, parse_floats, parse_profiles

logger = logging.getLogger(__name__)


class FloatChatClient:
    """
    Thin wrapper over the backend endpoints.

    Every call returns the unwrapped ``data`` payload of a
    ``{success, data, message?}`` envelope or raises one of the
    errors in ``floatchat.errors``.
    """

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or requests.Session()

    # ---- transport ----
    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.settings.require_api_url()}{path}"
        try:
            r = self.session.request(method, url, timeout=self.settings.request_timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError() from e

        try:
            body = r.json()
        except ValueError as e:
            if not r.ok:
                raise BackendError(
                    f"The FloatChat service responded with HTTP {r.status_code}.",
                    status_code=r.status_code,
                ) from e
            logger.error(f"{method} {path} returned non-JSON body")
            raise FormatError() from e

        message = body.get("message") if isinstance(body, dict) else None
        if not r.ok:
            logger.error(f"{method} {path} -> HTTP {r.status_code}: {message}")
            raise BackendError(
                message or f"The FloatChat service responded with HTTP {r.status_code}.",
                status_code=r.status_code,
            )
        if not isinstance(body, dict) or "success" not in body:
            raise FormatError()
        if not body.get("success"):
            logger.warning(f"{method} {path} unsuccessful: {message}")
            raise BackendError(message)
        if "data" not in body:
            raise FormatError("The FloatChat service response did not include any data.")
        return body["data"]

    # ---- endpoints ----
    def list_floats(self) -> List[FloatRecord]:
        data = self._request("GET", "/api/floats")
        if not isinstance(data, list):
            raise FormatError("Float catalog response was not a list.")
        try:
            return parse_floats(data)
        except ValidationError as e:
            logger.error(f"Float catalog did not validate: {e}")
            raise FormatError("Float catalog contained malformed records.") from e

    def get_profiles(self, float_id: str) -> List[ProfileRecord]:
        data = self._request("GET", f"/api/profiles/{quote(str(float_id), safe='')}")
        if not isinstance(data, list):
            raise FormatError("Profile response was not a list.")
        try:
            return parse_profiles(data)
        except ValidationError as e:
            logger.error(f"Profiles for {float_id} did not validate: {e}")
            raise FormatError("Profile data contained malformed records.") from e

    def query(self, query: str) -> QueryResult:
        data = self._request("POST", "/api/query", json={"query": query})
        if not isinstance(data, dict):
            raise FormatError("Query response did not contain a result object.")
        try:
            return QueryResult.model_validate(data)
        except ValidationError as e:
            logger.error(f"Query result did not validate: {e}")
            raise FormatError() from e

    def suggest(self, query: str) -> List[str]:
        data = self._request("POST", "/api/query/suggest", json={"query": query})
        suggestions = data.get("suggestions") if isinstance(data, dict) else None
        if suggestions is None:
            return []
        if not isinstance(suggestions, list):
            raise FormatError("Suggestions were not a list.")
        return [str(s) for s in suggestions]

    def ingest_netcdf(self, filename: str, content: Union[bytes, BinaryIO]) -> Dict[str, Any]:
        files = {"file": (filename, content, "application/x-netcdf")}
        data = self._request("POST", "/api/ingest/netcdf", files=files)
        if not isinstance(data, dict):
            raise FormatError("Ingest response did not contain a result object.")
        return data
