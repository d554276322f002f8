from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from akibaflow.api.cache import QueryCache, QueryState
from akibaflow.core.models import ValidationErrorDetail
from akibaflow.errors import ApiError, DecodeError, TransportError
from akibaflow.session import SessionStore

logger = logging.getLogger(__name__)


def decode(payload: Any, model: Any) -> Any:
    """Validate a decoded JSON body against ``model`` (a class or a typing form)."""
    try:
        return TypeAdapter(model).validate_python(payload)
    except ValidationError as exc:
        raise DecodeError(f"Unexpected response shape: {exc}") from exc


def error_from_response(response: httpx.Response) -> ApiError:
    """
    Build an ApiError from a non-2xx response.

    FastAPI answers with either ``{"detail": [{"loc", "msg", "type"}, ...]}``
    or ``{"detail": "text"}``; anything else falls back to the reason phrase.
    """
    message = response.reason_phrase or f"HTTP {response.status_code}"
    details = []
    try:
        body = response.json()
    except ValueError:
        body = None
    detail = body.get("detail") if isinstance(body, dict) else None
    if isinstance(detail, list):
        for item in detail:
            try:
                details.append(ValidationErrorDetail.model_validate(item))
            except ValidationError:
                continue
        if details:
            message = details[0].msg
    elif isinstance(detail, str) and detail:
        message = detail
    return ApiError(response.status_code, message, details)


class ApiClient:
    """
    Thin wrapper around an ``httpx.Client`` bound to the API base URL.

    The bearer token is read from the session store on every call, so logging
    in or out takes effect on the next request.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionStore,
        cache: Optional[QueryCache] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self.session = session
        self.cache = cache or QueryCache()
        self._http = httpx.Client(
            base_url=base_url,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        self._http.close()

    def _headers(self, auth: bool, token: Optional[str]) -> Dict[str, str]:
        bearer = token or (self.session.token if auth else None)
        return {"Authorization": f"Bearer {bearer}"} if bearer else {}

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, Any]] = None,
        auth: bool = True,
        token: Optional[str] = None,
    ) -> Any:
        """Issue one call and return the decoded JSON body (``None`` when empty)."""
        logger.debug("%s %s params=%s", method, path, params)
        try:
            response = self._http.request(
                method,
                path,
                params=params,
                json=json,
                data=data,
                headers=self._headers(auth, token),
            )
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError() from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if response.is_error:
            raise error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise DecodeError(f"Response from {path} is not JSON") from exc

    def query(
        self,
        path: str,
        model: Any,
        params: Optional[Dict[str, Any]] = None,
        refetch: bool = False,
    ) -> Any:
        """Cached GET; identical concurrent queries share one request."""
        key = self.cache.make_key(path, params)
        return self.cache.fetch(
            key,
            lambda: decode(self.request("GET", path, params=params), model),
            refetch=refetch,
        )

    def query_state(self, path: str, params: Optional[Dict[str, Any]] = None) -> QueryState:
        return self.cache.state(self.cache.make_key(path, params))

    def mutate(self, method: str, path: str, model: Any = None, **kwargs: Any) -> Any:
        """Uncached call. Related queries are left alone until refetched."""
        body = self.request(method, path, **kwargs)
        if model is None or body is None:
            return body
        return decode(body, model)
