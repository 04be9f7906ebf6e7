"""Thin wrapper around the catalog HTTP API used by the terminal client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from catalog.core.config import get_settings
from catalog.services.models import MovieData

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Cannot communicate with server."
INVALID_RESPONSE_MESSAGE = "Received an invalid response from the server."


class CatalogError(Exception):
    """Base exception for catalog API failures. ``str(exc)`` is safe to show to users."""


class CatalogUnavailable(CatalogError):
    """Raised on transport errors and timeouts."""


class CatalogNotFound(CatalogError):
    """Raised when the service answers 404."""


class CatalogClient:
    """Simple synchronous HTTP client for the catalog service."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, params=params, json=json)
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out after %ss", method, url, self.timeout)
            raise CatalogUnavailable(UNREACHABLE_MESSAGE) from exc
        except httpx.TransportError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise CatalogUnavailable(UNREACHABLE_MESSAGE) from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise CatalogNotFound("Movie not found.")
        if response.status_code != httpx.codes.OK:
            logger.warning("%s %s returned %s: %s", method, url, response.status_code, response.text)
            raise CatalogError(_error_message(response))
        return response

    def list_movies(self, *, limit: int, skip: int = 0) -> list[MovieData]:
        response = self._request("GET", "/movies", params={"limit": limit, "skip": skip})
        payload = _decode_json(response)
        if not isinstance(payload, list):
            logger.warning("Movie list is not a JSON array: %.200s", response.text)
            raise CatalogError(INVALID_RESPONSE_MESSAGE)
        return [_decode_movie(item) for item in payload]

    def get_movie(self, movie_id: int) -> MovieData:
        response = self._request("GET", f"/movies/{movie_id}")
        return _decode_movie(_decode_json(response))

    def add_movie(self, movie: MovieData) -> str:
        return self._request("POST", "/movies", json=movie.to_payload()).text.strip()

    def update_movie(self, movie_id: int, movie: MovieData) -> str:
        return self._request("PUT", f"/update/{movie_id}", json=movie.to_payload()).text.strip()

    def delete_movie(self, movie_id: int) -> str:
        return self._request("DELETE", f"/movies/{movie_id}").text.strip()


def _error_message(response: httpx.Response) -> str:
    if response.status_code >= 500:
        return "The server could not complete the request."
    text = response.text.strip()
    return text or f"Request rejected ({response.status_code})."


def _decode_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.warning("Undecodable response body: %s", exc)
        raise CatalogError(INVALID_RESPONSE_MESSAGE) from exc


def _decode_movie(item: Any) -> MovieData:
    if not isinstance(item, dict):
        logger.warning("Movie entry is not a JSON object: %r", item)
        raise CatalogError(INVALID_RESPONSE_MESSAGE)
    try:
        return MovieData.from_payload(item)
    except (ValueError, TypeError, KeyError) as exc:
        logger.warning("Undecodable movie entry: %s", exc)
        raise CatalogError(INVALID_RESPONSE_MESSAGE) from exc
