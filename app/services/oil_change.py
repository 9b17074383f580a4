"""Proxy to the oil-change bot API

The bot's API key stays on the server; the admin portal only ever talks to
these endpoints.
"""
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from app.config import settings
from app.services.errors import NotFoundError, ServiceUnavailableError, UpstreamError
from app.utils.logger import logger

_ERROR_SNIPPET = 200


def _looks_like_html(text: str) -> bool:
    trimmed = text.lstrip()
    return trimmed.startswith("<!DOCTYPE") or trimmed.startswith("<html") or trimmed.startswith("<!")


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:_ERROR_SNIPPET] or f"API error: {response.status_code}"
    if isinstance(body, dict):
        return body.get("error") or body.get("message") or f"API error: {response.status_code}"
    return f"API error: {response.status_code}"


def _call(method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Any:
    """
    Send one request to the bot API and return its decoded JSON body

    Raises:
        ServiceUnavailableError: BOT_API_KEY not configured
        NotFoundError: upstream answered 404
        UpstreamError: network failure, HTML page, non-JSON body or other upstream error
    """
    if not settings.BOT_API_KEY:
        raise ServiceUnavailableError("API key not configured on server")

    url = f"{settings.BOT_API_BASE.rstrip('/')}/{path}"
    headers = {"X-API-Key": settings.BOT_API_KEY, "Accept": "application/json"}

    try:
        response = requests.request(method, url, headers=headers, json=body, timeout=settings.BOT_API_TIMEOUT)
    except requests.RequestException as exc:
        logger.error("Oil change API unreachable", extra={"path": path, "error": str(exc)})
        raise UpstreamError("Oil change API is unreachable")

    text = response.text
    if _looks_like_html(text):
        raise UpstreamError("API returned HTML instead of JSON. Check bot API configuration.")

    if not response.ok:
        message = _error_message(response)
        logger.warning(
            "Oil change API error",
            extra={"path": path, "status_code": response.status_code, "error": message},
        )
        if response.status_code == 404:
            raise NotFoundError(message)
        raise UpstreamError(message)

    content_type = response.headers.get("content-type", "")
    if "application/json" not in content_type:
        raise UpstreamError(f"Unexpected content type: {content_type}")

    try:
        return response.json()
    except ValueError:
        raise UpstreamError(f"Failed to parse JSON response: {text[:_ERROR_SNIPPET]}")


def list_oil_changes() -> Any:
    return _call("GET", "oil-change/list")


def list_bot_trucks() -> Any:
    return _call("GET", "trucks")


def get_truck_oil_change(truck_name: str) -> Any:
    return _call("GET", f"oil-change/{quote(truck_name, safe='')}")


def reset_truck_oil_change(truck_name: str, mileage: Optional[int] = None) -> Any:
    body: Dict[str, Any] = {"truckName": truck_name}
    if mileage is not None:
        body["mileage"] = mileage
    return _call("POST", "oil-change/reset", body)
