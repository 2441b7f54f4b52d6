"""Outbound JSON-over-HTTPS helper shared by the email API and SMS providers."""

from __future__ import annotations

import base64
import json
import ssl
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import certifi

USER_AGENT = "eldercare-notifier/1.0"


class DeliveryError(Exception):
    """A provider call that did not deliver."""


class HttpStatusError(DeliveryError):
    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        detail = provider_error_message(body)
        super().__init__(f"HTTP {status}: {detail}" if detail else f"HTTP {status}")


def provider_error_message(body: str) -> str:
    """Pull the provider's own error text out of a JSON error body, else return it raw."""
    text = (body or "").strip()
    if not text:
        return ""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text[:500]
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            for key in ("description", "message", "name"):
                if error.get(key):
                    return str(error[key])
        elif isinstance(error, str) and error:
            return error
        if payload.get("message"):
            return str(payload["message"])
    return text[:500]


def basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(token).decode("ascii")


def post_json(
    url: str,
    payload: dict,
    *,
    username: str,
    password: str,
    timeout: float,
) -> Optional[Any]:
    """POST a JSON body with Basic auth; return the decoded JSON reply (or None).

    Raises HttpStatusError for non-2xx replies and DeliveryError for
    network failures and timeouts.
    """
    req = Request(
        url,
        data=json.dumps(payload).encode("utf-8"),
        method="POST",
        headers={
            "Authorization": basic_auth_header(username, password),
            "Content-Type": "application/json",
            "accept": "application/json",
            "user-agent": USER_AGENT,
        },
    )
    try:
        # Some macOS Python builds do not have system roots configured.
        ctx = ssl.create_default_context(cafile=certifi.where())
        with urlopen(req, timeout=timeout, context=ctx) as resp:
            status = int(getattr(resp, "status", None) or resp.getcode())
            body = resp.read()
    except HTTPError as e:
        # HTTPError is also a file-like response.
        try:
            text = e.read().decode("utf-8", errors="replace")
        except Exception:
            text = ""
        raise HttpStatusError(int(e.code), text) from e
    except URLError as e:
        raise DeliveryError(f"Request failed: {getattr(e, 'reason', e)}") from e
    except (TimeoutError, OSError) as e:
        raise DeliveryError(f"Request failed: {e.__class__.__name__}: {e}") from e

    text = body.decode("utf-8", errors="replace") if body else ""
    if status < 200 or status >= 300:
        raise HttpStatusError(status, text)
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None
