import json
import logging
from urllib import error, parse, request

from socialops.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)


def _error_message(raw: bytes, fallback: str) -> str:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return fallback

    err = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(err, dict):
        return str(err.get("message") or err.get("type") or fallback)
    if isinstance(payload, dict):
        return str(payload.get("error_description") or payload.get("message") or err or fallback)
    return fallback


def request_json(
    url: str,
    *,
    provider: str,
    method: str = "GET",
    headers: dict[str, str] | None = None,
    form: dict[str, str] | None = None,
    timeout: int = 10,
) -> dict:
    body = None
    all_headers = {"Accept": "application/json"}
    all_headers.update(headers or {})
    if form is not None:
        body = parse.urlencode(form).encode("utf-8")
        all_headers["Content-Type"] = "application/x-www-form-urlencoded"

    req = request.Request(url, data=body, headers=all_headers, method=method)
    try:
        with request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except error.HTTPError as exc:
        message = _error_message(exc.read() or b"", exc.reason or f"HTTP {exc.code}")
        logger.warning("%s request failed status=%s url=%s", provider, exc.code, url)
        raise UpstreamFailure(f"{provider} API error", details=message) from exc
    except error.URLError as exc:
        logger.warning("%s unreachable url=%s reason=%s", provider, url, exc.reason)
        raise UpstreamFailure(f"{provider} API unreachable", details=str(exc.reason)) from exc

    if not raw:
        return {}
    try:
        return json.loads(raw.decode("utf-8"))
    except ValueError as exc:
        raise UpstreamFailure(f"{provider} returned an invalid response") from exc
