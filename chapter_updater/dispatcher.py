"""Send a chapter body to the target endpoint as one authenticated POST."""
from __future__ import annotations

import http.client
import json
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union
from urllib import request
from urllib.error import HTTPError
from urllib.parse import urlparse

from chapter_updater.chapters import generate_chapters_json
from chapter_updater.config import AIConfig
from chapter_updater.errors import (
    ConfigurationError,
    GenerationError,
    NetworkError,
    ValidationError,
)

CREDENTIAL_HEADER = "AccessKey"
DEFAULT_TARGET_URL = "https://video.bunnycdn.com/library/{libraryId}/videos/{videoId}"
NETWORK_ERROR_STATUS = "Network Error"
GENERATION_ERROR_STATUS = "Generation Error"


@dataclass(frozen=True)
class ParsedBody:
    value: Any


@dataclass(frozen=True)
class NotJson:
    text: str


BodyParse = Union[ParsedBody, NotJson]


@dataclass(frozen=True)
class Outcome:
    success: bool
    status: Union[int, str]
    data: Any

    def to_dict(self) -> dict[str, Any]:
        return {"success": self.success, "status": self.status, "data": self.data}


@dataclass(frozen=True)
class SendResult:
    outcome: Outcome
    body: str
    generated: bool = False


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _loads_strict(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def parse_body(text: str) -> BodyParse:
    try:
        return ParsedBody(_loads_strict(text))
    except ValueError:
        return NotJson(text)


def is_https_url(url: str) -> bool:
    parsed = urlparse(url.strip())
    return parsed.scheme == "https" and bool(parsed.netloc)


def validate_url(url: str) -> None:
    if not url or not url.strip():
        raise ValidationError("Request URL is required.")
    if not is_https_url(url):
        raise ValidationError("Request URL must be a well-formed https:// URL.")


def validate_request(access_key: str, url: str, body: str) -> None:
    missing = [
        label
        for label, value in (
            ("API Key", access_key),
            ("Request URL", url),
            ("Request Body", body),
        )
        if not value or not value.strip()
    ]
    if missing:
        verb = "is" if len(missing) == 1 else "are"
        raise ValidationError(f"{', '.join(missing)} {verb} required.")
    validate_url(url)


def _read_text(response: Any) -> str:
    raw = response.read()
    if not raw:
        return ""
    return raw.decode("utf-8", errors="replace")


def _parse_response_text(text: str) -> Any:
    try:
        return _loads_strict(text)
    except ValueError as exc:
        raise NetworkError(f"Response is not valid JSON: {exc}") from exc


def _post_json(url: str, access_key: str, payload: Any) -> Outcome:
    try:
        data = json.dumps(
            payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False
        ).encode("utf-8")
    except ValueError as exc:
        raise NetworkError(f"Payload cannot be sent as JSON: {exc}") from exc
    req = request.Request(
        url.strip(),
        data=data,
        method="POST",
        headers={
            "Content-Type": "application/json",
            CREDENTIAL_HEADER: access_key,
        },
    )
    try:
        try:
            with request.urlopen(req) as response:
                status = response.status
                reason = response.reason
                text = _read_text(response)
        except HTTPError as exc:
            status = exc.code
            reason = exc.reason
            text = _read_text(exc)
    except (OSError, ValueError, http.client.HTTPException) as exc:
        raise NetworkError(str(exc) or type(exc).__name__) from exc
    if 200 <= status < 300:
        data_out = (
            _parse_response_text(text)
            if text
            else {"status": status, "statusText": reason}
        )
        return Outcome(success=True, status=status, data=data_out)
    data_out = _parse_response_text(text) if text else {"message": reason}
    return Outcome(success=False, status=status, data=data_out)


def post_payload(url: str, access_key: str, payload: Any) -> Outcome:
    """POST ``payload`` and normalize the reply; never raises."""
    try:
        return _post_json(url, access_key, payload)
    except NetworkError as exc:
        return Outcome(
            success=False,
            status=NETWORK_ERROR_STATUS,
            data={"message": str(exc)},
        )


def send_request(
    access_key: str,
    url: str,
    body: str,
    config: AIConfig,
    generate: Optional[Callable[[str, AIConfig], str]] = None,
) -> SendResult:
    """Validate the form, convert notes to JSON when needed, and POST.

    Raises ``ValidationError`` and ``ConfigurationError`` before any network
    call. A ``GenerationError`` from the notes conversion propagates as is.
    """
    validate_request(access_key, url, body)
    parsed = parse_body(body)
    generated = False
    if isinstance(parsed, NotJson):
        if not config.available:
            raise ConfigurationError(
                "The Request Body is not valid JSON and no AI key is configured "
                "to convert it. Paste JSON directly or configure an AI key."
            )
        generate = generate or generate_chapters_json
        body = generate(parsed.text, config)
        generated = True
        parsed = parse_body(body)
        if isinstance(parsed, NotJson):
            raise GenerationError(
                "The AI output is not valid JSON. Try generating it again from notes."
            )
    outcome = post_payload(url, access_key, parsed.value)
    return SendResult(outcome=outcome, body=body, generated=generated)


__all__ = [
    "CREDENTIAL_HEADER",
    "DEFAULT_TARGET_URL",
    "GENERATION_ERROR_STATUS",
    "NETWORK_ERROR_STATUS",
    "NotJson",
    "Outcome",
    "ParsedBody",
    "SendResult",
    "is_https_url",
    "parse_body",
    "post_payload",
    "send_request",
    "validate_request",
    "validate_url",
]
