"""HTTP server exposing the chapter form and its two actions."""
from __future__ import annotations

import json
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Callable, Optional
from urllib.parse import urlparse

from chapter_updater.chapters import generate_chapters_json
from chapter_updater.config import AIConfig
from chapter_updater.dispatcher import (
    CREDENTIAL_HEADER,
    DEFAULT_TARGET_URL,
    GENERATION_ERROR_STATUS,
    Outcome,
    send_request,
)
from chapter_updater.errors import (
    ConfigurationError,
    GenerationError,
    ValidationError,
)
from chapter_updater.gui import get_gui_html


class ApiError(ValueError):
    """Raised when API input is invalid."""


class ActionBusyError(RuntimeError):
    """Raised when an action starts while another one is in flight."""


_SERVER_CONFIG: dict[str, Any] = {"ai": None}
_ACTIONS_LOCK = threading.Lock()
_ACTIVE_ACTIONS: set[str] = set()


def configure(ai_config: Optional[AIConfig]) -> None:
    _SERVER_CONFIG["ai"] = ai_config


def _ai_config() -> AIConfig:
    config = _SERVER_CONFIG.get("ai")
    if config is None:
        config = AIConfig.from_env()
        _SERVER_CONFIG["ai"] = config
    return config


def _text_field(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ApiError(f"{key} must be a string")
    return value


def _run_exclusive(action: str, task: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    # Generate and send share one slot: sending may itself generate.
    with _ACTIONS_LOCK:
        if _ACTIVE_ACTIONS:
            running = next(iter(_ACTIVE_ACTIONS))
            raise ActionBusyError(f"Another action ({running}) is still in progress.")
        _ACTIVE_ACTIONS.add(action)
    try:
        return task()
    finally:
        with _ACTIONS_LOCK:
            _ACTIVE_ACTIONS.discard(action)


def get_config_api(_payload: dict[str, Any]) -> dict[str, Any]:
    config = _ai_config()
    return {
        "ai_available": config.available,
        "model": config.model,
        "default_url": DEFAULT_TARGET_URL,
        "credential_header": CREDENTIAL_HEADER,
    }


def generate_api(payload: dict[str, Any]) -> dict[str, Any]:
    notes = _text_field(payload, "notes")
    if not notes.strip():
        raise ApiError("The text area is empty. Please add chapter notes.")
    config = _ai_config()

    def task() -> dict[str, Any]:
        return {"body": generate_chapters_json(notes, config)}

    return _run_exclusive("generate", task)


def send_api(payload: dict[str, Any]) -> dict[str, Any]:
    access_key = _text_field(payload, "access_key")
    url = _text_field(payload, "url")
    body = _text_field(payload, "body")
    config = _ai_config()

    def task() -> dict[str, Any]:
        try:
            result = send_request(access_key, url, body, config)
        except GenerationError as exc:
            outcome = Outcome(
                success=False,
                status=GENERATION_ERROR_STATUS,
                data={"message": str(exc)},
            )
            return {"outcome": outcome.to_dict(), "body": body, "generated": False}
        return {
            "outcome": result.outcome.to_dict(),
            "body": result.body,
            "generated": result.generated,
        }

    return _run_exclusive("send", task)


def _read_json(handler: BaseHTTPRequestHandler) -> dict[str, Any]:
    try:
        length = int(handler.headers.get("Content-Length", "0"))
    except ValueError as exc:
        raise ApiError("Invalid JSON payload.") from exc
    if length <= 0:
        return {}
    raw = handler.rfile.read(length)
    if not raw:
        return {}
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ApiError("Invalid JSON payload.") from exc
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ApiError("Request payload must be a JSON object.")
    return payload


def _send_json(handler: BaseHTTPRequestHandler, payload: dict[str, Any], status: int) -> None:
    body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    handler.send_response(status)
    handler.send_header("Content-Type", "application/json")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _send_html(handler: BaseHTTPRequestHandler, html: str) -> None:
    body = html.encode("utf-8")
    handler.send_response(HTTPStatus.OK)
    handler.send_header("Content-Type", "text/html; charset=utf-8")
    handler.send_header("Content-Length", str(len(body)))
    handler.end_headers()
    handler.wfile.write(body)


def _handle_api(handler: BaseHTTPRequestHandler) -> None:
    path = urlparse(handler.path).path
    try:
        if path == "/api/config":
            _send_json(handler, get_config_api({}), HTTPStatus.OK)
            return
        if handler.command != "POST":
            _send_json(handler, {"error": "Unknown endpoint"}, HTTPStatus.NOT_FOUND)
            return

        payload = _read_json(handler)
        routes = {
            "/api/generate": generate_api,
            "/api/send": send_api,
        }
        handler_fn = routes.get(path)
        if handler_fn is None:
            _send_json(handler, {"error": "Unknown endpoint"}, HTTPStatus.NOT_FOUND)
            return
        response = handler_fn(payload)
        _send_json(handler, response, HTTPStatus.OK)
    except (ApiError, ValidationError, ConfigurationError) as exc:
        _send_json(handler, {"error": str(exc)}, HTTPStatus.BAD_REQUEST)
    except json.JSONDecodeError:
        _send_json(handler, {"error": "Invalid JSON payload."}, HTTPStatus.BAD_REQUEST)
    except ActionBusyError as exc:
        _send_json(handler, {"error": str(exc)}, HTTPStatus.CONFLICT)
    except GenerationError as exc:
        _send_json(handler, {"error": str(exc)}, HTTPStatus.BAD_GATEWAY)


class ChapterUpdaterRequestHandler(BaseHTTPRequestHandler):
    """Serve the chapter form and its JSON API."""

    def do_GET(self) -> None:  # noqa: N802 - required by BaseHTTPRequestHandler
        if self.path.startswith("/api/"):
            _handle_api(self)
            return
        _send_html(self, get_gui_html())

    def do_POST(self) -> None:  # noqa: N802 - required by BaseHTTPRequestHandler
        if not self.path.startswith("/api/"):
            _send_json(self, {"error": "Unsupported endpoint"}, HTTPStatus.NOT_FOUND)
            return
        _handle_api(self)


def run_server(
    host: str = "127.0.0.1",
    port: int = 8080,
    ai_config: Optional[AIConfig] = None,
) -> ThreadingHTTPServer:
    """Run the Chapter Updater HTTP server."""
    configure(ai_config or AIConfig.from_env())
    server = ThreadingHTTPServer((host, port), ChapterUpdaterRequestHandler)
    print(f"Chapter Updater available at http://{host}:{port}")
    if not _ai_config().available:
        print("[config] No AI key configured; notes-to-JSON generation is disabled.")
    server.serve_forever()
    return server
