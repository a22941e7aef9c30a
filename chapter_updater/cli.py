from __future__ import annotations

import argparse
import importlib
import json
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from chapter_updater.chapters import generate_chapters_json
from chapter_updater.config import AIConfig
from chapter_updater.dispatcher import (
    CREDENTIAL_HEADER,
    GENERATION_ERROR_STATUS,
    Outcome,
    send_request,
    validate_url,
)
from chapter_updater.errors import (
    ConfigurationError,
    GenerationError,
    ValidationError,
)


def _questionary():
    return importlib.import_module("questionary")


def _prompt_yes_no(prompt: str, default: bool) -> bool:
    questionary = _questionary()
    response = questionary.confirm(prompt, default=default).ask()
    if response is None:
        return default
    return response


def _prompt_for_access_key() -> str:
    questionary = _questionary()
    response = questionary.password(f"Enter the API key ({CREDENTIAL_HEADER}):").ask()
    return response or ""


def _read_text_file(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _ai_config_from_args(args: argparse.Namespace) -> AIConfig:
    config = AIConfig.from_env()
    if args.ai_base_url:
        config = replace(config, base_url=args.ai_base_url)
    if args.ai_model:
        config = replace(config, model=args.ai_model)
    if args.ai_timeout is not None:
        config = replace(config, timeout=args.ai_timeout if args.ai_timeout > 0 else None)
    return config


def _print_outcome(outcome: Outcome) -> None:
    label = "OK" if outcome.success else "FAILED"
    print(f"[send] {label} - status: {outcome.status}")
    print(json.dumps(outcome.data, indent=2, ensure_ascii=False))


def generate_from_file(notes_path: Path, config: AIConfig) -> int:
    try:
        notes = _read_text_file(notes_path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: could not read {notes_path}: {exc}")
        return 2
    print(f"[generate] Converting notes with {config.model}...")
    try:
        body = generate_chapters_json(notes, config)
    except (ValidationError, ConfigurationError) as exc:
        print(f"Error: {exc}")
        return 2
    except GenerationError as exc:
        print(f"Error: {exc}")
        return 1
    print(body)
    return 0


def send_from_file(
    body_path: Path,
    url: Optional[str],
    access_key: Optional[str],
    config: AIConfig,
    assume_yes: bool = False,
) -> int:
    try:
        body = _read_text_file(body_path)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: could not read {body_path}: {exc}")
        return 2
    url = url or ""
    try:
        validate_url(url)
    except ValidationError as exc:
        print(f"Error: {exc}")
        return 2
    access_key = access_key or _prompt_for_access_key()
    if not assume_yes and not _prompt_yes_no(f"Send {body_path.name} to {url}?", False):
        print("[send] Cancelled.")
        return 1
    try:
        result = send_request(access_key, url, body, config)
    except (ValidationError, ConfigurationError) as exc:
        print(f"Error: {exc}")
        return 2
    except GenerationError as exc:
        _print_outcome(
            Outcome(
                success=False,
                status=GENERATION_ERROR_STATUS,
                data={"message": str(exc)},
            )
        )
        return 1
    if result.generated:
        print("[send] Body was not JSON; converted notes with AI:")
        print(result.body)
    _print_outcome(result.outcome)
    return 0 if result.outcome.success else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Convert video chapter notes to JSON and POST them to a video-hosting API. "
            "Runs the browser form by default."
        )
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface for the form server.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the form server.",
    )
    parser.add_argument(
        "--generate",
        type=Path,
        default=None,
        metavar="NOTES_FILE",
        help="Convert the chapter notes in NOTES_FILE to JSON and print it.",
    )
    parser.add_argument(
        "--send",
        type=Path,
        default=None,
        metavar="BODY_FILE",
        help="POST the JSON (or notes) in BODY_FILE to --url and print the response.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Target https URL for --send.",
    )
    parser.add_argument(
        "--access-key",
        default=None,
        help=f"Value for the {CREDENTIAL_HEADER} header. Prompted for when omitted.",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Send without asking for confirmation.",
    )
    parser.add_argument(
        "--ai-base-url",
        default=None,
        help="OpenAI-compatible base URL for chapter generation.",
    )
    parser.add_argument(
        "--ai-model",
        default=None,
        help="Model name for chapter generation.",
    )
    parser.add_argument(
        "--ai-timeout",
        type=float,
        default=None,
        help="Timeout in seconds for the AI request (0 disables the timeout).",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.generate and args.send:
        parser.error("--generate and --send cannot be combined")
    config = _ai_config_from_args(args)

    if args.generate:
        return generate_from_file(args.generate, config)
    if args.send:
        return send_from_file(
            args.send,
            url=args.url,
            access_key=args.access_key,
            config=config,
            assume_yes=args.yes,
        )

    from chapter_updater.server import run_server

    run_server(host=args.host, port=args.port, ai_config=config)
    return 0
