"""Convert free-text chapter notes into the chapter JSON body."""
from __future__ import annotations

import http.client
import json
from typing import Optional, Protocol
from urllib.error import HTTPError, URLError

from chapter_updater.client import ChatCompletionClient
from chapter_updater.config import AIConfig
from chapter_updater.errors import GenerationError, ValidationError

JSON_FENCE_OPEN = "```json"
FENCE = "```"

EXAMPLE_NOTES = """0:00 - Introduction
1:45 Topic A deep dive
5m 30s - Conclusion"""

EXAMPLE_OUTPUT = json.dumps(
    {
        "chapters": [
            {"title": "Introduction", "start": 0, "end": 105},
            {"title": "Topic A deep dive", "start": 105, "end": 330},
            {"title": "Conclusion", "start": 330},
        ]
    },
    indent=2,
)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> str:
        ...


def build_chapters_prompt(notes: str) -> str:
    return (
        "You are an API assistant that converts human-readable video chapter notes "
        "into a specific JSON format.\n"
        "The user will provide notes in various formats. Parse them and generate a "
        'JSON object with a "chapters" key.\n'
        'Each chapter object in the array must have a "title", a "start" time in '
        'total seconds, and an optional "end" time in total seconds.\n'
        'If an "end" time is not provided for a chapter, use the start time of the '
        'next chapter. The last chapter does not need an "end" time.\n\n'
        "- Convert all timestamps (like 1:45, 1:02:03 or 5m 30s) into whole total "
        "seconds.\n"
        "- Extract the title of each chapter.\n"
        "- The final output MUST be only the raw JSON object, with no extra text, "
        f"explanations, or markdown formatting like {JSON_FENCE_OPEN}.\n\n"
        f"Example Input:\n{EXAMPLE_NOTES}\n\n"
        f"Example Output:\n{EXAMPLE_OUTPUT}\n\n"
        "Now, process the following user input:\n"
        f"{notes}\n"
    )


def normalize_generated_text(text: str) -> str:
    cleaned = (text or "").strip()
    if cleaned.startswith(JSON_FENCE_OPEN):
        cleaned = cleaned[len(JSON_FENCE_OPEN):]
        if cleaned.rstrip().endswith(FENCE):
            cleaned = cleaned.rstrip()[: -len(FENCE)]
        cleaned = cleaned.strip()
    return cleaned


def looks_like_json_object(text: str) -> bool:
    return text.startswith("{") and text.endswith("}")


def generate_chapters_json(
    notes: str,
    config: AIConfig,
    client: Optional[TextGenerator] = None,
) -> str:
    """Ask the model for the chapter JSON describing ``notes``.

    Returns the normalized model text. Only a syntactic sniff test is applied;
    the chapters themselves are not parsed or checked.
    """
    if not notes or not notes.strip():
        raise ValidationError("The notes are empty. Please add chapter notes.")
    config.require_available()
    if client is None:
        client = ChatCompletionClient.from_config(config)
    try:
        raw_text = client.generate(build_chapters_prompt(notes))
    except HTTPError as exc:
        raise GenerationError(
            f"The AI service returned HTTP {exc.code}: {exc.reason}"
        ) from exc
    except URLError as exc:
        raise GenerationError(f"Could not reach the AI service: {exc.reason}") from exc
    except (OSError, http.client.HTTPException) as exc:
        detail = str(exc) or type(exc).__name__
        raise GenerationError(f"Could not reach the AI service: {detail}") from exc
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise GenerationError("The AI service returned an unexpected response.") from exc
    generated = normalize_generated_text(raw_text)
    if not looks_like_json_object(generated):
        raise GenerationError(
            "The AI did not return a JSON object. Try rephrasing the notes."
        )
    return generated


__all__ = [
    "EXAMPLE_NOTES",
    "EXAMPLE_OUTPUT",
    "GenerationError",
    "build_chapters_prompt",
    "generate_chapters_json",
    "looks_like_json_object",
    "normalize_generated_text",
]
