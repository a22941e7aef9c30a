import http.client
import json
import unittest
from unittest.mock import Mock, patch
from urllib.error import HTTPError, URLError

from chapter_updater.chapters import (
    EXAMPLE_NOTES,
    EXAMPLE_OUTPUT,
    build_chapters_prompt,
    generate_chapters_json,
    looks_like_json_object,
    normalize_generated_text,
)
from chapter_updater.config import AIConfig
from chapter_updater.dispatcher import ParsedBody, parse_body
from chapter_updater.errors import ConfigurationError, GenerationError, ValidationError

CONFIG = AIConfig(api_key="secret")


class TestChaptersPrompt(unittest.TestCase):
    def test_prompt_appends_raw_notes_after_instructions(self) -> None:
        notes = "0:00 Intro\n2m 10s Setup"

        prompt = build_chapters_prompt(notes)

        self.assertTrue(prompt.rstrip().endswith(notes))
        self.assertLess(prompt.index('"chapters"'), prompt.index(notes))

    def test_prompt_encodes_the_conversion_rules(self) -> None:
        prompt = build_chapters_prompt("0:00 Intro")

        self.assertIn("total seconds", prompt)
        self.assertIn("5m 30s", prompt)
        self.assertIn("next chapter", prompt)
        self.assertIn("last chapter does not need an \"end\"", prompt)
        self.assertIn("only the raw JSON object", prompt)
        self.assertIn(EXAMPLE_NOTES, prompt)
        self.assertIn(EXAMPLE_OUTPUT, prompt)

    def test_example_output_omits_only_the_last_end(self) -> None:
        chapters = json.loads(EXAMPLE_OUTPUT)["chapters"]

        starts = [chapter for chapter in chapters if "start" in chapter]
        ends = [chapter for chapter in chapters if "end" in chapter]
        self.assertEqual(len(ends), len(starts) - 1)
        self.assertNotIn("end", chapters[-1])
        for current, following in zip(chapters, chapters[1:]):
            self.assertEqual(current["end"], following["start"])

    def test_example_output_is_classified_as_json(self) -> None:
        self.assertIsInstance(parse_body(EXAMPLE_OUTPUT), ParsedBody)


class TestNormalizeGeneratedText(unittest.TestCase):
    def test_trims_whitespace(self) -> None:
        self.assertEqual(normalize_generated_text('  {"a": 1}\n'), '{"a": 1}')

    def test_strips_json_fence(self) -> None:
        text = '```json\n{"chapters": []}\n```'

        self.assertEqual(normalize_generated_text(text), '{"chapters": []}')

    def test_strips_fence_with_trailing_whitespace(self) -> None:
        text = '\n```json\n{"chapters": []}\n```  \n'

        self.assertEqual(normalize_generated_text(text), '{"chapters": []}')

    def test_leaves_other_fences_alone(self) -> None:
        text = '```\n{"chapters": []}\n```'

        self.assertEqual(normalize_generated_text(text), text)

    def test_sniff_test(self) -> None:
        self.assertTrue(looks_like_json_object('{"chapters": []}'))
        self.assertFalse(looks_like_json_object('Here you go: {"chapters": []}'))
        self.assertFalse(looks_like_json_object('[{"title": "Intro"}]'))


class TestGenerateChaptersJson(unittest.TestCase):
    def test_returns_normalized_model_output(self) -> None:
        client = Mock()
        client.generate.return_value = f"```json\n{EXAMPLE_OUTPUT}\n```"

        result = generate_chapters_json(EXAMPLE_NOTES, CONFIG, client=client)

        self.assertEqual(result, EXAMPLE_OUTPUT)
        prompt = client.generate.call_args[0][0]
        self.assertTrue(prompt.rstrip().endswith(EXAMPLE_NOTES))

    def test_last_chapter_without_end_keeps_one_fewer_end(self) -> None:
        client = Mock()
        client.generate.return_value = EXAMPLE_OUTPUT

        result = json.loads(
            generate_chapters_json("0:00 Intro\n1:45 Middle\n5:30 Outro", CONFIG, client=client)
        )

        starts = sum(1 for chapter in result["chapters"] if "start" in chapter)
        ends = sum(1 for chapter in result["chapters"] if "end" in chapter)
        self.assertEqual(ends, starts - 1)

    def test_rejects_output_that_is_not_an_object(self) -> None:
        client = Mock()
        client.generate.return_value = "Sorry, I cannot help with that."

        with self.assertRaises(GenerationError):
            generate_chapters_json("0:00 Intro", CONFIG, client=client)

    def test_does_not_validate_json_beyond_the_sniff_test(self) -> None:
        client = Mock()
        client.generate.return_value = "{not really json}"

        self.assertEqual(
            generate_chapters_json("0:00 Intro", CONFIG, client=client),
            "{not really json}",
        )

    def test_requires_configured_key(self) -> None:
        client = Mock()

        with self.assertRaises(ConfigurationError):
            generate_chapters_json("0:00 Intro", AIConfig(), client=client)

        client.generate.assert_not_called()

    def test_requires_notes(self) -> None:
        client = Mock()

        with self.assertRaises(ValidationError):
            generate_chapters_json("   ", CONFIG, client=client)

        client.generate.assert_not_called()

    def test_wraps_transport_failures(self) -> None:
        client = Mock()
        client.generate.side_effect = URLError("Name or service not known")

        with self.assertRaises(GenerationError) as context:
            generate_chapters_json("0:00 Intro", CONFIG, client=client)

        self.assertIn("Name or service not known", str(context.exception))

    def test_wraps_http_errors(self) -> None:
        client = Mock()
        client.generate.side_effect = HTTPError(
            "https://ai.example.com/chat/completions", 401, "Unauthorized", None, None
        )

        with self.assertRaises(GenerationError) as context:
            generate_chapters_json("0:00 Intro", CONFIG, client=client)

        self.assertIn("401", str(context.exception))

    def test_wraps_unexpected_payloads(self) -> None:
        client = Mock()
        client.generate.side_effect = KeyError("choices")

        with self.assertRaises(GenerationError):
            generate_chapters_json("0:00 Intro", CONFIG, client=client)

    def test_wraps_timeouts_and_broken_connections(self) -> None:
        failures = [
            TimeoutError("timed out"),
            http.client.RemoteDisconnected("Remote end closed connection without response"),
            http.client.IncompleteRead(b'{"choices"', 96),
            http.client.BadStatusLine("GARBAGE"),
        ]
        for failure in failures:
            with self.subTest(failure=type(failure).__name__):
                client = Mock()
                client.generate.side_effect = failure

                with self.assertRaises(GenerationError) as context:
                    generate_chapters_json("0:00 Intro", CONFIG, client=client)

                self.assertIn("Could not reach the AI service", str(context.exception))

    def test_timeout_from_chat_client_becomes_generation_error(self) -> None:
        urlopen_mock = Mock(side_effect=TimeoutError("timed out"))

        with patch("chapter_updater.client.request.urlopen", urlopen_mock):
            with self.assertRaises(GenerationError) as context:
                generate_chapters_json("0:00 Intro", AIConfig(api_key="secret", timeout=5.0))

        self.assertIn("timed out", str(context.exception))
        urlopen_mock.assert_called_once()

    def test_builds_client_from_config_when_missing(self) -> None:
        with patch("chapter_updater.chapters.ChatCompletionClient") as client_cls:
            client_cls.from_config.return_value.generate.return_value = EXAMPLE_OUTPUT

            result = generate_chapters_json("0:00 Intro", CONFIG)

        client_cls.from_config.assert_called_once_with(CONFIG)
        self.assertEqual(result, EXAMPLE_OUTPUT)


if __name__ == "__main__":
    unittest.main()
