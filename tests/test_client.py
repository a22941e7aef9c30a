import json
import unittest
from unittest.mock import Mock, patch

from chapter_updater.client import SYSTEM_PROMPT, ChatCompletionClient
from chapter_updater.config import AIConfig


def _response(payload: dict) -> Mock:
    response = Mock()
    response.read.return_value = json.dumps(payload).encode("utf-8")
    response.__enter__ = Mock(return_value=response)
    response.__exit__ = Mock(return_value=False)
    return response


class TestChatCompletionClient(unittest.TestCase):
    def test_generate_posts_chat_completion_with_bearer_key(self) -> None:
        urlopen_mock = Mock(
            return_value=_response({"choices": [{"message": {"content": "{}"}}]})
        )

        with patch("chapter_updater.client.request.urlopen", urlopen_mock):
            client = ChatCompletionClient(
                base_url="https://ai.example.com/v1/",
                model="demo-model",
                api_key="secret",
            )
            result = client.generate("Prompt")

        self.assertEqual(result, "{}")
        request_obj = urlopen_mock.call_args[0][0]
        self.assertEqual(request_obj.full_url, "https://ai.example.com/v1/chat/completions")
        self.assertEqual(request_obj.get_header("Authorization"), "Bearer secret")
        payload = json.loads(request_obj.data.decode("utf-8"))
        self.assertEqual(payload["model"], "demo-model")
        self.assertEqual(payload["messages"][0]["content"], SYSTEM_PROMPT)
        self.assertEqual(payload["messages"][1]["content"], "Prompt")
        self.assertNotIn("timeout", urlopen_mock.call_args[1])

    def test_generate_passes_timeout_when_configured(self) -> None:
        urlopen_mock = Mock(
            return_value=_response({"choices": [{"message": {"content": "text"}}]})
        )

        with patch("chapter_updater.client.request.urlopen", urlopen_mock):
            client = ChatCompletionClient.from_config(
                AIConfig(api_key="secret", base_url="https://ai.example.com", timeout=5.0)
            )
            client.generate("Prompt")

        self.assertEqual(urlopen_mock.call_args[1]["timeout"], 5.0)

    def test_generate_returns_empty_string_for_null_content(self) -> None:
        urlopen_mock = Mock(
            return_value=_response({"choices": [{"message": {"content": None}}]})
        )

        with patch("chapter_updater.client.request.urlopen", urlopen_mock):
            client = ChatCompletionClient(
                base_url="https://ai.example.com", model="m", api_key="k"
            )

            self.assertEqual(client.generate("Prompt"), "")


if __name__ == "__main__":
    unittest.main()
