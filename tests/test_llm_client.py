"""
Тесты для клиента генерации.
"""

import unittest
from unittest.mock import patch, Mock
import sys
import os

import requests

# Добавляем путь к src для импорта
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from llm_client import (
    OllamaGenerationClient,
    GenerationError,
    GenerationConnectionError,
)


def _response(status_code=200, payload=None, text=""):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


class TestOllamaGenerationClient(unittest.TestCase):
    """Unit-тесты для OllamaGenerationClient (с моками)."""

    def setUp(self):
        """Настройка тестового окружения."""
        self.client = OllamaGenerationClient("localhost", 11434, timeout=60)

    @patch('llm_client.requests.post')
    def test_chat(self, mock_post):
        """Chat-форма: сообщения в /api/chat, ответ из message.content."""
        mock_post.return_value = _response(payload={"message": {"content": "Hello!"}})
        messages = [{"role": "user", "content": "Hi"}]

        reply = self.client.chat("llama3", messages)

        self.assertEqual(reply, "Hello!")
        mock_post.assert_called_once_with(
            "http://localhost:11434/api/chat",
            json={"model": "llama3", "messages": messages, "stream": False},
            timeout=60
        )

    @patch('llm_client.requests.post')
    def test_generate_with_options(self, mock_post):
        """Generate-форма: промпт в /api/generate, ответ из response."""
        mock_post.return_value = _response(payload={"response": "42"})

        reply = self.client.generate("deepseek-r1", "question", {"temperature": 0.7})

        self.assertEqual(reply, "42")
        _, kwargs = mock_post.call_args
        self.assertEqual(mock_post.call_args[0][0], "http://localhost:11434/api/generate")
        self.assertEqual(kwargs["json"], {
            "model": "deepseek-r1",
            "prompt": "question",
            "stream": False,
            "options": {"temperature": 0.7}
        })

    @patch('llm_client.requests.post')
    def test_timeout(self, mock_post):
        """Таймаут - GenerationConnectionError, а не зависание."""
        mock_post.side_effect = requests.exceptions.Timeout()

        with self.assertRaises(GenerationConnectionError) as context:
            self.client.chat("llama3", [])
        self.assertIn("Таймаут", str(context.exception))

    @patch('llm_client.requests.post')
    def test_connection_error(self, mock_post):
        """Ошибка подключения."""
        mock_post.side_effect = requests.exceptions.ConnectionError()

        with self.assertRaises(GenerationConnectionError) as context:
            self.client.generate("llama3", "p")
        self.assertIn("localhost:11434", str(context.exception))

    @patch('llm_client.requests.post')
    def test_api_error(self, mock_post):
        """Статус не 200 - GenerationError."""
        mock_post.return_value = _response(status_code=404, text="model not found")

        with self.assertRaises(GenerationError) as context:
            self.client.chat("missing", [])
        self.assertIn("404", str(context.exception))

    @patch('llm_client.requests.post')
    def test_unexpected_chat_payload(self, mock_post):
        """Ответ без message - GenerationError."""
        mock_post.return_value = _response(payload={"response": "wrong shape"})

        with self.assertRaises(GenerationError):
            self.client.chat("llama3", [])

    @patch('llm_client.requests.post')
    def test_unexpected_generate_payload(self, mock_post):
        """Ответ без response - GenerationError."""
        mock_post.return_value = _response(payload={"message": {"content": "x"}})

        with self.assertRaises(GenerationError):
            self.client.generate("llama3", "p")

    def test_connection_error_is_generation_error(self):
        """Иерархия исключений."""
        self.assertTrue(issubclass(GenerationConnectionError, GenerationError))


if __name__ == "__main__":
    unittest.main(verbosity=2)
