"""
Клиент для генерации ответов через Ollama.

Поддерживает две формы вызова:
- chat: список сообщений через /api/chat
- generate: одиночный промпт через /api/generate

Какую форму использовать, решает вызывающий код.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

CALL_SHAPES = ("chat", "generate")


class OllamaGenerationClient:
    """
    Клиент для генерации текста локальными моделями Ollama.

    Обеспечивает:
    - Ограничение каждого запроса таймаутом
    - Единообразную обработку ошибок подключения и API
    """

    def __init__(self, host: str, port: int, timeout: int = 120) -> None:
        """
        Инициализация клиента.

        Args:
            host: Хост Ollama сервера (обычно "localhost")
            port: Порт Ollama сервера (обычно 11434)
            timeout: Таймаут генерации в секундах
        """
        self._host = host
        self._port = port
        self._timeout = timeout
        self._base_url = f"http://{host}:{port}"

    def chat(self, model: str, messages: List[Dict[str, str]],
             options: Optional[Dict[str, Any]] = None) -> str:
        """
        Генерация ответа по истории сообщений.

        Args:
            model: Название модели (например, "llama3")
            messages: Сообщения в формате [{role, content}, ...]
            options: Параметры генерации

        Returns:
            Текст ответа модели
        """
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "stream": False
        }
        if options:
            payload["options"] = options

        response_json = self._post("/api/chat", payload)
        try:
            return response_json["message"]["content"]
        except (KeyError, TypeError) as e:
            raise GenerationError(f"Неожиданный формат ответа /api/chat: {e}")

    def generate(self, model: str, prompt: str,
                 options: Optional[Dict[str, Any]] = None) -> str:
        """
        Генерация ответа по одиночному промпту.

        Args:
            model: Название модели
            prompt: Полный текст промпта
            options: Параметры генерации

        Returns:
            Текст ответа модели
        """
        payload: Dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False
        }
        if options:
            payload["options"] = options

        response_json = self._post("/api/generate", payload)
        if not isinstance(response_json, dict) or "response" not in response_json:
            raise GenerationError("Ответ /api/generate не содержит ключ 'response'")
        return response_json["response"]

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        """
        Отправка запроса к Ollama.

        Raises:
            GenerationConnectionError: При проблемах с подключением или таймауте
            GenerationError: При ошибке API или некорректном JSON
        """
        logger.debug("Запрос %s (модель %s)", path, payload.get("model"))
        try:
            response = requests.post(
                f"{self._base_url}{path}",
                json=payload,
                timeout=self._timeout
            )
        except requests.exceptions.Timeout:
            raise GenerationConnectionError("Таймаут при генерации ответа")
        except requests.exceptions.RequestException:
            raise GenerationConnectionError(
                f"Не удалось подключиться к Ollama на {self._host}:{self._port}"
            )

        if response.status_code != 200:
            raise GenerationError(
                f"Ошибка Ollama API: {response.status_code} - {response.text}"
            )

        try:
            return response.json()
        except ValueError:
            raise GenerationError("Ответ Ollama API не является JSON")


class GenerationError(Exception):
    """Базовый класс ошибок генерации."""
    pass


class GenerationConnectionError(GenerationError):
    """Ошибка подключения к Ollama."""
    pass
