"""
Модуль генерации эмбедингов.

Отвечает за:
- Взаимодействие с внешним сервисом эмбедингов (Ollama-совместимый API)
- Преобразование текста в векторные представления
- Сведение любых сбоев сети и формата к сигнальному значению EmbeddingFailure
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import List, Optional, Union

import requests

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingConfig:
    """Конфигурация для генератора эмбедингов."""
    host: str
    port: int
    model_name: str
    endpoint: str = "/api/embeddings"
    timeout: int = 30


@dataclass(frozen=True)
class EmbeddingFailure:
    """
    Сигнальное значение неудачной генерации эмбединга.

    Возвращается вместо вектора; вызывающий код обязан проверить
    результат через isinstance.
    """
    reason: str

    def __bool__(self) -> bool:
        return False


EmbeddingResult = Union[List[float], EmbeddingFailure]


class EmbeddingGenerator:
    """
    Генератор эмбедингов через внешний сервис.

    Обеспечивает:
    - Один запрос на один текст, без повторных попыток
    - Ограничение каждого запроса таймаутом
    - Проверку формата ответа
    """

    def __init__(self, config: EmbeddingConfig) -> None:
        """
        Инициализация генератора.

        Args:
            config: Конфигурация подключения к сервису
        """
        self._config = config
        self._base_url = f"http://{config.host}:{config.port}{config.endpoint}"
        self._embedding_dim: Optional[int] = None

    @property
    def default_model(self) -> str:
        return self._config.model_name

    def generate(self, text: str, model: Optional[str] = None) -> EmbeddingResult:
        """
        Генерация эмбединга для одного текста.

        Args:
            text: Текст для преобразования
            model: Имя модели (по умолчанию из конфигурации)

        Returns:
            Вектор эмбединга или EmbeddingFailure при любой ошибке
        """
        model_name = model or self._config.model_name
        try:
            response = self._send_request(text, model_name)
            return self._parse_embedding(response)
        except EmbeddingError as e:
            logger.warning("Не удалось получить эмбединг (модель %s): %s", model_name, e)
            return EmbeddingFailure(reason=str(e))

    def check_model_availability(self) -> bool:
        """
        Проверка доступности модели.

        Returns:
            True если модель доступна
        """
        return not isinstance(self.generate("test"), EmbeddingFailure)

    def get_embedding_dimension(self) -> Optional[int]:
        """
        Получение размерности эмбедингов модели по умолчанию.

        Returns:
            Размерность вектора или None, если сервис недоступен
        """
        if self._embedding_dim is not None:
            return self._embedding_dim

        result = self.generate("test")
        if isinstance(result, EmbeddingFailure):
            return None
        self._embedding_dim = len(result)
        return self._embedding_dim

    def _send_request(self, text: str, model_name: str) -> dict:
        """
        Отправка запроса к API сервиса эмбедингов.

        Args:
            text: Текст для эмбединга
            model_name: Имя модели

        Returns:
            JSON ответ API

        Raises:
            EmbeddingConnectionError: При проблемах с подключением или статусе != 200
            EmbeddingParseError: Если тело ответа не JSON
        """
        payload = {
            "model": model_name,
            "prompt": text
        }

        try:
            response = requests.post(
                self._base_url,
                json=payload,
                timeout=self._config.timeout
            )
        except requests.exceptions.Timeout:
            raise EmbeddingConnectionError(
                f"Таймаут запроса к сервису эмбедингов ({self._config.timeout}с)"
            )
        except requests.exceptions.RequestException as e:
            raise EmbeddingConnectionError(f"Не удалось подключиться к сервису эмбедингов: {e}")

        if response.status_code != 200:
            raise EmbeddingConnectionError(f"Ошибка API: {response.status_code}")

        try:
            return response.json()
        except ValueError:
            raise EmbeddingParseError("Ответ API не является JSON")

    def _parse_embedding(self, response: dict) -> List[float]:
        """
        Извлечение эмбединга из ответа API.

        Args:
            response: JSON ответ от API

        Returns:
            Вектор эмбединга

        Raises:
            EmbeddingParseError: При неожиданном формате ответа
        """
        if not isinstance(response, dict) or "embedding" not in response:
            raise EmbeddingParseError("Отсутствует поле 'embedding' в ответе")

        vector = response["embedding"]
        if not isinstance(vector, list) or not vector:
            raise EmbeddingParseError("Поле 'embedding' должно быть непустым списком")
        if not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in vector):
            raise EmbeddingParseError("Поле 'embedding' содержит нечисловые значения")
        if not all(math.isfinite(x) for x in vector):
            raise EmbeddingParseError("Поле 'embedding' содержит NaN или бесконечность")

        return [float(x) for x in vector]


class EmbeddingError(Exception):
    """Базовый класс ошибок генерации эмбедингов."""
    pass


class EmbeddingConnectionError(EmbeddingError):
    """Ошибка подключения к сервису эмбедингов."""
    pass


class EmbeddingParseError(EmbeddingError):
    """Ошибка парсинга ответа."""
    pass
