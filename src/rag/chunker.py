"""
Модуль разбиения текста на фрагменты.

Отвечает за:
- Нарезку сырого текста документа на окна фиксированного размера
- Перекрытие соседних окон
- Проверку параметров нарезки

Нарезка идёт по символам, без учёта границ предложений и абзацев.
"""

import logging
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 300
DEFAULT_OVERLAP = 50


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE,
               overlap: int = DEFAULT_OVERLAP) -> List[str]:
    """
    Разбиение текста на перекрывающиеся фрагменты.

    Args:
        text: Исходный текст документа
        chunk_size: Размер фрагмента в символах (по умолчанию 300)
        overlap: Перекрытие соседних фрагментов (по умолчанию 50)

    Returns:
        Список фрагментов в порядке следования в тексте

    Raises:
        ConfigurationError: Если окно не может сдвинуться вперёд

    Алгоритм:
    - Начать с позиции 0
    - Взять chunk_size символов (последний фрагмент может быть короче)
    - Остановиться, если фрагмент дошёл до конца текста
    - Иначе сдвинуться на (chunk_size - overlap) символов
    """
    validate_chunking(chunk_size, overlap)

    if not text:
        return []

    chunks: List[str] = []
    step = chunk_size - overlap
    text_len = len(text)
    start = 0

    while start < text_len:
        end = min(start + chunk_size, text_len)
        chunks.append(text[start:end])
        if end >= text_len:
            break
        start += step

    logger.debug("Текст длиной %d разбит на %d фрагментов", text_len, len(chunks))
    return chunks


def validate_chunking(chunk_size: int, overlap: int) -> None:
    """
    Проверка параметров нарезки.

    Raises:
        ConfigurationError: При неположительном размере, отрицательном
            перекрытии или перекрытии не меньше размера
    """
    if chunk_size <= 0:
        raise ConfigurationError(f"chunk_size должен быть положительным: {chunk_size}")
    if overlap < 0:
        raise ConfigurationError(f"overlap не может быть отрицательным: {overlap}")
    if overlap >= chunk_size:
        raise ConfigurationError(
            f"overlap ({overlap}) должен быть меньше chunk_size ({chunk_size})"
        )


class ConfigurationError(ValueError):
    """Недопустимые параметры нарезки."""
    pass
