"""
Модуль ранжирования фрагментов.

Отвечает за:
- Вычисление косинусного сходства
- Полный перебор корпуса (без индекса)
- Стабильную сортировку и отбор топ-K
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Sequence, Union

import numpy as np

from .store import Fragment

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5

Corpus = Union[Iterable[Fragment], Callable[[], Iterable[Fragment]]]


@dataclass(frozen=True)
class RankedMatch:
    """Фрагмент с оценкой релевантности запросу."""
    fragment: Fragment
    score: float

    @property
    def source_id(self) -> str:
        return self.fragment.source_id

    @property
    def text(self) -> str:
        return self.fragment.text


def cosine_similarity(vec1: Sequence[float], vec2: Sequence[float]) -> float:
    """
    Вычисление косинусного сходства между векторами.

    Args:
        vec1: Первый вектор
        vec2: Второй вектор

    Returns:
        Значение от -1 до 1; 0.0 если норма одного из векторов нулевая
        или вектор содержит неконечные значения

    Raises:
        DimensionMismatchError: Если размерности векторов различаются

    Формула:
    cos(θ) = (A · B) / (||A|| * ||B||)
    """
    vec1_np = np.asarray(vec1, dtype=float)
    vec2_np = np.asarray(vec2, dtype=float)

    if vec1_np.shape != vec2_np.shape:
        raise DimensionMismatchError(
            f"Размерности не совпадают: {vec1_np.size} != {vec2_np.size}"
        )

    # Масштаб не влияет на косинус, но защищает норму от переполнения
    scale1 = np.max(np.abs(vec1_np)) if vec1_np.size else 0.0
    scale2 = np.max(np.abs(vec2_np)) if vec2_np.size else 0.0

    if scale1 == 0 or scale2 == 0 or not (np.isfinite(scale1) and np.isfinite(scale2)):
        return 0.0

    vec1_np = vec1_np / scale1
    vec2_np = vec2_np / scale2
    score = np.dot(vec1_np, vec2_np) / (np.linalg.norm(vec1_np) * np.linalg.norm(vec2_np))

    if not np.isfinite(score):
        return 0.0
    return float(score)


def rank(query: Sequence[float], corpus: Corpus, k: int = DEFAULT_TOP_K) -> List[RankedMatch]:
    """
    Ранжирование корпуса по сходству с вектором запроса.

    Args:
        query: Вектор запроса
        corpus: Фрагменты или функция без аргументов, возвращающая фрагменты
        k: Сколько лучших совпадений вернуть

    Returns:
        Не более k совпадений по убыванию оценки. При равных оценках
        сохраняется порядок фрагментов в корпусе.

    Фрагменты с размерностью, отличной от размерности запроса,
    исключаются из ранжирования и пишутся в лог.
    """
    if callable(corpus):
        corpus = corpus()

    if k <= 0:
        return []

    matches: List[RankedMatch] = []
    skipped = 0
    for fragment in corpus:
        try:
            score = cosine_similarity(query, fragment.embedding)
        except DimensionMismatchError as e:
            logger.warning("Фрагмент %s (%s) исключён: %s",
                           fragment.fragment_id, fragment.source_id, e)
            skipped += 1
            continue
        matches.append(RankedMatch(fragment=fragment, score=score))

    # sorted стабилен и с reverse=True
    matches = sorted(matches, key=lambda m: m.score, reverse=True)

    logger.debug("Оценено %d фрагментов, исключено %d", len(matches), skipped)
    return matches[:k]


class DimensionMismatchError(ValueError):
    """Размерность вектора фрагмента не совпадает с размерностью запроса."""
    pass
