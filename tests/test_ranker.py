"""
Тесты для модуля ранжирования.
"""

import math
import unittest
import sys
import os

# Добавляем путь к src для импорта
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from rag.ranker import (
    RankedMatch,
    cosine_similarity,
    rank,
    DimensionMismatchError,
)
from rag.store import Fragment


def make_corpus(*vectors, source="doc.txt"):
    return [
        Fragment(i + 1, source, f"chunk {i}", tuple(float(x) for x in vector))
        for i, vector in enumerate(vectors)
    ]


class TestCosineSimilarity(unittest.TestCase):
    """Тесты для cosine_similarity."""

    def test_identical_vectors(self):
        """Проверка сходства идентичных векторов."""
        vec = [1.0, 2.0, 3.0, 4.0, 5.0]
        self.assertAlmostEqual(cosine_similarity(vec, vec), 1.0, places=9)

    def test_opposite_vectors(self):
        """Проверка сходства противоположных векторов."""
        vec = [1.0, -2.0, 3.5]
        self.assertAlmostEqual(cosine_similarity(vec, [-x for x in vec]), -1.0, places=9)

    def test_orthogonal_vectors(self):
        """Проверка сходства ортогональных векторов."""
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]), 0.0, places=9)

    def test_zero_vector(self):
        """Нулевой вектор даёт 0, а не NaN."""
        self.assertEqual(cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]), 0.0)
        self.assertEqual(cosine_similarity([0.0, 0.0], [0.0, 0.0]), 0.0)

    def test_known_value(self):
        """Проверка известного значения косинусного сходства."""
        # Векторы под углом 60 градусов: cos(60°) ≈ 0.5
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [0.5, 0.866025]), 0.5, places=4)

    def test_returns_python_float(self):
        """Результат - обычный float."""
        self.assertIs(type(cosine_similarity([1.0, 2.0], [2.0, 1.0])), float)

    def test_dimension_mismatch(self):
        """Разные размерности - DimensionMismatchError."""
        with self.assertRaises(DimensionMismatchError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])

    def test_large_magnitude_vectors(self):
        """Огромные компоненты не переполняют норму."""
        score = cosine_similarity([1e200, 1e200], [1e200, 1e200])
        self.assertTrue(math.isfinite(score))
        self.assertAlmostEqual(score, 1.0, places=9)
        self.assertAlmostEqual(cosine_similarity([1e300, 0.0], [0.0, 1e300]), 0.0, places=9)

    def test_non_finite_values_score_zero(self):
        """NaN или бесконечность в векторе дают 0."""
        self.assertEqual(cosine_similarity([float("nan"), 1.0], [1.0, 1.0]), 0.0)
        self.assertEqual(cosine_similarity([1.0, 1.0], [float("inf"), 1.0]), 0.0)


class TestRank(unittest.TestCase):
    """Тесты для rank."""

    def test_descending_order(self):
        """Совпадения отсортированы по убыванию оценки."""
        corpus = make_corpus([0.0, 1.0], [1.0, 0.0], [1.0, 1.0], [-1.0, 0.0])

        matches = rank([1.0, 0.0], corpus, k=5)

        self.assertEqual([m.text for m in matches], ["chunk 1", "chunk 2", "chunk 0", "chunk 3"])
        scores = [m.score for m in matches]
        self.assertEqual(scores, sorted(scores, reverse=True))

    def test_respects_k(self):
        """Длина результата равна min(k, размер корпуса)."""
        corpus = make_corpus(*[[1.0, float(i)] for i in range(7)])
        for k in range(0, 10):
            self.assertEqual(len(rank([1.0, 1.0], corpus, k=k)), min(k, len(corpus)))

    def test_default_k_is_five(self):
        """По умолчанию возвращается пять совпадений."""
        corpus = make_corpus(*[[1.0, float(i)] for i in range(8)])
        self.assertEqual(len(rank([1.0, 0.0], corpus)), 5)

    def test_negative_k(self):
        """Отрицательный k даёт пустой результат."""
        self.assertEqual(rank([1.0], make_corpus([1.0]), k=-1), [])

    def test_empty_corpus(self):
        """Пустой корпус - пустой результат."""
        self.assertEqual(rank([1.0, 0.0], [], k=5), [])

    def test_stable_tie_break(self):
        """При равных оценках сохраняется порядок корпуса."""
        corpus = make_corpus([2.0, 0.0], [0.0, 1.0], [1.0, 0.0], [3.0, 0.0], [5.0, 0.0])

        matches = rank([1.0, 0.0], corpus, k=5)

        self.assertEqual([m.fragment.fragment_id for m in matches], [1, 3, 4, 5, 2])
        self.assertTrue(all(m.score == 1.0 for m in matches[:4]))

    def test_idempotent(self):
        """Повторный вызов даёт тот же результат."""
        corpus = make_corpus([0.3, 0.1], [0.2, 0.9], [0.5, 0.5], [0.9, 0.2])
        self.assertEqual(rank([0.4, 0.6], corpus, k=3), rank([0.4, 0.6], corpus, k=3))

    def test_dimension_mismatch_excluded(self):
        """Фрагмент другой размерности исключается и попадает в лог."""
        corpus = make_corpus([1.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0])

        with self.assertLogs('rag.ranker', level='WARNING') as logs:
            matches = rank([1.0, 0.0], corpus, k=5)

        self.assertEqual([m.fragment.fragment_id for m in matches], [1, 3])
        self.assertIn("исключён", logs.output[0])

    def test_zero_vector_scores_zero(self):
        """Нулевой вектор в корпусе получает оценку 0."""
        matches = rank([1.0, 0.0], make_corpus([0.0, 0.0]), k=1)
        self.assertEqual(matches[0].score, 0.0)

    def test_corpus_provider(self):
        """Корпус может быть функцией, возвращающей фрагменты."""
        corpus = make_corpus([1.0, 0.0], [0.0, 1.0])
        matches = rank([0.0, 1.0], lambda: corpus, k=1)
        self.assertEqual(matches[0].text, "chunk 1")

    def test_corpus_generator(self):
        """Корпус может быть однократным итератором."""
        corpus = make_corpus([1.0, 0.0], [0.0, 1.0])
        matches = rank([1.0, 0.0], iter(corpus), k=2)
        self.assertEqual(len(matches), 2)

    def test_ranked_match_shortcuts(self):
        """RankedMatch даёт доступ к источнику и тексту фрагмента."""
        fragment = Fragment(7, "a.md", "text", (1.0,))
        match = RankedMatch(fragment=fragment, score=0.5)
        self.assertEqual(match.source_id, "a.md")
        self.assertEqual(match.text, "text")


if __name__ == "__main__":
    unittest.main(verbosity=2)
