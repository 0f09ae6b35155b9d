"""
Модуль векторного хранилища.

Отвечает за:
- Append-only хранение фрагментов (источник, текст, эмбединг)
- Полное чтение всех фрагментов для ранжирования
- Каноническую сериализацию векторов

Формат вектора в хранилище: JSON-массив чисел. json.dumps пишет float
через repr (кратчайшее представление, однозначно восстанавливающее
double), поэтому запись и чтение дают побитово тот же вектор.

Изоляция: запись каждого фрагмента атомарна, а параллельный scan_all
может как увидеть, так и не увидеть фрагмент, добавляемый в тот же
момент. Снимков (snapshot isolation) нет.
"""

import json
import logging
import math
import numbers
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fragment:
    """Фрагмент документа с эмбедингом."""
    fragment_id: int
    source_id: str
    text: str
    embedding: Tuple[float, ...]

    @property
    def dimension(self) -> int:
        return len(self.embedding)


def serialize_embedding(embedding: Sequence[float]) -> str:
    """
    Сериализация вектора в текст.

    Args:
        embedding: Вектор эмбединга

    Returns:
        JSON-массив чисел

    Raises:
        ValueError: Если вектор пуст или содержит нечисловые/неконечные значения
    """
    values = _validate_vector(embedding)
    return json.dumps(values)


def deserialize_embedding(raw: str) -> Tuple[float, ...]:
    """
    Восстановление вектора из текста.

    Raises:
        ValueError: Если текст не является корректным массивом чисел
    """
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"Некорректный JSON вектора: {e}")
    if not isinstance(data, list):
        raise ValueError("Вектор должен быть JSON-массивом")
    return tuple(_validate_vector(data))


def _validate_vector(values: Sequence) -> List[float]:
    if len(values) == 0:
        raise ValueError("Вектор не может быть пустым")
    result = []
    for x in values:
        if isinstance(x, bool) or not isinstance(x, numbers.Real):
            raise ValueError(f"Нечисловое значение в векторе: {x!r}")
        x = float(x)
        if not math.isfinite(x):
            raise ValueError(f"Неконечное значение в векторе: {x!r}")
        result.append(x)
    return result


class BaseVectorStore(ABC):
    """
    Базовый интерфейс векторного хранилища.

    Хранилище только добавляет фрагменты: обновление и удаление
    не предусмотрены.
    """

    @abstractmethod
    def append(self, source_id: str, text: str, embedding: Sequence[float]) -> int:
        """
        Добавление фрагмента.

        Returns:
            Идентификатор фрагмента (монотонно растущий номер)

        Raises:
            StoreUnavailableError: Если запись не удалась
        """
        pass

    @abstractmethod
    def scan_all(self) -> List[Fragment]:
        """
        Чтение всех фрагментов в порядке добавления.

        Raises:
            StoreUnavailableError: Если чтение не удалось
        """
        pass

    def count(self) -> int:
        """Количество фрагментов в хранилище, пригодных для ранжирования."""
        return len(self.scan_all())

    def list_sources(self) -> List[str]:
        """Список источников в порядке первого появления."""
        seen = {}
        for fragment in self.scan_all():
            seen.setdefault(fragment.source_id, None)
        return list(seen)


class SQLiteVectorStore(BaseVectorStore):
    """
    Векторное хранилище на SQLite.

    Обеспечивает:
    - Одну append-only таблицу fragments
    - Транзакцию на каждый фрагмент (частичная запись не видна)
    - Сериализацию записей через блокировку
    """

    def __init__(self, db_path: str) -> None:
        """
        Инициализация хранилища.

        Args:
            db_path: Путь к файлу базы или ":memory:"

        Raises:
            StoreUnavailableError: Если базу не удалось открыть
        """
        self._db_path = db_path
        self._lock = threading.Lock()

        if db_path != ":memory:":
            dir_path = os.path.dirname(db_path)
            if dir_path:
                os.makedirs(dir_path, exist_ok=True)

        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            with self._conn:
                self._conn.execute("""
                    CREATE TABLE IF NOT EXISTS fragments (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        source_id TEXT NOT NULL,
                        text TEXT NOT NULL,
                        embedding TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Не удалось открыть хранилище {db_path}: {e}")

        logger.debug("Хранилище открыто: %s", db_path)

    def append(self, source_id: str, text: str, embedding: Sequence[float]) -> int:
        serialized = serialize_embedding(embedding)
        with self._lock:
            try:
                # Контекст соединения откатывает транзакцию при ошибке
                with self._conn:
                    cursor = self._conn.execute(
                        "INSERT INTO fragments (source_id, text, embedding) VALUES (?, ?, ?)",
                        (source_id, text, serialized)
                    )
                    return cursor.lastrowid
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Ошибка записи фрагмента: {e}")

    def scan_all(self) -> List[Fragment]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT id, source_id, text, embedding FROM fragments ORDER BY id"
                ).fetchall()
            except sqlite3.Error as e:
                raise StoreUnavailableError(f"Ошибка чтения хранилища: {e}")

        fragments = []
        for fragment_id, source_id, text, raw_embedding in rows:
            try:
                embedding = deserialize_embedding(raw_embedding)
            except ValueError as e:
                logger.warning("Фрагмент %s пропущен: %s", fragment_id, e)
                continue
            fragments.append(Fragment(fragment_id, source_id, text, embedding))
        return fragments

    def close(self) -> None:
        """Закрытие соединения с базой."""
        with self._lock:
            self._conn.close()


class InMemoryVectorStore(BaseVectorStore):
    """Хранилище в памяти с тем же контрактом (для тестов и экспериментов)."""

    def __init__(self) -> None:
        self._fragments: List[Fragment] = []
        self._next_id = 1
        self._lock = threading.Lock()

    def append(self, source_id: str, text: str, embedding: Sequence[float]) -> int:
        vector = tuple(_validate_vector(embedding))
        with self._lock:
            fragment = Fragment(self._next_id, source_id, text, vector)
            self._fragments.append(fragment)
            self._next_id += 1
            return fragment.fragment_id

    def scan_all(self) -> List[Fragment]:
        with self._lock:
            return list(self._fragments)


class StoreError(Exception):
    """Базовый класс ошибок хранилища."""
    pass


class StoreUnavailableError(StoreError):
    """Хранилище недоступно для записи или чтения."""
    pass
