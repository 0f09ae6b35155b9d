"""
Модуль пайплайнов индексации и поиска.

Отвечает за:
- Индексацию одного документа: нарезка -> эмбединги -> хранилище
- Поиск по одному запросу: эмбединг -> полное чтение -> ранжирование
- Сборку контекста для генерации

Пайплайны не хранят состояния между вызовами: хранилище и генератор
эмбедингов передаются явно в каждый вызов.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from .chunker import DEFAULT_CHUNK_SIZE, DEFAULT_OVERLAP, chunk_text
from .context import assemble_context
from .embeddings import EmbeddingFailure
from .ranker import DEFAULT_TOP_K, RankedMatch, rank

if TYPE_CHECKING:
    from .embeddings import EmbeddingGenerator
    from .store import BaseVectorStore

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Результат индексации документа."""
    source_id: str
    total_chunks: int
    fragments_written: int
    failed_chunks: List[int] = field(default_factory=list)


@dataclass
class RetrievalResult:
    """Результат поиска по запросу."""
    query_text: str
    matches: List[RankedMatch]
    total_candidates: int


@dataclass
class QueryResult:
    """Контекст для генерации вместе с совпадениями, из которых он собран."""
    context: str
    matches: List[RankedMatch]
    generation_model: Optional[str] = None

    @property
    def has_context(self) -> bool:
        return bool(self.context)


def ingest_document(source_id: str, raw_text: str, model: Optional[str],
                    embedder: 'EmbeddingGenerator', store: 'BaseVectorStore',
                    chunk_size: int = DEFAULT_CHUNK_SIZE,
                    overlap: int = DEFAULT_OVERLAP,
                    max_workers: int = 1) -> IngestionResult:
    """
    Индексация одного документа.

    Args:
        source_id: Идентификатор документа (например, имя файла)
        raw_text: Извлечённый текст документа
        model: Модель эмбедингов
        embedder: Генератор эмбедингов
        store: Векторное хранилище
        chunk_size: Размер фрагмента
        overlap: Перекрытие фрагментов
        max_workers: Число параллельных запросов к сервису эмбедингов

    Returns:
        IngestionResult с количеством реально записанных фрагментов

    Raises:
        ConfigurationError: При недопустимых параметрах нарезки
        StoreUnavailableError: Если хранилище не приняло запись

    Фрагмент, для которого не удалось получить эмбединг, пропускается,
    индексация остальных продолжается.
    """
    chunks = chunk_text(raw_text, chunk_size, overlap)
    result = IngestionResult(source_id=source_id, total_chunks=len(chunks), fragments_written=0)

    if not chunks:
        logger.info("Документ %s пуст, фрагментов нет", source_id)
        return result

    for index, chunk, embedding in _embed_chunks(chunks, model, embedder, max_workers):
        if isinstance(embedding, EmbeddingFailure):
            logger.warning("Фрагмент %d документа %s пропущен: %s",
                           index, source_id, embedding.reason)
            result.failed_chunks.append(index)
            continue

        try:
            store.append(source_id, chunk, embedding)
        except ValueError as e:
            logger.warning("Фрагмент %d документа %s отклонён: %s", index, source_id, e)
            result.failed_chunks.append(index)
            continue
        result.fragments_written += 1

    logger.info("Документ %s: записано %d из %d фрагментов",
                source_id, result.fragments_written, result.total_chunks)
    return result


def _embed_chunks(chunks: List[str], model: Optional[str],
                  embedder: 'EmbeddingGenerator', max_workers: int):
    """
    Генерация эмбедингов для фрагментов.

    Yields:
        Кортежи (номер, фрагмент, эмбединг или EmbeddingFailure) в порядке фрагментов
    """
    if max_workers <= 1 or len(chunks) == 1:
        for index, chunk in enumerate(chunks):
            yield index, chunk, embedder.generate(chunk, model)
        return

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [executor.submit(embedder.generate, chunk, model) for chunk in chunks]
        for index, (chunk, future) in enumerate(zip(chunks, futures)):
            yield index, chunk, future.result()


def retrieve(query_text: str, model: Optional[str],
             embedder: 'EmbeddingGenerator', store: 'BaseVectorStore',
             k: int = DEFAULT_TOP_K) -> RetrievalResult:
    """
    Поиск фрагментов, релевантных запросу.

    Args:
        query_text: Текст запроса
        model: Модель эмбедингов (должна совпадать с моделью индексации)
        embedder: Генератор эмбедингов
        store: Векторное хранилище
        k: Количество результатов

    Returns:
        RetrievalResult; пустое хранилище даёт пустой список совпадений

    Raises:
        QueryEmbeddingError: Если не удалось получить эмбединг запроса
        StoreUnavailableError: Если хранилище недоступно
    """
    query_embedding = embedder.generate(query_text, model)
    if isinstance(query_embedding, EmbeddingFailure):
        raise QueryEmbeddingError(
            f"Не удалось получить эмбединг запроса: {query_embedding.reason}"
        )

    corpus = store.scan_all()
    matches = rank(query_embedding, corpus, k)

    logger.info("Запрос %r: %d совпадений из %d фрагментов",
                query_text[:50], len(matches), len(corpus))
    return RetrievalResult(query_text=query_text, matches=matches, total_candidates=len(corpus))


def build_query_context(query_text: str, embedding_model: Optional[str],
                        embedder: 'EmbeddingGenerator', store: 'BaseVectorStore',
                        k: int = DEFAULT_TOP_K,
                        generation_model: Optional[str] = None) -> QueryResult:
    """
    Поиск и сборка контекста для одного запроса.

    Returns:
        QueryResult; пустой контекст означает, что генерация идёт без контекста

    Raises:
        QueryEmbeddingError: Если не удалось получить эмбединг запроса
    """
    retrieval = retrieve(query_text, embedding_model, embedder, store, k)
    return QueryResult(
        context=assemble_context(retrieval.matches),
        matches=retrieval.matches,
        generation_model=generation_model
    )


class PipelineError(Exception):
    """Базовый класс ошибок пайплайнов."""
    pass


class QueryEmbeddingError(PipelineError):
    """Не удалось получить эмбединг запроса; поиск прерван."""
    pass
