"""
RAG (Retrieval-Augmented Generation) модуль.

Компоненты:
    - chunker: Разбиение текста на перекрывающиеся фрагменты
    - embeddings: Генерация эмбедингов через внешний сервис
    - store: Append-only векторное хранилище
    - ranker: Ранжирование фрагментов по косинусному сходству
    - context: Сборка контекста для генерации
    - pipeline: Пайплайны индексации и поиска
    - extractor: Чтение текстовых документов
"""

from .chunker import chunk_text, ConfigurationError
from .embeddings import EmbeddingConfig, EmbeddingGenerator, EmbeddingFailure
from .store import Fragment, SQLiteVectorStore, InMemoryVectorStore, StoreUnavailableError
from .ranker import RankedMatch, cosine_similarity, rank
from .context import assemble_context
from .pipeline import ingest_document, retrieve, build_query_context, QueryEmbeddingError

__all__ = [
    "chunk_text",
    "ConfigurationError",
    "EmbeddingConfig",
    "EmbeddingGenerator",
    "EmbeddingFailure",
    "Fragment",
    "SQLiteVectorStore",
    "InMemoryVectorStore",
    "StoreUnavailableError",
    "RankedMatch",
    "cosine_similarity",
    "rank",
    "assemble_context",
    "ingest_document",
    "retrieve",
    "build_query_context",
    "QueryEmbeddingError",
]
