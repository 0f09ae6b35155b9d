"""
Главный модуль приложения DocQA.

Содержит точку входа и консольный интерфейс: загрузка документов
в векторное хранилище и ответы на вопросы с контекстом из них.
"""

import os
import sys
import logging
from typing import Optional, Any, Dict

import yaml

from llm_client import OllamaGenerationClient, GenerationError, CALL_SHAPES
from rag import EmbeddingConfig, EmbeddingGenerator, SQLiteVectorStore
from rag.chunker import ConfigurationError, validate_chunking
from rag.extractor import ExtractionError, extract_text
from rag.pipeline import QueryEmbeddingError, QueryResult, build_query_context, ingest_document
from rag.store import StoreUnavailableError
from prompts import build_messages, build_user_prompt

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(BASE_DIR, 'config', 'rag_config.yaml')

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> dict:
    """
    Загрузка конфигурации из YAML файла.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Словарь с конфигурацией (пустой для пустого файла)

    Raises:
        FileNotFoundError: Если файл не найден
        yaml.YAMLError: Если ошибка парсинга YAML
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def setup_logging(level: str = "INFO") -> None:
    """Настройка логирования для всего приложения."""
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class RagAssistant:
    """
    Консольный ассистент с поиском по загруженным документам.

    Координирует работу компонентов:
    - Генератор эмбедингов для фрагментов и запросов
    - Векторное хранилище на SQLite
    - Клиент генерации ответа
    """

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH) -> None:
        """
        Инициализация ассистента.

        Args:
            config_path: Путь к YAML конфигурации

        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ConfigurationError: При недопустимых параметрах нарезки
            StoreUnavailableError: Если хранилище не открывается
        """
        self._config = load_config(config_path)
        setup_logging(self._config.get('logging', {}).get('level', 'INFO'))

        emb_cfg = self._config.get('embedding_model', {})
        self._embedding_model = emb_cfg.get('model_name', 'llama3')
        self._embedding_generator = EmbeddingGenerator(EmbeddingConfig(
            host=emb_cfg.get('host', 'localhost'),
            port=emb_cfg.get('port', 11434),
            model_name=self._embedding_model,
            endpoint=emb_cfg.get('endpoint', '/api/embeddings'),
            timeout=emb_cfg.get('timeout', 30)
        ))

        chat_cfg = self._config.get('chat_model', {})
        self._chat_model = chat_cfg.get('model_name', 'llama3')
        self._call_shape = chat_cfg.get('call_shape', 'chat')
        if self._call_shape not in CALL_SHAPES:
            raise ConfigurationError(f"Неизвестная форма вызова генерации: {self._call_shape}")
        self._generation_options: Dict[str, Any] = chat_cfg.get('options', {})
        self._generation_client = OllamaGenerationClient(
            host=chat_cfg.get('host', 'localhost'),
            port=chat_cfg.get('port', 11434),
            timeout=chat_cfg.get('timeout', 120)
        )

        chunk_cfg = self._config.get('chunking', {})
        self._chunk_size = chunk_cfg.get('chunk_size', 300)
        self._overlap = chunk_cfg.get('overlap', 50)
        validate_chunking(self._chunk_size, self._overlap)

        self._max_workers = self._config.get('ingestion', {}).get('max_workers', 1)
        self._top_k = self._config.get('retrieval', {}).get('top_k', 5)

        db_path = self._config.get('storage', {}).get('db_path', 'data/vectorDB.sqlite')
        if db_path != ':memory:' and not os.path.isabs(db_path):
            db_path = os.path.join(BASE_DIR, db_path)
        self._store = SQLiteVectorStore(db_path)

    def start(self) -> None:
        """
        Запуск консольного интерфейса.

        Действия:
        - Вывести приветственное сообщение
        - Запустить главный цикл обработки ввода
        """
        self.print_welcome()

        while True:
            try:
                user_input = input("\n> ").strip()

                if not user_input:
                    continue

                response = self.process_input(user_input)

                if response:
                    print(f"\nAssistant: {response}")

            except KeyboardInterrupt:
                print("\n\nВыход из программы...")
                break
            except Exception as e:
                logger.exception("Необработанная ошибка")
                print(f"\nОшибка: {e}")

    def process_input(self, user_input: str) -> Optional[str]:
        """
        Обработка ввода пользователя.

        Args:
            user_input: Текст, введенный пользователем

        Returns:
            Ответ ассистента или None для команд без ответа
        """
        if user_input.startswith('/'):
            return self.handle_command(user_input)

        return self.ask(user_input)

    def handle_command(self, command: str) -> Optional[str]:
        """
        Обработка команд пользователя.

        Поддерживаемые команды:
        - /upload <path> [source_id] - загрузка документа
        - /sources - список загруженных документов
        - /help - показать справку по командам
        - /exit или /quit - выход из программы
        """
        parts = command.split()
        cmd = parts[0].lower()
        args = parts[1:]

        if cmd == '/upload':
            if not args:
                return "Использование: /upload <path> [source_id]"
            source_id = args[1] if len(args) > 1 else None
            return self.upload(args[0], source_id)
        elif cmd == '/sources':
            return self._describe_store()
        elif cmd == '/help':
            self.print_help()
            return None
        elif cmd in ['/exit', '/quit']:
            print("До свидания!")
            sys.exit(0)
        else:
            return f"Неизвестная команда: {cmd}. Введите /help для справки."

    def upload(self, file_path: str, source_id: Optional[str] = None) -> str:
        """
        Загрузка документа в хранилище.

        Args:
            file_path: Путь к .txt или .md файлу
            source_id: Идентификатор документа (по умолчанию имя файла)

        Returns:
            Отчёт о количестве записанных фрагментов или сообщение об ошибке
        """
        source_id = source_id or os.path.basename(file_path)
        try:
            text = extract_text(file_path)
            result = ingest_document(
                source_id, text, self._embedding_model,
                self._embedding_generator, self._store,
                chunk_size=self._chunk_size,
                overlap=self._overlap,
                max_workers=self._max_workers
            )
        except (ExtractionError, StoreUnavailableError) as e:
            return f"Ошибка загрузки: {e}"

        report = (f"Документ {source_id} загружен.\n"
                  f"Фрагментов: {result.total_chunks}\n"
                  f"Записано: {result.fragments_written}")
        if result.failed_chunks:
            report += f"\nПропущено: {len(result.failed_chunks)}"
        return report

    def ask(self, question: str) -> str:
        """
        Ответ на вопрос с контекстом из загруженных документов.

        Действия:
        - Найти релевантные фрагменты и собрать контекст
        - Собрать промпт (без контекста, если ничего не найдено)
        - Вызвать модель генерации в настроенной форме
        """
        try:
            query_result = build_query_context(
                question, self._embedding_model,
                self._embedding_generator, self._store,
                k=self._top_k,
                generation_model=self._chat_model
            )
        except (QueryEmbeddingError, StoreUnavailableError) as e:
            return f"Ошибка поиска: {e}"

        for match in query_result.matches:
            logger.debug("%.4f %s: %r", match.score, match.source_id, match.text[:60])

        try:
            return self._generate_reply(question, query_result)
        except GenerationError as e:
            return f"Ошибка генерации: {e}"

    def _generate_reply(self, question: str, query_result: QueryResult) -> str:
        """Вызов модели генерации в форме chat или generate."""
        model = query_result.generation_model or self._chat_model
        if self._call_shape == 'generate':
            prompt = build_user_prompt(question, query_result.context)
            return self._generation_client.generate(model, prompt, self._generation_options)

        messages = build_messages(question, query_result.context)
        return self._generation_client.chat(model, messages, self._generation_options)

    def _describe_store(self) -> str:
        """Статистика хранилища."""
        try:
            sources = self._store.list_sources()
            total = self._store.count()
        except StoreUnavailableError as e:
            return f"Ошибка хранилища: {e}"

        if not sources:
            return "Хранилище пусто. Загрузите документ командой /upload <path>"

        lines = [f"Фрагментов: {total}", "Документы:"]
        lines.extend(f"  - {source}" for source in sources)
        return "\n".join(lines)

    def print_welcome(self) -> None:
        """Вывод приветственного сообщения."""
        print("""
╔════════════════════════════════════════════════╗
║         DOCQA v1.0                             ║
║     Ответы на вопросы по вашим документам      ║
╚════════════════════════════════════════════════╝

Доступные команды:
  /upload <path> [id]  - Загрузить документ
  /sources             - Список документов
  /help                - Показать справку
  /exit                - Выход
    """)

    def print_help(self) -> None:
        """Вывод справки по командам."""
        print("""
Справка по командам:

  /upload <path> [source_id]
    Загружает .txt или .md файл: текст разбивается на фрагменты,
    для каждого фрагмента сохраняется эмбединг

  /sources
    Показывает количество фрагментов и список документов

  /help
    Показывает эту справку

  /exit или /quit
    Завершает работу программы

Любой другой ввод считается вопросом: ответ строится
с учетом наиболее релевантных фрагментов документов.
    """)


def main() -> None:
    """
    Точка входа в приложение.

    Действия:
    - Создать экземпляр RagAssistant
    - Запустить консольный интерфейс
    - Обработать исключения верхнего уровня
    """
    config_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    try:
        assistant = RagAssistant(config_path)
        assistant.start()
    except FileNotFoundError as e:
        print(f"Ошибка: не найден файл конфигурации - {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Критическая ошибка: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
