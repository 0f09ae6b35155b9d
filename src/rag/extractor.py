"""
Модуль извлечения текста из файлов.

Поддерживаются только текстовые форматы; извлечение текста
из бинарных документов (PDF и т.п.) выполняется вне этой системы.
"""

import os

SUPPORTED_EXTENSIONS = [".txt", ".md"]


def extract_text(file_path: str) -> str:
    """
    Чтение текста документа.

    Args:
        file_path: Путь к файлу

    Returns:
        Текстовое содержимое файла

    Raises:
        ExtractionError: Если формат не поддерживается или файл не читается
    """
    ext = os.path.splitext(file_path)[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise ExtractionError(f"Неподдерживаемый тип файла: {ext or file_path}")

    try:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except UnicodeDecodeError:
            with open(file_path, 'r', encoding='latin-1') as f:
                return f.read()
    except OSError as e:
        raise ExtractionError(f"Не удалось прочитать файл {file_path}: {e}")


class ExtractionError(Exception):
    """Документ не поддерживается или не читается."""
    pass
