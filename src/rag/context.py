"""
Модуль сборки контекста для генерации.

Группирует найденные фрагменты по источникам и оформляет их
в единый блок текста для промпта.
"""

from typing import Dict, List, Sequence

from .ranker import RankedMatch

FRAGMENT_DELIMITER = "\n\n---\n\n"
GROUP_DELIMITER = "\n\n"


def format_source_header(source_id: str) -> str:
    return f"📄 **From file: {source_id}**"


def assemble_context(matches: Sequence[RankedMatch]) -> str:
    """
    Сборка контекста из ранжированных совпадений.

    Args:
        matches: Совпадения по убыванию релевантности

    Returns:
        Текст контекста; пустая строка, если совпадений нет

    Формат:
    📄 **From file: a.txt**

    <фрагмент 1>

    ---

    <фрагмент 2>

    📄 **From file: b.txt**
    ...

    Источники идут в порядке первого появления в ранжировании,
    фрагменты внутри источника - в порядке ранжирования.
    """
    if not matches:
        return ""

    # dict сохраняет порядок вставки
    grouped: Dict[str, List[str]] = {}
    for match in matches:
        grouped.setdefault(match.source_id, []).append(match.text)

    blocks = [
        f"{format_source_header(source_id)}\n\n{FRAGMENT_DELIMITER.join(texts)}"
        for source_id, texts in grouped.items()
    ]
    return GROUP_DELIMITER.join(blocks)
