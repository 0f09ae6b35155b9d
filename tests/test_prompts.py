"""
Тесты для промптов генерации.
"""

import sys
import os

# Добавляем путь к src для импорта
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from prompts import SYSTEM_PROMPT, build_user_prompt, build_messages


def test_user_prompt_without_context():
    """Без контекста промпт - исходный вопрос."""
    assert build_user_prompt("What is RAG?", "") == "What is RAG?"


def test_user_prompt_with_context():
    """С контекстом вопрос идёт после блока контекста."""
    prompt = build_user_prompt("What is RAG?", "📄 **From file: a.txt**\n\nRAG is...")

    assert prompt == (
        "You're given relevant context from user files:\n\n"
        "📄 **From file: a.txt**\n\nRAG is...\n\n"
        "Now answer:\nWhat is RAG?"
    )


def test_build_messages():
    """Системное и пользовательское сообщения."""
    messages = build_messages("Hi", "")

    assert messages == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Hi"},
    ]


def test_context_with_braces_is_not_formatted():
    """Фигурные скобки в контексте не ломают шаблон."""
    prompt = build_user_prompt("q", "{not a field}")
    assert "{not a field}" in prompt
