"""
Модуль промптов для LLM.

Содержит:
    - SYSTEM_PROMPT: Системный промпт ассистента
    - build_user_prompt(): Промпт с контекстом из документов или без него
    - build_messages(): Сообщения для chat-формы вызова
"""

from .rag_prompt import (
    SYSTEM_PROMPT,
    build_user_prompt,
    build_messages,
)

__all__ = [
    "SYSTEM_PROMPT",
    "build_user_prompt",
    "build_messages",
]
