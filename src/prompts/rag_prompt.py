"""
Промпты для генерации ответа с контекстом из документов.

Содержит:
- Системный промпт ассистента
- Сборку пользовательского промпта с контекстом или без него
"""

from typing import Dict, List

SYSTEM_PROMPT = (
    "You are a helpful AI assistant who answers clearly and uses Markdown formatting. "
    "If context is provided, use it. Otherwise answer independently."
)

CONTEXT_PROMPT_TEMPLATE = (
    "You're given relevant context from user files:\n\n"
    "{context}\n\n"
    "Now answer:\n"
    "{question}"
)


def build_user_prompt(question: str, context: str) -> str:
    """
    Сборка пользовательского промпта.

    Args:
        question: Вопрос пользователя
        context: Собранный контекст (пустая строка - контекста нет)

    Returns:
        Промпт с контекстом или исходный вопрос без изменений
    """
    if not context:
        return question
    return CONTEXT_PROMPT_TEMPLATE.format(context=context, question=question)


def build_messages(question: str, context: str) -> List[Dict[str, str]]:
    """
    Сообщения для chat-формы вызова: системное и пользовательское.
    """
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_user_prompt(question, context)},
    ]
