"""Defensive text extraction from completion API responses.

The provider returns the answer under different paths depending on API
version and call variant. Extraction is a prioritized list of strategies
over the decoded JSON value, not fixed field access:

    1. top-level ``output_text`` (SDK-style convenience field), wins outright
    2. ``output[]`` items: the item's ``output_text``, then each ``content[]``
       entry's first hit among CONTENT_TEXT_PATHS
    3. ``choices[].message.content`` (chat-completions shape)

Strategies 2 and 3 are concatenated, newline-joined.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

# Tried in order per content entry; first non-blank string wins.
CONTENT_TEXT_PATHS: tuple[tuple[str, ...], ...] = (
    ("text",),
    ("text", "value"),
    ("text", "content"),
    ("output_text",),
    ("value",),
)


def _dig(value: Any, path: Iterable[str]) -> Any:
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _top_level_text(payload: dict[str, Any]) -> list[str]:
    text = _clean(payload.get("output_text"))
    return [text] if text else []


def _output_items_text(payload: dict[str, Any]) -> list[str]:
    output = payload.get("output")
    if not isinstance(output, list):
        return []

    texts: list[str] = []
    for item in output:
        if not isinstance(item, dict):
            continue
        item_text = _clean(item.get("output_text"))
        if item_text:
            texts.append(item_text)

        content = item.get("content")
        if not isinstance(content, list):
            continue
        for entry in content:
            for path in CONTENT_TEXT_PATHS:
                found = _clean(_dig(entry, path))
                if found:
                    texts.append(found)
                    break
    return texts


def _chat_choices_text(payload: dict[str, Any]) -> list[str]:
    choices = payload.get("choices")
    if not isinstance(choices, list):
        return []

    texts: list[str] = []
    for choice in choices:
        content = _dig(choice, ("message", "content"))
        if isinstance(content, list):
            # content parts: [{"type": "text", "text": "..."}]
            for part in content:
                found = _clean(_dig(part, ("text",)))
                if found:
                    texts.append(found)
            continue
        found = _clean(content)
        if found:
            texts.append(found)
    return texts


Strategy = Callable[[dict[str, Any]], list[str]]

EXCLUSIVE_STRATEGIES: tuple[Strategy, ...] = (_top_level_text,)
COLLECTING_STRATEGIES: tuple[Strategy, ...] = (_output_items_text, _chat_choices_text)


def extract_output_text(payload: Any) -> str:
    """Return the translated text found in ``payload``, or "" if none.

    Exclusive strategies short-circuit on the first hit; collecting
    strategies all run and their results are joined in order.
    """
    if not isinstance(payload, dict):
        return ""

    for strategy in EXCLUSIVE_STRATEGIES:
        found = strategy(payload)
        if found:
            return "\n".join(found).strip()

    texts: list[str] = []
    for strategy in COLLECTING_STRATEGIES:
        texts.extend(strategy(payload))
    return "\n".join(texts).strip()


def extract_error_message(payload: Any) -> str:
    """Pull ``error.message`` out of an error body, or "" if absent."""
    message = _dig(payload, ("error", "message"))
    return str(message) if message else ""
