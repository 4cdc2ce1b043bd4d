"""Operator-only diagnostic commands.

    //debug          self-test against the completion API
    //why <text>     translate once and report why it failed (or how much came back)

These are the only paths that surface upstream error detail to the chat.
The API key is only ever reported by length.
"""

from __future__ import annotations

import re

import structlog

from app.services.language.direction import detect_direction
from app.services.llm.base import CompletionClient
from app.services.translation import build_instructions

logger = structlog.get_logger(__name__)

DEBUG_COMMAND = "//debug"
WHY_COMMAND = "//why"

WHY_USAGE = "【WHY】使い方： //why <翻訳したい文章>（改行して本文でもOK）"
MISSING_KEY_REPORT = (
    "【DEBUG】OPENAI_API_KEY が読めていません（未設定）。"
    "環境変数または .env を確認して再起動してください。"
)

_MAX_HINT_LENGTH = 200

# "//why" plus trailing spaces/tabs on the first line, then any leading newlines
_WHY_PREFIX = re.compile(r"^//why[ \t]*\n*")


def is_debug_command(text: str) -> bool:
    return text == DEBUG_COMMAND


def is_why_command(text: str) -> bool:
    return text.startswith(WHY_COMMAND)


def parse_why_body(text: str) -> str:
    """Strip the //why prefix; the body may start on the same or the next line."""
    return _WHY_PREFIX.sub("", text, count=1).strip()


def _truncate(text: str, limit: int = _MAX_HINT_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


async def debug_report(client: CompletionClient, timeout_seconds: float) -> str:
    """One-line connectivity report: key length, upstream status, error hint."""
    key_length = client.api_key_length
    if not key_length:
        return MISSING_KEY_REPORT

    result = await client.probe(timeout_seconds)
    if result.transport_error:
        return (
            f"【DEBUG】OPENAI_API_KEY length={key_length}"
            f" / OpenAI fetch error={result.transport_error}"
        )

    hint = f" / {_truncate(result.error_hint)}" if result.error_hint else ""
    return (
        f"【DEBUG】OPENAI_API_KEY length={key_length}"
        f" / OpenAI status={result.status_code}{hint}"
    )


async def why_report(
    client: CompletionClient,
    text: str,
    timeout_seconds: float,
) -> str:
    """Translate the //why body in one call and report the outcome verbatim."""
    body = parse_why_body(text)
    if not body:
        return WHY_USAGE

    direction = detect_direction(body)
    outcome = await client.complete(
        body,
        build_instructions(direction.target_language),
        timeout_seconds,
    )
    logger.info(
        "why_command_done",
        ok=outcome.ok,
        reason=outcome.reason.value if outcome.reason else None,
    )
    if outcome.ok:
        return f"【WHY】OK / extracted_len={len(outcome.text)}"

    reason = outcome.reason.value if outcome.reason else "unknown"
    detail = outcome.error_detail or outcome.text or "no detail"
    return f"【WHY】fail reason={reason} / detail={_truncate(detail)}"
