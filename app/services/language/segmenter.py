"""Message segmentation for long translation requests.

Lines are packed into chunks up to ``max_length`` characters. A line that
is longer than ``max_length`` on its own is hard-sliced into fixed windows
with no word-boundary awareness. Whitespace-only lines are dropped when
they end up alone in a flushed buffer.
"""

from __future__ import annotations


def hard_split(text: str, size: int) -> list[str]:
    """Slice text into consecutive windows of at most ``size`` characters."""
    return [text[i : i + size] for i in range(0, len(text), size)]


def split_text(text: str, max_length: int) -> list[str]:
    """Split text into ordered chunks, each at most ``max_length`` long.

    Args:
        text: Message text, already trimmed by the caller.
        max_length: Maximum characters per chunk. Must be positive.

    Returns:
        Non-empty chunks in original order. Text that already fits is
        returned unchanged as a single chunk.

    Raises:
        ValueError: If max_length is not positive.
    """
    if max_length < 1:
        raise ValueError(f"max_length must be positive, got {max_length}")

    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    buffer = ""

    for line in text.split("\n"):
        if len(line) > max_length:
            if buffer.strip():
                chunks.append(buffer.strip())
            buffer = ""
            chunks.extend(hard_split(line, max_length))
            continue

        if len(buffer) + len(line) + 1 > max_length:
            if buffer.strip():
                chunks.append(buffer.strip())
            buffer = line + "\n"
        else:
            buffer += line + "\n"

    if buffer.strip():
        chunks.append(buffer.strip())

    return chunks
