"""
Block-level parser for Server-Sent Events (SSE).
Splits decoded text on the blank-line separator and extracts the data field of each block.
"""

from __future__ import annotations

BLOCK_SEPARATOR = "\n\n"
DATA_FIELD = "data:"


def normalize_newlines(text: str) -> str:
    """Collapse CRLF pairs into LF so blocks split on a single separator."""
    return text.replace("\r\n", "\n")


def split_blocks(buffer: str) -> tuple[list[str], str]:
    """
    Split buffered text into terminated blocks and the unterminated residue.

    Args:
        buffer: Decoded text accumulated so far.

    Returns:
        A tuple with the complete blocks, in order, and the trailing piece that
        has not seen its separator yet (possibly empty).
    """
    pieces = buffer.split(BLOCK_SEPARATOR)
    residue = pieces.pop()
    return pieces, residue


def extract_data(block: str) -> str | None:
    """
    Join the values of all 'data:' lines of a block.

    Both 'data: value' and 'data:value' are accepted; a single leading space is
    removed. Blank lines and ':' comments are skipped and any other field label
    (event:, id:, retry:) is ignored.

    Returns:
        The values joined with newlines, or None when the block has no data line.
    """
    data_lines: list[str] = []
    for line in block.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if not line or line.startswith(":"):
            continue
        if not line.startswith(DATA_FIELD):
            continue
        value = line[len(DATA_FIELD):]
        if value.startswith(" "):
            value = value[1:]
        data_lines.append(value)

    if not data_lines:
        return None
    return "\n".join(data_lines)
