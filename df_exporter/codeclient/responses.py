"""
CodeClient response classification.

CodeClient answers commands with loosely structured messages: plain text,
or JSON with the interesting text somewhere inside. Every string found is a
candidate response and is matched against known rejection markers.
"""

import json
from typing import Any, Iterator, List, Optional, Tuple

MARKER_NOT_CREATIVE = 'not creative mode'
MARKER_UNAUTHED = 'unauthed'
MARKER_INVALID_NBT = 'invalid nbt'

REJECTION_REASONS = {
    MARKER_NOT_CREATIVE: 'CodeClient rejected the `give` command because you are not in creative mode.',
    MARKER_UNAUTHED: 'CodeClient rejected the `give` command due to insufficient API scopes (received `unauthed`).',
    MARKER_INVALID_NBT: 'CodeClient rejected the `give` command due to invalid NBT data.',
}


def iter_strings(value: Any) -> Iterator[str]:
    """Yield every string leaf of a decoded JSON value (keys excluded)."""
    if isinstance(value, str):
        yield value
    elif isinstance(value, list):
        for item in value:
            yield from iter_strings(item)
    elif isinstance(value, dict):
        for child in value.values():
            yield from iter_strings(child)


def decode_message(data: Any) -> Optional[str]:
    """Text content of a socket message, or None if it carries none."""
    if isinstance(data, str):
        return data
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data).decode('utf-8', errors='replace')
    return None


def extract_message_texts(data: Any) -> List[str]:
    """
    Candidate response texts of one message.

    The raw text always comes first, followed by the string leaves when
    the text is JSON.
    """
    raw = decode_message(data)
    if not raw:
        return []

    texts = [raw]
    try:
        parsed = json.loads(raw)
    except ValueError:
        return texts
    texts.extend(iter_strings(parsed))
    return texts


def classify_response(text: str) -> Optional[str]:
    """Return the rejection marker a response text matches, if any."""
    normalized = text.strip().lower()

    if MARKER_NOT_CREATIVE in normalized or (
        'creative mode' in normalized and ('not ' in normalized or 'must be' in normalized)
    ):
        return MARKER_NOT_CREATIVE
    if MARKER_UNAUTHED in normalized:
        return MARKER_UNAUTHED
    if MARKER_INVALID_NBT in normalized:
        return MARKER_INVALID_NBT
    return None


def first_rejection(texts) -> Optional[Tuple[str, str]]:
    """(marker, reason) of the first rejected text, or None."""
    for text in texts:
        marker = classify_response(text)
        if marker:
            return marker, REJECTION_REASONS[marker]
    return None


__all__ = [
    'MARKER_NOT_CREATIVE',
    'MARKER_UNAUTHED',
    'MARKER_INVALID_NBT',
    'REJECTION_REASONS',
    'iter_strings',
    'decode_message',
    'extract_message_texts',
    'classify_response',
    'first_rejection',
]
