"""
Tests for CodeClient response classification
"""

import json
import pytest
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from df_exporter.codeclient.responses import (
    MARKER_INVALID_NBT,
    MARKER_NOT_CREATIVE,
    MARKER_UNAUTHED,
    REJECTION_REASONS,
    classify_response,
    extract_message_texts,
    first_rejection,
    iter_strings,
)


class TestExtraction:
    """Test pulling candidate texts out of messages."""

    def test_plain_text(self):
        assert extract_message_texts('hello') == ['hello']

    def test_bytes(self):
        assert extract_message_texts(b'not creative mode') == ['not creative mode']
        assert extract_message_texts(bytearray(b'abc')) == ['abc']

    def test_empty_and_unknown(self):
        assert extract_message_texts('') == []
        assert extract_message_texts(None) == []
        assert extract_message_texts(42) == []

    def test_json_leaves_after_raw_text(self):
        raw = json.dumps({'type': 'error', 'detail': {'messages': ['a', {'x': 'b'}], 'code': 3}})
        assert extract_message_texts(raw) == [raw, 'error', 'a', 'b']

    def test_keys_ignored(self):
        assert list(iter_strings({'invalid nbt': 1})) == []

    def test_json_scalar_string(self):
        assert extract_message_texts('"unauthed"') == ['"unauthed"', 'unauthed']


class TestClassification:
    """Test matching against rejection markers."""

    @pytest.mark.parametrize("text,marker", [
        ('not creative mode', MARKER_NOT_CREATIVE),
        ('Error: NOT CREATIVE MODE!', MARKER_NOT_CREATIVE),
        ('You must be in creative mode', MARKER_NOT_CREATIVE),
        ('player is not in creative mode', MARKER_NOT_CREATIVE),
        ('unauthed', MARKER_UNAUTHED),
        ('Unauthed: missing scope', MARKER_UNAUTHED),
        ('Invalid NBT data', MARKER_INVALID_NBT),
    ])
    def test_markers(self, text, marker):
        assert classify_response(text) == marker

    @pytest.mark.parametrize("text", ['ok', 'creative mode enabled', 'given 1 item', ''])
    def test_accepted(self, text):
        assert classify_response(text) is None

    def test_first_rejection_wins(self):
        result = first_rejection(['ok', 'unauthed', 'not creative mode'])
        assert result == (MARKER_UNAUTHED, REJECTION_REASONS[MARKER_UNAUTHED])

    def test_no_rejection(self):
        assert first_rejection(['fine', 'also fine']) is None
