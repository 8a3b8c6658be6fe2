"""
Tests for the Animated DF Matrix Codec

Checks matrix re-orientation and the fixed-point, balanced base-128
element encoding that the remote matrix decoder depends on.
"""

import pytest
import sys
import os

import numpy as np

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from df_exporter.rig.matrix_codec import (
    ENCODED_MATRIX_LENGTH,
    compress_matrix,
    encode_element,
    encode_node_frames,
    rotate_matrix,
    symmetric_modulo,
)


IDENTITY = [
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
]


def decode_element(text: str) -> float:
    """Reference decoder for one encoded element."""
    x0, x1, x2 = (ord(c) - 64 for c in text)
    return (x0 + 128 * x1 + 128 * 128 * x2) / 1000.0


class TestRotateMatrix:
    """Test the coordinate convention change."""

    def test_layout(self):
        """Columns become rows, X and Z columns negated."""
        m = [float(i) for i in range(16)]
        assert rotate_matrix(m) == [
            -0.0, 4.0, -8.0, 12.0,
            -1.0, 5.0, -9.0, 13.0,
            -2.0, 6.0, -10.0, 14.0,
            -3.0, 7.0, -11.0, 15.0,
        ]

    def test_per_element_formula(self):
        """out[4r+c] follows the documented per-row formula."""
        m = list(np.random.default_rng(1).uniform(-10, 10, 16))
        out = rotate_matrix(m)
        for r in range(4):
            assert out[4 * r + 0] == -m[r]
            assert out[4 * r + 1] == m[4 + r]
            assert out[4 * r + 2] == -m[8 + r]
            assert out[4 * r + 3] == m[12 + r]

    def test_applied_twice(self):
        """Applying twice restores every magnitude; signs flip where exactly one of row/column is X or Z."""
        m = np.random.default_rng(2).uniform(-5, 5, 16)
        twice = np.array(rotate_matrix(rotate_matrix(list(m))))
        signs = np.array([-1.0, 1.0, -1.0, 1.0])
        expected = (m.reshape(4, 4) * np.outer(signs, signs)).reshape(16)
        assert np.allclose(np.abs(twice), np.abs(m))
        assert np.allclose(twice, expected)

    def test_identity_translation_untouched(self):
        """Translation and Y survive unchanged."""
        m = list(IDENTITY)
        m[12], m[13], m[14] = 1.5, -2.0, 3.25
        out = rotate_matrix(m)
        assert out[3] == 1.5
        assert out[7] == -2.0
        assert out[11] == 3.25
        assert out[5] == 1.0

    def test_wrong_size(self):
        """Matrices must have 16 elements."""
        with pytest.raises(ValueError):
            rotate_matrix([1.0, 2.0, 3.0])


class TestSymmetricModulo:
    """Test the balanced remainder."""

    @pytest.mark.parametrize("n,expected", [
        (0, 0),
        (63, 63),
        (64, -64),
        (-64, -64),
        (-65, 63),
        (128, 0),
        (200, -56),
        (-200, 56),
    ])
    def test_values(self, n, expected):
        assert symmetric_modulo(n, 128) == expected

    def test_array(self):
        """Vectorized form matches the scalar form."""
        values = np.arange(-300, 300, dtype=np.int64)
        result = symmetric_modulo(values, 128)
        assert list(result) == [symmetric_modulo(int(v), 128) for v in values]
        assert result.min() >= -64
        assert result.max() < 64


class TestEncodeElement:
    """Test single element encoding."""

    def test_zero(self):
        assert encode_element(0.0) == '@@@'

    def test_small_values(self):
        assert encode_element(0.001) == 'A@@'
        assert encode_element(-0.001) == '?@@'

    def test_one(self):
        """1000 = -24 + 8 * 128."""
        assert encode_element(1.0) == chr(40) + chr(72) + chr(64)

    def test_always_three_printable_chars(self):
        for value in np.random.default_rng(3).uniform(-500, 500, 200):
            text = encode_element(float(value))
            assert len(text) == 3
            assert all(0 <= ord(c) <= 127 for c in text)

    def test_decodes_to_millesimal_value(self):
        for value in np.random.default_rng(4).uniform(-500, 500, 200):
            assert abs(decode_element(encode_element(float(value))) - value) <= 0.0005 + 1e-9


class TestCompressMatrix:
    """Test whole matrix encoding."""

    def test_length(self):
        assert len(compress_matrix(IDENTITY)) == ENCODED_MATRIX_LENGTH == 48

    def test_matches_per_element_encoding(self):
        m = list(np.random.default_rng(5).uniform(-20, 20, 16))
        encoded = compress_matrix(m)
        assert encoded == ''.join(encode_element(v) for v in m)

    def test_decodes_every_element(self):
        m = list(np.random.default_rng(6).uniform(-100, 100, 16))
        encoded = compress_matrix(m)
        for i, value in enumerate(m):
            assert abs(decode_element(encoded[3 * i:3 * i + 3]) - value) <= 0.0005 + 1e-9

    def test_node_frames_concatenate(self):
        """Frames are re-oriented, encoded and joined in order."""
        frames = [IDENTITY, [float(i) for i in range(16)]]
        blob = encode_node_frames(frames)
        assert len(blob) == 2 * ENCODED_MATRIX_LENGTH
        assert blob[:48] == compress_matrix(rotate_matrix(IDENTITY))
        assert blob[48:] == compress_matrix(rotate_matrix(frames[1]))
