"""
Fixed-point transform matrix codec.

Each animation sample is a 4x4 matrix. It is re-oriented into the target
coordinate convention and row-major order, then every element is packed into
three printable characters: the millesimal value split into balanced
base-128 digits, each biased by 64.

The remote decoder expects exactly this layout, so SCALE, BASE, DIGITS and
BIAS must not change.
"""

from typing import Iterable, List, Sequence

import numpy as np

SCALE = 1000
BASE = 128
DIGITS = 3
BIAS = 64
MATRIX_SIZE = 16
ENCODED_MATRIX_LENGTH = MATRIX_SIZE * DIGITS

# Sign applied to the X, Y, Z basis and translation columns.
_COLUMN_SIGNS = np.array([-1.0, 1.0, -1.0, 1.0])


def rotate_matrix(matrix: Sequence[float]) -> List[float]:
    """
    Convert a column-major matrix to the target's row-major convention.

    The X and Z basis columns are negated; Y and translation are kept.

    Args:
        matrix: 16 floats, column-major (columns = X, Y, Z, translation)

    Returns:
        16 floats, row-major
    """
    values = np.asarray(matrix, dtype=np.float64)
    if values.size != MATRIX_SIZE:
        raise ValueError(f"Expected {MATRIX_SIZE} matrix elements, got {values.size}")
    # Rows of `columns` are the source columns.
    columns = values.reshape(4, 4)
    return (columns * _COLUMN_SIGNS[:, None]).T.reshape(MATRIX_SIZE).tolist()


def symmetric_modulo(n, m: int = BASE):
    """
    Representative of n mod m in [-m/2, m/2).

    Works on ints and on numpy integer arrays.
    """
    remainder = np.mod(n, m)
    half = m // 2
    if isinstance(remainder, np.ndarray):
        return np.where(remainder >= half, remainder - m, remainder)
    remainder = int(remainder)
    return remainder - m if remainder >= half else remainder


def _to_fixed_point(values: np.ndarray) -> np.ndarray:
    # Half-up rounding, matching the decoder's reference implementation.
    return np.floor(values * SCALE + 0.5).astype(np.int64)


def _digits(fixed: np.ndarray) -> np.ndarray:
    """Split fixed-point values into (x0, x1, x2) columns."""
    x0 = symmetric_modulo(fixed, BASE)
    rest = (fixed - x0) // BASE
    x1 = symmetric_modulo(rest, BASE)
    x2 = (rest - x1) // BASE
    return np.stack([x0, x1, x2], axis=-1)


def _to_text(digits: np.ndarray) -> str:
    # Out-of-range x2 digits wrap like 16-bit char codes instead of raising.
    codes = (digits.reshape(-1) + BIAS) & 0xFFFF
    return ''.join(map(chr, codes.tolist()))


def encode_element(element: float) -> str:
    """Encode one matrix element as three characters."""
    return _to_text(_digits(_to_fixed_point(np.array([element], dtype=np.float64))))


def compress_matrix(matrix: Sequence[float]) -> str:
    """
    Encode a (re-oriented) 16 element matrix.

    Returns:
        48 character string, three characters per element
    """
    values = np.asarray(matrix, dtype=np.float64).reshape(-1)
    return _to_text(_digits(_to_fixed_point(values)))


def encode_node_frames(matrices: Iterable[Sequence[float]]) -> str:
    """Re-orient and encode a node's matrices frame by frame, concatenated."""
    return ''.join(compress_matrix(rotate_matrix(m)) for m in matrices)


__all__ = [
    'SCALE',
    'BASE',
    'DIGITS',
    'BIAS',
    'ENCODED_MATRIX_LENGTH',
    'rotate_matrix',
    'symmetric_modulo',
    'encode_element',
    'compress_matrix',
    'encode_node_frames',
]
