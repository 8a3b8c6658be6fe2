"""
Template payload compression.

CodeClient expects template code as base64 encoded gzip data. The exporter
takes the compressor as a plain callable so callers can swap it out.
"""

import base64
import gzip
from typing import Callable, Optional

from df_exporter.errors import PayloadBuildError

Compressor = Callable[[str], bytes]


def gzip_compress(text: str) -> bytes:
    """Gzip UTF-8 text with a fixed header timestamp."""
    return gzip.compress(text.encode('utf-8'), mtime=0)


def to_base64_gzip(text: str, compressor: Optional[Compressor] = gzip_compress) -> str:
    """
    Compress text and encode the result as base64.

    Raises:
        PayloadBuildError: If no compressor is available or it fails
    """
    if compressor is None:
        raise PayloadBuildError('No compression capability available for DF export payload.')
    try:
        compressed = compressor(text)
    except Exception as e:
        raise PayloadBuildError('Failed to compress DF export payload.', e) from e
    return base64.b64encode(compressed).decode('ascii')


__all__ = ['Compressor', 'gzip_compress', 'to_base64_gzip']
