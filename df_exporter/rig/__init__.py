"""
Animated DF Rig Data

Host-side rig structures and the fixed-point matrix codec used to pack
animation samples.
"""

from df_exporter.rig.model import (
    NodeKind,
    RigNode,
    Rig,
    AnimationFrame,
    RenderedAnimation,
    RigAnimation,
)
from df_exporter.rig.matrix_codec import (
    rotate_matrix,
    compress_matrix,
    encode_element,
    encode_node_frames,
    symmetric_modulo,
)

__all__ = [
    'NodeKind',
    'RigNode',
    'Rig',
    'AnimationFrame',
    'RenderedAnimation',
    'RigAnimation',
    'rotate_matrix',
    'compress_matrix',
    'encode_element',
    'encode_node_frames',
    'symmetric_modulo',
]
