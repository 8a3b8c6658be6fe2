"""
Rig and animation data structures handed to the exporter.

The host editor renders its project into these structures: a node map keyed
by node identity, and per-animation frame lists holding one column-major 4x4
transform per node.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class NodeKind(str, Enum):
    """Kind of a rig node."""
    BONE = 'bone'
    STRUCT = 'struct'
    CAMERA = 'camera'
    LOCATOR = 'locator'
    TEXT_DISPLAY = 'text_display'
    ITEM_DISPLAY = 'item_display'
    BLOCK_DISPLAY = 'block_display'


@dataclass
class RigNode:
    """A single node of the rig hierarchy."""
    name: str
    kind: NodeKind
    # Kind-specific data: "material" for item/block displays, "text" for
    # text displays (a raw text component).
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_structural(self) -> bool:
        return self.kind == NodeKind.STRUCT

    @property
    def material(self) -> Optional[str]:
        return self.data.get('material')

    @property
    def text(self) -> Optional[str]:
        return self.data.get('text')


@dataclass
class Rig:
    """Static structure of an exported rig."""
    name: str
    nodes: Dict[str, RigNode] = field(default_factory=dict)
    # Material of the item that carries bone models (e.g. "minecraft:stone").
    display_item: str = 'minecraft:stone'
    # Model path of the display item (e.g. "./item/diamond_sword.json"); overrides
    # display_item when set.
    display_item_path: Optional[str] = None


@dataclass
class AnimationFrame:
    """One rendered pose: node identity -> 16 floats, column-major."""
    node_transforms: Dict[str, Sequence[float]] = field(default_factory=dict)

    def get_transform(self, node_id: str) -> Optional[Sequence[float]]:
        """Get a node's matrix, or None when the frame does not sample it."""
        return self.node_transforms.get(node_id)


@dataclass
class RenderedAnimation:
    """An animation as rendered by the host editor."""
    name: str
    frame_count: int
    frames: List[AnimationFrame] = field(default_factory=list)


@dataclass
class RigAnimation:
    """
    Animation data ready for template generation.

    `nodes` maps a node *name* to its encoded (and usually compressed)
    matrix blob, in the order nodes were first sampled.
    """
    frame_count: int
    nodes: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'length': self.frame_count,
            'nodes': dict(self.nodes),
        }
