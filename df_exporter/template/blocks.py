"""
Code template structures in the remote system's template format.

A CodeTemplate is an ordered list of CodeBlocks; each block holds up to
SLOT_LIMIT argument items, addressed by slot index.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Argument slots available in a single block.
SLOT_LIMIT = 27


def var_item(name: str, scope: str = 'line') -> Dict[str, Any]:
    """Variable reference argument."""
    return {'id': 'var', 'data': {'name': name, 'scope': scope}}


def text_item(text: str) -> Dict[str, Any]:
    """String literal argument."""
    return {'id': 'txt', 'data': {'name': text}}


def number_item(value) -> Dict[str, Any]:
    """Number literal argument. The remote system stores numbers as text."""
    return {'id': 'num', 'data': {'name': str(value)}}


def stack_item(snbt: str) -> Dict[str, Any]:
    """Item stack argument, described in the remote system's SNBT notation."""
    return {'id': 'item', 'data': {'item': snbt}}


def parameter_item(name: str, param_type: str = 'var', plural: bool = False,
                   optional: bool = False) -> Dict[str, Any]:
    """Function parameter declaration."""
    return {
        'id': 'pn_el',
        'data': {'name': name, 'type': param_type, 'plural': plural, 'optional': optional},
    }


def hidden_tag_item(hidden: bool = False, block: str = 'func') -> Dict[str, Any]:
    """The "Is Hidden" block tag of a function declaration."""
    return {
        'id': 'bl_tag',
        'data': {
            'option': 'True' if hidden else 'False',
            'tag': 'Is Hidden',
            'action': 'dynamic',
            'block': block,
        },
    }


@dataclass
class CodeBlock:
    """One executable block of a code template."""
    block: str
    action: Optional[str] = None
    data: Optional[str] = None
    slots: Dict[int, Dict[str, Any]] = field(default_factory=dict)
    id: str = 'block'

    @property
    def slot_count(self) -> int:
        return len(self.slots)

    @property
    def next_slot(self) -> int:
        """First slot after the highest one in use."""
        return max(self.slots) + 1 if self.slots else 0

    def append(self, item: Dict[str, Any]) -> int:
        """Put an item in the next free slot and return that slot index."""
        slot = self.next_slot
        if slot >= SLOT_LIMIT:
            raise ValueError(f"Block {self.block!r} is full ({SLOT_LIMIT} slots)")
        self.slots[slot] = item
        return slot

    def set_slot(self, slot: int, item: Dict[str, Any]):
        """Put an item in a specific slot."""
        if not 0 <= slot < SLOT_LIMIT:
            raise ValueError(f"Slot {slot} out of range 0..{SLOT_LIMIT - 1}")
        self.slots[slot] = item

    def get_slot(self, slot: int) -> Optional[Dict[str, Any]]:
        return self.slots.get(slot)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the remote template JSON shape."""
        result: Dict[str, Any] = {
            'id': self.id,
            'block': self.block,
            'args': {
                'items': [
                    {'item': item, 'slot': slot}
                    for slot, item in sorted(self.slots.items())
                ],
            },
        }
        if self.data is not None:
            result['data'] = self.data
        if self.action is not None:
            result['action'] = self.action
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodeBlock':
        """Build a block from the remote template JSON shape."""
        items = (data.get('args') or {}).get('items') or []
        return cls(
            id=data.get('id', 'block'),
            block=data['block'],
            action=data.get('action'),
            data=data.get('data'),
            slots={int(entry['slot']): entry['item'] for entry in items},
        )


@dataclass
class CodeTemplate:
    """Ordered list of blocks; order is execution order."""
    blocks: List[CodeBlock] = field(default_factory=list)

    def add(self, block: CodeBlock):
        self.blocks.append(block)

    def __len__(self) -> int:
        return len(self.blocks)

    def to_dict(self) -> Dict[str, Any]:
        return {'blocks': [block.to_dict() for block in self.blocks]}

    def to_json(self) -> str:
        """Compact JSON serialization, as sent to the remote system."""
        return json.dumps(self.to_dict(), separators=(',', ':'), ensure_ascii=False)


@dataclass
class TemplateItem:
    """
    One unit handed to the CodeClient: a template (or a raw, pre-built
    template payload) plus the item that carries it.
    """
    template_name: str
    template: Optional[CodeTemplate] = None
    codetemplate_data: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    version: Optional[int] = None
    item_id: Optional[str] = None
    # Literal give-command item; "{{CODETEMPLATE_PAYLOAD}}" marks the payload.
    item_snbt: Optional[str] = None
    custom_data: Dict[str, Any] = field(default_factory=dict)
    public_bukkit_values: Dict[str, str] = field(default_factory=dict)


__all__ = [
    'SLOT_LIMIT',
    'CodeBlock',
    'CodeTemplate',
    'TemplateItem',
    'var_item',
    'text_item',
    'number_item',
    'stack_item',
    'parameter_item',
    'hidden_tag_item',
]
