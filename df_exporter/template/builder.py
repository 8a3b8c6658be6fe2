"""
Code Template Builder

Lowers a rig's node map and its encoded animations into the blocks of the
rig's init function:

    func rig.init.<rig>(nodes, animations)
    set_var CreateList/AppendValue nodes ...           (one item per node)
    set_var CreateList/AppendValue <animation> ...     (frame count, name/blob pairs)
    set_var SetDictValue animations <animation>        (per animation)

List values are split across as many blocks as SLOT_LIMIT requires; slot 0
of every list block holds the variable being built.
"""

import json
from typing import Dict, List, Optional, Sequence

from df_exporter.rig.model import NodeKind, RigNode, RigAnimation
from df_exporter.template.blocks import (
    SLOT_LIMIT,
    CodeBlock,
    CodeTemplate,
    hidden_tag_item,
    number_item,
    parameter_item,
    stack_item,
    text_item,
    var_item,
)

NODES_VAR = 'nodes'
ANIMATIONS_VAR = 'animations'
FALLBACK_MATERIAL = 'minecraft:stone'
ICON_COLOR = '#6DC7E9'


def namespaced(material: str) -> str:
    """Add the default namespace to a bare material id."""
    return material if ':' in material else f'minecraft:{material}'


class ListChunker:
    """
    Splits the values of one list variable across set_var blocks.

    The first block creates the list, every later one appends to it. A block
    never holds more than SLOT_LIMIT slots, and a group of values passed to
    append_group() always lands in a single block.
    """

    def __init__(self, variable: str, scope: str = 'line'):
        self.variable = variable
        self.scope = scope
        self.blocks: List[CodeBlock] = []
        self._current = self._open('CreateList')

    def _open(self, action: str) -> CodeBlock:
        block = CodeBlock(block='set_var', action=action)
        block.append(var_item(self.variable, self.scope))
        return block

    def _flush(self):
        # A block holding only the variable reference is dropped.
        if self._current.slot_count > 1:
            self.blocks.append(self._current)
            self._current = self._open('AppendValue')

    def append(self, item: dict):
        self.append_group([item])

    def append_group(self, items: Sequence[dict]):
        if len(items) > SLOT_LIMIT - 1:
            raise ValueError(f"Cannot place {len(items)} values in one block")
        if self._current.slot_count + len(items) > SLOT_LIMIT:
            self._flush()
        for item in items:
            self._current.append(item)

    def finish(self) -> List[CodeBlock]:
        """Close the open block and return every block built."""
        if self._current.slot_count > 1:
            self.blocks.append(self._current)
        self._current = self._open('AppendValue')
        return self.blocks


class TemplateBuilder:
    """Builds the init template of one rig."""

    def __init__(
        self,
        rig_name: str,
        display_item: str = FALLBACK_MATERIAL,
        fallback_material: str = FALLBACK_MATERIAL,
        function_prefix: str = 'rig.init.',
        logger=None,
    ):
        self.rig_name = rig_name
        self.display_item = namespaced(display_item)
        self.fallback_material = namespaced(fallback_material)
        self.function_prefix = function_prefix
        self.logger = logger

    def log(self, level: str, message: str):
        """Log a message if logger is available."""
        if self.logger:
            getattr(self.logger, level)(message)

    @property
    def function_name(self) -> str:
        return f'{self.function_prefix}{self.rig_name}'

    def build(
        self,
        nodes: Dict[str, RigNode],
        animations: Optional[Dict[str, RigAnimation]] = None,
    ) -> CodeTemplate:
        """
        Build the complete template.

        Args:
            nodes: Node identity -> node, in hierarchy order
            animations: Animation name -> encoded animation, in export order

        Returns:
            CodeTemplate with the declaration block first
        """
        template = CodeTemplate()
        template.add(self.declaration_block())

        for block in self.node_blocks(nodes):
            template.add(block)

        for name, animation in (animations or {}).items():
            for block in self.animation_blocks(name, animation):
                template.add(block)

        self.log('debug', f'Built template {self.function_name} with {len(template)} blocks')
        return template

    def declaration_block(self) -> CodeBlock:
        """The function declaration taking (nodes, animations)."""
        icon = (
            '{id:"minecraft:turtle_egg",count:1,components:{"minecraft:custom_name":'
            f'[{{"text":"Init Rig {self.rig_name}","color":"{ICON_COLOR}","italic":false}}]}}}}'
        )
        block = CodeBlock(block='func', data=self.function_name)
        block.set_slot(0, stack_item(icon))
        block.set_slot(1, parameter_item(NODES_VAR))
        block.set_slot(2, parameter_item(ANIMATIONS_VAR))
        block.set_slot(SLOT_LIMIT - 1, hidden_tag_item(False))
        return block

    def node_descriptor(self, node: RigNode) -> str:
        """SNBT item that stands in for a node in the remote rig."""
        kind = NodeKind(node.kind)

        def tagged(node_type: str, extra: str, item_id: str) -> str:
            return (
                '{components:{"minecraft:custom_data":{PublicBukkitValues:{'
                f'"hypercube:id":"{node.name}","hypercube:type":"{node_type}"'
                f'}}}}{extra}}},count:1,id:"{item_id}"}}'
            )

        if kind == NodeKind.BONE:
            model = f'animated_java:blueprint/{self.rig_name}/{node.name}'
            return tagged('model', f',"minecraft:item_model":"{model}"', self.display_item)
        if kind == NodeKind.TEXT_DISPLAY:
            text = node.text if node.text is not None else json.dumps({'text': node.name})
            return tagged('text', f",\"minecraft:custom_name\":'{text}'", 'minecraft:name_tag')
        if kind == NodeKind.ITEM_DISPLAY:
            return tagged('item', '', namespaced(node.material or self.fallback_material))
        if kind == NodeKind.BLOCK_DISPLAY:
            return tagged('block', '', namespaced(node.material or self.fallback_material))
        return tagged(kind.value, '', self.fallback_material)

    def node_blocks(self, nodes: Dict[str, RigNode]) -> List[CodeBlock]:
        """Blocks building the `nodes` list; structural nodes are left out."""
        chunker = ListChunker(NODES_VAR)
        for node in nodes.values():
            if node.is_structural:
                continue
            chunker.append(stack_item(self.node_descriptor(node)))
        return chunker.finish()

    def animation_blocks(self, name: str, animation: RigAnimation) -> List[CodeBlock]:
        """Blocks building one animation list and storing it in `animations`."""
        chunker = ListChunker(name)
        chunker.append(number_item(animation.frame_count))
        for node_name, blob in animation.nodes.items():
            chunker.append_group([text_item(node_name), text_item(blob)])
        blocks = chunker.finish()

        store = CodeBlock(block='set_var', action='SetDictValue')
        store.append(var_item(ANIMATIONS_VAR))
        store.append(text_item(name))
        store.append(var_item(name))
        blocks.append(store)
        return blocks


def build_code_template(
    rig_name: str,
    nodes: Dict[str, RigNode],
    animations: Optional[Dict[str, RigAnimation]] = None,
    display_item: str = FALLBACK_MATERIAL,
) -> CodeTemplate:
    """Build a rig's init template with default settings."""
    return TemplateBuilder(rig_name, display_item=display_item).build(nodes, animations)


__all__ = [
    'NODES_VAR',
    'ANIMATIONS_VAR',
    'FALLBACK_MATERIAL',
    'ListChunker',
    'TemplateBuilder',
    'build_code_template',
    'namespaced',
]
