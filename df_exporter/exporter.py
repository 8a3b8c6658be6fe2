"""
Animated DF Rig Exporter

Export pipeline: rig + rendered animations -> encoded animation blobs ->
init template -> `give` command -> CodeClient.
"""

import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence

from df_exporter.base_templates import BaseTemplateManager
from df_exporter.codeclient.compression import Compressor, gzip_compress, to_base64_gzip
from df_exporter.codeclient.give_command import GiveCommandBuilder
from df_exporter.codeclient.transport import CodeClientTransport
from df_exporter.config import ExporterConfig, get_config
from df_exporter.rig.matrix_codec import encode_node_frames
from df_exporter.rig.model import NodeKind, RenderedAnimation, Rig, RigAnimation, RigNode
from df_exporter.template.blocks import CodeTemplate, TemplateItem
from df_exporter.template.builder import TemplateBuilder, namespaced


def item_material_from_path(path: Optional[str], default: str = 'stone') -> str:
    """Material name of a display item model path, e.g. ".../diamond_sword.json"."""
    if not path:
        return default
    name = re.split(r'[\\/]', path)[-1]
    if name.endswith('.json'):
        name = name[:-len('.json')]
    return name or default


class RigExporter:
    """Exports rigs to DiamondFire through a caller-owned CodeClient transport."""

    def __init__(
        self,
        transport: CodeClientTransport,
        config: Optional[ExporterConfig] = None,
        compressor: Optional[Compressor] = gzip_compress,
        base_templates: Optional[BaseTemplateManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.config = config or get_config()
        self.compressor = compressor
        self.logger = logger or logging.getLogger(__name__)
        self.base_templates = base_templates or BaseTemplateManager(logger=self.logger)
        self.command_builder = GiveCommandBuilder.from_config(self.config, compressor)

    def log(self, level: str, message: str):
        """Log a message."""
        getattr(self.logger, level)(message)

    # =========================================================================
    # Rig data
    # =========================================================================

    def build_node_map(self, rig: Rig) -> Dict[str, RigNode]:
        """Copy the rig's nodes, filling in display materials."""
        fallback = self.config.template.fallback_material
        nodes = {}
        for node_id, node in rig.nodes.items():
            kind = NodeKind(node.kind)
            data = dict(node.data)
            if kind in (NodeKind.ITEM_DISPLAY, NodeKind.BLOCK_DISPLAY):
                data['material'] = namespaced(data.get('material') or fallback)
            nodes[node_id] = RigNode(name=node.name, kind=kind, data=data)
        return nodes

    def encode_animation(self, rig: Rig, animation: RenderedAnimation) -> RigAnimation:
        """
        Encode one animation.

        Every node's matrices are encoded frame by frame and concatenated;
        frames that do not sample a node are skipped for that node.
        """
        samples: Dict[str, List[Sequence[float]]] = {}
        for frame in animation.frames:
            for node_id in rig.nodes:
                matrix = frame.get_transform(node_id)
                if matrix is None:
                    continue
                samples.setdefault(node_id, []).append(matrix)

        nodes = {
            rig.nodes[node_id].name: to_base64_gzip(encode_node_frames(matrices), self.compressor)
            for node_id, matrices in samples.items()
        }
        return RigAnimation(frame_count=animation.frame_count, nodes=nodes)

    def encode_animations(self, rig: Rig,
                          animations: Iterable[RenderedAnimation]) -> Dict[str, RigAnimation]:
        """Encode animations, keyed by name in the given order."""
        return {animation.name: self.encode_animation(rig, animation) for animation in animations}

    # =========================================================================
    # Templates
    # =========================================================================

    def display_item(self, rig: Rig) -> str:
        """Material of the item carrying the rig's bone models."""
        if rig.display_item_path:
            return namespaced(item_material_from_path(rig.display_item_path))
        return rig.display_item

    def template_builder(self, rig: Rig) -> TemplateBuilder:
        template_config = self.config.template
        return TemplateBuilder(
            rig.name,
            display_item=self.display_item(rig),
            fallback_material=template_config.fallback_material,
            function_prefix=template_config.function_prefix,
            logger=self.logger,
        )

    def build_template(self, rig: Rig,
                       animations: Iterable[RenderedAnimation] = ()) -> CodeTemplate:
        """Build the init template of a rig."""
        return self.template_builder(rig).build(
            self.build_node_map(rig), self.encode_animations(rig, animations)
        )

    def build_template_item(self, rig: Rig,
                            animations: Iterable[RenderedAnimation] = ()) -> TemplateItem:
        """Wrap the rig's init template in a template item."""
        return TemplateItem(
            template_name=rig.name,
            template=self.build_template(rig, animations),
            display_name=f'Init Rig {rig.name}',
        )

    # =========================================================================
    # Delivery
    # =========================================================================

    async def export(self, rig: Rig, animations: Iterable[RenderedAnimation] = ()):
        """
        Export a rig and its animations to the CodeClient.

        Raises:
            DFExportError: Any build, transport or rejection failure
        """
        animations = list(animations)
        item = self.build_template_item(rig, animations)
        command = self.command_builder.build(item)
        self.log('info', f'Exporting rig {rig.name} ({len(rig.nodes)} nodes, '
                         f'{len(animations)} animations)')
        await self.transport.send_batch([command])

    async def send_base_templates(self, template_names: Optional[List[str]] = None):
        """Send the named helper templates (all when None) in one batch."""
        items = self.base_templates.build_items(template_names)
        commands = self.command_builder.build_all(items)
        self.log('info', f'Sending {len(commands)} base template(s)')
        await self.transport.send_batch(commands)


__all__ = ['RigExporter', 'item_material_from_path']
