"""
Tests for the Animated DF Rig Exporter

Tests the full pipeline from rig data to the commands handed to the
transport.
"""

import asyncio
import base64
import gzip
import json
import pytest
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from df_exporter.config import ExporterConfig
from df_exporter.errors import ValidationError
from df_exporter.exporter import RigExporter, item_material_from_path
from df_exporter.rig.matrix_codec import compress_matrix, rotate_matrix
from df_exporter.rig.model import (
    AnimationFrame,
    NodeKind,
    RenderedAnimation,
    Rig,
    RigNode,
)


def run_async(coro):
    """Helper to run async functions in tests."""
    return asyncio.run(coro)


def identity(tx: float = 0.0) -> list:
    return [
        1.0, 0.0, 0.0, 0.0,
        0.0, 1.0, 0.0, 0.0,
        0.0, 0.0, 1.0, 0.0,
        tx, 0.0, 0.0, 1.0,
    ]


def plain_compressor(text: str) -> bytes:
    """Compressor that leaves text as is, so blobs are easy to inspect."""
    return text.encode('utf-8')


def decode_blob(blob: str) -> str:
    return base64.b64decode(blob).decode('utf-8')


def decode_command(command: str) -> dict:
    """Template JSON carried by a generated give command."""
    marker = '"minecraft:custom_data":'
    custom_data = json.loads(command[command.index(marker) + len(marker):-2])
    payload = json.loads(custom_data['PublicBukkitValues']['hypercube:codetemplatedata'])
    return json.loads(gzip.decompress(base64.b64decode(payload['code'])))


class MockTransport:
    """Mock transport recording the batches it is asked to send."""

    def __init__(self):
        self.batches = []

    async def send_batch(self, commands):
        self.batches.append(list(commands))


def make_rig() -> Rig:
    return Rig(
        name='robot',
        display_item='minecraft:diamond_sword',
        nodes={
            'u-root': RigNode(name='root', kind=NodeKind.STRUCT),
            'u-arm': RigNode(name='arm', kind=NodeKind.BONE),
            'u-held': RigNode(name='held', kind=NodeKind.ITEM_DISPLAY),
            'u-cam': RigNode(name='cam', kind=NodeKind.CAMERA),
        },
    )


class TestItemMaterial:
    """Test display item material lookup."""

    @pytest.mark.parametrize("path,expected", [
        ('C:\\models\\item\\diamond_sword.json', 'diamond_sword'),
        ('/models/item/golden_axe.json', 'golden_axe'),
        ('stick', 'stick'),
        ('', 'stone'),
        (None, 'stone'),
    ])
    def test_paths(self, path, expected):
        assert item_material_from_path(path) == expected

    def test_display_item_from_path(self):
        exporter = RigExporter(MockTransport(), config=ExporterConfig())
        rig = make_rig()
        rig.display_item_path = '/assets/models/item/golden_axe.json'
        assert exporter.display_item(rig) == 'minecraft:golden_axe'
        assert 'minecraft:golden_axe' in exporter.build_template(rig).to_json()
        assert 'minecraft:diamond_sword' not in exporter.build_template(rig).to_json()

    def test_display_item_without_path(self):
        exporter = RigExporter(MockTransport(), config=ExporterConfig())
        assert exporter.display_item(make_rig()) == 'minecraft:diamond_sword'


class TestEncoding:
    """Test animation encoding."""

    def setup_method(self):
        self.exporter = RigExporter(MockTransport(), config=ExporterConfig(),
                                    compressor=plain_compressor)
        self.rig = make_rig()

    def test_sparse_frames(self):
        """Nodes missing from a frame are skipped for that frame only."""
        animation = RenderedAnimation(
            name='wave',
            frame_count=2,
            frames=[
                AnimationFrame({'u-arm': identity(1.0)}),
                AnimationFrame({'u-arm': identity(2.0), 'u-held': identity(3.0)}),
            ],
        )
        encoded = self.exporter.encode_animation(self.rig, animation)

        assert encoded.frame_count == 2
        assert list(encoded.nodes) == ['arm', 'held']
        assert decode_blob(encoded.nodes['arm']) == (
            compress_matrix(rotate_matrix(identity(1.0)))
            + compress_matrix(rotate_matrix(identity(2.0)))
        )
        assert decode_blob(encoded.nodes['held']) == compress_matrix(rotate_matrix(identity(3.0)))

    def test_unknown_nodes_ignored(self):
        animation = RenderedAnimation(
            name='wave', frame_count=1, frames=[AnimationFrame({'not-in-rig': identity()})]
        )
        assert self.exporter.encode_animation(self.rig, animation).nodes == {}

    def test_animation_order(self):
        animations = [
            RenderedAnimation(name='walk', frame_count=1),
            RenderedAnimation(name='idle', frame_count=1),
        ]
        assert list(self.exporter.encode_animations(self.rig, animations)) == ['walk', 'idle']

    def test_default_compression_is_gzip(self):
        exporter = RigExporter(MockTransport(), config=ExporterConfig())
        animation = RenderedAnimation(
            name='wave', frame_count=1, frames=[AnimationFrame({'u-arm': identity()})]
        )
        blob = exporter.encode_animation(self.rig, animation).nodes['arm']
        assert gzip.decompress(base64.b64decode(blob)).decode('utf-8') == \
            compress_matrix(rotate_matrix(identity()))


class TestTemplate:
    """Test template generation from a rig."""

    def setup_method(self):
        self.exporter = RigExporter(MockTransport(), config=ExporterConfig(),
                                    compressor=plain_compressor)

    def test_node_map_fills_materials(self):
        nodes = self.exporter.build_node_map(make_rig())
        assert nodes['u-held'].material == 'minecraft:stone'
        assert nodes['u-arm'].material is None

    def test_template_layout(self):
        animation = RenderedAnimation(
            name='wave', frame_count=1, frames=[AnimationFrame({'u-arm': identity()})]
        )
        template = self.exporter.build_template(make_rig(), [animation])
        assert [(b.block, b.action) for b in template.blocks] == [
            ('func', None),
            ('set_var', 'CreateList'),
            ('set_var', 'CreateList'),
            ('set_var', 'SetDictValue'),
        ]
        assert template.blocks[0].data == 'rig.init.robot'
        # struct left out: arm, held, cam
        assert template.blocks[1].slot_count == 4

    def test_template_item(self):
        item = self.exporter.build_template_item(make_rig())
        assert item.template_name == 'robot'
        assert item.display_name == 'Init Rig robot'
        assert item.template is not None


class TestExport:
    """Test delivery through the transport."""

    def test_export_sends_one_command(self):
        transport = MockTransport()
        exporter = RigExporter(transport, config=ExporterConfig())
        animation = RenderedAnimation(
            name='wave', frame_count=1, frames=[AnimationFrame({'u-arm': identity()})]
        )

        run_async(exporter.export(make_rig(), [animation]))

        assert len(transport.batches) == 1
        (command,) = transport.batches[0]
        assert command.startswith('give {count:1,id:"minecraft:ender_chest",')
        assert '"text":"Init Rig robot"' in command

        template = decode_command(command)
        assert template['blocks'][0]['data'] == 'rig.init.robot'
        assert template['blocks'][-1]['action'] == 'SetDictValue'

    def test_send_base_templates(self):
        transport = MockTransport()
        exporter = RigExporter(transport, config=ExporterConfig())

        run_async(exporter.send_base_templates(['MatrixDecoder']))

        (command,) = transport.batches[0]
        assert '"text":"Matrix Decoder"' in command
        assert 'aj.MatrixDecoder' in command

    def test_unknown_base_template(self):
        transport = MockTransport()
        exporter = RigExporter(transport, config=ExporterConfig())
        with pytest.raises(ValidationError):
            run_async(exporter.send_base_templates(['Nope']))
        assert transport.batches == []
