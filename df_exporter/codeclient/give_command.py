"""
CodeClient give command builder.

Turns a TemplateItem into the `give` command that hands the template item
to the player. The template itself travels as a JSON payload stored under
the item's `hypercube:codetemplatedata` bukkit value.
"""

import json
import re
from typing import Any, Optional

from df_exporter.codeclient.compression import Compressor, gzip_compress, to_base64_gzip
from df_exporter.errors import ValidationError
from df_exporter.template.blocks import TemplateItem

CODETEMPLATE_PAYLOAD_TOKEN = '{{CODETEMPLATE_PAYLOAD}}'
CODETEMPLATE_DATA_KEY = 'hypercube:codetemplatedata'
DEFAULT_ITEM_ID = 'minecraft:ender_chest'
DEFAULT_AUTHOR = 'Animated Java'
NAME_COLOR = '#6DC7E9'
LORE_COLOR = 'gray'

EXPECTED_PAYLOAD_SHAPE = '{"author":"...","name":"...","version":1,"code":"..."}'


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False)


def escape_snbt_string(value: str) -> str:
    """Escape a value for a double-quoted SNBT string."""
    return value.replace('\\', '\\\\').replace('"', '\\"')


def build_lore_component(description: Optional[str]) -> str:
    """Lore component for a description, one gray line per non-empty line."""
    if not description:
        return ''
    lines = [line.strip() for line in re.split(r'\r?\n', description)]
    lines = [line for line in lines if line]
    if not lines:
        return ''

    entries = ','.join(
        f'{{"text":"{escape_snbt_string(line)}","color":"{LORE_COLOR}","italic":false}}'
        for line in lines
    )
    return f',"minecraft:lore":[{entries}]'


def normalize_codetemplate_data(value: str) -> str:
    """Trim and strip one pair of matching surrounding quotes."""
    normalized = value.strip()
    if len(normalized) >= 2 and normalized[0] == normalized[-1] and normalized[0] in ('"', "'"):
        normalized = normalized[1:-1].strip()
    return normalized


def parse_codetemplate_data(value: str) -> str:
    """
    Validate a raw template payload and return it as compact JSON.

    A payload that decodes to a JSON string is decoded once more.

    Raises:
        ValidationError: If the payload is not a JSON object
    """
    normalized = normalize_codetemplate_data(value)
    try:
        parsed = json.loads(normalized)
    except ValueError as e:
        raise ValidationError(
            f'Invalid codetemplateData. Expected JSON object like {EXPECTED_PAYLOAD_SHAPE}', e
        ) from e

    if isinstance(parsed, str):
        try:
            parsed = json.loads(parsed)
        except ValueError as e:
            raise ValidationError(
                'Invalid codetemplateData JSON string. Expected nested JSON object payload.', e
            ) from e

    if not isinstance(parsed, dict):
        raise ValidationError(
            'Invalid codetemplateData. Expected a JSON object with author/name/version/code.'
        )

    return _to_json(parsed)


class GiveCommandBuilder:
    """Builds CodeClient `give` commands for template items."""

    def __init__(
        self,
        compressor: Optional[Compressor] = gzip_compress,
        author: str = DEFAULT_AUTHOR,
        version: int = 1,
        item_id: str = DEFAULT_ITEM_ID,
    ):
        self.compressor = compressor
        self.author = author
        self.version = version
        self.item_id = item_id

    @classmethod
    def from_config(cls, config, compressor: Optional[Compressor] = gzip_compress):
        """Create a builder from an ExporterConfig."""
        return cls(
            compressor=compressor,
            author=config.template.author,
            version=config.template.version,
            item_id=config.template.item_id,
        )

    def build_payload(self, item: TemplateItem) -> str:
        """
        Build the template payload JSON of an item.

        Raises:
            ValidationError: Raw payload malformed, or no template given
            PayloadBuildError: Compression failed
        """
        if item.codetemplate_data:
            return parse_codetemplate_data(item.codetemplate_data)

        if item.template is None:
            raise ValidationError('Template item requires either `template` or `codetemplateData`.')

        payload = {
            'author': item.author if item.author is not None else self.author,
            'name': item.template_name,
        }
        if item.description:
            payload['description'] = item.description
        payload['version'] = item.version if item.version is not None else self.version
        payload['code'] = to_base64_gzip(item.template.to_json(), self.compressor)
        return _to_json(payload)

    def build(self, item: TemplateItem) -> str:
        """Build the complete `give` command of an item."""
        payload = self.build_payload(item)

        if item.item_snbt:
            return 'give ' + item.item_snbt.replace(
                CODETEMPLATE_PAYLOAD_TOKEN, escape_snbt_string(payload)
            )

        display_name = escape_snbt_string(
            item.display_name if item.display_name is not None else item.template_name
        )
        item_id = item.item_id if item.item_id is not None else self.item_id

        public_bukkit_values = dict(item.public_bukkit_values)
        public_bukkit_values[CODETEMPLATE_DATA_KEY] = payload
        custom_data = dict(item.custom_data)
        custom_data['PublicBukkitValues'] = public_bukkit_values

        return (
            'give '
            f'{{count:1,id:"{item_id}",components:{{"minecraft:custom_name":'
            f'[{{"text":"{display_name}","color":"{NAME_COLOR}","italic":false}}]'
            f'{build_lore_component(item.description)},'
            f'"minecraft:custom_data":{_to_json(custom_data)}}}}}'
        )

    def build_all(self, items) -> list:
        """Build commands for several items, in order."""
        return [self.build(item) for item in items]


__all__ = [
    'CODETEMPLATE_PAYLOAD_TOKEN',
    'CODETEMPLATE_DATA_KEY',
    'DEFAULT_ITEM_ID',
    'GiveCommandBuilder',
    'build_lore_component',
    'escape_snbt_string',
    'normalize_codetemplate_data',
    'parse_codetemplate_data',
]
