"""
Animated DF Base Template Manager

Manages the static helper templates shipped with the exporter (for example
the matrix decoder). Each helper is described by one YAML file in the
definitions directory.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from df_exporter.errors import ValidationError
from df_exporter.template.blocks import (
    SLOT_LIMIT,
    CodeBlock,
    CodeTemplate,
    TemplateItem,
    hidden_tag_item,
)


@dataclass
class BaseTemplateDefinition:
    """Definition of one helper template."""
    template_name: str
    function_name: str
    display_name: str = ""
    codetemplate_data: Optional[str] = None
    author: Optional[str] = None
    version: Optional[int] = None
    item_id: Optional[str] = None
    item_snbt: Optional[str] = None
    hidden: bool = True
    # Raw block arguments: [{"item": {...}, "slot": n}, ...]
    function_items: List[Dict[str, Any]] = field(default_factory=list)
    # Raw blocks in the remote template JSON shape.
    extra_blocks: List[Dict[str, Any]] = field(default_factory=list)
    custom_data: Dict[str, Any] = field(default_factory=dict)
    public_bukkit_values: Dict[str, str] = field(default_factory=dict)

    def function_block(self) -> CodeBlock:
        """The func block declaring this helper."""
        block = CodeBlock(block='func', data=self.function_name)
        for entry in self.function_items:
            block.set_slot(int(entry['slot']), entry['item'])
        if self.hidden:
            block.set_slot(SLOT_LIMIT - 1, hidden_tag_item(False))
        return block

    def to_template_item(self) -> TemplateItem:
        """Build the item that delivers this helper."""
        template = None
        if not self.codetemplate_data:
            template = CodeTemplate(
                [self.function_block()]
                + [CodeBlock.from_dict(b) for b in self.extra_blocks]
            )

        return TemplateItem(
            template_name=self.template_name,
            template=template,
            codetemplate_data=self.codetemplate_data,
            display_name=self.display_name or self.template_name,
            author=self.author,
            version=self.version,
            item_id=self.item_id,
            item_snbt=self.item_snbt,
            custom_data=dict(self.custom_data),
            public_bukkit_values=dict(self.public_bukkit_values),
        )


class BaseTemplateManager:
    """Loads helper template definitions and builds their template items."""

    def __init__(self, definitions_dir: Optional[str] = None, logger=None):
        self.logger = logger
        self.definitions: Dict[str, BaseTemplateDefinition] = {}

        if definitions_dir is None:
            definitions_dir = os.path.join(os.path.dirname(__file__), 'definitions')

        self.definitions_dir = os.path.abspath(definitions_dir)
        self._load_definitions()

    def _log(self, level: str, message: str):
        """Log a message if logger is available."""
        if self.logger:
            getattr(self.logger, level, self.logger.info)(message)

    def _load_definitions(self):
        """Load all helper definitions from YAML files."""
        if not os.path.isdir(self.definitions_dir):
            self._log('warning', f"Base template directory not found: {self.definitions_dir}")
            return

        for filename in sorted(os.listdir(self.definitions_dir)):
            if not filename.endswith('.yaml') and not filename.endswith('.yml'):
                continue

            filepath = os.path.join(self.definitions_dir, filename)
            try:
                definition = self._load_definition_file(filepath)
                if definition:
                    self.definitions[definition.template_name] = definition
                    self._log('info', f"Loaded base template: {definition.template_name}")
            except Exception as e:
                self._log('error', f"Failed to load base template file {filename}: {e}")

    def _load_definition_file(self, filepath: str) -> Optional[BaseTemplateDefinition]:
        """Load a single helper definition from a YAML file."""
        with open(filepath, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not data or 'template_name' not in data:
            return None

        return BaseTemplateDefinition(
            template_name=data['template_name'],
            function_name=data.get('function_name', data['template_name']),
            display_name=data.get('display_name', data['template_name']),
            codetemplate_data=data.get('codetemplate_data'),
            author=data.get('author'),
            version=data.get('version'),
            item_id=data.get('item_id'),
            item_snbt=data.get('item_snbt'),
            hidden=data.get('hidden', True),
            function_items=data.get('function_items', []),
            extra_blocks=data.get('extra_blocks', []),
            custom_data=data.get('custom_data', {}),
            public_bukkit_values=data.get('public_bukkit_values', {}),
        )

    def get_definition(self, template_name: str) -> Optional[BaseTemplateDefinition]:
        """Get a helper definition by name."""
        return self.definitions.get(template_name)

    def get_template_names(self) -> List[str]:
        """Get list of all helper names."""
        return list(self.definitions.keys())

    def build_item(self, template_name: str) -> TemplateItem:
        """
        Build the template item of one helper.

        Raises:
            ValidationError: If no helper has that name
        """
        definition = self.get_definition(template_name)
        if definition is None:
            raise ValidationError(f'Unknown DF base template "{template_name}".')
        return definition.to_template_item()

    def build_items(self, template_names: Optional[List[str]] = None) -> List[TemplateItem]:
        """Build items for the named helpers, or for all of them."""
        if template_names is None:
            template_names = self.get_template_names()
        return [self.build_item(name) for name in template_names]

    def reload(self):
        """Reload all helper definitions from disk."""
        self.definitions.clear()
        self._load_definitions()


__all__ = [
    'BaseTemplateDefinition',
    'BaseTemplateManager',
]
