"""PyYAML-backed document codec.

Output style is fixed so rewrites of an unchanged document produce an
unchanged file: keys stay in document order and plain where YAML allows it,
string values are single-quoted, sequences are block style and not indented
under their key.
"""

from __future__ import annotations

from typing import Any

import yaml

from catalogdb.store.codec import DocumentCodec


class CatalogDumper(yaml.SafeDumper):
    """SafeDumper with plain mapping keys and single-quoted string values."""

    def represent_mapping(self, tag, mapping, flow_style=None):
        node = super().represent_mapping(tag, mapping, flow_style=flow_style)
        for key_node, _ in node.value:
            if isinstance(key_node, yaml.ScalarNode):
                # The emitter falls back to quoting when plain is not allowed.
                key_node.style = None
        return node


def _represent_str(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="'")


CatalogDumper.add_representer(str, _represent_str)


class YamlCodec(DocumentCodec):
    name = "yaml"
    parse_errors = (yaml.YAMLError,)

    def parse(self, text: str) -> Any:
        return yaml.safe_load(text)

    def dump(self, document: Any) -> str:
        return yaml.dump(
            document,
            Dumper=CatalogDumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
