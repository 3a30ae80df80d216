"""Reflection document emitter.

Turns the scanned interfaces of one or more shader source units into a
JSON-ready dict. Per-unit lists are kept as scanned; the top-level
``uniforms`` and ``attributes`` lists concatenate them in input order,
which is the sequence a program link step resolves to locations.
"""

from __future__ import annotations

import json
from glslscan.scanner import ShaderInterface


REFLECTION_VERSION = 1


def generate_reflection(interfaces: dict[str, ShaderInterface]) -> dict:
    """Generate the reflection document.

    Args:
        interfaces: Scanned interfaces keyed by source name, in load order.

    Returns:
        A dict with ``version``, per-source entries and accumulated name lists.
    """
    result = {
        "version": REFLECTION_VERSION,
        "sources": [
            _reflect_interface(name, iface) for name, iface in interfaces.items()
        ],
    }
    result["uniforms"] = [u for iface in interfaces.values() for u in iface.uniforms]
    result["attributes"] = [a for iface in interfaces.values() for a in iface.attributes]
    return result


def emit_reflection_json(reflection: dict) -> str:
    """Serialize a reflection document to a JSON string."""
    return json.dumps(reflection, indent=2, sort_keys=False) + "\n"


def _reflect_interface(source_name: str, iface: ShaderInterface) -> dict:
    return {
        "source": source_name,
        "uniforms": list(iface.uniforms),
        "attributes": list(iface.attributes),
        "structs": {name: list(leaves) for name, leaves in iface.structs.items()},
    }
