"""Built-in GLSL type registry.

Exact names match a type token by equality. Family names match any token
that contains them, so ``vec`` covers ``vec3``, ``ivec2`` and ``dvec4``, and
``sampler`` covers ``sampler2DArrayShadow``. A user struct whose name
happens to contain a family name (``matrixHelper``) is classified as a
builtin as well.
"""

from __future__ import annotations
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class BuiltinRegistry:
    exact: tuple[str, ...] = ()
    family: tuple[str, ...] = ()

    def is_builtin(self, name: str) -> bool:
        if name in self.exact:
            return True
        return any(f in name for f in self.family)

    def register(self, name: str, family: bool = False) -> BuiltinRegistry:
        """Return a copy of the registry with one more type name."""
        if family:
            return replace(self, family=self.family + (name,))
        return replace(self, exact=self.exact + (name,))


STD_EXACT_TYPES = ("int", "uint", "bool", "float", "double", "atomic_uint")
STD_FAMILY_TYPES = ("vec", "mat", "image", "sampler")

DEFAULT_REGISTRY = BuiltinRegistry(exact=STD_EXACT_TYPES, family=STD_FAMILY_TYPES)


def is_builtin(name: str, registry: BuiltinRegistry = DEFAULT_REGISTRY) -> bool:
    return registry.is_builtin(name)
