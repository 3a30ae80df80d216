"""Shader program wrapper that resolves scanned interface names to locations.

Stage sources are scanned as they are loaded; the flattened uniform and
attribute names accumulate (without deduplication) until ``finalize()``
links the program and resolves each name once. Struct members are then
addressable by their dotted path, e.g. ``get_uniform("light.color")``.
"""

from __future__ import annotations
from loguru import logger
from typing import Any, Dict, List, Optional

import moderngl
import numpy as np

from glslscan.builtins.types import BuiltinRegistry, DEFAULT_REGISTRY
from glslscan.parser.lexer import KeywordSearch
from glslscan.scanner import scan_interface


# Returned for names the linked program does not expose
INVALID_LOCATION = -1

# Stage name -> keyword argument of moderngl.Context.program
STAGE_KEYWORDS = {
    "vertex": "vertex_shader",
    "fragment": "fragment_shader",
    "geometry": "geometry_shader",
    "tess_control": "tess_control_shader",
    "tess_evaluation": "tess_evaluation_shader",
}


class ShaderProgramError(Exception):
    pass


class ShaderProgram:
    """Loads GLSL stages, links them and caches interface locations."""

    def __init__(
        self,
        ctx: moderngl.Context,
        registry: BuiltinRegistry = DEFAULT_REGISTRY,
        search: KeywordSearch = KeywordSearch.WORD,
    ):
        self.ctx = ctx
        self.registry = registry
        self.search = search
        self.program: Optional[moderngl.Program] = None
        self.uniforms: Dict[str, int] = {}
        self.attributes: Dict[str, int] = {}
        self._stages: Dict[str, str] = {}
        self._pending_uniforms: List[str] = []
        self._pending_attributes: List[str] = []
        self._log: List[str] = []

    # --- Builtin types ---

    def register_builtin_type(self, name: str, family: bool = False) -> None:
        """Recognise ``name`` as a builtin type in sources loaded from now on."""
        self.registry = self.registry.register(name, family)

    def import_std_builtin_types(self) -> None:
        self.registry = DEFAULT_REGISTRY

    # --- Loading / linking ---

    def load(self, stage: str, source: str) -> bool:
        """Record a stage source and scan its interface.

        Returns False when the stage replaces one loaded earlier; the new
        source is used in that case.
        """
        if stage not in STAGE_KEYWORDS:
            raise ShaderProgramError(
                f"Unknown shader stage '{stage}' (expected one of: {', '.join(STAGE_KEYWORDS)})"
            )

        iface = scan_interface(source, self.registry, self.search)
        self._pending_uniforms.extend(iface.uniforms)
        self._pending_attributes.extend(iface.attributes)
        logger.debug(
            f"Loaded {stage} stage: {len(iface.uniforms)} uniform names, "
            f"{len(iface.attributes)} attribute names"
        )

        replaced = stage in self._stages
        if replaced:
            self._log.append(f"load() : {stage} stage loaded twice, keeping the last source\n")
        self._stages[stage] = source
        return not replaced

    def finalize(self) -> bool:
        """Link the loaded stages and resolve every pending name.

        Link errors are recorded in the log and make this return False; the
        names are still resolved (to ``INVALID_LOCATION``) so lookups stay
        consistent with what was scanned.
        """
        if not self._stages:
            self._log.append("finalize() : No GLSL compiled shaders found!\n")
            return False

        if self.program is not None:
            self._log.append(
                f"finalize() : Warning previous program({self.program.glo}) is still active.\n"
                "Shutting it down..\n"
            )
            self.program.release()
            self.program = None

        ok = True
        try:
            self.program = self.ctx.program(
                **{STAGE_KEYWORDS[stage]: src for stage, src in self._stages.items()}
            )
        except moderngl.Error as e:
            logger.warning(f"Shader program link failed: {e}")
            self._log.append(f"LNK:{e}\n")
            ok = False

        self.uniforms = {name: self._resolve(name) for name in self._pending_uniforms}
        self.attributes = {name: self._resolve(name) for name in self._pending_attributes}

        self._pending_uniforms.clear()
        self._pending_attributes.clear()
        self._stages.clear()

        if ok:
            self._log.clear()
        return ok

    def _resolve(self, name: str) -> int:
        if self.program is None:
            return INVALID_LOCATION
        member = self.program.get(name, None)
        if member is None:
            logger.debug(f"'{name}' is not exposed by the linked program")
            return INVALID_LOCATION
        return getattr(member, "location", INVALID_LOCATION)

    def unload(self) -> None:
        if self.program is not None:
            self.program.release()
            self.program = None
        self._stages.clear()
        self._pending_uniforms.clear()
        self._pending_attributes.clear()
        self.uniforms.clear()
        self.attributes.clear()

    # --- Lookups ---

    def get_uniform(self, name: str) -> int:
        return self.uniforms.get(name, INVALID_LOCATION)

    def get_attribute(self, name: str) -> int:
        return self.attributes.get(name, INVALID_LOCATION)

    def get_log(self) -> Optional[str]:
        return "".join(self._log) if self._log else None

    # --- Value updates ---

    def set_uniform(self, name: str, value: Any) -> None:
        """Set a uniform value, converting Python and numpy values as needed."""
        if self.program is None:
            raise ShaderProgramError(f"Cannot set uniform {name}: program is not linked")
        member = self.program.get(name, None)
        if member is None:
            return

        try:
            if isinstance(value, (tuple, list, np.ndarray)):
                arr = np.asarray(value).ravel()
                if arr.dtype.kind in "biu":
                    member.value = tuple(int(v) for v in arr)
                else:
                    member.value = tuple(float(v) for v in arr)
            elif isinstance(value, bool):
                member.value = int(value)
            elif isinstance(value, int):
                member.value = value
            else:
                member.value = float(value)
        except Exception as e:
            raise ShaderProgramError(f"Failed to set uniform {name}: {e}") from e

    def set_uniforms(self, uniforms: Dict[str, Any]) -> None:
        """Set multiple uniforms at once."""
        for name, value in uniforms.items():
            self.set_uniform(name, value)
