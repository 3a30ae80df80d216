"""Tests for the shader program wrapper.

Most tests drive ShaderProgram through a fake context that mimics the parts
of the moderngl API it uses. Tests marked ``gpu`` link real programs.
"""

import moderngl
import numpy as np
import pytest

from glslscan.render.program import INVALID_LOCATION, ShaderProgram, ShaderProgramError


VERTEX = """
attribute vec3 a_position;
attribute vec2 a_uv;
uniform mat4 u_mvp;
"""

FRAGMENT = """
struct Inner { float a; float b; };
struct Outer { Inner i; float c; };
uniform Outer u;
uniform sampler2D tex;
"""


class FakeMember:
    def __init__(self, location):
        self.location = location
        self.value = None


class BrokenMember:
    location = 3

    @property
    def value(self):
        return None

    @value.setter
    def value(self, v):
        raise ValueError("bad size")


class FakeProgram:
    def __init__(self, members, glo):
        self.members = members
        self.glo = glo
        self.released = False

    def get(self, key, default):
        return self.members.get(key, default)

    def release(self):
        self.released = True


class FakeContext:
    def __init__(self, members=None, error=None):
        self.members = members or {}
        self.error = error
        self.calls = []
        self.programs = []

    def program(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise moderngl.Error(self.error)
        prog = FakeProgram(dict(self.members), glo=len(self.programs) + 1)
        self.programs.append(prog)
        return prog


def _members(*names):
    return {name: FakeMember(loc) for loc, name in enumerate(names)}


class TestLinking:
    def test_resolves_flattened_names(self):
        ctx = FakeContext(_members("a_position", "a_uv", "u_mvp", "u.i.a", "u.i.b", "u.c", "tex"))
        prog = ShaderProgram(ctx)
        assert prog.load("vertex", VERTEX)
        assert prog.load("fragment", FRAGMENT)
        assert prog.finalize()

        assert ctx.calls == [{"vertex_shader": VERTEX, "fragment_shader": FRAGMENT}]
        assert prog.get_attribute("a_position") == 0
        assert prog.get_attribute("a_uv") == 1
        assert prog.get_uniform("u_mvp") == 2
        assert prog.get_uniform("u.i.b") == 4
        assert prog.get_uniform("u.c") == 5
        assert list(prog.uniforms) == ["u_mvp", "u.i.a", "u.i.b", "u.c", "tex"]
        assert prog.get_log() is None

    def test_unexposed_name_is_invalid(self):
        ctx = FakeContext(_members("u_mvp"))
        prog = ShaderProgram(ctx)
        prog.load("vertex", VERTEX)
        prog.finalize()
        assert prog.get_uniform("u_mvp") == 0
        assert prog.get_attribute("a_uv") == INVALID_LOCATION
        assert prog.get_uniform("never_declared") == INVALID_LOCATION

    def test_finalize_without_stages(self):
        prog = ShaderProgram(FakeContext())
        assert not prog.finalize()
        assert "No GLSL compiled shaders found!" in prog.get_log()

    def test_link_error_goes_to_log(self):
        ctx = FakeContext(error="0:3: syntax error")
        prog = ShaderProgram(ctx)
        prog.load("vertex", VERTEX)
        assert not prog.finalize()
        assert prog.get_log().startswith("LNK:0:3: syntax error")
        assert prog.program is None
        assert prog.get_uniform("u_mvp") == INVALID_LOCATION
        assert "u_mvp" in prog.uniforms

    def test_success_clears_log(self):
        prog = ShaderProgram(FakeContext(_members("u_mvp")))
        prog.finalize()
        assert prog.get_log() is not None
        prog.load("vertex", VERTEX)
        assert prog.finalize()
        assert prog.get_log() is None

    def test_relink_releases_previous_program(self):
        ctx = FakeContext(_members("u_mvp"))
        prog = ShaderProgram(ctx)
        prog.load("vertex", VERTEX)
        prog.finalize()
        first = prog.program
        prog.load("vertex", VERTEX)
        assert prog.finalize()
        assert first.released
        assert prog.program is ctx.programs[1]

    def test_pending_state_cleared_after_finalize(self):
        ctx = FakeContext(_members("u_mvp", "tex"))
        prog = ShaderProgram(ctx)
        prog.load("vertex", VERTEX)
        prog.finalize()
        prog.load("fragment", "uniform sampler2D tex;")
        prog.finalize()
        assert ctx.calls[1] == {"fragment_shader": "uniform sampler2D tex;"}
        assert list(prog.uniforms) == ["tex"]

    def test_unknown_stage(self):
        prog = ShaderProgram(FakeContext())
        with pytest.raises(ShaderProgramError, match="Unknown shader stage"):
            prog.load("pixel", FRAGMENT)

    def test_stage_loaded_twice(self):
        ctx = FakeContext()
        prog = ShaderProgram(ctx)
        assert prog.load("vertex", "uniform float a;")
        assert not prog.load("vertex", VERTEX)
        assert "loaded twice" in prog.get_log()
        prog.finalize()
        assert ctx.calls == [{"vertex_shader": VERTEX}]
        # names from both loads are kept
        assert "a" in prog.uniforms and "u_mvp" in prog.uniforms

    def test_unload(self):
        ctx = FakeContext(_members("u_mvp"))
        prog = ShaderProgram(ctx)
        prog.load("vertex", VERTEX)
        prog.finalize()
        linked = prog.program
        prog.unload()
        assert linked.released
        assert prog.program is None
        assert prog.uniforms == {}
        assert prog.get_uniform("u_mvp") == INVALID_LOCATION


class TestBuiltinTypes:
    def test_register_builtin_type(self):
        ctx = FakeContext(_members("tint"))
        prog = ShaderProgram(ctx)
        prog.register_builtin_type("Color")
        prog.load("fragment", "uniform Color tint;")
        prog.finalize()
        assert prog.get_uniform("tint") == 0

    def test_register_family(self):
        prog = ShaderProgram(FakeContext())
        prog.register_builtin_type("texture", family=True)
        assert prog.registry.is_builtin("texture2D")

    def test_import_std_builtin_types(self):
        prog = ShaderProgram(FakeContext())
        prog.register_builtin_type("Color")
        prog.import_std_builtin_types()
        assert not prog.registry.is_builtin("Color")
        assert prog.registry.is_builtin("vec3")


class TestSetUniform:
    def _linked(self, members):
        prog = ShaderProgram(FakeContext(members))
        prog.load("fragment", FRAGMENT)
        prog.finalize()
        return prog

    def test_value_conversions(self):
        members = _members("u.c", "u.i.a", "tex", "flag", "vec", "ivec", "mat")
        prog = self._linked(members)
        prog.set_uniforms({
            "u.c": 2,
            "u.i.a": np.float32(0.5),
            "flag": True,
            "vec": [1, 2.5, 3],
            "ivec": np.array([1, 2], dtype=np.int32),
            "mat": np.eye(2),
        })
        assert members["u.c"].value == 2
        assert members["u.i.a"].value == 0.5
        assert members["flag"].value == 1
        assert members["vec"].value == (1.0, 2.5, 3.0)
        assert members["ivec"].value == (1, 2)
        assert members["mat"].value == (1.0, 0.0, 0.0, 1.0)

    def test_integral_sequences_stay_integral(self):
        members = _members("ivec", "bvec", "vec")
        prog = self._linked(members)
        prog.set_uniforms({"ivec": [3, 4], "bvec": (True, False), "vec": (1, 0.5)})
        assert members["ivec"].value == (3, 4)
        assert members["bvec"].value == (1, 0)
        assert members["vec"].value == (1.0, 0.5)
        assert all(isinstance(v, int) for v in members["ivec"].value)

    def test_unexposed_name_ignored(self):
        prog = self._linked(_members("u.c"))
        prog.set_uniform("missing", 1.0)

    def test_not_linked(self):
        prog = ShaderProgram(FakeContext())
        with pytest.raises(ShaderProgramError, match="not linked"):
            prog.set_uniform("u.c", 1.0)

    def test_failed_write(self):
        prog = self._linked({"u.c": BrokenMember()})
        with pytest.raises(ShaderProgramError, match="Failed to set uniform u.c"):
            prog.set_uniform("u.c", 1.0)


@pytest.mark.gpu
class TestRealContext:
    VERTEX_330 = """
    #version 330
    struct Xform { vec2 offset; float scale; };
    uniform Xform xf;
    in vec2 in_pos;
    void main() {
        gl_Position = vec4(in_pos * xf.scale + xf.offset, 0.0, 1.0);
    }
    """

    FRAGMENT_330 = """
    #version 330
    struct Tint { vec3 color; float alpha; };
    uniform Tint tint;
    out vec4 f_color;
    void main() {
        f_color = vec4(tint.color, tint.alpha);
    }
    """

    def test_struct_members_resolve(self):
        ctx = moderngl.create_standalone_context()
        try:
            prog = ShaderProgram(ctx)
            prog.load("vertex", self.VERTEX_330)
            prog.load("fragment", self.FRAGMENT_330)
            assert prog.finalize(), prog.get_log()
            for name in ("xf.offset", "xf.scale", "tint.color", "tint.alpha"):
                assert prog.get_uniform(name) >= 0
            prog.set_uniform("tint.color", (1.0, 0.5, 0.25))
            prog.unload()
        finally:
            ctx.release()
