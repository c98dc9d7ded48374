"""
Unit tests for the dependency graph builder.
"""
import os
import pytest
from pydantic import ValidationError
from luacore.config import BundlerConfig
from luacore.errors import DynamicReferenceError, LuaSyntaxError, ResolutionError
from luacore.graph import build
from luacore.models import DependencyGraph, ModuleRecord, Reference


class TestClosure:
    """Tests for dependency closure computation."""

    def test_chain(self, lua_tree):
        """main -> a -> b gives three modules in discovery order."""
        root = lua_tree({
            "main.lua": 'return require("./a")\n',
            "a.lua": 'local b = require("./b")\nreturn { value = b }\n',
            "b.lua": 'return 42\n',
        })
        graph = build(os.path.join(root, "main.lua"))

        assert graph.entry_id == "main.lua"
        assert list(graph.modules) == ["main.lua", "a.lua", "b.lua"]
        assert graph.modules["b.lua"].references == ()
        assert graph.modules["a.lua"].references[0].target == os.path.join(root, "b.lua")
        assert list(graph.edges()) == [("main.lua", "a.lua"), ("a.lua", "b.lua")]

    def test_breadth_first_order(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("a")\nrequire("b")\n',
            "a.lua": 'require("c")\n',
            "b.lua": '',
            "c.lua": '',
        })
        graph = build(os.path.join(root, "main.lua"))
        assert list(graph.modules) == ["main.lua", "a.lua", "b.lua", "c.lua"]

    def test_single_module(self, lua_tree):
        root = lua_tree({"main.lua": 'print("hi")\n'})
        graph = build(os.path.join(root, "main.lua"))
        assert list(graph.modules) == ["main.lua"]

    def test_subdirectory_ids(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("lib.util")\n',
            "lib/util.lua": 'require("./helpers")\n',
            "lib/helpers.lua": '',
        })
        graph = build(os.path.join(root, "main.lua"))
        assert list(graph.modules) == ["main.lua", "lib/util.lua", "lib/helpers.lua"]

    def test_module_outside_entry_directory(self, lua_tree):
        root = lua_tree({
            "app/main.lua": 'require("../shared/c")\n',
            "shared/c.lua": '',
        })
        graph = build(os.path.join(root, "app", "main.lua"))
        assert list(graph.modules) == ["main.lua", "../shared/c.lua"]


class TestCycles:

    def test_two_module_cycle(self, lua_tree):
        """a -> b -> a terminates with both modules and both edges recorded."""
        root = lua_tree({
            "a.lua": 'local b = require("./b")\nreturn {}\n',
            "b.lua": 'local a = require("./a")\nreturn {}\n',
        })
        graph = build(os.path.join(root, "a.lua"))
        assert list(graph.modules) == ["a.lua", "b.lua"]
        assert list(graph.edges()) == [("a.lua", "b.lua"), ("b.lua", "a.lua")]

    def test_self_reference(self, lua_tree):
        root = lua_tree({"a.lua": 'local me = require("a")\nreturn {}\n'})
        graph = build(os.path.join(root, "a.lua"))
        assert list(graph.modules) == ["a.lua"]
        assert list(graph.edges()) == [("a.lua", "a.lua")]


class TestDeduplication:

    def test_different_spellings_one_module(self, lua_tree):
        """Spellings that resolve to one file share a single ModuleId."""
        root = lua_tree({
            "main.lua": (
                'local x1 = require("./lib/x")\n'
                'local x2 = require("lib.x")\n'
                'local x3 = require("./lib/../lib/x.lua")\n'
            ),
            "lib/x.lua": 'return {}\n',
        })
        graph = build(os.path.join(root, "main.lua"))

        assert list(graph.modules) == ["main.lua", "lib/x.lua"]
        targets = {ref.target for ref in graph.modules["main.lua"].references}
        assert targets == {os.path.join(root, "lib", "x.lua")}
        assert graph.modules["main.lua"].dependencies == [os.path.join(root, "lib", "x.lua")]

    def test_diamond(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("a")\nrequire("b")\n',
            "a.lua": 'require("shared")\n',
            "b.lua": 'require("./shared")\n',
            "shared.lua": '',
        })
        graph = build(os.path.join(root, "main.lua"))
        assert list(graph.modules) == ["main.lua", "a.lua", "b.lua", "shared.lua"]


class TestDeterminism:

    def test_same_files_same_graph(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("b")\nrequire("a")\n',
            "a.lua": 'require("b")\n',
            "b.lua": '',
        })
        first = build(os.path.join(root, "main.lua"))
        second = build(os.path.join(root, "main.lua"))
        assert first == second
        assert list(first.modules) == list(second.modules)

    def test_source_kept_byte_for_byte(self, lua_tree):
        """CRLF line endings are not translated when reading."""
        source = 'local a = require("a")\r\nreturn a\r\n'
        root = lua_tree({"main.lua": source, "a.lua": ''})
        graph = build(os.path.join(root, "main.lua"))
        assert graph.entry.source == source


class TestErrors:

    def test_missing_module(self, lua_tree):
        root = lua_tree({"main.lua": 'local x = 1\nlocal m = require("./missing")\n'})
        with pytest.raises(ResolutionError) as exc_info:
            build(os.path.join(root, "main.lua"))
        err = exc_info.value
        assert err.reference_text == "./missing"
        assert err.requesting_path == os.path.join(root, "main.lua")
        assert err.line_number == 2
        assert err.context == 'local m = require("./missing")'

    def test_missing_module_deep_in_closure(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("a")\n',
            "a.lua": 'require("gone")\n',
        })
        with pytest.raises(ResolutionError) as exc_info:
            build(os.path.join(root, "main.lua"))
        assert exc_info.value.requesting_path == os.path.join(root, "a.lua")

    def test_missing_entry(self, lua_tree):
        root = lua_tree({})
        with pytest.raises(ResolutionError):
            build(os.path.join(root, "main.lua"))

    def test_dynamic_reference(self, lua_tree):
        root = lua_tree({
            "main.lua": 'require("a")\n',
            "a.lua": 'local name = "b"\nreturn require(name)\n',
        })
        with pytest.raises(DynamicReferenceError) as exc_info:
            build(os.path.join(root, "main.lua"))
        assert exc_info.value.requesting_path == os.path.join(root, "a.lua")
        assert exc_info.value.raw_call_text == "require(name)"

    def test_syntax_error(self, lua_tree):
        root = lua_tree({"main.lua": 'local s = "unterminated\n'})
        with pytest.raises(LuaSyntaxError):
            build(os.path.join(root, "main.lua"))


class TestExternals:

    def test_external_module_is_not_resolved(self, lua_tree):
        """Host-provided modules are left out of the graph."""
        root = lua_tree({"main.lua": 'local json = require("json")\nrequire("./a")\n', "a.lua": ''})
        config = BundlerConfig(externals=("json",))
        graph = build(os.path.join(root, "main.lua"), config)
        assert list(graph.modules) == ["main.lua", "a.lua"]
        assert [r.literal for r in graph.entry.references] == ["./a"]

    def test_external_not_configured(self, lua_tree):
        root = lua_tree({"main.lua": 'local json = require("json")\n'})
        with pytest.raises(ResolutionError):
            build(os.path.join(root, "main.lua"))


class TestGraphModel:
    """Tests for the closure check on DependencyGraph."""

    def _record(self, module_id, path, target=None):
        refs = ()
        if target is not None:
            refs = (Reference(literal="x", raw='require("x")', start=0, end=12, line=1, column=1, target=target),)
        return ModuleRecord(id=module_id, path=path, source='require("x")', references=refs)

    def test_dangling_reference_rejected(self):
        with pytest.raises(ValidationError):
            DependencyGraph(
                entry_id="main.lua",
                modules={"main.lua": self._record("main.lua", "/p/main.lua", target="/p/x.lua")},
            )

    def test_unresolved_reference_rejected(self):
        record = ModuleRecord(
            id="main.lua",
            path="/p/main.lua",
            source='require("x")',
            references=(Reference(literal="x", raw='require("x")', start=0, end=12, line=1, column=1),),
        )
        with pytest.raises(ValidationError):
            DependencyGraph(entry_id="main.lua", modules={"main.lua": record})

    def test_missing_entry_rejected(self):
        with pytest.raises(ValidationError):
            DependencyGraph(entry_id="main.lua", modules={})

    def test_closed_graph_accepted(self):
        graph = DependencyGraph(
            entry_id="main.lua",
            modules={
                "main.lua": self._record("main.lua", "/p/main.lua", target="/p/x.lua"),
                "x.lua": self._record("x.lua", "/p/x.lua"),
            },
        )
        assert graph.id_for_path("/p/x.lua") == "x.lua"
        assert graph.entry.id == "main.lua"

    def test_records_are_immutable(self):
        record = self._record("x.lua", "/p/x.lua")
        with pytest.raises(ValidationError):
            record.source = "changed"
