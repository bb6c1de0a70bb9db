"""Tests for ToolRegistry."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from remodern.core.errors import DuplicateToolError
from remodern.core.outcome import ToolOutcome, success
from remodern.core.registry import ToolRegistry
from remodern.core.tool import BaseTool, base_schema


class StubTool(BaseTool):
    def __init__(self, name: str, category: str = "general", operations: set[str] | None = None) -> None:
        super().__init__(name, f"{name} tool", category)
        self._ops = frozenset(operations or ())

    def input_schema(self) -> dict[str, Any]:
        return base_schema()

    def supports_operation(self, operation: str) -> bool:
        return operation in self._ops

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        return success(self.name)


class TestRegister:
    def test_register_and_get(self) -> None:
        registry = ToolRegistry()
        tool = StubTool("a")
        registry.register(tool)

        assert registry.get("a") is tool
        assert registry.is_registered("a")
        assert registry.count() == 1
        assert len(registry) == 1
        assert "a" in registry

    def test_duplicate_rejected(self) -> None:
        first = StubTool("a", "x")
        registry = ToolRegistry([first])
        with pytest.raises(DuplicateToolError):
            registry.register(StubTool("a", "y"))

        assert registry.count() == 1
        assert registry.get_categories() == frozenset({"x"})
        assert registry.get("a") is first

    def test_constructor_registers_all(self) -> None:
        registry = ToolRegistry([StubTool("a"), StubTool("b")])
        assert registry.get_names() == frozenset({"a", "b"})

    def test_get_unknown(self) -> None:
        registry = ToolRegistry()
        assert registry.get("missing") is None
        assert not registry.is_registered("missing")
        assert "missing" not in registry

    def test_non_string_not_contained(self) -> None:
        assert 1 not in ToolRegistry([StubTool("a")])


class TestCategories:
    def test_get_by_category_sorted(self) -> None:
        registry = ToolRegistry([StubTool("zeta", "c"), StubTool("alpha", "c"), StubTool("mid", "d")])
        assert [t.name for t in registry.get_by_category("c")] == ["alpha", "zeta"]

    def test_unknown_category_is_empty(self) -> None:
        assert ToolRegistry().get_by_category("nope") == []

    def test_categories_match_tools(self) -> None:
        registry = ToolRegistry([StubTool("a", "x"), StubTool("b", "y"), StubTool("c", "x")])
        assert registry.get_categories() == frozenset({"x", "y"})
        assert {t.category for t in registry.get_all()} == registry.get_categories()


class TestUnregister:
    def test_unregister_removes_tool_and_index(self) -> None:
        registry = ToolRegistry([StubTool("a", "x"), StubTool("b", "y")])
        assert registry.unregister("a") is True

        assert registry.get("a") is None
        assert registry.get_by_category("x") == []
        assert registry.get_categories() == frozenset({"y"})

    def test_unregister_keeps_shared_category(self) -> None:
        registry = ToolRegistry([StubTool("a", "x"), StubTool("b", "x")])
        registry.unregister("a")
        assert registry.get_categories() == frozenset({"x"})
        assert [t.name for t in registry.get_by_category("x")] == ["b"]

    def test_unregister_absent(self) -> None:
        registry = ToolRegistry([StubTool("a", "x")])
        assert registry.unregister("ghost") is False
        assert registry.count() == 1
        assert registry.get_categories() == frozenset({"x"})

    def test_reregister_after_unregister(self) -> None:
        registry = ToolRegistry([StubTool("a")])
        registry.unregister("a")
        registry.register(StubTool("a"))
        assert registry.count() == 1

    def test_clear(self) -> None:
        registry = ToolRegistry([StubTool("a", "x"), StubTool("b", "y")])
        registry.clear()
        assert registry.count() == 0
        assert registry.get_names() == frozenset()
        assert registry.get_categories() == frozenset()


class TestQueries:
    def test_sizes_agree(self) -> None:
        registry = ToolRegistry([StubTool("a", "x"), StubTool("b", "y"), StubTool("c", "x")])
        assert len(registry.get_all()) == registry.count() == len(registry.get_names()) == 3

    def test_get_all_preserves_registration_order(self) -> None:
        registry = ToolRegistry([StubTool("b"), StubTool("a"), StubTool("c")])
        assert [t.name for t in registry.get_all()] == ["b", "a", "c"]
        assert [t.name for t in registry] == ["b", "a", "c"]

    def test_get_all_is_a_snapshot(self) -> None:
        registry = ToolRegistry([StubTool("a")])
        snapshot = registry.get_all()
        registry.register(StubTool("b"))
        assert len(snapshot) == 1

    def test_supporting_operation(self) -> None:
        registry = ToolRegistry(
            [
                StubTool("gen", operations={"code-generation"}),
                StubTool("parse", operations={"parse"}),
                StubTool("tmpl", operations={"code-generation", "template"}),
            ]
        )
        assert [t.name for t in registry.get_supporting_operation("code-generation")] == ["gen", "tmpl"]
        assert registry.get_supporting_operation("unknown") == []


class TestConcurrency:
    def test_parallel_registration(self) -> None:
        registry = ToolRegistry()
        errors: list[Exception] = []

        def worker(offset: int) -> None:
            try:
                for i in range(50):
                    registry.register(StubTool(f"t{offset}-{i}", f"c{i % 5}"))
            except Exception as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert registry.count() == 400
        assert sum(len(registry.get_by_category(c)) for c in registry.get_categories()) == 400

    def test_parallel_duplicate_registers_once(self) -> None:
        registry = ToolRegistry()
        failures: list[DuplicateToolError] = []
        barrier = threading.Barrier(6)

        def worker() -> None:
            barrier.wait()
            try:
                registry.register(StubTool("same"))
            except DuplicateToolError as exc:
                failures.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert registry.count() == 1
        assert len(failures) == 5
