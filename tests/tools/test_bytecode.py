"""Tests for the bytecode analysis tool."""

from __future__ import annotations

import py_compile
from pathlib import Path

import pytest

from remodern.core.errors import ToolError
from remodern.tools.bytecode import ByteCodeTool, iter_code_objects

_SOURCE = """\
def outer(a, b=2):
    def inner():
        return a
    return inner() + b


class Widget:
    def render(self):
        return "widget"
"""


@pytest.fixture
def module_file(tmp_path: Path) -> Path:
    path = tmp_path / "widgets.py"
    path.write_text(_SOURCE, encoding="utf-8")
    return path


class TestIterCodeObjects:
    def test_nested_objects(self) -> None:
        code = compile(_SOURCE, "<test>", "exec")
        qualnames = [c.co_qualname for c in iter_code_objects(code)]
        assert qualnames[0] == "<module>"
        assert {"outer", "outer.<locals>.inner", "Widget", "Widget.render"} <= set(qualnames)


class TestByteCodeTool:
    def test_source_file(self, module_file: Path) -> None:
        outcome = ByteCodeTool().execute({"source": str(module_file)})
        assert outcome.success is True
        assert outcome.content == "Bytecode analysis completed successfully"
        [entry] = outcome.metadata["files"]
        outer = next(o for o in entry["codeObjects"] if o["qualname"] == "outer")
        assert outer["argCount"] == 2
        assert "a" in outer["varnames"]
        assert "instructions" not in outer

    def test_pyc_file(self, module_file: Path, tmp_path: Path) -> None:
        pyc = Path(py_compile.compile(str(module_file), cfile=str(tmp_path / "widgets.pyc"), doraise=True))
        outcome = ByteCodeTool().execute({"source": str(pyc), "analysisType": "names"})
        [entry] = outcome.metadata["files"]
        assert entry["codeObjectCount"] >= 5
        module = entry["codeObjects"][0]
        assert "outer" in module["names"]
        assert "argCount" not in module

    def test_object_filter_and_instructions(self, module_file: Path) -> None:
        outcome = ByteCodeTool().execute(
            {"source": str(module_file), "objectFilter": r"^Widget\.", "includeInstructions": True}
        )
        [entry] = outcome.metadata["files"]
        assert [o["qualname"] for o in entry["codeObjects"]] == ["Widget.render"]
        opnames = {ins["opname"] for ins in entry["codeObjects"][0]["instructions"]}
        assert any(op.startswith("RETURN") for op in opnames)

    def test_directory_prefers_sources(self, module_file: Path) -> None:
        outcome = ByteCodeTool().execute({"source": str(module_file.parent), "analysisType": "structure"})
        assert outcome.metadata["totalFiles"] == 1
        assert outcome.metadata["totalCodeObjects"] >= 5

    def test_incompatible_pyc(self, tmp_path: Path) -> None:
        path = tmp_path / "old.pyc"
        path.write_bytes(b"\x00\x00\x00\x00" + b"\x00" * 20)
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(path)})
        assert info.value.error_code == "INCOMPATIBLE_BYTECODE"

    def test_compile_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.py"
        path.write_text("def (:\n", encoding="utf-8")
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(path)})
        assert info.value.error_code == "PARSE_ERROR"

    def test_invalid_source_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(path)})
        assert info.value.error_code == "INVALID_SOURCE"

    def test_empty_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(tmp_path)})
        assert info.value.error_code == "NO_BYTECODE_FILES"

    def test_invalid_filter(self, module_file: Path) -> None:
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(module_file), "objectFilter": "("})
        assert info.value.error_code == "INVALID_FILTER"

    def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(ToolError) as info:
            ByteCodeTool().execute({"source": str(tmp_path / "ghost.py")})
        assert info.value.error_code == "SOURCE_NOT_FOUND"
