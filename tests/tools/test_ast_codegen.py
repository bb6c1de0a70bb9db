"""Tests for the AST code generation tool."""

from __future__ import annotations

import ast
from typing import TYPE_CHECKING, Any

import pytest

from remodern.core.errors import ToolError
from remodern.core.tool import invoke_tool
from remodern.tools.ast_codegen import AstCodeGenTool

if TYPE_CHECKING:
    from pathlib import Path


def _run(**params: Any) -> Any:
    return AstCodeGenTool().execute(params)


class TestClassGeneration:
    def test_class_with_fields_and_methods(self) -> None:
        outcome = _run(
            type="class",
            name="User",
            superclass="Base",
            decorators=["dataclass"],
            fields=[{"name": "id", "type": "int", "initializer": "0"}, {"name": "email", "type": "str"}],
            methods=[{"name": "greet", "returnType": "str", "body": "return 'hi'"}],
        )
        assert outcome.success is True
        assert outcome.content == "Python class generated successfully"
        code = outcome.metadata["generatedCode"]
        assert outcome.metadata["className"] == "User"

        tree = ast.parse(code)
        [cls] = [node for node in tree.body if isinstance(node, ast.ClassDef)]
        assert cls.name == "User"
        assert ast.unparse(cls.bases[0]) == "Base"
        assert "@dataclass" in code
        assert "id: int = 0" in code
        assert "def greet(self) -> str:" in code

    def test_empty_class_has_pass(self) -> None:
        code = _run(type="class", name="Empty").metadata["generatedCode"]
        assert "class Empty:" in code
        assert "pass" in code

    def test_protocol_methods_are_stubs(self) -> None:
        code = _run(
            type="protocol",
            name="Readable",
            methods=[{"name": "read", "parameters": [{"name": "size", "type": "int"}], "returnType": "bytes"}],
        ).metadata["generatedCode"]
        assert "from typing import Protocol" in code
        assert "class Readable(Protocol):" in code
        assert "def read(self, size: int) -> bytes:" in code
        assert "..." in code

    def test_enum(self) -> None:
        outcome = _run(type="enum", name="Color", constants=["RED", "GREEN"])
        code = outcome.metadata["generatedCode"]
        assert outcome.metadata["enumName"] == "Color"
        assert "from enum import Enum, auto" in code
        assert "RED = auto()" in code
        assert "GREEN = auto()" in code

    def test_writes_module_file(self, tmp_path: Path) -> None:
        outcome = _run(type="class", name="OrderItem", module="shop.models", outputDir=str(tmp_path))
        expected = tmp_path / "shop" / "models" / "order_item.py"
        assert outcome.metadata["outputPath"] == str(expected)
        assert expected.read_text(encoding="utf-8") == outcome.metadata["generatedCode"]

    def test_no_file_without_output_dir(self, tmp_path: Path) -> None:
        outcome = _run(type="class", name="Thing")
        assert "outputPath" not in outcome.metadata
        assert list(tmp_path.iterdir()) == []


class TestFunctionAndField:
    def test_function(self) -> None:
        outcome = _run(
            type="function",
            name="add",
            parameters=[{"name": "a", "type": "int"}, {"name": "b", "type": "int"}],
            returnType="int",
            body="return a + b",
        )
        assert outcome.content == "Python function generated successfully"
        assert outcome.metadata["functionName"] == "add"
        namespace: dict[str, Any] = {}
        exec(outcome.metadata["generatedCode"], namespace)  # noqa: S102
        assert namespace["add"](2, 3) == 5

    def test_field(self) -> None:
        outcome = _run(type="field", name="count", fieldType="int", initializer="0")
        assert outcome.content == "Python field generated successfully"
        assert outcome.metadata["generatedCode"] == "count: int = 0"

    def test_field_requires_type(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="field", name="count")
        assert info.value.error_code == "MISSING_PARAMETER"


class TestValidation:
    def test_unknown_type(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="interface", name="X")
        assert info.value.error_code == "INVALID_TYPE"

    def test_invalid_name(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="class", name="not valid")
        assert info.value.error_code == "INVALID_NAME"

    def test_keyword_name_rejected(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="class", name="class")
        assert info.value.error_code == "INVALID_NAME"

    def test_invalid_method_name(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="class", name="X", methods=[{"name": "foo bar"}])
        assert info.value.error_code == "INVALID_NAME"

    def test_invalid_parameter_name(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="function", name="f", parameters=[{"name": "a b", "type": "int"}])
        assert info.value.error_code == "INVALID_NAME"

    def test_invalid_expression(self) -> None:
        with pytest.raises(ToolError) as info:
            _run(type="class", name="X", superclass="Base(")
        assert info.value.error_code == "INVALID_EXPRESSION"

    def test_empty_name_is_failure_outcome(self) -> None:
        outcome = invoke_tool(AstCodeGenTool(), {"type": "class", "name": "  "})
        assert outcome.success is False
        assert outcome.error_code == "EMPTY_PARAMETER"

    def test_operations(self) -> None:
        tool = AstCodeGenTool()
        assert tool.supports_operation("generate-class")
        assert tool.supports_operation("code-generation")
        assert not tool.supports_operation("python-parse")
