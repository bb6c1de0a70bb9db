"""AST code generation — build Python classes, protocols, enums, functions and fields.

Source is assembled from :mod:`ast` nodes and rendered with
:func:`ast.unparse`, so the output is always syntactically valid.
"""

from __future__ import annotations

import ast
import keyword
import re
from pathlib import Path
from typing import Any

from remodern.core.outcome import ToolOutcome, success
from remodern.core.tool import BaseTool, add_property, base_schema

ELEMENT_TYPES = ["class", "protocol", "enum", "function", "field"]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def _is_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _node(cls: type[ast.AST], **fields: Any) -> Any:
    # Newer interpreters add ``type_params`` to class and function nodes.
    if "type_params" in cls._fields and "type_params" not in fields:
        fields["type_params"] = []
    return cls(**fields)


class AstCodeGenTool(BaseTool):
    """Generates Python source for a single code element."""

    operations = frozenset(
        {
            "generate-class",
            "generate-protocol",
            "generate-enum",
            "generate-function",
            "generate-field",
            "code-generation",
        }
    )

    def __init__(self) -> None:
        super().__init__(
            "ast-code-gen",
            "Generate Python code from AST nodes. Supports classes, protocols, enums, "
            "functions, and fields.",
            "code-generation",
        )

    def input_schema(self) -> dict[str, Any]:
        schema = base_schema()
        add_property(
            schema, "type", "string", "Type of code element to generate",
            required=True, enum=ELEMENT_TYPES,
        )
        add_property(schema, "name", "string", "Name of the code element", required=True)
        add_property(schema, "module", "string", "Dotted module path for the generated file", default="")
        add_property(
            schema, "outputDir", "string",
            "Directory to write the generated module to; omit to only return the code",
        )
        add_property(schema, "superclass", "string", "Base class (for classes)")
        add_property(
            schema, "interfaces", "array", "Additional base classes or protocols",
            items={"type": "string"},
        )
        add_property(schema, "decorators", "array", "Decorator expressions", items={"type": "string"})
        add_property(
            schema, "fields", "array",
            "Fields as objects with 'name', 'type' and optional 'initializer'",
            items={"type": "object"},
        )
        add_property(
            schema, "methods", "array",
            "Methods as objects with 'name', 'parameters', 'returnType' and 'body'",
            items={"type": "object"},
        )
        add_property(schema, "constants", "array", "Enum member names", items={"type": "string"})
        add_property(
            schema, "parameters", "array",
            "Function parameters as objects with 'name' and optional 'type'",
            items={"type": "object"},
        )
        add_property(schema, "returnType", "string", "Function return annotation")
        add_property(schema, "body", "string", "Function body source", default="")
        add_property(schema, "fieldType", "string", "Field annotation (for fields)")
        add_property(schema, "initializer", "string", "Field initializer expression")
        return schema

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        element_type = self.require_param(parameters, "type", str)
        name = self.require_non_empty(self.require_param(parameters, "name", str), "name")
        module = self.optional_param(parameters, "module", "", str)
        output_dir = self.optional_param(parameters, "outputDir", "", str)

        if not _is_name(name):
            raise self.error("INVALID_NAME", f"'{name}' is not a valid Python identifier")

        kind = element_type.lower()
        if kind == "function":
            code = ast.unparse(self._function(parameters, name))
            return success(
                "Python function generated successfully",
                {"generatedCode": code, "functionName": name},
            )
        if kind == "field":
            field_type = self.require_param(parameters, "fieldType", str)
            initializer = self.optional_param(parameters, "initializer", "", str)
            code = ast.unparse(self._field(name, field_type, initializer))
            return success(
                "Python field generated successfully",
                {"generatedCode": code, "fieldName": name, "fieldType": field_type},
            )
        if kind not in ("class", "protocol", "enum"):
            raise self.error("INVALID_TYPE", f"Unsupported code generation type: {element_type}")

        tree = ast.Module(body=self._type_module(kind, parameters, name), type_ignores=[])
        code = ast.unparse(ast.fix_missing_locations(tree)) + "\n"
        metadata: dict[str, Any] = {
            "generatedCode": code,
            f"{kind}Name": name,
            "module": module,
        }
        if output_dir.strip():
            metadata["outputPath"] = str(self._write(code, output_dir, module, name))
        return success(f"Python {kind} generated successfully", metadata)

    # -- element builders ---------------------------------------------

    def _type_module(self, kind: str, parameters: dict[str, Any], name: str) -> list[ast.stmt]:
        imports: list[ast.stmt] = []
        bases: list[ast.expr] = []
        body: list[ast.stmt] = []

        if kind == "enum":
            imports.append(
                ast.ImportFrom(
                    module="enum",
                    names=[ast.alias(name="Enum"), ast.alias(name="auto")],
                    level=0,
                )
            )
            bases.append(ast.Name(id="Enum", ctx=ast.Load()))
            for constant in self.optional_param(parameters, "constants", [], list):
                if not isinstance(constant, str) or not _is_name(constant):
                    raise self.error("INVALID_NAME", f"Invalid enum constant: {constant!r}")
                body.append(
                    ast.Assign(
                        targets=[ast.Name(id=constant, ctx=ast.Store())],
                        value=ast.Call(func=ast.Name(id="auto", ctx=ast.Load()), args=[], keywords=[]),
                    )
                )
        else:
            superclass = self.optional_param(parameters, "superclass", "", str)
            if kind == "class" and superclass.strip():
                bases.append(self._expr(superclass, "superclass"))
            if kind == "protocol":
                imports.append(
                    ast.ImportFrom(module="typing", names=[ast.alias(name="Protocol")], level=0)
                )
                bases.append(ast.Name(id="Protocol", ctx=ast.Load()))
            for interface in self.optional_param(parameters, "interfaces", [], list):
                if isinstance(interface, str) and interface.strip():
                    bases.append(self._expr(interface, "interfaces"))
            for field in self.optional_param(parameters, "fields", [], list):
                if isinstance(field, dict) and field.get("name") and field.get("type"):
                    body.append(
                        self._field(str(field["name"]), str(field["type"]), str(field.get("initializer") or ""))
                    )
            for method in self.optional_param(parameters, "methods", [], list):
                if isinstance(method, dict) and method.get("name"):
                    body.append(self._function(method, str(method["name"]), is_method=True, stub=kind == "protocol"))

        decorators = [
            self._expr(decorator.lstrip("@"), "decorators")
            for decorator in self.optional_param(parameters, "decorators", [], list)
            if isinstance(decorator, str) and decorator.strip()
        ]
        class_def = _node(
            ast.ClassDef,
            name=name,
            bases=bases,
            keywords=[],
            body=body or [ast.Pass()],
            decorator_list=decorators,
        )
        return [*imports, class_def]

    def _function(
        self,
        spec: dict[str, Any],
        name: str,
        *,
        is_method: bool = False,
        stub: bool = False,
    ) -> ast.FunctionDef:
        if not _is_name(name):
            raise self.error("INVALID_NAME", f"Invalid function name: {name!r}")
        args: list[ast.arg] = [ast.arg(arg="self")] if is_method else []
        params = spec.get("parameters") or []
        if not isinstance(params, list):
            raise self.error("INVALID_PARAMETER_TYPE", "Parameter 'parameters' must be of type array")
        for param in params:
            if not isinstance(param, dict) or not param.get("name"):
                continue
            if not _is_name(str(param["name"])):
                raise self.error("INVALID_NAME", f"Invalid parameter name: {param['name']!r}")
            annotation = self._expr(str(param["type"]), "parameters") if param.get("type") else None
            args.append(ast.arg(arg=str(param["name"]), annotation=annotation))

        return_type = spec.get("returnType")
        returns = self._expr(str(return_type), "returnType") if return_type else None

        body_source = str(spec.get("body") or "")
        if stub:
            body: list[ast.stmt] = [ast.Expr(value=ast.Constant(value=Ellipsis))]
        elif body_source.strip():
            body = self._statements(body_source)
        else:
            body = [ast.Pass()]

        return _node(
            ast.FunctionDef,
            name=name,
            args=ast.arguments(
                posonlyargs=[], args=args, vararg=None, kwonlyargs=[],
                kw_defaults=[], kwarg=None, defaults=[],
            ),
            body=body,
            decorator_list=[],
            returns=returns,
        )

    def _field(self, name: str, field_type: str, initializer: str) -> ast.AnnAssign:
        if not _is_name(name):
            raise self.error("INVALID_NAME", f"Invalid field name: {name!r}")
        return ast.AnnAssign(
            target=ast.Name(id=name, ctx=ast.Store()),
            annotation=self._expr(field_type, "fieldType"),
            value=self._expr(initializer, "initializer") if initializer.strip() else None,
            simple=1,
        )

    # -- helpers --------------------------------------------------------

    def _expr(self, source: str, param_name: str) -> ast.expr:
        try:
            return ast.parse(source.strip(), mode="eval").body
        except SyntaxError as exc:
            raise self.error(
                "INVALID_EXPRESSION", f"Invalid expression in '{param_name}': {source!r}"
            ) from exc

    def _statements(self, source: str) -> list[ast.stmt]:
        try:
            return ast.parse(source).body
        except SyntaxError as exc:
            raise self.error("INVALID_EXPRESSION", f"Invalid body source: {exc.msg}") from exc

    def _write(self, code: str, output_dir: str, module: str, name: str) -> Path:
        package_dir = Path(output_dir).joinpath(*[part for part in module.split(".") if part])
        path = package_dir / f"{_snake_case(name)}.py"
        try:
            package_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(code, encoding="utf-8")
        except OSError as exc:
            raise self.error("IO_ERROR", f"Failed to write generated code to {path}") from exc
        return path
