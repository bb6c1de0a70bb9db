"""Python source parsing with :mod:`ast`.

Walks a file or directory of ``.py`` files and reports structure (classes),
functions, imports, dependencies and docstrings per file, plus a summary.
"""

from __future__ import annotations

import ast
import fnmatch
from pathlib import Path
from typing import Any

from remodern.core.outcome import ToolOutcome, success
from remodern.core.tool import BaseTool, add_property, base_schema

ANALYSIS_TYPES = ["full", "structure", "functions", "imports", "dependencies"]


def matches_patterns(path: Path, include: list[str], exclude: list[str]) -> bool:
    """Apply glob *exclude* patterns first, then *include* (empty include matches all)."""
    text = path.as_posix()
    if any(fnmatch.fnmatch(text, pattern) for pattern in exclude):
        return False
    if not include:
        return True
    return any(fnmatch.fnmatch(text, pattern) for pattern in include)


def collect_files(source: Path, suffix: str, include: list[str], exclude: list[str]) -> list[Path]:
    """Return files under *source* (or *source* itself) ending in *suffix*, sorted."""
    if source.is_dir():
        return sorted(
            path
            for path in source.rglob(f"*{suffix}")
            if path.is_file() and matches_patterns(path, include, exclude)
        )
    if source.suffix == suffix:
        return [source]
    return []


class _DefinitionCollector(ast.NodeVisitor):
    def __init__(self, source: str, include_bodies: bool) -> None:
        self._source = source
        self._include_bodies = include_bodies
        self._scope: list[str] = []
        self.classes: list[dict[str, Any]] = []
        self.functions: list[dict[str, Any]] = []

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        bases = [ast.unparse(base) for base in node.bases]
        self.classes.append(
            {
                "name": node.name,
                "qualname": ".".join([*self._scope, node.name]),
                "kind": _class_kind(bases),
                "bases": bases,
                "decorators": [ast.unparse(dec) for dec in node.decorator_list],
                "lineno": node.lineno,
                "endLineno": node.end_lineno,
                "docstring": ast.get_docstring(node),
            }
        )
        self._scope.append(node.name)
        self.generic_visit(node)
        self._scope.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._function(node, is_async=False)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._function(node, is_async=True)

    def _function(self, node: ast.FunctionDef | ast.AsyncFunctionDef, *, is_async: bool) -> None:
        args = node.args
        info: dict[str, Any] = {
            "name": node.name,
            "qualname": ".".join([*self._scope, node.name]),
            "async": is_async,
            "parameters": [
                {"name": arg.arg, "type": ast.unparse(arg.annotation) if arg.annotation else None}
                for arg in [*args.posonlyargs, *args.args, *args.kwonlyargs]
            ],
            "returnType": ast.unparse(node.returns) if node.returns else None,
            "decorators": [ast.unparse(dec) for dec in node.decorator_list],
            "lineno": node.lineno,
            "endLineno": node.end_lineno,
            "docstring": ast.get_docstring(node),
        }
        if self._include_bodies:
            info["body"] = ast.get_source_segment(self._source, node)
        self.functions.append(info)
        self._scope.append(node.name)
        self.generic_visit(node)
        self._scope.pop()


def _class_kind(bases: list[str]) -> str:
    tails = {base.rsplit(".", 1)[-1] for base in bases}
    if "Protocol" in tails:
        return "protocol"
    if tails & {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"}:
        return "enum"
    if "Exception" in tails or any(tail.endswith("Error") for tail in tails):
        return "exception"
    return "class"


def _imports(tree: ast.Module) -> tuple[list[str], list[str]]:
    imports: list[str] = []
    from_imports: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            module = "." * node.level + (node.module or "")
            sep = "" if not module or module.endswith(".") else "."
            from_imports.extend(f"{module}{sep}{alias.name}" for alias in node.names)
    return imports, from_imports


class PythonParseTool(BaseTool):
    """Parses Python source files and reports their definitions."""

    operations = frozenset({"python-parse", "source-analysis", "ast-analysis", "python-structure"})

    def __init__(self) -> None:
        super().__init__(
            "python-parse-tool",
            "Parse and analyze Python source code. Extract classes, functions, imports, "
            "and dependencies.",
            "parsing",
        )

    def input_schema(self) -> dict[str, Any]:
        schema = base_schema()
        add_property(
            schema, "source", "string", "Python source file path or directory to parse",
            required=True,
        )
        add_property(
            schema, "analysisType", "string", "Type of analysis to perform",
            default="full", enum=ANALYSIS_TYPES,
        )
        add_property(
            schema, "includeBodies", "boolean", "Whether to include function source",
            default=False,
        )
        add_property(
            schema, "includeDocstrings", "boolean", "Whether to include docstrings",
            default=True,
        )
        add_property(schema, "include", "array", "Glob patterns to include", items={"type": "string"})
        add_property(schema, "exclude", "array", "Glob patterns to exclude", items={"type": "string"})
        return schema

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        source = self.require_param(parameters, "source", str)
        analysis_type = self.optional_param(parameters, "analysisType", "full", str).lower()
        include_bodies = self.optional_param(parameters, "includeBodies", False, bool)
        include_docstrings = self.optional_param(parameters, "includeDocstrings", True, bool)
        include = self.optional_param(parameters, "include", [], list)
        exclude = self.optional_param(parameters, "exclude", [], list)

        self.require_non_empty(source, "source")
        if analysis_type not in ANALYSIS_TYPES:
            raise self.error("INVALID_ANALYSIS_TYPE", f"Unsupported analysis type: {analysis_type}")

        source_path = Path(source)
        if not source_path.exists():
            raise self.error("SOURCE_NOT_FOUND", f"Source path not found: {source}")

        files = collect_files(source_path, ".py", include, exclude)
        if not files:
            raise self.error("NO_PYTHON_FILES", f"No Python files found in source: {source}")

        analyses = [
            self._analyze_file(path, analysis_type, include_bodies, include_docstrings)
            for path in files
        ]
        result: dict[str, Any] = {
            "files": analyses,
            "totalFiles": len(files),
            "analysisType": analysis_type,
            "summary": _summary(analyses),
        }
        return success("Python source analysis completed successfully", result)

    def _analyze_file(
        self,
        path: Path,
        analysis_type: str,
        include_bodies: bool,
        include_docstrings: bool,
    ) -> dict[str, Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise self.error("IO_ERROR", f"Failed to read Python file: {path}") from exc

        try:
            tree = ast.parse(text, filename=str(path))
        except SyntaxError as exc:
            return {"file": str(path), "parseErrors": f"{exc.msg} (line {exc.lineno})"}

        collector = _DefinitionCollector(text, include_bodies)
        collector.visit(tree)
        if not include_docstrings:
            for entry in [*collector.classes, *collector.functions]:
                entry.pop("docstring", None)

        analysis: dict[str, Any] = {
            "file": str(path),
            "size": len(text),
            "lines": len(text.splitlines()),
        }
        if include_docstrings and analysis_type == "full":
            analysis["moduleDocstring"] = ast.get_docstring(tree)
        if analysis_type in ("full", "structure"):
            analysis["classes"] = collector.classes
            analysis["classCount"] = len(collector.classes)
        if analysis_type in ("full", "functions"):
            analysis["functions"] = collector.functions
            analysis["functionCount"] = len(collector.functions)
        imports, from_imports = _imports(tree)
        if analysis_type in ("full", "imports"):
            analysis["imports"] = imports
            analysis["fromImports"] = from_imports
            analysis["importCount"] = len(imports) + len(from_imports)
        if analysis_type in ("full", "dependencies"):
            deps = sorted(
                {name.split(".", 1)[0] for name in imports}
                | {name.split(".", 1)[0] for name in from_imports if not name.startswith(".")}
            )
            analysis["dependencies"] = deps
            analysis["dependencyCount"] = len(deps)
        return analysis


def _summary(analyses: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "totalClasses": sum(a.get("classCount", 0) for a in analyses),
        "totalFunctions": sum(a.get("functionCount", 0) for a in analyses),
        "totalLines": sum(a.get("lines", 0) for a in analyses),
        "filesWithErrors": sum(1 for a in analyses if "parseErrors" in a),
    }
