"""Bytecode inspection with :mod:`dis`.

Accepts a ``.py`` file (compiled in memory), a ``.pyc`` file for the
running interpreter, or a directory of either.
"""

from __future__ import annotations

import dis
import importlib.util
import marshal
import re
from pathlib import Path
from types import CodeType
from typing import Any

from remodern.core.outcome import ToolOutcome, success
from remodern.core.tool import BaseTool, add_property, base_schema
from remodern.tools.python_parse import collect_files

ANALYSIS_TYPES = ["full", "structure", "instructions", "names", "constants"]

# Header of a .pyc: magic, flags, then mtime+size or a source hash.
_PYC_HEADER_SIZE = 16


def iter_code_objects(code: CodeType) -> list[CodeType]:
    """Return *code* and every code object nested in its constants, depth first."""
    found = [code]
    for const in code.co_consts:
        if isinstance(const, CodeType):
            found.extend(iter_code_objects(const))
    return found


class ByteCodeTool(BaseTool):
    operations = frozenset({"bytecode-analysis", "code-object-analysis", "pyc-analysis", "disassemble"})

    def __init__(self) -> None:
        super().__init__(
            "bytecode-tool",
            "Analyze Python bytecode with dis. Supports .py sources, .pyc files, and "
            "directories of either.",
            "bytecode-analysis",
        )

    def input_schema(self) -> dict[str, Any]:
        schema = base_schema()
        add_property(
            schema, "source", "string", "Path to a .py file, .pyc file, or directory",
            required=True,
        )
        add_property(
            schema, "analysisType", "string", "Type of bytecode analysis to perform",
            default="full", enum=ANALYSIS_TYPES,
        )
        add_property(
            schema, "objectFilter", "string",
            "Regular expression matched against code object qualified names",
        )
        add_property(
            schema, "includeInstructions", "boolean",
            "Whether to include the instruction listing for each code object",
            default=False,
        )
        return schema

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        source = self.require_param(parameters, "source", str)
        analysis_type = self.optional_param(parameters, "analysisType", "full", str).lower()
        object_filter = self.optional_param(parameters, "objectFilter", "", str)
        include_instructions = self.optional_param(parameters, "includeInstructions", False, bool)

        self.require_non_empty(source, "source")
        if analysis_type not in ANALYSIS_TYPES:
            raise self.error("INVALID_ANALYSIS_TYPE", f"Unsupported analysis type: {analysis_type}")
        try:
            pattern = re.compile(object_filter) if object_filter else None
        except re.error as exc:
            raise self.error("INVALID_FILTER", f"Invalid objectFilter pattern: {exc}") from exc

        path = Path(source)
        if not path.exists():
            raise self.error("SOURCE_NOT_FOUND", f"Source path not found: {source}")

        if path.is_dir():
            files = collect_files(path, ".py", [], []) or collect_files(path, ".pyc", [], [])
        elif path.suffix in (".py", ".pyc"):
            files = [path]
        else:
            raise self.error("INVALID_SOURCE", "Source must be a .py file, .pyc file, or directory")

        if not files:
            raise self.error("NO_BYTECODE_FILES", f"No .py or .pyc files found in source: {source}")

        analyses: list[dict[str, Any]] = []
        for file in files:
            module_code = self._load(file)
            objects = [
                self._describe(code, analysis_type, include_instructions or analysis_type == "instructions")
                for code in iter_code_objects(module_code)
                if pattern is None or pattern.search(code.co_qualname)
            ]
            analyses.append({"file": str(file), "codeObjects": objects, "codeObjectCount": len(objects)})

        result: dict[str, Any] = {
            "files": analyses,
            "totalFiles": len(analyses),
            "totalCodeObjects": sum(a["codeObjectCount"] for a in analyses),
            "analysisType": analysis_type,
        }
        return success("Bytecode analysis completed successfully", result)

    def _load(self, path: Path) -> CodeType:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise self.error("IO_ERROR", f"Failed to read bytecode file: {path}") from exc

        if path.suffix == ".py":
            try:
                return compile(data, str(path), "exec", dont_inherit=True)
            except (SyntaxError, ValueError) as exc:
                raise self.error("PARSE_ERROR", f"Failed to compile {path}: {exc}") from exc

        if data[:4] != importlib.util.MAGIC_NUMBER:
            raise self.error(
                "INCOMPATIBLE_BYTECODE",
                f"{path} was not compiled by this interpreter version",
            )
        try:
            code = marshal.loads(data[_PYC_HEADER_SIZE:])
        except (EOFError, ValueError, TypeError) as exc:
            raise self.error("INVALID_SOURCE", f"Corrupt bytecode file: {path}") from exc
        if not isinstance(code, CodeType):
            raise self.error("INVALID_SOURCE", f"No code object in {path}")
        return code

    def _describe(self, code: CodeType, analysis_type: str, include_instructions: bool) -> dict[str, Any]:
        info: dict[str, Any] = {
            "name": code.co_name,
            "qualname": code.co_qualname,
            "firstLineNo": code.co_firstlineno,
        }
        if analysis_type in ("full", "structure"):
            info.update(
                {
                    "argCount": code.co_argcount,
                    "kwOnlyArgCount": code.co_kwonlyargcount,
                    "localCount": code.co_nlocals,
                    "stackSize": code.co_stacksize,
                    "flags": dis.pretty_flags(code.co_flags),
                }
            )
        if analysis_type in ("full", "names"):
            info["names"] = list(code.co_names)
            info["varnames"] = list(code.co_varnames)
        if analysis_type in ("full", "constants"):
            info["constants"] = [
                f"<code {const.co_qualname}>" if isinstance(const, CodeType) else repr(const)
                for const in code.co_consts
            ]
        if include_instructions:
            info["instructions"] = [
                {"offset": ins.offset, "opname": ins.opname, "arg": ins.arg, "argrepr": ins.argrepr}
                for ins in dis.get_instructions(code)
            ]
        return info
