"""Migration recipes — a simplified recipe report over a source tree.

The recipe engine itself is external; this tool validates the request,
resolves the files a recipe would touch, and reports them.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from remodern.core.outcome import ToolOutcome, success
from remodern.core.tool import BaseTool, add_property, base_schema
from remodern.tools.python_parse import collect_files


class MigrationTool(BaseTool):
    operations = frozenset(
        {"recipe", "visitor", "refactor", "migrate", "ast-migration", "code-transformation"}
    )

    def __init__(self) -> None:
        super().__init__(
            "migration-tool",
            "Plan AST migrations and refactorings as recipes over a source tree.",
            "migration",
        )

    def input_schema(self) -> dict[str, Any]:
        schema = base_schema()
        add_property(schema, "operation", "string", "Recipe or migration to apply", required=True)
        add_property(
            schema, "source", "string", "Source file path or directory to process", required=True
        )
        add_property(
            schema, "dryRun", "boolean", "Whether to report without writing changes", default=False
        )
        return schema

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        operation = self.require_param(parameters, "operation", str)
        source = self.require_param(parameters, "source", str)
        dry_run = self.optional_param(parameters, "dryRun", False, bool)

        self.require_non_empty(operation, "operation")
        self.require_non_empty(source, "source")

        path = Path(source)
        if not path.exists():
            raise self.error("SOURCE_NOT_FOUND", f"Source path not found: {source}")
        files = collect_files(path, ".py", [], [])

        metadata: dict[str, Any] = {
            "operation": operation,
            "source": source,
            "dryRun": dry_run,
            "filesMatched": len(files),
            "files": [str(file) for file in files],
            "note": "Recipe execution requires an external recipe engine",
        }
        return success("Migration operation completed (simplified)", metadata)
