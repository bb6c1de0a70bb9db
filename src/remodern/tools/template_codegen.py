"""Template code generation with :class:`string.Template`.

Templates use ``$name`` / ``${name}`` placeholders, filled from the
``dataModel`` argument. Nested data-model values are flattened with
underscores, so ``{"entity": {"name": "User"}}`` fills ``${entity_name}``.
"""

from __future__ import annotations

from pathlib import Path
from string import Template
from typing import Any

from remodern.core.outcome import ToolOutcome, success
from remodern.core.tool import BaseTool, add_property, base_schema


def flatten_data_model(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into underscore-joined keys, keeping the top level too."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}_{key}" if prefix else str(key)
        flat[full_key] = value
        if isinstance(value, dict):
            flat.update(flatten_data_model(value, full_key))
    return flat


class TemplateCodeGenTool(BaseTool):
    operations = frozenset({"template-generation", "code-generation"})

    def __init__(self) -> None:
        super().__init__(
            "template-code-gen",
            "Generate code from string templates. Supports inline templates and template "
            "files with a data model.",
            "code-generation",
        )

    def input_schema(self) -> dict[str, Any]:
        schema = base_schema()
        add_property(
            schema, "template", "string", "Template content or path to a template file",
            required=True,
        )
        add_property(
            schema, "templateType", "string", "Whether template is content or file path",
            default="content", enum=["content", "file"],
        )
        add_property(
            schema, "dataModel", "object", "Data model used to fill the template", required=True
        )
        add_property(schema, "outputFile", "string", "Output file path for generated code")
        add_property(
            schema, "templateDir", "string", "Directory containing template files",
            default="templates",
        )
        add_property(
            schema, "encoding", "string", "Character encoding for template and output",
            default="utf-8",
        )
        add_property(
            schema, "strict", "boolean", "Fail on placeholders missing from the data model",
            default=True,
        )
        return schema

    def do_execute(self, parameters: dict[str, Any]) -> ToolOutcome:
        template_ref = self.require_param(parameters, "template", str)
        template_type = self.optional_param(parameters, "templateType", "content", str)
        data_model = self.require_param(parameters, "dataModel", dict)
        output_file = self.optional_param(parameters, "outputFile", "", str)
        template_dir = self.optional_param(parameters, "templateDir", "templates", str)
        encoding = self.optional_param(parameters, "encoding", "utf-8", str)
        strict = self.optional_param(parameters, "strict", True, bool)

        self.require_non_empty(template_ref, "template")

        if template_type == "file":
            source = self._load_template(template_ref, template_dir, encoding)
        elif template_type == "content":
            source = template_ref
        else:
            raise self.error("INVALID_TEMPLATE_TYPE", f"Unsupported template type: {template_type}")

        generated = self._render(source, data_model, strict=strict)

        metadata: dict[str, Any] = {
            "generatedCode": generated,
            "templateType": template_type,
            "dataModelKeys": sorted(data_model),
        }
        if output_file.strip():
            self._write(generated, output_file, encoding)
            metadata["outputFile"] = output_file
        return success("Code generated successfully from template", metadata)

    def _load_template(self, template_path: str, template_dir: str, encoding: str) -> str:
        directory = Path(template_dir)
        if not directory.is_dir():
            raise self.error("TEMPLATE_DIR_NOT_FOUND", f"Template directory not found: {template_dir}")
        path = directory / template_path
        try:
            return path.read_text(encoding=encoding)
        except (OSError, LookupError) as exc:
            raise self.error("TEMPLATE_LOAD_ERROR", f"Failed to load template file: {template_path}") from exc

    def _render(self, source: str, data_model: dict[str, Any], *, strict: bool) -> str:
        template = Template(source)
        mapping = flatten_data_model(data_model)
        try:
            if strict:
                return template.substitute(mapping)
            return template.safe_substitute(mapping)
        except KeyError as exc:
            raise self.error(
                "TEMPLATE_PROCESSING_ERROR", f"Template processing failed: missing value for {exc}"
            ) from exc
        except ValueError as exc:
            raise self.error("TEMPLATE_PARSE_ERROR", f"Failed to parse template content: {exc}") from exc

    def _write(self, content: str, output_file: str, encoding: str) -> None:
        path = Path(output_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding=encoding)
        except (OSError, LookupError) as exc:
            raise self.error("FILE_WRITE_ERROR", f"Failed to write output to file: {output_file}") from exc
