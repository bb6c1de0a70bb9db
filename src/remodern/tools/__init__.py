"""Built-in tool adapters."""

from remodern.tools.ast_codegen import AstCodeGenTool
from remodern.tools.bytecode import ByteCodeTool
from remodern.tools.migration import MigrationTool
from remodern.tools.python_parse import PythonParseTool
from remodern.tools.template_codegen import TemplateCodeGenTool

DEFAULT_TOOL_FACTORIES = [
    AstCodeGenTool,
    TemplateCodeGenTool,
    MigrationTool,
    ByteCodeTool,
    PythonParseTool,
]

__all__ = [
    "DEFAULT_TOOL_FACTORIES",
    "AstCodeGenTool",
    "ByteCodeTool",
    "MigrationTool",
    "PythonParseTool",
    "TemplateCodeGenTool",
]
