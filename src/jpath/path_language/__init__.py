"""Public API for the SQL/JSON path parser, compiler and executor."""

from jpath.path_language.ast import CompiledPath, PathNode
from jpath.path_language.compiler import compile_path, compile_path_text
from jpath.path_language.document import load_json, render_json
from jpath.path_language.errors import (
    PathExecutionError,
    PathLanguageError,
    PathParseError,
    UndefinedVariable,
)
from jpath.path_language.executor import (
    Failed,
    Matched,
    NotFound,
    Outcome,
    path_exists,
    path_match,
    path_query,
    path_query_array,
    path_query_first,
    path_query_first_text,
    run,
)
from jpath.path_language.parser import parse_path
from jpath.path_language.variables import MappingVariables


__all__ = [
    "CompiledPath",
    "Failed",
    "MappingVariables",
    "Matched",
    "NotFound",
    "Outcome",
    "PathExecutionError",
    "PathLanguageError",
    "PathNode",
    "PathParseError",
    "UndefinedVariable",
    "compile_path",
    "compile_path_text",
    "load_json",
    "parse_path",
    "path_exists",
    "path_match",
    "path_query",
    "path_query_array",
    "path_query_first",
    "path_query_first_text",
    "render_json",
    "run",
]
