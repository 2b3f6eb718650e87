"""jpath - SQL/JSON path queries over JSON documents."""

from jpath.path_language import (
    CompiledPath,
    PathExecutionError,
    PathLanguageError,
    PathParseError,
    compile_path_text,
    path_exists,
    path_match,
    path_query,
    path_query_array,
    path_query_first,
    path_query_first_text,
    run,
)


__version__ = "0.1.0"

__all__ = [
    "CompiledPath",
    "PathExecutionError",
    "PathLanguageError",
    "PathParseError",
    "__version__",
    "compile_path_text",
    "path_exists",
    "path_match",
    "path_query",
    "path_query_array",
    "path_query_first",
    "path_query_first_text",
    "run",
]
