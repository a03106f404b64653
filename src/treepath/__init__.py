"""Declarative path queries over JSON documents."""

from treepath.query_language import (
    FunctionRegistry,
    ParseLimits,
    QueryLanguageError,
    compile_path_text,
    evaluate,
    parse,
    register_function,
)


__version__ = "0.1.0"

__all__ = [
    "FunctionRegistry",
    "ParseLimits",
    "QueryLanguageError",
    "__version__",
    "compile_path_text",
    "evaluate",
    "parse",
    "register_function",
]
