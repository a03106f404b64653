"""Public API for path parser/compiler/runtime."""

from treepath.query_language.ast import Path, Value
from treepath.query_language.compiler import (
    CompiledPath,
    compile_path,
    compile_path_text,
    evaluate,
    parse,
)
from treepath.query_language.errors import (
    ArityError,
    LimitExceededError,
    MalformedLiteralError,
    QueryArgumentError,
    QueryLanguageError,
    QuerySyntaxError,
    UnknownFunctionError,
)
from treepath.query_language.functions import DEFAULT_REGISTRY, register_function
from treepath.query_language.limits import DEFAULT_PARSE_LIMITS, ParseLimits
from treepath.query_language.registry import FunctionRegistry, FunctionSpec
from treepath.query_language.runtime import EvalContext


__all__ = [
    "DEFAULT_PARSE_LIMITS",
    "DEFAULT_REGISTRY",
    "ArityError",
    "CompiledPath",
    "EvalContext",
    "FunctionRegistry",
    "FunctionSpec",
    "LimitExceededError",
    "MalformedLiteralError",
    "ParseLimits",
    "Path",
    "QueryArgumentError",
    "QueryLanguageError",
    "QuerySyntaxError",
    "UnknownFunctionError",
    "Value",
    "compile_path",
    "compile_path_text",
    "evaluate",
    "parse",
    "register_function",
]
