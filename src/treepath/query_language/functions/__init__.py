"""Standard function library."""

from treepath.query_language.functions import array, dates, logical, strings, structural
from treepath.query_language.registry import FunctionImpl, FunctionRegistry, FunctionSpec


def build_default_registry() -> FunctionRegistry:
    """Create a registry holding every standard function."""
    registry = FunctionRegistry()
    array.register(registry)
    structural.register(registry)
    strings.register(registry)
    logical.register(registry)
    dates.register(registry)
    return registry


DEFAULT_REGISTRY = build_default_registry()


def register_function(
    name: str,
    impl: FunctionImpl,
    *,
    min_args: int = 0,
    max_args: int = 0,
    array_aware: bool = False,
) -> FunctionSpec:
    """Register a function in the default registry."""
    return DEFAULT_REGISTRY.register(
        name, impl, min_args=min_args, max_args=max_args, array_aware=array_aware
    )


__all__ = [
    "DEFAULT_REGISTRY",
    "build_default_registry",
    "register_function",
]
