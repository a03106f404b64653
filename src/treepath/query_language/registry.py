"""Function registry and dispatch with the array broadcast convention."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from treepath.query_language.ast import Value
from treepath.query_language.errors import UnknownFunctionError
from treepath.query_language.tokenizer import decompose_args


if TYPE_CHECKING:
    from treepath.query_language.runtime import EvalContext


type FunctionImpl = Callable[[Value, list[str], EvalContext], Value]


logger = logging.getLogger("treepath")


@dataclass(frozen=True, slots=True)
class FunctionSpec:
    """Registered function implementation and its dispatch metadata."""

    name: str
    impl: FunctionImpl
    min_args: int = 0
    max_args: int = 0
    array_aware: bool = False

    @property
    def arity_text(self) -> str:
        """Return human readable argument count bounds."""
        if self.max_args < 0:
            return f"{self.min_args}+"
        if self.min_args == self.max_args:
            return str(self.min_args)
        return f"{self.min_args}-{self.max_args}"


class FunctionRegistry:
    """Mapping from case-sensitive function names to implementations."""

    def __init__(self, specs: Iterable[FunctionSpec] = ()) -> None:
        self._functions: dict[str, FunctionSpec] = {spec.name: spec for spec in specs}

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def register(
        self,
        name: str,
        impl: FunctionImpl,
        *,
        min_args: int = 0,
        max_args: int = 0,
        array_aware: bool = False,
    ) -> FunctionSpec:
        """Register or replace a function implementation.

        Args:
            name: Function name as written in paths
            impl: Callable receiving `(node, params, context)`
            min_args: Minimum argument count
            max_args: Maximum argument count, -1 for unbounded
            array_aware: Whether the function receives whole arrays

        Returns:
            The registered function spec
        """
        spec = FunctionSpec(name, impl, min_args, max_args, array_aware)
        self._functions[name] = spec
        return spec

    def get(self, name: str) -> FunctionSpec:
        """Return the function spec registered under name."""
        spec = self._functions.get(name)
        if spec is None:
            raise UnknownFunctionError(name)
        return spec

    def names(self) -> list[str]:
        """Return registered function names in sorted order."""
        return sorted(self._functions)

    def specs(self) -> list[FunctionSpec]:
        """Return registered function specs sorted by name."""
        return [self._functions[name] for name in self.names()]

    def copy(self) -> FunctionRegistry:
        """Return an independent registry with the same functions."""
        return FunctionRegistry(self._functions.values())

    def invoke(self, name: str, raw_args: str, node: Value, context: EvalContext) -> Value:
        """Dispatch a function call against node.

        Arguments are decomposed and arity-checked before the body runs.
        Functions that are not array-aware are applied to each element of an
        array node with the element index threaded through the context.
        """
        spec = self.get(name)
        params = decompose_args(raw_args, spec.min_args, spec.max_args, context.limits, name)
        if spec.array_aware or not isinstance(node, list):
            logger.debug("Calling %s(%s)", name, raw_args)
            return spec.impl(node, params, context)

        logger.debug("Broadcasting %s(%s) over %d elements", name, raw_args, len(node))
        return [
            spec.impl(element, params, context.at(index)) for index, element in enumerate(node)
        ]
