"""Mutable per-query execution state."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from jpath.path_language.document import container_ordinals
from jpath.path_language.errors import PathDepthExceeded
from jpath.path_language.variables import VariableResolver


DEFAULT_MAX_DEPTH = 256

logger = logging.getLogger("jpath")


@dataclass(slots=True)
class BaseObject:
    """Container that generated `.keyvalue()` ids are relative to."""

    container: object
    id: int


@dataclass(slots=True)
class ExecContext:
    """Execution context for a single path query."""

    lax: bool
    root: object
    variables: VariableResolver
    throw_errors: bool = True
    ignore_structural_errors: bool = False
    current_stack: list[object] = field(default_factory=list)
    base_object: BaseObject = field(default_factory=lambda: BaseObject(None, 0))
    last_generated_id: int = 1
    innermost_array_size: int = -1
    depth: int = 0
    max_depth: int = DEFAULT_MAX_DEPTH
    _ordinals: dict[int, tuple[object, dict[int, int]]] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        lax: bool,
        root: object,
        variables: VariableResolver,
        throw_errors: bool = True,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> ExecContext:
        """Create the context for a new query over `root`."""
        return cls(
            lax=lax,
            root=root,
            variables=variables,
            throw_errors=throw_errors,
            ignore_structural_errors=lax,
            current_stack=[root],
            last_generated_id=1 + variables.base_object_count(),
            max_depth=max_depth,
        )

    @property
    def auto_unwrap(self) -> bool:
        return self.lax

    @property
    def auto_wrap(self) -> bool:
        return self.lax

    @property
    def current(self) -> object:
        return self.current_stack[-1]

    @contextmanager
    def override(self, **values: object) -> Iterator[None]:
        """Temporarily replace context attributes, restoring them on exit."""
        saved = {name: getattr(self, name) for name in values}
        for name, value in values.items():
            setattr(self, name, value)
        try:
            yield
        finally:
            for name, value in saved.items():
                setattr(self, name, value)

    @contextmanager
    def push_current(self, value: object) -> Iterator[None]:
        """Bind `@` to value for the duration of the block."""
        self.current_stack.append(value)
        try:
            yield
        finally:
            self.current_stack.pop()

    @contextmanager
    def descend(self) -> Iterator[None]:
        """Guard one level of recursive evaluation."""
        if self.depth >= self.max_depth:
            raise PathDepthExceeded(f"path evaluation exceeded maximum depth of {self.max_depth}")
        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def next_generated_id(self) -> int:
        """Allocate an id for a generated object."""
        generated = self.last_generated_id
        self.last_generated_id += 1
        return generated

    def container_offset(self, container: object) -> int:
        """Position of container within the current base object."""
        base = self.base_object.container
        if base is None:
            return 0
        cached = self._ordinals.get(id(base))
        if cached is None or cached[0] is not base:
            cached = (base, container_ordinals(base))
            self._ordinals[id(base)] = cached
            logger.debug("Numbered %d containers of base object %d", len(cached[1]), self.base_object.id)
        return cached[1].get(id(container), 0)
