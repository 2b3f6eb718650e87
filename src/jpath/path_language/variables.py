"""Resolution of `$name` path variables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, cast

from jpath.path_language.errors import PathInvalidParameter


@dataclass(frozen=True, slots=True)
class ResolvedVariable:
    """Variable value together with the base object it belongs to.

    A ``base_id`` of 0 leaves the current base object untouched.
    """

    value: object
    base_object: object = None
    base_id: int = 0


class VariableResolver(Protocol):
    """Source of variable values for one query."""

    def resolve(self, name: str) -> ResolvedVariable | None:
        """Return the variable, or None when it is not defined."""
        ...

    def base_object_count(self) -> int:
        """Return how many base object ids the resolver hands out."""
        ...


class NoVariables:
    """Resolver used when a query is run without variables."""

    def resolve(self, name: str) -> ResolvedVariable | None:
        del name
        return None

    def base_object_count(self) -> int:
        return 0


class MappingVariables:
    """Resolver backed by a JSON object of variable values."""

    def __init__(self, values: object) -> None:
        if not isinstance(values, Mapping):
            raise PathInvalidParameter("jsonb containing jsonpath variables is not an object")
        self.values = values

    def resolve(self, name: str) -> ResolvedVariable | None:
        if name not in self.values:
            return None
        return ResolvedVariable(self.values[name], self.values, 1)

    def base_object_count(self) -> int:
        return 1


NO_VARIABLES = NoVariables()


def make_resolver(variables: object) -> VariableResolver:
    """Build a resolver from None, a resolver, or a JSON object."""
    if variables is None:
        return NO_VARIABLES
    if not isinstance(variables, Mapping) and hasattr(variables, "resolve"):
        return cast(VariableResolver, variables)
    return MappingVariables(variables)
