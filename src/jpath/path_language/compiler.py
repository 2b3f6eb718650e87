"""Compiler entrypoints for path expressions."""

from __future__ import annotations

from jpath.path_language.ast import CompiledPath, PathNode
from jpath.path_language.parser import parse_path


def compile_path(expr: PathNode, lax: bool = True) -> CompiledPath:
    """Wrap an expression tree with its mode header."""
    return CompiledPath(expr, lax)


def compile_path_text(path: str) -> CompiledPath:
    """Parse and compile path text."""
    return parse_path(path)


def ensure_compiled(path: str | CompiledPath) -> CompiledPath:
    """Accept either path text or an already compiled path."""
    if isinstance(path, CompiledPath):
        return path
    return compile_path_text(path)
