"""Depth-first syntax tree traversal with per-node-type visitors."""

from __future__ import annotations

from typing import Any, Callable, Mapping


def base_visit(node, state, c) -> None:
    """Default visitor: continue into every named child."""

    for child in node.children:
        c(child, state)


def noop(node, state, c, *ancestors) -> None:
    """Visitor that stops the walk at ``node``."""


def walk_recursive(node, state: Any, visitors: Mapping[str, Callable]) -> None:
    """Walk ``node`` calling ``visitors[node.type](node, state, c)``.

    ``c(child, state)`` continues the walk into ``child``. Node types without
    a visitor fall back to :func:`base_visit`.
    """

    def c(current, st):
        visitors.get(current.type, base_visit)(current, st, c)

    c(node, state)


def walk_with_ancestors(node, state: Any, visitors: Mapping[str, Callable]) -> None:
    """Like :func:`walk_recursive`, but visitors also receive the ancestor chain.

    Visitors are called as ``visitor(node, state, c, ancestors)`` where
    ``ancestors`` is a tuple of enclosing nodes ending with ``node`` itself.
    """

    stack = []

    def c(current, st):
        stack.append(current)
        try:
            visitor = visitors.get(current.type)
            if visitor is None:
                base_visit(current, st, c)
            else:
                visitor(current, st, c, tuple(stack))
        finally:
            stack.pop()

    c(node, state)


__all__ = ["base_visit", "noop", "walk_recursive", "walk_with_ancestors"]
