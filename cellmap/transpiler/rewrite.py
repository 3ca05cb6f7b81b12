"""Syntax-directed rewrite passes applied to a wrapped cell.

Pass one turns ``import`` declarations into awaited calls of the import
capability. Pass two moves top-level bindings onto the shared namespace
object so they outlive a single cell execution. Neither pass looks inside
function or class member bodies: bindings there are local and stay local.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..constants import GLOBAL_VAR, IMPORT_FN
from .edit import EditBuffer
from .mapped import MappedString
from .parse import SyntaxNode, parse_async_wrapped
from .walk import base_visit, noop, walk_recursive, walk_with_ancestors

logger = logging.getLogger(__name__)

# Node types whose bodies introduce their own scope.
FUNCTION_BOUNDARY_TYPES = (
    "function_expression",
    "function",
    "generator_function",
    "arrow_function",
    "method_definition",
    "class_static_block",
    "field_definition",
)


@dataclass
class ImportState:
    edit: EditBuffer


@dataclass
class ScopeState:
    body: SyntaxNode
    edit: EditBuffer
    translating: bool = False


# ---------------------------------------------------------------------------
# Pass one: imports
# ---------------------------------------------------------------------------


def _import_source(node: SyntaxNode) -> SyntaxNode:
    source = node.field("source")
    if source is not None:
        return source
    # Older grammars keep the specifier inside a visible from_clause.
    for child in node.children:
        if child.type == "from_clause":
            return child.field("source")
    raise ValueError(f"Import at offset {node.start} has no module specifier")


def _import_bindings(node: SyntaxNode) -> list[SyntaxNode]:
    """Default, namespace and named bindings of an import, in source order."""

    bindings = []
    for clause in node.children:
        if clause.type != "import_clause":
            continue
        for child in clause.children:
            if child.type == "named_imports":
                bindings.extend(
                    s for s in child.children if s.type == "import_specifier"
                )
            else:
                bindings.append(child)
    return bindings


def _visit_import_statement(node, state, c):
    edit = state.edit
    source = _import_source(node)
    bindings = _import_bindings(node)

    if bindings:
        current = bindings[0]
        edit.replace(node.start, current.start, "var {")
        for binding in bindings[1:]:
            edit.replace(current.end, binding.start, ",")
            current = binding
        edit.replace(current.end, source.start, f"}} = {{_:await {IMPORT_FN}(")
        edit.replace(source.end, node.end, ")};")
    else:
        edit.replace(node.start, source.start, f"await {IMPORT_FN}(")
        edit.replace(source.end, node.end, ");")

    base_visit(node, state, c)


def _visit_import_clause(node, state, c):
    for child in node.children:
        if child.type == "identifier":
            state.edit.insert_before(child, "_:{default:")
            state.edit.insert_after(child, "}")
    base_visit(node, state, c)


def _visit_import_specifier(node, state, c):
    name = node.field("name")
    alias = node.field("alias")
    state.edit.insert_before(node, "_:{")
    if alias is not None:
        state.edit.replace(name.end, alias.start, ":")
    state.edit.insert_after(node, "}")


def _visit_namespace_import(node, state, c):
    local = node.children[-1]
    state.edit.replace(node.start, local.start, "_:")


IMPORT_VISITORS = {
    "import_statement": _visit_import_statement,
    "import_clause": _visit_import_clause,
    "import_specifier": _visit_import_specifier,
    "namespace_import": _visit_namespace_import,
    "function_declaration": noop,
    "generator_function_declaration": noop,
    **{kind: noop for kind in FUNCTION_BOUNDARY_TYPES},
}


# ---------------------------------------------------------------------------
# Pass two: top-level scope
# ---------------------------------------------------------------------------


def _is_top_level(ancestors, state) -> bool:
    assert len(ancestors) >= 2
    return ancestors[-2] == state.body


def _qualify(target, state) -> None:
    """Point a bound identifier (or a defaulted one) at the namespace."""

    if target.type == "assignment_pattern":
        target = target.field("left")
    elif target.type == "rest_pattern":
        target = target.children[0]
    if target is not None and target.type == "identifier":
        state.edit.insert_before(target, f"{GLOBAL_VAR}.")


def _visit_untranslated(node, state, c) -> None:
    translating, state.translating = state.translating, False
    try:
        c(node, state)
    finally:
        state.translating = translating


def _visit_class_declaration(node, state, c, ancestors):
    base_visit(node, state, c)
    # Classes are block scoped: only top-level ones belong to the namespace.
    if not _is_top_level(ancestors, state):
        return
    name = node.field("name").text
    state.edit.insert_before(node, f"void ({GLOBAL_VAR}.{name}=")
    state.edit.insert_after(node, ");")


def _visit_function_declaration(node, state, c, ancestors):
    name = node.field("name").text
    state.edit.insert_before(node, f"void ({GLOBAL_VAR}.{name}=")
    state.edit.insert_after(node, ");")


def _declaration_kind(node) -> str:
    kind = node.field("kind")
    if kind is not None:
        return kind.text
    return node.first_token().text


def _visit_declaration(node, state, c, ancestors):
    # `var` is function scoped, so it is always translated; `let` and `const`
    # only when they sit directly in the top-level block.
    translate = _declaration_kind(node) == "var" or _is_top_level(ancestors, state)

    state.translating = translate
    base_visit(node, state, c)
    state.translating = False

    if not translate:
        return

    edit = state.edit
    declarators = [d for d in node.children if d.type == "variable_declarator"]
    edit.replace(node.start, declarators[0].start, "void (")
    for decl in declarators:
        edit.insert_before(decl, "(")
        if decl.field("value") is not None:
            edit.insert_after(decl, ")")
        else:
            # Destructuring requires an initializer, so only plain names get here.
            edit.insert_after(decl, " = undefined)")
    # After the last declarator, not the node, so `;` stays outside.
    edit.insert_after(declarators[-1], ")")


def _visit_variable_declarator(node, state, c, ancestors):
    name = node.field("name")
    c(name, state)
    value = node.field("value")
    if value is not None:
        _visit_untranslated(value, state, c)
    if state.translating and name.type == "identifier":
        state.edit.insert_before(name, f"{GLOBAL_VAR}.")


def _visit_object_pattern(node, state, c, ancestors):
    base_visit(node, state, c)
    if not state.translating:
        return

    for prop in node.children:
        if prop.type == "object_assignment_pattern":
            prop = prop.field("left")
        if prop.type == "shorthand_property_identifier_pattern":
            state.edit.insert_after(prop, f":{GLOBAL_VAR}.{prop.text}")
        elif prop.type == "pair_pattern":
            _qualify(prop.field("value"), state)
        elif prop.type == "rest_pattern":
            _qualify(prop, state)


def _visit_array_pattern(node, state, c, ancestors):
    base_visit(node, state, c)
    if not state.translating:
        return

    for element in node.children:
        _qualify(element, state)


def _visit_assignment_pattern(node, state, c, ancestors):
    c(node.field("left"), state)
    _visit_untranslated(node.field("right"), state, c)


def _visit_for_in_statement(node, state, c, ancestors):
    kind = node.field("kind")
    left = node.field("left")
    if kind is None or kind.text != "var":
        base_visit(node, state, c)
        return

    # `for (var x of xs)` binds x in the enclosing function, i.e. the namespace.
    state.edit.replace(kind.start, left.start, "")
    state.translating = True
    c(left, state)
    if left.type == "identifier":
        state.edit.insert_before(left, f"{GLOBAL_VAR}.")
    state.translating = False

    for child in node.children:
        if child != left:
            c(child, state)


SCOPE_VISITORS = {
    "class_declaration": _visit_class_declaration,
    "function_declaration": _visit_function_declaration,
    "generator_function_declaration": _visit_function_declaration,
    "lexical_declaration": _visit_declaration,
    "variable_declaration": _visit_declaration,
    "variable_declarator": _visit_variable_declarator,
    "object_pattern": _visit_object_pattern,
    "array_pattern": _visit_array_pattern,
    "assignment_pattern": _visit_assignment_pattern,
    "object_assignment_pattern": _visit_assignment_pattern,
    "for_in_statement": _visit_for_in_statement,
    **{kind: noop for kind in FUNCTION_BOUNDARY_TYPES},
}


def _return_last_expression(body: SyntaxNode, edit: EditBuffer) -> None:
    statements = body.children
    if not statements or statements[-1].type != "expression_statement":
        return
    last = statements[-1]
    edit.insert_before(last, "return (")
    edit.insert_after(last.children[0], ")")


def rewrite_imports(source: MappedString) -> MappedString:
    """Turn every reachable ``import`` into an awaited import-capability call."""

    edit = EditBuffer(source)
    _, body = parse_async_wrapped(source)
    walk_recursive(body, ImportState(edit), IMPORT_VISITORS)
    result = edit.flush()
    logger.debug("import pass: %d -> %d chars", len(source), len(result))
    return result


def rewrite_scope(source: MappedString) -> MappedString:
    """Move top-level bindings onto the namespace and return the last value."""

    edit = EditBuffer(source)
    _, body = parse_async_wrapped(source)
    walk_with_ancestors(body, ScopeState(body, edit), SCOPE_VISITORS)
    _return_last_expression(body, edit)
    result = edit.flush()
    logger.debug("scope pass: %d -> %d chars", len(source), len(result))
    return result


__all__ = [
    "FUNCTION_BOUNDARY_TYPES",
    "IMPORT_VISITORS",
    "ImportState",
    "SCOPE_VISITORS",
    "ScopeState",
    "rewrite_imports",
    "rewrite_scope",
]
