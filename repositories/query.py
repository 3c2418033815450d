"""
repositories/query.py
---------------------
Query declarations for repository classes.

Two kinds of query methods can be declared on a MongoRepository subclass:

    find_by_name = derived_query()
        The filter is compiled from the attribute name against the entity's
        field table when the class is created, so a misspelled field or an
        unknown operator fails at import time rather than on first call.

    find_by_name_native = native_query('{ "name": "?0" }')
        The filter is written in MongoDB Extended JSON; ``?0``, ``?1``, ...
        are replaced by the call's positional arguments.

Name grammar for derived queries:

    find_by_<path>[_<operator>][_and_<path>[_<operator>]]...

<path> is an attribute of the entity, continued into embedded values
(``hobbies_name``) or into a reference's identifier (``location_id``).
"""

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Callable, Optional

from bson import json_util

from models.mapping import (
    EMBEDDED_LIST,
    ID,
    REFERENCE,
    VALUE,
    EntityMapping,
    encode_value,
)
from utils.logger import get_logger

logger = get_logger(__name__)

FIND_PREFIX = "find_by_"
PLACEHOLDER = re.compile(r"\?(\d+)")


class QueryDerivationError(ValueError):
    """A query method declaration that cannot be turned into a filter."""


# ── Operators ─────────────────────────────────────────────

def like_to_regex(pattern: str) -> str:
    """
    Translate a LIKE pattern into a regular expression.

    A ``*`` at the start or end is a wildcard; everything else is matched
    literally. The result is not anchored, so ``ess`` matches ``chess``.
    """
    if pattern == "*":
        return ".*"
    leading = pattern.startswith("*")
    trailing = pattern.endswith("*") and len(pattern) > 1
    core = pattern[1 if leading else 0:len(pattern) - 1 if trailing else len(pattern)]
    return (".*" if leading else "") + re.escape(core) + (".*" if trailing else "")


def _as_list(values: Any) -> list:
    """Arguments of `in` / `not_in` must be a collection of values, not a string."""
    if isinstance(values, (str, bytes, dict)) or not isinstance(values, Iterable):
        raise TypeError(f"expected a list of values, got {type(values).__name__}")
    return list(values)


def _contains(path: "ResolvedPath", value: Any) -> Any:
    if path.is_collection_leaf:
        return {"$in": [value]}
    return {"$regex": re.escape(value)}


@dataclass(frozen=True)
class Operator:
    """A comparison selected by a method-name suffix."""
    keyword: str
    arity: int
    build: Callable[["ResolvedPath", Any], Any]
    string_only: bool = False


OPERATORS: tuple[Operator, ...] = (
    Operator("is_not_null", 0, lambda p, v: {"$ne": None}),
    Operator("is_null", 0, lambda p, v: None),
    Operator("not_in", 1, lambda p, v: {"$nin": _as_list(v)}),
    Operator("starts_with", 1, lambda p, v: {"$regex": "^" + re.escape(v)}, True),
    Operator("ends_with", 1, lambda p, v: {"$regex": re.escape(v) + "$"}, True),
    Operator("greater_than", 1, lambda p, v: {"$gt": v}),
    Operator("less_than", 1, lambda p, v: {"$lt": v}),
    Operator("contains", 1, _contains),
    Operator("regex", 1, lambda p, v: {"$regex": v}, True),
    Operator("like", 1, lambda p, v: {"$regex": like_to_regex(v)}, True),
    Operator("not", 1, lambda p, v: {"$ne": v}),
    Operator("in", 1, lambda p, v: {"$in": _as_list(v)}),
    Operator("", 1, lambda p, v: v),
)


# ── Path resolution ───────────────────────────────────────

@dataclass(frozen=True)
class ResolvedPath:
    """Where a dotted attribute path lives in the stored document."""
    storage_path: str
    kind: str
    is_collection_leaf: bool  # the path ends on an embedded list itself


def resolve_path(tokens: list[str], mapping: EntityMapping, prefix: str = "") -> Optional[ResolvedPath]:
    """
    Resolve attribute tokens (``["hobbies", "name"]``) against a field table.
    Longer attribute names win, so ``postal_code`` is one attribute.

    Returns:
        A ResolvedPath, or None if the tokens do not name a field.
    """
    for i in range(len(tokens), 0, -1):
        field = mapping.field("_".join(tokens[:i]))
        if field is None:
            continue
        rest = tokens[i:]
        storage = prefix + field.storage
        if not rest:
            return ResolvedPath(storage, field.kind, field.kind == EMBEDDED_LIST)
        if field.kind == EMBEDDED_LIST:
            resolved = resolve_path(rest, field.target, storage + ".")
            if resolved is not None:
                return resolved
        elif field.kind == REFERENCE and rest == ["id"]:
            # the reference is stored as the target's id: no dereferencing needed
            return ResolvedPath(storage, ID, False)
    return None


# ── Derived queries ───────────────────────────────────────

@dataclass(frozen=True)
class Criterion:
    path: ResolvedPath
    operator: Operator

    def to_filter(self, value: Any) -> Any:
        return self.operator.build(self.path, encode_value(value))


def _compile_part(part: str, mapping: EntityMapping, method_name: str) -> Criterion:
    tokens = part.split("_")
    for op in OPERATORS:
        op_tokens = op.keyword.split("_") if op.keyword else []
        if op_tokens and tokens[-len(op_tokens):] != op_tokens:
            continue
        path_tokens = tokens[:len(tokens) - len(op_tokens)]
        if not path_tokens:
            continue
        path = resolve_path(path_tokens, mapping)
        if path is None:
            continue
        if op.string_only and path.kind != VALUE:
            raise QueryDerivationError(
                f"{method_name}: '{op.keyword}' needs a plain value field, "
                f"'{path.storage_path}' is {path.kind}"
            )
        return Criterion(path, op)
    raise QueryDerivationError(
        f"{method_name}: '{part}' is not a field of {mapping.entity_type.__name__}"
    )


def compile_derived_query(method_name: str, mapping: EntityMapping) -> list[Criterion]:
    """
    Compile a ``find_by_...`` method name into its criteria.

    Raises:
        QueryDerivationError: If the name does not follow the grammar.
    """
    if not method_name.startswith(FIND_PREFIX) or method_name == FIND_PREFIX:
        raise QueryDerivationError(f"{method_name}: derived queries must start with '{FIND_PREFIX}'")
    body = method_name[len(FIND_PREFIX):]
    parts = body.split("_and_")
    if any(not p for p in parts):
        raise QueryDerivationError(f"{method_name}: empty condition")
    return [_compile_part(p, mapping, method_name) for p in parts]


def _as_operators(condition: Any) -> dict:
    """`{"$op": ...}` documents stay as they are; anything else is an equality."""
    if isinstance(condition, dict) and condition and all(k.startswith("$") for k in condition):
        return condition
    return {"$eq": condition}


def build_filter(method_name: str, criteria: list[Criterion], args: tuple) -> dict:
    """
    Bind call arguments to criteria, in declaration order.

    Conditions on the same field are combined into one operator document.

    Raises:
        TypeError: If the number of arguments does not match the criteria.
        QueryDerivationError: If two conditions use the same operator on one field.
    """
    expected = sum(c.operator.arity for c in criteria)
    if len(args) != expected:
        raise TypeError(f"{method_name}() takes {expected} argument(s) but {len(args)} were given")
    flt: dict = {}
    remaining = iter(args)
    for c in criteria:
        value = next(remaining) if c.operator.arity else None
        condition = c.to_filter(value)
        field = c.path.storage_path
        if field not in flt:
            flt[field] = condition
            continue
        existing, added = _as_operators(flt[field]), _as_operators(condition)
        clash = existing.keys() & added.keys()
        if clash:
            raise QueryDerivationError(
                f"{method_name}: conditions on '{field}' both use {', '.join(sorted(clash))}"
            )
        flt[field] = {**existing, **added}
    return flt


class DerivedQuery:
    """Descriptor for a query whose filter is read from its attribute name."""

    def __init__(self):
        self.name: Optional[str] = None
        self.criteria: list[Criterion] = []

    def __set_name__(self, owner, name: str) -> None:
        mapping = getattr(owner, "mapping", None)
        if mapping is None:
            raise QueryDerivationError(f"{owner.__name__}.{name}: repository has no entity mapping")
        self.name = name
        self.criteria = compile_derived_query(name, mapping)
        logger.debug(f"Derived {owner.__name__}.{name}")

    def filter_for(self, *args) -> dict:
        return build_filter(self.name, self.criteria, args)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self

        def query(*args, session=None):
            return instance.find_by_filter(self.filter_for(*args), session=session)

        query.__name__ = self.name
        return query


def derived_query() -> DerivedQuery:
    return DerivedQuery()


# ── Native queries ────────────────────────────────────────

# query operators that share a key with an Extended JSON type wrapper
_OPERATOR_KEYS = {"$regex", "$type"}


def _restore_types(doc: dict) -> Any:
    """Turn an Extended JSON wrapper (``{"$oid": ...}``, ``{"$date": ...}``) into its BSON value."""
    if doc.keys() & _OPERATOR_KEYS and "$binary" not in doc:
        return doc
    return json_util.object_hook(doc)


def _substitute(node: Any, args: tuple) -> Any:
    """
    Fill ``?N`` placeholders of a parsed template, then restore Extended JSON
    types, so placeholders inside ``$oid``, ``$date`` or ``$regex`` are filled too.
    """
    if isinstance(node, dict):
        return _restore_types({k: _substitute(v, args) for k, v in node.items()})
    if isinstance(node, list):
        return [_substitute(v, args) for v in node]
    if not isinstance(node, str):
        return node

    def arg(index: str) -> Any:
        i = int(index)
        if i >= len(args):
            raise TypeError(f"query placeholder ?{i} has no argument ({len(args)} given)")
        return encode_value(args[i])

    whole = PLACEHOLDER.fullmatch(node)
    if whole:
        return arg(whole.group(1))
    return PLACEHOLDER.sub(lambda m: str(arg(m.group(1))), node)


class NativeQuery:
    """Descriptor for a query written as a MongoDB filter document."""

    def __init__(self, template: str):
        # plain JSON here: Extended JSON types are restored after substitution
        try:
            parsed = json.loads(template)
        except ValueError as e:
            raise QueryDerivationError(f"invalid query document {template!r}: {e}") from e
        if not isinstance(parsed, dict):
            raise QueryDerivationError(f"query document must be an object: {template!r}")
        self.template = template
        self.document = parsed
        self.name: Optional[str] = None

    def __set_name__(self, owner, name: str) -> None:
        self.name = name

    def filter_for(self, *args) -> dict:
        return _substitute(self.document, args)

    def __get__(self, instance, owner=None):
        if instance is None:
            return self

        def query(*args, session=None):
            return instance.find_by_filter(self.filter_for(*args), session=session)

        query.__name__ = self.name
        return query


def native_query(template: str) -> NativeQuery:
    return NativeQuery(template)
