"""Predicate matching and sorting shared by the document store backends.

Backends without a native query language (the in-memory and JSON file
collections, and DynamoDB scans) load candidate documents and filter them
here, so every backend answers a query identically.
"""
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from spellbook.interfaces.document_store import SortSpec


def _equals(value: Any, expected: Any) -> bool:
    """Field equality; a scalar matches an array field on membership."""
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _elem_match(value: Any, condition: Any) -> bool:
    if not isinstance(value, list):
        return False
    for element in value:
        if isinstance(condition, dict) and _is_operator_dict(condition):
            if _apply_operators(element, condition, present=True):
                return True
        elif isinstance(condition, dict) and isinstance(element, dict):
            if matches(element, condition):
                return True
        elif element == condition:
            return True
    return False


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    '$eq': _equals,
    '$ne': lambda value, expected: not _equals(value, expected),
    '$in': lambda value, expected: any(_equals(value, e) for e in expected),
    '$nin': lambda value, expected: not any(_equals(value, e) for e in expected),
    '$elemMatch': _elem_match,
}


def _is_operator_dict(condition: Dict) -> bool:
    return bool(condition) and all(str(k).startswith('$') for k in condition)


def _apply_operators(value: Any, condition: Dict, present: bool) -> bool:
    for op, expected in condition.items():
        if op == '$exists':
            if present != bool(expected):
                return False
            continue
        handler = _OPERATORS.get(op)
        if handler is None:
            raise ValueError(f"Unsupported query operator: {op}")
        if not handler(value, expected):
            return False
    return True


def matches(doc: Dict, query: Optional[Dict]) -> bool:
    """Return True when `doc` satisfies the Mongo-style `query`."""
    if not query:
        return True

    for key, condition in query.items():
        if key == '$or':
            if not any(matches(doc, sub) for sub in condition):
                return False
        elif key == '$and':
            if not all(matches(doc, sub) for sub in condition):
                return False
        elif key.startswith('$'):
            raise ValueError(f"Unsupported top-level operator: {key}")
        elif isinstance(condition, dict) and _is_operator_dict(condition):
            if not _apply_operators(doc.get(key), condition, present=key in doc):
                return False
        elif not _equals(doc.get(key), condition):
            return False
    return True


def normalize_sort(sort: Optional[SortSpec]) -> List[Tuple[str, bool, Any]]:
    """Turn a sort spec into [(field, descending, default), ...]."""
    normalized = []
    for entry in sort or []:
        if isinstance(entry, str):
            normalized.append((entry, False, None))
            continue
        field, direction = entry[0], entry[1]
        default = entry[2] if len(entry) > 2 else None
        descending = str(direction).lower() in ('desc', 'descending', '-1')
        normalized.append((field, descending, default))
    return normalized


def _sort_key(value: Any) -> Tuple:
    # None sorts lowest, so it ends up last in descending order
    if value is None:
        return (0, 0, 0)
    if isinstance(value, (bool, int, float)):
        return (1, 0, float(value))
    if isinstance(value, str):
        return (1, 1, value)
    return (1, 2, str(value))


def sort_documents(docs: Iterable[Dict], sort: Optional[SortSpec]) -> List[Dict]:
    """Stable multi-field sort; a missing or null field takes the entry's default."""
    result = list(docs)
    for field, descending, default in reversed(normalize_sort(sort)):
        def key(doc: Dict) -> Tuple:
            value = doc.get(field)
            return _sort_key(default if value is None else value)
        result.sort(key=key, reverse=descending)
    return result
