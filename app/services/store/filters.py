from typing import Any, Dict, List, Sequence

from app.models.fhir.types import SearchFilter


def to_search_string(value: Any) -> str:
    """
    Returns the string form of a resource value as it appears in a URL (True -> "true")
    """
    if isinstance(value, bool):
        return "true" if value else "false"

    return str(value)


def get_values(resource: Dict[str, Any], key: str) -> List[Any]:
    """
    Returns all values found at a dotted path, lists along the way are flattened
    (e.g. "name.family" on a Patient returns the family names of all names)
    """
    current: List[Any] = [resource]
    for part in key.split("."):
        found: List[Any] = []
        for item in current:
            if not isinstance(item, dict) or part not in item:
                continue
            value = item[part]
            if isinstance(value, list):
                found.extend(value)
            else:
                found.append(value)
        current = found

    return current


def matches_filter(resource: Dict[str, Any], search_filter: SearchFilter) -> bool:
    values = {to_search_string(v) for v in get_values(resource, search_filter.key)}
    hit = any(v in values for v in search_filter.value)

    if search_filter.comparison_operator == "!=":
        return not hit
    return hit


def matches_search_filters(
    resource: Dict[str, Any], search_filters: Sequence[SearchFilter]
) -> bool:
    """
    Every AND filter must match, and at least one OR filter when there are any
    """
    and_filters = [f for f in search_filters if f.logical_operator == "AND"]
    or_filters = [f for f in search_filters if f.logical_operator == "OR"]

    if not all(matches_filter(resource, f) for f in and_filters):
        return False

    if or_filters and not any(matches_filter(resource, f) for f in or_filters):
        return False

    return True
