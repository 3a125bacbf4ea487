# api_harness/utils/placeholders.py
"""
Helpers shared by the runner and the assertions:
- substitute: expand ${VAR} from the environment / variables file
- substitute_json: same, applied to every string of a request body
- lookup_path: walk a dotted path ("data.user.id", "items.0.name") into a JSON body
"""
import os
import re
from typing import Any, Mapping, Optional

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

MISSING = object()


def substitute(s, variables: Optional[Mapping[str, Any]] = None) -> str:
    """Replace every ${NAME}; environment wins over `variables`, unknown names become ''."""
    extra = variables or {}

    def _repl(m):
        name = m.group(1)
        val = os.environ.get(name)
        if not val:
            val = extra.get(name)
        return "" if val is None else str(val)

    return _PLACEHOLDER.sub(_repl, "" if s is None else str(s))


def substitute_headers(headers: Mapping[str, Any], variables=None) -> dict:
    return {k: substitute(v, variables) if isinstance(v, str) else v for k, v in (headers or {}).items()}


def lookup_path(obj: Any, path: str, default=MISSING):
    cur = obj
    for key in path.split("."):
        if isinstance(cur, dict):
            if key not in cur:
                return default
            cur = cur[key]
        elif isinstance(cur, list) and key.isdigit():
            idx = int(key)
            if idx >= len(cur):
                return default
            cur = cur[idx]
        else:
            return default
    return cur


def substitute_json(obj, variables=None):
    """Expand placeholders in every string of a JSON-like value."""
    if isinstance(obj, str):
        return substitute(obj, variables)
    if isinstance(obj, dict):
        return {k: substitute_json(v, variables) for k, v in obj.items()}
    if isinstance(obj, list):
        return [substitute_json(v, variables) for v in obj]
    return obj
