from __future__ import annotations

from typing import Any, Dict

from storyledger.runtime.errors import INVALID_PAYLOAD, ApplyError


def as_dict(x: Any) -> Dict[str, Any]:
    return x if isinstance(x, dict) else {}


def require_str(p: Dict[str, Any], key: str) -> str:
    """Return payload[key] as a string. Empty strings are allowed."""
    if key not in p:
        raise ApplyError(INVALID_PAYLOAD, f"missing_{key}", {})
    v = p.get(key)
    if not isinstance(v, str):
        raise ApplyError(INVALID_PAYLOAD, f"invalid_{key}", {key: repr(v)})
    return v


def require_id(p: Dict[str, Any], key: str) -> int:
    """Return payload[key] as a positive-or-zero integer id.

    Accepts ints and ASCII decimal strings; rejects bools, floats and negatives.
    """
    if key not in p:
        raise ApplyError(INVALID_PAYLOAD, f"missing_{key}", {})
    v = p.get(key)
    if isinstance(v, bool):
        raise ApplyError(INVALID_PAYLOAD, f"invalid_{key}", {key: v})
    if isinstance(v, int):
        n = v
    elif isinstance(v, str) and v.strip().isascii() and v.strip().isdigit():
        n = int(v.strip())
    else:
        raise ApplyError(INVALID_PAYLOAD, f"invalid_{key}", {key: repr(v)})
    if n < 0:
        raise ApplyError(INVALID_PAYLOAD, f"invalid_{key}", {key: n})
    return n


def require_present(p: Dict[str, Any], key: str) -> Any:
    if key not in p:
        raise ApplyError(INVALID_PAYLOAD, f"missing_{key}", {})
    return p.get(key)
