"""
Literal encoder: Python values onto Michelson JSON, guided by a type.

This is the ergonomic mapping used by contract methods and by origination
with a ``storage`` value. It does not type-check Michelson; it only picks the
literal form each primitive expects.

    int, nat, mutez             -> {"int": "42"}
    string, address, key, ...   -> {"string": "..."}
    bytes                       -> {"bytes": "<hex>"}
    bool                        -> {"prim": "True"} / {"prim": "False"}
    unit                        -> {"prim": "Unit"}
    option                      -> {"prim": "None"} / {"prim": "Some", "args": [...]}
    pair                        -> {"prim": "Pair", "args": [l, r]} from a tuple/list
    list, set                   -> [ ... ]
    map, big_map                -> [{"prim": "Elt", "args": [k, v]}, ...] from a dict
    or                          -> {"prim": "Left"/"Right", ...} from {branch: value}

Right-combed pairs are flattened for argument counting: a method on
``pair int (pair string bool)`` takes three arguments.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from ..errors import EncodingError

__all__ = ["flatten_pair", "arity_of", "or_branches", "wrap_branch", "encode_value", "encode_args"]

Micheline = Any

_INT_TYPES = {"int", "nat", "mutez"}
_STRING_TYPES = {
    "string",
    "address",
    "key",
    "key_hash",
    "signature",
    "chain_id",
    "contract",
    "timestamp",
}


def _prim(t: Micheline) -> str:
    if not isinstance(t, dict) or "prim" not in t:
        raise EncodingError("not a Michelson type expression", t)
    return t["prim"]


def flatten_pair(t: Micheline) -> List[Micheline]:
    """Leaves of a (right or left combed) pair type; a non-pair is its own leaf."""
    if _prim(t) != "pair":
        return [t]
    leaves: List[Micheline] = []
    for arg in t.get("args", []):
        leaves.extend(flatten_pair(arg))
    return leaves


def _field_annot(t: Micheline) -> Optional[str]:
    for annot in t.get("annots") or []:
        if annot.startswith("%"):
            return annot[1:]
    return None


def or_branches(t: Micheline) -> List[Tuple[str, Micheline, Tuple[str, ...]]]:
    """
    Leaves of a nested ``or`` type as ``(name, type, path)``.

    ``name`` is the leaf's field annotation, or its position among the
    leaves ("0", "1", ...) when it has none. ``path`` is the sequence of
    ``Left``/``Right`` constructors that selects the leaf from the root.
    """
    leaves: List[Tuple[Micheline, Tuple[str, ...]]] = []

    def walk(node: Micheline, path: Tuple[str, ...]) -> None:
        if _prim(node) != "or":
            leaves.append((node, path))
            return
        left, right = node["args"]
        walk(left, path + ("Left",))
        walk(right, path + ("Right",))

    walk(t, ())
    return [(_field_annot(leaf) or str(i), leaf, path) for i, (leaf, path) in enumerate(leaves)]


def wrap_branch(path: Sequence[str], value: Micheline) -> Micheline:
    """Apply ``Left``/``Right`` constructors so ``value`` lands on ``path``."""
    for side in reversed(path):
        value = {"prim": side, "args": [value]}
    return value


def arity_of(t: Micheline) -> int:
    """Positional argument count a method with parameter type ``t`` accepts."""
    if _prim(t) == "unit":
        return 0
    return len(flatten_pair(t))


def encode_value(t: Micheline, value: Any) -> Micheline:
    prim = _prim(t)
    args = t.get("args", [])

    if prim in _INT_TYPES:
        if isinstance(value, bool) or not isinstance(value, (int, str, Decimal)):
            raise EncodingError(f"expected an integer, got {value!r}", t)
        try:
            return {"int": str(int(value))}
        except ValueError:
            raise EncodingError(f"expected an integer, got {value!r}", t) from None
    if prim in _STRING_TYPES:
        if not isinstance(value, str):
            raise EncodingError(f"expected a string, got {value!r}", t)
        return {"string": value}
    if prim == "bytes":
        if isinstance(value, (bytes, bytearray)):
            return {"bytes": bytes(value).hex()}
        if isinstance(value, str):
            return {"bytes": value[2:] if value.startswith("0x") else value}
        raise EncodingError(f"expected bytes, got {value!r}", t)
    if prim == "bool":
        if not isinstance(value, bool):
            raise EncodingError(f"expected a bool, got {value!r}", t)
        return {"prim": "True" if value else "False"}
    if prim == "unit":
        return {"prim": "Unit"}
    if prim == "option":
        if value is None:
            return {"prim": "None"}
        return {"prim": "Some", "args": [encode_value(args[0], value)]}
    if prim == "pair":
        if not isinstance(value, (tuple, list)):
            raise EncodingError(f"expected a tuple for a pair, got {value!r}", t)
        leaves = flatten_pair(t)
        if len(value) == 2 and len(leaves) != 2:
            return {"prim": "Pair", "args": [encode_value(args[0], value[0]), encode_value(args[1], value[1])]}
        return _encode_flat(t, list(value))
    if prim in ("list", "set"):
        return [encode_value(args[0], v) for v in value]
    if prim in ("map", "big_map"):
        if not isinstance(value, dict):
            raise EncodingError(f"expected a dict, got {value!r}", t)
        return [
            {"prim": "Elt", "args": [encode_value(args[0], k), encode_value(args[1], v)]}
            for k, v in sorted(value.items(), key=lambda kv: kv[0])
        ]
    if prim == "or":
        if not isinstance(value, Mapping) or len(value) != 1:
            raise EncodingError(f"expected a one-item mapping {{branch: value}} for an or, got {value!r}", t)
        [(branch, inner)] = value.items()
        for name, leaf, path in or_branches(t):
            if name == str(branch):
                return wrap_branch(path, encode_value(leaf, inner))
        raise EncodingError(f"unknown or branch {branch!r}", t)
    if prim in ("lambda", "operation"):
        # already Micheline
        return value
    raise EncodingError(f"unsupported type {prim!r}", t)


def _encode_flat(t: Micheline, values: List[Any]) -> Micheline:
    """Consume ``values`` left to right along the leaves of ``t``."""
    expected = len(flatten_pair(t))
    if len(values) != expected:
        raise EncodingError(f"expected {expected} values, got {len(values)}", t)

    def walk(node: Micheline) -> Micheline:
        if _prim(node) != "pair":
            return encode_value(node, values.pop(0))
        return {"prim": "Pair", "args": [walk(a) for a in node.get("args", [])]}

    return walk(t)


def encode_args(t: Micheline, args: Sequence[Any]) -> Micheline:
    """Encode a method's positional arguments against its parameter type."""
    if _prim(t) == "unit":
        return {"prim": "Unit"}
    if len(flatten_pair(t)) == 1:
        return encode_value(t, args[0])
    return _encode_flat(t, list(args))
