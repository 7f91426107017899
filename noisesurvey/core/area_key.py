"""
noisesurvey Area Keys

Addressing for nodes of the area tree (main > sub > sub-sub) and the one
codec used for every area-keyed map in a survey.

Wire format is a JSON object with fixed field order and absent levels
omitted:

    {"main":0}
    {"main":0,"sub":1}
    {"main":0,"sub":1,"ss":2}
"""

from __future__ import annotations
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, Dict, Mapping, Optional, Tuple, TypeVar
import json

V = TypeVar("V")

MAX_DEPTH = 3
_FIELDS = ("main", "sub", "ss")


@total_ordering
@dataclass(frozen=True)
class AreaKey:
    """
    Position of an area in the tree.

    Ordering is depth-first: a parent sorts before its children and
    siblings sort by index.
    """
    main: int
    sub: Optional[int] = None
    ss: Optional[int] = None

    def __post_init__(self):
        for name in _FIELDS:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"AreaKey.{name} must be an integer: {value!r}")
            if value < 0:
                raise ValueError(f"AreaKey.{name} must be non-negative: {value}")
        if self.ss is not None and self.sub is None:
            raise ValueError("AreaKey.ss requires AreaKey.sub")

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    @property
    def indices(self) -> Tuple[int, ...]:
        """Tree indices from the root, e.g. (0, 1) for main 0 / sub 1."""
        return tuple(v for v in (self.main, self.sub, self.ss) if v is not None)

    @property
    def level(self) -> int:
        """1 for main areas, 2 for sub-areas, 3 for sub-sub-areas."""
        return len(self.indices)

    @classmethod
    def from_indices(cls, indices: Tuple[int, ...]) -> "AreaKey":
        """Build a key from a 1-3 element index tuple."""
        if not 1 <= len(indices) <= MAX_DEPTH:
            raise ValueError(f"AreaKey needs 1-{MAX_DEPTH} indices, got {len(indices)}")
        return cls(*indices)

    def parent(self) -> Optional["AreaKey"]:
        """Key of the enclosing area, None for a main area."""
        if self.level == 1:
            return None
        return AreaKey.from_indices(self.indices[:-1])

    def child(self, index: int) -> "AreaKey":
        """Key of the ``index``-th sub-area of this area."""
        return AreaKey.from_indices(self.indices + (index,))

    def is_within(self, other: "AreaKey") -> bool:
        """True if this key equals ``other`` or lies in its subtree."""
        return self.indices[:other.level] == other.indices

    # -------------------------------------------------------------------------
    # Codec
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, int]:
        data = {"main": self.main}
        if self.sub is not None:
            data["sub"] = self.sub
        if self.ss is not None:
            data["ss"] = self.ss
        return data

    def to_key(self) -> str:
        """Canonical map key string."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AreaKey":
        if "main" not in data:
            raise ValueError(f"Area path missing 'main': {data!r}")
        return cls(
            main=data["main"],
            sub=data.get("sub"),
            ss=data.get("ss"),
        )

    @classmethod
    def from_key(cls, key: str) -> "AreaKey":
        """
        Parse a map key.

        Field order and whitespace in ``key`` do not matter.

        Raises:
            ValueError: if the key is not a JSON area path
        """
        try:
            data = json.loads(key)
        except (TypeError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid area key {key!r}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid area key {key!r}: not an object")
        return cls.from_dict(data)

    @classmethod
    def coerce(cls, value: Any) -> "AreaKey":
        """Accept an AreaKey, a key string, a path dict or an index tuple."""
        if isinstance(value, AreaKey):
            return value
        if isinstance(value, str):
            return cls.from_key(value)
        if isinstance(value, Mapping):
            return cls.from_dict(value)
        if isinstance(value, (tuple, list)):
            return cls.from_indices(tuple(value))
        raise ValueError(f"Cannot interpret {value!r} as an area key")

    def __str__(self) -> str:
        return self.to_key()

    def __lt__(self, other: "AreaKey") -> bool:
        if not isinstance(other, AreaKey):
            return NotImplemented
        return self.indices < other.indices


def rekey_after_delete(mapping: Mapping[AreaKey, V], deleted: AreaKey) -> Dict[AreaKey, V]:
    """
    Re-key an area map after the node at ``deleted`` is removed.

    Entries in the deleted subtree are dropped. Later siblings of the
    deleted node (and their subtrees) move up by one index at the deleted
    level. Everything else keeps its key.
    """
    depth = deleted.level
    prefix = deleted.indices[:-1]
    removed_index = deleted.indices[-1]

    result: Dict[AreaKey, V] = {}
    for key, value in mapping.items():
        indices = key.indices
        if len(indices) < depth or indices[:depth - 1] != prefix:
            result[key] = value
            continue

        position = indices[depth - 1]
        if position == removed_index:
            continue
        if position > removed_index:
            shifted = prefix + (position - 1,) + indices[depth:]
            result[AreaKey.from_indices(shifted)] = value
        else:
            result[key] = value
    return result
