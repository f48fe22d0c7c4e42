"""
Value model for LIFO Script.

Every runtime value is an immutable ``Value`` tagged with a ``ValueType``.
Vectors are homogeneous: the first insertion fixes the element type and
every later insertion must match it.

Stack elements pair a value with the instruction that produced it
(``StackEl.origin``). The origin is provenance only; type checks look at
``Value.kind``.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Any, Optional, Tuple

__all__ = ['ValueType', 'Value', 'LifoVector', 'StackEl', 'Stack', 'TypeMismatch']


# ──────────────────────────────────────────────
# Value types
# ──────────────────────────────────────────────

class ValueType(enum.Enum):
    INT = "int"
    BOOL = "bool"
    STRING = "string"
    VECTOR = "vector"


# Types a vector may hold
ELEMENT_TYPES = (ValueType.INT, ValueType.BOOL, ValueType.STRING)


class TypeMismatch(Exception):
    """Raised when a value is inserted into a vector of another element type."""
    def __init__(self, inserted_type: str, element_type: str):
        self.inserted_type = inserted_type
        self.element_type = element_type
        super().__init__(
            f"Cannot insert value of type {inserted_type} "
            f"into vector of type vector<{element_type}>"
        )


# ──────────────────────────────────────────────
# Vector
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class LifoVector:
    element_type: Optional[ValueType] = None   # None until the first insert
    items: Tuple[Any, ...] = ()

    def insert(self, value: Value) -> LifoVector:
        """Return a new vector with ``value`` appended."""
        if self.element_type is None:
            if value.kind not in ELEMENT_TYPES:
                raise TypeMismatch(value.type_name, self.element_name)
            return LifoVector(value.kind, (value.data,))
        if value.kind is not self.element_type:
            raise TypeMismatch(value.type_name, self.element_name)
        return LifoVector(self.element_type, self.items + (value.data,))

    def at(self, index: int) -> Value:
        return Value(self.element_type, self.items[index])

    @property
    def element_name(self) -> str:
        return self.element_type.value if self.element_type else "unknown"

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self):
        return "[" + ", ".join(str(self.at(i)) for i in range(len(self))) + "]"


# ──────────────────────────────────────────────
# Value
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Value:
    kind: ValueType
    data: Any

    @classmethod
    def of_int(cls, n: int) -> Value:
        if n < 0:
            raise ValueError(f"Integers are non-negative, got {n}")
        return cls(ValueType.INT, n)

    @classmethod
    def of_bool(cls, b: bool) -> Value:
        return cls(ValueType.BOOL, bool(b))

    @classmethod
    def of_str(cls, s: str) -> Value:
        return cls(ValueType.STRING, s)

    @classmethod
    def of_vector(cls, vector: Optional[LifoVector] = None) -> Value:
        return cls(ValueType.VECTOR, vector if vector is not None else LifoVector())

    @property
    def type_name(self) -> str:
        return self.kind.value

    @property
    def display_type(self) -> str:
        if self.kind is ValueType.VECTOR:
            return f"vector<{self.data.element_name}>"
        return self.type_name

    def to_python(self) -> Any:
        """Plain Python data: int, bool, str, or list for vectors."""
        if self.kind is ValueType.VECTOR:
            return list(self.data.items)
        return self.data

    def __str__(self):
        if self.kind is ValueType.BOOL:
            return "true" if self.data else "false"
        if self.kind is ValueType.STRING:
            return f'"{self.data}"'
        return str(self.data)


# ──────────────────────────────────────────────
# Stack elements
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class StackEl:
    origin: Any          # TokenType of the producing instruction
    value: Value

    def __str__(self):
        return f"{self.value} : {self.value.display_type}"


Stack = Tuple[StackEl, ...]
