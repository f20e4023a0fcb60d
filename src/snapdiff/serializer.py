"""
Serialization of test output into snapshot bytes.

Byte strings are stored as-is so binary formats can be snapshotted. Any other
value goes through :class:`StructuralDumper`, which writes out types, lengths
and nested values in a stable text form. Memory addresses never appear in the
output, so structurally identical values always serialize to identical bytes.
"""
from __future__ import annotations

import collections
import dataclasses
import enum
import re
import types
from collections.abc import Mapping
from typing import Any, Optional, Protocol

import numpy as np

_ADDRESS_RE = re.compile(r" at 0x[0-9a-fA-F]+")

CYCLE_MARKER = "<already shown>"
MAX_DEPTH_MARKER = "<max depth reached>"


class Serializer(Protocol):
    """Turns a test value into the bytes stored in a snapshot file."""

    def serialize(self, value: Any) -> bytes:
        ...


def _type_name(value: Any) -> str:
    cls = type(value)
    module = getattr(cls, "__module__", "")
    if module in ("builtins", ""):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def _safe_repr(value: Any) -> str:
    """repr() without memory addresses; never raises."""
    try:
        text = repr(value)
    except Exception:
        return f"<unrepresentable {_type_name(value)}>"
    return _ADDRESS_RE.sub("", text)


def _has_custom_repr(cls: type) -> bool:
    for klass in cls.__mro__:
        if klass is object:
            return False
        if "__repr__" in klass.__dict__:
            return True
    return False


def _slot_names(cls: type) -> list[str]:
    names = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in ("__dict__", "__weakref__") and name not in names:
                names.append(name)
    return names


class StructuralDumper:
    """Deterministic structural dump of arbitrary Python values.

    Args:
        indent: String used for one level of nesting.
        max_depth: Containers nested deeper than this are not expanded.
            ``None`` means no limit.
    """

    def __init__(self, indent: str = "  ", max_depth: Optional[int] = None):
        self.indent = indent
        self.max_depth = max_depth

    def serialize(self, value: Any) -> bytes:
        """Return ``value`` unchanged if it is binary, else its dump as UTF-8."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        return self.dump(value).encode("utf-8", errors="backslashreplace")

    def dump(self, value: Any) -> str:
        """Render ``value`` as text, terminated by a newline."""
        return self._render(value, 0, set()) + "\n"

    def _render(self, value: Any, level: int, active: set[int]) -> str:
        tn = _type_name(value)

        if value is None:
            return "(NoneType) None"
        if isinstance(value, np.generic):
            return f"({tn}) {_safe_repr(value.item())}"
        if isinstance(value, enum.Enum):
            return f"({tn}) {type(value).__name__}.{value.name}"
        if isinstance(value, (bool, int, float, complex)):
            return f"({tn}) {_safe_repr(value)}"
        if isinstance(value, str):
            return f"({tn}) (len={len(value)}) {value!r}"
        if isinstance(value, (bytes, bytearray, memoryview)):
            data = bytes(value)
            return f"({tn}) (len={len(data)}) {data!r}"
        if isinstance(value, (types.FunctionType, types.BuiltinFunctionType, types.MethodType)):
            module = getattr(value, "__module__", None) or ""
            qualname = getattr(value, "__qualname__", None) or getattr(value, "__name__", "")
            return f"({tn}) {module}.{qualname}" if module else f"({tn}) {qualname}"
        if isinstance(value, (types.GeneratorType, types.CoroutineType, types.AsyncGeneratorType)):
            return f"({tn}) {value.__name__}"
        if isinstance(value, types.ModuleType):
            return f"({tn}) {value.__name__}"
        if isinstance(value, type):
            return f"({tn}) {value.__module__}.{value.__qualname__}"
        if isinstance(value, BaseException):
            return f"({tn}) {_safe_repr(value)}"

        key = id(value)
        if key in active:
            return f"({tn}) {CYCLE_MARKER}"
        if self.max_depth is not None and level > self.max_depth:
            return f"({tn}) {MAX_DEPTH_MARKER}"

        active.add(key)
        try:
            return self._render_container(value, tn, level, active)
        finally:
            active.discard(key)

    def _render_container(self, value: Any, tn: str, level: int, active: set[int]) -> str:
        child = level + 1

        if isinstance(value, np.ndarray):
            header = f"({tn}) (shape={value.shape} dtype={value.dtype})"
            items = value.tolist()
            if value.ndim == 0:
                return f"{header} {self._render(items, child, active)}"
            return self._block(header, "[", "]", [self._render(v, child, active) for v in items], level)

        if isinstance(value, Mapping):
            entries = [
                f"{self._render(k, child, active)}: {self._render(v, child, active)}"
                for k, v in value.items()
            ]
            return self._block(f"({tn}) (len={len(entries)})", "{", "}", entries, level)

        if isinstance(value, (set, frozenset)):
            # set iteration order depends on hash seeds
            items = sorted(self._render(v, child, active) for v in value)
            return self._block(f"({tn}) (len={len(items)})", "{", "}", items, level)

        if isinstance(value, tuple) and hasattr(value, "_fields"):
            fields = [(name, getattr(value, name)) for name in value._fields]
            return self._render_fields(tn, fields, level, active)

        if isinstance(value, (list, tuple, collections.deque)):
            items = [self._render(v, child, active) for v in value]
            return self._block(f"({tn}) (len={len(items)})", "[", "]", items, level)

        if dataclasses.is_dataclass(value):
            fields = [(f.name, getattr(value, f.name, None)) for f in dataclasses.fields(value)]
            return self._render_fields(tn, fields, level, active)

        try:
            attrs = vars(value)
        except TypeError:
            attrs = None

        if attrs is not None:
            return self._render_fields(tn, list(attrs.items()), level, active)

        cls = type(value)
        slots = _slot_names(cls)
        if slots and not _has_custom_repr(cls):
            fields = [(name, getattr(value, name, None)) for name in slots if hasattr(value, name)]
            return self._render_fields(tn, fields, level, active)

        return f"({tn}) {_safe_repr(value)}"

    def _render_fields(self, tn: str, fields: list[tuple[str, Any]], level: int, active: set[int]) -> str:
        entries = [f"{name}: {self._render(v, level + 1, active)}" for name, v in fields]
        return self._block(f"({tn})", "{", "}", entries, level)

    def _block(self, header: str, open_: str, close: str, items: list[str], level: int) -> str:
        if not items:
            return f"{header} {open_}{close}"
        pad = self.indent * (level + 1)
        body = ",\n".join(pad + item for item in items)
        return f"{header} {open_}\n{body}\n{self.indent * level}{close}"


_default_serializer = StructuralDumper()


def serialize(value: Any, serializer: Optional[Serializer] = None) -> bytes:
    """Serialize ``value`` with ``serializer`` or the default structural dumper."""
    return (serializer or _default_serializer).serialize(value)
