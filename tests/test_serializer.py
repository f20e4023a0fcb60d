"""Tests for the structural dump serializer."""

import enum
from collections import OrderedDict, namedtuple
from dataclasses import dataclass, field

import numpy as np
import pytest

from snapdiff.serializer import StructuralDumper, serialize


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Item:
    name: str
    tags: list = field(default_factory=list)


class Plain:
    def __init__(self):
        self.a = 1
        self.b = "two"


class Slotted:
    __slots__ = ("x", "y")

    def __init__(self):
        self.x = 1
        self.y = 2


class Opaque:
    __slots__ = ()


Pair = namedtuple("Pair", ["left", "right"])


@pytest.fixture
def dumper():
    return StructuralDumper()


class TestBytesPassThrough:
    """Tests that binary input is stored unchanged."""

    @pytest.mark.parametrize("value", [b"", b"\x00\xffraw", bytearray(b"abc"), memoryview(b"mv")])
    def test_binary_unchanged(self, dumper, value):
        assert dumper.serialize(value) == bytes(value)

    def test_module_helper(self):
        assert serialize(b"raw") == b"raw"
        assert serialize("text") == b"(str) (len=4) 'text'\n"


class TestScalars:
    """Tests for scalar rendering."""

    def test_none(self, dumper):
        assert dumper.dump(None) == "(NoneType) None\n"

    def test_bool_and_numbers(self, dumper):
        assert dumper.dump(True) == "(bool) True\n"
        assert dumper.dump(42) == "(int) 42\n"
        assert dumper.dump(1.5) == "(float) 1.5\n"
        assert dumper.dump(1 + 2j) == "(complex) (1+2j)\n"

    def test_string_shows_length(self, dumper):
        assert dumper.dump("héllo") == "(str) (len=5) 'héllo'\n"

    def test_enum(self, dumper):
        assert dumper.dump(Color.GREEN) == f"({__name__}.Color) Color.GREEN\n"

    def test_numpy_scalar(self, dumper):
        assert dumper.dump(np.int64(7)) == "(numpy.int64) 7\n"
        assert dumper.dump(np.float32(0.5)) == "(numpy.float32) 0.5\n"


class TestContainers:
    """Tests for nested container rendering."""

    def test_nested_dict(self, dumper):
        expected = (
            "(dict) (len=2) {\n"
            "  (str) (len=1) 'a': (int) 1,\n"
            "  (str) (len=1) 'b': (list) (len=2) [\n"
            "    (int) 1,\n"
            "    (NoneType) None\n"
            "  ]\n"
            "}\n"
        )
        assert dumper.dump({"a": 1, "b": [1, None]}) == expected

    def test_empty_containers(self, dumper):
        assert dumper.dump([]) == "(list) (len=0) []\n"
        assert dumper.dump({}) == "(dict) (len=0) {}\n"
        assert dumper.dump(()) == "(tuple) (len=0) []\n"

    def test_set_order_is_stable(self, dumper):
        a = {"pear", "apple", "fig", "kiwi"}
        b = {"kiwi", "fig", "apple", "pear"}
        assert dumper.dump(a) == dumper.dump(b)
        assert dumper.dump(frozenset(a)).startswith("(frozenset) (len=4) {")

    def test_ordered_dict_keeps_order(self, dumper):
        text = dumper.dump(OrderedDict([("z", 1), ("a", 2)]))
        assert text.index("'z'") < text.index("'a'")
        assert text.startswith("(collections.OrderedDict) (len=2) {")

    def test_namedtuple_fields(self, dumper):
        text = dumper.dump(Pair(1, "x"))
        assert text == f"({__name__}.Pair) {{\n  left: (int) 1,\n  right: (str) (len=1) 'x'\n}}\n"

    def test_custom_indent(self):
        assert StructuralDumper(indent="    ").dump([1]) == "(list) (len=1) [\n    (int) 1\n]\n"


class TestObjects:
    """Tests for user-defined objects."""

    def test_dataclass(self, dumper):
        text = dumper.dump(Item("widget", ["a"]))
        assert text == (
            f"({__name__}.Item) {{\n"
            "  name: (str) (len=6) 'widget',\n"
            "  tags: (list) (len=1) [\n"
            "    (str) (len=1) 'a'\n"
            "  ]\n"
            "}\n"
        )

    def test_plain_object(self, dumper):
        assert dumper.dump(Plain()) == (
            f"({__name__}.Plain) {{\n  a: (int) 1,\n  b: (str) (len=3) 'two'\n}}\n"
        )

    def test_slotted_object(self, dumper):
        assert dumper.dump(Slotted()) == f"({__name__}.Slotted) {{\n  x: (int) 1,\n  y: (int) 2\n}}\n"

    def test_no_memory_addresses(self, dumper):
        first = dumper.dump([Opaque(), lambda: None, object()])
        second = dumper.dump([Opaque(), lambda: None, object()])
        assert first == second
        assert "0x" not in first

    def test_function(self, dumper):
        assert dumper.dump(len) == "(builtin_function_or_method) builtins.len\n"
        assert dumper.dump(serialize) == "(function) snapdiff.serializer.serialize\n"

    def test_generator_is_not_consumed(self, dumper):
        gen = (i for i in range(3))
        assert dumper.dump(gen) == "(generator) <genexpr>\n"
        assert list(gen) == [0, 1, 2]

    def test_class_object(self, dumper):
        assert dumper.dump(Plain) == f"(type) {__name__}.Plain\n"

    def test_exception(self, dumper):
        assert dumper.dump(ValueError("bad")) == "(ValueError) ValueError('bad')\n"

    def test_cycle(self, dumper):
        data = [1]
        data.append(data)
        assert dumper.dump(data) == "(list) (len=2) [\n  (int) 1,\n  (list) <already shown>\n]\n"

    def test_shared_reference_is_not_a_cycle(self, dumper):
        shared = [1]
        text = dumper.dump([shared, shared])
        assert "<already shown>" not in text
        assert text.count("(int) 1") == 2

    def test_max_depth(self):
        text = StructuralDumper(max_depth=1).dump([[[1]]])
        assert "<max depth reached>" in text
        assert "(int) 1" not in text

    def test_broken_repr_degrades(self, dumper):
        class Broken:
            __slots__ = ()

            def __repr__(self):
                raise RuntimeError("no repr")

        assert dumper.dump(Broken()).endswith("<unrepresentable " + f"{__name__}.{Broken.__qualname__}>\n")


class TestNumpyArrays:
    """Tests for numpy array rendering."""

    def test_array_shape_and_values(self, dumper):
        text = dumper.dump(np.array([[1, 2], [3, 4]], dtype=np.int64))
        assert text == (
            "(numpy.ndarray) (shape=(2, 2) dtype=int64) [\n"
            "  (list) (len=2) [\n"
            "    (int) 1,\n"
            "    (int) 2\n"
            "  ],\n"
            "  (list) (len=2) [\n"
            "    (int) 3,\n"
            "    (int) 4\n"
            "  ]\n"
            "]\n"
        )

    def test_zero_dimensional_array(self, dumper):
        assert dumper.dump(np.array(2.5)) == "(numpy.ndarray) (shape=() dtype=float64) (float) 2.5\n"

    def test_equal_arrays_serialize_equally(self, dumper):
        assert dumper.serialize(np.arange(6).reshape(2, 3)) == dumper.serialize(np.arange(6).reshape(2, 3))
