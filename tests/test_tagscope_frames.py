import types

import pytest

from tagscope.tagscope_datatypes import MISSING
from tagscope.tagscope_frames import (
    as_frame, ScopeRecord, ObjectRecord,
    MappingFrame, SequenceFrame, RecordFrame, ScalarFrame
)


class Person:
    species = "human"

    def __init__(self, name, nickname=None):
        self.name = name
        self.nickname = nickname
        self._secret = "hidden"

    def greet(self, greeting="Hello"):
        return f"{greeting}, {self.name}"

    @property
    def upper_name(self):
        return self.name.upper()

    @staticmethod
    def kind():
        return "person"


class Both(ScopeRecord):
    """Exposes `title` both as a callable and as a property."""

    def has_callable(self, name):
        return name == "title"

    def invoke_callable(self, name, args):
        return "from callable"

    def has_property(self, name):
        return name in ("title", "other")

    def get_property(self, name):
        return "from property"


# --- Classification ---

@pytest.mark.parametrize("value, frame_type", [
    ({}, MappingFrame),
    ({"a": 1}, MappingFrame),
    ([1, 2], SequenceFrame),
    ((1, 2), SequenceFrame),
    ("text", ScalarFrame),
    (3, ScalarFrame),
    (True, ScalarFrame),
    (None, ScalarFrame),
    (Person("Ann"), RecordFrame),
    (types.SimpleNamespace(a=1), RecordFrame),
    (Both(), RecordFrame),
])
def test_as_frame_variants(value, frame_type):
    frame = as_frame(value)
    assert type(frame) is frame_type
    assert frame.value is value


def test_scope_record_is_used_directly():
    record = Both()
    assert as_frame(record).record is record
    assert isinstance(as_frame(Person("Ann")).record, ObjectRecord)


# --- Mapping frames ---

def test_mapping_lookup_is_key_presence_not_truthiness():
    frame = as_frame({"none": None, "zero": 0, "empty": ""})
    assert frame.lookup("none", ()) is None
    assert frame.lookup("zero", ()) == 0
    assert frame.lookup("empty", ()) == ""
    assert frame.lookup("missing", ()) is MISSING


def test_mapping_callables_are_returned_not_invoked():
    fn = lambda: "called"
    assert as_frame({"fn": fn}).lookup("fn", ()) is fn


# --- Sequence and scalar frames ---

def test_sequence_lookup_by_index():
    frame = as_frame(["x", "y"])
    assert frame.lookup("0", ()) == "x"
    assert frame.lookup("1", ()) == "y"
    assert frame.lookup("2", ()) is MISSING
    assert frame.lookup("first", ()) is MISSING


def test_sequence_lookup_ignores_non_ascii_digits():
    frame = as_frame(["x", "y"])
    assert frame.lookup("\u00b2", ()) is MISSING
    assert frame.lookup("\u0661", ()) is MISSING


def test_scalar_frames_expose_nothing():
    assert as_frame("text").lookup("upper", ()) is MISSING
    assert as_frame(5).lookup("real", ()) is MISSING


# --- Record frames ---

def test_record_methods_are_invoked_with_args():
    frame = as_frame(Person("Ann"))
    assert frame.lookup("greet", ()) == "Hello, Ann"
    assert frame.lookup("greet", ["Hi"]) == "Hi, Ann"
    assert frame.lookup("kind", ()) == "person"


def test_record_properties():
    frame = as_frame(Person("Ann"))
    assert frame.lookup("name", ()) == "Ann"
    assert frame.lookup("upper_name", ()) == "ANN"
    assert frame.lookup("species", ()) == "human"


def test_record_none_property_counts_as_unset():
    assert as_frame(Person("Ann")).lookup("nickname", ()) is MISSING


def test_record_private_names_are_hidden():
    frame = as_frame(Person("Ann"))
    assert frame.lookup("_secret", ()) is MISSING
    assert frame.lookup("__init__", ()) is MISSING
    assert frame.lookup("missing", ()) is MISSING


def test_callable_wins_over_property():
    assert as_frame(Both()).lookup("title", ()) == "from callable"
    assert as_frame(Both()).lookup("other", ()) == "from property"


def test_method_wins_over_instance_attribute_of_same_name():
    p = Person("Ann")
    p.__dict__["greet"] = "shadowing attribute"
    assert as_frame(p).lookup("greet", ()) == "Hello, Ann"


def test_callable_instance_attribute_is_a_property():
    fn = lambda text: text
    ns = types.SimpleNamespace(fn=fn)
    assert as_frame(ns).lookup("fn", ()) is fn


def test_callable_errors_propagate():
    class Broken:
        def explode(self):
            raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        as_frame(Broken()).lookup("explode", ())
