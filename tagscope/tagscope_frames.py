"""
Scope frames: the explicit contract between the context stack and the values
pushed onto it.

Every value on the stack is viewed through one of four frame variants:

  - MappingFrame:  any Mapping; lookup is a key-presence test.
  - SequenceFrame: list/tuple; a digit-only name selects that index.
  - RecordFrame:   any other object, through the ScopeRecord capabilities
                   (callable members first, then properties).
  - ScalarFrame:   strings, numbers, booleans and None expose nothing.

Objects can implement ScopeRecord themselves to control exactly what a
template may see; everything else is adapted by ObjectRecord.
"""
import collections.abc
import inspect
import logging
import types
from abc import ABC, abstractmethod
from typing import Any, Sequence

from tagscope.tagscope_datatypes import MISSING

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, bytes, bytearray, int, float, complex, bool, type(None))


class ScopeRecord(ABC):
    """Capabilities of a record-like frame."""

    @abstractmethod
    def has_callable(self, name: str) -> bool: raise NotImplementedError

    @abstractmethod
    def invoke_callable(self, name: str, args: Sequence[Any]) -> Any: raise NotImplementedError

    @abstractmethod
    def has_property(self, name: str) -> bool: raise NotImplementedError

    @abstractmethod
    def get_property(self, name: str) -> Any: raise NotImplementedError


class ObjectRecord(ScopeRecord):
    """Adapts a plain Python object to ScopeRecord.

    A callable member is a method defined on the object's class; it is bound
    through the class so an instance attribute of the same name never hides
    it. A property is any other public attribute that is set and not None.
    """
    __slots__ = ("obj",)

    _METHOD_TYPES = (
        types.FunctionType, staticmethod, classmethod,
        types.BuiltinFunctionType, types.MethodDescriptorType,
    )

    def __init__(self, obj: Any):
        self.obj = obj

    def _class_member(self, name: str):
        try:
            return inspect.getattr_static(type(self.obj), name)
        except AttributeError:
            return None

    def has_callable(self, name: str) -> bool:
        if name.startswith('_'):
            return False
        return isinstance(self._class_member(name), self._METHOD_TYPES)

    def invoke_callable(self, name: str, args: Sequence[Any]) -> Any:
        member = self._class_member(name)
        bound = member.__get__(self.obj, type(self.obj))
        return bound(*args)

    def has_property(self, name: str) -> bool:
        if name.startswith('_'):
            return False
        try:
            return getattr(self.obj, name) is not None
        except AttributeError:
            return False

    def get_property(self, name: str) -> Any:
        return getattr(self.obj, name)

    def __repr__(self):
        return f"<ObjectRecord {type(self.obj).__name__}>"


class ScopeFrame(ABC):
    """One layer of the context stack wrapping a caller-supplied value."""
    __slots__ = ("value",)

    def __init__(self, value: Any):
        self.value = value

    @abstractmethod
    def lookup(self, name: str, args: Sequence[Any]) -> Any:
        """Returns the member value, or MISSING when this frame has no `name`."""
        raise NotImplementedError

    def __repr__(self):
        return f"<{type(self).__name__} {type(self.value).__name__}>"


class MappingFrame(ScopeFrame):
    def lookup(self, name, args):
        mapping = self.value
        if name in mapping:
            return mapping[name]
        return MISSING


class SequenceFrame(ScopeFrame):
    def lookup(self, name, args):
        if not (name.isascii() and name.isdigit()):
            return MISSING
        idx = int(name)
        if idx < len(self.value):
            return self.value[idx]
        return MISSING


class RecordFrame(ScopeFrame):
    """Callable members win over properties of the same name."""
    __slots__ = ("record",)

    def __init__(self, value: Any):
        super().__init__(value)
        self.record = value if isinstance(value, ScopeRecord) else ObjectRecord(value)

    def lookup(self, name, args):
        record = self.record
        if record.has_callable(name):
            logger.debug("invoking %s.%s with %d arg(s)", type(self.value).__name__, name, len(args))
            return record.invoke_callable(name, list(args))
        if record.has_property(name):
            return record.get_property(name)
        return MISSING


class ScalarFrame(ScopeFrame):
    def lookup(self, name, args):
        return MISSING


def as_frame(value: Any) -> ScopeFrame:
    """Classifies a stack value into its frame variant. The value is not copied."""
    if isinstance(value, ScopeFrame):
        return value
    if isinstance(value, ScopeRecord):
        return RecordFrame(value)
    if isinstance(value, collections.abc.Mapping):
        return MappingFrame(value)
    if isinstance(value, SCALAR_TYPES):
        return ScalarFrame(value)
    if isinstance(value, (list, tuple)):
        return SequenceFrame(value)
    return RecordFrame(value)


__all__ = [
    "ScopeRecord",
    "ObjectRecord",
    "ScopeFrame",
    "MappingFrame",
    "SequenceFrame",
    "RecordFrame",
    "ScalarFrame",
    "as_frame",
]
