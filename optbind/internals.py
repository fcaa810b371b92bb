"""
optbind descriptor storage.

OptionDescriptor keeps its metadata ('-name', '-aliases', '-pattern', ...) in
attributes whose names are not identifiers, so they can only be reached through
the read-only properties built by view(). secretive() decides which prompts of
Binder.bind_interactive() are read without echo.
"""
import functools
import re
from collections.abc import Sequence, Mapping, Set
from contextlib import contextmanager
from types import MappingProxyType

from .utils import rename


class StorageGuard:
    """
    base of OptionDescriptor: '-' fields are hidden, and writable only inside
    the ``with super().__new__(cls) as self:`` block of the constructor.
    """
    __slots__ = ("__building",)

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        self.__building = True
        try:
            yield self
        finally:
            self.__building = False

    def __getattribute__(self, name, /):
        if isinstance(name, str) and name.startswith("-"):
            raise AttributeError("descriptor metadata is only readable through its properties")
        return object.__getattribute__(self, name)

    def __setattr__(self, name, value, /):
        if isinstance(name, str) and name.startswith("-") and not self.__building:
            raise AttributeError("descriptor metadata is read-only once constructed")
        return object.__setattr__(self, name, value)


def view(name):
    """
    property reading the '-name' field; aliases come back as a tuple, mappings
    as read-only proxies and sets as frozensets.
    """

    @rename(name)
    def getter(self):
        value = object.__getattribute__(self, "-" + name)
        if isinstance(value, Sequence) and not isinstance(value, str):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


@functools.cache
def secretive(name, /):
    """
    internal: whether an option name must be read without echo.

    names containing "password" or "secret" (any casing) are secretive.
    """
    return re.search(r"password|secret", name, re.IGNORECASE) is not None


__all__ = (
    "StorageGuard",
    "view",
    "secretive",
)
