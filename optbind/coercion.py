"""
optbind type coercion.

Resolution chain for coerce(type, value)
1. custom converters registered on the Coercer (exact type match); they are
   delegated to entirely, failures included.
2. the built-in table (BUILTINS) for primitive-like types;
3. identity: the raw string is returned unchanged for any other type.

Built-in conversions
- bool: "true" in any casing is True, anything else (None included) is False.
- int: int(value).
- ctypes.c_int8/c_int16/c_int32/c_int64 (and their aliases c_byte, c_short,
  c_int, c_longlong): int(value) checked against the signed width of the ctypes
  type; the result is a plain int.
- ctypes.c_long: same, with the platform width of a C long (64 bits on LP64
  systems, 32 bits on Windows).
- float, ctypes.c_double: float(value).
- ctypes.c_float: float(value) rounded to single precision.
- pathlib.Path, pathlib.PurePath: a path built from the string, never checked
  for existence.

Failures of the built-in parsers are raised as CoercionError (a ValueError).
"""
import builtins
import ctypes
import logging
import pathlib
from types import MappingProxyType

from .faults import CoercionError
from .utils import rename

logger = logging.getLogger(__name__)


def _boolean(value):
    return value is not None and value.lower() == "true"


def _integer(ctype, /):
    """
    build a parser for a signed ctypes integer type (range-checked).
    """
    bits = ctypes.sizeof(ctype) * 8
    lower, upper = -(1 << (bits - 1)), (1 << (bits - 1)) - 1

    @rename(f"parse_{ctype.__name__}")
    def parse(value):
        if not lower <= (number := int(value)) <= upper:
            raise ValueError(f"value out of range for a {bits}-bit integer: {value!r}")
        return number

    return parse


def _single(value):
    return ctypes.c_float(float(value)).value


BUILTINS = MappingProxyType({
    bool: _boolean,
    int: int,
    ctypes.c_byte: _integer(ctypes.c_byte),
    ctypes.c_short: _integer(ctypes.c_short),
    ctypes.c_int: _integer(ctypes.c_int),
    ctypes.c_long: _integer(ctypes.c_long),
    ctypes.c_longlong: _integer(ctypes.c_longlong),
    float: float,
    ctypes.c_double: float,
    ctypes.c_float: _single,
    pathlib.Path: pathlib.Path,
    pathlib.PurePath: pathlib.PurePath,
})


class Coercer:
    """
    converts raw strings to declared types; owns the custom converter registry.

    the registry is meant to be filled during setup: registration mutates shared
    state and is not synchronized against concurrent coerce() calls.
    """

    def __init__(self):
        self._converters = {}

    @property
    def converters(self):
        """
        read-only view of the custom converters (type -> converter).
        """
        return MappingProxyType(self._converters)

    def register(self, type, converter, /):
        """
        register a custom converter for an exact type; the last registration wins.
        """
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a type")
        if not callable(converter):
            raise TypeError("register() second argument must be callable")
        if type in self._converters:
            logger.debug("replacing converter for %s", type.__qualname__)
        self._converters[type] = converter
        logger.debug("registered converter %r for %s", converter, type.__qualname__)

    def coerce(self, type, value, /, *, name=None):
        """
        convert ``value`` to ``type``.

        parameters
        - type: the declared type of the binding target.
        - value: the raw string (None for a valueless option).
        - name: option name, reported by CoercionError.

        errors
        - CoercionError when a built-in parser rejects the value.
        - whatever a custom converter raises, unchanged.
        """
        if (converter := self._converters.get(type)) is not None:
            return converter(value)

        if (parser := BUILTINS.get(type)) is None:
            return value

        try:
            return parser(value)
        except (TypeError, ValueError, OverflowError) as error:
            label = f"option {name!r}" if name is not None else "value"
            raise CoercionError(
                f"{label} cannot be converted to {type.__name__}: {value!r}",
                option=name,
                value=value,
                type=type,
            ) from error


__all__ = (
    "BUILTINS",
    "Coercer",
)
