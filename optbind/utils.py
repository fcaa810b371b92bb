"""
optbind helpers shared by descriptors, coercion, binder and faults.

- Unset: "argument not given". OptionDescriptor needs it next to None, since
  default=None and descr=None are legitimate values meaning "no default" and
  "no description".
- coalesce(value, default): resolve Unset, keep every other value.
- rename(): readable names for generated callables such as the range-checked
  ctypes parsers (parse_c_short, ...) and the __option__ hooks of @option.
"""
import builtins
import functools
from typing import final


@final
class UnsetType:
    """
    type of the Unset singleton; falsy, final, and usable in ``str | Unset``
    isinstance checks.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    ``default`` when ``object`` is Unset, ``object`` otherwise (None included).
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    rename(callable, name) renames in place; rename(name) is the decorator form.

    TypeError for non-callables, non-string names and built-ins whose names are
    fixed.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
)
