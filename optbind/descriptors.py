r"""
optbind option descriptors and declaration decorators.

Overview
- OptionDescriptor: immutable metadata for one bindable option (name, aliases,
  flag/required status, pattern, default, descr) plus its binding target.
- Decorators
  • @option(...): attach a descriptor to a setter, binding the setter as target.
  • @flag(...): same, for presence-only options.
  Decorated setters stay ordinary functions; the descriptor is reachable through
  an ``__option__`` hook, the same way any object exposing ``__option__`` can take
  part in discovery.
- Descriptor sets
  • discover(target): collect hooked members of a class, base classes first.
  • catalog(descriptors): check a set for name/alias collisions and build the
    alias table (ascending registration order).
  • resolve_type(descriptor, target): the coercion type of a descriptor.

Binding targets
- a callable ``target(instance, value)`` (typically an unbound setter), or
- a string naming an attribute of the instance, assigned with ``setattr``.

Quick example:
    >>> from optbind import option, flag
    >>> class Settings:
    ...     @option("port", "p", pattern=r"\d+", default="8080", descr="listening port")
    ...     def set_port(self, port: int): self.port = port
    ...
    ...     @flag("verbose", "v")
    ...     def set_verbose(self, verbose: bool): self.verbose = verbose

Public API
- Classes: OptionDescriptor
- Decorators: option, flag
- Functions: discover, catalog, resolve_type
"""
import builtins
import functools
import inspect
import logging
import operator
import re
import types
import typing
from types import MethodType

from .internals import StorageGuard, view
from .utils import *

logger = logging.getLogger(__name__)


class DescriptorType(type):
    """
    Metaclass that exposes descriptor metadata as read-only views.

    Responsibilities
    - Publish every name listed in __introspectable__ as a property backed by the
      guarded '-name' storage (see internals.view).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in configuration error messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: view(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option-descriptor(name='port', aliases=('p',), flag=False, ...)
            """
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers such as rich.
            """
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the canonical name and the aliases.

    Rules
    - names are non-empty strings without surrounding whitespace handling: they
      are used verbatim after a single leading dash on the command line.
    - a name cannot start with '-', and cannot contain '=' or whitespace.
    - aliases keep their registration order; duplicates (including the canonical
      name itself) are rejected.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^\s=\-][^\s=]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must be unprefixed, without '=' or whitespaces")

    aliases = []
    for alias in metadata["aliases"]:
        if not isinstance(alias, str):
            raise TypeError(f"{cls.__typename__} aliases must be strings")
        elif not alias:
            raise ValueError(f"{cls.__typename__} aliases cannot be empty-strings")
        elif not re.fullmatch(r"[^\s=\-][^\s=]*", alias):
            raise ValueError(f"{cls.__typename__} aliases must be unprefixed, without '=' or whitespaces")
        elif alias == name or alias in aliases:
            raise ValueError(f"{cls.__typename__} aliases cannot contain duplicates")
        aliases.append(alias)

    metadata["aliases"] = tuple(aliases)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate and normalize the value-related metadata.

    Responsibilities
    - flag/required: must be booleans.
    - pattern: a string (compiled here) or a compiled str re.Pattern.
    - default: Unset | None | str; the empty string means "no default".
    - descr: Unset | str, trimmed and non-empty when provided; Unset becomes None.
    - type: Unset or a class; flags cannot declare one.

    Side effects
    - Mutates the provided metadata dict in place.
    """
    for name in ("flag", "required"):
        if not isinstance(metadata[name], bool):
            raise TypeError(f"{cls.__typename__} {name!r} must be a boolean")

    if isinstance(pattern := metadata["pattern"], str):
        try:
            pattern = re.compile(pattern)
        except re.error as error:
            raise ValueError(f"{cls.__typename__} 'pattern' is not a valid regular expression: {error}") from None
    elif not isinstance(pattern, re.Pattern):
        raise TypeError(f"{cls.__typename__} 'pattern' must be a string or a compiled pattern")
    elif isinstance(pattern.pattern, bytes):
        raise TypeError(f"{cls.__typename__} 'pattern' must match strings, not bytes")
    metadata["pattern"] = pattern

    if not isinstance(default := metadata["default"], str | None | Unset):
        raise TypeError(f"{cls.__typename__} 'default' must be a string")
    metadata["default"] = coalesce(default) or None

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(type := metadata["type"], builtins.type | Unset):
        raise TypeError(f"{cls.__typename__} 'type' must be a class")
    if metadata["flag"] and type is not Unset:
        raise TypeError(f"flag {cls.__typename__} cannot specify a 'type'")


def _sanitize_target(cls, metadata, /):
    """
    Internal: validate the binding target.

    A string target must be a valid identifier (attribute name). A callable
    target must accept exactly the (instance, value) pair; callables without an
    inspectable signature (some built-ins) are trusted.
    """
    if (target := metadata["target"]) is Unset:
        raise TypeError(f"{cls.__typename__} must specify a 'target'")
    if isinstance(target, str):
        if not target.isidentifier():
            raise ValueError(f"{cls.__typename__} 'target' attribute name must be an identifier")
        return
    if not callable(target):
        raise TypeError(f"{cls.__typename__} 'target' must be callable or an attribute name")
    try:
        inspect.signature(target).bind(object(), object())
    except ValueError:
        pass
    except TypeError:
        raise TypeError(f"{cls.__typename__} 'target' must accept an instance and a value") from None


class OptionDescriptor(StorageGuard, metaclass=DescriptorType):
    """
    Immutable metadata for one bindable command-line option.

    Highlights
    - name: canonical identifier (given without its leading dash).
    - aliases: alternative names, each resolved to the canonical one.
    - flag: presence-only option; binds True.
    - required: the option must appear in the argument vector.
    - pattern: a present value must fully match it (default ".*").
    - default: string applied when the option is absent (None when not declared).
    - descr: help and prompt text.
    - target: binding target, a callable (instance, value) or an attribute name.
    - type: explicit coercion type; Unset means "infer from the target".

    Properties
    - Every name in __introspectable__ is a read-only attribute. Backing storage is
      locked once construction finishes.
    """

    __introspectable__ = (
        "name",
        "aliases",
        "flag",
        "required",
        "pattern",
        "default",
        "descr",
        "target",
        "type",
    )

    __displayable__ = (
        "name",
        "aliases",
        "flag",
        "required",
        "default",
        "descr",
    )

    def __new__(
            cls,
            name,
            /,
            *aliases,
            flag=False,
            required=False,
            pattern=".*",
            default=Unset,
            descr=Unset,
            target=Unset,
            type=Unset,
    ):
        """
        Construct a descriptor with the provided metadata.

        Parameters
        - name: str
          Canonical option name, unprefixed ("port" for "-port").
        - aliases: str
          Alternative names ("p" for "-p").
        - flag: bool
          Presence-only option; no argument is expected.
        - required: bool
          Validation fails when the option is absent.
        - pattern: str | re.Pattern
          Regular expression a present value must fully match.
        - default: str | None
          Value used when the option is absent; "" and None mean no default.
        - descr: str
          Short description for help and interactive prompts.
        - target: Callable[[Any, Any], Any] | str
          Binding target receiving the coerced value.
        - type: type
          Explicit coercion type, overriding inference from the target.

        Errors
        - TypeError/ValueError on malformed metadata (configuration time).
        """
        metadata = {
            "name": name,
            "aliases": aliases,
            "flag": flag,
            "required": required,
            "pattern": pattern,
            "default": default,
            "descr": descr,
            "target": target,
            "type": type,
        }
        _sanitize_names(cls, metadata)
        _sanitize_metadata(cls, metadata)
        _sanitize_target(cls, metadata)

        with super().__new__(cls) as self:
            for name, object in metadata.items():
                setattr(self, "-" + name, object)
        return self

    @property
    def names(self):
        """
        The canonical name followed by the aliases.
        """
        return (self.name, *self.aliases)

    def matches(self, value, /):
        """
        Whether a raw value satisfies the descriptor's pattern (full match).
        """
        return self.pattern.fullmatch(value) is not None

    def assign(self, instance, value, /):
        """
        Invoke the binding target with an already coerced value.
        """
        if isinstance(target := self.target, str):
            setattr(instance, target, value)
        else:
            target(instance, value)

    def __option__(self):
        """
        Introspection hook: identify this object as an option descriptor.
        """
        return self


def option(*args, **kwargs):
    """
    Decorator factory attaching an option descriptor to a setter.

    Usage
        class Settings:
            @option("output", "o", default="out.txt", descr="output file")
            def set_output(self, output: Path): ...

    Behavior
    - Builds OptionDescriptor(*args, target=<decorated function>, **kwargs).
    - Returns the decorated function unchanged, with an ``__option__`` hook that
      yields the descriptor; Binder discovery picks the hook up.
    - Enforces single application per function.
    """
    if "target" in kwargs:
        raise TypeError("@option() binds the decorated callable, 'target' is not allowed")

    @rename("option")
    def wrapper(callback, /):
        if not callable(callback):
            raise TypeError("@option() must be applied to a callable")
        if hasattr(callback, "__option__"):
            raise TypeError("@option() must be applied only once")
        descriptor = OptionDescriptor(*args, target=callback, **kwargs)
        callback.__option__ = MethodType(rename(lambda self: descriptor, "__option__"), callback)
        return callback

    return wrapper


def flag(*args, **kwargs):
    """
    Decorator factory attaching a presence-only descriptor to a setter.

    Equivalent to @option(..., flag=True); the setter receives True.
    """
    return rename(option(*args, flag=True, **kwargs), "flag")


def discover(target, /):
    """
    Collect the descriptors declared on a class, in definition order.

    Members are scanned base classes first; an override keeps the slot of the
    member it replaces. Any member exposing a callable ``__option__`` hook takes
    part (decorated setters and class-level OptionDescriptor instances alike).

    Errors
    - TypeError when a hook returns something other than an OptionDescriptor.
    """
    members = {}
    for klass in reversed(getattr(target, "__mro__", ())):
        if klass is not object:
            members |= vars(klass)

    descriptors = []
    for name, member in members.items():
        if not callable(hook := getattr(member, "__option__", None)):
            continue
        if not isinstance(descriptor := hook(), OptionDescriptor):
            raise TypeError(f"__option__() of member {name!r} returned a non-descriptor")
        descriptors.append(descriptor)

    logger.debug("discovered %d option(s) on %r", len(descriptors), target)
    return descriptors


def catalog(descriptors, /):
    """
    Check a descriptor set and build its alias table.

    Returns
    - (descriptors, aliases): a tuple of descriptors in declared order and a dict
      alias -> canonical name in ascending registration order.

    Errors
    - TypeError on non-descriptors, and when a name or alias is already used by
      the canonical name or an alias of another descriptor.
    """
    descriptors = tuple(descriptors)
    seen = {}
    aliases = {}

    for descriptor in descriptors:
        if not isinstance(descriptor, OptionDescriptor):
            raise TypeError(f"options must be option descriptors, not {builtins.type(descriptor).__name__!r}")
        for name in descriptor.names:
            if name in seen:
                raise TypeError(f"option name {name!r} is already in use by option {seen[name]!r}")
            seen[name] = descriptor.name
        aliases |= dict.fromkeys(descriptor.aliases, descriptor.name)

    return descriptors, aliases


def _unwrap(annotation):
    """
    Reduce an annotation to a concrete class; ``X | None`` becomes ``X``.
    """
    if typing.get_origin(annotation) in (typing.Union, types.UnionType):
        arguments = [argument for argument in typing.get_args(annotation) if argument is not types.NoneType]
        return _unwrap(arguments[0]) if len(arguments) == 1 else Unset
    return annotation if isinstance(annotation, builtins.type) else Unset


def _annotations(object):
    try:
        return typing.get_type_hints(object)
    except (NameError, TypeError):
        return dict(getattr(object, "__annotations__", {}))


def resolve_type(descriptor, target, /):
    """
    Determine the coercion type of a descriptor bound on a given target type.

    Order
    - the explicit descriptor.type, when set;
    - for callable targets, the annotation of the value parameter (the last
      positional parameter);
    - for attribute targets, the target class annotation of that attribute;
    - otherwise str (identity conversion).
    """
    if descriptor.flag:
        return bool
    if descriptor.type is not Unset:
        return descriptor.type

    if isinstance(binding := descriptor.target, str):
        annotation = _annotations(target).get(binding, Unset) if isinstance(target, type) else Unset
    else:
        try:
            parameters = [
                parameter for parameter in inspect.signature(binding).parameters.values()
                if parameter.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            ]
        except ValueError:
            parameters = []
        annotation = _annotations(binding).get(parameters[-1].name, Unset) if parameters else Unset

    return coalesce(_unwrap(annotation), str)


__all__ = (
    "OptionDescriptor",
    "option",
    "flag",
    "discover",
    "catalog",
    "resolve_type",
)

# Keep the metaclass out of star-imports and autocompletion.
del DescriptorType
