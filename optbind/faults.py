"""
optbind faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every runtime fault.
- OptionFault: base type carrying a message plus immutable options; knows how to
  render itself with rich in a short, lowercased, actionable way.
- ValidationFailure / CoercionError / BindingError / InteractiveIOError: the
  runtime faults of the binder.
- trigger(): central entry point to surface a fault (raise, or print and exit in
  shell mode).

Host configuration (read from __main__, all optional)
- __prog__: program name shown in fault headers.
- __codes__: mapping FaultCode -> label, replacing numeric codes in output.
- __styles__: palette overrides for the rendering keys listed in OptionFault.__rich__.

Configuration mistakes (bad descriptor metadata, colliding names) are not faults:
they raise TypeError/ValueError at construction time.
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by the binder (stable identifiers).

    grouping
    - validation (2110x): INVALID_OPTIONS
    - coercion (2111x): UNCOERCIBLE_VALUE
    - binding (2112x): BINDING_FAILURE
    - console (2113x): INTERACTIVE_IO
    """
    INVALID_OPTIONS   = 21101
    UNCOERCIBLE_VALUE = 21111
    BINDING_FAILURE   = 21121
    INTERACTIVE_IO    = 21131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog():
    return coalesce(getattr(__import__("__main__"), "__prog__", Unset), os.path.basename(sys.argv[0]) or "optbind")


class OptionFault(Exception):
    """
    base fault: message + immutable options, renderable with rich.

    recognized options
    - colorful (default True): style the output.
    - fancy (default False): wrap the output in a Panel.
    - shell (default False): print and exit instead of raising (see __trigger__).
    - hint: overrides the class hint.
    any other option is context for the specific fault (argv, option, ...).
    """
    code = FaultCode.BINDING_FAILURE
    title = "fault"
    hint = ""

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, self.title)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        } | getattr(main, "__styles__", {}))

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            return Text(str(fragment), styles[style])

        header = Text.assemble(
            "[ ",
            text(_prog(), "prog-name"),
            " — ",
            text(self.code.normalize(), "code"),
            " | ",
            text(self.title.title(), "error-title"),
            " ]"
        )
        message = text(str(self), "error-message")
        renders = [message]
        if hint := self.options.get("hint", self.hint):
            renders.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy", False):
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class ValidationFailure(OptionFault):
    """
    one or more options are missing or do not match their pattern.

    options: invalid (names), argv.
    """
    code = FaultCode.INVALID_OPTIONS
    title = "invalid options"
    hint = "check the listed options against the usage below"

    @property
    def invalid(self):
        return frozenset(self.options.get("invalid", ()))

    @property
    def argv(self):
        return tuple(self.options.get("argv", ()))


class CoercionError(OptionFault, ValueError):
    """
    a raw string cannot be converted to the declared type.

    options: option (name or None), value (raw string), type (target type).
    """
    code = FaultCode.UNCOERCIBLE_VALUE
    title = "uncoercible value"
    hint = "pass a value of the expected type"

    @property
    def option(self):
        return self.options.get("option")

    @property
    def value(self):
        return self.options.get("value")

    @property
    def type(self):
        return self.options.get("type")


class BindingError(OptionFault):
    """
    the target instance could not be constructed or populated.

    options: argv (original argument vector), option (name or None).
    the originating exception is chained as __cause__.
    """
    code = FaultCode.BINDING_FAILURE
    title = "binding failure"
    hint = "the returned instance, if any, must be discarded"

    @property
    def argv(self):
        return tuple(self.options.get("argv", ()))

    @property
    def option(self):
        return self.options.get("option")

    def __str__(self):
        if (cause := self.__cause__) is not None and self.message is Unset:
            return f"{self.title}: {cause}"
        return super().__str__()


class InteractiveIOError(OptionFault):
    """
    reading from the console failed; aborts interactive binding.

    options: prompt.
    """
    code = FaultCode.INTERACTIVE_IO
    title = "console failure"
    hint = "run interactively from a terminal, or pass the options as arguments"

    @property
    def prompt(self):
        return self.options.get("prompt")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see OptionFault).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode the fault is printed to stderr and the process exits with
      status 1; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "OptionFault",
    "ValidationFailure",
    "CoercionError",
    "BindingError",
    "InteractiveIOError",
    "trigger",
)
