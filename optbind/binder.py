"""
optbind binder: option resolution and binding onto a target type.

What this module provides
- Binder: owns the descriptor set of one target type (built once, read-only
  afterwards) and a custom converter registry, and offers:
  • resolve(argv): tokenizer + alias resolver.
  • validate(argv): names of missing/mismatching options, never raises for bad input.
  • bind(argv): a new, populated target instance (batch mode).
  • bind_interactive(terminal): a new instance populated from console prompts.
  • parse(argv, shell=...): validate then bind, surfacing faults for CLI use.
  • help(): the required/optional listing.

Binding rules
- Descriptors are applied in declared order.
- A present flag binds True whatever value string came with it.
- A present option binds its coerced value.
- An absent option with a default binds the coerced default (flags bind True).
- An absent option without default is skipped; the instance keeps its own value.
- Any failure raises a single BindingError carrying the argument vector; the
  partially built instance is never returned.

Quick start
    from dataclasses import dataclass
    from optbind import Binder, OptionDescriptor

    @dataclass
    class Settings:
        port: int = 0
        verbose: bool = False

    binder = Binder(Settings, [
        OptionDescriptor("port", "p", required=True, pattern=r"\\d+", target="port"),
        OptionDescriptor("verbose", "v", flag=True, target="verbose"),
    ])
    settings = binder.parse(["-p", "8080", "-v"], shell=True)
"""
import logging
import sys
from collections.abc import Iterable
from types import MappingProxyType

from .coercion import Coercer
from .console import Terminal
from .descriptors import discover, catalog, resolve_type
from .faults import *
from .faults import console
from .help import Help
from .internals import secretive
from .tokens import tokenize, resolve_aliases
from .utils import *
from .validation import check, validate

logger = logging.getLogger(__name__)


def _name(target):
    return getattr(target, "__qualname__", type(target).__qualname__)


class Binder:
    """
    binds argument vectors (or console answers) onto new instances of a target type.

    parameters
    - target: zero-argument factory, normally the target class.
    - options: iterable of OptionDescriptor; when omitted, descriptors are
      discovered from the target's decorated setters (see descriptors.discover).
    - colorful / fancy: rendering switches for help and faults.

    errors (construction time)
    - TypeError on a non-callable target, non-descriptor options, or colliding
      option names/aliases.
    """

    def __init__(self, target, options=Unset, /, *, colorful=True, fancy=False):
        if not callable(target):
            raise TypeError("Binder 'target' must be callable")
        if options is Unset:
            options = discover(target)
        elif isinstance(options, str) or not isinstance(options, Iterable):
            raise TypeError("Binder 'options' must be an iterable of option descriptors")

        self._target = target
        self._options, self._aliases = catalog(options)
        self._types = {descriptor.name: resolve_type(descriptor, target) for descriptor in self._options}
        self._coercer = Coercer()
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "binder for %s: %s",
                _name(target),
                ", ".join(f"{name}:{kind.__name__}" for name, kind in self._types.items()) or "no options",
            )

    @property
    def target(self):
        return self._target

    @property
    def options(self):
        return self._options

    @property
    def aliases(self):
        """
        alias -> canonical name, in registration order.
        """
        return MappingProxyType(self._aliases)

    @property
    def types(self):
        """
        option name -> coercion type, resolved at construction.
        """
        return MappingProxyType(self._types)

    @property
    def converters(self):
        return self._coercer.converters

    def register_converter(self, type, converter, /):
        """
        register ``converter(str) -> value`` for options whose type is exactly ``type``.

        the last registration for a type wins; later bind()/bind_interactive()
        calls use it, ahead of the built-in conversions.
        """
        self._coercer.register(type, converter)

    def resolve(self, argv, /):
        """
        tokenize ``argv`` and rewrite aliases to canonical names.
        """
        return resolve_aliases(tokenize(argv), self._aliases)

    def validate(self, argv, /):
        """
        return the set of option names that ``argv`` does not satisfy.
        """
        return validate(self._options, self.resolve(argv))

    def _convert(self, descriptor, raw, /):
        if descriptor.flag:
            return True
        return self._coercer.coerce(self._types[descriptor.name], raw, name=descriptor.name)

    def _construct(self, argv, /):
        try:
            return self._target()
        except Exception as error:
            raise BindingError(f"cannot construct {_name(self._target)}: {error}", argv=argv) from error

    def _assign(self, instance, descriptor, value, argv, /):
        try:
            descriptor.assign(instance, value)
        except Exception as error:
            raise BindingError(
                f"cannot bind option {descriptor.name!r}: {error}",
                argv=argv,
                option=descriptor.name,
            ) from error

    def bind(self, argv, /):
        """
        build a new target instance populated from ``argv``.

        errors
        - BindingError on any construction, coercion, converter or binding-target
          failure; the underlying exception is chained as __cause__.
        """
        argv = tuple(argv) if not isinstance(argv, str) else argv
        resolved = self.resolve(argv)
        instance = self._construct(argv)

        for descriptor in self._options:
            if descriptor.name in resolved:
                raw = resolved[descriptor.name]
            elif descriptor.default is not None:
                raw = descriptor.default
                logger.debug("option %r absent, applying default %r", descriptor.name, raw)
            else:
                continue

            try:
                value = self._convert(descriptor, raw)
            except Exception as error:
                raise BindingError(
                    f"cannot bind option {descriptor.name!r}: {error}",
                    argv=argv,
                    option=descriptor.name,
                ) from error
            self._assign(instance, descriptor, value, argv)

        logger.debug("bound %s from %d argument(s)", _name(self._target), len(argv))
        return instance

    def _prompt(self, descriptor, /):
        prompt = descriptor.descr or descriptor.name
        if descriptor.default is not None:
            prompt += f" [{descriptor.default}]"
        return prompt + ": "

    def _ask(self, terminal, descriptor, /):
        """
        prompt until an entry passes the descriptor checks.

        returns the coerced value, or Unset when the option stays unbound.
        """
        prompt = self._prompt(descriptor)
        secret = secretive(descriptor.name)
        style = {"colorful": self._colorful, "fancy": self._fancy}

        while True:
            line = terminal.read(prompt, secret=secret)

            if not check(descriptor, line or None, present=bool(line)):
                logger.debug("invalid entry for option %r, prompting again", descriptor.name)
                terminal.report(ValidationFailure(
                    f"option {descriptor.name!r} is required" if not line else
                    f"option {descriptor.name!r} does not match {descriptor.pattern.pattern!r}",
                    invalid=(descriptor.name,),
                    hint="enter another value",
                    **style,
                ))
                continue

            if not line and descriptor.default is None:
                return Unset

            try:
                return self._convert(descriptor, line or descriptor.default)
            except ValueError as error:
                if not line:
                    raise BindingError(
                        f"cannot bind option {descriptor.name!r}: {error}",
                        option=descriptor.name,
                    ) from error
                if not isinstance(error, CoercionError):
                    error = CoercionError(
                        str(error),
                        option=descriptor.name,
                        value=line,
                        type=self._types[descriptor.name],
                    )
                logger.debug("uncoercible entry for option %r, prompting again", descriptor.name)
                terminal.report(error.__replace__(hint="enter another value", **style))
            except Exception as error:
                raise BindingError(
                    f"cannot bind option {descriptor.name!r}: {error}",
                    option=descriptor.name,
                ) from error

    def bind_interactive(self, terminal=Unset, /):
        """
        build a new target instance from console answers, one prompt per option.

        - an empty answer means "absent": the default applies, or the option is skipped;
        - names containing "password" or "secret" are read without echo;
        - invalid or uncoercible answers are reported and asked again.

        errors
        - InteractiveIOError when the console cannot be read.
        - BindingError on construction or binding-target failures.
        """
        terminal = Terminal() if terminal is Unset else terminal
        instance = self._construct(())

        for descriptor in self._options:
            if (value := self._ask(terminal, descriptor)) is Unset:
                continue
            self._assign(instance, descriptor, value, ())

        logger.debug("bound %s interactively", _name(self._target))
        return instance

    def help(self):
        """
        the required/optional listing of the declared options.
        """
        return Help(self._options, colorful=self._colorful, fancy=self._fancy)

    def parse(self, argv=Unset, /, *, shell=False):
        """
        validate then bind ``argv`` (``sys.argv[1:]`` by default).

        outside shell mode, ValidationFailure or BindingError are raised. in shell
        mode the fault is printed to stderr (followed by the help listing for
        validation failures) and the process exits with status 1.
        """
        argv = coalesce(argv, sys.argv[1:])
        argv = tuple(argv) if not isinstance(argv, str) else argv
        options = {"shell": bool(shell), "colorful": self._colorful, "fancy": self._fancy}

        if invalid := self.validate(argv):
            fault = ValidationFailure(
                f"missing or invalid options: {', '.join(f'-{name}' for name in sorted(invalid))}",
                invalid=invalid,
                argv=argv,
            )
            if shell:
                console.print(fault.__replace__(**options))
                self.help().print(console)
                sys.exit(1)
            trigger(fault, **options)

        try:
            return self.bind(argv)
        except BindingError as error:
            trigger(error, **options)

    def __repr__(self):
        return f"binder(target={_name(self._target)}, options={[descriptor.name for descriptor in self._options]!r})"


__all__ = (
    "Binder",
)
