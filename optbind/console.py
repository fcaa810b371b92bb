"""
optbind console: line and secret prompts for interactive binding.

Terminal reads through rich's Console.input, which suppresses echo for secrets.
When an explicit input stream is given (pipes, tests), lines are read from it
and secrets fall back to plain reads, since there is no terminal to silence.
"""
from rich.console import Console

from .faults import InteractiveIOError
from .utils import Unset, coalesce


class Terminal:
    """
    prompt source used by Binder.bind_interactive().

    parameters
    - console: rich Console used for prompts and reports (a new one by default).
    - stream: optional text stream to read lines from instead of stdin.
    """

    def __init__(self, console=Unset, stream=Unset):
        self._console = Console() if console is Unset else console
        self._stream = coalesce(stream)

    @property
    def console(self):
        return self._console

    def read(self, prompt, /, *, secret=False):
        """
        show ``prompt`` and return the entered line without its line break.

        errors
        - InteractiveIOError on end of input or an I/O failure.
        """
        try:
            if self._stream is None:
                return self._console.input(prompt, markup=False, password=secret)
            self._console.print(prompt, end="", markup=False)
            if not (line := self._stream.readline()):
                raise EOFError("end of input")
            return line.removesuffix("\n").removesuffix("\r")
        except (EOFError, OSError) as error:
            raise InteractiveIOError(f"cannot read an answer for {prompt.strip()!r}: {error}", prompt=prompt) from error

    def report(self, fault, /):
        """
        show a recoverable fault (the prompt is repeated afterwards).
        """
        self._console.print(fault)


__all__ = (
    "Terminal",
)
