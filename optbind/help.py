r"""
optbind help listing.

Help partitions descriptors into required and optional items (declaration
order) and renders them two ways:

- render(): the plain-text layout
      Usage:
      \t<usage>\t<description>
      Optional:
      \t<usage>\t<description>
  where every usage is padded to the longest usage of both sections and empty
  sections are left out;
- __rich__(): the same listing as styled rich tables, optionally in a Panel.

Palette keys (override through a __styles__ mapping in __main__)
- section-label, option-name, flag-name, metavar, argument-description, panel-title
"""
from collections import defaultdict
from typing import NamedTuple

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .utils import Unset, coalesce


class HelpItem(NamedTuple):
    descriptor: object
    usage: str
    text: str


def usage(descriptor, /):
    """
    usage fragment of a descriptor: "-name[, -alias]... [<argument>]".
    """
    names = ", ".join("-" + name for name in descriptor.names)
    return names if descriptor.flag else f"{names} <argument>"


class Help:
    """
    required/optional listing of a descriptor set; purely presentational.
    """

    def __init__(self, descriptors, /, *, colorful=True, fancy=False):
        items = [HelpItem(descriptor, usage(descriptor), descriptor.descr or "") for descriptor in descriptors]
        self._required = tuple(item for item in items if item.descriptor.required)
        self._optional = tuple(item for item in items if not item.descriptor.required)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)

    @property
    def required(self):
        return self._required

    @property
    def optional(self):
        return self._optional

    @property
    def width(self):
        """
        the usage column width, shared by both sections.
        """
        return max((len(item.usage) for item in self._required + self._optional), default=0)

    def _sections(self):
        return (("Usage: ", self._required), ("Optional: ", self._optional))

    def render(self):
        lines = []
        for label, items in self._sections():
            if not items:
                continue
            lines.append(label)
            lines.extend(f"\t{item.usage.ljust(self.width)}\t{item.text}" for item in items)
        return "\n".join(lines)

    def __str__(self):
        return self.render()

    def __rich__(self):
        main = __import__("__main__")
        styles = defaultdict(str, {
            "section-label": "bold #FFFFFF",  # pure white headers
            "option-name": "bold #00E6FF",  # cyan for options
            "flag-name": "bold #22C55E",  # green for flags
            "metavar": "bold #FFD600",  # amber for arguments
            "argument-description": "#9CA3AF",  # muted gray
            "panel-title": "bold #FF4D94",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if self._colorful else ""

        renders = []
        for label, items in self._sections():
            if not items:
                continue
            table = Table(
                "option", "description",
                title=Text(label.strip(), styler("section-label")),
                title_justify="left",
                box=ROUNDED,
                header_style=styler("section-label"),
            )
            for item in items:
                names = Text(", ").join(
                    Text("-" + name, styler("flag-name" if item.descriptor.flag else "option-name"))
                    for name in item.descriptor.names
                )
                if not item.descriptor.flag:
                    names.append(" ").append("<argument>", styler("metavar"))
                table.add_row(names, Text(item.text, styler("argument-description")))
            renders.append(table)

        renderable = Group(*renders)
        if self._fancy:
            prog = coalesce(getattr(main, "__prog__", Unset), "options")
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", f"{prog} HELP".upper(), " ]", style=styler("panel-title")),
                title_align="left",
            )
        return renderable

    def print(self, console=Unset):
        """
        print the styled listing (stdout by default).
        """
        (Console() if console is Unset else console).print(self)


__all__ = (
    "HelpItem",
    "Help",
    "usage",
)
