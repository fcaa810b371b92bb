"""
optbind tokenizer and alias resolver.

Token grammar
    arg        := "-" name ("=" value)?
    name       := any run of non-"=" characters following the dash
    bare-value := a token not itself starting with "-", immediately
                  following an arg token with no "=" form

Rules
- Only a single leading dash is stripped: "--name" yields the name "-name".
- The "=" form wins over the spaced form: ["-name=a", "b"] binds "a" and
  leaves "b" as an ignored bare token.
- A marker without a value maps to None (flag semantics).
- The last occurrence of a name wins; stray non-option tokens are ignored.
"""
from collections.abc import Iterable, Mapping


def tokenize(argv, /):
    """
    Turn a raw argument vector into an ordered name -> value mapping.

    Parameters
    - argv: Iterable[str]
      raw arguments, without the program name.

    Returns
    - dict[str, str | None]: option name (dash removed) to raw value; None marks
      a valueless option.

    Examples
    - tokenize(["-name", "value"])     -> {"name": "value"}
    - tokenize(["-name=value"])        -> {"name": "value"}
    - tokenize(["-flag", "-other"])    -> {"flag": None, "other": None}
    """
    if isinstance(argv, str) or not isinstance(argv, Iterable):
        raise TypeError("tokenize() argument must be an iterable of strings")

    tokens = list(argv)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError(f"tokenize() argument items must be strings, not {type(token).__name__!r}")

    options = {}
    index = 0

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if not token.startswith("-"):
            continue

        name = token[1:]
        if "=" in name:
            name, _, value = name.partition("=")
        elif index < len(tokens) and not tokens[index].startswith("-"):
            value = tokens[index]
            index += 1
        else:
            value = None

        # an existing key keeps its first position
        options[name] = value

    return options


def resolve_aliases(options, aliases, /):
    """
    Rewrite alias keys to their canonical names.

    Aliases are visited in ascending registration order (the iteration order of
    the ``aliases`` mapping). An alias entry is removed and its value written
    under the canonical name; when the canonical name is present too, it keeps
    its position and the alias value wins.

    Parameters
    - options: Mapping[str, str | None], as produced by tokenize().
    - aliases: Mapping[str, str], alias -> canonical name.

    Returns
    - dict[str, str | None]: a new mapping; the input is left untouched.
    """
    if not isinstance(options, Mapping) or not isinstance(aliases, Mapping):
        raise TypeError("resolve_aliases() arguments must be mappings")

    resolved = dict(options)
    for alias, name in aliases.items():
        if alias in resolved:
            resolved[name] = resolved.pop(alias)
    return resolved


__all__ = (
    "tokenize",
    "resolve_aliases",
)
