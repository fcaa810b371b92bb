"""
optbind validation: required and pattern checks over a resolved option map.

Validation is diagnostic only: it never constructs or mutates a target instance
and never raises for malformed input. Missing required options and pattern
mismatches are reported as data (a set of option names).
"""
from collections.abc import Mapping


def check(descriptor, value, /, *, present=True):
    """
    Whether one option value satisfies its descriptor.

    Rules
    - a required option must be present; presence alone is enough, including a
      valueless required flag or option;
    - a present non-None value must fully match the descriptor pattern.

    Defaults play no part here: a defaulted required option is still missing when
    absent.
    """
    if not present:
        return not descriptor.required
    return value is None or descriptor.matches(value)


def validate(descriptors, resolved, /):
    """
    Return the names of the descriptors that the resolved map does not satisfy.

    Parameters
    - descriptors: Iterable[OptionDescriptor], the declared options.
    - resolved: Mapping[str, str | None], alias-resolved tokenizer output.

    Returns
    - set[str]: invalid option names; empty when everything is valid.
    """
    if not isinstance(resolved, Mapping):
        raise TypeError("validate() second argument must be a mapping")

    return {
        descriptor.name
        for descriptor in descriptors
        if not check(descriptor, resolved.get(descriptor.name), present=descriptor.name in resolved)
    }


__all__ = (
    "check",
    "validate",
)
