# Copyright 2020-present Kensho Technologies, LLC.
from dataclasses import dataclass
import math
from typing import Any, List, Mapping, Optional, Sequence, Union

from funcy import get_in

from ..exceptions import InvalidCostConfigurationError
from ..typedefs import ArgumentValues, Number


# Sentinel for arguments absent from the argument values, distinct from an explicit null.
_MISSING = object()


@dataclass(frozen=True)
class MultiplierArgument:
    """A field argument whose value scales the cost of a field and of its descendants.

    The path may be dotted to reach into input object arguments, e.g. "page.size".
    The default is used when the argument was not supplied, or was supplied as null.
    """

    path: str
    default: Optional[Number] = None


# A multiplier is either an argument to look up, or a literal numeric value.
MultiplierSpec = Union[MultiplierArgument, Number]


def parse_multiplier_spec(raw_multiplier: Any) -> MultiplierSpec:
    """Convert one raw "multipliers" entry into a MultiplierSpec.

    Accepted forms are an argument path string, a MultiplierArgument, a
    {"argument": path, "default": number} mapping, a (path, default) pair,
    and a plain number, which is used as-is.
    """
    if isinstance(raw_multiplier, MultiplierArgument):
        return raw_multiplier
    elif isinstance(raw_multiplier, str):
        return MultiplierArgument(raw_multiplier)
    elif isinstance(raw_multiplier, (int, float)) and not isinstance(raw_multiplier, bool):
        return raw_multiplier
    elif isinstance(raw_multiplier, Mapping) and "argument" in raw_multiplier:
        return MultiplierArgument(raw_multiplier["argument"], raw_multiplier.get("default"))
    elif (
        isinstance(raw_multiplier, (tuple, list))
        and len(raw_multiplier) == 2
        and isinstance(raw_multiplier[0], str)
    ):
        return MultiplierArgument(raw_multiplier[0], raw_multiplier[1])

    raise InvalidCostConfigurationError(
        f"Unsupported multiplier {raw_multiplier!r}: expected an argument name, "
        f"a (name, default) pair, a mapping with an 'argument' key, or a number."
    )


def _to_multiplier_value(value: Any) -> Optional[Number]:
    """Return the numeric multiplier value of an argument value, or None if it has none."""
    if isinstance(value, (list, tuple)):
        # List arguments scale the cost by their number of elements.
        return len(value)
    elif isinstance(value, bool):
        return int(value)
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    elif isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            pass
        try:
            float_value = float(value)
        except ValueError:
            return None
        return None if math.isnan(float_value) else float_value

    return None


def _resolve_argument_value(multiplier: MultiplierArgument, arguments: ArgumentValues) -> Any:
    """Look up the value of the multiplier's argument, falling back to its default."""
    value = get_in(arguments, multiplier.path.split("."), _MISSING)
    if (value is _MISSING or value is None) and multiplier.default is not None:
        return multiplier.default
    return value


def get_multiplier_values(
    multipliers: Sequence[MultiplierSpec], arguments: ArgumentValues
) -> List[Number]:
    """Return the numeric values of the given multipliers for one field occurrence.

    Args:
        multipliers: multiplier specifications, in the order they were configured
        arguments: coerced argument values of the field occurrence

    Returns:
        list of multiplier values in the same order as the multipliers they came from.
        Multipliers that are missing, non-numeric, or zero are left out entirely.
    """
    multiplier_values = []
    for multiplier in multipliers:
        if isinstance(multiplier, MultiplierArgument):
            raw_value = _resolve_argument_value(multiplier, arguments)
        else:
            raw_value = multiplier

        multiplier_value = _to_multiplier_value(raw_value)
        if multiplier_value:
            multiplier_values.append(multiplier_value)

    return multiplier_values
