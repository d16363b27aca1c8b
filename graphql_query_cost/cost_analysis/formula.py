# Copyright 2020-present Kensho Technologies, LLC.
from functools import reduce
from operator import mul
from typing import NamedTuple, Optional, Sequence

from ..exceptions import ComplexityOutOfRangeError
from ..typedefs import AncestorMultipliers, Number
from .options import ComplexityRange


class FieldCost(NamedTuple):
    """The cost of one field occurrence, and the multipliers its children inherit."""

    cost: Number
    child_multipliers: AncestorMultipliers


def compute_field_cost(
    complexity: Number,
    use_multipliers: bool,
    multiplier_values: Sequence[Number],
    ancestor_multipliers: AncestorMultipliers,
    complexity_range: Optional[ComplexityRange] = None,
) -> FieldCost:
    """Compute the cost of one field occurrence, scaled by its multipliers and its ancestors'.

    The field's own multiplier values are summed into a single multiplier, which is appended
    to the ancestors' multipliers. The cost is the complexity times the product of the
    resulting multipliers, so a list of 10 items whose children each cost 5 costs 10 * 5.
    Fields that do not use multipliers cost exactly their complexity, and pass the ancestors'
    multipliers to their children unchanged.

    Args:
        complexity: cost of resolving the field once
        use_multipliers: whether the cost is scaled by multipliers
        multiplier_values: numeric values of the field's own multipliers
        ancestor_multipliers: multipliers of every enclosing field, outermost first
        complexity_range: inclusive bounds the complexity must lie within, if any

    Returns:
        FieldCost with the field's cost, which may be negative if a multiplier is negative,
        and the multipliers the field's children inherit

    Raises:
        - ComplexityOutOfRangeError if the complexity lies outside of the complexity range
    """
    if complexity_range is not None and not complexity_range.contains(complexity):
        raise ComplexityOutOfRangeError(complexity_range.min, complexity_range.max)

    if not use_multipliers:
        return FieldCost(complexity, ancestor_multipliers)

    child_multipliers = ancestor_multipliers
    field_multiplier = sum(multiplier_values)
    if field_multiplier:
        child_multipliers = ancestor_multipliers + (field_multiplier,)

    return FieldCost(reduce(mul, child_multipliers, complexity), child_multipliers)
