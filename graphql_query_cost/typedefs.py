# Copyright 2020-present Kensho Technologies, LLC.
from typing import Any, Callable, Dict, Mapping, Tuple, Union

from graphql import GraphQLError
from graphql.language.ast import FieldNode


# Costs, complexities and multiplier values are unit-less numbers. They are ints unless
# a float sneaks in through a numeric-coercible argument or a float complexity.
Number = Union[int, float]

# The multiplier chain of every field enclosing the current selection, outermost first.
# It is a tuple so that it can be shared between sibling branches without copying.
AncestorMultipliers = Tuple[Number, ...]

# Coerced argument values of a single field occurrence, as returned by get_argument_values().
ArgumentValues = Dict[str, Any]

# A cost configuration value may be computed at resolution time instead of being static.
# Such callables receive the field node, the name of its parent type and its arguments.
ComputedCostValue = Callable[[FieldNode, str, ArgumentValues], Any]

# Raw cost configuration of one field: the keys "complexity", "useMultipliers",
# "multipliers" and the deprecated "multiplier".
CostSpecification = Mapping[str, Any]

# Type name -> field name -> raw cost configuration for that field.
CostMap = Mapping[str, Mapping[str, CostSpecification]]

# Hooks the host can provide to observe the final cost and to build the cost-exceeded error.
OnCompleteCallback = Callable[[Number], None]
CreateErrorCallback = Callable[[Number, Number], GraphQLError]
