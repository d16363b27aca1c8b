# Copyright 2020-present Kensho Technologies, LLC.
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import InvalidCostConfigurationError
from ..typedefs import CostMap, CreateErrorCallback, Number, OnCompleteCallback


DEFAULT_COMPLEXITY = 1


def _is_positive_number(value: Any) -> bool:
    """Return True if the value is a positive int or float. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


@dataclass(frozen=True)
class ComplexityRange:
    """Inclusive range of the complexity values fields may declare."""

    min: Number
    max: Number

    def __post_init__(self) -> None:
        """Ensure both bounds are positive and the range is not empty."""
        if not (
            _is_positive_number(self.min)
            and _is_positive_number(self.max)
            and self.min < self.max
        ):
            raise InvalidCostConfigurationError(
                f"Invalid minimum and maximum complexity: min={self.min!r}, max={self.max!r}"
            )

    def contains(self, complexity: Number) -> bool:
        """Return whether the complexity lies within the range."""
        return self.min <= complexity <= self.max

    @classmethod
    def from_value(
        cls, value: Union["ComplexityRange", Mapping[str, Number]]
    ) -> "ComplexityRange":
        """Build a ComplexityRange from an existing range or a {"min": ..., "max": ...} mapping."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise InvalidCostConfigurationError(
                f"Invalid minimum and maximum complexity: expected a mapping with "
                f'"min" and "max" keys, but got {value!r}'
            )
        return cls(value.get("min"), value.get("max"))


@dataclass(frozen=True)
class CostAnalysisOptions:
    """Configuration of a query cost analysis, validated when constructed.

    Attributes:
        maximum_cost: operations costing strictly more than this are reported as errors
        variables: variable values of the request, used to coerce field arguments
        default_cost: cost of fields that have no cost configuration of their own
        cost_map: type name -> field name -> cost configuration. When set, cost metadata
                  in the schema is ignored, and fields missing from the map cost default_cost.
        complexity_range: inclusive bounds on field complexities. Fields declaring a
                          complexity outside of it are reported and cost default_cost.
        on_complete: called with the total cost each time an operation has been analyzed,
                     whether or not the maximum cost was exceeded
        create_error: called with (maximum_cost, cost) to build the error reported
                      when the maximum cost is exceeded
        warn_on_deprecated_multiplier: whether to log a warning each time a field's cost
                                       configuration uses the deprecated "multiplier" key
        validate_cost_map: whether to check, once per query document when the analysis starts,
                           that every type and field named in the cost map exists in the schema
    """

    maximum_cost: Number
    variables: Dict[str, Any] = field(default_factory=dict)
    default_cost: Number = 0
    cost_map: Optional[CostMap] = None
    complexity_range: Optional[Union[ComplexityRange, Mapping[str, Number]]] = None
    on_complete: Optional[OnCompleteCallback] = None
    create_error: Optional[CreateErrorCallback] = None
    warn_on_deprecated_multiplier: bool = True
    validate_cost_map: bool = False

    def __post_init__(self) -> None:
        """Validate the options, normalizing the complexity range and the variables."""
        if not _is_positive_number(self.maximum_cost):
            raise InvalidCostConfigurationError(
                f"Maximum query cost must be a positive number, but got {self.maximum_cost!r}"
            )

        if self.complexity_range is not None:
            # The dataclass is frozen, so normalized values are set through object.__setattr__.
            object.__setattr__(
                self, "complexity_range", ComplexityRange.from_value(self.complexity_range)
            )

        if self.variables is None:
            object.__setattr__(self, "variables", {})

        if self.cost_map is not None and not isinstance(self.cost_map, Mapping):
            raise InvalidCostConfigurationError(
                f"The cost map must be a mapping of type names to field cost configurations, "
                f"but got {self.cost_map!r}"
            )

    @property
    def default_complexity(self) -> Number:
        """Complexity of fields whose cost configuration does not specify one."""
        if self.complexity_range is not None:
            return self.complexity_range.min
        return DEFAULT_COMPLEXITY
