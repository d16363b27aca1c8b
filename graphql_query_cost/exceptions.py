# Copyright 2017-present Kensho Technologies, LLC.
from typing import Any, Optional

from graphql import GraphQLError

from .typedefs import Number


class QueryCostError(Exception):
    """Generic error when computing the cost of a GraphQL query."""


class GraphQLParsingError(QueryCostError):
    """Exception raised when the provided GraphQL string could not be parsed."""


class InvalidCostConfigurationError(QueryCostError):
    """Exception raised when the cost analysis is configured with invalid options.

    For example:
    - the maximum cost is missing, zero or negative;
    - the complexity range is missing a bound, has a non-positive bound, or has min >= max;
    - the cost map refers to types or fields that do not exist in the schema.
    """


class UnsupportedOperationError(QueryCostError):
    """Exception raised when an operation of an unknown kind is found in the query document."""


class ComplexityOutOfRangeError(GraphQLError):
    """Reported when a field's complexity falls outside of the configured complexity range."""

    def __init__(self, minimum: Number, maximum: Number, **kwargs: Any) -> None:
        """Create an error naming both bounds of the allowed complexity range."""
        super().__init__(
            f"The complexity argument must be between {minimum} and {maximum}", **kwargs
        )


class QueryCostExceededError(GraphQLError):
    """Reported when the total cost of an operation exceeds the configured maximum."""

    def __init__(
        self, maximum_cost: Number, cost: Number, message: Optional[str] = None, **kwargs: Any
    ) -> None:
        """Create an error carrying both the maximum and the actual cost."""
        if message is None:
            message = (
                f"The query exceeds the maximum cost of {maximum_cost}. Actual cost is {cost}"
            )
        kwargs.setdefault(
            "extensions",
            {"cost": {"requestedQueryCost": cost, "maximumAvailable": maximum_cost}},
        )
        super().__init__(message, **kwargs)
