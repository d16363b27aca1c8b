# Copyright 2017-present Kensho Technologies, LLC.
"""Commonly-used functions and data types from this package."""
from typing import Any, Union

from graphql import GraphQLSchema
from graphql.language.ast import DocumentNode

from .cost_analysis import (  # noqa
    ComplexityRange,
    CostAnalysis,
    CostAnalysisOptions,
    CostAnalysisResult,
    MultiplierArgument,
    create_cost_analysis,
    get_query_cost,
    make_cost_analysis_rule,
)
from .exceptions import (  # noqa
    ComplexityOutOfRangeError,
    GraphQLParsingError,
    InvalidCostConfigurationError,
    QueryCostError,
    QueryCostExceededError,
    UnsupportedOperationError,
)
from .schema import (  # noqa
    COST_DIRECTIVE_SDL,
    DIRECTIVES,
    CostDirective,
    build_schema_with_cost_directive,
    validate_cost_map,
)
from .typedefs import Number


__package_name__ = "graphql-query-cost"
__version__ = "1.0.0"


def graphql_query_cost(
    schema: GraphQLSchema,
    graphql_query: Union[str, DocumentNode],
    maximum_cost: Number,
    **option_kwargs: Any,
) -> CostAnalysisResult:
    """Compute the cost of the GraphQL input against the schema, checking it against a budget.

    Args:
        schema: GraphQLSchema object describing the schema the query is written against. Its
                fields and object types may carry @cost directives or "cost" extensions.
        graphql_query: str or parsed DocumentNode, the query to compute the cost of
        maximum_cost: operations costing strictly more than this produce an error
        **option_kwargs: other cost analysis options, e.g. variables, default_cost, cost_map,
                         complexity_range. See CostAnalysisOptions for the full list.

    Returns:
        CostAnalysisResult object, containing:
            - cost: number, the total cost of all operations in the query
            - errors: list of GraphQLError reported during the analysis, including the error
                      for exceeding the maximum cost and any complexity range violations

    Raises:
        - InvalidCostConfigurationError if the options are invalid
        - GraphQLParsingError if the query string could not be parsed
    """
    options = CostAnalysisOptions(maximum_cost, **option_kwargs)
    return get_query_cost(schema, graphql_query, options)
