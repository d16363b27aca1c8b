# Copyright 2020-present Kensho Technologies, LLC.
import logging
from typing import Any, List, NamedTuple, Optional, Type, Union

from graphql import GraphQLError, GraphQLNamedType, GraphQLSchema, TypeInfo
from graphql.language.ast import DocumentNode, OperationDefinitionNode, OperationType
from graphql.language.visitor import visit
from graphql.validation import ValidationContext, ValidationRule

from ..ast_manipulation import get_fragment_definitions, safe_parse_graphql
from ..exceptions import QueryCostExceededError, UnsupportedOperationError
from ..schema import validate_cost_map
from ..typedefs import Number
from .options import CostAnalysisOptions
from .tree_walker import CostTreeWalker


logger = logging.getLogger(__name__)


class CostAnalysis(ValidationRule):
    """Validation rule computing the cost of each operation, and reporting expensive ones.

    The rule is stateful and must be used for a single query document: the cost of every
    operation in the document is added to the "cost" attribute, which remains readable after
    the document has been traversed.
    """

    def __init__(self, context: ValidationContext, options: CostAnalysisOptions) -> None:
        """Create the cost analysis of one query document.

        Args:
            context: validation context of the query document being analyzed
            options: the cost analysis options

        Raises:
            - InvalidCostConfigurationError if the options ask for the cost map to be validated,
              and the cost map names types or fields that do not exist in the schema
        """
        super().__init__(context)
        self.options = options
        self.cost: Number = 0

        if options.validate_cost_map and options.cost_map is not None:
            validate_cost_map(options.cost_map, context.schema)

        self.tree_walker = CostTreeWalker(
            context.schema,
            get_fragment_definitions(context.document),
            options,
            context.report_error,
        )

    def _get_root_type(self, operation: OperationDefinitionNode) -> Optional[GraphQLNamedType]:
        """Return the schema's root type for the kind of the given operation."""
        schema = self.context.schema
        if operation.operation == OperationType.QUERY:
            return schema.query_type
        elif operation.operation == OperationType.MUTATION:
            return schema.mutation_type
        elif operation.operation == OperationType.SUBSCRIPTION:
            return schema.subscription_type

        raise UnsupportedOperationError(
            f"Query cost could not be calculated for operation of type {operation.operation}"
        )

    def enter_operation_definition(self, node: OperationDefinitionNode, *_args: Any) -> None:
        """Add the cost of the operation to the total cost of the document."""
        root_type = self._get_root_type(node)
        self.cost += self.tree_walker.compute_node_cost(node, root_type, ())

    def leave_operation_definition(self, node: OperationDefinitionNode, *_args: Any) -> None:
        """Report the completed cost, and an error if it exceeds the maximum cost."""
        logger.debug(
            "Computed cost %(cost)s for operation %(operation)s, maximum cost is %(maximum)s.",
            {
                "cost": self.cost,
                "operation": node.name.value if node.name else "<anonymous>",
                "maximum": self.options.maximum_cost,
            },
        )

        if self.options.on_complete is not None:
            self.options.on_complete(self.cost)

        if self.cost > self.options.maximum_cost:
            self.report_error(self.create_error())

    def create_error(self) -> GraphQLError:
        """Return the error reported when the cost exceeds the maximum cost."""
        if self.options.create_error is not None:
            return self.options.create_error(self.options.maximum_cost, self.cost)
        return QueryCostExceededError(self.options.maximum_cost, self.cost)


def make_cost_analysis_rule(options: CostAnalysisOptions) -> Type[CostAnalysis]:
    """Return a validation rule class applying the cost analysis with the given options."""

    class _CostAnalysis(CostAnalysis):
        def __init__(self, context: ValidationContext) -> None:
            super().__init__(context, options)

    return _CostAnalysis


def create_cost_analysis(maximum_cost: Number, **option_kwargs: Any) -> Type[CostAnalysis]:
    """Validate the cost analysis options, and return a rule class for graphql.validate().

    Example:
        cost_analysis = create_cost_analysis(1000, variables=request_variables)
        errors = graphql.validate(schema, document_ast, [*specified_rules, cost_analysis])

    Args:
        maximum_cost: operations costing strictly more than this are reported as errors
        **option_kwargs: any other field of CostAnalysisOptions

    Returns:
        CostAnalysis subclass whose constructor only takes the validation context

    Raises:
        - InvalidCostConfigurationError if the options are invalid
    """
    return make_cost_analysis_rule(CostAnalysisOptions(maximum_cost, **option_kwargs))


class CostAnalysisResult(NamedTuple):
    """The total cost of a query document, and the errors reported while computing it."""

    cost: Number
    errors: List[GraphQLError]


def get_query_cost(
    schema: GraphQLSchema,
    query: Union[str, DocumentNode],
    options: CostAnalysisOptions,
) -> CostAnalysisResult:
    """Compute the cost of a query document, running the cost analysis on its own.

    Unlike graphql.validate(), no other validation rule is applied to the document, so it is
    up to the caller to ensure the document is valid against the schema.

    Args:
        schema: schema the query document is written against
        query: GraphQL query string or parsed query document
        options: the cost analysis options

    Returns:
        CostAnalysisResult with the total cost of the operations in the document, and the
        errors reported during the analysis, including the error for exceeding the maximum cost

    Raises:
        - GraphQLParsingError if the query string could not be parsed
        - UnsupportedOperationError if the document contains an operation of an unknown kind
    """
    if isinstance(query, str):
        document_ast = safe_parse_graphql(query)
    else:
        document_ast = query

    errors: List[GraphQLError] = []
    context = ValidationContext(schema, document_ast, TypeInfo(schema), errors.append)
    cost_analysis = CostAnalysis(context, options)
    visit(document_ast, cost_analysis)

    return CostAnalysisResult(cost_analysis.cost, errors)
