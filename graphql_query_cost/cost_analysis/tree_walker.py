# Copyright 2020-present Kensho Technologies, LLC.
import logging
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional

from graphql import (
    GraphQLError,
    GraphQLField,
    GraphQLInterfaceType,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSchema,
    get_named_type,
)
from graphql.execution.values import get_argument_values
from graphql.language.ast import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    Node,
)

from ..ast_manipulation import get_ast_field_name
from ..exceptions import ComplexityOutOfRangeError
from ..typedefs import AncestorMultipliers, ArgumentValues, Number
from .configuration import resolve_cost_configuration
from .formula import FieldCost, compute_field_cost
from .multipliers import get_multiplier_values
from .options import CostAnalysisOptions


logger = logging.getLogger(__name__)


def _get_field_definitions(
    type_definition: Optional[GraphQLNamedType],
) -> Mapping[str, GraphQLField]:
    """Return the fields that may be selected directly on the given type."""
    if isinstance(type_definition, (GraphQLObjectType, GraphQLInterfaceType)):
        return type_definition.fields

    # Unions only have fields through fragments on their member types, while scalars and enums
    # have no fields at all. A missing type (e.g. an unknown type condition) also has no fields.
    return {}


class CostTreeWalker:
    """Compute the cost of selection sets, recursing through fields and fragments."""

    def __init__(
        self,
        schema: GraphQLSchema,
        fragments: Dict[str, FragmentDefinitionNode],
        options: CostAnalysisOptions,
        report_error: Callable[[GraphQLError], None],
    ) -> None:
        """Create a tree walker for the operations of one query document.

        Args:
            schema: schema the query document is written against
            fragments: fragment name -> fragment definition, for every fragment in the document
            options: the cost analysis options
            report_error: called with each non-fatal error found while computing costs
        """
        self.schema = schema
        self.fragments = fragments
        self.options = options
        self.report_error = report_error

    def compute_node_cost(
        self,
        node: Node,
        type_definition: Optional[GraphQLNamedType],
        ancestor_multipliers: AncestorMultipliers = (),
        visited_fragments: FrozenSet[str] = frozenset(),
    ) -> Number:
        """Return the cost of the node's selection set, excluding the cost of the node itself.

        Fields selected directly are all resolved, so their costs are added up. Fragments are
        alternative branches (e.g. on different members of a union), so only the most expensive
        fragment counts towards the total.

        Args:
            node: AST node whose selection set to compute the cost of
            type_definition: type against which the selections of the node are resolved
            ancestor_multipliers: multipliers of the fields enclosing the node, outermost first
            visited_fragments: names of the fragments being expanded on the current path

        Returns:
            non-negative cost of the node's selection set, or 0 if the node has none
        """
        selection_set = getattr(node, "selection_set", None)
        if selection_set is None:
            return 0

        fields = _get_field_definitions(type_definition)
        field_costs_total: Number = 0
        branch_costs: List[Number] = []

        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                field_definition = fields.get(get_ast_field_name(selection))
                if field_definition is None:
                    # Unknown fields are reported by the GraphQL validation rules.
                    continue
                field_cost = self._compute_field_subtree_cost(
                    selection,
                    field_definition,
                    type_definition.name,
                    ancestor_multipliers,
                    visited_fragments,
                )
                field_costs_total += max(field_cost, 0)
            elif isinstance(selection, FragmentSpreadNode):
                fragment_cost = self._compute_fragment_spread_cost(
                    selection, ancestor_multipliers, visited_fragments
                )
                if fragment_cost is not None:
                    branch_costs.append(fragment_cost)
            elif isinstance(selection, InlineFragmentNode):
                fragment_type = type_definition
                if selection.type_condition is not None:
                    fragment_type = self.schema.get_type(selection.type_condition.name.value)
                branch_costs.append(
                    self.compute_node_cost(
                        selection, fragment_type, ancestor_multipliers, visited_fragments
                    )
                )
            else:
                selection_cost = self.compute_node_cost(
                    selection, type_definition, ancestor_multipliers, visited_fragments
                )
                field_costs_total += max(selection_cost, 0)

        return field_costs_total + max(branch_costs, default=0)

    def _compute_fragment_spread_cost(
        self,
        fragment_spread: FragmentSpreadNode,
        ancestor_multipliers: AncestorMultipliers,
        visited_fragments: FrozenSet[str],
    ) -> Optional[Number]:
        """Return the cost of the spread fragment, or None if it cannot be expanded."""
        fragment_name = fragment_spread.name.value
        fragment = self.fragments.get(fragment_name)
        if fragment is None:
            logger.debug("Skipping the spread of unknown fragment %s.", fragment_name)
            return None
        if fragment_name in visited_fragments:
            logger.debug("Skipping the cyclic spread of fragment %s.", fragment_name)
            return None

        fragment_type = self.schema.get_type(fragment.type_condition.name.value)
        return self.compute_node_cost(
            fragment, fragment_type, ancestor_multipliers, visited_fragments | {fragment_name}
        )

    def _compute_field_subtree_cost(
        self,
        field_node: FieldNode,
        field_definition: GraphQLField,
        parent_type_name: str,
        ancestor_multipliers: AncestorMultipliers,
        visited_fragments: FrozenSet[str],
    ) -> Number:
        """Return the cost of the field occurrence plus the cost of its selection set."""
        try:
            arguments = get_argument_values(field_definition, field_node, self.options.variables)
        except GraphQLError as e:
            # Invalid arguments are reported by the GraphQL validation rules.
            logger.debug(
                "Skipping the cost of field %(field)s on %(type)s, since its arguments "
                "could not be coerced: %(error)s",
                {
                    "field": get_ast_field_name(field_node),
                    "type": parent_type_name,
                    "error": e,
                },
            )
            return 0

        own_cost = self._compute_own_field_cost(
            field_node, field_definition, parent_type_name, arguments, ancestor_multipliers
        )
        child_cost = self.compute_node_cost(
            field_node,
            get_named_type(field_definition.type),
            own_cost.child_multipliers,
            visited_fragments,
        )
        return own_cost.cost + child_cost

    def _compute_own_field_cost(
        self,
        field_node: FieldNode,
        field_definition: GraphQLField,
        parent_type_name: str,
        arguments: ArgumentValues,
        ancestor_multipliers: AncestorMultipliers,
    ) -> FieldCost:
        """Return the cost of the field occurrence alone, and the multipliers of its children."""
        configuration = resolve_cost_configuration(
            field_node, field_definition, parent_type_name, arguments, self.options
        )
        if configuration is None:
            return FieldCost(self.options.default_cost, ancestor_multipliers)

        multiplier_values = get_multiplier_values(configuration.multipliers, arguments)
        try:
            return compute_field_cost(
                configuration.complexity,
                configuration.use_multipliers,
                multiplier_values,
                ancestor_multipliers,
                self.options.complexity_range,
            )
        except ComplexityOutOfRangeError as e:
            self.report_error(e)
            return FieldCost(self.options.default_cost, ancestor_multipliers)
