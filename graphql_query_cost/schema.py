# Copyright 2017-present Kensho Technologies, LLC.
from collections import OrderedDict
from typing import Any, Dict, Optional, Union

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLBoolean,
    GraphQLDirective,
    GraphQLField,
    GraphQLInt,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    build_ast_schema,
    value_from_ast_untyped,
)
from graphql.language.ast import DirectiveDefinitionNode, DocumentNode
from graphql.utilities.print_schema import print_directive

from .ast_manipulation import get_directive_by_name, safe_parse_graphql
from .exceptions import InvalidCostConfigurationError
from .typedefs import CostMap, CostSpecification


COST_DIRECTIVE_NAME = "cost"

# Key under which programmatically-built schemas may attach cost metadata
# to a field's or an object type's "extensions" dict.
COST_EXTENSIONS_KEY = "cost"


# Constraints:
# - 'complexity' must lie within the complexity range, if one is configured for the analysis;
# - 'multipliers' name arguments of the annotated field, possibly as dotted paths into
#   input object arguments (e.g. "page.size");
# - 'multiplier' is deprecated, and only used when 'multipliers' is not provided;
# - when applied to an object type, it is the default cost of every field returning that type
#   that does not have a @cost directive of its own.
CostDirective = GraphQLDirective(
    name=COST_DIRECTIVE_NAME,
    args=OrderedDict(
        [
            (
                "complexity",
                GraphQLArgument(
                    type_=GraphQLInt,
                    description="Cost of resolving the field once, before applying multipliers.",
                ),
            ),
            (
                "useMultipliers",
                GraphQLArgument(
                    type_=GraphQLBoolean,
                    default_value=True,
                    description=(
                        "Whether the complexity is scaled by this field's multipliers and by "
                        "the multipliers of its ancestors."
                    ),
                ),
            ),
            (
                "multipliers",
                GraphQLArgument(
                    type_=GraphQLList(GraphQLNonNull(GraphQLString)),
                    description="Names of the field arguments whose values scale the cost.",
                ),
            ),
            (
                "multiplier",
                GraphQLArgument(
                    type_=GraphQLString,
                    description="Deprecated: name of a single argument scaling the cost.",
                ),
            ),
        ]
    ),
    locations=[
        DirectiveLocation.FIELD_DEFINITION,
        DirectiveLocation.OBJECT,
    ],
)


DIRECTIVES = (CostDirective,)

COST_DIRECTIVE_SDL = print_directive(CostDirective)


def _has_cost_directive_definition(document_ast: DocumentNode) -> bool:
    """Return True if the SDL document defines its own @cost directive."""
    return any(
        isinstance(definition, DirectiveDefinitionNode)
        and definition.name.value == COST_DIRECTIVE_NAME
        for definition in document_ast.definitions
    )


def build_schema_with_cost_directive(schema_text: str) -> GraphQLSchema:
    """Build a GraphQLSchema from SDL text, defining the @cost directive if the text does not.

    Args:
        schema_text: GraphQL schema definition language text, possibly using @cost annotations
                     on field definitions and object types.

    Returns:
        GraphQLSchema whose field and type definitions keep their AST nodes, so that their
        @cost annotations can be read during cost analysis.

    Raises:
        - GraphQLParsingError if the schema text could not be parsed
    """
    document_ast = safe_parse_graphql(schema_text)
    if not _has_cost_directive_definition(document_ast):
        document_ast = safe_parse_graphql("\n".join((COST_DIRECTIVE_SDL, schema_text)))
    return build_ast_schema(document_ast)


def get_cost_metadata(
    definition: Union[GraphQLField, GraphQLObjectType]
) -> Optional[CostSpecification]:
    """Return the cost metadata attached to a field or object type definition, if any.

    Metadata set in the definition's "extensions" takes precedence over a @cost directive
    in the SDL the definition was built from. Directive arguments are read without coercion,
    so that schemas may declare their own @cost directive with compatible argument types.

    Args:
        definition: field or object type definition from the schema

    Returns:
        mapping of cost configuration keys to their values, or None if the definition carries
        no cost metadata. A @cost directive without arguments produces an empty mapping.
    """
    extensions = definition.extensions or {}
    if COST_EXTENSIONS_KEY in extensions:
        return extensions[COST_EXTENSIONS_KEY]

    ast_node = definition.ast_node
    if ast_node is None:
        return None

    cost_directive = get_directive_by_name(ast_node.directives, COST_DIRECTIVE_NAME)
    if cost_directive is None:
        return None

    metadata: Dict[str, Any] = {}
    for argument in cost_directive.arguments:
        metadata[argument.name.value] = value_from_ast_untyped(argument.value)
    return metadata


def validate_cost_map(cost_map: CostMap, schema: GraphQLSchema) -> None:
    """Ensure that every type and field named in the cost map exists in the schema.

    Args:
        cost_map: type name -> field name -> cost configuration
        schema: the schema queries will be analyzed against

    Raises:
        - InvalidCostConfigurationError if the cost map names a missing type, a type that is
          neither an object nor an interface, or a field that the type does not define
    """
    for type_name, type_fields in cost_map.items():
        graphql_type = schema.get_type(type_name)
        if graphql_type is None:
            raise InvalidCostConfigurationError(
                f"The cost map specifies a type {type_name} that is not defined by the schema."
            )

        if not isinstance(graphql_type, (GraphQLObjectType, GraphQLInterfaceType)):
            raise InvalidCostConfigurationError(
                f"The cost map specifies a type {type_name} that is defined by the schema, "
                f"but is neither an object nor an interface type."
            )

        for field_name in type_fields:
            if field_name not in graphql_type.fields:
                raise InvalidCostConfigurationError(
                    f"The cost map contains a field {field_name} not defined by the "
                    f"{type_name} type."
                )
