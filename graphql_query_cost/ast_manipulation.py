# Copyright 2019-present Kensho Technologies, LLC.
from typing import Dict, Optional, Sequence

from graphql.error import GraphQLSyntaxError
from graphql.language.ast import DirectiveNode, DocumentNode, FragmentDefinitionNode
from graphql.language.parser import parse

from .exceptions import GraphQLParsingError


def get_ast_field_name(ast):
    """Return the field name for the given AST node."""
    return ast.name.value


def safe_parse_graphql(graphql_string: str) -> DocumentNode:
    """Return an AST representation of the given GraphQL input, reraising GraphQL library errors."""
    try:
        ast = parse(graphql_string)
    except GraphQLSyntaxError as e:
        raise GraphQLParsingError(e) from e

    return ast


def get_fragment_definitions(document_ast: DocumentNode) -> Dict[str, FragmentDefinitionNode]:
    """Return a dict of fragment name -> fragment definition for all fragments in the document."""
    if not isinstance(document_ast, DocumentNode):
        raise AssertionError(
            'Received an unexpected value for "document_ast": {}'.format(document_ast)
        )

    return {
        definition.name.value: definition
        for definition in document_ast.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }


def get_directive_by_name(
    directives: Optional[Sequence[DirectiveNode]], directive_name: str
) -> Optional[DirectiveNode]:
    """Return the first directive with the given name, or None if there is no such directive."""
    for directive in directives or ():
        if directive.name.value == directive_name:
            return directive
    return None
