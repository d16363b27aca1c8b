# Copyright 2020-present Kensho Technologies, LLC.
from dataclasses import dataclass
import logging
from typing import Any, Mapping, Optional, Tuple

from graphql import GraphQLField, GraphQLObjectType, get_named_type
from graphql.language.ast import FieldNode

from ..ast_manipulation import get_ast_field_name
from ..schema import get_cost_metadata
from ..typedefs import ArgumentValues, CostSpecification, Number
from .multipliers import MultiplierSpec, parse_multiplier_spec
from .options import CostAnalysisOptions


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostConfiguration:
    """Cost configuration of one field occurrence, with all computed values resolved."""

    complexity: Number
    use_multipliers: bool = True
    multipliers: Tuple[MultiplierSpec, ...] = ()


def _evaluate_cost_value(
    value: Any, field_node: FieldNode, parent_type_name: str, arguments: ArgumentValues
) -> Any:
    """Return the value itself, or the result of calling it if it is computed."""
    if callable(value):
        return value(field_node, parent_type_name, arguments)
    return value


def _get_complexity(raw_complexity: Any, default_complexity: Number, field_label: str) -> Number:
    """Return the complexity to use, given the raw configured value."""
    if raw_complexity is None:
        return default_complexity
    if isinstance(raw_complexity, Mapping) and "max" in raw_complexity:
        # A {"min", "max"} complexity is priced at its upper bound.
        raw_complexity = raw_complexity["max"]
    if isinstance(raw_complexity, bool) or not isinstance(raw_complexity, (int, float)):
        logger.warning(
            "Ignoring non-numeric complexity %(complexity)r configured for %(field)s, "
            "using the default complexity %(default)s instead.",
            {"complexity": raw_complexity, "field": field_label, "default": default_complexity},
        )
        return default_complexity
    return raw_complexity


def _get_multipliers(raw_multipliers: Any) -> Tuple[MultiplierSpec, ...]:
    """Return the parsed multipliers, given the raw configured value."""
    if raw_multipliers is None:
        return ()
    if not isinstance(raw_multipliers, (list, tuple)):
        # A single multiplier, e.g. one argument name or one number.
        raw_multipliers = (raw_multipliers,)
    return tuple(parse_multiplier_spec(raw_multiplier) for raw_multiplier in raw_multipliers)


def build_cost_configuration(
    cost_specification: CostSpecification,
    field_node: FieldNode,
    parent_type_name: str,
    arguments: ArgumentValues,
    default_complexity: Number,
    warn_on_deprecated_multiplier: bool = True,
) -> CostConfiguration:
    """Resolve a raw cost specification into the configuration of one field occurrence.

    Args:
        cost_specification: mapping that may contain the keys "complexity", "useMultipliers"
                            (or "use_multipliers"), "multipliers", and the deprecated
                            "multiplier". Values may be callables taking the field node,
                            the parent type name and the arguments, and returning the value.
        field_node: the field occurrence being priced
        parent_type_name: name of the type on which the field was selected
        arguments: coerced argument values of the field occurrence
        default_complexity: complexity used when the cost specification does not provide one
        warn_on_deprecated_multiplier: whether to log a warning if "multiplier" is used

    Returns:
        CostConfiguration for this field occurrence
    """
    field_label = "{}.{}".format(parent_type_name, get_ast_field_name(field_node))

    def evaluate(key: str) -> Any:
        return _evaluate_cost_value(
            cost_specification.get(key), field_node, parent_type_name, arguments
        )

    complexity = _get_complexity(evaluate("complexity"), default_complexity, field_label)

    use_multipliers = evaluate("useMultipliers")
    if use_multipliers is None:
        use_multipliers = evaluate("use_multipliers")
    use_multipliers = True if use_multipliers is None else bool(use_multipliers)

    multipliers = _get_multipliers(evaluate("multipliers"))

    deprecated_multiplier = evaluate("multiplier")
    if deprecated_multiplier:
        if warn_on_deprecated_multiplier:
            logger.warning(
                "The multiplier property used by %(field)s is DEPRECATED and will be removed "
                "in the next release. Please use the multipliers property instead.",
                {"field": field_label},
            )
        if not multipliers:
            multipliers = (parse_multiplier_spec(deprecated_multiplier),)

    return CostConfiguration(complexity, use_multipliers, multipliers)


def _get_schema_cost_specification(
    field_definition: GraphQLField,
) -> Optional[CostSpecification]:
    """Return the cost metadata of the field, or else of the object type the field returns."""
    cost_specification = get_cost_metadata(field_definition)
    if cost_specification is not None:
        return cost_specification

    output_type = get_named_type(field_definition.type)
    if isinstance(output_type, GraphQLObjectType):
        return get_cost_metadata(output_type)

    return None


def resolve_cost_configuration(
    field_node: FieldNode,
    field_definition: GraphQLField,
    parent_type_name: str,
    arguments: ArgumentValues,
    options: CostAnalysisOptions,
) -> Optional[CostConfiguration]:
    """Determine the cost configuration of one field occurrence.

    When a cost map is configured, it is the only source of cost configuration: fields missing
    from it, or mapped to an empty configuration, have no configuration even if the schema
    annotates them. Otherwise, the field's own cost metadata is used, or else the metadata of
    the object type the field returns.

    Args:
        field_node: the field occurrence being priced
        field_definition: schema definition of the field
        parent_type_name: name of the type on which the field was selected
        arguments: coerced argument values of the field occurrence
        options: the cost analysis options

    Returns:
        CostConfiguration for the field, or None if the field should cost the default cost
    """
    if options.cost_map is not None:
        type_cost_map = options.cost_map.get(parent_type_name) or {}
        cost_specification = type_cost_map.get(get_ast_field_name(field_node))
        if not cost_specification:
            return None
    else:
        cost_specification = _get_schema_cost_specification(field_definition)
        if cost_specification is None:
            return None

    return build_cost_configuration(
        cost_specification,
        field_node,
        parent_type_name,
        arguments,
        options.default_complexity,
        warn_on_deprecated_multiplier=options.warn_on_deprecated_multiplier,
    )
