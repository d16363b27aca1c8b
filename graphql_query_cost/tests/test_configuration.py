# Copyright 2020-present Kensho Technologies, LLC.
import unittest
from unittest import mock

from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLInt,
    GraphQLList,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
)
from graphql.language.ast import FieldNode, NameNode

from ..cost_analysis import configuration
from ..cost_analysis.configuration import (
    CostConfiguration,
    build_cost_configuration,
    resolve_cost_configuration,
)
from ..cost_analysis.multipliers import MultiplierArgument
from ..cost_analysis.options import CostAnalysisOptions
from ..exceptions import InvalidCostConfigurationError
from .test_helpers import compute_cost, get_schema


def _make_field_node(field_name: str) -> FieldNode:
    """Return a bare field node selecting the given field."""
    return FieldNode(name=NameNode(value=field_name))


class BuildCostConfigurationTests(unittest.TestCase):
    def test_defaults(self) -> None:
        cost_configuration = build_cost_configuration({}, _make_field_node("f"), "Query", {}, 1)
        self.assertEqual(CostConfiguration(1, True, ()), cost_configuration)

    def test_static_values(self) -> None:
        cost_specification = {
            "complexity": 3,
            "useMultipliers": False,
            "multipliers": ["first", ("last", 5)],
        }
        cost_configuration = build_cost_configuration(
            cost_specification, _make_field_node("f"), "Query", {}, 1
        )
        expected_configuration = CostConfiguration(
            3, False, (MultiplierArgument("first"), MultiplierArgument("last", 5))
        )
        self.assertEqual(expected_configuration, cost_configuration)

    def test_computed_values(self) -> None:
        field_node = _make_field_node("items")
        arguments = {"first": 7}

        def compute_multipliers(node, parent_type_name, received_arguments):
            self.assertIs(field_node, node)
            self.assertEqual("Catalog", parent_type_name)
            self.assertIs(arguments, received_arguments)
            return ["first"]

        cost_specification = {
            "complexity": lambda node, parent_type_name, received_arguments: 9,
            "multipliers": compute_multipliers,
        }
        cost_configuration = build_cost_configuration(
            cost_specification, field_node, "Catalog", arguments, 1
        )
        self.assertEqual(
            CostConfiguration(9, True, (MultiplierArgument("first"),)), cost_configuration
        )

    def test_non_numeric_complexity_uses_default(self) -> None:
        with self.assertLogs("graphql_query_cost.cost_analysis.configuration", "WARNING"):
            cost_configuration = build_cost_configuration(
                {"complexity": "high"}, _make_field_node("f"), "Query", {}, 2
            )
        self.assertEqual(2, cost_configuration.complexity)

    def test_complexity_range_pair_uses_upper_bound(self) -> None:
        cost_configuration = build_cost_configuration(
            {"complexity": {"min": 2, "max": 5}}, _make_field_node("f"), "Query", {}, 1
        )
        self.assertEqual(5, cost_configuration.complexity)

    def test_single_multiplier_is_wrapped(self) -> None:
        for raw_multiplier, expected_multiplier in (
            ("limit", MultiplierArgument("limit")),
            (5, 5),
            ({"argument": "limit", "default": 3}, MultiplierArgument("limit", 3)),
        ):
            cost_configuration = build_cost_configuration(
                {"multipliers": raw_multiplier}, _make_field_node("f"), "Query", {}, 1
            )
            self.assertEqual((expected_multiplier,), cost_configuration.multipliers)

    def test_invalid_single_multiplier(self) -> None:
        for raw_multiplier in (True, object()):
            with self.assertRaises(InvalidCostConfigurationError):
                build_cost_configuration(
                    {"multipliers": raw_multiplier}, _make_field_node("f"), "Query", {}, 1
                )

    def test_computed_single_number_multiplier(self) -> None:
        cost_map = {
            "Query": {
                "customCostWithResolver": {
                    "complexity": 2,
                    "multipliers": lambda node, parent_type_name, arguments: 5,
                }
            }
        }
        result = compute_cost(get_schema(), "{ customCostWithResolver }", cost_map=cost_map)
        self.assertEqual(2 * 5, result.cost)
        self.assertEqual([], result.errors)

    def test_deprecated_multiplier(self) -> None:
        with self.assertLogs("graphql_query_cost.cost_analysis.configuration", "WARNING") as logs:
            cost_configuration = build_cost_configuration(
                {"multiplier": "limit"}, _make_field_node("f"), "Query", {}, 1
            )
        self.assertEqual((MultiplierArgument("limit"),), cost_configuration.multipliers)
        self.assertEqual(1, len(logs.records))

    def test_deprecated_multiplier_does_not_replace_multipliers(self) -> None:
        with self.assertLogs("graphql_query_cost.cost_analysis.configuration", "WARNING"):
            cost_configuration = build_cost_configuration(
                {"multiplier": "limit", "multipliers": ["first"]},
                _make_field_node("f"),
                "Query",
                {},
                1,
            )
        self.assertEqual((MultiplierArgument("first"),), cost_configuration.multipliers)

    def test_deprecated_multiplier_warning_can_be_disabled(self) -> None:
        with mock.patch.object(configuration.logger, "warning") as warning:
            cost_configuration = build_cost_configuration(
                {"multiplier": "limit"},
                _make_field_node("f"),
                "Query",
                {},
                1,
                warn_on_deprecated_multiplier=False,
            )
        self.assertEqual((MultiplierArgument("limit"),), cost_configuration.multipliers)
        warning.assert_not_called()

    def test_warning_is_logged_once_per_field_occurrence(self) -> None:
        cost_map = {"Query": {"customCostWithResolver": {"multiplier": "limit"}}}
        query = """{
            a: customCostWithResolver(limit: 1)
            b: customCostWithResolver(limit: 2)
        }"""
        with self.assertLogs("graphql_query_cost.cost_analysis.configuration", "WARNING") as logs:
            result = compute_cost(get_schema(), query, cost_map=cost_map)
        self.assertEqual(2, len(logs.records))
        self.assertEqual(1 + 2, result.cost)


class ResolveCostConfigurationTests(unittest.TestCase):
    def setUp(self) -> None:
        """Build a schema carrying cost metadata in its definitions' extensions."""
        self.item_type = GraphQLObjectType(
            "Item",
            {"name": GraphQLField(GraphQLString)},
            extensions={"cost": {"complexity": 4}},
        )
        self.query_type = GraphQLObjectType(
            "Query",
            {
                "items": GraphQLField(
                    GraphQLList(self.item_type),
                    args={"first": GraphQLArgument(GraphQLInt)},
                    extensions={"cost": {"complexity": 2, "multipliers": ["first"]}},
                ),
                "item": GraphQLField(self.item_type),
                "count": GraphQLField(GraphQLInt),
            },
        )
        self.schema = GraphQLSchema(self.query_type)

    def _resolve(self, field_name, options):
        return resolve_cost_configuration(
            _make_field_node(field_name),
            self.query_type.fields[field_name],
            "Query",
            {},
            options,
        )

    def test_field_metadata(self) -> None:
        cost_configuration = self._resolve("items", CostAnalysisOptions(100))
        self.assertEqual(
            CostConfiguration(2, True, (MultiplierArgument("first"),)), cost_configuration
        )

    def test_output_type_metadata(self) -> None:
        cost_configuration = self._resolve("item", CostAnalysisOptions(100))
        self.assertEqual(CostConfiguration(4, True, ()), cost_configuration)

    def test_no_metadata(self) -> None:
        self.assertIsNone(self._resolve("count", CostAnalysisOptions(100)))

    def test_cost_map_replaces_metadata(self) -> None:
        options = CostAnalysisOptions(100, cost_map={"Query": {"count": {"complexity": 6}}})
        self.assertEqual(CostConfiguration(6, True, ()), self._resolve("count", options))
        self.assertIsNone(self._resolve("items", options))
        self.assertIsNone(self._resolve("item", options))

    def test_default_complexity_comes_from_complexity_range(self) -> None:
        options = CostAnalysisOptions(
            100,
            cost_map={"Query": {"count": {"useMultipliers": False}}},
            complexity_range={"min": 3, "max": 9},
        )
        self.assertEqual(CostConfiguration(3, False, ()), self._resolve("count", options))

    def test_costs_from_extensions(self) -> None:
        result = compute_cost(self.schema, "{ items(first: 5) { name } item { name } count }")
        self.assertEqual(2 * 5 + 4, result.cost)
