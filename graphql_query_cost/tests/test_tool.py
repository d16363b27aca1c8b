# Copyright 2020-present Kensho Technologies, LLC.
from io import StringIO
import json
import os
import tempfile
import unittest
from unittest import mock

from ..tool import main
from .test_helpers import CUSTOM_COST, FOURTH_COMPLEXITY, SCHEMA_TEXT


class ToolTests(unittest.TestCase):
    def setUp(self) -> None:
        """Write the test schema to a temporary directory."""
        temporary_directory = tempfile.TemporaryDirectory()
        self.addCleanup(temporary_directory.cleanup)
        self.directory = temporary_directory.name

        self.schema_path = os.path.join(self.directory, "schema.graphql")
        with open(self.schema_path, "w") as schema_file:
            schema_file.write(SCHEMA_TEXT)

    def _run_tool(self, query, *args):
        """Run the tool on the query, returning its exit status, stdout and stderr contents."""
        argv = ["--schema", self.schema_path, *args]
        stdout = StringIO()
        stderr = StringIO()
        with mock.patch("sys.stdin", StringIO(query)), mock.patch(
            "sys.stdout", stdout
        ), mock.patch("sys.stderr", stderr):
            exit_status = main(argv)
        return exit_status, stdout.getvalue(), stderr.getvalue()

    def test_prints_cost(self) -> None:
        exit_status, stdout, stderr = self._run_tool("{ customCost }", "--maximum-cost", "100")
        self.assertEqual(0, exit_status)
        self.assertEqual("{}\n".format(CUSTOM_COST), stdout)
        self.assertEqual("", stderr)

    def test_multiline_query(self) -> None:
        query = """{
            customCost
            customCostWithResolver(limit: 2)
        }"""
        exit_status, stdout, _ = self._run_tool(query, "--maximum-cost", "100")
        self.assertEqual(0, exit_status)
        self.assertEqual("{}\n".format(CUSTOM_COST + 2 * FOURTH_COMPLEXITY), stdout)

    def test_maximum_cost_exceeded(self) -> None:
        exit_status, stdout, stderr = self._run_tool("{ customCost }", "--maximum-cost", "5")
        self.assertEqual(1, exit_status)
        self.assertEqual("{}\n".format(CUSTOM_COST), stdout)
        self.assertEqual(
            "The query exceeds the maximum cost of 5. Actual cost is {}\n".format(CUSTOM_COST),
            stderr,
        )

    def test_default_cost(self) -> None:
        exit_status, stdout, _ = self._run_tool(
            "{ defaultCost }", "--maximum-cost", "100", "--default-cost", "2"
        )
        self.assertEqual(0, exit_status)
        self.assertEqual("2\n", stdout)

    def test_variables(self) -> None:
        query = "query Items($limit: Int) { customCostWithResolver(limit: $limit) }"
        exit_status, stdout, _ = self._run_tool(
            query, "--maximum-cost", "100", "--variables", json.dumps({"limit": 3})
        )
        self.assertEqual(0, exit_status)
        self.assertEqual("{}\n".format(3 * FOURTH_COMPLEXITY), stdout)

    def test_cost_map(self) -> None:
        cost_map_path = os.path.join(self.directory, "cost_map.json")
        with open(cost_map_path, "w") as cost_map_file:
            json.dump({"Query": {"defaultCost": {"complexity": 4}}}, cost_map_file)

        exit_status, stdout, _ = self._run_tool(
            "{ defaultCost customCost }", "--maximum-cost", "100", "--cost-map", cost_map_path
        )
        self.assertEqual(0, exit_status)
        self.assertEqual("4\n", stdout)

    def test_invalid_maximum_cost(self) -> None:
        exit_status, stdout, stderr = self._run_tool("{ customCost }", "--maximum-cost", "0")
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertIn("Maximum query cost must be a positive number", stderr)

    def test_invalid_query(self) -> None:
        exit_status, stdout, stderr = self._run_tool("{ customCost", "--maximum-cost", "100")
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertNotEqual("", stderr)

    def test_unparseable_schema(self) -> None:
        with open(self.schema_path, "w") as schema_file:
            schema_file.write("type Query {")

        exit_status, stdout, stderr = self._run_tool("{ customCost }", "--maximum-cost", "100")
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertNotEqual("", stderr)

    def test_missing_schema_file(self) -> None:
        self.schema_path = os.path.join(self.directory, "missing.graphql")
        exit_status, stdout, stderr = self._run_tool("{ customCost }", "--maximum-cost", "100")
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertIn("missing.graphql", stderr)

    def test_invalid_variables(self) -> None:
        exit_status, stdout, stderr = self._run_tool(
            "{ customCost }", "--maximum-cost", "100", "--variables", "{limit: 3"
        )
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertNotEqual("", stderr)

    def test_invalid_cost_map(self) -> None:
        cost_map_path = os.path.join(self.directory, "cost_map.json")
        with open(cost_map_path, "w") as cost_map_file:
            cost_map_file.write("{not json")

        exit_status, stdout, stderr = self._run_tool(
            "{ customCost }", "--maximum-cost", "100", "--cost-map", cost_map_path
        )
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertNotEqual("", stderr)

    def test_cost_map_that_is_not_a_mapping(self) -> None:
        cost_map_path = os.path.join(self.directory, "cost_map.json")
        with open(cost_map_path, "w") as cost_map_file:
            json.dump(["Query"], cost_map_file)

        exit_status, stdout, stderr = self._run_tool(
            "{ customCost }", "--maximum-cost", "100", "--cost-map", cost_map_path
        )
        self.assertEqual(1, exit_status)
        self.assertEqual("", stdout)
        self.assertNotEqual("", stderr)
