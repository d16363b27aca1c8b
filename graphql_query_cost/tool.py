#!/usr/bin/env python
# Copyright 2017-present Kensho Technologies, LLC.
"""Utility modeled after json.tool, prints the cost of a GraphQL query read from stdin.

Used as: python -m graphql_query_cost.tool --schema schema.graphql --maximum-cost 1000
"""
import argparse
import json
import sys
from typing import List, Optional

from . import graphql_query_cost
from .exceptions import QueryCostError
from .schema import build_schema_with_cost_directive


def _parse_number(value: str) -> float:
    """Parse a command-line number, keeping integers as ints."""
    try:
        return int(value)
    except ValueError:
        return float(value)


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m graphql_query_cost.tool",
        description="Compute the cost of a GraphQL query read from standard input.",
    )
    parser.add_argument(
        "--schema", required=True, help="Path to the schema, in GraphQL SDL format."
    )
    parser.add_argument(
        "--maximum-cost",
        required=True,
        type=_parse_number,
        help="Queries costing more than this are reported as errors.",
    )
    parser.add_argument(
        "--default-cost",
        default=0,
        type=_parse_number,
        help="Cost of fields without cost configuration. Defaults to 0.",
    )
    parser.add_argument(
        "--cost-map",
        help="Path to a JSON cost map, used instead of the @cost directives of the schema.",
    )
    parser.add_argument(
        "--variables", default="{}", help="JSON object of the query's variable values."
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Read a GraphQL query from standard input, and output its cost to standard output.

    Errors reported by the analysis are written to standard error, one per line.

    Returns:
        exit status: 0 if no errors were reported, 1 otherwise
    """
    args = _build_argument_parser().parse_args(argv)
    query = " ".join(sys.stdin.readlines())

    try:
        with open(args.schema, "r") as schema_file:
            schema = build_schema_with_cost_directive(schema_file.read())

        cost_map = None
        if args.cost_map is not None:
            with open(args.cost_map, "r") as cost_map_file:
                cost_map = json.load(cost_map_file)

        result = graphql_query_cost(
            schema,
            query,
            args.maximum_cost,
            default_cost=args.default_cost,
            cost_map=cost_map,
            variables=json.loads(args.variables),
        )
    except (QueryCostError, json.JSONDecodeError, OSError) as e:
        sys.stderr.write("{}\n".format(e))
        return 1

    sys.stdout.write("{}\n".format(result.cost))
    for error in result.errors:
        sys.stderr.write("{}\n".format(error.message))

    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
