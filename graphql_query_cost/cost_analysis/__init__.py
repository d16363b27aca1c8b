# Copyright 2020-present Kensho Technologies, LLC.
"""Query cost analysis.

Purpose
=======

Some GraphQL queries are too expensive to resolve: a handful of nested paginated fields can
easily ask the server for millions of objects. If such queries are executed, they can overload
the server and every system behind it.

In order to prevent this, we assign each incoming query a unit-less *cost* before executing it,
using cost configuration attached to the schema (or supplied separately in a cost map) together
with the actual argument values of the query, and reject queries whose cost exceeds a budget.

Computing Cost
==============

Every field has a *complexity*: the cost of resolving it once. A field may also name some of its
arguments as *multipliers*, e.g. a pagination "limit": the values of those arguments are summed
into the number of times the field, and everything selected below it, will be resolved.

Example:
    Given the schema
    type Query {
        users(limit: Int): [User] @cost(complexity: 2, multipliers: ["limit"])
    }
    type User {
        friends(limit: Int): [User] @cost(complexity: 3, multipliers: ["limit"])
        name: String
    }
    and the query
    {
        users(limit: 10) {
            name
            friends(limit: 5) {
                name
            }
        }
    }
    the "users" field costs 2 * 10 = 20, and each of the 10 users resolves "friends" 5 times,
    so the "friends" field costs 3 * 10 * 5 = 150, for a total cost of 170. The "name" fields
    have no cost configuration, so they cost the default cost, which is 0 unless configured.

Approach Details:
    We walk the query as a tree, starting from the root type of each operation with no
    multipliers. Each field's multiplier (if any) is appended to the multipliers inherited from
    its ancestors, and the resulting multipliers are handed down to the field's children only:
    sibling fields never see each other's multipliers.

    Fields selected side by side are all resolved, so their costs are added up. Fragments and
    inline fragments are alternative branches (e.g. one per member of a union), so only the
    most expensive of them counts towards the total cost of a selection set.

    Fields with useMultipliers set to false always cost exactly their complexity. A field's
    cost, including its subtree, never counts below zero.

Integration
===========

The analysis is a graphql-core validation rule, created by create_cost_analysis() and passed
to graphql.validate() along with the standard rules. The cost-exceeded error is reported through
the validation context like any other validation error.
"""
from .analysis import (  # noqa
    CostAnalysis,
    CostAnalysisResult,
    create_cost_analysis,
    get_query_cost,
    make_cost_analysis_rule,
)
from .configuration import CostConfiguration, resolve_cost_configuration  # noqa
from .formula import FieldCost, compute_field_cost  # noqa
from .multipliers import MultiplierArgument, get_multiplier_values  # noqa
from .options import ComplexityRange, CostAnalysisOptions  # noqa
from .tree_walker import CostTreeWalker  # noqa
