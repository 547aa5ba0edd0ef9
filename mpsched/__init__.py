"""
mpsched: Message-Passing Schedule Compiler

Compiles a factor graph into an ordered schedule of local message
computations, resolving for every step which update rule to invoke and
which arguments to pass it.

Key components:
- core: ID registry and error taxonomy
- ir: Inbound kinds, signatures and the compiled program representation
- graph: Nodes, interfaces, edges, variables and partitions
- compiler: Dependency scheduler, rule dispatch, argument assembly, emission
- rules: Built-in sum-product and variational rule catalogs
- solver: High-level compilation interface
"""

__version__ = "1.0.0"
__author__ = "mpsched Team"

from mpsched.core.errors import (
    MPSchedError,
    DuplicateIdentifier,
    AlreadyConnected,
    DisconnectedInterface,
    UnbrokenLoopError,
    CrossSubgraphPartialSchedule,
    NoApplicableRule,
    AmbiguousRule,
    MissingInboundReference,
    UnavailableApproximationPoint,
)
from mpsched.core.logging import configure_logging
from mpsched.ir.schema import Kind, Message
from mpsched.graph.structure import FactorGraph, Variable
from mpsched.graph.nodes import (
    Clamp,
    Terminal,
    Equality,
    Addition,
    GaussianMeanVariance,
    GaussianMeanPrecision,
    Bernoulli,
    Nonlinear,
    clamp,
)
from mpsched.graph.partition import PartitioningScheme, Subgraph, factorize, factorize_mean_field
from mpsched.compiler.schedule import schedule, complete_partial_schedule, schedule_subgraph, schedule_all
from mpsched.compiler.rules import Rule, RuleRegistry
from mpsched.compiler.inbounds import assemble_arguments
from mpsched.compiler.emit import emit_program, condense
from mpsched.rules import sum_product_rules, variational_rules
from mpsched.solver import compile_algorithm, CompiledAlgorithm

__all__ = [
    # Errors
    "MPSchedError",
    "DuplicateIdentifier",
    "AlreadyConnected",
    "DisconnectedInterface",
    "UnbrokenLoopError",
    "CrossSubgraphPartialSchedule",
    "NoApplicableRule",
    "AmbiguousRule",
    "MissingInboundReference",
    "UnavailableApproximationPoint",
    # Logging
    "configure_logging",
    # Kinds
    "Kind",
    "Message",
    # Graph
    "FactorGraph",
    "Variable",
    "Clamp",
    "Terminal",
    "Equality",
    "Addition",
    "GaussianMeanVariance",
    "GaussianMeanPrecision",
    "Bernoulli",
    "Nonlinear",
    "clamp",
    "PartitioningScheme",
    "Subgraph",
    "factorize",
    "factorize_mean_field",
    # Compiler
    "schedule",
    "complete_partial_schedule",
    "schedule_subgraph",
    "schedule_all",
    "Rule",
    "RuleRegistry",
    "assemble_arguments",
    "emit_program",
    "condense",
    "sum_product_rules",
    "variational_rules",
    # Solver
    "compile_algorithm",
    "CompiledAlgorithm",
]
