"""
Graph module: nodes, interfaces, edges, variables and partitions.
"""

from mpsched.graph.structure import Interface, Edge, Variable, FactorNode, FactorGraph
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
from mpsched.graph.partition import (
    Subgraph,
    TimeWrap,
    PartitioningScheme,
    factorize,
    factorize_mean_field,
)

__all__ = [
    "Interface",
    "Edge",
    "Variable",
    "FactorNode",
    "FactorGraph",
    "Clamp",
    "Terminal",
    "Equality",
    "Addition",
    "GaussianMeanVariance",
    "GaussianMeanPrecision",
    "Bernoulli",
    "Nonlinear",
    "clamp",
    "Subgraph",
    "TimeWrap",
    "PartitioningScheme",
    "factorize",
    "factorize_mean_field",
]
