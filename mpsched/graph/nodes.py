"""
mpsched/graph/nodes.py

Concrete node kinds.

Each kind fixes its interface roles (and thereby its arity). Rules are
registered against the `kind` string and the role names below.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import numpy as np

from mpsched.core.errors import AlreadyConnected
from mpsched.graph.structure import FactorGraph, FactorNode, Interface, Variable


class Clamp(FactorNode):
    """
    Constant-valued producer.

    Its outbound is the literal `value`; consumers inline it instead of
    referencing a schedule entry.

    Interfaces:
        1. out
    """
    kind = "clamp"
    roles = ("out",)

    def __init__(self, graph: FactorGraph, value: Any, id: Optional[str] = None):
        super().__init__(graph, id=id)
        self.value = np.asarray(value) if isinstance(value, (list, tuple)) else value

    @property
    def is_constant(self) -> bool:
        return True


class Terminal(FactorNode):
    """
    Boundary port for exchanging messages with the outside world.

    Interfaces:
        1. out
    """
    kind = "terminal"
    roles = ("out",)


class Equality(FactorNode):
    """
    Equality constraint: f(x, y, z) = δ(x - y) δ(x - z)

    Interfaces:
        1. 1
        2. 2
        3. 3
    """
    kind = "equality"
    roles = ("1", "2", "3")


class Addition(FactorNode):
    """
    Addition: f(out, in1, in2) = δ(out - in1 - in2)

    Interfaces:
        1. out
        2. in1
        3. in2
    """
    kind = "addition"
    roles = ("out", "in1", "in2")


class GaussianMeanVariance(FactorNode):
    """
    Gaussian with mean-variance parameterization: f(out, m, v) = N(out | m, v)

    Interfaces:
        1. out
        2. m (mean)
        3. v (covariance)
    """
    kind = "gaussian_mean_variance"
    roles = ("out", "m", "v")


class GaussianMeanPrecision(FactorNode):
    """
    Gaussian with mean-precision parameterization: f(out, m, w) = N(out | m, w^-1)

    Interfaces:
        1. out
        2. m (mean)
        3. w (precision)
    """
    kind = "gaussian_mean_precision"
    roles = ("out", "m", "w")


class Bernoulli(FactorNode):
    """
    Bernoulli: f(out, p) = Ber(out | p)

    Interfaces:
        1. out
        2. p
    """
    kind = "bernoulli"
    roles = ("out", "p")


class Nonlinear(FactorNode):
    """
    Nonlinear deterministic relation:
    f(out, in1) = δ(out - g(in1))

    Messages are approximated either by the unscented transform (Gaussian
    in, Gaussian out) or by importance sampling (forward yields a sample
    list, backward a log-density function). The approximation selects the
    rule catalog through `kind`.

    Attributes:
        g: Forward function
        g_inv: Optional inverse of g; without it the backward unscented rule
            needs the forward message on in1 as approximation point
        alpha: Optional spread parameter for the unscented transform
        approximation: "unscented" or "importance_sampling"

    Interfaces:
        1. out
        2. in1
    """
    kind = "nonlinear"
    roles = ("out", "in1")

    UNSCENTED = "unscented"
    IMPORTANCE_SAMPLING = "importance_sampling"

    def __init__(
        self,
        graph: FactorGraph,
        g: Callable,
        *,
        g_inv: Optional[Callable] = None,
        alpha: Optional[float] = None,
        approximation: str = UNSCENTED,
        id: Optional[str] = None,
    ):
        if approximation not in (self.UNSCENTED, self.IMPORTANCE_SAMPLING):
            raise ValueError(f"Unknown approximation: {approximation!r}")
        if approximation == self.IMPORTANCE_SAMPLING and (g_inv is not None or alpha is not None):
            raise ValueError("g_inv and alpha only apply to the unscented transform")
        super().__init__(graph, id=id)
        self.g = g
        self.g_inv = g_inv
        self.alpha = alpha
        self.approximation = approximation
        if approximation == self.IMPORTANCE_SAMPLING:
            self.kind = "nonlinear_importance_sampling"


def clamp(graph: FactorGraph, value: Any, iface: Interface, variable: Optional[Variable] = None) -> Clamp:
    """
    Clamp an interface to a literal value.

    Creates a Clamp node holding `value` and connects its output to `iface`.

    Returns:
        The new Clamp node

    Raises:
        AlreadyConnected: If iface already has a partner; the graph is left
            unchanged
    """
    if iface.partner is not None:
        raise AlreadyConnected(iface)
    node = Clamp(graph, value)
    graph.connect(node.i["out"], iface, variable=variable)
    return node
