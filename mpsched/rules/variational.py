"""
mpsched/rules/variational.py

Built-in naive variational rule catalog.

Slots outside the outbound's subgraph are marginals, observed as
DISTRIBUTION (or CONSTANT for clamped edges).
"""

from __future__ import annotations

from mpsched.compiler.rules import VARIATIONAL, RuleRegistry
from mpsched.ir.schema import Kind

D = Kind.DISTRIBUTION
P = Kind.POINT_MASS


def variational_rules() -> RuleRegistry:
    """Build a registry populated with the built-in variational rules."""
    reg = RuleRegistry(VARIATIONAL)
    reg.add("VBClamp", "clamp", "out", (), Kind.CONSTANT)

    reg.add("VBGaussianMeanPrecisionOut", "gaussian_mean_precision", "out", (D, D), Kind.GAUSSIAN_MEAN_PRECISION)
    reg.add("VBGaussianMeanPrecisionM", "gaussian_mean_precision", "m", (D, D), Kind.GAUSSIAN_MEAN_PRECISION)
    reg.add("VBGaussianMeanPrecisionW", "gaussian_mean_precision", "w", (D, D), Kind.GAMMA)

    # Unknown variance is not conjugate; only a clamped variance is supported
    reg.add("VBGaussianMeanVarianceOut", "gaussian_mean_variance", "out", (D, P), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("VBGaussianMeanVarianceM", "gaussian_mean_variance", "m", (D, P), Kind.GAUSSIAN_MEAN_VARIANCE)

    reg.add("VBBernoulliOut", "bernoulli", "out", (D,), Kind.BERNOULLI)
    reg.add("VBBernoulliP", "bernoulli", "p", (D,), Kind.BETA)
    return reg
