"""
mpsched/rules/sum_product.py

Built-in sum-product rule catalog.

Only signatures are declared here; the numeric updates are provided by the
runtime that executes a compiled program, looked up by rule name.
Inbound patterns list the node's other interfaces in interface order.
"""

from __future__ import annotations

from mpsched.compiler.rules import SUM_PRODUCT, RuleRegistry
from mpsched.ir.schema import Kind

G = Kind.GAUSSIAN
P = Kind.POINT_MASS


def _clamp(reg: RuleRegistry) -> None:
    reg.add("SPClamp", "clamp", "out", (), Kind.CONSTANT)


def _addition(reg: RuleRegistry) -> None:
    # out = in1 + in2; in1 = out - in2; in2 = out - in1
    for role in ("out", "in1", "in2"):
        tag = role[0].upper() + role[1:]
        reg.add(f"SPAddition{tag}GG", "addition", role, (G, G), Kind.GAUSSIAN_MEAN_VARIANCE)
        reg.add(f"SPAddition{tag}GP", "addition", role, (G, P), Kind.GAUSSIAN_MEAN_VARIANCE)
        reg.add(f"SPAddition{tag}PG", "addition", role, (P, G), Kind.GAUSSIAN_MEAN_VARIANCE)
        reg.add(f"SPAddition{tag}PP", "addition", role, (P, P), Kind.POINT_MASS)


def _equality(reg: RuleRegistry) -> None:
    for role in ("1", "2", "3"):
        reg.add(f"SPEqualityGaussian{role}", "equality", role, (G, G), Kind.GAUSSIAN_WEIGHTED_MEAN_PRECISION)
        reg.add(f"SPEqualityGaussianPointMass{role}", "equality", role, (G, P), Kind.POINT_MASS)
        reg.add(f"SPEqualityPointMassGaussian{role}", "equality", role, (P, G), Kind.POINT_MASS)
        reg.add(f"SPEqualityGamma{role}", "equality", role, (Kind.GAMMA, Kind.GAMMA), Kind.GAMMA)
        reg.add(f"SPEqualityBernoulli{role}", "equality", role, (Kind.BERNOULLI, Kind.BERNOULLI), Kind.BERNOULLI)


def _gaussian(reg: RuleRegistry) -> None:
    reg.add("SPGaussianMeanVarianceOutPP", "gaussian_mean_variance", "out", (P, P), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("SPGaussianMeanVarianceOutGP", "gaussian_mean_variance", "out", (G, P), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("SPGaussianMeanVarianceMPP", "gaussian_mean_variance", "m", (P, P), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("SPGaussianMeanVarianceMGP", "gaussian_mean_variance", "m", (G, P), Kind.GAUSSIAN_MEAN_VARIANCE)

    reg.add("SPGaussianMeanPrecisionOutPP", "gaussian_mean_precision", "out", (P, P), Kind.GAUSSIAN_MEAN_PRECISION)
    reg.add("SPGaussianMeanPrecisionOutGP", "gaussian_mean_precision", "out", (G, P), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("SPGaussianMeanPrecisionMPP", "gaussian_mean_precision", "m", (P, P), Kind.GAUSSIAN_MEAN_PRECISION)
    reg.add("SPGaussianMeanPrecisionMGP", "gaussian_mean_precision", "m", (G, P), Kind.GAUSSIAN_MEAN_VARIANCE)


def _bernoulli(reg: RuleRegistry) -> None:
    reg.add("SPBernoulliOutP", "bernoulli", "out", (P,), Kind.BERNOULLI)
    reg.add("SPBernoulliOutB", "bernoulli", "out", (Kind.BETA,), Kind.BERNOULLI)


def _nonlinear(reg: RuleRegistry) -> None:
    # Unscented transform; the backward rule takes g_inv or an approximation point
    reg.add("SPNonlinearUTOutNG", "nonlinear", "out", (G,), Kind.GAUSSIAN_MEAN_VARIANCE)
    reg.add("SPNonlinearUTIn1GG", "nonlinear", "in1", (G,), Kind.GAUSSIAN_MEAN_VARIANCE)

    # Importance sampling
    reg.add("SPNonlinearISOutNG", "nonlinear_importance_sampling", "out", (G,), Kind.SAMPLE_LIST)
    reg.add("SPNonlinearISIn1MN", "nonlinear_importance_sampling", "in1", (Kind.DISTRIBUTION,), Kind.FUNCTION)


def sum_product_rules() -> RuleRegistry:
    """Build a registry populated with the built-in sum-product rules."""
    reg = RuleRegistry(SUM_PRODUCT)
    _clamp(reg)
    _addition(reg)
    _equality(reg)
    _gaussian(reg)
    _bernoulli(reg)
    _nonlinear(reg)
    return reg
