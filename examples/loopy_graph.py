"""
Example: Breaking a loop with initial messages.

Two equality nodes joined by two parallel edges form a cycle:

  prior --[eq1]==[eq2]-- out

Scheduling fails until the messages on one side of the loop are pre-seeded.
"""

from mpsched import (
    Equality,
    FactorGraph,
    GaussianMeanVariance,
    Kind,
    Message,
    Terminal,
    UnbrokenLoopError,
    clamp,
    compile_algorithm,
)


def main():
    g = FactorGraph()

    prior = GaussianMeanVariance(g, id="prior")
    clamp(g, 0.0, prior.i["m"])
    clamp(g, 1.0, prior.i["v"])

    eq1 = Equality(g, id="eq1")
    eq2 = Equality(g, id="eq2")
    g.connect(prior.i["out"], eq1.i["1"])
    g.connect(eq1.i["2"], eq2.i["1"])
    g.connect(eq1.i["3"], eq2.i["2"])

    out = Terminal(g, id="out")
    g.connect(eq2.i["3"], out.i["out"])

    try:
        compile_algorithm(eq2.i["3"])
    except UnbrokenLoopError as exc:
        print(f"Without initial messages:\n  {exc}")

    eq1.i["3"].message = Message(Kind.GAUSSIAN_MEAN_VARIANCE)
    eq2.i["2"].message = Message(Kind.GAUSSIAN_MEAN_VARIANCE)

    algo = compile_algorithm(eq2.i["3"])
    print("\nWith messages seeded on the second parallel edge:")
    for entry in algo.program:
        print(f"  {entry.interface}: {entry.rule.name} {entry.arguments.inbounds}")


if __name__ == "__main__":
    main()
