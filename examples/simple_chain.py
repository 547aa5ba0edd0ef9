"""
Example: Simple Gaussian chain.

  x ~ N(0, 1)  -->  y = x + 3  -->  z = y observed with noise

Compiles the sum-product program for the message towards z's observation and
prints every step with its resolved rule and arguments.
"""

from mpsched import Addition, FactorGraph, GaussianMeanVariance, Terminal, clamp, compile_algorithm


def main():
    g = FactorGraph()

    x = GaussianMeanVariance(g, id="x")
    clamp(g, 0.0, x.i["m"])
    clamp(g, 1.0, x.i["v"])

    y = Addition(g, id="y")
    g.connect(x.i["out"], y.i["in1"])
    clamp(g, 3.0, y.i["in2"])

    z = GaussianMeanVariance(g, id="z")
    g.connect(y.i["out"], z.i["m"])
    clamp(g, 0.1, z.i["v"])

    obs = Terminal(g, id="obs")
    g.connect(z.i["out"], obs.i["out"])

    print("Compiling sum-product schedule for z.out...")
    algo = compile_algorithm(z.i["out"])

    print(f"\n{len(algo.program)} steps:")
    for k, entry in enumerate(algo.program):
        args = ", ".join(repr(a) for a in entry.arguments.inbounds)
        print(f"  {k}: {entry.interface} <- {entry.rule.name}({args}) -> {entry.outbound.name}")

    print("\nUncondensed (constant producers kept):")
    full = compile_algorithm(z.i["out"], condense_constants=False)
    print(f"  {full.program.rule_names()}")


if __name__ == "__main__":
    main()
