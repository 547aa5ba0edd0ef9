"""
Example: One step of a Kalman filter as a recurrent algorithm.

  x_prev --> (+ 1) --> [=] --> x_next
                        |
                  N(y | x, 0.5), y = 2.0

The state message on x_prev is pre-seeded. A time-wrap carries the posterior
on x_next back to x_prev for the next step, and a write-buffer exports it.
"""

from mpsched import (
    Addition,
    Equality,
    FactorGraph,
    GaussianMeanVariance,
    Kind,
    Message,
    Terminal,
    clamp,
    compile_algorithm,
    factorize,
)


def main():
    g = FactorGraph()

    x_prev = Terminal(g, id="x_prev")
    x_next = Terminal(g, id="x_next")

    step = Addition(g, id="step")
    g.connect(x_prev.i["out"], step.i["in1"])
    clamp(g, 1.0, step.i["in2"])

    eq = Equality(g, id="eq")
    g.connect(step.i["out"], eq.i["1"])

    lik = GaussianMeanVariance(g, id="lik")
    g.connect(eq.i["2"], lik.i["m"])
    clamp(g, 0.5, lik.i["v"])
    clamp(g, 2.0, lik.i["out"])

    g.connect(eq.i["3"], x_next.i["out"])

    # Initial state belief
    x_prev.i["out"].message = Message(Kind.GAUSSIAN_MEAN_VARIANCE, payload=(0.0, 1.0))

    scheme = factorize(g)
    scheme.add_time_wrap(eq.i["3"], x_prev.i["out"])
    posterior = scheme.write_buffer(eq.i["3"])

    algo = compile_algorithm(scheme=scheme)

    print(f"Partitioning: {scheme}")
    for sg_id, program in algo.programs.items():
        print(f"\nProgram for {sg_id}:")
        for entry in program:
            print(f"  {entry.interface}: {entry.rule.name}")
    print(f"\nPosterior buffer (filled by the runtime): {posterior}")


if __name__ == "__main__":
    main()
