"""
Shared fixtures: minimal node kinds used to shape scheduling test graphs.
"""

import pytest

from mpsched.graph.structure import FactorGraph, FactorNode


class Source(FactorNode):
    """Single-port node; its outbound depends on nothing."""
    kind = "source"
    roles = ("out",)


class Relay(FactorNode):
    """Two-port node: out depends on in1 and vice versa."""
    kind = "relay"
    roles = ("out", "in1")


class Mixer(FactorNode):
    """Three-port node."""
    kind = "mixer"
    roles = ("out", "in1", "in2")


class Sink(FactorNode):
    """Single-port node on the receiving end of a chain."""
    kind = "sink"
    roles = ("in1",)


@pytest.fixture
def graph():
    return FactorGraph()


@pytest.fixture
def chain(graph):
    """A --e1-- B --e2-- C, with C.out left dangling."""
    a = Source(graph, id="A")
    b = Relay(graph, id="B")
    c = Relay(graph, id="C")
    graph.connect(a.i["out"], b.i["in1"])
    graph.connect(b.i["out"], c.i["in1"])
    return graph, a, b, c


@pytest.fixture
def loop(graph):
    """X -> Y -> Z -> X, each relay's in1 fed by the previous relay's out."""
    x = Relay(graph, id="X")
    y = Relay(graph, id="Y")
    z = Relay(graph, id="Z")
    graph.connect(x.i["out"], y.i["in1"])
    graph.connect(y.i["out"], z.i["in1"])
    graph.connect(z.i["out"], x.i["in1"])
    return graph, x, y, z
