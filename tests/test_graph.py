"""
Tests for graph construction: ids, connections, variables and partitions.
"""

import networkx as nx
import numpy as np
import pytest

from mpsched.core.errors import AlreadyConnected, DuplicateIdentifier, GraphError
from mpsched.core.registry import IDRegistry
from mpsched.graph.nodes import Addition, Clamp, GaussianMeanVariance, Nonlinear, Terminal, clamp
from mpsched.graph.partition import PartitioningScheme, Subgraph, factorize, factorize_mean_field
from mpsched.graph.structure import FactorGraph, Variable
from mpsched.ir.schema import Kind, Message

from conftest import Relay, Source


class TestIDRegistry:
    """Test per-kind id counters."""

    def test_counters_are_per_kind(self):
        ids = IDRegistry()
        assert ids.generate("Addition") == "addition1"
        assert ids.generate("Addition") == "addition2"
        assert ids.generate("variable") == "variable1"
        assert ids.peek("addition") == 2
        assert ids.peek("equality") == 0

    def test_graphs_do_not_share_counters(self):
        g1, g2 = FactorGraph(), FactorGraph()
        assert Addition(g1).id == "addition1"
        assert Addition(g2).id == "addition1"


class TestConstruction:
    """Test node, edge and variable registration."""

    def test_interfaces_follow_roles(self, graph):
        node = GaussianMeanVariance(graph)
        assert [i.role for i in node.interfaces] == ["out", "m", "v"]
        assert [i.index for i in node.interfaces] == [0, 1, 2]
        assert node.i["m"] is node.interfaces[1]
        assert all(i.node is node for i in node.interfaces)

    def test_duplicate_node_id_rejected(self, graph):
        Terminal(graph, id="t")
        with pytest.raises(DuplicateIdentifier) as exc:
            Terminal(graph, id="t")
        assert exc.value.ident == "t"

    def test_duplicate_variable_id_rejected(self, graph):
        Variable(graph, id="x")
        with pytest.raises(DuplicateIdentifier):
            Variable(graph, id="x")

    def test_has_node_checks_identity(self, graph):
        node = Terminal(graph, id="t")
        other = Terminal(FactorGraph(), id="t")
        assert graph.has_node(node)
        assert not graph.has_node(other)

    def test_connect_links_partners(self, graph):
        a, b = Source(graph), Relay(graph)
        var = Variable(graph)
        edge = graph.connect(a.i["out"], b.i["in1"], variable=var)

        assert edge.id == "edge1"
        assert a.i["out"].partner is b.i["in1"]
        assert b.i["in1"].partner is a.i["out"]
        assert a.i["out"].edge is edge and b.i["in1"].edge is edge
        assert var.edges == [edge]
        assert graph.edges == [edge]

    def test_connect_twice_rejected(self, graph):
        a, b, c = Source(graph), Relay(graph), Relay(graph)
        graph.connect(a.i["out"], b.i["in1"])
        with pytest.raises(AlreadyConnected) as exc:
            graph.connect(a.i["out"], c.i["in1"])
        assert exc.value.interface is a.i["out"]
        assert c.i["in1"].partner is None

    def test_failed_connect_consumes_no_edge_id(self, graph):
        a, b, c, d = Source(graph), Relay(graph), Relay(graph), Source(graph)
        graph.connect(a.i["out"], b.i["in1"])
        with pytest.raises(AlreadyConnected):
            graph.connect(c.i["in1"], b.i["in1"])

        assert graph.connect(d.i["out"], c.i["in1"]).id == "edge2"

    def test_clamp_on_connected_interface(self, graph):
        node = Addition(graph)
        clamp(graph, 1.0, node.i["in2"])
        before = dict(graph.nodes)

        with pytest.raises(AlreadyConnected) as exc:
            clamp(graph, 2.0, node.i["in2"])

        assert exc.value.interface is node.i["in2"]
        assert graph.nodes == before
        assert clamp(graph, 3.0, node.i["in1"]).id == "clamp2"

    def test_clamp_helper(self, graph):
        node = Addition(graph)
        c = clamp(graph, [1.0, 2.0], node.i["in2"])

        assert isinstance(c, Clamp)
        assert c.is_constant
        assert isinstance(c.value, np.ndarray)
        assert node.i["in2"].partner is c.i["out"]

    def test_nonlinear_parameters(self, graph):
        node = Nonlinear(graph, np.exp, g_inv=np.log, alpha=0.1)
        assert node.g is np.exp
        assert node.g_inv is np.log
        assert node.alpha == 0.1

    def test_clear_messages(self, chain):
        graph, a, b, c = chain
        a.i["out"].message = Message(Kind.GAUSSIAN)
        assert a.i["out"].has_message
        graph.clear_messages()
        assert not any(i.has_message for i in graph.interfaces())

    def test_to_networkx(self, chain):
        graph, a, b, c = chain
        g = graph.to_networkx()

        assert isinstance(g, nx.MultiGraph)
        assert set(g.nodes) == {"A", "B", "C"}
        assert g.number_of_edges() == 2
        assert g.edges["A", "B", "edge1"]["edge"] is graph.edges[0]


class TestPartition:
    """Test partitioning schemes."""

    def test_factorize_splits_components(self, graph):
        a1, b1 = Source(graph), Relay(graph)
        a2, b2 = Source(graph), Relay(graph)
        e1 = graph.connect(a1.i["out"], b1.i["in1"])
        e2 = graph.connect(a2.i["out"], b2.i["in1"])

        scheme = factorize(graph)

        assert len(scheme) == 2
        assert scheme.subgraph_of(e1) is not scheme.subgraph_of(e2)
        assert [sg.id for sg in scheme] == ["subgraph1", "subgraph2"]

    def test_factorize_with_cluster(self, chain):
        graph, a, b, c = chain
        e1, e2 = graph.edges

        scheme = factorize(graph, [[e2]])

        assert e2 in scheme.subgraphs[0]
        assert e1 in scheme.subgraphs[1]
        assert scheme.subgraph_of(e1) is scheme.subgraphs[1]

    def test_factorize_skips_isolated_nodes(self, chain):
        graph, a, b, c = chain
        Terminal(graph, id="lonely")
        e1, e2 = graph.edges

        scheme = factorize(graph, [[e1]])

        assert len(scheme) == 2
        assert scheme.subgraphs[1].internal_edges == {e2}
        assert all(len(sg.internal_edges) > 0 for sg in scheme)

    def test_subgraph_of_unknown_edge(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        with pytest.raises(GraphError):
            scheme.subgraph_of(c.i["out"].edge)
        other = FactorGraph()
        stray = other.connect(Source(other).i["out"], Relay(other).i["in1"])
        with pytest.raises(GraphError):
            scheme.subgraph_of(stray)

    def test_overlapping_subgraphs_rejected(self, chain):
        graph, a, b, c = chain
        e1, e2 = graph.edges
        with pytest.raises(GraphError):
            PartitioningScheme(graph, [Subgraph([e1, e2]), Subgraph([e2])])

    def test_uncovered_edge_rejected(self, chain):
        graph, a, b, c = chain
        with pytest.raises(GraphError):
            PartitioningScheme(graph, [Subgraph([graph.edges[0]])])

    def test_mean_field_groups_clamped_edges(self, graph):
        x = GaussianMeanVariance(graph)
        y = Terminal(graph)
        clamp(graph, 0.0, x.i["m"])
        clamp(graph, 1.0, x.i["v"])
        e_out = graph.connect(x.i["out"], y.i["out"])

        scheme = factorize_mean_field(graph)

        assert len(scheme) == 2
        assert scheme.subgraph_of(e_out).internal_edges == {e_out}
        assert scheme.subgraph_of(x.i["m"].edge) is scheme.subgraph_of(x.i["v"].edge)

    def test_subgraph_boundary(self, chain):
        graph, a, b, c = chain
        e1, e2 = graph.edges
        scheme = factorize(graph, [[e1]])
        sg = scheme.subgraph_of(e1)

        assert sg.nodes() == [a, b]
        assert sg.external_edges == [e2]
        assert sg.nodes_connected_to_external_edges() == [b]

    def test_time_wrap_requires_connection(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        with pytest.raises(GraphError):
            scheme.add_time_wrap(c.i["out"], a.i["out"])

    def test_write_buffer(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        buf = scheme.write_buffer(graph.edges[1])

        assert buf == []
        assert scheme.write_buffers[graph.edges[1]] is buf
        assert scheme.write_buffer_edge(b.i["out"]) is graph.edges[1]
        with pytest.raises(GraphError):
            scheme.write_buffer(c.i["out"])
