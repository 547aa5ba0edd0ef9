"""
Tests for dependency scheduling.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from mpsched.compiler.schedule import (
    commit_schedule,
    complete_partial_schedule,
    schedule,
    schedule_all,
    schedule_subgraph,
    schedule_violations,
)
from mpsched.core.errors import (
    CrossSubgraphPartialSchedule,
    DisconnectedInterface,
    ScheduleError,
    UnbrokenLoopError,
)
from mpsched.graph.nodes import Equality
from mpsched.graph.partition import factorize
from mpsched.ir.schema import Kind, Message

from conftest import Mixer, Relay, Sink, Source


class TestSchedule:
    """Test single-target scheduling."""

    def test_chain_order(self, chain):
        graph, a, b, c = chain
        order = schedule(c.i["out"])
        assert order == [a.i["out"], b.i["out"], c.i["out"]]

    def test_target_is_last(self, chain):
        graph, a, b, c = chain
        order = schedule(b.i["out"])
        assert order[-1] is b.i["out"]
        assert c.i["out"] not in order

    def test_deterministic(self, chain):
        graph, a, b, c = chain
        assert schedule(c.i["out"]) == schedule(c.i["out"])

    def test_order_is_valid(self, chain):
        graph, a, b, c = chain
        assert schedule_violations(schedule(c.i["out"])) == []

    def test_violations_detected(self, chain):
        graph, a, b, c = chain
        bad = [b.i["out"], a.i["out"], c.i["out"]]
        assert schedule_violations(bad) == [b.i["out"]]

    def test_present_message_is_not_recomputed(self, chain):
        graph, a, b, c = chain
        a.i["out"].message = Message(Kind.GAUSSIAN)
        assert schedule(c.i["out"]) == [b.i["out"], c.i["out"]]

    def test_schedule_depends_on_present_messages(self, chain):
        graph, a, b, c = chain
        before = schedule(c.i["out"])
        b.i["out"].message = Message(Kind.GAUSSIAN)
        after = schedule(c.i["out"])
        assert before != after
        assert after == [c.i["out"]]

    def test_disconnected_interface(self, graph):
        b = Relay(graph)
        with pytest.raises(DisconnectedInterface) as exc:
            schedule(b.i["out"])
        assert exc.value.interface is b.i["in1"]
        assert "relay" in str(exc.value)

    @pytest.mark.parametrize("index", [0, 1, 2])
    def test_unbroken_loop(self, loop, index):
        graph, *relays = loop
        target = relays[index].i["out"]
        with pytest.raises(UnbrokenLoopError) as exc:
            schedule(target)
        assert exc.value.interface is target
        assert "initial message" in str(exc.value)

    def test_seeded_loop(self, loop):
        graph, x, y, z = loop
        y.i["out"].message = Message(Kind.GAUSSIAN)
        order = schedule(x.i["out"])
        assert order == [z.i["out"], x.i["out"]]

    def test_shared_dependency_scheduled_once(self, graph):
        # S feeds an equality whose two other ports reach M through R1 and R2
        s = Source(graph, id="S")
        eq = Equality(graph, id="E")
        r1, r2 = Relay(graph, id="R1"), Relay(graph, id="R2")
        m = Mixer(graph, id="M")
        graph.connect(s.i["out"], eq.i["1"])
        graph.connect(eq.i["2"], r1.i["in1"])
        graph.connect(eq.i["3"], r2.i["in1"])
        graph.connect(r1.i["out"], m.i["in1"])
        graph.connect(r2.i["out"], m.i["in2"])
        r1.i["in1"].message = Message(Kind.GAUSSIAN)
        r2.i["in1"].message = Message(Kind.GAUSSIAN)

        order = schedule(m.i["out"])

        assert order == [s.i["out"], eq.i["2"], r1.i["out"], eq.i["3"], r2.i["out"], m.i["out"]]
        assert order.count(s.i["out"]) == 1

    def test_deep_chain(self, graph):
        prev = Source(graph).i["out"]
        for _ in range(2000):
            r = Relay(graph)
            graph.connect(prev, r.i["in1"])
            prev = r.i["out"]
        order = schedule(prev)
        assert len(order) == 2001
        assert order[-1] is prev


class TestScopedSchedule:
    """Test scheduling restricted to a subgraph."""

    @pytest.fixture
    def split_chain(self, graph):
        a, b, c, d = Source(graph), Relay(graph), Relay(graph), Sink(graph)
        e1 = graph.connect(a.i["out"], b.i["in1"])
        e2 = graph.connect(b.i["out"], c.i["in1"])
        e3 = graph.connect(c.i["out"], d.i["in1"])
        scheme = factorize(graph, [[e1], [e2, e3]])
        return scheme, (a, b, c, d), (e1, e2, e3)

    def test_unscoped_crosses_boundary(self, split_chain):
        scheme, (a, b, c, d), edges = split_chain
        assert schedule(b.i["in1"]) == [d.i["in1"], c.i["in1"], b.i["in1"]]

    def test_scope_stops_at_boundary(self, split_chain):
        scheme, (a, b, c, d), (e1, e2, e3) = split_chain
        s1 = scheme.subgraph_of(e1)
        order = schedule(b.i["in1"], scope=s1)
        assert order == [b.i["in1"]]
        assert all(iface.edge not in (e2, e3) for iface in order)

    def test_scope_on_other_side(self, split_chain):
        scheme, (a, b, c, d), (e1, e2, e3) = split_chain
        s2 = scheme.subgraph_of(e2)
        order = schedule(c.i["out"], scope=s2)
        assert order == [b.i["out"], c.i["out"]]
        assert all(iface.edge is not e1 for iface in order)

    def test_target_outside_scope_rejected(self, split_chain):
        scheme, (a, b, c, d), (e1, e2, e3) = split_chain
        with pytest.raises(ScheduleError):
            schedule(c.i["out"], scope=scheme.subgraph_of(e1))

    def test_scope_ignores_third_subgraph(self, graph):
        a, b, c, d = Source(graph), Relay(graph), Relay(graph), Sink(graph)
        e1 = graph.connect(a.i["out"], b.i["in1"])
        e2 = graph.connect(b.i["out"], c.i["in1"])
        e3 = graph.connect(c.i["out"], d.i["in1"])
        scheme = factorize(graph, [[e1], [e2], [e3]])

        assert schedule(c.i["out"], scope=scheme.subgraph_of(e3)) == [c.i["out"]]
        with pytest.raises(ScheduleError):
            schedule(c.i["out"], scope=scheme.subgraph_of(e1))


class TestPartialSchedule:
    """Test completion of partial schedules."""

    def test_caller_order_preserved(self, chain):
        graph, a, b, c = chain
        order = complete_partial_schedule([c.i["out"], a.i["out"]])
        assert order == [a.i["out"], b.i["out"], c.i["out"]]

        order2 = complete_partial_schedule([b.i["out"], c.i["out"]])
        assert order2 == [a.i["out"], b.i["out"], c.i["out"]]

    def test_requested_entries_keep_relative_order(self, graph):
        a1, b1 = Source(graph), Relay(graph)
        a2, b2 = Source(graph), Relay(graph)
        graph.connect(a1.i["out"], b1.i["in1"])
        graph.connect(a2.i["out"], b2.i["in1"])

        order = complete_partial_schedule([b2.i["out"], b1.i["out"]])

        assert order.index(b2.i["out"]) < order.index(b1.i["out"])
        assert order == [a2.i["out"], b2.i["out"], a1.i["out"], b1.i["out"]]

    def test_empty_rejected(self):
        with pytest.raises(ScheduleError):
            complete_partial_schedule([])

    def test_cross_subgraph_rejected(self, chain):
        graph, a, b, c = chain
        e1, e2 = graph.edges
        scheme = factorize(graph, [[e1], [e2]])
        with pytest.raises(CrossSubgraphPartialSchedule) as exc:
            complete_partial_schedule([a.i["out"], c.i["in1"]], scheme=scheme)
        assert exc.value.interface is c.i["in1"]

    def test_dangling_entry_rejected_with_scheme(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        with pytest.raises(CrossSubgraphPartialSchedule) as exc:
            complete_partial_schedule([b.i["out"], c.i["out"]], scheme=scheme)
        assert exc.value.interface is c.i["out"]

    def test_outside_scope_rejected(self, chain):
        graph, a, b, c = chain
        e1, e2 = graph.edges
        scheme = factorize(graph, [[e1], [e2]])
        with pytest.raises(CrossSubgraphPartialSchedule):
            complete_partial_schedule([b.i["out"]], scope=scheme.subgraph_of(e1))


class TestSubgraphSchedule:
    """Test internal schedules of subgraphs."""

    @pytest.fixture
    def factor_model(self, graph):
        f = Mixer(graph, id="F")
        s_m, s_w, k = Source(graph, id="Sm"), Source(graph, id="Sw"), Sink(graph, id="K")
        e1 = graph.connect(s_m.i["out"], f.i["in1"])
        e2 = graph.connect(s_w.i["out"], f.i["in2"])
        e3 = graph.connect(f.i["out"], k.i["in1"])
        return graph, (f, s_m, s_w, k), (e1, e2, e3)

    def test_univariate_outbound(self, factor_model):
        graph, (f, s_m, s_w, k), (e1, e2, e3) = factor_model
        scheme = factorize(graph, [[e1], [e2], [e3]])
        sg = schedule_subgraph(scheme.subgraph_of(e1), scheme)
        assert sg.internal_schedule == [s_m.i["out"], f.i["in1"]]

    def test_structured_subgraph(self, factor_model):
        graph, (f, s_m, s_w, k), (e1, e2, e3) = factor_model
        scheme = factorize(graph, [[e1, e3]])
        sg = schedule_subgraph(scheme.subgraph_of(e1), scheme)
        assert sg.internal_schedule == [k.i["in1"], s_m.i["out"]]

    def test_time_wrap(self, graph):
        prev, r, nxt = Source(graph, id="prev"), Relay(graph, id="R"), Source(graph, id="next")
        graph.connect(prev.i["out"], r.i["in1"])
        graph.connect(r.i["out"], nxt.i["out"])
        scheme = factorize(graph)
        scheme.add_time_wrap(r.i["out"], prev.i["out"])

        sg = schedule_subgraph(scheme.subgraphs[0], scheme)

        assert sg.internal_schedule == [prev.i["out"], r.i["out"]]

    def test_write_buffer_on_edge(self, graph):
        prev, r, nxt = Source(graph, id="prev"), Relay(graph, id="R"), Source(graph, id="next")
        graph.connect(prev.i["out"], r.i["in1"])
        e2 = graph.connect(r.i["out"], nxt.i["out"])
        scheme = factorize(graph)
        scheme.write_buffer(e2)

        sg = schedule_subgraph(scheme.subgraphs[0], scheme)

        assert sg.internal_schedule == [prev.i["out"], r.i["out"], nxt.i["out"]]

    def test_foreign_time_wrap_ignored(self, factor_model):
        graph, (f, s_m, s_w, k), (e1, e2, e3) = factor_model
        scheme = factorize(graph, [[e1], [e2], [e3]])
        scheme.add_time_wrap(s_w.i["out"], s_m.i["out"])
        sg = schedule_subgraph(scheme.subgraph_of(e1), scheme)
        assert s_w.i["out"] not in sg.internal_schedule

    def test_loop_in_subgraph(self, graph):
        m = Mixer(graph, id="M")
        x, y, z = Relay(graph, id="X"), Relay(graph, id="Y"), Relay(graph, id="Z")
        s = Source(graph, id="S")
        loop_edges = [
            graph.connect(m.i["out"], x.i["in1"]),
            graph.connect(x.i["out"], y.i["in1"]),
            graph.connect(y.i["out"], z.i["in1"]),
            graph.connect(z.i["out"], m.i["in1"]),
        ]
        graph.connect(s.i["out"], m.i["in2"])
        scheme = factorize(graph, [loop_edges])

        with pytest.raises(UnbrokenLoopError) as exc:
            schedule_subgraph(scheme.subgraphs[0], scheme)
        assert exc.value.edge is loop_edges[0]
        assert "loopy subgraph" in str(exc.value)

    def test_empty_schedule(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        sg = schedule_subgraph(scheme.subgraphs[0], scheme)
        assert sg.internal_schedule == []

    def test_schedule_all(self, factor_model):
        graph, (f, s_m, s_w, k), (e1, e2, e3) = factor_model
        scheme = factorize(graph, [[e1], [e2], [e3]])
        schedule_all(scheme)
        assert [sg.internal_schedule for sg in scheme] == [
            [s_m.i["out"], f.i["in1"]],
            [s_w.i["out"], f.i["in2"]],
            [k.i["in1"], f.i["out"]],
        ]

    def test_commit_schedule(self, chain):
        graph, a, b, c = chain
        scheme = factorize(graph)
        committed = commit_schedule(b.i["out"], scheme)
        assert scheme.subgraphs[0].internal_schedule == committed
        assert committed == [a.i["out"], b.i["out"]]

    def test_concurrent_commits(self, factor_model):
        graph, (f, s_m, s_w, k), (e1, e2, e3) = factor_model
        scheme = factorize(graph, [[e1], [e2], [e3]])

        with ThreadPoolExecutor(max_workers=4) as pool:
            done = list(pool.map(lambda sg: schedule_subgraph(sg, scheme), list(scheme) * 4))

        assert len(done) == 12
        assert scheme.subgraph_of(e1).internal_schedule == [s_m.i["out"], f.i["in1"]]
        assert scheme.subgraph_of(e3).internal_schedule == [k.i["in1"], f.i["out"]]
