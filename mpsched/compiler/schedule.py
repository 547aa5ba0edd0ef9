"""
mpsched/compiler/schedule.py

Dependency scheduling by depth-first search.

The outbound message on an interface can be computed once every other
interface of its node has an inbound message. That inbound message is the
outbound of the partner interface, unless the partner already holds one.
A post-order DFS over this relation yields a valid evaluation order:
- memoized: an interface already in the result is never revisited
- cycle-guarded: meeting an interface on the active stack means the loop has
  no pre-seeded message to break it

IMPORTANT: the result depends on which interfaces currently hold a message.
The same graph with different messages present yields a different schedule,
so regenerate after messages change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Set

from mpsched.core.errors import (
    CrossSubgraphPartialSchedule,
    DisconnectedInterface,
    ScheduleError,
    UnbrokenLoopError,
)
from mpsched.core.logging import get_logger
from mpsched.graph.partition import PartitioningScheme, Subgraph
from mpsched.graph.structure import Edge, Interface

logger = get_logger(__name__)


@dataclass
class _Frame:
    """An interface being resolved and the node ports still to inspect."""
    interface: Interface
    pending: Iterator[Interface]


class _Traversal:
    """
    State of one top-level scheduling call.

    Attributes:
        scope: Optional subgraph restricting the search
        result: Resolved interfaces in dependency order
        stack: Frames of interfaces currently being resolved
    """

    def __init__(self, scope: Optional[Subgraph] = None):
        self.scope = scope
        self.result: List[Interface] = []
        self.stack: List[_Frame] = []
        self._done: Set[Interface] = set()
        self._active: Set[Interface] = set()

    def __contains__(self, iface: Interface) -> bool:
        return iface in self._done

    def resolve(self, target: Interface) -> None:
        """Resolve target and its unmet dependencies into the result."""
        if target in self._done:
            return
        self._push(target)
        while self.stack:
            frame = self.stack[-1]
            dep = self._next_dependency(frame)
            if dep is None:
                self.stack.pop()
                self._active.discard(frame.interface)
                self._done.add(frame.interface)
                self.result.append(frame.interface)
            else:
                self._push(dep)

    def _push(self, iface: Interface) -> None:
        if iface in self._active:
            raise UnbrokenLoopError(iface)
        self._active.add(iface)
        self.stack.append(_Frame(iface, iter(iface.node.interfaces)))

    def _next_dependency(self, frame: _Frame) -> Optional[Interface]:
        outbound = frame.interface
        for iface in frame.pending:
            if iface is outbound:
                continue
            if self.scope is not None and iface.edge not in self.scope:
                continue
            if iface.partner is None:
                raise DisconnectedInterface(iface)
            inbound = iface.partner
            if not inbound.has_message and inbound not in self._done:
                return inbound
        return None


def _unique(interfaces: Iterable[Interface]) -> List[Interface]:
    """Deduplicate preserving first occurrence."""
    seen: Set[Interface] = set()
    out: List[Interface] = []
    for iface in interfaces:
        if iface not in seen:
            seen.add(iface)
            out.append(iface)
    return out


def schedule(target: Interface, scope: Optional[Subgraph] = None) -> List[Interface]:
    """
    Generate a schedule for the outbound message on one interface.

    Args:
        target: Interface whose outbound message is requested
        scope: Optional subgraph containing the target's edge; ports whose
            edge lies in another subgraph are not followed

    Returns:
        Interfaces in an order where every entry's required inbounds are
        computed by earlier entries (or already present)

    Raises:
        ScheduleError: If the target's edge is not internal to scope
    """
    if scope is not None and target.edge not in scope:
        raise ScheduleError(f"Target {target} is not internal to {scope}")
    t = _Traversal(scope=scope)
    t.resolve(target)
    logger.debug("schedule_generated", target=repr(target), length=len(t.result), scoped=scope is not None)
    return t.result


def complete_partial_schedule(
    entries: Sequence[Interface],
    scope: Optional[Subgraph] = None,
    scheme: Optional[PartitioningScheme] = None,
) -> List[Interface]:
    """
    Complete a partial schedule with its unmet dependencies.

    The caller's relative order is preserved; dependencies of each entry are
    inserted before it.

    Args:
        entries: Interfaces in the required order
        scope: Subgraph all entries must be internal to
        scheme: Partitioning used to check that entries share one subgraph
            when no scope is given

    Returns:
        Complete schedule
    """
    if len(entries) == 0:
        raise ScheduleError("Partial schedule should contain at least one entry")

    if scope is not None:
        for iface in entries:
            if iface.edge not in scope:
                raise CrossSubgraphPartialSchedule(iface)
    elif scheme is not None:
        for iface in entries:
            if iface.edge is None:
                raise CrossSubgraphPartialSchedule(iface)
        first = scheme.subgraph_of(entries[0].edge)
        for iface in entries[1:]:
            if scheme.subgraph_of(iface.edge) is not first:
                raise CrossSubgraphPartialSchedule(iface)

    t = _Traversal()
    for iface in entries:
        t.resolve(iface)
    logger.debug("partial_schedule_completed", requested=len(entries), length=len(t.result))
    return t.result


def schedule_subgraph(subgraph: Subgraph, scheme: PartitioningScheme) -> Subgraph:
    """
    Generate and commit the internal schedule of a subgraph.

    The schedule is the concatenation of:
    1. inbound messages over internal edges for every node that also touches
       an external edge
    2. the outbound on the internal edge of such nodes that have exactly one
       internal edge (naive variational update needs it directly)
    3. outbounds feeding time-wraps owned by this subgraph
    4. outbounds requested by write-buffers owned by this subgraph
    deduplicated preserving first occurrence.

    Returns:
        The subgraph, with internal_schedule set
    """
    internal = _Traversal(scope=subgraph)
    univariate: List[Interface] = []

    for node in subgraph.nodes_connected_to_external_edges():
        outbound: List[Interface] = []
        for iface in node.interfaces:
            if iface.edge not in subgraph:
                continue
            if iface not in internal and iface not in univariate:
                outbound.append(iface)
            try:
                internal.resolve(iface.partner)
            except UnbrokenLoopError as exc:
                raise UnbrokenLoopError(exc.interface, edge=iface.edge) from exc
        if len(outbound) == 1:
            univariate.append(outbound[0])

    wraps: List[Interface] = []
    for tw in scheme.time_wraps:
        if scheme.subgraph_of(tw.source.edge) is subgraph:
            wraps.extend(schedule(tw.source, scope=subgraph))

    buffers: List[Interface] = []
    for target in scheme.write_buffers:
        edge = scheme.write_buffer_edge(target)
        if scheme.subgraph_of(edge) is not subgraph:
            continue
        targets = (edge.a, edge.b) if isinstance(target, Edge) else (target,)
        for iface in targets:
            buffers.extend(schedule(iface, scope=subgraph))

    committed = subgraph.commit_schedule(_unique(internal.result + univariate + wraps + buffers))
    if not committed:
        logger.warning("empty_subgraph_schedule", subgraph=subgraph.id)
    logger.debug(
        "subgraph_scheduled",
        subgraph=subgraph.id,
        internal=len(internal.result),
        univariate=len(univariate),
        time_wraps=len(wraps),
        write_buffers=len(buffers),
        length=len(committed),
    )
    return subgraph


def schedule_all(scheme: PartitioningScheme) -> PartitioningScheme:
    """Generate internal schedules for every subgraph of a scheme."""
    for sg in scheme.subgraphs:
        schedule_subgraph(sg, scheme)
    return scheme


def commit_schedule(target: Interface, scheme: PartitioningScheme) -> List[Interface]:
    """Schedule one target and store it on the subgraph owning its edge."""
    return scheme.subgraph_of(target.edge).commit_schedule(schedule(target))


def schedule_violations(interfaces: Sequence[Interface], scope: Optional[Subgraph] = None) -> List[Interface]:
    """
    Check dependency order of a schedule.

    Returns:
        Entries with a required inbound that is neither present nor computed
        by an earlier entry (empty for a valid schedule)
    """
    computed: Set[Interface] = set()
    bad: List[Interface] = []
    for outbound in interfaces:
        for iface in outbound.node.interfaces:
            if iface is outbound:
                continue
            if scope is not None and iface.edge not in scope:
                continue
            inbound = iface.partner
            if inbound is None or not (inbound.has_message or inbound in computed):
                bad.append(outbound)
                break
        computed.add(outbound)
    return bad
