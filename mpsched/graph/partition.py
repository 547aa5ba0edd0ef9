"""
mpsched/graph/partition.py

Partitioning of a factor graph's edges into subgraphs.

A partitioning scheme holds:
- Subgraphs: disjoint groups of internal edges covering every edge exactly once
- Time-wraps: (source, sink) interface pairs carrying a message to the next step
- Write-buffers: interfaces or edges whose message/marginal is exported
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Union

import networkx as nx

from mpsched.core.errors import GraphError
from mpsched.core.logging import get_logger
from mpsched.graph.structure import Edge, FactorGraph, FactorNode, Interface

logger = get_logger(__name__)


class Subgraph:
    """
    A region of the graph defined by its internal edges.

    Attributes:
        id: Subgraph identifier
        internal_edges: Edges owned by this subgraph
        internal_schedule: Last committed schedule (interfaces in order)
    """

    def __init__(self, internal_edges: Iterable[Edge], id: str = ""):
        self.id = id
        self.internal_edges: Set[Edge] = set(internal_edges)
        self.internal_schedule: List[Interface] = []
        self._lock = threading.Lock()

    def __contains__(self, edge: Optional[Edge]) -> bool:
        return edge in self.internal_edges

    def nodes(self) -> List[FactorNode]:
        """Nodes touching at least one internal edge, in first-seen order."""
        out: List[FactorNode] = []
        seen: Set[int] = set()
        for e in self._ordered_edges():
            for n in e.nodes():
                if id(n) not in seen:
                    seen.add(id(n))
                    out.append(n)
        return out

    @property
    def external_edges(self) -> List[Edge]:
        """Edges that touch a node of this subgraph but are not internal to it."""
        out: List[Edge] = []
        seen: Set[Edge] = set()
        for n in self.nodes():
            for iface in n.interfaces:
                e = iface.edge
                if e is None or e in self.internal_edges or e in seen:
                    continue
                seen.add(e)
                out.append(e)
        return out

    def nodes_connected_to_external_edges(self) -> List[FactorNode]:
        """Nodes of this subgraph with at least one external edge."""
        ext = set(self.external_edges)
        return [n for n in self.nodes() if any(iface.edge in ext for iface in n.interfaces)]

    def commit_schedule(self, schedule: Sequence[Interface]) -> List[Interface]:
        """Store a schedule as this subgraph's internal schedule."""
        with self._lock:
            self.internal_schedule = list(schedule)
            return self.internal_schedule

    def _ordered_edges(self) -> List[Edge]:
        # Sets are unordered; sort by id for deterministic traversal
        return sorted(self.internal_edges, key=lambda e: _edge_sort_key(e.id))

    def __repr__(self) -> str:
        return f"Subgraph({self.id}, edges={len(self.internal_edges)})"


def _edge_sort_key(edge_id: str):
    digits = "".join(ch for ch in edge_id if ch.isdigit())
    prefix = edge_id.rstrip("0123456789")
    return (prefix, int(digits) if digits else 0, edge_id)


@dataclass(frozen=True)
class TimeWrap:
    """
    Recurrence link between algorithm steps.

    Attributes:
        source: Interface whose outbound message ends the current step
        sink: Interface that receives it at the start of the next step
    """
    source: Interface
    sink: Interface


WriteTarget = Union[Interface, Edge]


class PartitioningScheme:
    """
    Full partition of a graph's edges plus auxiliary consumers.

    Attributes:
        graph: The partitioned graph
        subgraphs: Disjoint subgraphs covering every edge once
        time_wraps: Recurrence links
        write_buffers: Export targets -> caller-visible buffers
    """

    def __init__(self, graph: FactorGraph, subgraphs: Sequence[Subgraph]):
        self.graph = graph
        self.subgraphs: List[Subgraph] = list(subgraphs)
        self.time_wraps: List[TimeWrap] = []
        self.write_buffers: Dict[WriteTarget, List[Any]] = {}
        self._edge_to_subgraph: Dict[Edge, Subgraph] = {}
        self._validate()

    def _validate(self) -> None:
        graph_edges = set(self.graph.edges)
        for sg in self.subgraphs:
            for e in sg.internal_edges:
                if e not in graph_edges:
                    raise GraphError(f"{sg} contains {e}, which is not part of the graph")
                if e in self._edge_to_subgraph:
                    raise GraphError(f"{e} belongs to both {self._edge_to_subgraph[e]} and {sg}")
                self._edge_to_subgraph[e] = sg
        missing = [e for e in self.graph.edges if e not in self._edge_to_subgraph]
        if missing:
            raise GraphError(f"Partition does not cover edges: {missing}")

    def subgraph_of(self, edge: Edge) -> Subgraph:
        """Get the subgraph that owns an edge."""
        sg = self._edge_to_subgraph.get(edge) if edge is not None else None
        if sg is None:
            raise GraphError(f"{edge} is not part of this partitioning")
        return sg

    def add_time_wrap(self, source: Interface, sink: Interface) -> TimeWrap:
        """Declare that source's outbound feeds sink in the next step."""
        for iface in (source, sink):
            if iface.edge is None:
                raise GraphError(f"Time-wrap interface {iface} is not connected")
        tw = TimeWrap(source=source, sink=sink)
        self.time_wraps.append(tw)
        return tw

    def write_buffer(self, target: WriteTarget, buffer: Optional[List[Any]] = None) -> List[Any]:
        """
        Register an export target.

        Args:
            target: Interface (its outbound message) or Edge (its marginal)
            buffer: Optional list to append results to; created if omitted

        Returns:
            The buffer associated with the target
        """
        edge = target if isinstance(target, Edge) else target.edge
        if edge is None:
            raise GraphError(f"Write-buffer target {target} is not connected")
        if buffer is None:
            buffer = []
        self.write_buffers[target] = buffer
        return buffer

    def write_buffer_edge(self, target: WriteTarget) -> Edge:
        """The edge a write-buffer target lives on."""
        return target if isinstance(target, Edge) else target.edge

    def __iter__(self):
        return iter(self.subgraphs)

    def __len__(self) -> int:
        return len(self.subgraphs)

    def __repr__(self) -> str:
        return f"PartitioningScheme(subgraphs={len(self.subgraphs)}, time_wraps={len(self.time_wraps)}, write_buffers={len(self.write_buffers)})"


def factorize(
    graph: FactorGraph,
    clusters: Sequence[Iterable[Edge]] = (),
) -> PartitioningScheme:
    """
    Partition a graph into subgraphs.

    Each explicit cluster becomes one subgraph. The remaining edges are split
    into connected components, joined through the nodes they share.

    Args:
        graph: Graph to partition
        clusters: Explicit groups of edges

    Returns:
        PartitioningScheme covering every edge exactly once
    """
    subgraphs: List[Subgraph] = []
    claimed: Set[Edge] = set()
    for cluster in clusters:
        edges = set(cluster)
        subgraphs.append(Subgraph(edges, id=graph.generate_id("subgraph")))
        claimed |= edges

    rest = graph.to_networkx()
    rest.remove_edges_from([(e.a.node.id, e.b.node.id, e.id) for e in claimed])
    rest.remove_nodes_from(list(nx.isolates(rest)))

    components = sorted(
        nx.connected_components(rest),
        key=lambda comp: min(_edge_sort_key(k) for _, _, k in rest.edges(comp, keys=True)),
    )
    for comp in components:
        edges = {d["edge"] for _, _, d in rest.subgraph(comp).edges(data=True)}
        subgraphs.append(Subgraph(edges, id=graph.generate_id("subgraph")))

    logger.debug("graph_factorized", clusters=len(clusters), subgraphs=len(subgraphs))
    return PartitioningScheme(graph, subgraphs)


def factorize_mean_field(graph: FactorGraph) -> PartitioningScheme:
    """
    Naive mean-field factorization.

    Every edge gets its own subgraph, except edges attached to constant
    nodes, which are collected into one subgraph of their own (clamped
    values are never updated).
    """
    clamped = [e for e in graph.edges if any(n.is_constant for n in e.nodes())]
    clusters: List[List[Edge]] = [[e] for e in graph.edges if e not in set(clamped)]
    if clamped:
        clusters.append(clamped)
    return factorize(graph, clusters)
