"""
mpsched/graph/structure.py

Factor graph structure.

A factor graph consists of:
- Nodes with a kind and a fixed, ordered tuple of named interfaces
- Edges, each joining two partner interfaces
- Variables labelling one or more edges

Every element is constructed against an explicit FactorGraph; there is no
implicit current graph.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

import networkx as nx

from mpsched.core.errors import AlreadyConnected, DuplicateIdentifier
from mpsched.core.logging import get_logger
from mpsched.core.registry import IDRegistry

logger = get_logger(__name__)


class Interface:
    """
    A port of a node.

    Attributes:
        node: Owning node
        role: Role name (e.g. "out", "in1")
        index: Position in the node's interface tuple
        edge: Connecting edge (None while dangling)
        partner: Interface on the other side of the edge (None while dangling)
        message: Current outbound message (None when not yet computed)
    """

    __slots__ = ("node", "role", "index", "edge", "partner", "message")

    def __init__(self, node: "FactorNode", role: str, index: int):
        self.node = node
        self.role = role
        self.index = index
        self.edge: Optional[Edge] = None
        self.partner: Optional[Interface] = None
        self.message: Any = None

    @property
    def has_message(self) -> bool:
        """True if an outbound message is currently present."""
        return self.message is not None

    def __repr__(self) -> str:
        return f"Interface({self.node.id}.{self.role})"


class Edge:
    """
    Channel between two partner interfaces.

    Carries one message in each direction: a.message flows from a's node
    towards b's node and vice versa.
    """

    def __init__(self, a: Interface, b: Interface, id: str, variable: Optional["Variable"] = None):
        if a.partner is not None:
            raise AlreadyConnected(a)
        if b.partner is not None:
            raise AlreadyConnected(b)
        self.id = id
        self.a = a
        self.b = b
        self.variable = variable
        a.edge = b.edge = self
        a.partner = b
        b.partner = a

    @property
    def interfaces(self) -> Tuple[Interface, Interface]:
        return (self.a, self.b)

    def nodes(self) -> Tuple["FactorNode", "FactorNode"]:
        return (self.a.node, self.b.node)

    def __repr__(self) -> str:
        return f"Edge({self.id}: {self.a.node.id}.{self.a.role} -- {self.b.node.id}.{self.b.role})"


class Variable:
    """A named random quantity labelling one or more edges."""

    def __init__(self, graph: "FactorGraph", id: Optional[str] = None):
        self.id = id if id is not None else graph.generate_id("variable")
        self.edges: List[Edge] = []
        graph.add_variable(self)

    def __repr__(self) -> str:
        return f"Variable({self.id})"


class FactorNode:
    """
    Base class for computational nodes.

    Subclasses declare `kind` (rule dispatch key) and `roles` (ordered
    interface names). Interfaces are created at construction and the node is
    registered with the graph.
    """

    kind: str = "node"
    roles: Tuple[str, ...] = ()

    def __init__(self, graph: "FactorGraph", id: Optional[str] = None):
        self.id = id if id is not None else graph.generate_id(type(self).__name__)
        self.interfaces: Tuple[Interface, ...] = tuple(
            Interface(self, role, k) for k, role in enumerate(self.roles)
        )
        self.i: Dict[str, Interface] = {iface.role: iface for iface in self.interfaces}
        graph.add_node(self)

    @property
    def is_constant(self) -> bool:
        """True for nodes whose outbound is a literal value."""
        return False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"


class FactorGraph:
    """
    Registry of nodes, edges and variables.

    Maintains:
    - Nodes by id
    - Edges in creation order
    - Variables by id
    - Per-kind id counters
    """

    def __init__(self):
        self.nodes: Dict[str, FactorNode] = {}
        self.edges: List[Edge] = []
        self.variables: Dict[str, Variable] = {}
        self.ids = IDRegistry()

    def generate_id(self, kind: str) -> str:
        """Generate a unique id for the given element kind."""
        return self.ids.generate(kind)

    def add_node(self, node: FactorNode) -> "FactorGraph":
        """Register a node."""
        if node.id in self.nodes:
            raise DuplicateIdentifier("FactorNode", node.id)
        self.nodes[node.id] = node
        return self

    def add_variable(self, var: Variable) -> "FactorGraph":
        """Register a variable."""
        if var.id in self.variables:
            raise DuplicateIdentifier("Variable", var.id)
        self.variables[var.id] = var
        return self

    def has_node(self, node: FactorNode) -> bool:
        """Check if this exact node object is part of the graph."""
        return self.nodes.get(node.id) is node

    def has_variable(self, var: Variable) -> bool:
        """Check if this exact variable object is part of the graph."""
        return self.variables.get(var.id) is var

    def connect(self, a: Interface, b: Interface, variable: Optional[Variable] = None) -> Edge:
        """
        Join two interfaces with a new edge.

        Args:
            a, b: Interfaces to connect; both must be free
            variable: Optional variable labelling the edge

        Returns:
            The new Edge

        Raises:
            AlreadyConnected: If either interface already has a partner; no
                edge id is consumed
        """
        for iface in (a, b):
            if iface.partner is not None:
                raise AlreadyConnected(iface)
        edge = Edge(a, b, id=self.generate_id("edge"), variable=variable)
        self.edges.append(edge)
        if variable is not None:
            variable.edges.append(edge)
        logger.debug("edge_connected", edge=edge.id, a=repr(a), b=repr(b))
        return edge

    def interfaces(self) -> Iterator[Interface]:
        """Iterate over all interfaces of all nodes."""
        for node in self.nodes.values():
            yield from node.interfaces

    def clear_messages(self) -> None:
        """Reset every interface's message slot."""
        for iface in self.interfaces():
            iface.message = None

    def to_networkx(self) -> nx.MultiGraph:
        """
        Build a networkx view of the graph.

        Returns:
            MultiGraph with node ids as vertices and one keyed edge per Edge
            (key = edge id, attribute "edge" = the Edge)
        """
        g = nx.MultiGraph()
        for nid, node in self.nodes.items():
            g.add_node(nid, kind=node.kind)
        for e in self.edges:
            g.add_edge(e.a.node.id, e.b.node.id, key=e.id, edge=e)
        return g

    def __repr__(self) -> str:
        return f"FactorGraph(nodes={len(self.nodes)}, edges={len(self.edges)}, variables={len(self.variables)})"
