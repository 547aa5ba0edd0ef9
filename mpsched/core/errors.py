"""
mpsched/core/errors.py

Exception taxonomy.

All errors are terminal for the call that raised them: they point at a
structural defect of the graph or an authoring defect of the rule catalog.
"""

from __future__ import annotations

from typing import Any, Optional


class MPSchedError(Exception):
    """Base class for all mpsched errors."""


# ----------------------------------------------------------------------
# Graph construction
# ----------------------------------------------------------------------

class GraphError(MPSchedError, ValueError):
    """Invalid graph structure."""


class DuplicateIdentifier(GraphError):
    """An element with the same id is already registered in the graph."""

    def __init__(self, kind: str, ident: str):
        self.kind = kind
        self.ident = ident
        super().__init__(f"Graph already contains a {kind} with id {ident}")


class AlreadyConnected(GraphError):
    """An interface that already has a partner was connected again."""

    def __init__(self, interface: Any):
        self.interface = interface
        super().__init__(f"{interface} is already connected to {interface.partner}")


class DisconnectedInterface(GraphError):
    """An interface has no partner at traversal time."""

    def __init__(self, interface: Any):
        self.interface = interface
        super().__init__(
            f"Disconnected interface should be connected: interface "
            f"#{interface.index} ({interface.role}) of {interface.node.kind} {interface.node.id}"
        )


# ----------------------------------------------------------------------
# Scheduling
# ----------------------------------------------------------------------

class ScheduleError(MPSchedError, ValueError):
    """Schedule generation failed."""


class UnbrokenLoopError(ScheduleError):
    """A dependency cycle contains no interface with a pre-seeded message."""

    def __init__(self, interface: Any, edge: Optional[Any] = None):
        self.interface = interface
        self.edge = edge
        msg = (
            f"Loop detected around {interface}. "
            f"Consider setting an initial message somewhere in this loop."
        )
        if edge is not None:
            msg = f"Cannot generate internal schedule for possibly loopy subgraph with internal edge {edge}. {msg}"
        super().__init__(msg)


class CrossSubgraphPartialSchedule(ScheduleError):
    """A partial schedule spans more than one subgraph."""

    def __init__(self, interface: Any):
        self.interface = interface
        super().__init__(
            f"Not all interfaces in the partial schedule belong to the same subgraph: {interface}"
        )


# ----------------------------------------------------------------------
# Rule dispatch
# ----------------------------------------------------------------------

class DispatchError(MPSchedError, LookupError):
    """Rule lookup failed."""


class NoApplicableRule(DispatchError):
    """No registered rule matches the observed inbound signature."""

    def __init__(self, node_kind: str, role: str, signature: Any):
        self.node_kind = node_kind
        self.role = role
        self.signature = signature
        names = tuple(getattr(k, "name", k) for k in signature)
        super().__init__(
            f"No applicable rule for {node_kind} outbound '{role}' with inbound types {names}"
        )


class AmbiguousRule(DispatchError):
    """Two rules match equally specifically."""

    def __init__(self, first: Any, second: Any):
        self.first = first
        self.second = second
        super().__init__(
            f"Rules {first.name} and {second.name} overlap without either being more specific"
        )


# ----------------------------------------------------------------------
# Argument assembly
# ----------------------------------------------------------------------

class AssemblyError(MPSchedError, RuntimeError):
    """Argument assembly failed."""


class MissingInboundReference(AssemblyError):
    """No earlier schedule entry produced a required inbound message."""

    def __init__(self, interface: Any):
        self.interface = interface
        super().__init__(
            f"No schedule entry computes the outbound message on {interface}; "
            f"the schedule is not in dependency order"
        )


class UnavailableApproximationPoint(AssemblyError):
    """A fallback inbound policy needed a message the schedule does not provide yet."""

    def __init__(self, interface: Any, node: Any):
        self.interface = interface
        self.node = node
        super().__init__(
            f"The {node.kind} node {node.id} backward rule uses the incoming message on {interface} "
            f"to determine the approximation point. Try altering the variable order in the "
            f"scheduler to first perform a forward pass."
        )
