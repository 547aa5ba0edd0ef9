"""
mpsched/compiler/inbounds.py

Argument assembly for schedule entries.

For an entry computing the outbound on interface X, one argument is built
per interface of X's node, in the node's interface order:
- X itself: Absent (its value is being produced)
- partner node is a constant producer: the literal, inlined
- variational rule and the slot lies outside X's subgraph: the edge marginal
- otherwise: the earlier entry that produced the partner's outbound, or the
  message pre-seeded on the partner

Node kinds with auxiliary parameters or alternate inbound policies register
their own collector with `register_collector`.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Optional

from mpsched.compiler.rules import VARIATIONAL, Rule
from mpsched.core.errors import (
    DisconnectedInterface,
    MissingInboundReference,
    UnavailableApproximationPoint,
)
from mpsched.graph.partition import PartitioningScheme
from mpsched.graph.structure import Interface
from mpsched.ir.ops import (
    Absent,
    Argument,
    ArgumentList,
    EntryRef,
    InitialMessage,
    Literal,
    MarginalRef,
    Parameter,
    ScheduleEntry,
)
from mpsched.ir.schema import Kind, Signature, kind_of

EntryMap = Mapping[Interface, ScheduleEntry]
Collector = Callable[[ScheduleEntry, Rule, EntryMap, Optional[PartitioningScheme]], ArgumentList]

_collectors: Dict[str, Collector] = {}


def register_collector(node_kind: str):
    """Decorator registering a custom collector for a node kind."""
    def deco(fn: Collector) -> Collector:
        _collectors[node_kind] = fn
        return fn
    return deco


def _uses_marginal(iface: Interface, outbound: Interface, scheme: Optional[PartitioningScheme]) -> bool:
    if scheme is None or iface.edge is None or outbound.edge is None:
        return True
    return scheme.subgraph_of(iface.edge) is not scheme.subgraph_of(outbound.edge)


def _partner(iface: Interface) -> Interface:
    if iface.partner is None:
        raise DisconnectedInterface(iface)
    return iface.partner


def inbound_kind(
    iface: Interface,
    outbound: Interface,
    interface_to_entry: EntryMap,
    algorithm: str,
    scheme: Optional[PartitioningScheme] = None,
) -> Kind:
    """
    Observed kind of the inbound on one slot.

    Mirrors the argument chosen by `inbound_argument`.
    """
    inbound = _partner(iface)
    if inbound.node.is_constant:
        return Kind.CONSTANT
    if algorithm == VARIATIONAL and _uses_marginal(iface, outbound, scheme):
        return Kind.DISTRIBUTION
    entry = interface_to_entry.get(inbound)
    if entry is not None:
        return entry.outbound
    if inbound.has_message:
        return kind_of(inbound.message)
    raise MissingInboundReference(inbound)


def observed_signature(
    outbound: Interface,
    interface_to_entry: EntryMap,
    algorithm: str,
    scheme: Optional[PartitioningScheme] = None,
) -> Signature:
    """Observed inbound kinds for every other interface of the outbound's node."""
    return tuple(
        inbound_kind(iface, outbound, interface_to_entry, algorithm, scheme)
        for iface in outbound.node.interfaces
        if iface is not outbound
    )


def inbound_argument(
    iface: Interface,
    entry: ScheduleEntry,
    rule: Rule,
    interface_to_entry: EntryMap,
    scheme: Optional[PartitioningScheme] = None,
) -> Argument:
    """Build the argument for one slot."""
    if iface is entry.interface:
        return Absent()
    inbound = _partner(iface)
    if inbound.node.is_constant:
        return Literal(inbound.node.value)
    if rule.algorithm == VARIATIONAL and _uses_marginal(iface, entry.interface, scheme):
        return MarginalRef(iface.edge)
    prior = interface_to_entry.get(inbound)
    if prior is not None:
        return EntryRef(prior)
    if inbound.has_message:
        return InitialMessage(inbound)
    raise MissingInboundReference(inbound)


def collect_inbounds(
    entry: ScheduleEntry,
    rule: Rule,
    interface_to_entry: EntryMap,
    scheme: Optional[PartitioningScheme] = None,
) -> ArgumentList:
    """Default collector: one argument per interface, no parameters."""
    inbounds = tuple(
        inbound_argument(iface, entry, rule, interface_to_entry, scheme)
        for iface in entry.node.interfaces
    )
    return ArgumentList(inbounds=inbounds)


def assemble_arguments(
    entry: ScheduleEntry,
    rule: Rule,
    interface_to_entry: EntryMap,
    scheme: Optional[PartitioningScheme] = None,
) -> ArgumentList:
    """
    Build the argument list for a schedule entry.

    Args:
        entry: Entry being assembled
        rule: Rule chosen for the entry
        interface_to_entry: Entries emitted so far, keyed by their interface
        scheme: Partitioning, used to tell internal from external slots

    Returns:
        ArgumentList in the node's interface order
    """
    collector = _collectors.get(entry.node.kind, collect_inbounds)
    return collector(entry, rule, interface_to_entry, scheme)


@register_collector("nonlinear")
def collect_nonlinear_inbounds(
    entry: ScheduleEntry,
    rule: Rule,
    interface_to_entry: EntryMap,
    scheme: Optional[PartitioningScheme] = None,
) -> ArgumentList:
    """
    Collector for the unscented-transform nonlinear node.

    Appends g (and g_inv for the backward rule when declared) as positional
    parameters and alpha as keyword. Without g_inv the backward rule takes
    the forward message on in1 as its approximation point, so that slot
    references the inbound instead of being Absent.
    """
    node = entry.node
    backward = entry.interface is node.i["in1"]

    inbounds: List[Argument] = []
    for iface in node.interfaces:
        if iface is entry.interface and backward and node.g_inv is None:
            inbound = _partner(iface)
            prior = interface_to_entry.get(inbound)
            if prior is not None:
                inbounds.append(EntryRef(prior))
            elif inbound.has_message:
                inbounds.append(InitialMessage(inbound))
            else:
                raise UnavailableApproximationPoint(inbound, node)
        else:
            inbounds.append(inbound_argument(iface, entry, rule, interface_to_entry, scheme))

    params = [Parameter("g", node.g)]
    if backward and node.g_inv is not None:
        params.append(Parameter("g_inv", node.g_inv))
    if node.alpha is not None:
        params.append(Parameter("alpha", node.alpha, keyword=True))

    return ArgumentList(inbounds=tuple(inbounds), parameters=tuple(params))


@register_collector("nonlinear_importance_sampling")
def collect_sampling_inbounds(
    entry: ScheduleEntry,
    rule: Rule,
    interface_to_entry: EntryMap,
    scheme: Optional[PartitioningScheme] = None,
) -> ArgumentList:
    """Collector for the importance-sampling nonlinear node: default inbounds plus g."""
    args = collect_inbounds(entry, rule, interface_to_entry, scheme)
    return ArgumentList(inbounds=args.inbounds, parameters=(Parameter("g", entry.node.g),))
