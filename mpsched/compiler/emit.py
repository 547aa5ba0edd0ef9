"""
mpsched/compiler/emit.py

Program emission.

Walks a schedule in order and, for every interface:
- infers the observed inbound signature
- resolves the most specific rule
- assembles the rule's arguments
- records the entry so later entries can reference it
"""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from mpsched.compiler.inbounds import assemble_arguments, observed_signature
from mpsched.compiler.rules import VARIATIONAL, RuleRegistry
from mpsched.core.logging import get_logger
from mpsched.graph.partition import PartitioningScheme
from mpsched.graph.structure import Interface
from mpsched.ir.ops import Program, ScheduleEntry

logger = get_logger(__name__)


def _is_local(outbound: Interface, scheme: Optional[PartitioningScheme]) -> bool:
    """True if every port of the outbound's node lies in the outbound's subgraph."""
    if scheme is None or outbound.edge is None:
        return False
    home = scheme.subgraph_of(outbound.edge)
    return all(
        iface.edge is not None and scheme.subgraph_of(iface.edge) is home
        for iface in outbound.node.interfaces
    )


def emit_program(
    schedule: Sequence[Interface],
    registry: RuleRegistry,
    scheme: Optional[PartitioningScheme] = None,
    *,
    local_registry: Optional[RuleRegistry] = None,
    interface_to_entry: Optional[Dict[Interface, ScheduleEntry]] = None,
) -> Program:
    """
    Compile a schedule into a program of resolved entries.

    Args:
        schedule: Interfaces in dependency order
        registry: Rule catalog to dispatch against
        scheme: Partitioning; required to separate internal from external
            slots for variational rules
        local_registry: Catalog for nodes whose ports all lie in one subgraph
            (sum-product updates inside a structured variational subgraph)
        interface_to_entry: Shared map of entries emitted so far; updated in
            place so several programs can reference each other in order

    Returns:
        Program with rule and arguments set on every entry
    """
    if interface_to_entry is None:
        interface_to_entry = {}

    entries = []
    for iface in schedule:
        reg = registry
        if local_registry is not None and registry.algorithm == VARIATIONAL and _is_local(iface, scheme):
            reg = local_registry

        entry = ScheduleEntry(interface=iface)
        signature = observed_signature(iface, interface_to_entry, reg.algorithm, scheme)
        rule = reg.resolve(iface.node.kind, iface.role, signature)
        entry.rule = rule
        entry.outbound = rule.outbound
        entry.arguments = assemble_arguments(entry, rule, interface_to_entry, scheme)

        interface_to_entry[iface] = entry
        entries.append(entry)

    logger.debug("program_emitted", entries=len(entries), algorithm=registry.algorithm)
    return Program(entries=tuple(entries))


def condense(program: Program) -> Program:
    """
    Drop entries computed by constant-producing nodes.

    Their values are inlined into every consumer as literals, so the entries
    are never referenced.
    """
    kept = tuple(e for e in program.entries if not e.node.is_constant)
    if len(kept) != len(program.entries):
        logger.debug("program_condensed", dropped=len(program.entries) - len(kept), kept=len(kept))
    return Program(entries=kept)
