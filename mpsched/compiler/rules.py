"""
mpsched/compiler/rules.py

Rule catalog and dispatch.

A rule computes the outbound message on one interface role of a node kind.
It is keyed by (node kind, outbound role) and carries one inbound pattern per
*other* interface of the node, in interface order. Dispatch picks the unique
most specific rule whose patterns match the observed inbound kinds.

Ambiguity is an authoring error and is rejected at registration: two rules
whose patterns overlap, where neither dominates the other, are only accepted
if the rule at their pointwise meet is already registered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from mpsched.core.errors import AmbiguousRule, NoApplicableRule
from mpsched.core.logging import get_logger
from mpsched.ir.schema import (
    Kind,
    Signature,
    dominates,
    meet,
    overlaps,
    signature_matches,
    signature_names,
)

logger = get_logger(__name__)

SUM_PRODUCT = "sum_product"
VARIATIONAL = "variational"


@dataclass(frozen=True)
class Rule:
    """
    A local update rule.

    Attributes:
        name: Rule identifier (e.g. "SPAdditionOutGG")
        node_kind: Node kind the rule applies to
        role: Interface role whose outbound it computes
        inbound: One pattern per other interface, in interface order
        outbound: Kind of the produced message
        algorithm: SUM_PRODUCT (inbound messages) or VARIATIONAL (marginals)
    """
    name: str
    node_kind: str
    role: str
    inbound: Signature
    outbound: Kind
    algorithm: str = SUM_PRODUCT

    @property
    def key(self) -> Tuple[str, str]:
        return (self.node_kind, self.role)

    def is_applicable(self, signature: Signature) -> bool:
        """Check whether an observed signature matches this rule."""
        return signature_matches(signature, self.inbound)

    def __repr__(self) -> str:
        return f"Rule({self.name}: {self.node_kind}.{self.role} {signature_names(self.inbound)} -> {self.outbound.name})"


def _meet_signature(a: Signature, b: Signature) -> Optional[Signature]:
    out = []
    for x, y in zip(a, b):
        m = meet(x, y)
        if m is None:
            return None
        out.append(m)
    return tuple(out)


class RuleRegistry:
    """
    Catalog of rules indexed by (node kind, outbound role).

    Maintains:
    - Rules per key in registration order
    - Rule lookup by name
    """

    def __init__(self, algorithm: str = SUM_PRODUCT):
        self.algorithm = algorithm
        self._rules: Dict[Tuple[str, str], List[Rule]] = {}
        self._by_name: Dict[str, Rule] = {}

    def register(self, rule: Rule) -> Rule:
        """
        Add a rule to the catalog.

        Raises:
            AmbiguousRule: if the rule duplicates an existing pattern or
                overlaps one without a more specific tie-breaker
        """
        if rule.name in self._by_name:
            raise AmbiguousRule(self._by_name[rule.name], rule)

        siblings = [r for r in self._rules.get(rule.key, []) if len(r.inbound) == len(rule.inbound)]
        patterns = {r.inbound for r in siblings}
        for other in siblings:
            if other.inbound == rule.inbound:
                raise AmbiguousRule(other, rule)
            if not all(overlaps(x, y) for x, y in zip(rule.inbound, other.inbound)):
                continue
            if dominates(rule.inbound, other.inbound) or dominates(other.inbound, rule.inbound):
                continue
            if _meet_signature(rule.inbound, other.inbound) in patterns:
                continue
            raise AmbiguousRule(other, rule)

        self._rules.setdefault(rule.key, []).append(rule)
        self._by_name[rule.name] = rule
        return rule

    def add(
        self,
        name: str,
        node_kind: str,
        role: str,
        inbound: Signature,
        outbound: Kind,
    ) -> Rule:
        """Build and register a rule for this registry's algorithm."""
        return self.register(Rule(name, node_kind, role, tuple(inbound), outbound, self.algorithm))

    def candidates(self, node_kind: str, role: str) -> List[Rule]:
        """All rules registered for a (kind, role) key."""
        return list(self._rules.get((node_kind, role), []))

    def resolve(self, node_kind: str, role: str, signature: Signature) -> Rule:
        """
        Find the most specific applicable rule.

        Args:
            node_kind: Kind of the node
            role: Role of the outbound interface
            signature: Observed kinds of the other interfaces, in order

        Returns:
            The unique most specific matching rule
        """
        signature = tuple(signature)
        matches = [r for r in self._rules.get((node_kind, role), []) if r.is_applicable(signature)]
        if not matches:
            raise NoApplicableRule(node_kind, role, signature)

        best = [
            r for r in matches
            if not any(o is not r and dominates(o.inbound, r.inbound) for o in matches)
        ]
        if len(best) > 1:
            raise AmbiguousRule(best[0], best[1])

        rule = best[0]
        logger.debug(
            "rule_resolved",
            node_kind=node_kind,
            role=role,
            signature=signature_names(signature),
            rule=rule.name,
            candidates=len(matches),
        )
        return rule

    def __getitem__(self, name: str) -> Rule:
        return self._by_name[name]

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


def resolve_rule(registry: RuleRegistry, node_kind: str, role: str, signature: Signature) -> Rule:
    """Functional form of RuleRegistry.resolve."""
    return registry.resolve(node_kind, role, signature)
