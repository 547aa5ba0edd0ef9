"""
mpsched/ir/schema.py

Type schema for inbound signatures.

Key types:
- Kind: message/value families arranged in a small subtype lattice
- Signature: ordered tuple of observed Kinds, one per inbound slot
- Message: an opaque computed value tagged with its Kind

A pattern Kind p matches an observed Kind o when o is p or a descendant of p.
DISTRIBUTION stands for any probability distribution; it is also the
observed kind of a marginal whose family is not known at compile time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, FrozenSet, Optional, Tuple, TypeAlias

import numpy as np


class Kind(Enum):
    """Inbound value kinds."""
    ANY = 0
    ABSENT = 1                            # Slot being computed, no inbound value
    DISTRIBUTION = 2                      # Any distribution; unknown-family marginals
    POINT_MASS = 3
    CONSTANT = 4                          # Literal value inlined from a constant node
    GAUSSIAN = 10
    GAUSSIAN_MEAN_VARIANCE = 11
    GAUSSIAN_MEAN_PRECISION = 12
    GAUSSIAN_WEIGHTED_MEAN_PRECISION = 13
    GAMMA = 20
    BETA = 21
    BERNOULLI = 22
    SAMPLE_LIST = 30
    FUNCTION = 31                         # Unnormalized log-pdf


# Direct parents of each kind; ANY is the single root
PARENTS: Dict[Kind, Tuple[Kind, ...]] = {
    Kind.ANY: (),
    Kind.ABSENT: (Kind.ANY,),
    Kind.DISTRIBUTION: (Kind.ANY,),
    Kind.POINT_MASS: (Kind.DISTRIBUTION,),
    Kind.CONSTANT: (Kind.POINT_MASS,),
    Kind.GAUSSIAN: (Kind.DISTRIBUTION,),
    Kind.GAUSSIAN_MEAN_VARIANCE: (Kind.GAUSSIAN,),
    Kind.GAUSSIAN_MEAN_PRECISION: (Kind.GAUSSIAN,),
    Kind.GAUSSIAN_WEIGHTED_MEAN_PRECISION: (Kind.GAUSSIAN,),
    Kind.GAMMA: (Kind.DISTRIBUTION,),
    Kind.BETA: (Kind.DISTRIBUTION,),
    Kind.BERNOULLI: (Kind.DISTRIBUTION,),
    Kind.SAMPLE_LIST: (Kind.DISTRIBUTION,),
    Kind.FUNCTION: (Kind.DISTRIBUTION,),
}


Signature: TypeAlias = Tuple[Kind, ...]


@lru_cache(maxsize=None)
def ancestors(kind: Kind) -> FrozenSet[Kind]:
    """Get the kind and all its ancestors."""
    out = {kind}
    for p in PARENTS[kind]:
        out |= ancestors(p)
    return frozenset(out)


@lru_cache(maxsize=None)
def depth(kind: Kind) -> int:
    """Longest path from ANY down to the kind; higher is more specific."""
    parents = PARENTS[kind]
    if not parents:
        return 0
    return 1 + max(depth(p) for p in parents)


def is_subkind(kind: Kind, pattern: Kind) -> bool:
    """Check whether an observed kind is matched by a pattern kind."""
    return pattern in ancestors(kind)


@lru_cache(maxsize=None)
def overlaps(a: Kind, b: Kind) -> bool:
    """Check whether some kind is matched by both patterns."""
    return any(is_subkind(k, a) and is_subkind(k, b) for k in Kind)


def meet(a: Kind, b: Kind) -> Optional[Kind]:
    """
    Get the most general kind matched by both patterns.

    Returns:
        The meet, or None when the patterns are disjoint or have no unique meet
    """
    if is_subkind(a, b):
        return a
    if is_subkind(b, a):
        return b
    common = [k for k in Kind if is_subkind(k, a) and is_subkind(k, b)]
    tops = [k for k in common if not any(c is not k and is_subkind(k, c) for c in common)]
    return tops[0] if len(tops) == 1 else None


def signature_matches(signature: Signature, patterns: Signature) -> bool:
    """Check a full observed signature against a pattern tuple."""
    if len(signature) != len(patterns):
        return False
    return all(is_subkind(o, p) for o, p in zip(signature, patterns))


def dominates(a: Signature, b: Signature) -> bool:
    """Check whether pattern tuple a is at least as specific as b in every slot."""
    return len(a) == len(b) and all(is_subkind(x, y) for x, y in zip(a, b))


def signature_names(signature: Signature) -> Tuple[str, ...]:
    """Readable form of a signature."""
    return tuple(k.name for k in signature)


@dataclass(frozen=True)
class Message:
    """
    A computed (or pre-seeded) message value.

    Attributes:
        kind: Family of the message, used for rule dispatch
        payload: Opaque parameters; never inspected by the compiler
    """
    kind: Kind
    payload: Any = None


def kind_of(value: Any) -> Kind:
    """
    Get the dispatch kind of a value stored on an interface.

    Messages report their own family; bare numbers and arrays are point masses.
    """
    if isinstance(value, Message):
        return value.kind
    if isinstance(value, (int, float, complex, np.number, np.ndarray)):
        return Kind.POINT_MASS
    return Kind.ANY
