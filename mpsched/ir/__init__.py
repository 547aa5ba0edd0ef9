"""
IR module: inbound kinds, signatures and compiled schedule representation.
"""

from mpsched.ir.schema import (
    Kind,
    Signature,
    Message,
    is_subkind,
    depth,
    overlaps,
    meet,
    signature_matches,
    dominates,
    kind_of,
)
from mpsched.ir.ops import (
    Absent,
    Literal,
    EntryRef,
    InitialMessage,
    MarginalRef,
    Parameter,
    Argument,
    ArgumentList,
    ScheduleEntry,
    Program,
)

__all__ = [
    "Kind",
    "Signature",
    "Message",
    "is_subkind",
    "depth",
    "overlaps",
    "meet",
    "signature_matches",
    "dominates",
    "kind_of",
    "Absent",
    "Literal",
    "EntryRef",
    "InitialMessage",
    "MarginalRef",
    "Parameter",
    "Argument",
    "ArgumentList",
    "ScheduleEntry",
    "Program",
]
