"""
mpsched/ir/ops.py

Compiled schedule representation.

A Program is an ordered sequence of ScheduleEntries. Each entry computes the
outbound message on one interface by invoking a named rule on an argument
list. Arguments are one of:
- Absent: the slot being computed
- Literal: a constant value folded in from a constant-producing node
- EntryRef: the result of an earlier entry
- InitialMessage: a message pre-seeded on an interface before compilation
- MarginalRef: the marginal belief on an edge (variational rules)
- Parameter: an auxiliary node parameter (e.g. a function), appended after slots
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Tuple, Union

from mpsched.ir.schema import Kind


@dataclass(frozen=True)
class Absent:
    """Placeholder for the slot whose outbound is being computed."""

    def __repr__(self) -> str:
        return "Absent()"


@dataclass(frozen=True)
class Literal:
    """
    A constant value inlined into the argument list.

    Attributes:
        value: The literal (number or numpy array)
        kind: Dispatch kind of the literal (CONSTANT)
    """
    value: Any
    kind: Kind = Kind.CONSTANT


@dataclass(frozen=True, eq=False)
class EntryRef:
    """Reference to the result of an earlier schedule entry."""
    entry: "ScheduleEntry"

    def __repr__(self) -> str:
        return f"EntryRef({self.entry.interface})"


@dataclass(frozen=True, eq=False)
class InitialMessage:
    """Reference to a message already present on an interface."""
    interface: Any

    def __repr__(self) -> str:
        return f"InitialMessage({self.interface})"


@dataclass(frozen=True, eq=False)
class MarginalRef:
    """Reference to the marginal belief on an edge."""
    edge: Any

    def __repr__(self) -> str:
        return f"MarginalRef({self.edge})"


@dataclass(frozen=True)
class Parameter:
    """
    Auxiliary node parameter passed after the inbound slots.

    Attributes:
        name: Parameter name (e.g. "g", "g_inv", "alpha")
        value: Parameter value
        keyword: True if passed by keyword rather than position
    """
    name: str
    value: Any
    keyword: bool = False


Argument = Union[Absent, Literal, EntryRef, InitialMessage, MarginalRef]


@dataclass(frozen=True)
class ArgumentList:
    """
    Assembled arguments for one rule invocation.

    Attributes:
        inbounds: One argument per node interface, in interface order
        parameters: Auxiliary parameters appended after the inbounds
    """
    inbounds: Tuple[Argument, ...]
    parameters: Tuple[Parameter, ...] = ()

    def positional(self) -> Tuple[Any, ...]:
        """Inbounds followed by positional parameter values."""
        return self.inbounds + tuple(p.value for p in self.parameters if not p.keyword)

    def keywords(self) -> dict:
        """Keyword parameters as a dict."""
        return {p.name: p.value for p in self.parameters if p.keyword}

    def __len__(self) -> int:
        return len(self.inbounds)


@dataclass(eq=False)
class ScheduleEntry:
    """
    One step of a schedule.

    Attributes:
        interface: Interface whose outbound message this step computes
        rule: Resolved rule (set during emission)
        arguments: Assembled arguments (set during emission)
        outbound: Kind of the produced message (set during emission)
    """
    interface: Any
    rule: Optional[Any] = None
    arguments: Optional[ArgumentList] = None
    outbound: Optional[Kind] = None

    @property
    def node(self):
        return self.interface.node

    def __repr__(self) -> str:
        rule = self.rule.name if self.rule is not None else None
        return f"ScheduleEntry({self.interface}, rule={rule})"


@dataclass(frozen=True)
class Program:
    """
    A compiled sequence of schedule entries.

    Attributes:
        entries: Ordered entries to execute
    """
    entries: Sequence[ScheduleEntry] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __getitem__(self, idx: int) -> ScheduleEntry:
        return self.entries[idx]

    def interfaces(self) -> Tuple[Any, ...]:
        """Interfaces in schedule order."""
        return tuple(e.interface for e in self.entries)

    def rule_names(self) -> Tuple[str, ...]:
        """Resolved rule names in schedule order."""
        return tuple(e.rule.name for e in self.entries)
