"""
Core module: ID registry, logging configuration and error taxonomy.
"""

from mpsched.core.registry import IDRegistry
from mpsched.core.logging import configure_logging, get_logger
from mpsched.core.errors import (
    MPSchedError,
    GraphError,
    DuplicateIdentifier,
    AlreadyConnected,
    DisconnectedInterface,
    ScheduleError,
    UnbrokenLoopError,
    CrossSubgraphPartialSchedule,
    DispatchError,
    NoApplicableRule,
    AmbiguousRule,
    AssemblyError,
    MissingInboundReference,
    UnavailableApproximationPoint,
)

__all__ = [
    "IDRegistry",
    "configure_logging",
    "get_logger",
    "MPSchedError",
    "GraphError",
    "DuplicateIdentifier",
    "AlreadyConnected",
    "DisconnectedInterface",
    "ScheduleError",
    "UnbrokenLoopError",
    "CrossSubgraphPartialSchedule",
    "DispatchError",
    "NoApplicableRule",
    "AmbiguousRule",
    "AssemblyError",
    "MissingInboundReference",
    "UnavailableApproximationPoint",
]
