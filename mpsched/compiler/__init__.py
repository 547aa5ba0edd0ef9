"""
Compiler module: scheduling, rule dispatch, argument assembly and emission.
"""

from mpsched.compiler.schedule import (
    schedule,
    complete_partial_schedule,
    schedule_subgraph,
    schedule_all,
    commit_schedule,
    schedule_violations,
)
from mpsched.compiler.rules import (
    SUM_PRODUCT,
    VARIATIONAL,
    Rule,
    RuleRegistry,
    resolve_rule,
)
from mpsched.compiler.inbounds import (
    register_collector,
    inbound_kind,
    observed_signature,
    inbound_argument,
    collect_inbounds,
    assemble_arguments,
)
from mpsched.compiler.emit import emit_program, condense

__all__ = [
    # schedule
    "schedule",
    "complete_partial_schedule",
    "schedule_subgraph",
    "schedule_all",
    "commit_schedule",
    "schedule_violations",
    # rules
    "SUM_PRODUCT",
    "VARIATIONAL",
    "Rule",
    "RuleRegistry",
    "resolve_rule",
    # inbounds
    "register_collector",
    "inbound_kind",
    "observed_signature",
    "inbound_argument",
    "collect_inbounds",
    "assemble_arguments",
    # emit
    "emit_program",
    "condense",
]
