"""Precedence policy between concurrently running mutation sources.

Two sources write the vehicle state independently: the periodic tick and
command progressions (takeoff ascent, point-to-point flight).  This module
decides what happens when a new command arrives while a progression is
still animating.
"""

from __future__ import annotations

from enum import StrEnum


class ProgressionPolicy(StrEnum):
    """How a new command treats in-flight progressions.

    ``CONCURRENT``
        Progressions are never interrupted.  A ``set_mode`` issued during a
        takeoff leaves the ascent running, so both keep writing state and
        transient states may be incoherent.  This is the historical behaviour.
    ``PREEMPT``
        Any command other than ``arm`` cancels every in-flight progression
        before it runs.  The interrupted command resolves ``False``.
    """

    CONCURRENT = "concurrent"
    PREEMPT = "preempt"


#: Commands that never interrupt a running progression, whatever the policy.
NON_PREEMPTING_COMMANDS: frozenset[str] = frozenset({"arm"})


def should_preempt(policy: ProgressionPolicy, command: str) -> bool:
    """Decide whether *command* cancels in-flight progressions under *policy*."""
    if policy is ProgressionPolicy.CONCURRENT:
        return False
    return command not in NON_PREEMPTING_COMMANDS
