"""State/store layer.

This package is the single source of truth for vehicle state: the store,
the observer registry that fans snapshots out, the RTL homing machine run
by the periodic tick, and the precedence policy between mutation sources.
"""
