"""
TimeLedger - time-tracking engine: running timer, time-entry ledger and
weekly/daily aggregation by user, task and project.
"""

__version__ = "1.0.0"
