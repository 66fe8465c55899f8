"""
txmock Scenario Package

Declarative scenario fixtures: interpretation into typed steps, execution
against the mock engine, and verification with wildcard patterns.
"""
from .check import CheckLog, CheckLogs, CheckValue, TxExpect, assert_result
from .reader import ScenarioReader
from .runner import ScenarioRunner
from .values import InterpreterContext
from .verdict import CheckFailure, ScenarioVerdict, VerdictStatus

__all__ = [
    "CheckLog",
    "CheckLogs",
    "CheckValue",
    "TxExpect",
    "assert_result",
    "ScenarioReader",
    "ScenarioRunner",
    "InterpreterContext",
    "CheckFailure",
    "ScenarioVerdict",
    "VerdictStatus",
]
