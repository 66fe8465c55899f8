"""
txmock Scenario: Verdict

Defines the result structure for scenario verification.
"""
from dataclasses import dataclass
from typing import Any, Optional
from enum import Enum

class VerdictStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"

def _show(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex() if value else '""'
    return str(value)

@dataclass
class CheckFailure:
    """
    First mismatch between expected patterns and actual output.
    """
    step_index: int
    step_id: str
    path: str             # e.g. "logs[1].topics[0]"
    expected: Any
    actual: Any

    def describe(self) -> str:
        step = f"step {self.step_index}" + (f" ({self.step_id})" if self.step_id else "")
        return f"{step}: mismatch at {self.path}: expected {_show(self.expected)}, got {_show(self.actual)}"

@dataclass
class ScenarioVerdict:
    """
    Final verdict of a scenario run.
    """
    status: VerdictStatus
    scenario: str
    steps_processed: int
    steps_total: int
    config_hash: str
    failure: Optional[CheckFailure] = None
    error_message: Optional[str] = None

    def is_pass(self) -> bool:
        return self.status == VerdictStatus.PASS

    def summary(self) -> str:
        if self.status == VerdictStatus.PASS:
            return f"PASS: {self.steps_processed}/{self.steps_total} steps of {self.scenario}"
        elif self.status == VerdictStatus.FAIL:
            return f"FAIL: {self.failure.describe()}"
        else:
            return f"ERROR: {self.error_message}"
