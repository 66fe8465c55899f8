"""
txmock Scenario: Scenario Reader

Reads a scenario file and interprets every step up front.
A scenario that fails to interpret is never partially run.
"""
import json
import os
from dataclasses import dataclass
from typing import Iterator, List, Optional
from pydantic import ValidationError
from ..core.errors import InterpretationError
from .interpreter import Step, interpret_scenario
from .raw import ScenarioRaw
from .values import InterpreterContext

@dataclass
class OrderedStep:
    """
    Interpreted step with its position in the file.
    """
    index: int
    step: Step

    @property
    def id(self) -> str:
        return self.step.id

class ScenarioReader:
    """
    Loads and interprets steps from a scenario JSON file.
    """
    def __init__(self, scenario_path: str, strict: bool = False, default_gas_limit: int = 5_000_000):
        self.scenario_path = scenario_path
        self.name = os.path.basename(scenario_path)
        self.context = InterpreterContext(
            context_path=os.path.dirname(os.path.abspath(scenario_path)),
            strict=strict,
            default_gas_limit=default_gas_limit,
        )
        self._steps: List[OrderedStep] = []

    def load(self) -> int:
        """
        Loads all steps of the scenario.
        Returns the count of steps loaded.
        """
        self._steps = []
        with open(self.scenario_path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as err:
                raise InterpretationError(self.scenario_path, f"invalid JSON: {err}") from err
        self._steps = [OrderedStep(i, step) for i, step in enumerate(self.interpret(data))]
        return len(self._steps)

    def interpret(self, data) -> List[Step]:
        try:
            raw = ScenarioRaw.model_validate(data)
        except ValidationError as err:
            raise InterpretationError(self.scenario_path, str(err)) from err
        if raw.name:
            self.name = raw.name
        return interpret_scenario(raw, self.context)

    def __iter__(self) -> Iterator[OrderedStep]:
        """Yields steps in file order."""
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def get_step(self, index: int) -> Optional[OrderedStep]:
        if 0 <= index < len(self._steps):
            return self._steps[index]
        return None
