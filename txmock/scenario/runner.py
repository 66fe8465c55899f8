"""
txmock Scenario: Scenario Runner

Executes a scenario step by step against a fresh mock engine and checks
every expectation. Steps are processed ONE AT A TIME, in file order.
"""
import copy
import json
from typing import Dict, Optional
from ..core.errors import InterpretationError
from ..core.logger import get_logger
from ..vm.config import EngineConfig
from ..vm.contract import ContractRegistry
from ..vm.engine import MockExecutionEngine
from ..vm.result import TransactionResult
from .check import Mismatch
from .interpreter import CheckStateStep, SetStateStep, TxStep
from .reader import OrderedStep, ScenarioReader
from .verdict import ScenarioVerdict, VerdictStatus

logger = get_logger("ScenarioRunner")

class ScenarioRunner:
    """
    Invariant: one step in -> one world state out -> record hash -> next step.
    """
    def __init__(self, scenario_path: str, contracts: ContractRegistry,
                 config: Optional[EngineConfig] = None, strict: bool = False):
        self.config = config or EngineConfig()
        self.engine = MockExecutionEngine(contracts=contracts, config=self.config)
        self.reader = ScenarioReader(scenario_path, strict=strict,
                                     default_gas_limit=self.config.default_gas_limit)

        # step_index -> world state hash after the step
        self.hash_log: Dict[int, str] = {}
        # step_index -> result of transaction steps
        self.results: Dict[int, TransactionResult] = {}

    def run(self) -> ScenarioVerdict:
        """
        Execute the scenario.
        Returns verdict indicating PASS, FAIL or ERROR.
        """
        try:
            total_steps = self.reader.load()
        except (InterpretationError, OSError) as e:
            logger.error("scenario_load_failed", scenario=self.reader.scenario_path, error=str(e))
            return self._verdict(VerdictStatus.ERROR, 0, 0, error_message=f"Scenario load failed: {e}")

        processed = 0
        for ordered in self.reader:
            try:
                mismatch = self._process_step(ordered)
            except Exception as e:
                logger.error("scenario_step_crashed", step=ordered.index, exc_info=True)
                return self._verdict(VerdictStatus.ERROR, processed, total_steps,
                                     error_message=f"Step {ordered.index} failed: {e!r}")

            self.hash_log[ordered.index] = self.engine.world.get_state_hash()

            if mismatch is not None:
                failure = mismatch.at(ordered.index, ordered.id)
                logger.info("scenario_step_failed", step=ordered.index, id=ordered.id, path=failure.path)
                return self._verdict(VerdictStatus.FAIL, processed, total_steps, failure=failure)

            processed += 1

        logger.info("scenario_passed", scenario=self.reader.name, steps=processed)
        return self._verdict(VerdictStatus.PASS, processed, total_steps)

    def _process_step(self, ordered: OrderedStep) -> Optional[Mismatch]:
        step = ordered.step
        if isinstance(step, SetStateStep):
            for address, account in step.accounts.items():
                self.engine.world.set_account(address, copy.deepcopy(account))
            return None
        if isinstance(step, TxStep):
            return self._process_tx(ordered.index, step)
        if isinstance(step, CheckStateStep):
            return step.accounts.mismatch(self.engine.world)
        raise TypeError(f"unsupported step {type(step).__name__}")

    def _process_tx(self, index: int, step: TxStep) -> Optional[Mismatch]:
        if step.kind == "scQuery":
            result = self.engine.query(step.tx)
        else:
            result = self.engine.execute(step.tx)
        self.results[index] = result
        logger.debug("tx_step_executed", step=index, id=step.id, summary=result.summary())

        if step.expect is not None:
            return step.expect.mismatch(result)
        if step.kind == "transfer" and not result.is_success():
            return Mismatch("status", 0, f"{int(result.status)} ({result.message})")
        return None

    def _verdict(self, status: VerdictStatus, processed: int, total: int, **kwargs) -> ScenarioVerdict:
        return ScenarioVerdict(
            status=status,
            scenario=self.reader.name,
            steps_processed=processed,
            steps_total=total,
            config_hash=self.config.fingerprint(),
            **kwargs
        )

    def save_hash_log(self, output_path: str):
        """Save the hash log for later comparison."""
        with open(output_path, 'w') as f:
            json.dump(self.hash_log, f, indent=2)
