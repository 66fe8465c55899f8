"""
txmock Scenario: Main Entry Point

Command-line interface for running scenario files against registered
mock contracts. Runs headless; exit status 0 only if every scenario passes.
"""
import sys
import argparse
import importlib
from ..core.logger import configure_logging
from ..vm.config import EngineConfig
from ..vm.contract import ContractRegistry
from .runner import ScenarioRunner
from .verdict import VerdictStatus

def load_registry(spec: str) -> ContractRegistry:
    """
    "package.module:attr" -> ContractRegistry. `attr` may be a registry
    or a callable returning one.
    """
    module_name, _, attr = spec.partition(":")
    if not attr:
        raise ValueError(f"expected module:attr, got {spec!r}")
    target = getattr(importlib.import_module(module_name), attr)
    registry = target() if callable(target) else target
    if not isinstance(registry, ContractRegistry):
        raise TypeError(f"{spec} did not produce a ContractRegistry")
    return registry

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="txmock scenario runner"
    )
    parser.add_argument(
        "--scenario",
        required=True,
        action="append",
        help="Path to a .scen.json file (repeatable)"
    )
    parser.add_argument(
        "--contracts",
        required=True,
        help="module:attr producing the ContractRegistry"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Reject fixtures whose alternative field spellings disagree"
    )
    parser.add_argument(
        "--output-hashes",
        help="Path to save the per-step state hash log (last scenario)"
    )
    parser.add_argument(
        "--default-gas-limit",
        type=int,
        default=EngineConfig.default_gas_limit,
        help="Gas limit for transactions that do not declare one"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="structlog level"
    )

    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    registry = load_registry(args.contracts)
    config = EngineConfig(default_gas_limit=args.default_gas_limit)

    failed = 0
    for path in args.scenario:
        runner = ScenarioRunner(path, registry, config=config, strict=args.strict)
        verdict = runner.run()
        print(verdict.summary())
        if verdict.failure:
            print(f"  Step: {verdict.failure.step_index} {verdict.failure.step_id}")
            print(f"  Path: {verdict.failure.path}")
        if args.output_hashes:
            runner.save_hash_log(args.output_hashes)
        if verdict.status != VerdictStatus.PASS:
            failed += 1

    print()
    print(f"{len(args.scenario) - failed}/{len(args.scenario)} scenarios passed")
    return 0 if failed == 0 else 1

if __name__ == "__main__":
    sys.exit(main())
