"""
Scenario runner and CLI tests against the fixture files in tests/scenarios.
"""
import unittest
import tempfile
import json
import os
from txmock.scenario.__main__ import load_registry, main
from txmock.scenario.reader import ScenarioReader
from txmock.scenario.runner import ScenarioRunner
from txmock.scenario.verdict import VerdictStatus
from mock_contracts import build_registry

SCENARIOS = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scenarios")

def scenario(name):
    return os.path.join(SCENARIOS, name)

class TestScenarioReader(unittest.TestCase):
    def test_load(self):
        reader = ScenarioReader(scenario("payment_features.scen.json"))
        self.assertEqual(reader.load(), 5)
        self.assertEqual(reader.name, "payment features")
        self.assertEqual(reader.get_step(1).id, "pay-moax")
        self.assertIsNone(reader.get_step(9))
        self.assertEqual([s.index for s in reader], [0, 1, 2, 3, 4])

class TestScenarioRunner(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def write(self, data):
        path = os.path.join(self.temp_dir, "case.scen.json")
        with open(path, 'w') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def test_payment_features_pass(self):
        verdict = ScenarioRunner(scenario("payment_features.scen.json"), build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.PASS, verdict.summary())
        self.assertEqual(verdict.steps_processed, 5)

    def test_vault_forwarder_pass(self):
        runner = ScenarioRunner(scenario("vault_forwarder.scen.json"), build_registry())
        verdict = runner.run()
        self.assertEqual(verdict.status, VerdictStatus.PASS, verdict.summary())
        self.assertEqual(len(runner.hash_log), 7)
        async_result = runner.results[3]
        self.assertEqual(len(async_result.async_calls), 1)

    def test_wrong_output_fails(self):
        verdict = ScenarioRunner(scenario("wrong_output.scen.json"), build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.FAIL)
        self.assertEqual(verdict.failure.step_index, 1)
        self.assertEqual(verdict.failure.step_id, "pay-moax")
        self.assertEqual(verdict.failure.path, "out[2]")
        self.assertEqual(verdict.failure.actual, b"\x64")

    def test_deterministic_hashes(self):
        first = ScenarioRunner(scenario("vault_forwarder.scen.json"), build_registry())
        second = ScenarioRunner(scenario("vault_forwarder.scen.json"), build_registry())
        first.run()
        second.run()
        self.assertEqual(first.hash_log, second.hash_log)

    def test_failed_tx_leaves_state_unchanged(self):
        runner = ScenarioRunner(scenario("payment_features.scen.json"), build_registry())
        runner.run()
        self.assertEqual(runner.hash_log[1], runner.hash_log[2])
        self.assertEqual(runner.hash_log[2], runner.hash_log[3])

    def test_invalid_json_is_error(self):
        verdict = ScenarioRunner(self.write("{not json"), build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.ERROR)

    def test_missing_file_is_error(self):
        verdict = ScenarioRunner(os.path.join(self.temp_dir, "missing.scen.json"), build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.ERROR)

    def test_zero_amount_transfer_is_error(self):
        path = self.write({"steps": [
            {"step": "setState", "accounts": {"address:alice": {"balance": "10"}}},
            {"step": "scCall", "tx": {
                "from": "address:alice", "to": "sc:vault", "function": "deposit",
                "dctValue": [{"tokenIdentifier": "str:TOK-123456", "amount": "0"}],
            }},
        ]})
        runner = ScenarioRunner(path, build_registry())
        verdict = runner.run()
        self.assertEqual(verdict.status, VerdictStatus.ERROR)
        self.assertIn("steps[1].tx", verdict.error_message)
        # nothing ran
        self.assertEqual(runner.hash_log, {})

    def test_strict_mode(self):
        data = {"steps": [
            {"step": "setState", "accounts": {
                "address:alice": {"balance": "10"},
                "sc:payment-features": {"code": "payment-features"},
            }},
            {"step": "scCall", "tx": {
                "from": "address:alice", "to": "sc:payment-features", "function": "native_value",
                "value": "1", "nativeAmount": "2",
            }, "expect": {"out": ["2"], "status": "0"}},
        ]}
        path = self.write(data)
        self.assertEqual(ScenarioRunner(path, build_registry()).run().status, VerdictStatus.PASS)
        self.assertEqual(ScenarioRunner(path, build_registry(), strict=True).run().status, VerdictStatus.ERROR)

    def test_failed_transfer_step_fails(self):
        path = self.write({"steps": [
            {"step": "setState", "accounts": {"address:alice": {"balance": "10"}}},
            {"step": "transfer", "tx": {"from": "address:alice", "to": "address:bob", "value": "11"}},
        ]})
        verdict = ScenarioRunner(path, build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.FAIL)
        self.assertEqual(verdict.failure.path, "status")

    def test_missing_argument_fails_call(self):
        path = self.write({"steps": [
            {"step": "setState", "accounts": {
                "address:alice": {"balance": "1000"},
                "sc:vault": {"code": "vault"},
            }},
            {"step": "scCall", "id": "withdraw-no-args", "tx": {
                "from": "address:alice", "to": "sc:vault", "function": "withdraw", "value": "10",
            }, "expect": {"out": [], "status": "4", "message": "str:wrong number of arguments"}},
            {"step": "checkState", "accounts": {
                "address:alice": {"balance": "1000"},
                "sc:vault": {"balance": "0"},
            }},
        ]})
        verdict = ScenarioRunner(path, build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.PASS, verdict.summary())

    def test_contract_crash_is_error(self):
        path = self.write({"steps": [
            {"step": "setState", "accounts": {"sc:vault": {"code": "vault"}, "address:alice": {}}},
            {"step": "scCall", "tx": {"from": "address:alice", "to": "sc:vault", "function": "crash"}},
        ]})
        verdict = ScenarioRunner(path, build_registry()).run()
        self.assertEqual(verdict.status, VerdictStatus.ERROR)
        self.assertIn("ZeroDivisionError", verdict.error_message)

    def test_save_hash_log(self):
        runner = ScenarioRunner(scenario("payment_features.scen.json"), build_registry())
        runner.run()
        out = os.path.join(self.temp_dir, "hashes.json")
        runner.save_hash_log(out)
        with open(out) as f:
            saved = json.load(f)
        self.assertEqual(saved["4"], runner.hash_log[4])

class TestMain(unittest.TestCase):
    def test_load_registry(self):
        registry = load_registry("mock_contracts:build_registry")
        self.assertIn("vault", registry)
        with self.assertRaises(ValueError):
            load_registry("mock_contracts")

    def test_exit_codes(self):
        contracts = ["--contracts", "mock_contracts:build_registry"]
        passing = ["--scenario", scenario("payment_features.scen.json"),
                   "--scenario", scenario("vault_forwarder.scen.json")]
        self.assertEqual(main(passing + contracts), 0)
        self.assertEqual(main(passing + ["--scenario", scenario("wrong_output.scen.json")] + contracts), 1)

if __name__ == '__main__':
    unittest.main()
