"""
txmock VM: Engine Configuration

Immutable configuration for a mock execution engine. Every gas cost and
limit the engine applies is read from here.
"""
import hashlib
from dataclasses import dataclass, asdict

@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable configuration for an engine instance.
    """
    frame_gas_cost: int = 1_000          # charged on entering any call frame
    storage_write_gas_cost: int = 50     # per storage key written
    log_gas_cost: int = 10               # per log emitted
    max_call_depth: int = 32             # synchronous nesting limit
    max_async_depth: int = 4             # async calls issued from async calls or callbacks
    default_gas_limit: int = 5_000_000   # used when a fixture omits gasLimit

    def __post_init__(self):
        for name, value in asdict(self).items():
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def fingerprint(self) -> str:
        """Short hash identifying this configuration in verdicts."""
        data = ":".join(f"{k}={v}" for k, v in sorted(asdict(self).items()))
        return hashlib.sha256(data.encode()).hexdigest()[:16]
