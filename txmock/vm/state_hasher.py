"""
txmock VM: State Hasher

Computes deterministic hashes of the world state at step and frame
boundaries. Two states hash equal iff every account field is byte-identical.
"""
import hashlib
import json
from typing import Dict, Any

class BytesEncoder(json.JSONEncoder):
    """JSON encoder that writes bytes as hex."""
    def default(self, obj):
        if isinstance(obj, (bytes, bytearray)):
            return "0x" + bytes(obj).hex()
        return super().default(obj)

class StateHasher:
    """
    Computes deterministic SHA-256 hashes of world state.
    """

    @staticmethod
    def hash_state(state: Dict[str, Any]) -> str:
        """
        Computes a deterministic hash of the given state dictionary.
        Keys are sorted for determinism.
        """
        serialized = json.dumps(state, sort_keys=True, cls=BytesEncoder)
        return hashlib.sha256(serialized.encode('utf-8')).hexdigest()

    @staticmethod
    def account_to_dict(account) -> Dict[str, Any]:
        return {
            "nonce": account.nonce,
            # big ints are hashed as strings
            "balance": str(account.balance),
            "dct": {f"{token.hex()}:{nonce}": str(amount)
                    for (token, nonce), amount in account.dct.items()},
            "storage": {key.hex(): value.hex() for key, value in account.storage.items()},
            "code": account.code,
            "owner": account.owner,
        }

    @staticmethod
    def hash_world(accounts: Dict[bytes, Any]) -> str:
        """
        Hash the complete world state.
        """
        state = {address.hex(): StateHasher.account_to_dict(account)
                 for address, account in accounts.items()}
        return StateHasher.hash_state(state)
