"""
txmock VM: World State

In-memory accounts (balances, DCT balances, storage, contract code) used
instead of a real ledger. Snapshot/restore is the only isolation mechanism.
"""
import copy
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
from ..core.errors import InsufficientFundsError
from ..core.token_identifier import TokenIdentifierOrNative
from .state_hasher import StateHasher

@dataclass
class Account:
    nonce: int = 0
    balance: int = 0
    dct: Dict[Tuple[bytes, int], int] = field(default_factory=dict)
    storage: Dict[bytes, bytes] = field(default_factory=dict)
    code: Optional[str] = None       # registry name of the contract, None for user accounts
    owner: Optional[bytes] = None

    def is_contract(self) -> bool:
        return self.code is not None

class WorldState:
    """
    Address -> Account mapping.
    Only the currently running frame mutates it.
    """
    def __init__(self):
        self.accounts: Dict[bytes, Account] = {}

    def get_account(self, address: bytes) -> Optional[Account]:
        return self.accounts.get(address)

    def account(self, address: bytes) -> Account:
        """Returns the account, creating an empty one on first touch."""
        acc = self.accounts.get(address)
        if acc is None:
            acc = Account()
            self.accounts[address] = acc
        return acc

    def set_account(self, address: bytes, account: Account):
        self.accounts[address] = account

    def get_balance(self, address: bytes) -> int:
        acc = self.accounts.get(address)
        return acc.balance if acc else 0

    def get_dct_balance(self, address: bytes, token: bytes, nonce: int = 0) -> int:
        acc = self.accounts.get(address)
        return acc.dct.get((token, nonce), 0) if acc else 0

    def transfer_moax(self, sender: bytes, receiver: bytes, amount: int):
        if amount == 0:
            return
        src = self.account(sender)
        if src.balance < amount:
            raise InsufficientFundsError()
        src.balance -= amount
        self.account(receiver).balance += amount

    def transfer_dct(self, sender: bytes, receiver: bytes, token: bytes, nonce: int, amount: int):
        if amount == 0:
            return
        src = self.account(sender)
        key = (token, nonce)
        held = src.dct.get(key, 0)
        if held < amount:
            raise InsufficientFundsError()
        if held == amount:
            del src.dct[key]
        else:
            src.dct[key] = held - amount
        dst = self.account(receiver)
        dst.dct[key] = dst.dct.get(key, 0) + amount

    def transfer(self, sender: bytes, receiver: bytes, token: TokenIdentifierOrNative,
                 nonce: int, amount: int):
        if token.is_native():
            self.transfer_moax(sender, receiver, amount)
        else:
            self.transfer_dct(sender, receiver, token.unwrap_token(), nonce, amount)

    def storage_get(self, address: bytes, key: bytes) -> bytes:
        acc = self.accounts.get(address)
        return acc.storage.get(key, b"") if acc else b""

    def storage_set(self, address: bytes, key: bytes, value: bytes):
        storage = self.account(address).storage
        # empty value clears the key
        if value:
            storage[key] = value
        else:
            storage.pop(key, None)

    def snapshot(self) -> Dict[bytes, Account]:
        """Return a deep copy of all accounts."""
        return copy.deepcopy(self.accounts)

    def restore(self, snapshot: Dict[bytes, Account]):
        self.accounts = copy.deepcopy(snapshot)

    def get_state_hash(self) -> str:
        """Compute hash of current full state."""
        return StateHasher.hash_world(self.accounts)
