"""
Fixture contracts for the test suite.
"""
from txmock.core.codec import top_decode_uint
from txmock.core.errors import ExecutionFailure
from txmock.core.token_identifier import TokenIdentifierOrNative
from txmock.core.types import TokenTransfer
from txmock.vm.contract import Contract, ContractRegistry, callback, endpoint

def address(name: str) -> bytes:
    return name.encode().ljust(32, b"_")

def sc(name: str) -> bytes:
    return bytes(8) + name.encode().ljust(24, b"_")

class PaymentFeatures(Contract):
    """Exercises every call value helper."""

    @endpoint
    def foo(self, ctx):
        payment = ctx.call_value.native_or_single_transfer()
        return [payment.token, payment.nonce, payment.amount]

    @endpoint
    def native_value(self, ctx):
        return ctx.call_value.native_value()

    @endpoint
    def not_payable(self, ctx):
        ctx.call_value.check_not_payable()
        return "ok"

    @endpoint
    def accept_two(self, ctx):
        first, second = ctx.call_value.transfers_by_fixed_count(2)
        return [first.token, second.token, first.amount + second.amount]

    @endpoint
    def single_fungible(self, ctx):
        token, amount = ctx.call_value.single_fungible_transfer()
        return [token, amount]

    @endpoint
    def native_or_fungible(self, ctx):
        token, amount = ctx.call_value.native_or_single_fungible_transfer()
        return [token, amount]

    @endpoint
    def transfer_details(self, ctx):
        out = [ctx.call_value.transfer_count()]
        for i in range(ctx.call_value.transfer_count()):
            token, nonce, amount = ctx.call_value.transfer_at(i)
            out.extend([token, nonce, amount])
        return out

    @endpoint
    def transfer_out_of_range(self, ctx):
        return ctx.call_value.transfer_at(ctx.call_value.transfer_count())

class Vault(Contract):
    """Holds MOAX/fungible deposits per caller."""

    @endpoint
    def deposit(self, ctx):
        token, amount = ctx.call_value.native_or_single_fungible_transfer()
        ctx.require(amount > 0, "nothing deposited")
        key = b"deposit:" + ctx.caller + b":" + token.name()
        ctx.storage.set(key, ctx.storage.get_uint(key) + amount)
        ctx.emit_log("deposit", [ctx.caller, token], amount)
        return amount

    @endpoint
    def withdraw(self, ctx, amount_raw):
        amount = top_decode_uint(amount_raw)
        key = b"deposit:" + ctx.caller + b":MOAX"
        ctx.require(not ctx.storage.is_empty(key), "nothing deposited")
        held = ctx.storage.get_uint(key)
        ctx.require(held >= amount, "not enough deposited")
        if held == amount:
            ctx.storage.clear(key)
        else:
            ctx.storage.set(key, held - amount)
        ctx.send.direct_moax(ctx.caller, amount)
        ctx.emit_log("withdraw", [ctx.caller], amount)

    @endpoint
    def store_then_fail(self, ctx, value):
        ctx.storage.set("scratch", value)
        ctx.emit_log("about_to_fail")
        ctx.signal_error("vault refused")

    @endpoint
    def echo(self, ctx, *args):
        return list(args)

    @endpoint
    def info(self, ctx):
        chain = ctx.blockchain
        return [chain.get_sc_address(), chain.get_caller(), chain.get_owner_address(),
                chain.get_tx_hash(), chain.get_balance(chain.get_caller())]

    @endpoint("expensive", gas_cost=50_000)
    def expensive(self, ctx):
        return "done"

    @endpoint
    def crash(self, ctx):
        raise ZeroDivisionError("contract bug")

class Forwarder(Contract):
    """Forwards received payments through every kind of nested call."""

    def _payment(self, ctx):
        transfers = ctx.call_value.all_token_transfers()
        return ctx.call_value.native_value(), transfers

    @endpoint
    def forward_sync(self, ctx, to, function, *args):
        native, transfers = self._payment(ctx)
        ctx.storage.set("before_call", "yes")
        return ctx.execute_on_dest_context(to, function.decode(), args, native, transfers)

    @endpoint
    def forward_sync_try(self, ctx, to, function, *args):
        native, transfers = self._payment(ctx)
        result = ctx.try_execute_on_dest_context(to, function.decode(), args, native, transfers)
        ctx.storage.set("last_status", int(result.status))
        ctx.emit_log("try_result", [int(result.status)], result.message)
        return int(result.status)

    @endpoint
    def forward_transf_exec(self, ctx, to, function, *args):
        native, transfers = self._payment(ctx)
        result = ctx.transfer_execute(to, function.decode(), args, native, transfers)
        ctx.storage.set("last_status", int(result.status))
        return int(result.status)

    @endpoint
    def forward_sync_try_gas(self, ctx, to, function, gas_raw):
        try:
            result = ctx.try_execute_on_dest_context(to, function.decode(), gas=top_decode_uint(gas_raw))
        except ExecutionFailure as err:
            ctx.storage.set("rejected", err.message)
            return
        ctx.storage.set("last_status", int(result.status))

    @endpoint
    def forward_transf_exec_mixed(self, ctx, to, moax_raw):
        transfers = ctx.call_value.all_token_transfers()
        try:
            ctx.transfer_execute(to, "", (), top_decode_uint(moax_raw), transfers)
        except ExecutionFailure as err:
            ctx.storage.set("rejected", err.message)

    @endpoint
    def forward_async(self, ctx, to, function, *args):
        native, transfers = self._payment(ctx)
        ctx.async_call(to, function.decode(), args, native, transfers,
                       gas=200_000, callback="on_result", callback_args=["tag"])
        ctx.storage.set("async_issued", "yes")

    @endpoint
    def forward_async_then_fail(self, ctx, to, function):
        ctx.async_call(to, function.decode(), callback="on_result")
        ctx.signal_error("changed my mind")

    @endpoint
    def forward_async_no_callback(self, ctx, to, function, *args):
        native, transfers = self._payment(ctx)
        ctx.async_call(to, function.decode(), args, native, transfers, gas=200_000)

    @endpoint
    def async_chain(self, ctx, remaining_raw):
        remaining = top_decode_uint(remaining_raw)
        ctx.storage.set(b"chain:" + remaining_raw, "visited")
        if remaining > 0:
            ctx.async_call(ctx.self_address, "async_chain", [remaining - 1])

    @endpoint
    def recurse(self, ctx, depth_raw):
        depth = top_decode_uint(depth_raw)
        if depth == 0:
            return "bottom"
        return ctx.execute_on_dest_context(ctx.self_address, "recurse", [depth - 1])

    @endpoint
    def send_moax(self, ctx, to, amount_raw):
        ctx.send.direct(to, TokenIdentifierOrNative.native(), 0, top_decode_uint(amount_raw))

    @callback
    def on_result(self, ctx, *args):
        result = ctx.async_result
        ctx.storage.set("callback_status", int(result.status))
        if result.is_success():
            ctx.storage.set("callback_data", result.return_data[0] if result.return_data else b"")
        else:
            ctx.storage.set("callback_data", result.message)
        ctx.emit_log("callback", [int(result.status)], args[-1])

CONTRACTS = {
    "payment-features": PaymentFeatures,
    "vault": Vault,
    "forwarder": Forwarder,
}

def build_registry() -> ContractRegistry:
    registry = ContractRegistry()
    for code, contract_cls in CONTRACTS.items():
        registry.register(code, contract_cls)
    return registry

TOKEN = TokenIdentifierOrNative.token(b"TOK-123456")
OTHER = TokenIdentifierOrNative.token(b"OTH-abcdef")
NFT = TokenIdentifierOrNative.token(b"NFT-0a0b0c")

def transfer(token: TokenIdentifierOrNative, amount: int, nonce: int = 0) -> TokenTransfer:
    return TokenTransfer(token=token, nonce=nonce, amount=amount)
