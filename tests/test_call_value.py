"""
Unit tests for the call value resolver.
Tests: native value, transfer enumeration, composed helpers, handle usage.
"""
import unittest
from txmock.core.errors import ExecutionFailure, FUNGIBLE_TOKEN_EXPECTED, INCORRECT_NUM_DCT_TRANSFERS
from txmock.core.token_identifier import TokenIdentifierOrNative
from txmock.core.types import DctTokenType, TransactionDescriptor
from txmock.vm.call_value import CallValue, CallValueHost
from txmock.vm.handles import CALL_VALUE_MULTI_DCT, CALL_VALUE_SINGLE_DCT, HandleTable, ReleasedHandleError
from mock_contracts import NFT, OTHER, TOKEN, address, sc, transfer

def make_call_value(native_amount=0, transfers=()):
    tx = TransactionDescriptor(
        from_address=address("alice"),
        to_address=sc("payment-features"),
        native_amount=native_amount,
        token_transfers=tuple(transfers),
        function="foo",
        gas_limit=1_000_000,
    )
    handles = HandleTable(owner="foo")
    return CallValue(CallValueHost(tx, handles)), handles

class TestNativeValue(unittest.TestCase):
    def test_moax_only(self):
        cv, _ = make_call_value(native_amount=100)
        self.assertEqual(cv.native_value(), 100)
        self.assertEqual(cv.all_token_transfers(), [])

    def test_dct_reads_as_zero_moax(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 5)])
        self.assertEqual(cv.native_value(), 0)

    def test_cached_per_call(self):
        cv, handles = make_call_value(native_amount=7)
        cv.native_value()
        size = len(handles)
        self.assertEqual(cv.native_value(), 7)
        self.assertEqual(len(handles), size)

class TestAllTransfers(unittest.TestCase):
    def test_count_and_order_preserved(self):
        sent = [transfer(TOKEN, 1), transfer(OTHER, 2), transfer(NFT, 1, nonce=3), transfer(TOKEN, 4)]
        cv, _ = make_call_value(transfers=sent)
        received = cv.all_token_transfers()
        self.assertEqual(cv.transfer_count(), 4)
        self.assertEqual([t.as_tuple() for t in received], [t.as_tuple() for t in sent])

    def test_transfer_at(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1), transfer(NFT, 9, nonce=2)])
        self.assertEqual(cv.transfer_at(1), (NFT, 2, 9))

    def test_transfer_at_out_of_range(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1)])
        with self.assertRaises(IndexError):
            cv.transfer_at(1)
        with self.assertRaises(IndexError):
            cv.transfer_at(-1)

    def test_load_overwrites_destination(self):
        cv, handles = make_call_value(transfers=[transfer(TOKEN, 1), transfer(OTHER, 2)])
        handles.set(CALL_VALUE_MULTI_DCT, ["stale"])
        cv._host.load_all_transfers(CALL_VALUE_MULTI_DCT)
        self.assertEqual(len(handles.get(CALL_VALUE_MULTI_DCT)), 2)

    def test_handles_unusable_after_release(self):
        cv, handles = make_call_value(transfers=[transfer(TOKEN, 1)])
        cv.all_token_transfers()
        handles.release()
        with self.assertRaises(ReleasedHandleError):
            handles.get(CALL_VALUE_MULTI_DCT)

class TestSingleDct(unittest.TestCase):
    def test_value_of_single_transfer(self):
        cv, handles = make_call_value(transfers=[transfer(TOKEN, 25)])
        self.assertEqual(cv.dct_value(), 25)
        self.assertEqual(handles.get(CALL_VALUE_SINGLE_DCT), 25)

    def test_value_is_zero_without_dct(self):
        cv, _ = make_call_value(native_amount=40)
        self.assertEqual(cv.dct_value(), 0)
        self.assertEqual(cv.dct_token_nonce(), 0)

    def test_value_cached_per_call(self):
        cv, handles = make_call_value(transfers=[transfer(TOKEN, 25)])
        cv.dct_value()
        size = len(handles)
        self.assertEqual(cv.dct_value(), 25)
        self.assertEqual(len(handles), size)

    def test_two_transfers_halt(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1), transfer(OTHER, 2)])
        for accessor in (cv.dct_value, cv.token, cv.dct_token_nonce, cv.dct_token_type):
            with self.assertRaises(ExecutionFailure) as ctx:
                accessor()
            self.assertEqual(ctx.exception.message, INCORRECT_NUM_DCT_TRANSFERS)

    def test_token_is_native_for_moax(self):
        cv, _ = make_call_value(native_amount=5)
        self.assertTrue(cv.token().is_native())
        self.assertEqual(cv.dct_token_type(), DctTokenType.FUNGIBLE)

    def test_token_and_nonce_of_nft(self):
        cv, _ = make_call_value(transfers=[transfer(NFT, 1, nonce=7)])
        self.assertEqual(cv.token(), NFT)
        self.assertEqual(cv.dct_token_nonce(), 7)
        self.assertEqual(cv.dct_token_type(), DctTokenType.NON_FUNGIBLE)

    def test_token_type_by_index(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1), transfer(NFT, 1, nonce=2)])
        self.assertEqual(cv.dct_token_type_by_index(0), DctTokenType.FUNGIBLE)
        self.assertEqual(cv.dct_token_type_by_index(1), DctTokenType.NON_FUNGIBLE)
        with self.assertRaises(IndexError):
            cv.dct_token_type_by_index(2)

class TestHandleTable(unittest.TestCase):
    def test_lifetime(self):
        table = HandleTable(owner="foo")
        handle = table.new(b"value")
        self.assertTrue(table.contains(handle))
        self.assertEqual(table.get(handle), b"value")
        with self.assertRaises(KeyError):
            table.get(handle + 1)
        table.release()
        self.assertFalse(table.contains(handle))
        with self.assertRaises(ReleasedHandleError):
            table.new(b"late")

class TestComposedHelpers(unittest.TestCase):
    def test_native_or_single_with_nothing(self):
        cv, _ = make_call_value()
        payment = cv.native_or_single_transfer()
        self.assertTrue(payment.token.is_native())
        self.assertEqual((payment.nonce, payment.amount), (0, 0))

    def test_native_or_single_with_moax(self):
        cv, _ = make_call_value(native_amount=100)
        payment = cv.native_or_single_transfer()
        self.assertEqual(payment.as_tuple(), (TokenIdentifierOrNative.native(), 0, 100))

    def test_native_or_single_with_one_dct(self):
        cv, _ = make_call_value(transfers=[transfer(NFT, 1, nonce=5)])
        self.assertEqual(cv.native_or_single_transfer().as_tuple(), (NFT, 5, 1))

    def test_native_or_single_with_two_dct(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1), transfer(OTHER, 2)])
        with self.assertRaises(ExecutionFailure) as ctx:
            cv.native_or_single_transfer()
        self.assertEqual(ctx.exception.message, INCORRECT_NUM_DCT_TRANSFERS)
        self.assertEqual(int(ctx.exception.status), 4)

    def test_fixed_count(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1), transfer(OTHER, 2)])
        first, second = cv.transfers_by_fixed_count(2)
        self.assertEqual((first.token, second.token), (TOKEN, OTHER))
        with self.assertRaises(ExecutionFailure):
            cv.transfers_by_fixed_count(3)

    def test_single_transfer_requires_exactly_one(self):
        cv, _ = make_call_value(native_amount=10)
        with self.assertRaises(ExecutionFailure):
            cv.single_transfer()

    def test_single_fungible(self):
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 30)])
        self.assertEqual(cv.single_fungible_transfer(), (TOKEN, 30))

    def test_fungibility_is_nonce_zero(self):
        self.assertTrue(transfer(TOKEN, 1).is_fungible)
        self.assertFalse(transfer(NFT, 1, nonce=2).is_fungible)

    def test_single_fungible_rejects_nft(self):
        cv, _ = make_call_value(transfers=[transfer(NFT, 1, nonce=1)])
        with self.assertRaises(ExecutionFailure) as ctx:
            cv.single_fungible_transfer()
        self.assertEqual(ctx.exception.message, FUNGIBLE_TOKEN_EXPECTED)

    def test_native_or_single_fungible(self):
        cv, _ = make_call_value(native_amount=3)
        token, amount = cv.native_or_single_fungible_transfer()
        self.assertTrue(token.is_native())
        self.assertEqual(amount, 3)

    def test_not_payable(self):
        cv, _ = make_call_value()
        cv.check_not_payable()
        cv, _ = make_call_value(native_amount=1)
        with self.assertRaises(ExecutionFailure):
            cv.check_not_payable()
        cv, _ = make_call_value(transfers=[transfer(TOKEN, 1)])
        with self.assertRaises(ExecutionFailure):
            cv.check_not_payable()

if __name__ == '__main__':
    unittest.main()
