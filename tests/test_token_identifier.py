import unittest
from txmock.core.errors import ExecutionFailure
from txmock.core.token_identifier import MOAX_REPRESENTATION, TokenIdentifierOrNative

class TestTokenIdentifierOrNative(unittest.TestCase):
    def test_native(self):
        moax = TokenIdentifierOrNative.native()
        self.assertTrue(moax.is_native())
        self.assertFalse(moax.is_token())
        self.assertEqual(moax.name(), b"MOAX")
        self.assertIsNone(moax.as_token_option())

    def test_token(self):
        tok = TokenIdentifierOrNative.token(b"ALC-6258d2")
        self.assertTrue(tok.is_token())
        self.assertEqual(tok.name(), b"ALC-6258d2")
        self.assertEqual(tok.unwrap_token(), b"ALC-6258d2")

    def test_parse_marker_is_native(self):
        parsed = TokenIdentifierOrNative.parse(MOAX_REPRESENTATION)
        self.assertTrue(parsed.is_native())
        self.assertEqual(parsed, TokenIdentifierOrNative.native())

    def test_parse_other_bytes_is_token(self):
        for data in (b"ALC-6258d2", b"moax", b"MOAXX", b"", b"not valid at all"):
            parsed = TokenIdentifierOrNative.parse(data)
            self.assertTrue(parsed.is_token())
            self.assertEqual(parsed.name(), data)

    def test_native_round_trips_through_parse(self):
        moax = TokenIdentifierOrNative.native()
        self.assertEqual(TokenIdentifierOrNative.parse(moax.top_encode()), moax)
        self.assertEqual(moax.nested_encode(), b"\x00\x00\x00\x04MOAX")

    def test_marker_spelled_token_is_indistinguishable(self):
        # the reserved marker cannot be told apart from MOAX once resolved
        spoofed = TokenIdentifierOrNative.token(b"MOAX")
        self.assertEqual(spoofed.name(), TokenIdentifierOrNative.native().name())
        self.assertEqual(spoofed, TokenIdentifierOrNative.native())

    def test_validity(self):
        self.assertTrue(TokenIdentifierOrNative.native().is_valid())
        self.assertTrue(TokenIdentifierOrNative.token(b"ALC-6258d2").is_valid())
        self.assertTrue(TokenIdentifierOrNative.token(b"12345-6258d2").is_valid())
        self.assertTrue(TokenIdentifierOrNative.token(b"ABCDEFGHIJ-000000").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"AL-C6258d2").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"ALCCCCCCCCC-6258d2").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"alc-6258d2").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"ALC-6258D2").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"ALC-6258d").is_valid())
        self.assertFalse(TokenIdentifierOrNative.token(b"ALC6258d2").is_valid())

    def test_ordering_uses_resolved_name(self):
        ids = [
            TokenIdentifierOrNative.token(b"ZZZ-000000"),
            TokenIdentifierOrNative.native(),
            TokenIdentifierOrNative.token(b"AAA-000000"),
        ]
        self.assertEqual([i.name() for i in sorted(ids)], [b"AAA-000000", b"MOAX", b"ZZZ-000000"])
        self.assertEqual(len({TokenIdentifierOrNative.native(), TokenIdentifierOrNative.parse(b"MOAX")}), 1)

    def test_unwrap_native_fails(self):
        with self.assertRaises(ExecutionFailure):
            TokenIdentifierOrNative.native().unwrap_token()

if __name__ == '__main__':
    unittest.main()
