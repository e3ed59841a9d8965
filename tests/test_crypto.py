"""Tests for sigpackage crypto (Keccak-256, secp256k1 signing and recovery)."""

from unittest.mock import patch

import pytest

from sigpackage.config import SECP256K1
from sigpackage.crypto import (
    compute_message_hash,
    derive_public_key,
    normalize_private_key,
    recover_public_key,
    sign_recoverable,
    split_signature,
)
from sigpackage.errors import InvalidPrivateKey, MalformedSignature

from sample_keys import G_UNCOMPRESSED, KEY_A, KEY_B, KEY_ONE, high_x_point

N = SECP256K1.order


class TestMessageHash:
    def test_empty_input(self):
        assert compute_message_hash(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )

    def test_zero_word(self):
        assert compute_message_hash(b"\x00" * 32).hex() == (
            "290decd9548b62a8d60345a988386fc84ba6bc95484008f6362f93160ef3e563"
        )

    def test_returns_bytes(self):
        h = compute_message_hash(b"hello")
        assert type(h) is bytes
        assert len(h) == 32

    def test_domain_tag_is_prefixed(self):
        assert compute_message_hash(b"data", b"tag") == compute_message_hash(b"tagdata")

    def test_domain_tag_changes_hash(self):
        assert compute_message_hash(b"data", b"tag") != compute_message_hash(b"data")


class TestPrivateKey:
    def test_accepts_raw_bytes(self):
        assert normalize_private_key(KEY_A) == KEY_A

    def test_accepts_hex_with_prefix(self):
        assert normalize_private_key("0x" + KEY_A.hex()) == KEY_A

    def test_accepts_hex_without_prefix(self):
        assert normalize_private_key(KEY_A.hex()) == KEY_A

    @pytest.mark.parametrize("scalar", [0, N, N + 1, 2**256 - 1])
    def test_out_of_range_rejected(self, scalar):
        with pytest.raises(InvalidPrivateKey):
            normalize_private_key(scalar.to_bytes(32, "big"))

    def test_largest_valid_scalar(self):
        key = (N - 1).to_bytes(32, "big")
        assert normalize_private_key(key) == key

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidPrivateKey, match="32 bytes"):
            normalize_private_key(KEY_A[:31])

    def test_bad_hex_rejected(self):
        with pytest.raises(InvalidPrivateKey, match="not valid hex"):
            normalize_private_key("0xzz")


class TestPublicKey:
    def test_key_one_is_generator(self):
        assert derive_public_key(KEY_ONE) == G_UNCOMPRESSED

    def test_uncompressed_encoding(self):
        pub = derive_public_key(KEY_A)
        assert len(pub) == 65
        assert pub[0] == 0x04

    def test_distinct_keys(self):
        assert derive_public_key(KEY_A) != derive_public_key(KEY_B)


class TestSignRecover:
    def test_signature_shape(self):
        sig, recovery_id = sign_recoverable(compute_message_hash(b"x"), KEY_A)
        assert len(sig) == 64
        assert recovery_id in (0, 1, 2, 3)

    def test_deterministic(self):
        h = compute_message_hash(b"same input")
        assert sign_recoverable(h, KEY_A) == sign_recoverable(h, KEY_A)

    def test_low_s(self):
        for i in range(16):
            sig, _ = sign_recoverable(compute_message_hash(bytes([i])), KEY_A)
            _, s = split_signature(sig)
            assert s <= N // 2

    def test_round_trip(self):
        h = compute_message_hash(b"round trip")
        sig, recovery_id = sign_recoverable(h, KEY_A)
        assert recover_public_key(h, sig, recovery_id) == derive_public_key(KEY_A)[1:]

    def test_other_hash_recovers_other_key(self):
        sig, recovery_id = sign_recoverable(compute_message_hash(b"a"), KEY_A)
        recovered = recover_public_key(compute_message_hash(b"b"), sig, recovery_id)
        assert recovered != derive_public_key(KEY_A)[1:]

    def test_hash_length_checked(self):
        with pytest.raises(ValueError, match="32 bytes"):
            sign_recoverable(b"short", KEY_A)

    def test_invalid_key_rejected(self):
        with pytest.raises(InvalidPrivateKey):
            sign_recoverable(compute_message_hash(b"x"), b"\x00" * 32)


class TestRecoveryRejections:
    def _signed(self):
        h = compute_message_hash(b"payload")
        sig, recovery_id = sign_recoverable(h, KEY_A)
        return h, sig, recovery_id

    @pytest.mark.parametrize("recovery_id", [-1, 4, 27, 255])
    def test_recovery_id_out_of_range(self, recovery_id):
        h, sig, _ = self._signed()
        with pytest.raises(MalformedSignature, match="Recovery id"):
            recover_public_key(h, sig, recovery_id)

    def test_zero_r(self):
        h, sig, recovery_id = self._signed()
        with pytest.raises(MalformedSignature, match="r out of range"):
            recover_public_key(h, b"\x00" * 32 + sig[32:], recovery_id)

    def test_r_equal_to_order(self):
        h, sig, recovery_id = self._signed()
        with pytest.raises(MalformedSignature, match="r out of range"):
            recover_public_key(h, N.to_bytes(32, "big") + sig[32:], recovery_id)

    def test_zero_s(self):
        h, sig, recovery_id = self._signed()
        with pytest.raises(MalformedSignature, match="s out of range"):
            recover_public_key(h, sig[:32] + b"\x00" * 32, recovery_id)

    def test_s_above_order(self):
        h, sig, recovery_id = self._signed()
        with pytest.raises(MalformedSignature, match="s out of range"):
            recover_public_key(h, sig[:32] + b"\xff" * 32, recovery_id)

    def test_no_point_for_high_recovery_id(self):
        # r + n exceeds the field prime, so recovery ids 2 and 3 have no point
        h, sig, _ = self._signed()
        big_r = (N - 1).to_bytes(32, "big")
        with patch("sigpackage.crypto.coincurve") as mock_coincurve:
            with pytest.raises(MalformedSignature, match="exceeds field prime"):
                recover_public_key(h, big_r + sig[32:], 2)
            mock_coincurve.PublicKey.from_signature_and_message.assert_not_called()

    def test_wrong_signature_length(self):
        h, sig, recovery_id = self._signed()
        with pytest.raises(MalformedSignature, match="64 bytes"):
            recover_public_key(h, sig[:63], recovery_id)


class TestHighRecoveryIds:
    """Recovery ids 2 and 3 rebuild R from x = r + n."""

    def _high_signature(self):
        r, y = high_x_point()
        sig = r.to_bytes(32, "big") + (12345).to_bytes(32, "big")
        return sig, 2 | (y & 1)

    def test_recovers_key(self):
        sig, recovery_id = self._high_signature()
        recovered = recover_public_key(compute_message_hash(b"\x00" * 32), sig, recovery_id)
        assert len(recovered) == 64

    def test_parities_differ(self):
        sig, _ = self._high_signature()
        h = compute_message_hash(b"\x00" * 32)
        assert recover_public_key(h, sig, 2) != recover_public_key(h, sig, 3)
