"""Hashing, signing and public-key recovery for signature packages.

Keccak-256 comes from web3; secp256k1 signing and recovery use coincurve,
which wraps libsecp256k1 (RFC 6979 nonces, low-s signatures, recovery
ids 0-3).
"""

from __future__ import annotations
import logging
from typing import Union

import coincurve
from web3 import Web3

from sigpackage.config import SECP256K1, CurveParams
from sigpackage.constants import (
    HASH_SIZE,
    MAX_RECOVERY_ID,
    PRIVATE_KEY_SIZE,
    SIGNATURE_SIZE,
)
from sigpackage.errors import InvalidPrivateKey, MalformedSignature

logger = logging.getLogger(__name__)

PrivateKeyLike = Union[bytes, str]


def compute_message_hash(data: bytes, domain_tag: bytes = b"") -> bytes:
    """Keccak-256 of domain_tag || data. An empty tag hashes data alone."""
    return bytes(Web3.keccak(domain_tag + data))


def normalize_private_key(private_key: PrivateKeyLike,
                          curve: CurveParams = SECP256K1) -> bytes:
    """Return the 32-byte private scalar, accepting raw bytes or hex.

    Raises InvalidPrivateKey unless the scalar is in [1, n - 1].
    """
    if isinstance(private_key, str):
        hex_key = private_key[2:] if private_key.startswith(("0x", "0X")) else private_key
        try:
            key_bytes = bytes.fromhex(hex_key)
        except ValueError as e:
            raise InvalidPrivateKey(f"Private key is not valid hex: {e}") from e
    else:
        key_bytes = bytes(private_key)

    if len(key_bytes) != PRIVATE_KEY_SIZE:
        raise InvalidPrivateKey(
            f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(key_bytes)}"
        )
    scalar = int.from_bytes(key_bytes, "big")
    if not 0 < scalar < curve.order:
        raise InvalidPrivateKey("Private key scalar out of range [1, n - 1]")
    return key_bytes


def derive_public_key(private_key: PrivateKeyLike,
                      curve: CurveParams = SECP256K1) -> bytes:
    """Uncompressed 65-byte public key (0x04 || X || Y) for a private key."""
    secret = normalize_private_key(private_key, curve)
    return coincurve.PrivateKey(secret).public_key.format(compressed=False)


def sign_recoverable(msg_hash: bytes, private_key: PrivateKeyLike,
                     curve: CurveParams = SECP256K1) -> tuple[bytes, int]:
    """Sign a 32-byte hash. Returns (r || s, recovery_id)."""
    if len(msg_hash) != HASH_SIZE:
        raise ValueError(f"Message hash must be {HASH_SIZE} bytes")
    secret = normalize_private_key(private_key, curve)
    # hasher=None: msg_hash is already the digest
    sig65 = coincurve.PrivateKey(secret).sign_recoverable(msg_hash, hasher=None)
    return sig65[:SIGNATURE_SIZE], sig65[SIGNATURE_SIZE]


def split_signature(signature: bytes) -> tuple[int, int]:
    """Split a 64-byte r || s signature into integer scalars."""
    if len(signature) != SIGNATURE_SIZE:
        raise MalformedSignature(
            f"Signature must be {SIGNATURE_SIZE} bytes, got {len(signature)}"
        )
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:], "big")
    return r, s


def recover_public_key(msg_hash: bytes, signature: bytes, recovery_id: int,
                       curve: CurveParams = SECP256K1) -> bytes:
    """Recover the signer's public key as 64 bytes (X || Y).

    Raises MalformedSignature if the recovery id is out of range, r or s
    is not in [1, n - 1], or no point exists for the recovery id.
    """
    if len(msg_hash) != HASH_SIZE:
        raise ValueError(f"Message hash must be {HASH_SIZE} bytes")
    if not 0 <= recovery_id <= MAX_RECOVERY_ID:
        raise MalformedSignature(
            f"Recovery id must be in 0..{MAX_RECOVERY_ID}, got {recovery_id}"
        )

    r, s = split_signature(signature)
    if not 0 < r < curve.order:
        raise MalformedSignature("Signature r out of range")
    if not 0 < s < curve.order:
        raise MalformedSignature("Signature s out of range")
    # Recovery ids 2 and 3 take x = r + n, which must still be a field element
    if recovery_id & 2 and r + curve.order >= curve.field_prime:
        raise MalformedSignature(
            f"No curve point for recovery id {recovery_id}: r + n exceeds field prime"
        )

    try:
        public_key = coincurve.PublicKey.from_signature_and_message(
            signature + bytes([recovery_id]), msg_hash, hasher=None
        )
    except ValueError as e:
        raise MalformedSignature(f"Public key recovery failed: {e}") from e

    # Drop the 0x04 prefix
    return public_key.format(compressed=False)[1:]
