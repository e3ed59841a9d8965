"""Signer side: build signature packages from a payload and a private key.

Signing is deterministic (RFC 6979), so building the same payload with
the same key and config always yields byte-identical packages.
"""

from __future__ import annotations
import logging
from typing import Optional

from sigpackage.config import ProtocolConfig, get_curve
from sigpackage.constants import DATA_SIZE
from sigpackage.crypto import (
    PrivateKeyLike,
    compute_message_hash,
    derive_public_key,
    sign_recoverable,
)
from sigpackage.package import SignaturePackage, encode_verify_sig

logger = logging.getLogger(__name__)


def build_package(payload: bytes, private_key: PrivateKeyLike,
                  config: Optional[ProtocolConfig] = None) -> SignaturePackage:
    """Sign a 32-byte payload and wrap it in a SignaturePackage.

    Raises InvalidPrivateKey if the key is not a valid secp256k1 scalar.
    """
    config = config or ProtocolConfig()
    if len(payload) != DATA_SIZE:
        raise ValueError(f"Payload must be {DATA_SIZE} bytes, got {len(payload)}")

    curve = get_curve(config)
    public_key = derive_public_key(private_key, curve)
    msg_hash = compute_message_hash(payload, config.domain_tag)
    signature, recovery_id = sign_recoverable(msg_hash, private_key, curve)

    logger.debug("Built package for key %s (recovery_id=%d)",
                 public_key.hex()[:18], recovery_id)
    return SignaturePackage(
        verifier_signature=signature,
        recovery_id=recovery_id,
        public_key=public_key,
        data=bytes(payload),
    )


def build_instruction(payload: bytes, private_key: PrivateKeyLike,
                      config: Optional[ProtocolConfig] = None) -> bytes:
    """Build a package and encode it as a VERIFY_SIG instruction."""
    return encode_verify_sig(build_package(payload, private_key, config))
