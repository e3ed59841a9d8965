"""Verifier side: authenticate a SignaturePackage by public-key recovery.

The public key is recovered from (hash, recovery_id, signature) and
compared byte-for-byte with public_key[1:65]. This proves possession of
the embedded key only; trust in that key is the caller's concern (see
VerifierService for the optional trust list).
"""

from __future__ import annotations
import logging
from typing import Optional

from sigpackage.config import ProtocolConfig, get_curve
from sigpackage.constants import MAX_RECOVERY_ID, UNCOMPRESSED_PREFIX
from sigpackage.crypto import compute_message_hash, recover_public_key
from sigpackage.errors import (
    AuthenticationFailure,
    MalformedPackage,
    MalformedSignature,
    SignaturePackageError,
)
from sigpackage.package import SignaturePackage

logger = logging.getLogger(__name__)


def verify_package(package: SignaturePackage,
                   config: Optional[ProtocolConfig] = None) -> bytes:
    """Verify a package. Returns the recovered 64-byte public key.

    Raises MalformedSignature, MalformedPackage or AuthenticationFailure.
    """
    config = config or ProtocolConfig()

    # Checked before any recovery work
    if package.recovery_id > MAX_RECOVERY_ID:
        raise MalformedSignature(
            f"Recovery id must be in 0..{MAX_RECOVERY_ID}, got {package.recovery_id}"
        )
    if config.require_uncompressed_prefix and package.public_key[0] != UNCOMPRESSED_PREFIX:
        raise MalformedPackage(
            f"Public key prefix must be 0x{UNCOMPRESSED_PREFIX:02x}, "
            f"got 0x{package.public_key[0]:02x}"
        )

    msg_hash = compute_message_hash(package.data, config.domain_tag)
    recovered = recover_public_key(
        msg_hash,
        package.verifier_signature,
        package.recovery_id,
        get_curve(config),
    )

    if recovered != package.public_key[1:]:
        logger.debug("Recovered key %s does not match embedded key %s",
                     recovered.hex()[:16], package.public_key[1:].hex()[:16])
        raise AuthenticationFailure("Recovered public key does not match embedded key")

    return recovered


def is_valid_package(package: SignaturePackage,
                     config: Optional[ProtocolConfig] = None) -> bool:
    """Boolean form of verify_package."""
    try:
        verify_package(package, config)
        return True
    except SignaturePackageError as e:
        logger.debug("Package rejected: %s", e)
        return False
