"""Binary encoding for signature packages.

A package is a fixed 162-byte record:

    verifier_signature(64) + recovery_id(1) + public_key(65) + data(32)

On the wire it is preceded by a 1-byte instruction kind so that the
verifying service can dispatch on message type.
"""

from __future__ import annotations
import struct
from dataclasses import dataclass

from sigpackage.constants import (
    DATA_SIZE,
    INSTRUCTION_KIND_SIZE,
    PACKAGE_FORMAT,
    PACKAGE_SIZE,
    PUBLIC_KEY_SIZE,
    SIGNATURE_SIZE,
    InstructionKind,
)
from sigpackage.errors import MalformedPackage


@dataclass(frozen=True)
class SignaturePackage:
    """Self-contained proof that the holder of public_key signed data."""

    verifier_signature: bytes
    recovery_id: int
    public_key: bytes
    data: bytes

    def __post_init__(self):
        if len(self.verifier_signature) != SIGNATURE_SIZE:
            raise MalformedPackage(
                f"Signature must be {SIGNATURE_SIZE} bytes, got {len(self.verifier_signature)}"
            )
        if not 0 <= self.recovery_id <= 0xFF:
            raise MalformedPackage(f"Recovery id must fit in one byte: {self.recovery_id}")
        if len(self.public_key) != PUBLIC_KEY_SIZE:
            raise MalformedPackage(
                f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(self.public_key)}"
            )
        if len(self.data) != DATA_SIZE:
            raise MalformedPackage(
                f"Data must be {DATA_SIZE} bytes, got {len(self.data)}"
            )


def encode_package(package: SignaturePackage) -> bytes:
    """Encode a package into its 162-byte wire form."""
    return struct.pack(
        PACKAGE_FORMAT,
        package.verifier_signature,
        package.recovery_id,
        package.public_key,
        package.data,
    )


def decode_package(raw: bytes) -> SignaturePackage:
    """Decode exactly 162 bytes into a package.

    Raises MalformedPackage on truncated or oversized input.
    """
    if len(raw) != PACKAGE_SIZE:
        kind = "too short" if len(raw) < PACKAGE_SIZE else "too long"
        raise MalformedPackage(f"Package {kind}: {len(raw)} != {PACKAGE_SIZE}")

    signature, recovery_id, public_key, data = struct.unpack(PACKAGE_FORMAT, raw)
    return SignaturePackage(
        verifier_signature=signature,
        recovery_id=recovery_id,
        public_key=public_key,
        data=data,
    )


def encode_instruction(kind: int, body: bytes) -> bytes:
    """Prefix a body with its 1-byte instruction kind."""
    if not 0 <= kind <= 0xFF:
        raise ValueError(f"Instruction kind must fit in one byte: {kind}")
    return struct.pack("!B", kind) + body


def decode_instruction(raw: bytes) -> tuple[int, bytes]:
    """Split raw instruction bytes into (kind, body)."""
    if len(raw) < INSTRUCTION_KIND_SIZE:
        raise MalformedPackage("Instruction is empty")
    return raw[0], raw[INSTRUCTION_KIND_SIZE:]


def encode_verify_sig(package: SignaturePackage) -> bytes:
    """Encode a VERIFY_SIG instruction carrying a package."""
    return encode_instruction(InstructionKind.VERIFY_SIG, encode_package(package))


def decode_verify_sig(raw: bytes) -> SignaturePackage:
    """Decode a VERIFY_SIG instruction into its package."""
    kind, body = decode_instruction(raw)
    if kind != InstructionKind.VERIFY_SIG:
        raise MalformedPackage(f"Not a VERIFY_SIG instruction: 0x{kind:02x}")
    return decode_package(body)
