"""Shared constants for the sigpackage protocol."""

import struct

# SignaturePackage field widths
SIGNATURE_SIZE = 64  # r(32) + s(32)
RECOVERY_ID_SIZE = 1
PUBLIC_KEY_SIZE = 65  # prefix(1) + X(32) + Y(32)
PUBLIC_KEY_XY_SIZE = 64
DATA_SIZE = 32
PRIVATE_KEY_SIZE = 32
HASH_SIZE = 32

# big-endian: signature(64) recovery_id(1) public_key(65) data(32)
PACKAGE_FORMAT = "!64sB65s32s"
PACKAGE_SIZE = struct.calcsize(PACKAGE_FORMAT)  # 162

# Envelope: kind(1) + body
INSTRUCTION_KIND_SIZE = 1

UNCOMPRESSED_PREFIX = 0x04
MAX_RECOVERY_ID = 3

# secp256k1 domain parameters
SECP256K1_FIELD_PRIME = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

DEFAULT_CURVE = "secp256k1"


class InstructionKind:
    """Instruction discriminants (1 byte)."""

    VERIFY_SIG = 0x00  # SignaturePackage to authenticate
