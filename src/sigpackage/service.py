"""Verifying service: the host boundary for incoming instructions.

Takes raw instruction bytes, dispatches on the instruction kind, and
reports the outcome as a VerificationResult. Protocol failures never
escape as exceptions; they become negative results the host can log
and reject without tearing anything down.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sigpackage.config import ProtocolConfig, VerifierConfig, parse_trusted_keys
from sigpackage.constants import InstructionKind
from sigpackage.errors import (
    MalformedPackage,
    SignaturePackageError,
    UntrustedPublicKey,
)
from sigpackage.package import decode_instruction, decode_package
from sigpackage.verifier import verify_package

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of processing one instruction."""

    ok: bool
    error_kind: Optional[str] = None
    error: Optional[str] = None
    public_key: Optional[bytes] = None  # recovered X || Y on success
    data: Optional[bytes] = None


def _log_state_update(data: bytes) -> None:
    logger.info("Updating state with data %s", data.hex())


class VerifierService:
    """Dispatches instructions to handlers and applies the trust list.

    on_verified is called with the package data after a successful
    verification. Exceptions it raises propagate to the caller.
    """

    def __init__(self, protocol_config: Optional[ProtocolConfig] = None,
                 verifier_config: Optional[VerifierConfig] = None,
                 on_verified: Optional[Callable[[bytes], None]] = None):
        self._protocol = protocol_config or ProtocolConfig()
        self._verifier = verifier_config or VerifierConfig()
        self._trusted_keys = parse_trusted_keys(self._verifier)
        self._on_verified = on_verified or _log_state_update
        self._handlers: dict[int, Callable[[bytes], VerificationResult]] = {}
        self.register_handler(InstructionKind.VERIFY_SIG, self._handle_verify_sig)

    def register_handler(self, kind: int,
                         handler: Callable[[bytes], VerificationResult]) -> None:
        """Register a handler for an instruction kind.

        Handler signature: (body: bytes) -> VerificationResult
        """
        self._handlers[kind] = handler

    def process_instruction(self, instruction_data: bytes) -> VerificationResult:
        """Decode, dispatch and verify one instruction."""
        try:
            kind, body = decode_instruction(instruction_data)
        except SignaturePackageError as e:
            return self._reject(e)

        handler = self._handlers.get(kind)
        if handler is None:
            return self._reject(MalformedPackage(f"Unknown instruction kind: 0x{kind:02x}"))
        return handler(body)

    def _handle_verify_sig(self, body: bytes) -> VerificationResult:
        logger.info("Attempting to verify signature")
        try:
            package = decode_package(body)
            recovered = verify_package(package, self._protocol)
            if self._trusted_keys and recovered not in self._trusted_keys:
                raise UntrustedPublicKey(
                    f"Public key {recovered.hex()[:16]}... is not trusted"
                )
        except SignaturePackageError as e:
            logger.warning("Signature verification failed")
            return self._reject(e)

        logger.info("Signature valid!")
        self._on_verified(package.data)
        return VerificationResult(ok=True, public_key=recovered, data=package.data)

    @staticmethod
    def _reject(error: SignaturePackageError) -> VerificationResult:
        logger.warning("Rejected instruction (%s): %s", type(error).__name__, error)
        return VerificationResult(
            ok=False,
            error_kind=type(error).__name__,
            error=str(error),
        )
