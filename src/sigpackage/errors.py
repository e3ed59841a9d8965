"""Error types raised by the package builder and verifier.

All of them are ValueErrors: each one means the input (key, bytes or
signature) was bad, and none of them is retried.
"""


class SignaturePackageError(ValueError):
    """Base class for every protocol-level rejection."""


class InvalidPrivateKey(SignaturePackageError):
    """Private scalar is not in [1, n - 1] or has the wrong width."""


class MalformedPackage(SignaturePackageError):
    """Package or instruction bytes could not be decoded."""


class MalformedSignature(SignaturePackageError):
    """r/s out of range, bad recovery id, or no recoverable point."""


class AuthenticationFailure(SignaturePackageError):
    """Recovered public key does not match the embedded one."""


class UntrustedPublicKey(AuthenticationFailure):
    """Signature is valid but the key is not on the verifier's trust list."""
