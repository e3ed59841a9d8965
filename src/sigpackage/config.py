"""YAML configuration loading for sigpackage."""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from sigpackage.constants import (
    DEFAULT_CURVE,
    PUBLIC_KEY_SIZE,
    PUBLIC_KEY_XY_SIZE,
    SECP256K1_FIELD_PRIME,
    SECP256K1_ORDER,
    UNCOMPRESSED_PREFIX,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurveParams:
    name: str
    order: int
    field_prime: int


SECP256K1 = CurveParams(
    name="secp256k1",
    order=SECP256K1_ORDER,
    field_prime=SECP256K1_FIELD_PRIME,
)

CURVES = {
    "secp256k1": SECP256K1,
}


@dataclass
class ProtocolConfig:
    domain_tag: bytes = b""  # prepended to data before hashing
    curve: str = DEFAULT_CURVE
    require_uncompressed_prefix: bool = True


@dataclass
class VerifierConfig:
    trusted_public_keys: list[str] = field(default_factory=list)


@dataclass
class SigPackageConfig:
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    verifier: VerifierConfig = field(default_factory=VerifierConfig)
    log_level: str = "INFO"


def _hex_to_bytes(value: str) -> bytes:
    # Unquoted 0x... in YAML loads as an int
    if not isinstance(value, str):
        raise ValueError(f"Expected a quoted hex string, got {value!r}")
    value = value.strip()
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def load_config(path: Path) -> SigPackageConfig:
    """Load configuration from a YAML file."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = SigPackageConfig()

    if "protocol" in raw:
        p = raw["protocol"] or {}
        config.protocol = ProtocolConfig(
            domain_tag=_hex_to_bytes("" if p.get("domain_tag") is None else p["domain_tag"]),
            curve=p.get("curve", DEFAULT_CURVE),
            require_uncompressed_prefix=p.get("require_uncompressed_prefix", True),
        )
        # Fail at load time rather than on the first verification
        get_curve(config.protocol)

    if "verifier" in raw:
        v = raw["verifier"] or {}
        config.verifier = VerifierConfig(
            trusted_public_keys=list(v.get("trusted_public_keys") or []),
        )
        parse_trusted_keys(config.verifier)

    config.log_level = raw.get("log_level", "INFO")
    logger.debug("Loaded config from %s", path)
    return config


def get_curve(config: ProtocolConfig) -> CurveParams:
    """Resolve curve parameters from config."""
    try:
        return CURVES[config.curve]
    except KeyError:
        raise ValueError(
            f"Unsupported curve '{config.curve}' (supported: {', '.join(sorted(CURVES))})"
        ) from None


def parse_trusted_keys(config: VerifierConfig) -> set[bytes]:
    """Decode the trust list into 64-byte X||Y keys.

    Entries may be 64-byte coordinates or 65-byte uncompressed keys.
    """
    keys = set()
    for entry in config.trusted_public_keys:
        key = _hex_to_bytes(entry)
        if len(key) == PUBLIC_KEY_SIZE and key[0] == UNCOMPRESSED_PREFIX:
            key = key[1:]
        if len(key) != PUBLIC_KEY_XY_SIZE:
            raise ValueError(
                f"Trusted public key must be {PUBLIC_KEY_XY_SIZE} or "
                f"{PUBLIC_KEY_SIZE} bytes: {entry}"
            )
        keys.add(key)
    return keys
