"""Throwaway keys and payloads for development and tests.

These use a nondeterministic generator and must never be reached from
build_package or verify_package.
"""

from __future__ import annotations
import os

from eth_account import Account

from sigpackage.constants import DATA_SIZE


def generate_private_key() -> bytes:
    """Generate a random 32-byte secp256k1 private key."""
    return bytes(Account.create().key)


def generate_payload() -> bytes:
    """Generate a random 32-byte payload (e.g. a fresh identifier)."""
    return os.urandom(DATA_SIZE)
