"""Click CLI for sigpackage."""

import json as json_mod
import logging
import sys
from pathlib import Path

import click

from sigpackage.config import SigPackageConfig, load_config
from sigpackage.errors import SignaturePackageError
from sigpackage.package import (
    decode_instruction,
    decode_package,
    encode_package,
    encode_verify_sig,
)
from sigpackage.service import VerificationResult, VerifierService


class _JsonFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record):
        return json_mod.dumps({
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        })


def setup_logging(level: str, json_log: bool = False) -> None:
    if json_log:
        handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            handlers=[handler],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def parse_hex(value: str, what: str) -> bytes:
    """Parse a hex string (optional 0x prefix) or raise a UsageError."""
    value = "".join(value.split())
    if value.startswith(("0x", "0X")):
        value = value[2:]
    try:
        return bytes.fromhex(value)
    except ValueError:
        raise click.UsageError(f"{what} is not valid hex.") from None


def format_result(result: VerificationResult) -> str:
    if result.ok:
        return "Signature valid"
    return f"Error: {result.error_kind}: {result.error}"


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(exists=True),
              default=None, help="Path to config YAML file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json-log", is_flag=True, help="Output logs in structured JSON format")
@click.pass_context
def cli(ctx, config_path, verbose, json_log):
    """sigpackage: secp256k1 signature packages verified by key recovery."""
    ctx.ensure_object(dict)

    if config_path:
        config = load_config(Path(config_path))
    else:
        config = SigPackageConfig()

    if verbose:
        config.log_level = "DEBUG"

    setup_logging(config.log_level, json_log=json_log)
    ctx.obj["config"] = config


@cli.command()
def keygen():
    """Generate a throwaway private key (development only)."""
    from sigpackage.crypto import derive_public_key
    from sigpackage.devtools import generate_private_key

    private_key = generate_private_key()
    click.echo(f"Private key: 0x{private_key.hex()}")
    click.echo(f"Public key:  0x{derive_public_key(private_key).hex()}")
    click.echo()
    click.echo("WARNING: This key is for testing only. It is not stored anywhere.",
               err=True)


@cli.command()
@click.option("--private-key", prompt=True, hide_input=True,
              help="Hex-encoded private key (with or without 0x prefix)")
@click.pass_context
def pubkey(ctx, private_key):
    """Print the uncompressed public key for a private key."""
    from sigpackage.config import get_curve
    from sigpackage.crypto import derive_public_key

    config = ctx.obj["config"]
    try:
        public_key = derive_public_key(private_key, get_curve(config.protocol))
    except (SignaturePackageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"0x{public_key.hex()}")


@cli.command()
@click.option("--private-key", prompt=True, hide_input=True,
              help="Hex-encoded private key (with or without 0x prefix)")
@click.option("--data", "data_hex", default=None, help="32-byte payload as hex")
@click.option("--random-data", is_flag=True, help="Sign a freshly generated random payload")
@click.option("--raw", is_flag=True, help="Print the bare 162-byte package (no instruction kind)")
@click.option("--json", "as_json", is_flag=True, help="Print package fields as JSON")
@click.pass_context
def sign(ctx, private_key, data_hex, random_data, raw, as_json):
    """Build a signature package for a payload."""
    from sigpackage.builder import build_package
    from sigpackage.devtools import generate_payload

    if data_hex and random_data:
        raise click.UsageError("Cannot use --data and --random-data together.")
    if random_data:
        payload = generate_payload()
    elif data_hex:
        payload = parse_hex(data_hex, "--data")
    else:
        raise click.UsageError("One of --data or --random-data is required.")

    config = ctx.obj["config"]
    try:
        package = build_package(payload, private_key, config.protocol)
    except (SignaturePackageError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    encoded = encode_package(package) if raw else encode_verify_sig(package)
    if as_json:
        click.echo(json_mod.dumps({
            "verifier_signature": package.verifier_signature.hex(),
            "recovery_id": package.recovery_id,
            "public_key": package.public_key.hex(),
            "data": package.data.hex(),
            "encoded": encoded.hex(),
        }, indent=2))
    else:
        click.echo(encoded.hex())


@cli.command()
@click.argument("encoded")
@click.option("--raw", is_flag=True, help="Input is a bare package (no instruction kind)")
@click.pass_context
def verify(ctx, encoded, raw):
    """Verify an encoded instruction (or bare package with --raw)."""
    from sigpackage.constants import InstructionKind
    from sigpackage.package import encode_instruction

    config = ctx.obj["config"]
    instruction = parse_hex(encoded, "ENCODED")
    if raw:
        instruction = encode_instruction(InstructionKind.VERIFY_SIG, instruction)

    try:
        service = VerifierService(
            protocol_config=config.protocol,
            verifier_config=config.verifier,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    result = service.process_instruction(instruction)
    if not result.ok:
        click.echo(format_result(result), err=True)
        sys.exit(1)
    click.echo(format_result(result))
    click.echo(f"Public key: 0x04{result.public_key.hex()}")


@cli.command()
@click.argument("encoded")
@click.option("--raw", is_flag=True, help="Input is a bare package (no instruction kind)")
def inspect(encoded, raw):
    """Decode and print the fields of a package without verifying it."""
    data = parse_hex(encoded, "ENCODED")
    try:
        if raw:
            kind = None
            package = decode_package(data)
        else:
            kind, body = decode_instruction(data)
            package = decode_package(body)
    except SignaturePackageError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if kind is not None:
        click.echo(f"Kind:        0x{kind:02x}")
    click.echo(f"Signature:   {package.verifier_signature.hex()}")
    click.echo(f"Recovery id: {package.recovery_id}")
    click.echo(f"Public key:  {package.public_key.hex()}")
    click.echo(f"Data:        {package.data.hex()}")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
