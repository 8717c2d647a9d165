"""
Command-line interface for HaozPay Python SDK
Provides key generation and offline signing and verification tools
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .crypto.keys import DEFAULT_KEY_SIZE, generate_key_pair
from .exceptions import HaozPaySDKError, SignatureError, ValidationError
from .signing.canonical import build_sign_string
from .signing.digest import compute_digest
from .signing.signer import create_signer
from .signing.types import DEFAULT_SIGNATURE_SCHEME, SIGN_FIELD, SignatureScheme
from .verification.verifier import verify_sign
from .version import __version__


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='haozpay-cli',
        description='HaozPay SDK command-line interface for key generation, signing and verification'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'HaozPay Python SDK {__version__}'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_keygen_parser(subparsers)
    setup_params_parsers(subparsers)

    return parser


def setup_keygen_parser(subparsers):
    """Setup key generation subcommand."""
    keygen_parser = subparsers.add_parser('keygen', help='Generate an RSA key pair')
    keygen_parser.add_argument(
        '--key-size',
        type=int,
        default=DEFAULT_KEY_SIZE,
        help=f'Modulus size in bits (default: {DEFAULT_KEY_SIZE})'
    )
    keygen_parser.add_argument(
        '--format',
        choices=['pkcs1', 'pkcs8'],
        default='pkcs1',
        help='Private key encoding (default: pkcs1)'
    )
    keygen_parser.add_argument('--private-key-out', help='Write the private key PEM to this file')
    keygen_parser.add_argument('--public-key-out', help='Write the public key PEM to this file')


def _add_params_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument('--params', help='Parameters as a JSON object')
    source.add_argument('--params-file', help='File containing a JSON object of parameters')


def _add_scheme_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--scheme',
        choices=[s.value for s in SignatureScheme],
        default=DEFAULT_SIGNATURE_SCHEME.value,
        help=f'Signature scheme (default: {DEFAULT_SIGNATURE_SCHEME.value})'
    )


def setup_params_parsers(subparsers):
    """Setup canonicalize, digest, sign and verify subcommands."""
    canonical_parser = subparsers.add_parser('canonicalize', help='Print the canonical sign string')
    _add_params_arguments(canonical_parser)

    digest_parser = subparsers.add_parser('digest', help='Print the SHA-256 hex digest of the sign string')
    _add_params_arguments(digest_parser)

    sign_parser = subparsers.add_parser('sign', help='Sign parameters with a private key')
    _add_params_arguments(sign_parser)
    _add_scheme_argument(sign_parser)
    sign_parser.add_argument('--private-key-file', required=True, help='Private key file (PEM or bare base64)')
    sign_parser.add_argument('--detailed', action='store_true', help='Also print the sign string and digest')
    sign_parser.add_argument('--attach', action='store_true', help='Print the parameters with the sign field added')

    verify_parser = subparsers.add_parser('verify', help='Verify a signature over parameters')
    _add_params_arguments(verify_parser)
    _add_scheme_argument(verify_parser)
    verify_parser.add_argument('--public-key-file', required=True, help='Public key file (PEM or bare base64)')
    verify_parser.add_argument('--signature', help='Base64 signature (default: the sign field of the parameters)')


def _read_text_file(path: str, what: str) -> str:
    try:
        return Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise ValidationError(f"Cannot read {what} file {path}: {e.strerror}", "FILE_READ_FAILED") from None


def load_params(args) -> Dict[str, Any]:
    """Load the parameter object from --params or --params-file."""
    text = args.params if args.params is not None else _read_text_file(args.params_file, 'parameters')
    try:
        params = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Parameters are not valid JSON: {e}", "INVALID_PARAMS") from None

    if not isinstance(params, dict):
        raise ValidationError("Parameters must be a JSON object", "INVALID_PARAMS")
    return params


def handle_keygen_command(args) -> int:
    """Handle key generation command."""
    key_pair = generate_key_pair(args.key_size, args.format)

    if args.private_key_out:
        Path(args.private_key_out).write_text(key_pair.private_key + "\n", encoding='utf-8')
        print(f"Private key written to {args.private_key_out}")
    else:
        print(key_pair.private_key)

    if args.public_key_out:
        Path(args.public_key_out).write_text(key_pair.public_key, encoding='utf-8')
        print(f"Public key written to {args.public_key_out}")
    else:
        print(key_pair.public_key)

    return 0


def handle_canonicalize_command(args) -> int:
    """Handle canonical sign string command."""
    print(build_sign_string(load_params(args)))
    return 0


def handle_digest_command(args) -> int:
    """Handle digest command."""
    print(compute_digest(build_sign_string(load_params(args))).hex)
    return 0


def handle_sign_command(args) -> int:
    """Handle signing command."""
    params = load_params(args)
    private_key = _read_text_file(args.private_key_file, 'private key')

    result = create_signer(private_key, args.scheme).sign_detailed(params)

    if args.detailed:
        print(f"Sign string: {result.canonical_string}")
        print(f"Digest: {result.digest_hex}")
        print(f"Scheme: {result.scheme.value}")

    if args.attach:
        params[SIGN_FIELD] = result.signature
        print(json.dumps(params, ensure_ascii=False))
    elif args.detailed:
        print(f"Signature: {result.signature}")
    else:
        print(result.signature)

    return 0


def handle_verify_command(args) -> int:
    """Handle verification command."""
    params = load_params(args)
    public_key = _read_text_file(args.public_key_file, 'public key')

    signature = args.signature if args.signature is not None else params.get(SIGN_FIELD)
    if not signature:
        raise ValidationError("No signature given and the parameters carry no sign field", "MISSING_SIGNATURE")

    try:
        verify_sign(params, signature, public_key, args.scheme)
    except SignatureError as e:
        print(f"✗ Signature invalid: {e.message}")
        return 1

    print("✓ Signature valid")
    return 0


_HANDLERS = {
    'keygen': handle_keygen_command,
    'canonicalize': handle_canonicalize_command,
    'digest': handle_digest_command,
    'sign': handle_sign_command,
    'verify': handle_verify_command,
}


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    handler = _HANDLERS.get(args.command)
    if handler is None:
        # No command specified, show help
        parser.print_help()
        return 1

    try:
        return handler(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except HaozPaySDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
