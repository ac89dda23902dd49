"""Incident-response CLI for revoking and purging tokens.

Examples::

    jwt-revocation revoke --claims '{"sub": "U1", "iat": 1000, "exp": 2000}'
    jwt-revocation purge --claims '{"sub": "U1", "iat": 1000}' --lifetime 86400
    jwt-revocation check --claims '{"sub": "U1", "iat": 1000}'

Settings come from ``JWT_REVOCATION_*`` environment variables, so point
``JWT_REVOCATION_STORE_TYPE=redis`` at the shared store; the memory store only
lives as long as this process.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from pydantic import ValidationError

from jwt_revocation.config import Settings, get_settings
from jwt_revocation.engine import RevocationEngine
from jwt_revocation.exceptions import RevocationError
from jwt_revocation.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def _claims(value: str) -> dict[str, Any]:
    try:
        claims = json.loads(value)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e
    if not isinstance(claims, dict):
        raise argparse.ArgumentTypeError("claims must be a JSON object")
    return claims


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jwt-revocation", description="Revoke, purge or check JWT tokens"
    )
    parser.add_argument(
        "command",
        choices=["check", "revoke", "purge"],
        help="Operation to run",
    )
    parser.add_argument(
        "--claims",
        type=_claims,
        required=True,
        help="Decoded JWT payload as a JSON object",
    )
    parser.add_argument(
        "--lifetime",
        type=int,
        default=None,
        help="Record lifetime in seconds (default: exp - iat)",
    )
    return parser


async def run(args: argparse.Namespace, settings: Settings) -> int:
    """Run one command and return the process exit code."""
    engine = RevocationEngine(settings)
    try:
        if args.command == "check":
            revoked = await engine.is_revoked(args.claims)
            print("revoked" if revoked else "active")
        elif args.command == "revoke":
            await engine.revoke(args.claims, args.lifetime)
            print("revoked")
        else:
            await engine.purge(args.claims, args.lifetime)
            print("purged")
    except RevocationError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    finally:
        await engine.close()
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid JWT_REVOCATION_* settings:\n{e}", file=sys.stderr)
        return 1
    setup_logging(settings.effective_log_level, settings.log_format)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":
    sys.exit(main())
