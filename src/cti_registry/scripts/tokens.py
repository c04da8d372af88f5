# src/cti_registry/scripts/tokens.py
"""Mint bearer tokens for caller identities.

Useful for local testing and for wiring trusted front-ends that already
authenticate users (e.g. by wallet signature) and need to call the registry
on their behalf.
"""

from __future__ import annotations

import argparse

from cti_registry.core.security import create_access_token
from cti_registry.core.settings import settings


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Issue an access token for an identity")
    parser.add_argument("identity", help="Caller identity, e.g. a wallet address")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help=f"Token lifetime (defaults to {settings.access_token_expire_minutes})",
    )
    args = parser.parse_args(argv)

    if args.minutes is not None:
        settings.access_token_expire_minutes = args.minutes
    print(create_access_token(args.identity))


if __name__ == "__main__":
    main()
