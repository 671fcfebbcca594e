"""Utility script to issue a development access token for a user id."""

from __future__ import annotations

import argparse
from datetime import timedelta

from notification_service.config import get_settings
from notification_service.infrastructure.security import create_access_token


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Issue a JWT accepted by the notification service.",
    )
    parser.add_argument("user_id", type=int, help="Numeric user identifier")
    parser.add_argument("--role", default="MEMBER", help="Role claim (default: MEMBER)")
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Lifetime in minutes (default: ACCESS_TOKEN_EXPIRE_MINUTES)",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.user_id <= 0:
        raise SystemExit("user_id must be a positive integer")

    claim = get_settings().jwt_user_id_claim
    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token({claim: args.user_id, "role": args.role}, expires))


if __name__ == "__main__":
    main()
