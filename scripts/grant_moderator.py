from __future__ import annotations

import argparse
import sys

from sqlmodel import Session

from app.db.init_db import init_db
from app.db.session import engine
from app.models.enums import AppRole
from app.services.auth_service import create_user
from app.services.role_service import grant_role
from app.services.user_service import get_user_by_email


def main() -> None:
    parser = argparse.ArgumentParser(description='Grant the MODERATOR role to an account.')
    parser.add_argument('--email', required=True, help='Account email')
    parser.add_argument('--create', action='store_true', help='Create the account if it does not exist')
    parser.add_argument('--password', help='Password for a newly created account')
    args = parser.parse_args()

    init_db()
    with Session(engine) as session:
        user = get_user_by_email(session, args.email)
        if user is None:
            if not args.create:
                sys.exit(f"no account with email {args.email}")
            if not args.password:
                sys.exit('--password is required with --create')
            user = create_user(session, args.email, args.password)
            print(f"created account {user.email} ({user.id})")
        try:
            grant_role(session, user.id, AppRole.MODERATOR)
        except ValueError as exc:
            sys.exit(f"{args.email}: {exc}")
    print(f"granted {AppRole.MODERATOR.value} to {args.email}")


if __name__ == '__main__':
    main()
