#!/usr/bin/env python3
"""
Create a login account (or promote an existing one) directly in the database.

Usage:
  python scripts/create_account.py --email admin@example.com [--password ...] [--role admin]
"""
from __future__ import annotations

import argparse
import secrets
import sys

from roster.db.create_tables import create_all
from roster.services.auth_service import AuthError, AuthService


def gen_password(length: int = 16) -> str:
    return secrets.token_urlsafe(length)[:length]


def main() -> None:
    ap = argparse.ArgumentParser(description="Create or promote a Roster account")
    ap.add_argument("--email", required=True, help="Account e-mail")
    ap.add_argument("--password", help="Password (default: random 16 chars)")
    ap.add_argument("--role", choices=("member", "admin"), default="member")
    args = ap.parse_args()

    create_all()
    svc = AuthService()
    email = (args.email or "").strip().lower()
    existing = svc.repository.get_account(email)
    password = None
    if existing:
        print(f"Account '{email}' already exists; updating role.")
    else:
        password = (args.password or "").strip() or gen_password()
        svc.register(email, password)
    svc.set_role(email, args.role)

    print("OK: account ready")
    print(f"  E-mail: {email}")
    print(f"  Role:   {args.role}")
    if password and not args.password:
        print(f"  Password: {password}")


if __name__ == "__main__":
    try:
        main()
    except AuthError as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
