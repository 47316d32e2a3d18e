#!/usr/bin/env python
"""
Script untuk membuat admin account pertama di Security Audit API.
Admin berikutnya dibuat lewat POST /api/v1/admin/accounts.
Usage: python scripts/create_admin.py [--non-interactive <username> <password> [email]]
"""

import asyncio
import sys
import getpass
from pathlib import Path
from typing import Optional

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from app.core.constants import AccountRole
from app.core.exceptions import SecurityAuditException
from app.db.session import get_db_context, init_db
from app.models.account import Account
from app.services.account import AccountService


def get_user_input() -> dict:
    """Get admin account details from user input."""
    print("\n=== Create Admin Account ===\n")

    while True:
        username = input("Admin username: ").strip()
        if len(username) >= 3:
            break
        print("Username must be at least 3 characters.")

    while True:
        password = getpass.getpass("Admin password: ")
        if len(password) < 8:
            print("Password must be at least 8 characters long.")
            continue

        if password != getpass.getpass("Confirm password: "):
            print("Passwords do not match. Please try again.")
            continue

        break

    email = input("Email for reports and recovery (optional): ").strip() or None

    return {"username": username, "password": password, "email": email}


async def create_admin_account(username: str, password: str, email: Optional[str] = None) -> Account:
    """
    Create admin account in database.

    Raises:
        ConflictError: Jika username sudah dipakai
    """
    async with get_db_context() as db:
        return await AccountService(db).create(
            username=username,
            password=password,
            role=AccountRole.ADMIN,
            email=email
        )


async def main():
    """Main function."""
    await init_db()

    if len(sys.argv) > 1 and sys.argv[1] == "--non-interactive":
        if len(sys.argv) not in (4, 5):
            print("Usage: python create_admin.py --non-interactive <username> <password> [email]")
            sys.exit(1)

        data = {
            "username": sys.argv[2],
            "password": sys.argv[3],
            "email": sys.argv[4] if len(sys.argv) == 5 else None
        }
    else:
        data = get_user_input()

    try:
        admin = await create_admin_account(**data)
    except SecurityAuditException as e:
        print(f"\nError creating admin account: {e.message}")
        sys.exit(1)

    print("\nAdmin account created successfully!")
    print(f"   Username: {admin.a_username}")
    print(f"   ID: {admin.a_id}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        sys.exit(0)
