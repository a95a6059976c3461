"""Storefront management CLI.

Creates and drops the database schema, and grants the owner role that
dashboard actions (order status, coupon administration) require.

Usage:
    python src/manage.py setup-db              # Create all tables
    python src/manage.py drop-db               # Drop all tables
    python src/manage.py grant-owner USER_ID   # Give USER_ID the owner role
"""

import argparse
import sys


def setup_database():
    """Create the storefront database schema."""
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    """Drop the storefront database schema."""
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def grant_owner(user_id):
    """Create or update the profile for ``user_id`` with the owner role."""
    from storefront.account.profile import Profile, Role
    from storefront.domain import storefront

    storefront.init()
    with storefront.domain_context():
        repo = storefront.repository_for(Profile)
        profile = repo.find_by_user_id(user_id)
        if profile is None:
            profile = Profile.create(user_id=user_id, role=Role.OWNER.value)
        else:
            profile.role = Role.OWNER.value
        repo.add(profile)

    print(f"{user_id} is now an owner.")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    owner_parser = subparsers.add_parser("grant-owner", help="Grant the owner role to a user")
    owner_parser.add_argument("user_id", help="Authenticated user id")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "grant-owner":
        grant_owner(args.user_id)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
