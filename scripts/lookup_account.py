#!/usr/bin/env python3
"""Script to look up an account by email or phone number."""

import sys
import os

# Add parent directory to path to import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from app.services.accounts import AccountStore
from app.services.identifiers import NormalizationError, PhoneNumberingPlan, normalize


def lookup_account(raw_identifier: str, plan: PhoneNumberingPlan) -> bool:
    """Print the account registered under an identifier.

    Args:
        raw_identifier: Email or phone number in any accepted format

    Returns:
        True if an account was found, False otherwise
    """
    try:
        identifier = normalize(raw_identifier, plan)
    except NormalizationError as e:
        print(f"Invalid identifier: {e}")
        return False

    print(f"Looking for account with {identifier.field}: {identifier.value}")

    user = AccountStore().find_by_field(identifier.field, identifier.value)

    if not user:
        print(f"No account found with {identifier.field}: {identifier.value}")
        return False

    print("\nFound account:")
    print(f"   ID: {user.id}")
    print(f"   Name: {user.name}")
    print(f"   Email: {user.email}")
    print(f"   Phone: {user.phone}")
    print(f"   Profile complete: {user.profile_complete}")
    print(f"   Created: {user.created_at}")
    return True


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print("Usage: python lookup_account.py <email_or_phone>")
        print("Example: python lookup_account.py 0781234567")
        print("Example: python lookup_account.py someone@example.com")
        sys.exit(1)

    app = create_app()
    with app.app_context():
        found = lookup_account(sys.argv[1], PhoneNumberingPlan.from_config(app.config))
    sys.exit(0 if found else 1)
