#!/usr/bin/env python3
"""
Password Hash Generator
Generates a bcrypt hash for the clinic site admin password.
Copy the printed line into your .env file; it takes precedence over ADMIN_PASSWORD.
"""
import getpass

from clinicsite.utils.auth import hash_password


def main():
    """Prompt for the admin password twice and print the hash."""
    print("=" * 60)
    print("Clinic Site Admin Password Hash Generator")
    print("=" * 60)
    print()

    # Get password securely (won't echo to screen)
    password = getpass.getpass("Enter admin password: ")

    if not password:
        print("\nError: Password cannot be empty")
        return

    password_confirm = getpass.getpass("Confirm password: ")

    if password != password_confirm:
        print("\nError: Passwords do not match")
        return

    print("\nCopy this line to your .env file:\n")
    print(f"ADMIN_PASSWORD_HASH={hash_password(password)}")
    print()
    print("Keep this hash secret and never commit it to version control!")


if __name__ == "__main__":
    main()
