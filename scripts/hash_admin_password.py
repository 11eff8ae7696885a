"""
Hash Admin Password

Produces the bcrypt hash expected in ADMIN_PASSWORD_HASH. The admin account
is configured through the environment, so there is no row to seed; run this
once and paste the output into the deployment's environment.

Usage:
    python scripts/hash_admin_password.py
"""

import getpass
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from app.core.security import hash_password, verify_password


def main() -> int:
    password = getpass.getpass("Admin password: ")
    confirm = getpass.getpass("Confirm password: ")

    if not password:
        print("Password must not be empty")
        return 1
    if password != confirm:
        print("Passwords do not match")
        return 1

    hashed = hash_password(password)
    if not verify_password(password, hashed):
        print("Hash verification failed")
        return 1

    print("Set the following in your environment:")
    print(f"  ADMIN_PASSWORD_HASH={hashed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
