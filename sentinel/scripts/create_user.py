"""
Create a user (e.g. the first admin). Run from project root:
  python -m sentinel.scripts.create_user FULLNAME EMAIL PASSWORD [role]
Example:
  python -m sentinel.scripts.create_user "Ana Li" admin@example.com your-secure-password admin
"""
import argparse
import sys
from collections.abc import Sequence

from sentinel.core.config import get_settings
from sentinel.core.database import SessionLocal
from sentinel.core.errors import AuthError
from sentinel.core.tokens import TokenIssuer
from sentinel.models.user import ROLES, ROLE_USER
from sentinel.services.auth import AuthService
from sentinel.services.token_store import TokenStore
from sentinel.services.user_directory import UserDirectory


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Sentinel user.")
    parser.add_argument("fullname", help="Full name (1-255 chars)")
    parser.add_argument("email", help="Email address; stored lowercase")
    parser.add_argument("password", help="Password")
    parser.add_argument("role", nargs="?", default=ROLE_USER, choices=list(ROLES))
    args = parser.parse_args(argv)

    settings = get_settings()
    db = SessionLocal()
    try:
        service = AuthService(
            users=UserDirectory(db),
            tokens=TokenStore(db),
            issuer=TokenIssuer.from_settings(settings),
            bcrypt_rounds=settings.BCRYPT_ROUNDS,
        )
        user = service.register(args.fullname, args.email, args.password, args.role)
    except AuthError as e:
        print(e.message, file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.email}' with role '{user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
