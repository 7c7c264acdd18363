"""
Create a user (e.g. an extra admin) in the database backend. Run from project root:
  python -m app.scripts.create_user USERNAME PASSWORD FULL_NAME EMAIL [role] [--nik NIK] [--phone PHONE]
Example:
  python -m app.scripts.create_user kades your-secure-password "Kepala Desa" kades@desa.id admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.errors import Conflict
from app.core.security import BcryptCredentialVerifier
from app.schemas.user import NewUser, UserCreate
from app.storage.sql import SqlIdentityStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a portal user without the web UI.")
    parser.add_argument("username", help="Username (3-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument("full_name", help="Full name")
    parser.add_argument("email", help="Email address")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    parser.add_argument("--nik", default=None, help="16-digit NIK")
    parser.add_argument("--phone", default=None, help="Phone number")
    args = parser.parse_args(argv)

    try:
        body = UserCreate(
            username=args.username,
            password=args.password,
            full_name=args.full_name,
            email=args.email,
            nik=args.nik,
            phone=args.phone,
            role=args.role,
        )
    except ValidationError as e:
        for err in e.errors():
            print(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    verifier = BcryptCredentialVerifier(rounds=get_settings().BCRYPT_ROUNDS)
    store = SqlIdentityStore(SessionLocal)
    try:
        user = store.create(
            NewUser(
                username=body.username,
                password_hash=verifier.hash(body.password),
                full_name=body.full_name,
                email=body.email,
                nik=body.nik,
                phone=body.phone,
                role=body.role,
            )
        )
    except Conflict as e:
        print(e.message, file=sys.stderr)
        return 1
    logger.info("Created user '%s' with role '%s' (id=%s).", user.username, user.role, user.id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
