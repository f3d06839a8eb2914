"""
Promote an existing account to admin.

    python -m quluub.scripts.promote_admin someone@example.com
"""

import logging
import sys
from typing import List, Optional

from quluub.crud import user as user_crud
from quluub.database import SessionLocal
from quluub.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)


def promote_admin(email: str) -> int:
    db = SessionLocal()
    try:
        user = user_crud.get_user_by_email(db, email)
        if not user:
            print(f"No user registered with {email}", file=sys.stderr)
            return 1
        if user.role == ROLE_ADMIN:
            print(f"{user.email} is already an admin")
            return 0

        user.role = ROLE_ADMIN
        user.is_suspended = False
        db.commit()
        logger.info("Promoted user %s to admin", user.id)
        print(f"{user.email} is now an admin")
        return 0
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: python -m quluub.scripts.promote_admin <email>", file=sys.stderr)
        return 2
    return promote_admin(args[0])


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
