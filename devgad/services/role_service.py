# devgad/services/role_service.py
# Admin console role management over userRoles/{uid}

import enum
import logging
from typing import List

from sqlalchemy.orm import Session

from devgad.core.config import settings
from devgad.core.errors import ConflictError, NotFoundError
from devgad.crud import user as crud_user
from devgad.services.identity import is_admin_email

logger = logging.getLogger(__name__)


class RoleAction(str, enum.Enum):
    promote = "promote"
    demote = "demote"
    suspend = "suspend"
    unsuspend = "unsuspend"


ROLE_CHANGES = {
    RoleAction.promote: {"admin": True, "suspended": False},
    RoleAction.demote: {"admin": False},
    RoleAction.suspend: {"suspended": True, "admin": False},
    RoleAction.unsuspend: {"suspended": False},
}

# Actions an admin may not apply to their own account
SELF_LOCKOUT_ACTIONS = {RoleAction.demote, RoleAction.suspend}


def apply_role_action(db: Session, actor_uid: str, target_uid: str, action: RoleAction) -> dict:
    if action in SELF_LOCKOUT_ACTIONS and actor_uid == target_uid:
        raise ConflictError("Admins cannot demote or suspend their own account")
    if crud_user.get_account(db, target_uid) is None:
        raise NotFoundError("User")

    try:
        role = crud_user.update_role(db, target_uid, ROLE_CHANGES[action])
        db.commit()
        db.refresh(role)
    except Exception as e:
        db.rollback()
        logger.error(f"Role update {action.value} for {target_uid} failed: {e}")
        raise

    logger.info(f"{actor_uid} applied {action.value} to {target_uid}")
    return role.to_record()


def list_users_with_roles(db: Session) -> List[dict]:
    allowlist = settings.admin_email_allowlist
    roles = crud_user.list_roles(db)
    users = []
    for profile in crud_user.list_profiles(db):
        record = roles.get(profile.uid, {})
        users.append({
            "id": profile.id,
            "uid": profile.uid,
            "name": profile.name,
            "email": profile.email,
            "phone": profile.phone,
            "address": profile.address,
            "pincode": profile.pincode,
            "created_at": profile.created_at,
            "admin": record.get("admin") is True or is_admin_email(profile.email, allowlist),
            "suspended": record.get("suspended") is True,
        })
    return users
