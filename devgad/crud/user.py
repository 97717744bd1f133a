from sqlalchemy.orm import Session
from typing import Optional
from devgad.models.user import AuthAccount, UserProfile, UserRole
from devgad.db.session import SessionLocal

def get_account(db: Session, uid: str) -> Optional[AuthAccount]:
    return db.query(AuthAccount).filter(AuthAccount.uid == uid).first()

def get_account_by_email(db: Session, email: str) -> Optional[AuthAccount]:
    return db.query(AuthAccount).filter(AuthAccount.email == email.strip().lower()).first()

def create_account(db: Session, email: str, password_hash: Optional[str], provider: str,
                   email_verified: bool = False) -> AuthAccount:
    account = AuthAccount(
        email=email.strip().lower(),
        password_hash=password_hash,
        provider=provider,
        email_verified=email_verified,
        session_version=0,
    )
    db.add(account)
    db.flush()
    return account

def create_profile(db: Session, uid: str, data) -> UserProfile:
    profile = UserProfile(
        uid=uid,
        name=data.name,
        email=data.email,
        phone=data.phone,
        address=data.address,
        pincode=data.pincode,
    )
    db.add(profile)
    return profile

def list_profiles(db: Session):
    return db.query(UserProfile).order_by(UserProfile.created_at).all()

def get_role(db: Session, uid: str) -> Optional[UserRole]:
    return db.query(UserRole).filter(UserRole.uid == uid).first()

def list_roles(db: Session) -> dict:
    return {role.uid: role.to_record() for role in db.query(UserRole).all()}

def update_role(db: Session, uid: str, changes: dict) -> UserRole:
    """Merge-update like a document store: keys not in ``changes`` are left alone."""
    role = get_role(db, uid)
    if role is None:
        role = UserRole(uid=uid)
        db.add(role)
    for field, value in changes.items():
        setattr(role, field, value)
    return role

def load_role_record(uid: str) -> Optional[dict]:
    """Role record for ``userRoles/{uid}`` read in its own session, for feed subscriptions."""
    with SessionLocal() as db:
        role = get_role(db, uid)
        return role.to_record() if role is not None else None
