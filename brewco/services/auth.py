"""Customer and admin authentication.

Roles come only from what is persisted: customer tokens always carry
``role="customer"``; admin tokens carry the role stored on the admin row,
and the admin gate re-reads that row on every request.
"""
import logging

import jwt
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from brewco.core.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from brewco.db.models import Admin, User
from brewco.schemas import ProfileUpdate, RegisterPayload
from brewco.security.utils import admin_token, customer_token, decode_token, hash_password, verify_password

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = 'Invalid credentials'


def register(db: Session, payload: RegisterPayload) -> tuple[str, User]:
    email = str(payload.email).lower()
    taken = db.execute(
        select(User.id).where(or_(User.username == payload.username, User.email == email))
    ).first()
    if taken:
        raise ConflictError('Username or email already registered')

    user = User(
        username=payload.username,
        email=email,
        password_hash=hash_password(payload.password),
        full_name=payload.full_name,
        phone=payload.phone,
        address=payload.address,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        db.rollback()
        raise ConflictError('Username or email already registered')
    db.refresh(user)
    log.info('registered user id=%s username=%s', user.id, user.username)
    return customer_token(user), user


def login(db: Session, identifier: str, password: str) -> tuple[str, User]:
    user = db.execute(
        select(User).where(or_(User.username == identifier, User.email == identifier.lower()))
    ).scalars().first()
    if not user or not verify_password(password, user.password_hash):
        log.info('failed login for %r', identifier)
        raise AuthenticationError(INVALID_CREDENTIALS)
    return customer_token(user), user


def admin_login(db: Session, username: str, password: str) -> tuple[str, Admin]:
    admin = db.execute(select(Admin).where(Admin.username == username)).scalars().first()
    if not admin or not verify_password(password, admin.password_hash):
        log.warning('failed admin login for %r', username)
        raise AuthenticationError(INVALID_CREDENTIALS)
    log.info('admin login id=%s username=%s', admin.id, admin.username)
    return admin_token(admin), admin


def verify(token: str | None) -> dict:
    if not token:
        raise AuthenticationError('Not authenticated')
    try:
        claims = decode_token(token)
    except jwt.PyJWTError:
        raise AuthorizationError('Invalid or expired token')
    if claims.get('type') != 'access' or 'id' not in claims:
        raise AuthorizationError('Invalid or expired token')
    return claims


def me(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


def update_profile(db: Session, user_id: int, payload: ProfileUpdate) -> User:
    user = me(db, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get('email') is not None:
        changes['email'] = str(changes['email']).lower()
        clash = db.execute(
            select(User.id).where(User.email == changes['email'], User.id != user.id)
        ).first()
        if clash:
            raise ConflictError('Email already registered')
    elif 'email' in changes:
        # email is required on the row
        del changes['email']
    for k, v in changes.items():
        setattr(user, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError('Email already registered')
    db.refresh(user)
    return user
