from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from brewco.core.errors import AuthorizationError
from brewco.db.models import Admin
from brewco.db.session import SessionLocal
from brewco.services import admin as admin_service
from brewco.services import auth as auth_service

security = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()

def get_claims(creds: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    return auth_service.verify(creds.credentials if creds else None)

def get_customer(claims: dict = Depends(get_claims)) -> dict:
    if claims.get('kind') != 'customer':
        raise AuthorizationError('Customer account required')
    return claims

def require_admin(claims: dict = Depends(get_claims), db: Session = Depends(get_db)) -> Admin:
    if claims.get('kind') != 'admin':
        raise AuthorizationError('Admin privileges required')
    admin = admin_service.get_admin(db, claims['id'])
    if not admin or admin.role != 'admin':
        raise AuthorizationError('Admin privileges required')
    return admin
