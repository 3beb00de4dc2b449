from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from brewco.api.deps import get_customer, get_db
from brewco.schemas import LoginPayload, ProfileUpdate, RegisterPayload, UserRead
from brewco.services import auth as auth_service

router = APIRouter()  # main.py mounts at /api/auth


@router.post('/register')
def register(payload: RegisterPayload, db: Session = Depends(get_db)):
    token, user = auth_service.register(db, payload)
    return {'success': True, 'token': token, 'user': UserRead.model_validate(user), 'message': 'Registration successful'}


@router.post('/login')
def login(payload: LoginPayload, db: Session = Depends(get_db)):
    token, user = auth_service.login(db, payload.identifier, payload.password)
    return {'success': True, 'token': token, 'user': UserRead.model_validate(user), 'message': 'Login successful'}


@router.get('/me')
def me(claims: dict = Depends(get_customer), db: Session = Depends(get_db)):
    return {'success': True, 'user': UserRead.model_validate(auth_service.me(db, claims['id']))}


@router.put('/profile')
def update_profile(payload: ProfileUpdate, claims: dict = Depends(get_customer), db: Session = Depends(get_db)):
    user = auth_service.update_profile(db, claims['id'], payload)
    return {'success': True, 'user': UserRead.model_validate(user), 'message': 'Profile updated'}
