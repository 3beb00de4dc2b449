from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from brewco.api.deps import get_db, require_admin
from brewco.db.models import Admin
from brewco.schemas import (
    AdminLoginPayload,
    AdminOrderDetail,
    AdminOrderRead,
    AdminRead,
    OrderRead,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    StatusUpdate,
    UserRead,
)
from brewco.services import admin as admin_service
from brewco.services import auth as auth_service

router = APIRouter()  # main.py mounts at /api/admin


@router.post('/login')
def login(payload: AdminLoginPayload, db: Session = Depends(get_db)):
    token, admin = auth_service.admin_login(db, payload.username, payload.password)
    return {'success': True, 'token': token, 'admin': AdminRead.model_validate(admin), 'message': 'Login successful'}


@router.get('/verify')
def verify(admin: Admin = Depends(require_admin)):
    return {'success': True, 'admin': AdminRead.model_validate(admin)}


@router.get('/stats')
def stats(db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    data = admin_service.stats(db)
    data['recent_orders'] = [OrderRead.model_validate(o) for o in data['recent_orders']]
    return {'success': True, **data}


# --- products ---

@router.get('/products')
def list_products(db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    products = admin_service.list_all_products(db)
    return {'success': True, 'count': len(products), 'products': [ProductRead.model_validate(p) for p in products]}


@router.post('/products', status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    obj = admin_service.create_product(db, payload)
    return {'success': True, 'product': ProductRead.model_validate(obj), 'message': 'Product created'}


@router.put('/products/{product_id}')
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    obj = admin_service.update_product(db, product_id, payload)
    return {'success': True, 'product': ProductRead.model_validate(obj), 'message': 'Product updated'}


@router.delete('/products/{product_id}')
def delete_product(product_id: int, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    admin_service.delete_product(db, product_id)
    return {'success': True, 'message': 'Product deleted'}


# --- orders ---

@router.get('/orders')
def list_orders(page: int = 1, limit: int = admin_service.DEFAULT_PAGE_SIZE, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    rows, pages = admin_service.list_orders(db, page, limit)
    orders = [
        AdminOrderRead.model_validate(order).model_copy(update={'customer_username': username})
        for order, username in rows
    ]
    return {'success': True, 'orders': orders, 'pagination': pages}


@router.put('/orders/{order_id}/status')
def update_order_status(order_id: int, payload: StatusUpdate, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    order = admin_service.update_order_status(db, order_id, payload.status)
    return {'success': True, 'order': OrderRead.model_validate(order), 'message': 'Order status updated'}


@router.get('/orders/{order_id}/details')
def order_details(order_id: int, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    order, username = admin_service.get_order_details(db, order_id)
    detail = AdminOrderDetail.model_validate(order).model_copy(update={'customer_username': username})
    return {'success': True, 'order': detail}


# --- users ---

@router.get('/users')
def list_users(page: int = 1, limit: int = admin_service.DEFAULT_PAGE_SIZE, db: Session = Depends(get_db), _: Admin = Depends(require_admin)):
    users, pages = admin_service.list_users(db, page, limit)
    return {'success': True, 'users': [UserRead.model_validate(u) for u in users], 'pagination': pages}
