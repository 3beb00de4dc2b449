from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from brewco.api.deps import get_customer, get_db
from brewco.schemas import OrderCreate, OrderDetail, OrderRead
from brewco.services import orders as order_service

router = APIRouter()  # mounted at /api: /orders and /user/orders live side by side


@router.post('/orders')
def create_order(payload: OrderCreate, claims: dict = Depends(get_customer), db: Session = Depends(get_db)):
    order_id = order_service.create_order(db, claims['id'], payload.items, payload.notes)
    return {'success': True, 'orderId': order_id, 'message': 'Order created'}


@router.get('/user/orders')
def list_my_orders(claims: dict = Depends(get_customer), db: Session = Depends(get_db)):
    orders = order_service.list_user_orders(db, claims['id'])
    return {'success': True, 'orders': [OrderRead.model_validate(o) for o in orders]}


@router.get('/orders/{order_id}')
def get_order(order_id: int, claims: dict = Depends(get_customer), db: Session = Depends(get_db)):
    order = order_service.get_user_order(db, claims['id'], order_id)
    return {'success': True, 'order': OrderDetail.model_validate(order)}
