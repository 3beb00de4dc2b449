"""Checkout: one order row plus its line items, written in a single transaction."""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from brewco.core.errors import NotFoundError, OrderCreationError, ValidationError
from brewco.db.models import Order, OrderItem, User

log = logging.getLogger(__name__)

CENT = Decimal('0.01')


def _validate_lines(items) -> None:
    if not items:
        raise ValidationError('Order must contain at least one item')
    for it in items:
        if it.quantity is None or it.quantity <= 0:
            raise ValidationError('Item quantity must be positive')
        if it.price is None or Decimal(str(it.price)) <= 0:
            raise ValidationError('Item price must be positive')


def order_total(items: Iterable) -> Decimal:
    total = sum((Decimal(str(it.price)) * it.quantity for it in items), Decimal('0'))
    return total.quantize(CENT)


def create_order(db: Session, user_id: int, items: List, notes: Optional[str] = None) -> int:
    """Persist an order and all its lines, or nothing at all.

    ``items`` are cart lines with ``id``, ``name``, ``price`` and ``quantity``;
    name and price are copied onto the order items as submitted.
    """
    _validate_lines(items)
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')

    try:
        order = Order(
            user_id=user.id,
            customer_name=user.full_name or user.username,
            customer_phone=user.phone or '',
            customer_email=user.email or '',
            total_amount=order_total(items),
            status='pending',
            notes=notes or '',
        )
        db.add(order)
        db.flush()
        for it in items:
            db.add(OrderItem(
                order_id=order.id,
                product_id=it.id,
                product_name=it.name,
                quantity=it.quantity,
                price=Decimal(str(it.price)),
            ))
            db.flush()
        db.commit()
    except Exception as exc:
        db.rollback()
        log.exception('order creation failed for user id=%s', user_id)
        raise OrderCreationError() from exc

    log.info('order %s created for user id=%s total=%s lines=%d', order.id, user_id, order.total_amount, len(items))
    return order.id


def list_user_orders(db: Session, user_id: int) -> List[Order]:
    stmt = (
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def get_user_order(db: Session, user_id: int, order_id: int) -> Order:
    stmt = select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
    order = db.execute(stmt).scalars().first()
    if not order or order.user_id != user_id:
        raise NotFoundError('Order not found')
    return order
