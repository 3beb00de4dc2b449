"""Back-office operations. Every caller sits behind ``require_admin``."""
import logging
import math
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import distinct, func, select
from sqlalchemy.orm import Session, selectinload

from brewco.core.errors import ConflictError, NotFoundError, ValidationError
from brewco.db.models import ORDER_STATUSES, Admin, Order, OrderItem, Product, User
from brewco.schemas import ProductCreate, ProductUpdate
from brewco.security.utils import hash_password, now_utc

log = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
CLEARABLE_FIELDS = ('description', 'image')


def pagination(total: int, page: int, limit: int) -> dict:
    return {'total': total, 'page': page, 'limit': limit, 'pages': math.ceil(total / limit) if total else 0}


def _page_bounds(page: int, limit: int) -> Tuple[int, int]:
    if page < 1:
        raise ValidationError('page must be >= 1')
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f'limit must be between 1 and {MAX_PAGE_SIZE}')
    return limit, (page - 1) * limit


# --- accounts ---

def create_admin(db: Session, username: str, password: str, email: Optional[str] = None, role: str = 'admin') -> Admin:
    if db.execute(select(Admin.id).where(Admin.username == username)).first():
        raise ConflictError('Admin already exists')
    admin = Admin(username=username, email=email, password_hash=hash_password(password), role=role)
    db.add(admin); db.commit(); db.refresh(admin)
    log.info('created admin id=%s username=%s role=%s', admin.id, admin.username, admin.role)
    return admin


def get_admin(db: Session, admin_id: int) -> Optional[Admin]:
    return db.get(Admin, admin_id)


# --- stats ---

def _money(value) -> float:
    return float(value or 0)


def stats(db: Session) -> dict:
    not_cancelled = Order.status != 'cancelled'
    day_start = now_utc().replace(hour=0, minute=0, second=0, microsecond=0)
    today = (Order.created_at >= day_start) & (Order.created_at < day_start + timedelta(days=1))

    total_orders = db.scalar(select(func.count(Order.id))) or 0
    total_revenue = db.scalar(select(func.coalesce(func.sum(Order.total_amount), 0)).where(not_cancelled))
    today_orders = db.scalar(select(func.count(Order.id)).where(today)) or 0
    today_revenue = db.scalar(select(func.coalesce(func.sum(Order.total_amount), 0)).where(today, not_cancelled))
    total_products = db.scalar(select(func.count(Product.id)).where(Product.is_available.is_(True))) or 0
    active_users = db.scalar(select(func.count(distinct(Order.user_id))).where(Order.user_id.is_not(None))) or 0

    recent = db.execute(select(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(5)).scalars().all()
    sold = func.sum(OrderItem.quantity).label('quantity')
    top = db.execute(
        select(OrderItem.product_id, OrderItem.product_name, sold)
        .join(Order, Order.id == OrderItem.order_id)
        .where(not_cancelled)
        .group_by(OrderItem.product_id, OrderItem.product_name)
        .order_by(sold.desc(), OrderItem.product_id)
        .limit(5)
    ).all()

    return {
        'overview': {
            'total_orders': total_orders,
            'total_revenue': _money(total_revenue),
            'today_orders': today_orders,
            'today_revenue': _money(today_revenue),
            'total_products': total_products,
            'active_users': active_users,
        },
        'recent_orders': list(recent),
        'top_products': [
            {'product_id': pid, 'product_name': name, 'quantity': int(qty or 0)} for pid, name, qty in top
        ],
    }


# --- products ---

def list_all_products(db: Session) -> List[Product]:
    return list(db.execute(select(Product).order_by(Product.created_at.desc(), Product.id.desc())).scalars().all())


def _product_or_404(db: Session, product_id: int) -> Product:
    obj = db.get(Product, product_id)
    if not obj:
        raise NotFoundError('Product not found')
    return obj


def create_product(db: Session, payload: ProductCreate) -> Product:
    obj = Product(**payload.model_dump())
    db.add(obj); db.commit(); db.refresh(obj)
    log.info('created product id=%s name=%s', obj.id, obj.name)
    return obj


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    obj = _product_or_404(db, product_id)
    changes = {}
    for k, v in payload.model_dump(exclude_unset=True).items():
        if v is None:
            # an explicit null only clears the free-text columns
            if k not in CLEARABLE_FIELDS:
                continue
            v = ''
        changes[k] = v
        setattr(obj, k, v)
    db.add(obj); db.commit(); db.refresh(obj)
    log.info('updated product id=%s fields=%s', obj.id, sorted(changes))
    return obj


def delete_product(db: Session, product_id: int) -> None:
    obj = _product_or_404(db, product_id)
    db.delete(obj); db.commit()
    log.info('deleted product id=%s', product_id)


# --- orders ---

def list_orders(db: Session, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[Tuple[Order, Optional[str]]], dict]:
    size, offset = _page_bounds(page, limit)
    rows = db.execute(
        select(Order, User.username)
        .outerjoin(User, Order.user_id == User.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(size).offset(offset)
    ).all()
    total = db.scalar(select(func.count(Order.id))) or 0
    return [(order, username) for order, username in rows], pagination(total, page, size)


def get_order_details(db: Session, order_id: int) -> Tuple[Order, Optional[str]]:
    order = db.execute(
        select(Order).options(selectinload(Order.items), selectinload(Order.user)).where(Order.id == order_id)
    ).scalars().first()
    if not order:
        raise NotFoundError('Order not found')
    return order, order.user.username if order.user else None


def update_order_status(db: Session, order_id: int, status: str) -> Order:
    status = status.strip().lower()
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown status '{status}'; expected one of {', '.join(ORDER_STATUSES)}")
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError('Order not found')
    order.status = status
    db.add(order); db.commit(); db.refresh(order)
    log.info('order %s status -> %s', order.id, status)
    return order


# --- users ---

def list_users(db: Session, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[List[User], dict]:
    size, offset = _page_bounds(page, limit)
    users = db.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(size).offset(offset)
    ).scalars().all()
    total = db.scalar(select(func.count(User.id))) or 0
    return list(users), pagination(total, page, size)
