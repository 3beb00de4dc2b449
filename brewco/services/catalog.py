from typing import Optional, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from brewco.core.errors import NotFoundError
from brewco.db.models import Product

POPULAR_LIMIT = 6


def list_products(db: Session, category: Optional[str] = None, popular_only: bool = False, limit: Optional[int] = None) -> List[Product]:
    """Storefront listing: available products only, by category then name."""
    stmt = select(Product).where(Product.is_available.is_(True))
    if category:
        stmt = stmt.where(Product.category == category)
    if popular_only:
        stmt = stmt.where(Product.popular.is_(True))
    stmt = stmt.order_by(Product.category, Product.name)
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.execute(stmt).scalars().all())


def list_popular(db: Session, limit: int = POPULAR_LIMIT) -> List[Product]:
    return list_products(db, popular_only=True, limit=limit)


def list_by_category(db: Session, category: str) -> List[Product]:
    return list_products(db, category=category)


def get_product(db: Session, product_id: int) -> Product:
    obj = db.get(Product, product_id)
    if not obj:
        raise NotFoundError('Product not found')
    return obj
