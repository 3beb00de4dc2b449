from fastapi import APIRouter, Depends
from typing import Optional
from sqlalchemy.orm import Session
from brewco.api.deps import get_db
from brewco.schemas import ProductRead
from brewco.services import catalog

router = APIRouter()

def _listing(products):
    return {'success': True, 'count': len(products), 'products': [ProductRead.model_validate(p) for p in products]}

@router.get('')
def list_products(db: Session = Depends(get_db), category: Optional[str] = None, popular: bool = False):
    return _listing(catalog.list_products(db, category=category, popular_only=popular))

@router.get('/popular')
def list_popular(db: Session = Depends(get_db)):
    return _listing(catalog.list_popular(db))

@router.get('/category/{category}')
def list_by_category(category: str, db: Session = Depends(get_db)):
    return _listing(catalog.list_by_category(db, category))

@router.get('/{product_id}')
def get_product(product_id: int, db: Session = Depends(get_db)):
    return {'success': True, 'product': ProductRead.model_validate(catalog.get_product(db, product_id))}
