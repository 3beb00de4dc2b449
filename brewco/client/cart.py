import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Optional

from brewco.client.storage import LocalStorage

log = logging.getLogger(__name__)

CART_KEY = 'cart'
TAX_RATE = Decimal('0.085')
CENT = Decimal('0.01')


def _money(value: Decimal) -> float:
    return float(value.quantize(CENT, rounding=ROUND_HALF_UP))


class Cart:
    """Shopping cart lines persisted to local storage on every change."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.items: List[Dict[str, Any]] = self._load()
        self._callbacks: List[Callable[['Cart'], None]] = []

    def _load(self) -> List[Dict[str, Any]]:
        raw = self.storage.get(CART_KEY) or []
        if not isinstance(raw, list):
            return []
        return [dict(it) for it in raw if isinstance(it, dict) and 'id' in it]

    def _changed(self) -> None:
        self.storage.set(CART_KEY, self.items)
        for cb in list(self._callbacks):
            try:
                cb(self)
            except Exception:
                log.exception('cart update callback failed')

    def on_update(self, callback: Callable[['Cart'], None]) -> None:
        self._callbacks.append(callback)

    def _find(self, item_id: int) -> Optional[Dict[str, Any]]:
        return next((it for it in self.items if it['id'] == item_id), None)

    def add_item(self, product: Dict[str, Any], quantity: int = 1) -> 'Cart':
        if quantity <= 0:
            raise ValueError('quantity must be positive')
        line = self._find(product['id'])
        if line:
            line['quantity'] += quantity
        else:
            self.items.append({
                'id': product['id'],
                'name': product['name'],
                'price': float(product['price']),
                'category': product.get('category'),
                'image': product.get('image'),
                'quantity': quantity,
            })
        self._changed()
        return self

    def update_quantity(self, item_id: int, quantity: int) -> 'Cart':
        line = self._find(item_id)
        if not line:
            return self
        if quantity <= 0:
            return self.remove_item(item_id)
        line['quantity'] = quantity
        self._changed()
        return self

    def remove_item(self, item_id: int) -> 'Cart':
        self.items = [it for it in self.items if it['id'] != item_id]
        self._changed()
        return self

    def clear(self) -> 'Cart':
        self.items = []
        self._changed()
        return self

    def contains(self, item_id: int) -> bool:
        return self._find(item_id) is not None

    def _subtotal(self) -> Decimal:
        return sum((Decimal(str(it['price'])) * it['quantity'] for it in self.items), Decimal('0'))

    def total(self) -> float:
        return _money(self._subtotal())

    def item_count(self) -> int:
        return sum(it['quantity'] for it in self.items)

    def order_lines(self) -> List[Dict[str, Any]]:
        """Lines in the shape ``POST /api/orders`` expects."""
        return [
            {'id': it['id'], 'name': it['name'], 'price': it['price'], 'quantity': it['quantity']}
            for it in self.items
        ]

    def order_summary(self) -> Dict[str, Any]:
        subtotal = self._subtotal()
        tax = subtotal * TAX_RATE
        return {
            'items': [
                {'name': it['name'], 'quantity': it['quantity'], 'price': it['price'],
                 'total': _money(Decimal(str(it['price'])) * it['quantity'])}
                for it in self.items
            ],
            'subtotal': _money(subtotal),
            'tax': _money(tax),
            'total': _money(subtotal + tax),
            'item_count': self.item_count(),
        }

    def __len__(self) -> int:
        return len(self.items)
