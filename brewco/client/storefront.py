"""Client-side state for one shopper, opened once and closed once.

``Storefront`` owns the local storage file, the signed-in identity, the
cart and the HTTP client. Typical use::

    with Storefront.open('http://localhost:5000', '~/.brewco.json') as shop:
        shop.login('alice', 'pw123')
        shop.cart.add_item(shop.api.get_product(1), 2)
        order_id = shop.checkout(notes='oat milk')
"""
import logging
import os
from typing import Any, Dict, Optional

from brewco.client.api import ApiClient, ApiError
from brewco.client.cart import Cart
from brewco.client.session import Session, SessionStore
from brewco.client.storage import LocalStorage

log = logging.getLogger(__name__)

REQUIRED_PROFILE_FIELDS = ('full_name', 'phone')


class CheckoutError(Exception):
    pass


class ProfileIncompleteError(CheckoutError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Complete your profile before ordering: {', '.join(self.missing)}")


class Storefront:
    def __init__(self, api: ApiClient, storage: LocalStorage):
        self.api = api
        self.storage = storage
        self.sessions = SessionStore(storage)
        self.cart = Cart(storage)
        self._closed = False

    @classmethod
    def open(cls, base_url: str = 'http://localhost:5000', storage_path: Optional[os.PathLike] = None, http=None) -> 'Storefront':
        path = os.path.expanduser(storage_path) if storage_path else None
        return cls(ApiClient(base_url, http=http), LocalStorage(path))

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.api.close()

    def __enter__(self) -> 'Storefront':
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def session(self) -> Optional[Session]:
        return self.sessions.current

    # --- identity ---

    def register(self, username: str, email: str, password: str, **profile) -> Session:
        result = self.api.register(username, email, password, **profile)
        return self.sessions.save(Session('customer', result['token'], result['user']))

    def login(self, identifier: str, password: str) -> Session:
        result = self.api.login(identifier, password)
        return self.sessions.save(Session('customer', result['token'], result['user']))

    def admin_login(self, username: str, password: str) -> Session:
        result = self.api.admin_login(username, password)
        return self.sessions.save(Session('admin', result['token'], result['admin']))

    def logout(self) -> None:
        self.sessions.clear()

    def refresh_profile(self) -> Optional[Dict[str, Any]]:
        """Re-read the signed-in customer; a rejected token ends the session."""
        session = self.session
        if not session or session.is_admin:
            return None
        try:
            user = self.api.me(session.token)
        except ApiError as exc:
            if exc.status_code in (401, 403, 404):
                log.info('stored session rejected (%s), signing out', exc.status_code)
                self.logout()
                return None
            raise
        self.sessions.update_profile(user)
        return user

    def update_profile(self, **fields) -> Dict[str, Any]:
        session = self._customer_session()
        user = self.api.update_profile(session.token, **fields)
        self.sessions.update_profile(user)
        return user

    def _customer_session(self) -> Session:
        session = self.session
        if not session or session.kind != 'customer':
            raise CheckoutError('Sign in with a customer account first')
        return session

    # --- ordering ---

    def missing_profile_fields(self) -> list:
        session = self.session
        profile = session.profile if session else {}
        return [f for f in REQUIRED_PROFILE_FIELDS if not (profile.get(f) or '').strip()]

    def checkout(self, notes: str = '') -> int:
        session = self._customer_session()
        if not len(self.cart):
            raise CheckoutError('Your cart is empty')
        missing = self.missing_profile_fields()
        if missing:
            raise ProfileIncompleteError(missing)
        order_id = self.api.create_order(session.token, self.cart.order_lines(), notes)
        log.info('order %s placed with %d items', order_id, self.cart.item_count())
        self.cart.clear()
        return order_id

    def my_orders(self):
        return self.api.list_my_orders(self._customer_session().token)
