from brewco.client.api import ApiClient, ApiError
from brewco.client.cart import Cart
from brewco.client.session import Session, SessionStore
from brewco.client.storage import LocalStorage
from brewco.client.storefront import CheckoutError, ProfileIncompleteError, Storefront

__all__ = [
    'ApiClient', 'ApiError', 'Cart', 'CheckoutError', 'LocalStorage',
    'ProfileIncompleteError', 'Session', 'SessionStore', 'Storefront',
]
