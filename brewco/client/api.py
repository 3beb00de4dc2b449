import logging
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx

log = logging.getLogger(__name__)

PRODUCT_CACHE_SECONDS = 5 * 60


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f'{status_code}: {message}')


class ApiClient:
    """Thin wrapper over the REST API.

    Pass ``http`` to reuse an existing ``httpx.Client`` (tests hand in
    FastAPI's ``TestClient``); otherwise one is created for ``base_url``.
    """

    def __init__(self, base_url: str = 'http://localhost:5000', http: Optional[httpx.Client] = None, timeout: float = 5.0,
                 clock: Callable[[], float] = time.monotonic):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.clock = clock
        self._products: Optional[List[Dict[str, Any]]] = None
        self._products_at: Optional[float] = None

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop('headers', {})
        if token:
            headers['Authorization'] = f'Bearer {token}'
        try:
            resp = self.http.request(method, path, headers=headers, **kwargs)
        except httpx.RequestError as exc:
            raise ApiError(0, f'Server is unreachable: {exc}') from exc
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code >= 400 or not isinstance(data, dict) or data.get('success') is False:
            message = data.get('error') if isinstance(data, dict) else None
            raise ApiError(resp.status_code, message or resp.reason_phrase or 'Request failed')
        return data

    # --- auth ---

    def register(self, username: str, email: str, password: str, **profile) -> Dict[str, Any]:
        return self._request('POST', '/api/auth/register',
                             json={'username': username, 'email': email, 'password': password, **profile})

    def login(self, identifier: str, password: str) -> Dict[str, Any]:
        return self._request('POST', '/api/auth/login', json={'username': identifier, 'password': password})

    def me(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/auth/me', token=token)['user']

    def update_profile(self, token: str, **fields) -> Dict[str, Any]:
        return self._request('PUT', '/api/auth/profile', token=token, json=fields)['user']

    # --- catalog ---

    def _cache_fresh(self) -> bool:
        return self._products is not None and self.clock() - self._products_at < PRODUCT_CACHE_SECONDS

    def get_products(self, force_refresh: bool = False) -> List[Dict[str, Any]]:
        if not force_refresh and self._cache_fresh():
            return self._products
        self._products = self._request('GET', '/api/products')['products']
        self._products_at = self.clock()
        return self._products

    def clear_cache(self) -> None:
        self._products = None
        self._products_at = None

    def get_popular_products(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/products/popular')['products']

    def get_products_by_category(self, category: str) -> List[Dict[str, Any]]:
        return self._request('GET', f'/api/products/category/{quote(category, safe="")}')['products']

    def get_product(self, product_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/products/{product_id}')['product']

    # --- orders ---

    def create_order(self, token: str, items: List[Dict[str, Any]], notes: str = '') -> int:
        return self._request('POST', '/api/orders', token=token, json={'items': items, 'notes': notes})['orderId']

    def list_my_orders(self, token: str) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/user/orders', token=token)['orders']

    def get_order(self, token: str, order_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/orders/{order_id}', token=token)['order']

    # --- admin ---

    def admin_login(self, username: str, password: str) -> Dict[str, Any]:
        return self._request('POST', '/api/admin/login', json={'username': username, 'password': password})

    def admin_verify(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/admin/verify', token=token)['admin']

    def admin_stats(self, token: str) -> Dict[str, Any]:
        return self._request('GET', '/api/admin/stats', token=token)

    def admin_products(self, token: str) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/admin/products', token=token)['products']

    def admin_create_product(self, token: str, **fields) -> Dict[str, Any]:
        return self._request('POST', '/api/admin/products', token=token, json=fields)['product']

    def admin_update_product(self, token: str, product_id: int, **fields) -> Dict[str, Any]:
        return self._request('PUT', f'/api/admin/products/{product_id}', token=token, json=fields)['product']

    def admin_delete_product(self, token: str, product_id: int) -> None:
        self._request('DELETE', f'/api/admin/products/{product_id}', token=token)

    def admin_orders(self, token: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self._request('GET', '/api/admin/orders', token=token, params={'page': page, 'limit': limit})

    def admin_update_order_status(self, token: str, order_id: int, status: str) -> Dict[str, Any]:
        return self._request('PUT', f'/api/admin/orders/{order_id}/status', token=token, json={'status': status})['order']

    def admin_order_details(self, token: str, order_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/admin/orders/{order_id}/details', token=token)['order']

    def admin_users(self, token: str, page: int = 1, limit: int = 20) -> Dict[str, Any]:
        return self._request('GET', '/api/admin/users', token=token, params={'page': page, 'limit': limit})

    # --- health ---

    def check_health(self) -> Dict[str, Any]:
        """Never raises; ``ok`` tells whether the server answered healthy."""
        try:
            resp = self.http.get('/api/health', timeout=3.0)
        except httpx.TimeoutException:
            return {'ok': False, 'status': 0, 'message': 'Server timeout (3s)', 'data': None}
        except httpx.RequestError as exc:
            return {'ok': False, 'status': 0, 'message': f'Server is unreachable: {exc}', 'data': None}
        try:
            data = resp.json()
        except ValueError:
            data = None
        if resp.is_success:
            return {'ok': True, 'status': resp.status_code, 'message': 'Server is healthy', 'data': data}
        return {'ok': False, 'status': resp.status_code, 'message': f'Server responded with {resp.status_code}', 'data': data}
