# main.py
import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from brewco.api import admin, auth, orders, products
from brewco.api.deps import get_db
from brewco.core.config import settings
from brewco.core.errors import StorefrontError
from brewco.core.logging import configure_logging
from brewco.security.utils import now_utc
from brewco.version import VERSION

configure_logging()
log = logging.getLogger('brewco')

STARTED_AT = time.monotonic()

# Create instrumentator first
instrumentator = Instrumentator()

app = FastAPI(title='Brew & Co API', version=VERSION)

# Instrument the app BEFORE adding routes or middleware
instrumentator.instrument(app).expose(
    app,
    include_in_schema=False,
    endpoint='/api/metrics',
    should_gzip=True,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
    allow_headers=['Content-Type', 'Authorization'],
)


@app.middleware('http')
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    log.info('%s %s -> %s (%.1f ms)', request.method, request.url.path, response.status_code,
             (time.perf_counter() - started) * 1000)
    return response


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'success': False, 'error': message})


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    if exc.status_code >= 500:
        log.error('%s %s failed: %s', request.method, request.url.path, exc.message)
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = '.'.join(str(p) for p in first.get('loc', ()) if p not in ('body', 'query', 'path'))
        message = f"{field}: {first.get('msg')}" if field else first.get('msg', 'Invalid request')
    else:
        message = 'Invalid request'
    return error_response(400, message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = 'Route not found' if exc.status_code == 404 and exc.detail == 'Not Found' else str(exc.detail)
    return error_response(exc.status_code, message)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception('unhandled error on %s %s', request.method, request.url.path)
    return error_response(500, 'Internal server error')


@app.get('/')
def root():
    return {
        'success': True,
        'message': 'Brew & Co API',
        'version': VERSION,
        'endpoints': {
            'client': ['/api/auth/*', '/api/products/*', '/api/orders/*', '/api/user/orders'],
            'admin': ['/api/admin/login', '/api/admin/verify', '/api/admin/stats', '/api/admin/products',
                      '/api/admin/orders', '/api/admin/users'],
        },
    }


@app.get('/api/health')
def health(db: Session = Depends(get_db)):
    try:
        db.execute(text('SELECT 1'))
        database = 'connected'
    except SQLAlchemyError:
        log.warning('health check: database unreachable', exc_info=True)
        database = 'unavailable'
    return {
        'success': True,
        'status': 'healthy' if database == 'connected' else 'degraded',
        'service': 'Brew & Co API',
        'version': VERSION,
        'database': database,
        'timestamp': now_utc().isoformat() + 'Z',
        'uptime': round(time.monotonic() - STARTED_AT, 3),
    }


# Debug: log all routes on startup
@app.on_event('startup')
async def startup_event():
    for route in app.routes:
        if hasattr(route, 'methods') and hasattr(route, 'path'):
            log.debug('%s %s', sorted(route.methods), route.path)


app.include_router(auth.router, prefix='/api/auth', tags=['auth'])
app.include_router(products.router, prefix='/api/products', tags=['products'])
app.include_router(orders.router, prefix='/api', tags=['orders'])
app.include_router(admin.router, prefix='/api/admin', tags=['admin'])
