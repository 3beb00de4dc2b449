"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``brewco.main`` turns them into the
``{"success": false, "error": ...}`` envelope with the class status code.
"""


class StorefrontError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    status_code = 400
    default_message = 'Invalid request'


class AuthenticationError(StorefrontError):
    status_code = 401
    default_message = 'Not authenticated'


class AuthorizationError(StorefrontError):
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(StorefrontError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(StorefrontError):
    status_code = 409
    default_message = 'Already exists'


class InternalError(StorefrontError):
    pass


class OrderCreationError(InternalError):
    default_message = 'Order creation failed'
