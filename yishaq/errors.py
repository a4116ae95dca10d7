"""Error taxonomy for the shop.

Every error carries the message shown to the customer or admin and the HTTP
status the API answers with. Handlers in ``yishaq.main`` render them as
``{"success": false, "error": message}``.
"""


class ShopError(Exception):
    status_code = 400
    default_message = "Solicitud inválida"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShopError):
    """Malformed or missing request fields."""


class ProductNotFound(ShopError):
    default_message = "Producto no encontrado"

    def __init__(self, product_id: str, name: str | None = None):
        self.product_id = product_id
        super().__init__("Producto no encontrado: {0}".format(name or product_id))


class ProductInactive(ShopError):
    default_message = "Producto no disponible"

    def __init__(self, product_id: str, name: str):
        self.product_id = product_id
        super().__init__("Producto no disponible: {0}".format(name))


class InsufficientStock(ShopError):
    default_message = "Stock insuficiente"

    def __init__(self, product_id: str, name: str, available: int):
        self.product_id = product_id
        self.available = available
        super().__init__("Stock insuficiente para {0}. Disponible: {1}".format(name, available))


class InvalidStatus(ShopError):
    default_message = "Estado inválido"


class Unauthorized(ShopError):
    status_code = 401
    default_message = "No autorizado"


class Forbidden(ShopError):
    status_code = 403
    default_message = "Acceso denegado"


class OrderNotFound(ShopError):
    status_code = 404
    default_message = "Pedido no encontrado"


class TooManyAttempts(ShopError):
    status_code = 429
    default_message = "Demasiados intentos. Espera un minuto."


class OrderNumberCollision(ShopError):
    status_code = 500
    default_message = "Error al procesar la orden"


class PersistenceFailure(ShopError):
    status_code = 500
    default_message = "Error al procesar la orden"
