"""
Unified base exception classes for all services.

Each service extends ServiceError with its own base (e.g. OrderServiceError)
so route handlers can translate any of them into an HTTP error in one place.
"""


class ServiceError(Exception):
    """Base exception for all service-layer errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InsufficientStockError(ServiceError):
    """Warehouse holds fewer flowers than a strict-mode operation needs."""

    def __init__(self, shortages: list):
        self.shortages = shortages
        names = ", ".join(s.flower for s in shortages)
        super().__init__(f"Недостаточно цветов: {names}", 400)
