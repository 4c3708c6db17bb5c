"""
Domain errors raised by services and converted to JSON bodies at the route boundary
"""


class StorybookError(Exception):
    """Base class for downstream/domain failures."""


class InvalidStatusTransition(StorybookError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move order from '{current}' to '{target}'")
        self.current = current
        self.target = target


class TransformError(StorybookError):
    """The image provider could not produce an illustration."""

    def __init__(self, reason: str):
        super().__init__(f"transform failed: {reason}")
        self.reason = reason


class PdfGenerationError(StorybookError):
    pass


class PrintVendorError(StorybookError):
    """Non-success response (or transport failure) from the print vendor API."""

    def __init__(self, message: str, status_code=None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class StorySuggestionError(StorybookError):
    pass


class PaymentError(StorybookError):
    """Stripe rejected a request."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
