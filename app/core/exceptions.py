from typing import Optional, Any

class HistorialError(Exception):
    """
    Base exception for the historial bot.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)

class ConfigurationError(HistorialError):
    """
    Raised when required settings are missing. Fatal at startup.
    """
    def __init__(self, message: str = "Invalid configuration", details: Optional[Any] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=500, details=details)

class AuthorizationError(HistorialError):
    """
    Raised when a chat is not allow-listed or not the administrator.
    """
    def __init__(self, message: str = "Not authorized", details: Optional[Any] = None):
        super().__init__(message, code="NOT_AUTHORIZED", status_code=403, details=details)

class InsufficientCreditsError(HistorialError):
    """
    Raised when a balance does not cover the cost of a lookup.
    """
    def __init__(self, message: str = "Insufficient credits", details: Optional[Any] = None):
        super().__init__(message, code="INSUFFICIENT_CREDITS", status_code=402, details=details)

class ExternalServiceError(HistorialError):
    """
    Raised when NUFI (or Telegram) fails.
    """
    def __init__(self, message: str = "External service error", details: Optional[Any] = None):
        super().__init__(message, code="EXTERNAL_SERVICE_ERROR", status_code=502, details=details)

class CallbackProcessingError(HistorialError):
    """
    Raised when a NUFI callback cannot be delivered to its chat.
    """
    def __init__(self, message: str = "Callback processing failed", details: Optional[Any] = None):
        super().__init__(message, code="CALLBACK_ERROR", status_code=500, details=details)

class LedgerError(HistorialError):
    """
    Raised when the ledger file cannot be written.
    """
    def __init__(self, message: str = "Ledger write failed", details: Optional[Any] = None):
        super().__init__(message, code="LEDGER_ERROR", status_code=500, details=details)
