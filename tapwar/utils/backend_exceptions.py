"""
Custom exceptions for backend and lookup failures with user-friendly error messages.
"""

class TapWarException(Exception):
    """Base exception for TapWar client errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class InvalidRequestError(TapWarException):
    """Raised when a request cannot be built (bad URL or configuration)."""
    def __init__(self, details: str):
        super().__init__(
            f"Invalid request: {details}",
            "❌ TapWar is misconfigured. Please contact the bot owner."
        )

class ServerError(TapWarException):
    """Raised when the backend answers with a non-2xx status."""
    def __init__(self, operation: str, status_code: int = None, body: str = None):
        self.operation = operation
        self.status_code = status_code
        super().__init__(
            f"Backend error during {operation}: status={status_code} body={body!r}",
            "❌ The battle server had a problem. Please try again in a moment."
        )

class DecodingError(TapWarException):
    """Raised when a backend payload cannot be decoded."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Malformed payload during {operation}: {details}",
            "❌ Received unexpected data from the battle server."
        )

class NetworkUnavailableError(TapWarException):
    """Raised when the transport fails before a response is received."""
    def __init__(self, operation: str, details: str = None):
        super().__init__(
            f"Network failure during {operation}: {details}",
            "❌ Could not reach the battle server. Check back shortly."
        )

class GeolocationError(TapWarException):
    """Raised when automatic country detection fails."""
    def __init__(self, details: str = None):
        super().__init__(
            f"Country detection failed: {details}",
            "❌ Couldn't detect your country automatically. Please pick it manually."
        )

class CountryNotSetError(TapWarException):
    """Raised when a user taps before confirming a country."""
    def __init__(self, discord_id: int):
        super().__init__(
            f"No confirmed country for Discord user {discord_id}",
            "❌ Pick your country first with `/country`!"
        )
