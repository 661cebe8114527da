"""
errors.py - Exceptions raised by the Rajaongkir client
"""


class RajaOngkirError(Exception):
    """Base exception for the Rajaongkir client"""


class ConfigurationError(RajaOngkirError):
    """Invalid client configuration (unknown account type, empty API key)"""


class TransportError(RajaOngkirError):
    """
    Network failure or malformed response body

    Attributes:
        url: Request URL, when known
        status_code: HTTP status of the response, when one was received
    """

    def __init__(self, message: str, url: str = None, status_code: int = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message
