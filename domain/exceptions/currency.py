class CurrencyException(Exception):
    pass


class InvalidCurrencyError(CurrencyException):
    pass


class ProviderError(CurrencyException):
    """Base for every failure while talking to an upstream market endpoint."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(message)


class TransportError(ProviderError):
    """Network unreachable, connection reset or timeout."""


class ProtocolError(ProviderError):
    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, url)


class ParseError(ProviderError):
    """Malformed JSON, missing field or non-numeric value."""


class RateValidationError(CurrencyException):
    pass


class CacheError(CurrencyException):
    pass


class RatesUnavailableError(CurrencyException):
    """No rate table has ever been populated."""
