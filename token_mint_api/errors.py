"""Error taxonomy for the token API.

Every error carries the HTTP status it maps to so the server can translate
exceptions by type instead of by message text.
"""


class TokenApiError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(TokenApiError):
    status_code = 400


class InvalidUrl(InvalidInput):
    pass


class MetadataUnreachable(TokenApiError):
    status_code = 400

    def __init__(self, message: str, status: int | None = None, reason: str | None = None):
        super().__init__(message)
        self.status = status
        self.reason = reason


class MalformedMetadata(TokenApiError):
    status_code = 400


class InvalidMetadataSchema(TokenApiError):
    status_code = 400


class MintFailure(TokenApiError):
    status_code = 500


class RevokeFailure(TokenApiError):
    status_code = 500


class ConfigurationError(Exception):
    """Raised at startup when settings or wallet material are unusable."""
