class CatalogError(Exception):
    """Base class for catalog errors. Carries the HTTP status it maps to."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Malformed or missing request data."""
    status_code = 400


class InvalidFilterFieldError(ValidationError):
    """Filter field is not on the allow-list."""
    pass


class PageOutOfRangeError(ValidationError):
    """Requested page starts past the end of the data."""
    pass


class NotFoundError(CatalogError):
    """Referenced song or artist does not exist."""
    status_code = 404


class ConflictError(CatalogError):
    """Song already exists for the artist."""
    status_code = 409


class EncodingError(CatalogError):
    """Response serialization failed."""
    status_code = 500
