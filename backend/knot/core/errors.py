"""Error taxonomy shared by the services and the HTTP layer.

Services raise these; ``knot.main`` maps each class to a status code so route
handlers never translate storage exceptions themselves.
"""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Malformed input, rejected before anything is written."""

    status_code = 400


class NotFoundError(CatalogError):
    status_code = 404


class StorageError(CatalogError):
    """A database failure. The message is safe to show; the cause is only logged."""

    status_code = 500


class ParameterTreeError(CatalogError):
    """Stored parameter rows do not form a forest (dangling parent or cycle)."""

    status_code = 500
