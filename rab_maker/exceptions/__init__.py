"""Custom exceptions for the RAB Maker application."""

class RabError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(RabError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class NotFoundError(RabError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class OwnershipError(RabError):
    """Raised when an entity exists but belongs to another owner."""
    def __init__(self, message="Akses ditolak"):
        super().__init__(message, 403)

class ReferentialIntegrityError(BusinessLogicError):
    """Raised when a delete is blocked because other rows still depend on the entity."""
    def __init__(self, entity_label, dependents, dependent_label):
        message = (
            f"{entity_label} tidak dapat dihapus: masih digunakan oleh "
            f"{dependents} {dependent_label}"
        )
        super().__init__(message, status_code=409, payload={'dependents': dependents})
        self.dependents = dependents

class StorageError(RabError):
    """Raised when a read or write against the database fails."""
    def __init__(self, message="Terjadi kesalahan penyimpanan data"):
        super().__init__(message, 500)

class UnauthorizedError(RabError):
    """Raised when login credentials are rejected."""
    def __init__(self, message="Username atau password salah"):
        super().__init__(message, 401)
