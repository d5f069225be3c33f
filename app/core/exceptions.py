class SubscriptionsError(Exception):
    """Base exception for all domain exceptions"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class EntityNotFoundError(SubscriptionsError):
    """Raised when an entity is not found in the database"""
    pass

class BusinessLogicError(SubscriptionsError):
    """Raised when caller input breaks a business rule"""
    pass

class StorageError(SubscriptionsError):
    """Raised when the database fails: connectivity, bad query, cancelled statement"""
    pass

class ConstraintViolationError(StorageError):
    """Raised when a write violates a table constraint"""
    pass

class MigrationError(StorageError):
    """Raised when a schema migration cannot be read, applied or recorded"""
    def __init__(self, message: str, filename: str | None = None):
        self.filename = filename
        super().__init__(message)

class ConfigurationError(SubscriptionsError):
    """Raised at startup when the database cannot be configured"""
    pass
