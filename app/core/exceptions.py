"""
Error types raised by the persistence layer.
"""


class StorageFailure(Exception):
    """
    The database was unreachable, rejected a statement, or a constraint was
    violated. Always surfaced to the caller; the store never retries.
    """

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")
