"""
Error taxonomy for the transaction service
"""


class ServiceError(Exception):
    """Base error carrying the HTTP status it maps to"""

    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """Missing or malformed caller input"""

    status_code = 400


class NotFoundError(ServiceError):
    """No record matches the requested id"""

    status_code = 404


class StorageError(ServiceError):
    """Any failure raised by the persistence layer"""

    status_code = 500
