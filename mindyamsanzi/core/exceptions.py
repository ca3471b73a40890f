from typing import Optional


class MindYaMsanziException(Exception):
    """Base exception for the MindYaMsanzi service"""
    status_code = 500


class ValidationError(MindYaMsanziException):
    """Exception raised for malformed or missing request fields"""
    status_code = 400


class ConfigError(MindYaMsanziException):
    """Exception raised when required configuration is missing"""
    status_code = 500


class GatewayTimeout(MindYaMsanziException, TimeoutError):
    """Exception raised when the AI provider exceeds its time budget"""
    status_code = 504


class GatewayError(MindYaMsanziException):
    """Exception raised when the AI provider answers with a non-success status"""
    status_code = 502

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PersistenceError(MindYaMsanziException):
    """Exception raised when writing to the conversation log fails"""
    pass


class AuthenticationError(MindYaMsanziException):
    """Exception raised for authentication errors"""
    status_code = 401


class AuthorizationError(MindYaMsanziException):
    """Exception raised for authorization errors"""
    status_code = 403


class NotFoundError(MindYaMsanziException):
    """Exception raised when a requested row does not exist"""
    status_code = 404


class DataStoreUnavailable(MindYaMsanziException):
    """Exception raised when a route needs the data store and none is configured"""
    status_code = 503
