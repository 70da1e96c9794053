"""Custom exceptions for the grid dispatch scheduler."""

class GridSchedError(Exception):
    """Base exception for scheduler errors."""
    pass

class DataUnavailableError(GridSchedError):
    """Exception raised when irradiance data is missing or unusable."""
    pass

class BackendUnavailableError(GridSchedError):
    """Exception raised when the remote optimizer cannot produce a result."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code

class ValidationError(GridSchedError):
    """Base exception for validation errors."""
    pass

class ValidationTypeError(ValidationError):
    """Exception raised for type validation errors."""
    pass

class ValidationRangeError(ValidationError):
    """Exception raised for range validation errors."""
    pass

class ConfigurationError(GridSchedError):
    """Exception raised for configuration errors."""
    pass

class RegionNotFoundError(GridSchedError):
    """Exception raised when a region id is not in the catalog."""
    pass
