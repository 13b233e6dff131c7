"""Error taxonomy of the engine"""


class EngineError(Exception):
    """Base class for engine errors"""
    pass


class ConfigurationError(EngineError):
    """A component was requested without its required initialization"""
    pass


class ValidationError(EngineError):
    """Invalid model input or malformed persisted record"""
    pass


class StoreError(EngineError):
    """Base class for persistence errors"""

    def __init__(self, key: str, message: str):
        super().__init__(f"{message} (key={key})")
        self.key = key


class StoreReadError(StoreError):
    """Reading from the key-value store failed"""
    pass


class StoreWriteError(StoreError):
    """Writing to the key-value store failed or timed out"""
    pass


__all__ = [
    'EngineError',
    'ConfigurationError',
    'ValidationError',
    'StoreError',
    'StoreReadError',
    'StoreWriteError',
]
