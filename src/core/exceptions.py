"""Custom exceptions for the persona detection and recommendation engine"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Base exception for all application errors

    Attributes:
        message: Human-readable error message
        code: Short error code for identification
    """

    code: str = "GENERAL_ERROR"
    message: str = "An application error occurred"

    def __init__(
        self,
        code: Optional[str] = None,
        message: Optional[str] = None,
        **kwargs: Any
    ):
        self.code = code or self.code
        self.message = message or self.message
        self.extra = kwargs
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for response"""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                **self.extra,
            }
        }

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

class InvalidInputError(AppError):
    """Raised when caller input is invalid (unknown tier, negative budget, non-string text, etc.)"""
    code = "INVALID_INPUT"
    message = "The provided input is invalid or malformed"

class PersonaNotFoundError(InvalidInputError):
    """Raised when a persona name is not present in the registry"""
    code = "PERSONA_NOT_FOUND"
    message = "The requested persona does not exist"

class ConfigurationError(AppError):
    """Raised when a registry or catalog snapshot cannot be loaded"""
    code = "CONFIGURATION_ERROR"
    message = "The engine configuration is invalid or missing"

class RegistryLoadError(ConfigurationError):
    """Raised when the persona registry file is missing or malformed"""
    message = "The persona registry could not be loaded"

class CatalogLoadError(ConfigurationError):
    """Raised when the product catalog file is missing or malformed"""
    message = "The product catalog could not be loaded"

class ExternalClassifierUnavailable(AppError):
    """Raised by external classifiers on transport, timeout or parse failure"""
    code = "EXTERNAL_CLASSIFIER_UNAVAILABLE"
    message = "The external classifier is not available"

class ModelNotLoadedError(ExternalClassifierUnavailable):
    """Raised when a local classification model fails to load"""
    code = "MODEL_NOT_LOADED"
    message = "The AI model is not available or failed to initialize"
