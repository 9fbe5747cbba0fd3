"""
Exception classes and outcome constants for the schema editing engine.

The edit operations themselves never raise: requests that cannot be applied
degrade to no-ops. Exceptions are reserved for the boundaries of the engine
(loading a document, parsing a path supplied by the host, reading config).
"""

import logging
from typing import Optional, Dict, Any, List
from pathlib import Path

logger = logging.getLogger(__name__)


class EditOutcome:
    """Outcome constants recorded for each edit applied through a session."""
    APPLIED = "applied"
    NO_OP = "no_op"
    STALE_FOCUS = "stale_focus"


class SchemaEngineError(Exception):
    """
    Base exception for schema engine errors.

    Attributes:
        message: Error message
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class DocumentLoadError(SchemaEngineError):
    """
    Exception raised when a schema document payload cannot be turned into nodes.

    This includes invalid JSON text, unknown node types and constraint values
    of the wrong type.
    """

    def __init__(self, original_error: Exception, message: Optional[str] = None,
                 source: Optional[str] = None):
        self.original_error = original_error
        self.source = source

        if message is None:
            message = f"Failed to load schema document: {str(original_error)}"

        context = {
            'source': source or '<payload>',
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check that the payload is valid JSON",
            "Ensure every node has a 'type' of string, number, integer, boolean, object, array or null",
            "Remove constraint keys that do not belong to the node's type"
        ]

        super().__init__(message, context, recovery_suggestions)


class InvalidPathError(SchemaEngineError):
    """
    Exception raised when a navigation path supplied by the host is malformed.

    A well-formed path that simply does not resolve is not an error; it is a
    stale focus and is handled by the resolver.
    """

    def __init__(self, raw_path: Any, issue: str, message: Optional[str] = None):
        self.raw_path = raw_path
        self.issue = issue

        if message is None:
            message = f"Invalid schema path {raw_path!r}: {issue}"

        context = {
            'raw_path': repr(raw_path),
            'issue': issue
        }

        recovery_suggestions = [
            "Use segment form such as ['properties', 'address', 'items']",
            "Or use dotted form such as 'address.0.street'"
        ]

        super().__init__(message, context, recovery_suggestions)


class ConfigurationLoadError(SchemaEngineError):
    """
    Exception raised when configuration file loading fails.

    This includes YAML parsing errors, file not found, permission issues, etc.
    """

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if config.yaml exists and is readable",
            "Verify YAML syntax is correct",
            "Application will use default configuration as fallback"
        ]

        super().__init__(message, context, recovery_suggestions)


def create_user_friendly_error_message(error: SchemaEngineError) -> Dict[str, Any]:
    """
    Create user-friendly error message for display in UI.

    Args:
        error: SchemaEngineError instance

    Returns:
        Dictionary with formatted error information for UI display
    """
    error_details = error.get_full_details()

    error_type_info = {
        'DocumentLoadError': {
            'title': 'Schema Document Error',
            'icon': '📋',
            'severity': 'error'
        },
        'InvalidPathError': {
            'title': 'Navigation Path Error',
            'icon': '🧭',
            'severity': 'warning'
        },
        'ConfigurationLoadError': {
            'title': 'Configuration File Error',
            'icon': '📄',
            'severity': 'warning'
        }
    }

    error_type = error_details['error_type']
    type_info = error_type_info.get(error_type, {
        'title': 'Schema Editor Error',
        'icon': '❌',
        'severity': 'error'
    })

    return {
        'title': f"{type_info['icon']} {type_info['title']}",
        'message': error_details['message'],
        'severity': type_info['severity'],
        'recovery_suggestions': error_details['recovery_suggestions'],
        'technical_details': {
            'error_type': error_type,
            'context_info': error_details['context']
        }
    }


def log_error_with_context(error: SchemaEngineError, operation: str) -> None:
    """
    Log error with full context information.

    Args:
        error: SchemaEngineError instance
        operation: Description of the operation that failed
    """
    logger.error(f"Schema engine error during {operation}")
    logger.error(f"Error type: {type(error).__name__}")
    logger.error(f"Error message: {error.message}")

    if error.context:
        logger.error("Error context:")
        for key, value in error.context.items():
            logger.error(f"  {key}: {value}")

    if error.recovery_suggestions:
        logger.info("Recovery suggestions:")
        for i, suggestion in enumerate(error.recovery_suggestions, 1):
            logger.info(f"  {i}. {suggestion}")
