# exceptions.py
"""
Custom exceptions for the Badminton App.

This module defines domain-specific exceptions for better error handling
and debugging throughout the application. The matchup engine itself never
raises; these cover the record store and the service layer around it.
"""


class BadmintonAppError(Exception):
    """Base exception for all application errors."""

    pass


class SessionError(BadmintonAppError):
    """Raised when a session operation is not possible in the current state."""

    pass


class ValidationError(BadmintonAppError):
    """Raised when input validation fails."""

    pass
