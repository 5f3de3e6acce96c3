"""
Word Store Exceptions

This module defines custom exceptions for the word store service
to provide clear error handling and reporting.
"""


class WordStoreError(Exception):
    """Base exception for all word store errors"""
    pass


class ConfigurationError(WordStoreError):
    """Raised when configuration or bound credentials are invalid or missing"""
    pass


class InvalidEndpointError(ConfigurationError):
    """Raised when a Redis endpoint URI cannot be parsed"""
    pass


class ConnectionError(WordStoreError):
    """Raised when the connection to the Redis store fails"""
    pass


class InvalidRequestError(WordStoreError):
    """Raised when an inbound request is missing required data"""
    pass
