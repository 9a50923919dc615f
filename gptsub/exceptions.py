"""Custom Exceptions for the gptsub application."""

class GptSubError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(GptSubError):
    """Exception raised for invalid or unreadable configuration."""
    pass

class TransportError(GptSubError):
    """Exception raised when the translation service returns no usable reply."""
    pass

class SubtitleIOError(GptSubError):
    """Exception raised when a subtitle file cannot be read, parsed or written."""
    pass

class FileSystemError(GptSubError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
