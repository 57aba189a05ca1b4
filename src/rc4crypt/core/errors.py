from __future__ import annotations


class RC4CryptError(Exception):
    """Base class for failures surfaced to the CLI."""


class InvalidKeyLength(RC4CryptError):
    """Raised when a key falls outside the accepted length range."""

    def __init__(self, length: int, minimum: int, maximum: int):
        if length < minimum:
            detail = f"key too short (<{minimum} byte)"
        else:
            detail = f"key too long (>{maximum} bytes)"
        super().__init__(detail)
        self.length = length


class KeySourceUnavailable(RC4CryptError):
    """Raised when the key file cannot be read."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Unable to get key from '{path}': {cause}")
        self.path = path


class InputUnavailable(RC4CryptError):
    """Raised when the input file cannot be opened."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Unable to open input file '{path}': {cause}")
        self.path = path


class OutputUnavailable(RC4CryptError):
    """Raised when the output file cannot be created."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"Unable to open output file '{path}': {cause}")
        self.path = path


class ReadFailure(RC4CryptError):
    """Raised when reading the source fails for any reason other than end of stream."""

    def __init__(self, message: str, bytes_processed: int = 0):
        super().__init__(message)
        self.bytes_processed = bytes_processed


class WriteFailure(RC4CryptError):
    """Raised when the sink rejects or truncates a write."""

    def __init__(self, message: str, bytes_processed: int = 0):
        super().__init__(message)
        self.bytes_processed = bytes_processed
