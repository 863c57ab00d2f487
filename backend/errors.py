"""
Grid Mask Annotator - Errors
----------------------------
Exceptions raised by the mask store, the PNG codec and the sample loader.
Route handlers translate them into HTTP status codes.
"""


class MaskStoreError(Exception):
    """Raised when a mask cannot be written to or read from disk."""


class InvalidFolderName(ValueError):
    """Raised when a folder name cannot be used as a mask file stem."""

    def __init__(self, folder_name):
        super().__init__(f"Invalid folder name: {folder_name!r}")
        self.folder_name = folder_name


class MaskPayloadError(ValueError):
    """Raised when an uploaded mask payload is not valid base64 PNG data."""


class SampleNotFound(LookupError):
    """Raised when a requested sample folder is not part of the loaded set."""

    def __init__(self, folder_name):
        super().__init__(f"Sample folder not found: {folder_name!r}")
        self.folder_name = folder_name
