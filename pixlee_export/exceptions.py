# pixlee_export/exceptions.py


class PixleeError(Exception):
    """Base class for export cartridge errors"""


class PixleeServiceError(PixleeError):
    """A call to the Pixlee web service did not succeed"""

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.status = status


class CatalogError(PixleeError):
    """The host catalog could not be read"""


class ExportAbortedError(PixleeError):
    """The export job gave up before processing every product"""
