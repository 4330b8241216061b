class ModCatalogError(Exception):
    """
    Base class for failures that terminate an aggregation pass.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ModInfoReadError(ModCatalogError):
    """
    Raised when a discovered mod.info file cannot be read or decoded.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to read mod.info at {path}: {reason}")
        self.path = path


class CatalogWriteError(ModCatalogError):
    """
    Raised when the catalog document cannot be written to its target path.
    """

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unable to write catalog to {path}: {reason}")
        self.path = path


class MalformedDataException(Exception):
    """
    Exception raised when the data given is detected to be malformed.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = f"Malformed data: {message}"


class ModsPathError(ModCatalogError):
    """
    Raised when the folder to scan for mod.info files is missing or not a directory.
    """

    def __init__(self, path: str):
        super().__init__(f"Mods path is missing or not a directory: {path}")
        self.path = path
