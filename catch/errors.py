class CatchError(Exception):
    """Base class for catch-specific errors."""


# Store related
class EntryNotFound(CatchError):
    """No entry with the requested name exists in the store.

    Not an OSError subclass; a missing store file raises FileNotFoundError.
    """

    def __init__(self, name: str, archive: str):
        self.name = name
        self.archive = archive
        super().__init__(f"entry {name!r} not found in {archive}")


# Network related
class FetchError(CatchError):
    pass


class PingError(CatchError):
    pass
