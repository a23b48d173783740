"""Exception hierarchy for tala."""


class TalaError(Exception):
    """Base class for all tala errors."""


class DecodeError(TalaError):
    """Persisted data is corrupt or written under a different schema."""


class PersistError(TalaError):
    """Writing persisted data failed."""


class LessonLoadError(TalaError):
    """A lesson file or directory could not be read."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
