# errors.py


class TrackerError(Exception):
    """Base class for errors surfaced by the expense tracker."""


class MalformedPersistedState(TrackerError):
    """Stored data could not be decoded into projects."""


class InvalidAmount(TrackerError, ValueError):
    """An amount is missing, non-numeric or not finite."""


class MalformedImportFile(TrackerError):
    """An imported CSV/JSON document has the wrong shape."""


class ImportPending(TrackerError):
    """Another import is still waiting for its file contents."""
