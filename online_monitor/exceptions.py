"""Errors that reach the owning process.

Only startup failures are raised. Steady-state read and write failures are
logged and absorbed by the stores (see ``logger.log_exception``).
"""


class OnlineMonitorError(Exception):
    """Base class for online monitor errors."""


class ConnectFailed(OnlineMonitorError):
    """The connection pool could not be established."""


class MigrationFailed(OnlineMonitorError):
    """The schema could not be brought to the latest revision."""
