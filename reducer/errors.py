"""
Errors raised by a reduce task.
Recoverable input problems are counted in the ReduceReport instead.
"""


class ReduceTaskError(Exception):
    """Base class for fatal reduce task failures"""


class MissingIntermediateError(ReduceTaskError):
    """An intermediate partition file could not be opened under the FAIL policy"""

    def __init__(self, path: str, reason: str = ''):
        self.path = path
        message = f"Intermediate file unreadable: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class OutputUnwritableError(ReduceTaskError):
    """The output artifact could not be opened or created"""

    def __init__(self, path: str, reason: str = ''):
        self.path = path
        message = f"Cannot open output file: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ReduceFunctionError(ReduceTaskError):
    """The user reduce function raised or returned a non-string result"""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Reduce function failed for key {key!r}: {reason}")
