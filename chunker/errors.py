class ChunkerError(Exception):
    pass


class ConstructionError(ChunkerError, ValueError):
    """
    Raised while building a witness when a value cannot be serialized, typically because it
    was never filled. It signals a bug in the code that assembled the segments, since the
    witness would no longer match the compiled script.
    """
    pass


class ChainingError(ChunkerError, ValueError):
    """Raised when values shared between segments by name are inconsistent."""
    pass


class ScriptExecutionError(ChunkerError):
    """Raised by the interpreter when execution must abort; reported in ExecuteInfo.error."""
    pass
