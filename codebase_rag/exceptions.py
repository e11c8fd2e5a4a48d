"""Exceptions raised by the build and query entry points."""


class CodebaseRagError(Exception):
    """Base class for codebase RAG errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class SourceRootError(CodebaseRagError):
    """Raised when the source root is missing or unreadable."""
    pass


class SnapshotNotFoundError(CodebaseRagError):
    """Raised when no snapshot exists in the data directory."""
    pass


class SnapshotFormatError(CodebaseRagError):
    """Raised when a snapshot document lacks required keys."""
    pass
