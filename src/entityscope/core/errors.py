"""Exception hierarchy for repository loading and graph queries."""


class EntityScopeError(Exception):
    """Base class for all errors reported to callers."""

    pass


class RepoPathError(EntityScopeError):
    """Raised when the repository path does not exist or is not a directory."""

    pass


class NoRepoLoadedError(EntityScopeError):
    """Raised when a query runs before any repository was opened."""

    def __init__(self, message: str = "No repo loaded"):
        super().__init__(message)


class EntityNotFoundError(EntityScopeError):
    """Raised when an entity id is not part of the loaded graph."""

    def __init__(self, entity_id: str):
        super().__init__(f"Entity not found: {entity_id}")
        self.entity_id = entity_id


class NoSupportedLanguageError(EntityScopeError):
    """Raised when no supported-language source files can be found."""

    pass


class ParseTaskError(EntityScopeError):
    """Raised when the background parse job itself fails."""

    def __init__(self, cause: BaseException):
        super().__init__(f"Parse task failed: {cause}")
        self.cause = cause
