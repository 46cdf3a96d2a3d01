"""Exceptions raised by the tasklane engine."""


class TasklaneError(Exception):
    """Base class for tasklane errors."""


class PathNotFound(TasklaneError):
    """A path did not resolve against the tree it was applied to."""

    def __init__(self, path: tuple[int, ...]):
        super().__init__(f"Nothing at path {list(path)}")
        self.path = path


class ContractViolation(TasklaneError):
    """An operation broke a structural rule (type mismatch, self-nesting, ...)."""


class TransformError(TasklaneError):
    """A completion transform raised while an entity was being moved."""


class CrossDocumentInconsistency(TasklaneError):
    """A cross-document move left the entity in neither or both documents."""
