from __future__ import annotations


class BuildError(Exception):
    """Base class for everything that aborts a build."""


class ConfigError(BuildError):
    pass


class SourceNotFoundError(BuildError):
    def __init__(self, path: object) -> None:
        super().__init__(f"Source directory not found: {path}")
        self.path = path


class FrontMatterError(BuildError):
    def __init__(self, path: str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


class DuplicatePathError(BuildError):
    def __init__(self, path: str, source: str) -> None:
        super().__init__(f"Cannot move {source} to {path}: path already in use")
        self.path = path
        self.source = source


class LayoutNotFoundError(BuildError):
    pass


class PermalinkError(BuildError):
    pass


class StageError(BuildError):
    def __init__(self, stage: str, cause: BaseException) -> None:
        super().__init__(f"Stage '{stage}' failed: {cause}")
        self.stage = stage
        self.cause = cause


class WriteError(BuildError):
    pass
