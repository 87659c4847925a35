class RepoValidationError(Exception):
    """Repository URL is malformed, or the repository is private or missing."""


class ProjectNotFound(Exception):
    pass


class InvalidStatusTransition(Exception):
    def __init__(self, current, target):
        super().__init__(f"Cannot move project status from {current} to {target}")
        self.current = current
        self.target = target


class FileIndexingError(Exception):
    """Summarize, embed or persist failed for a single file."""

    def __init__(self, file_name: str, stage: str, cause: BaseException):
        super().__init__(f"{stage} failed for {file_name}: {cause!r}")
        self.file_name = file_name
        self.stage = stage
        self.cause = cause


class CommitSummaryError(Exception):
    def __init__(self, commit_hash: str, cause: BaseException):
        super().__init__(f"Summary failed for commit {commit_hash}: {cause!r}")
        self.commit_hash = commit_hash
        self.cause = cause
