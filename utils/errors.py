"""Errors raised by the sync, storage and status layers."""


class UpstreamUnavailable(Exception):
    """Raised when the upstream snapshot cannot be fetched or parsed.

    Nothing has been written when this is raised.
    """

    def __init__(self, message: str, student_id=None):
        super().__init__(message)
        self.message = message
        self.student_id = student_id


class DataIntegrityConflict(Exception):
    """Raised when a row changed between read and conditional write."""

    def __init__(self, assignment_id: int, expected_version: int):
        super().__init__(
            f"Assignment {assignment_id} changed since version {expected_version}"
        )
        self.assignment_id = assignment_id
        self.expected_version = expected_version


class InvalidStatusTransition(Exception):
    """Raised when a block status change is not legal for the block's category."""

    def __init__(self, block_type: str, current: str, requested: str):
        super().__init__(
            f"Cannot move {block_type} block from {current} to {requested}"
        )
        self.block_type = block_type
        self.current = current
        self.requested = requested
