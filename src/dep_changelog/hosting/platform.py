"""Branch operations on the hosting platform, as needed by automerge.

Design notes:
- Uses a Protocol so automerge logic can be tested with MockPlatform
- Branch status is reduced to the four states the merge decision needs
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class BranchStatus(str, Enum):
    """Combined status of all required checks on a branch."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"
    ERROR = "error"


class BranchNotReadyError(Exception):
    """Raised by merge_branch when the platform refuses to merge yet."""


class PlatformProtocol(Protocol):
    """Branch-level operations on the hosting platform."""

    async def get_branch_pr(self, branch_name: str) -> Any | None:
        """Return the open PR for the branch, or None."""
        ...

    async def get_branch_status(
        self, branch_name: str, required_status_checks: list[str] | None
    ) -> BranchStatus:
        """Return the combined status of the branch's checks."""
        ...

    async def merge_branch(self, branch_name: str) -> None:
        """Merge the branch into its base.

        Raises:
            BranchNotReadyError: If the platform won't merge it yet
        """
        ...


class MockPlatform:
    """Mock platform for testing.

    Usage:
        platform = MockPlatform(statuses={"renovate/lodash": BranchStatus.SUCCESS})
    """

    def __init__(
        self,
        prs: dict[str, Any] | None = None,
        statuses: dict[str, BranchStatus] | None = None,
        merge_error: Exception | None = None,
    ) -> None:
        self._prs = prs or {}
        self._statuses = statuses or {}
        self._merge_error = merge_error
        self.merged: list[str] = []

    async def get_branch_pr(self, branch_name: str) -> Any | None:
        return self._prs.get(branch_name)

    async def get_branch_status(
        self, branch_name: str, required_status_checks: list[str] | None
    ) -> BranchStatus:
        return self._statuses.get(branch_name, BranchStatus.PENDING)

    async def merge_branch(self, branch_name: str) -> None:
        if self._merge_error is not None:
            raise self._merge_error
        self.merged.append(branch_name)
