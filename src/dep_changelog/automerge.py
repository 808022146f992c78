"""Branch automerge decision.

When a dependency update is configured to automerge its branch directly
(instead of opening a PR), this decides whether the branch can be merged
now and does it.

Decision order:
1. Automerge must be on and set to the "branch" type
2. No PR may exist for the branch (someone opened one; leave it to them)
3. All required checks must have passed; failed or errored checks block it
4. Merge, unless this is a dry run
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from dep_changelog.hosting.platform import (
    BranchNotReadyError,
    BranchStatus,
    PlatformProtocol,
)
from dep_changelog.logging_config import get_logger

logger = get_logger(__name__)


class AutomergeResult(str, Enum):
    """Outcome of an automerge attempt."""

    AUTOMERGED = "automerged"
    PR_EXISTS = "automerge aborted - PR exists"
    BRANCH_STATUS_ERROR = "branch status error"
    FAILED = "failed"
    NO_AUTOMERGE = "no automerge"
    NOT_READY = "not ready"


class AutomergeConfig(BaseModel):
    """Automerge settings for one update branch."""

    branch_name: str
    automerge: bool = False
    automerge_type: str = "pr"
    required_status_checks: list[str] | None = None
    dry_run: bool = False


async def try_branch_automerge(
    config: AutomergeConfig, platform: PlatformProtocol
) -> AutomergeResult:
    """Merge the update branch if it is configured for it and green.

    Args:
        config: Automerge settings for the branch
        platform: Hosting platform to query and merge through

    Returns:
        What happened
    """
    logger.debug("automerge_check", branch=config.branch_name)
    if not (config.automerge and config.automerge_type == "branch"):
        return AutomergeResult.NO_AUTOMERGE

    if await platform.get_branch_pr(config.branch_name):
        return AutomergeResult.PR_EXISTS

    status = await platform.get_branch_status(
        config.branch_name, config.required_status_checks
    )
    if status == BranchStatus.SUCCESS:
        try:
            if config.dry_run:
                logger.info("automerge_dry_run", branch=config.branch_name)
            else:
                await platform.merge_branch(config.branch_name)
        except BranchNotReadyError:
            logger.debug("automerge_branch_not_ready", branch=config.branch_name)
            return AutomergeResult.NOT_READY
        except Exception as e:
            logger.info(
                "automerge_failed",
                branch=config.branch_name,
                error=str(e),
                exc_info=True,
            )
            return AutomergeResult.FAILED
        logger.info("branch_automerged", branch=config.branch_name)
        return AutomergeResult.AUTOMERGED

    if status in (BranchStatus.FAILURE, BranchStatus.ERROR):
        return AutomergeResult.BRANCH_STATUS_ERROR

    logger.debug(
        "automerge_skipped_status", branch=config.branch_name, status=status.value
    )
    return AutomergeResult.NO_AUTOMERGE
