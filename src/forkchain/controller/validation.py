"""
Chain verification.

Walks a BranchSet and reports every place where hashes, links or fork points
do not line up. Verification never raises and never changes the snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from forkchain.model.chain import ROOT_HASH, Branch, compute_block_hash
from forkchain.model.hashing import Digest, digest as sha256_digest
from forkchain.model.state import BranchSet

logger = logging.getLogger(__name__)


class IssueKind(Enum):
    EMPTY_BRANCH = "empty_branch"
    BAD_GENESIS = "bad_genesis"
    HASH_MISMATCH = "hash_mismatch"
    BROKEN_LINK = "broken_link"
    ORPHAN_FORK = "orphan_fork"


@dataclass(frozen=True)
class ChainIssue:
    kind: IssueKind
    branch_index: int
    block_index: Optional[int]
    message: str

    def __str__(self) -> str:
        where = f"branch {self.branch_index}"
        if self.block_index is not None:
            where += f", block {self.block_index}"
        return f"[{self.kind.value}] {where}: {self.message}"


def verify_branch_set(branch_set: BranchSet, digest: Digest = sha256_digest) -> list[ChainIssue]:
    """
    Check every branch of the snapshot.

    Reported problems:
        - a branch with no blocks,
        - a root branch that does not start with a genesis block,
        - a block whose hash does not match its contents,
        - a block whose previous_hash is not the hash of its predecessor,
        - a forked branch whose fork point is not held by any earlier branch.

    An orphaned fork arises legitimately when the parent's history is
    truncated after the fork; it is reported, the layout simply skips it.
    """
    issues: list[ChainIssue] = []

    for branch_index, branch in enumerate(branch_set):
        if not branch.blocks:
            issues.append(ChainIssue(IssueKind.EMPTY_BRANCH, branch_index, None, f"'{branch.name}' has no blocks"))
            continue

        if branch_index == 0:
            genesis = branch.blocks[0]
            if genesis.previous_hash != ROOT_HASH:
                issues.append(ChainIssue(
                    IssueKind.BAD_GENESIS, 0, 0,
                    f"root starts with previous hash {genesis.previous_hash[:8]}, expected '{ROOT_HASH}'",
                ))
        elif not _held_by_earlier_branch(branch_set, branch_index, branch):
            issues.append(ChainIssue(
                IssueKind.ORPHAN_FORK, branch_index, 0,
                f"fork point {branch.blocks[0].hash[:8]} of '{branch.name}' is not in any earlier branch",
            ))

        issues.extend(_verify_links(branch_index, branch, digest))

    for issue in issues:
        logger.debug(f"Chain issue: {issue}")
    return issues


def is_consistent(branch_set: BranchSet, allow_orphans: bool = True) -> bool:
    """True when verification finds nothing (orphaned forks are tolerated by default)."""
    for issue in verify_branch_set(branch_set):
        if allow_orphans and issue.kind is IssueKind.ORPHAN_FORK:
            continue
        return False
    return True


def _held_by_earlier_branch(branch_set: BranchSet, branch_index: int, branch: Branch) -> bool:
    fork_hash = branch.blocks[0].hash
    return any(b.contains(fork_hash) for b in branch_set.branches[:branch_index])


def _verify_links(branch_index: int, branch: Branch, digest: Digest) -> list[ChainIssue]:
    issues = []
    for i, block in enumerate(branch.blocks):
        expected = compute_block_hash(block.timestamp, block.previous_hash, block.data, digest)
        if expected != block.hash:
            issues.append(ChainIssue(
                IssueKind.HASH_MISMATCH, branch_index, i,
                f"stored hash {block.hash[:8]} != computed {expected[:8]}",
            ))
        if i > 0 and block.previous_hash != branch.blocks[i - 1].hash:
            issues.append(ChainIssue(
                IssueKind.BROKEN_LINK, branch_index, i,
                f"previous hash {block.previous_hash[:8]} != predecessor {branch.blocks[i - 1].hash[:8]}",
            ))
    return issues
