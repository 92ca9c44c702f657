"""
Working State (Data Model)
==========================
This module defines the snapshot of all branches the application works on.

Why is this file needed?
------------------------
1. State Management: It holds every branch in one place, with the root branch
   always first.
2. Consistency: A BranchSet is immutable. Controllers build a new snapshot for
   each change, so views always read one consistent state.

Classes:
    Selection: The block the user currently has selected.
    BranchSet: The ordered, immutable collection of branches.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional

from forkchain.model.chain import Block, Branch


@dataclass(frozen=True)
class Selection:
    block: Block
    branch_index: int


@dataclass(frozen=True)
class BranchSet:
    """
    Ordered list of branches. Order carries meaning only in that
    branches[0] is the root branch; the rest follow creation order.
    """
    branches: tuple[Branch, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Branch]:
        return iter(self.branches)

    def __len__(self) -> int:
        return len(self.branches)

    def __getitem__(self, index: int) -> Branch:
        return self.branches[index]

    @property
    def root(self) -> Branch:
        return self.branches[0]

    def find_branch(self, block_hash: str) -> Optional[tuple[int, Branch]]:
        """First branch (in list order) holding the hash, with its index."""
        for i, branch in enumerate(self.branches):
            if branch.contains(block_hash):
                return i, branch
        return None

    def find_block(self, block_hash: str) -> Optional[Block]:
        for branch in self.branches:
            index = branch.index_of(block_hash)
            if index >= 0:
                return branch.blocks[index]
        return None

    def replace_branch(self, index: int, branch: Branch) -> BranchSet:
        branches = list(self.branches)
        branches[index] = branch
        return BranchSet(tuple(branches))

    def append_branch(self, branch: Branch) -> BranchSet:
        return BranchSet(self.branches + (branch,))

    @property
    def block_count(self) -> int:
        return sum(len(b) for b in self.branches)
