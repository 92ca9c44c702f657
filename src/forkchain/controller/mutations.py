"""
Mutation Controller
===================
State transitions triggered by the user: select, append, fork and reset.

Why is this file needed?
------------------------
1. Ownership: It is the only writer of the BranchSet. Every change produces a
   new snapshot; nothing is edited in place.
2. Atomicity: New blocks are fully created before the snapshot is swapped, so
   a failing digest never leaves a truncated branch behind.
3. Notification: Interested parties (the Qt store, tests) subscribe through
   ChainHandlers. Every handler is optional.

Classes:
    ChainHandlers: Optional callbacks invoked after each transition.
    ChainController: Owns the BranchSet and the current selection.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from forkchain.model.chain import (
    ENHANCED_PROTOCOL,
    STANDARD_PROTOCOL,
    Block,
    Branch,
    ProtocolRules,
    block_ordinal,
    create_block,
    create_branch,
    create_genesis_block,
    now_ms,
)
from forkchain.model.hashing import Digest, digest as sha256_digest
from forkchain.model.state import BranchSet, Selection

logger = logging.getLogger(__name__)

MAIN_BRANCH_NAME = "Main Branch"


@dataclass
class ChainHandlers:
    on_select: Optional[Callable[[Optional[Selection]], None]] = None
    on_append: Optional[Callable[[Block, int], None]] = None
    on_fork: Optional[Callable[[Branch], None]] = None
    on_reset: Optional[Callable[[BranchSet], None]] = None


class ChainController:
    """
    Owns the working BranchSet and the current selection.

    Args:
        handlers: Callbacks notified after each successful transition.
        digest: Digest primitive used for every new block.
        clock: Source of block timestamps in milliseconds.
        root_rules: Protocol of the root branch.
        fork_rules: Protocol given to every forked branch.
    """
    def __init__(
        self,
        handlers: Optional[ChainHandlers] = None,
        digest: Digest = sha256_digest,
        clock: Callable[[], int] = now_ms,
        root_rules: ProtocolRules = STANDARD_PROTOCOL,
        fork_rules: ProtocolRules = ENHANCED_PROTOCOL,
    ) -> None:
        self.handlers = handlers or ChainHandlers()
        self.digest = digest
        self.clock = clock
        self.root_rules = root_rules
        self.fork_rules = fork_rules

        self._branch_set: BranchSet = self._fresh_branch_set()
        self._selection: Optional[Selection] = None

    # --- PROPERTIES ---

    @property
    def branch_set(self) -> BranchSet:
        return self._branch_set

    @property
    def selection(self) -> Optional[Selection]:
        return self._selection

    # --- TRANSITIONS ---

    def select_block(self, block: Block, branch_index: int) -> Optional[Selection]:
        """Select a block; selecting the already selected block clears the selection."""
        current = self._selection
        if current is not None and current.block.hash == block.hash:
            self._selection = None
        else:
            self._selection = Selection(block=block, branch_index=branch_index)

        if self.handlers.on_select:
            self.handlers.on_select(self._selection)
        return self._selection

    def clear_selection(self) -> None:
        if self._selection is None:
            return
        self._selection = None
        if self.handlers.on_select:
            self.handlers.on_select(None)

    def add_block(self) -> Optional[Block]:
        """
        Append a block after the selected one.

        The branch is looked up by hash, not by the (possibly stale) branch
        index of the selection. Every block after the selected one is
        discarded before the new block is appended.

        Returns:
            The new block, or None when nothing is selected.
        """
        if self._selection is None:
            logger.debug("Append requested without a selection, ignoring.")
            return None

        selected = self._selection.block
        found = self._branch_set.find_branch(selected.hash)
        if found is None:
            logger.debug(f"Selected block {selected.hash[:8]} is no longer in any branch, ignoring.")
            return None

        branch_index, branch = found
        ordinal = block_ordinal(selected, self._branch_set)

        # Create first: a digest failure must leave the snapshot untouched
        new_block = create_block(
            selected,
            f"Block {ordinal + 2}",
            branch.protocol_rules,
            branch.id,
            timestamp=self.clock(),
            digest=self.digest,
        )

        dropped = len(branch) - (ordinal + 1)
        updated = branch.with_blocks(branch.blocks[:ordinal + 1] + (new_block,))
        self._branch_set = self._branch_set.replace_branch(branch_index, updated)
        self._selection = None

        logger.info(
            f"Appended block {new_block.hash[:8]} to '{branch.name}' at ordinal {ordinal + 1}"
            + (f", discarded {dropped} block(s)." if dropped else ".")
        )

        if self.handlers.on_append:
            self.handlers.on_append(new_block, branch_index)
        return new_block

    def create_new_branch_with_block(self) -> Optional[Branch]:
        """
        Fork a new branch at the selected block and put one block on top of it.

        The new branch is appended to the end of the BranchSet and uses the
        fork protocol rules.

        Returns:
            The new branch, or None when nothing is selected.
        """
        if self._selection is None:
            logger.debug("Fork requested without a selection, ignoring.")
            return None

        fork_point = self._selection.block
        ordinal = block_ordinal(fork_point, self._branch_set)

        branch = create_branch(f"Branch from Block {ordinal}", self.fork_rules, fork_point)
        first_block = create_block(
            fork_point,
            "Block 1",
            self.fork_rules,
            branch.id,
            timestamp=self.clock(),
            digest=self.digest,
        )
        branch = branch.with_blocks(branch.blocks + (first_block,))

        self._branch_set = self._branch_set.append_branch(branch)
        self._selection = None

        logger.info(f"Created '{branch.name}' forking at block {fork_point.hash[:8]}.")

        if self.handlers.on_fork:
            self.handlers.on_fork(branch)
        return branch

    def clear_blockchain(self) -> BranchSet:
        """Replace everything with a fresh root branch holding a new genesis block."""
        self._branch_set = self._fresh_branch_set()
        self._selection = None
        logger.info("Blockchain has been reset.")

        if self.handlers.on_reset:
            self.handlers.on_reset(self._branch_set)
        return self._branch_set

    # --- HELPERS ---

    def _fresh_branch_set(self) -> BranchSet:
        root = create_branch(MAIN_BRANCH_NAME, self.root_rules)
        genesis = create_genesis_block(self.root_rules, root.id, timestamp=self.clock(), digest=self.digest)
        return BranchSet((root.with_blocks((genesis,)),))
