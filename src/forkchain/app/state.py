from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal

from forkchain.controller.layout import ChainLayout, compute_layout
from forkchain.controller.mutations import ChainController, ChainHandlers
from forkchain.controller.validation import IssueKind, verify_branch_set
from forkchain.config import DEFAULT_LAYOUT, LayoutSettings
from forkchain.model.chain import Block, Branch
from forkchain.model.hashing import Digest, digest as sha256_digest
from forkchain.model.state import BranchSet, Selection

logger = logging.getLogger(__name__)


class Store(QObject):
    """Central state store; re-emits controller transitions as Qt signals."""
    branches_changed = Signal(object)   # BranchSet
    selection_changed = Signal(object)  # Selection | None
    error_occurred = Signal(str)

    def __init__(
        self,
        digest: Digest = sha256_digest,
        settings: LayoutSettings = DEFAULT_LAYOUT,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self.settings = settings
        self.controller = ChainController(
            handlers=ChainHandlers(
                on_select=self._on_select,
                on_append=self._on_append,
                on_fork=self._on_fork,
                on_reset=self._on_reset,
            ),
            digest=digest,
        )

    # --- READ ACCESS ---

    @property
    def branch_set(self) -> BranchSet:
        return self.controller.branch_set

    @property
    def selection(self) -> Optional[Selection]:
        return self.controller.selection

    def layout(self) -> ChainLayout:
        """Fresh layout of the current snapshot."""
        return compute_layout(self.controller.branch_set, self.settings)

    # --- SLOTS ---

    def select_block(self, block: Block, branch_index: int) -> None:
        self.controller.select_block(block, branch_index)

    def add_block(self) -> None:
        self._run(self.controller.add_block, "append block")

    def create_branch(self) -> None:
        self._run(self.controller.create_new_branch_with_block, "create branch")

    def clear(self) -> None:
        self._run(self.controller.clear_blockchain, "reset blockchain")

    # --- CONTROLLER CALLBACKS ---

    def _on_select(self, selection: Optional[Selection]) -> None:
        self.selection_changed.emit(selection)

    def _on_append(self, block: Block, branch_index: int) -> None:
        self._publish()

    def _on_fork(self, branch: Branch) -> None:
        self._publish()

    def _on_reset(self, branch_set: BranchSet) -> None:
        self._publish()

    # --- HELPERS ---

    def _run(self, action, description: str) -> None:
        """Run a mutation; failures leave the chain as it was."""
        try:
            action()
        except Exception as e:
            logger.error(f"Could not {description}: {e}")
            self.error_occurred.emit(f"Could not {description}: {e}")

    def _publish(self) -> None:
        branch_set = self.controller.branch_set
        for issue in verify_branch_set(branch_set, self.controller.digest):
            if issue.kind is IssueKind.ORPHAN_FORK:
                logger.info(f"Branch detached from its parent history: {issue}")
            else:
                logger.warning(f"Chain issue after mutation: {issue}")
        self.selection_changed.emit(None)
        self.branches_changed.emit(branch_set)
