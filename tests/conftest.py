import itertools

import pytest

from forkchain.controller.mutations import ChainController
from forkchain.model.hashing import digest


class CountingClock:
    """Deterministic millisecond clock: every call advances by one."""
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self._ticks = itertools.count(start)

    def __call__(self) -> int:
        return next(self._ticks)


class FlakyDigest:
    """SHA-256 digest that can be switched to fail on demand."""
    def __init__(self) -> None:
        self.fail = False
        self.calls = 0

    def __call__(self, text: str) -> str:
        self.calls += 1
        if self.fail:
            raise RuntimeError("digest unavailable")
        return digest(text)


@pytest.fixture
def clock():
    return CountingClock()


@pytest.fixture
def flaky_digest():
    return FlakyDigest()


@pytest.fixture
def controller(clock):
    return ChainController(clock=clock)


def extend_tip(controller: ChainController, branch_index: int, count: int) -> None:
    """Append `count` blocks to the tip of the given branch."""
    for _ in range(count):
        branch = controller.branch_set[branch_index]
        controller.select_block(branch.tip, branch_index)
        controller.add_block()


def fork_at(controller: ChainController, branch_index: int, block_index: int):
    """Fork a new branch at blocks[block_index] of the given branch."""
    block = controller.branch_set[branch_index].blocks[block_index]
    controller.select_block(block, branch_index)
    return controller.create_new_branch_with_block()


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
