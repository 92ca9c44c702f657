"""
Chain Model
===========
Blocks, Branches and the protocol metadata attached to them.

Why is this file needed?
------------------------
1. Entities: It defines the immutable Block and Branch records that every other
   layer reads.
2. Hash rule: It owns the single rule for computing a block hash, so that the
   controller and the verifier can never disagree on it.
3. Numbering: It decides which number a block shows in the diagram.

Blocks are never mutated. A Branch is a tuple of blocks; a forked branch keeps
a value copy of its parent block as its own first element (the fork point).

Classes:
    ProtocolRules: Descriptive protocol metadata.
    Block: A hash-linked record.
    Branch: An ordered chain of blocks.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from forkchain.model.hashing import Digest, digest as sha256_digest, new_id

logger = logging.getLogger(__name__)

ROOT_HASH = "0"
GENESIS_DATA = "Genesis Block"


@dataclass(frozen=True)
class ProtocolRules:
    """Purely descriptive metadata; carries no enforced behaviour."""
    name: str
    block_size: int
    consensus_mechanism: str
    validation_rules: tuple[str, ...] = ()


STANDARD_PROTOCOL = ProtocolRules(
    name="Standard Protocol",
    block_size=1,
    consensus_mechanism="PoW",
    validation_rules=("Standard validation",),
)

ENHANCED_PROTOCOL = ProtocolRules(
    name="Enhanced Protocol",
    block_size=2,
    consensus_mechanism="PoS",
    validation_rules=("Enhanced validation", "Additional security"),
)


@dataclass(frozen=True)
class Block:
    id: str
    timestamp: int  # milliseconds since epoch
    previous_hash: str
    hash: str
    data: str
    protocol_rules: ProtocolRules
    branch_id: str

    @property
    def is_genesis(self) -> bool:
        return self.previous_hash == ROOT_HASH


@dataclass(frozen=True)
class Branch:
    """
    An ordered chain of blocks.

    For a forked branch, blocks[0] is the fork point: the parent block copied
    from the branch it forked from. The root branch starts with a genesis block.
    """
    id: str
    name: str
    protocol_rules: ProtocolRules
    blocks: tuple[Block, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.blocks)

    @property
    def fork_point(self) -> Optional[Block]:
        return self.blocks[0] if self.blocks else None

    @property
    def tip(self) -> Optional[Block]:
        return self.blocks[-1] if self.blocks else None

    def index_of(self, block_hash: str) -> int:
        """Index of the block with the given hash, or -1 if absent."""
        for i, block in enumerate(self.blocks):
            if block.hash == block_hash:
                return i
        return -1

    def contains(self, block_hash: str) -> bool:
        return self.index_of(block_hash) >= 0

    def with_blocks(self, blocks: Iterable[Block]) -> Branch:
        """Copy of this branch with a different block sequence."""
        return replace(self, blocks=tuple(blocks))


def compute_block_hash(
    timestamp: int,
    previous_hash: str,
    data: str,
    digest: Digest = sha256_digest,
) -> str:
    return digest(f"{timestamp}{previous_hash}{data}")


def now_ms() -> int:
    return int(time.time() * 1000)


def create_block(
    previous: Optional[Block],
    data: str,
    protocol_rules: ProtocolRules,
    branch_id: str,
    timestamp: Optional[int] = None,
    digest: Digest = sha256_digest,
) -> Block:
    """
    Create a new block on top of `previous`.

    Args:
        previous: Predecessor block, or None for a genesis block.
        data: Free-text payload.
        protocol_rules: Rules in effect for the new block.
        branch_id: Id of the branch the block belongs to.
        timestamp: Creation time in ms. Defaults to the current time.
        digest: Digest primitive. Any exception it raises propagates.

    Returns:
        The fully constructed block.
    """
    if timestamp is None:
        timestamp = now_ms()
    previous_hash = previous.hash if previous is not None else ROOT_HASH
    block_hash = compute_block_hash(timestamp, previous_hash, data, digest)

    return Block(
        id=new_id(),
        timestamp=timestamp,
        previous_hash=previous_hash,
        hash=block_hash,
        data=data,
        protocol_rules=protocol_rules,
        branch_id=branch_id,
    )


def create_genesis_block(
    protocol_rules: ProtocolRules,
    branch_id: str,
    timestamp: Optional[int] = None,
    digest: Digest = sha256_digest,
) -> Block:
    return create_block(None, GENESIS_DATA, protocol_rules, branch_id, timestamp, digest)


def create_branch(
    name: str,
    protocol_rules: ProtocolRules,
    parent_block: Optional[Block] = None,
) -> Branch:
    """Allocate a new branch, seeded with `parent_block` as its fork point if given."""
    blocks = (parent_block,) if parent_block is not None else ()
    return Branch(id=new_id(), name=name, protocol_rules=protocol_rules, blocks=blocks)


def block_ordinal(block: Block, branches: Iterable[Branch]) -> int:
    """
    Zero-based index of `block` within the first branch that holds it.

    On the root branch this is the chain height. On a forked branch it is
    counted from the fork point (0 at the fork point), so the numbers are not
    comparable across branches. Returns 0 when no branch holds the block.
    """
    for branch in branches:
        index = branch.index_of(block.hash)
        if index >= 0:
            return index
    logger.debug(f"Block {block.hash[:8]} not found in any branch, using ordinal 0.")
    return 0
