"""
Tests for the chain model: hashing, block and branch creation, numbering.
"""
import pytest

from forkchain.model.chain import (
    ENHANCED_PROTOCOL,
    GENESIS_DATA,
    ROOT_HASH,
    STANDARD_PROTOCOL,
    Branch,
    block_ordinal,
    compute_block_hash,
    create_block,
    create_branch,
    create_genesis_block,
)
from forkchain.model.hashing import digest, new_id
from forkchain.model.state import BranchSet


class TestPrimitives:
    def test_digest_is_sha256_hex(self):
        assert digest("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"

    def test_new_id_is_unique(self):
        assert len({new_id() for _ in range(100)}) == 100


class TestBlockHashing:
    """A block hash depends on timestamp, previous hash and payload only."""

    def test_same_inputs_same_hash(self):
        a = create_block(None, "payload", STANDARD_PROTOCOL, "b1", timestamp=1000)
        b = create_block(None, "payload", ENHANCED_PROTOCOL, "b2", timestamp=1000)
        assert a.hash == b.hash
        assert a.id != b.id

    def test_hash_follows_documented_rule(self):
        block = create_block(None, "payload", STANDARD_PROTOCOL, "b1", timestamp=1000)
        assert block.hash == digest(f"1000{ROOT_HASH}payload")
        assert block.hash == compute_block_hash(1000, ROOT_HASH, "payload")

    @pytest.mark.parametrize("timestamp, data, parent_ts", [
        (1001, "payload", None),
        (1000, "other", None),
        (1000, "payload", 5),
    ])
    def test_changing_any_input_changes_hash(self, timestamp, data, parent_ts):
        reference = create_block(None, "payload", STANDARD_PROTOCOL, "b", timestamp=1000)
        previous = None
        if parent_ts is not None:
            previous = create_block(None, "parent", STANDARD_PROTOCOL, "b", timestamp=parent_ts)
        changed = create_block(previous, data, STANDARD_PROTOCOL, "b", timestamp=timestamp)
        assert changed.hash != reference.hash

    def test_previous_hash_links_to_parent(self):
        parent = create_block(None, "a", STANDARD_PROTOCOL, "b", timestamp=1)
        child = create_block(parent, "b", STANDARD_PROTOCOL, "b", timestamp=2)
        assert child.previous_hash == parent.hash
        assert not child.is_genesis

    def test_digest_failure_propagates(self):
        def broken(_: str) -> str:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            create_block(None, "x", STANDARD_PROTOCOL, "b", digest=broken)

    def test_timestamp_defaults_to_now(self):
        block = create_block(None, "x", STANDARD_PROTOCOL, "b")
        assert block.timestamp > 1_600_000_000_000

    def test_blocks_are_immutable(self):
        block = create_block(None, "x", STANDARD_PROTOCOL, "b", timestamp=1)
        with pytest.raises(AttributeError):
            block.data = "changed"


class TestGenesisAndBranches:
    def test_genesis_block(self):
        genesis = create_genesis_block(STANDARD_PROTOCOL, "root")
        assert genesis.previous_hash == ROOT_HASH
        assert genesis.data == GENESIS_DATA
        assert genesis.is_genesis
        assert genesis.branch_id == "root"

    def test_branch_without_parent_is_empty(self):
        branch = create_branch("Main Branch", STANDARD_PROTOCOL)
        assert branch.blocks == ()
        assert branch.fork_point is None
        assert branch.tip is None

    def test_branch_with_parent_starts_at_fork_point(self):
        parent = create_genesis_block(STANDARD_PROTOCOL, "root")
        branch = create_branch("Fork", ENHANCED_PROTOCOL, parent)
        assert branch.blocks == (parent,)
        assert branch.fork_point == parent
        assert branch.protocol_rules == ENHANCED_PROTOCOL

    def test_branch_ids_are_unique(self):
        a = create_branch("a", STANDARD_PROTOCOL)
        b = create_branch("a", STANDARD_PROTOCOL)
        assert a.id != b.id

    def test_with_blocks_returns_copy(self):
        g = create_genesis_block(STANDARD_PROTOCOL, "root")
        branch = create_branch("Main", STANDARD_PROTOCOL)
        extended = branch.with_blocks([g])
        assert isinstance(extended, Branch)
        assert branch.blocks == ()
        assert extended.blocks == (g,)
        assert extended.id == branch.id


class TestBlockOrdinal:
    @pytest.fixture
    def chain(self):
        root = create_branch("Main", STANDARD_PROTOCOL)
        g0 = create_genesis_block(STANDARD_PROTOCOL, root.id, timestamp=1)
        g1 = create_block(g0, "Block 2", STANDARD_PROTOCOL, root.id, timestamp=2)
        g2 = create_block(g1, "Block 3", STANDARD_PROTOCOL, root.id, timestamp=3)
        root = root.with_blocks((g0, g1, g2))

        fork = create_branch("Fork", ENHANCED_PROTOCOL, g1)
        f1 = create_block(g1, "Block 1", ENHANCED_PROTOCOL, fork.id, timestamp=4)
        f2 = create_block(f1, "Block 2", ENHANCED_PROTOCOL, fork.id, timestamp=5)
        fork = fork.with_blocks(fork.blocks + (f1, f2))

        return BranchSet((root, fork))

    def test_root_ordinal_is_chain_height(self, chain):
        for i, block in enumerate(chain.root.blocks):
            assert block_ordinal(block, chain) == i

    def test_forked_ordinal_counts_from_fork_point(self, chain):
        fork = chain[1]
        # f1 sits at chain height 2 but is numbered 1 on its branch
        assert block_ordinal(fork.blocks[1], chain) == 1
        assert block_ordinal(fork.blocks[2], chain) == 2

    def test_fork_point_is_numbered_by_parent(self, chain):
        assert block_ordinal(chain[1].fork_point, chain) == 1

    def test_unknown_block_is_zero(self, chain):
        stranger = create_block(None, "stranger", STANDARD_PROTOCOL, "x", timestamp=99)
        assert block_ordinal(stranger, chain) == 0
