"""Unit tests for the gap filler."""

import pytest

from chainsync.services.sync.gap_filler import (
    GapFiller,
    populate_missing_blocks,
    retrieve_and_update_blocks,
)
from tests.factories import make_block


class TestPopulateMissingBlocks:
    """Tests for backfilling [start, head]."""

    @pytest.mark.asyncio
    async def test_fills_empty_store_up_to_head(self, chain_source, block_store):
        """start=0, head=5, empty store -> blocks 0..5 written, count 6."""
        chain_source.head = 5

        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 6
        assert sorted(block_store.blocks) == [0, 1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_second_run_is_noop(self, chain_source, block_store):
        """Running twice without chain growth fills nothing the second time."""
        chain_source.head = 10
        await populate_missing_blocks(chain_source, block_store, 0)
        chain_source.fetched.clear()

        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 0
        assert chain_source.fetched == []

    @pytest.mark.asyncio
    async def test_only_missing_numbers_fetched_in_ascending_order(
        self, chain_source, block_store
    ):
        """Existing blocks are skipped, the rest fetched lowest first."""
        chain_source.head = 8
        for number in (0, 2, 3, 7):
            block_store.blocks[number] = make_block(number)

        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 5
        assert chain_source.fetched == [1, 4, 5, 6, 8]

    @pytest.mark.asyncio
    async def test_respects_starting_block_number(self, chain_source, block_store):
        """Nothing below the starting block is fetched."""
        chain_source.head = 12

        filled = await populate_missing_blocks(chain_source, block_store, 10)

        assert filled == 3
        assert min(chain_source.fetched) == 10

    @pytest.mark.asyncio
    async def test_fetch_error_skips_only_that_block(self, chain_source, block_store):
        """A failing block does not stop its neighbours."""
        chain_source.head = 5
        chain_source.failing.add(3)

        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 5
        assert 2 in block_store.blocks
        assert 4 in block_store.blocks
        assert 3 not in block_store.blocks

    @pytest.mark.asyncio
    async def test_skipped_block_filled_on_next_pass(self, chain_source, block_store):
        """A block skipped after a transient error is retried next pass."""
        chain_source.head = 5
        chain_source.failing.add(3)
        await populate_missing_blocks(chain_source, block_store, 0)

        chain_source.failing.clear()
        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 1
        assert sorted(block_store.blocks) == list(range(6))

    @pytest.mark.asyncio
    async def test_write_error_skips_only_that_block(self, chain_source, block_store):
        """A store failure is not counted and does not abort the pass."""
        chain_source.head = 4
        block_store.write_failures.add(1)

        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 4
        assert 1 not in block_store.blocks

    @pytest.mark.asyncio
    async def test_converges_as_chain_grows(self, chain_source, block_store):
        """Every pass catches up to the head known at call time."""
        chain_source.head = 3
        await populate_missing_blocks(chain_source, block_store, 0)

        chain_source.head = 7
        filled = await populate_missing_blocks(chain_source, block_store, 0)

        assert filled == 4
        for number in range(8):
            assert await block_store.block_exists(number)


    @pytest.mark.asyncio
    async def test_missing_set_requested_in_bounded_chunks(
        self, chain_source, block_store
    ):
        """start=0, head=9, chunk=4 -> [0,3], [4,7], [8,9], fetched lowest first."""
        chain_source.head = 9
        block_store.blocks[5] = make_block(5)

        filled = await populate_missing_blocks(
            chain_source, block_store, 0, chunk_size=4
        )

        assert block_store.missing_calls == [(0, 3), (4, 7), (8, 9)]
        assert filled == 9
        assert chain_source.fetched == [0, 1, 2, 3, 4, 6, 7, 8, 9]

    @pytest.mark.asyncio
    async def test_rejects_empty_chunk(self, chain_source, block_store):
        chain_source.head = 3

        with pytest.raises(ValueError):
            await populate_missing_blocks(chain_source, block_store, 0, chunk_size=0)


class TestRetrieveAndUpdateBlocks:
    """Tests for the per-block fetch/write step."""

    @pytest.mark.asyncio
    async def test_returns_number_of_successful_writes(self, chain_source, block_store):
        chain_source.head = 20
        chain_source.failing.add(11)

        filled = await retrieve_and_update_blocks(
            chain_source, block_store, [10, 11, 12]
        )

        assert filled == 2
        assert block_store.writes == [10, 12]


class TestGapFiller:
    """Tests for the bound gap filler."""

    @pytest.mark.asyncio
    async def test_uses_configured_start(self, chain_source, block_store):
        chain_source.head = 6
        gap_filler = GapFiller(chain_source, block_store, starting_block_number=4)

        filled = await gap_filler.populate_missing_blocks()

        assert filled == 3
        assert sorted(block_store.blocks) == [4, 5, 6]
