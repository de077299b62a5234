# tests/conftest.py
import pytest

from collection_datum_types import CollectionDatum
from collection_ledger import NftCollection

OWNER = "ab" * 28
ALICE = "alice"
BOB = "bob"


@pytest.fixture(scope="function")
def collection():
    """A small collection: 10 items, 5 per transaction, 100 per item."""
    return NftCollection(
        owner=OWNER,
        max_supply=10,
        max_per_tx=5,
        unit_price=100,
        base_uri="ipfs://QmMetadata/",
        name="Test Collection",
    )


@pytest.fixture(scope="function")
def datum():
    """State datum of a launched collection with 4 items already minted."""
    return CollectionDatum(
        state_nft_policy=b"\x01" * 28,
        state_nft_name=b"\x02" * 32,
        item_policy=b"\x03" * 28,
        owner=bytes.fromhex(OWNER),
        base_uri=b"ipfs://QmMetadata/",
        token_prefix=b"Item",
        max_supply=10,
        max_per_tx=5,
        unit_price=2_000_000,
        minted_count=4,
    )
