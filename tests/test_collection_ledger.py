import pytest

from collection_config import RESERVE_BATCH_SIZE
from collection_ledger import CollectionError, NftCollection
from tests.conftest import ALICE, BOB, OWNER


def snapshot(c):
    return (c.total_supply, c.balance, c.wallet_of_owner(ALICE), c.wallet_of_owner(OWNER))


# =============================================================================
# MINT
# =============================================================================

@pytest.mark.parametrize("quantity", [1, 2, 5])
def test_mint_increases_supply_by_quantity(collection, quantity):
    ids = collection.mint(ALICE, quantity, payment=quantity * 100)

    assert collection.total_supply == quantity
    assert len(set(ids)) == quantity
    assert collection.wallet_of_owner(ALICE) == ids
    for item_id in ids:
        assert collection.owner_of(item_id) == ALICE


def test_mint_assigns_sequential_ids_from_one(collection):
    assert collection.mint(ALICE, 2, 200) == [1, 2]
    assert collection.mint(BOB, 3, 300) == [3, 4, 5]
    assert collection.wallet_of_owner(BOB) == [3, 4, 5]
    assert collection.balance_of(ALICE) == 2


def test_mint_keeps_overpayment(collection):
    collection.mint(ALICE, 1, payment=150)
    assert collection.balance == 150


@pytest.mark.parametrize(
    "quantity, payment, reason",
    [
        (0, 0, "Quantity must be positive"),
        (-1, 0, "Quantity must be positive"),
        (6, 600, "exceeds max per transaction"),
        (3, 299, "Insufficient payment"),
    ],
)
def test_mint_rejects_without_side_effects(collection, quantity, payment, reason):
    collection.mint(ALICE, 1, 100)
    before = snapshot(collection)

    with pytest.raises(CollectionError, match=reason):
        collection.mint(ALICE, quantity, payment)

    assert snapshot(collection) == before


def test_mint_cannot_exceed_capacity(collection):
    collection.mint(ALICE, 5, 500)
    collection.mint(BOB, 4, 400)
    before = snapshot(collection)

    with pytest.raises(CollectionError, match="Max supply exceeded"):
        collection.mint(ALICE, 2, 200)

    assert snapshot(collection) == before
    assert collection.mint(ALICE, 1, 100) == [10]
    assert collection.remaining_supply == 0


def test_supply_never_exceeds_capacity_over_many_operations(collection):
    for i in range(20):
        try:
            if i % 4 == 0:
                collection.reserve(OWNER)
            else:
                collection.mint(ALICE, (i % 5) + 1, 500)
        except CollectionError:
            pass
        assert collection.total_supply <= collection.max_supply


def test_free_collection_accepts_zero_payment():
    c = NftCollection(owner=OWNER, max_supply=3, max_per_tx=3, unit_price=0)
    assert c.mint(ALICE, 3, 0) == [1, 2, 3]


# =============================================================================
# RESERVE
# =============================================================================

def test_reserve_mints_batch_to_owner(collection):
    ids = collection.reserve(OWNER)

    assert len(ids) == RESERVE_BATCH_SIZE
    assert collection.wallet_of_owner(OWNER) == [1, 2, 3]
    assert collection.balance == 0


def test_reserve_by_non_owner_fails(collection):
    with pytest.raises(CollectionError, match="not the owner"):
        collection.reserve(ALICE)
    assert collection.total_supply == 0


def test_reserve_respects_capacity(collection):
    collection.mint(ALICE, 5, 500)
    collection.mint(ALICE, 3, 300)

    with pytest.raises(CollectionError, match="Max supply exceeded"):
        collection.reserve(OWNER)
    assert collection.total_supply == 8


# =============================================================================
# BASE URI
# =============================================================================

def test_token_uri_concatenates_base_and_id(collection):
    collection.mint(ALICE, 2, 200)
    assert collection.token_uri(2) == "ipfs://QmMetadata/2"
    assert collection.token_uri(2) == collection.token_uri(2)


def test_base_uri_update_applies_to_existing_items(collection):
    ids = collection.mint(ALICE, 3, 300)
    collection.set_base_uri(OWNER, "ipfs://QmRevealed/")

    assert collection.base_uri == "ipfs://QmRevealed/"
    for item_id in ids:
        assert collection.token_uri(item_id) == f"ipfs://QmRevealed/{item_id}"


def test_base_uri_owner_only(collection):
    with pytest.raises(CollectionError):
        collection.set_base_uri(ALICE, "ipfs://evil/")
    assert collection.base_uri == "ipfs://QmMetadata/"


def test_token_uri_for_missing_item(collection):
    with pytest.raises(CollectionError, match="nonexistent"):
        collection.token_uri(1)


# =============================================================================
# WITHDRAW / QUERIES / DATUM
# =============================================================================

def test_withdraw_moves_balance_to_owner(collection):
    collection.mint(ALICE, 2, 200)
    collection.mint(BOB, 1, 100)

    assert collection.withdraw(OWNER) == 300
    assert collection.balance == 0
    with pytest.raises(CollectionError):
        collection.withdraw(ALICE)


def test_owner_of_missing_item(collection):
    with pytest.raises(CollectionError):
        collection.owner_of(1)
    assert not collection.exists(1)
    assert collection.wallet_of_owner(ALICE) == []


def test_mint_cost(collection):
    assert collection.mint_cost(4) == 400


def test_invalid_parameters_rejected():
    with pytest.raises(ValueError):
        NftCollection(owner=OWNER, max_supply=0, max_per_tx=1, unit_price=1)
    with pytest.raises(ValueError):
        NftCollection(owner=OWNER, max_supply=1, max_per_tx=0, unit_price=1)
    with pytest.raises(ValueError):
        NftCollection(owner=OWNER, max_supply=1, max_per_tx=1, unit_price=-1)


def test_as_datum_reflects_state(collection):
    collection.mint(ALICE, 2, 200)
    collection.set_base_uri(OWNER, "ipfs://QmNew/")

    datum = collection.as_datum(b"\x01" * 28, b"\x02" * 32, b"\x03" * 28)

    assert datum.owner == bytes.fromhex(OWNER)
    assert datum.base_uri == b"ipfs://QmNew/"
    assert datum.token_prefix == b"Item"
    assert datum.minted_count == 2
    assert datum.max_supply == 10
    assert datum.max_per_tx == 5
    assert datum.unit_price == 100
