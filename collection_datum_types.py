"""
Collection Datum Types - Shared Data Structures for All Collection Contracts

This file contains the canonical datum and redeemer definitions used by the
collection validator, the item NFT policy and the off-chain ledger.

CRITICAL: Any change to these structures requires recompilation of ALL contracts.
The validator and policy files repeat these definitions and must match EXACTLY.
"""

from opshin.prelude import *


# =============================================================================
# COLLECTION DATUM (used by collection_validator and both NFT policies)
# =============================================================================

@dataclass
class CollectionDatum(PlutusData):
    """
    Collection state datum - stored in the state UTxO with the state NFT.

    The state NFT proves the datum is legitimate. Every collection rule is
    read from this datum at runtime; nothing is baked into the scripts.

    Fields:
        state_nft_policy: Policy ID of the state NFT (28 bytes)
        state_nft_name: Asset name of the state NFT (32 bytes, sha256 of tx_id)
        item_policy: Policy ID of the item tokens (28 bytes)
        owner: Collection owner's payment key hash (28 bytes)
        base_uri: Metadata locator prefix, item locator = base_uri + id
        token_prefix: Asset name prefix of item tokens
        max_supply: Fixed capacity of the collection
        max_per_tx: Maximum items per mint transaction
        unit_price: Price per item in lovelace
        minted_count: Items issued so far (supply counter)
    """
    CONSTR_ID = 0
    state_nft_policy: bytes     # 28 bytes
    state_nft_name: bytes       # 32 bytes
    item_policy: bytes          # 28 bytes
    owner: bytes                # 28 bytes PKH
    base_uri: bytes
    token_prefix: bytes
    max_supply: int
    max_per_tx: int
    unit_price: int             # lovelace
    minted_count: int


# =============================================================================
# COLLECTION VALIDATOR REDEEMERS
# =============================================================================

@dataclass
class MintItems(PlutusData):
    """Buy `quantity` items, delivered to `recipient`."""
    CONSTR_ID = 0
    quantity: int
    recipient: bytes            # 28 bytes PKH


@dataclass
class ReserveItems(PlutusData):
    """Mint the reserve batch to the owner (owner only)."""
    CONSTR_ID = 1


@dataclass
class SetBaseUri(PlutusData):
    """Replace the metadata base locator (owner only)."""
    CONSTR_ID = 2
    new_base_uri: bytes


@dataclass
class CloseCollection(PlutusData):
    """Close the collection and burn the state NFT (owner only)."""
    CONSTR_ID = 3


CollectionRedeemer = Union[MintItems, ReserveItems, SetBaseUri, CloseCollection]
