"""
Collection Item NFT Policy - Mints the collection's items.
PlutusV3 / OpShin 0.27+ compatible.

Item token name = token_prefix + decimal item id (e.g. b"Item42").

IMPORTANT: This policy does not decide which items may be minted.
Minting is only authorized when the collection state UTxO is spent; the
collection validator then enforces quantity, capacity, payment and the
sequential item ids.

Parameters (applied at build time, one policy per collection):
- collection_script_hash: Hash of collection_validator.py
- state_nft_policy / state_nft_name: The collection's state NFT

Compile: opshin build minting collection_item_nft_policy.py \
    '{"bytes": "<collection_script_hash>"}' \
    '{"bytes": "<state_nft_policy>"}' \
    '{"bytes": "<state_nft_name>"}'
"""
from opshin.ledger.api_v3 import *


# =============================================================================
# COLLECTION DATUM (must match collection_datum_types.py EXACTLY)
# =============================================================================

@dataclass
class CollectionDatum(PlutusData):
    """Collection state - stored in the state UTxO with the state NFT."""
    CONSTR_ID = 0
    state_nft_policy: bytes     # 28 bytes
    state_nft_name: bytes       # 32 bytes
    item_policy: bytes          # 28 bytes - must equal this policy's ID
    owner: bytes                # 28 bytes PKH
    base_uri: bytes
    token_prefix: bytes
    max_supply: int
    max_per_tx: int
    unit_price: int             # lovelace
    minted_count: int


# =============================================================================
# REDEEMERS
# =============================================================================

@dataclass
class MintCollectionItems(PlutusData):
    """Mint items; the collection state UTxO must be spent."""
    CONSTR_ID = 0


@dataclass
class BurnCollectionItems(PlutusData):
    """Burn items held by the transaction's inputs."""
    CONSTR_ID = 1


ItemNFTRedeemer = Union[MintCollectionItems, BurnCollectionItems]


# =============================================================================
# HELPERS
# =============================================================================

def has_nft(v: Value, policy: bytes, name: bytes) -> bool:
    """Check if value contains the NFT."""
    if policy in v.keys():
        tokens = v[policy]
        if name in tokens.keys():
            return tokens[name] >= 1
    return False


def all_positive(minted: Dict[bytes, int]) -> bool:
    """Every token operation mints (no burns mixed into a mint)."""
    for name in minted.keys():
        if minted[name] <= 0:
            return False
    return True


def all_negative(minted: Dict[bytes, int]) -> bool:
    """Every token operation burns."""
    for name in minted.keys():
        if minted[name] >= 0:
            return False
    return True


def collection_state_spent(tx: TxInfo, collection_script_hash: bytes, state_nft_policy: bytes, state_nft_name: bytes, own_policy: bytes) -> bool:
    """
    Check the collection state UTxO is spent from the collection validator
    and names this policy as its item policy.
    State NFT and script hash are build-time parameters, never redeemer input.
    """
    for inp in tx.inputs:
        if has_nft(inp.resolved.value, state_nft_policy, state_nft_name):
            cred = inp.resolved.address.payment_credential
            if isinstance(cred, ScriptCredential):
                if cred.credential_hash == collection_script_hash:
                    inp_datum = inp.resolved.datum
                    if isinstance(inp_datum, SomeOutputDatum):
                        state: CollectionDatum = inp_datum.datum
                        return state.item_policy == own_policy
    return False


# =============================================================================
# MINTING POLICY
# =============================================================================

def validator(collection_script_hash: bytes, state_nft_policy: bytes, state_nft_name: bytes, ctx: ScriptContext) -> None:
    """
    Item NFT minting policy (PlutusV3), parameterized per collection.

    MINT: Only allowed when this collection's state UTxO is spent from the
          collection validator, so the validator runs and checks the sale.

    BURN: Holders may burn their items.
    """
    tx: TxInfo = ctx.transaction
    purpose = ctx.purpose
    assert isinstance(purpose, Minting)

    redeemer: ItemNFTRedeemer = ctx.redeemer

    policy_id = purpose.policy_id
    minted = tx.mint[policy_id]

    if isinstance(redeemer, MintCollectionItems):
        # CRITICAL: Collection validator must be spent to authorize minting
        assert collection_state_spent(tx, collection_script_hash, state_nft_policy, state_nft_name, policy_id), "Collection state must authorize"
        assert all_positive(minted), "Cannot burn while minting"

    elif isinstance(redeemer, BurnCollectionItems):
        assert all_negative(minted), "Must burn (negative quantity)"

    else:
        assert False, "Invalid redeemer"
