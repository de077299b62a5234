"""
Collection State NFT Policy - One-shot NFT for the collection state UTxO.
PlutusV3 / OpShin 0.27+ compatible.

This policy mints a single NFT that identifies the collection state UTxO.
The state UTxO carries the CollectionDatum (supply counter, price, base URI...).

One-shot: Token name = sha256(first_input.id) ensures only one can ever be minted.

Compile: opshin build collection_state_nft_policy.py
"""
from opshin.ledger.api_v3 import *


# =============================================================================
# DATUM (must match collection_datum_types.py EXACTLY)
# =============================================================================

@dataclass
class CollectionDatum(PlutusData):
    """Collection state - stored in the state UTxO with the state NFT."""
    CONSTR_ID = 0
    state_nft_policy: bytes     # 28 bytes - This policy's ID (self-reference)
    state_nft_name: bytes       # 32 bytes - The state NFT name
    item_policy: bytes          # 28 bytes
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
class MintState(PlutusData):
    """Mint the collection state NFT (one-time, when the collection launches)."""
    CONSTR_ID = 0
    output_index: int


@dataclass
class BurnState(PlutusData):
    """Burn the state NFT (collection closed)."""
    CONSTR_ID = 1


StateNFTRedeemer = Union[MintState, BurnState]


# =============================================================================
# HELPERS
# =============================================================================

def has_token(v: Value, policy: bytes, name: bytes, qty: int) -> bool:
    """Check if value has exactly qty of token."""
    if policy in v.keys():
        tokens = v[policy]
        if name in tokens.keys():
            return tokens[name] == qty
    return False


def valid_initial_datum(datum: CollectionDatum, policy: bytes, name: bytes) -> bool:
    """A freshly launched collection: self-referencing, sane limits, nothing minted."""
    if datum.state_nft_policy != policy:
        return False
    if datum.state_nft_name != name:
        return False
    if len(datum.owner) != 28:
        return False
    if len(datum.item_policy) != 28:
        return False
    if datum.max_supply <= 0:
        return False
    if datum.max_per_tx <= 0:
        return False
    if datum.unit_price < 0:
        return False
    return datum.minted_count == 0


def valid_state_datum(out: TxOut, policy: bytes, name: bytes) -> bool:
    """Check output has a valid initial CollectionDatum."""
    d = out.datum
    if isinstance(d, SomeOutputDatum):
        datum: CollectionDatum = d.datum
        return valid_initial_datum(datum, policy, name)
    return False


# =============================================================================
# MINTING POLICY
# =============================================================================

def validator(ctx: ScriptContext) -> None:
    """
    Collection state NFT minting policy (PlutusV3).

    MINT: Creates exactly 1 NFT when the collection launches.
          Token name derived from first input ensures one-shot.

    BURN: Allows burning when the collection is closed.
    """
    tx: TxInfo = ctx.transaction
    purpose = ctx.purpose
    assert isinstance(purpose, Minting)

    redeemer: StateNFTRedeemer = ctx.redeemer
    policy_id = purpose.policy_id
    minted = tx.mint[policy_id]

    if isinstance(redeemer, MintState):
        first_input = tx.inputs[0].out_ref
        token_name = sha2_256(first_input.id)

        assert len(minted) == 1, "Must mint exactly 1 token"
        assert token_name in minted.keys(), "Invalid token name"
        assert minted[token_name] == 1, "Must mint exactly 1"

        assert redeemer.output_index >= 0, "Invalid output index"
        assert redeemer.output_index < len(tx.outputs), "Output index out of range"
        target_out = tx.outputs[redeemer.output_index]

        assert has_token(target_out.value, policy_id, token_name, 1), "State NFT not in output"
        assert valid_state_datum(target_out, policy_id, token_name), "Invalid collection datum"

    elif isinstance(redeemer, BurnState):
        for name in minted.keys():
            assert minted[name] < 0, "Must burn (negative quantity)"

    else:
        assert False, "Invalid redeemer"
