"""
Collection Validator - Guards the collection state UTxO.
PlutusV3 / OpShin 0.27+ compatible.

This validator holds the collection state UTxO. The UTxO contains the state
NFT and the CollectionDatum (supply counter, limits, price, base URI).

IMPORTANT: No policy ids or prices are baked into this contract.
All configuration is stored in CollectionDatum and read at runtime.

Operations:
- MintItems: Sell the next `quantity` items (anyone, must pay the owner)
- ReserveItems: Mint the reserve batch to the owner (owner only)
- SetBaseUri: Replace the metadata base locator (owner only)
- CloseCollection: Close the collection and burn the state NFT (owner only)

Every operation is all-or-nothing: a failed check fails the whole transaction.
Only one collection state UTxO may be spent per transaction, so an owner
payment can never satisfy two collections at once.

Compile: opshin build collection_validator.py
"""
from opshin.prelude import *

# Items minted to the owner by ReserveItems (must match collection_config.py)
RESERVE_BATCH_SIZE: int = 3


# =============================================================================
# DATUM - Contains ALL configuration (no baked-in values)
# =============================================================================

@dataclass
class CollectionDatum(PlutusData):
    """
    Collection state - must match collection_datum_types.py EXACTLY.
    """
    CONSTR_ID = 0

    # Collection Identity
    state_nft_policy: bytes     # 28 bytes - State NFT policy
    state_nft_name: bytes       # 32 bytes - State NFT name
    item_policy: bytes          # 28 bytes - Policy that mints the items

    # Ownership / Metadata
    owner: bytes                # 28 bytes PKH
    base_uri: bytes             # Item locator = base_uri + id
    token_prefix: bytes         # Item asset name prefix

    # Sale Parameters
    max_supply: int
    max_per_tx: int
    unit_price: int             # lovelace

    # Supply Counter
    minted_count: int


# =============================================================================
# REDEEMERS
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


def get_lovelace(v: Value) -> int:
    """Get ADA amount (lovelace) from value."""
    if b"" in v.keys():
        ada = v[b""]
        if b"" in ada.keys():
            return ada[b""]
    return 0


def signed_by(tx: TxInfo, pkh: bytes) -> bool:
    """Check if transaction is signed by PKH."""
    for s in tx.signatories:
        if s == pkh:
            return True
    return False


def nft_burned(tx: TxInfo, policy: bytes, name: bytes) -> bool:
    """Check if NFT is being burned."""
    if policy in tx.mint.keys():
        tokens = tx.mint[policy]
        if name in tokens.keys():
            return tokens[name] == -1
    return False


def item_token_name(prefix: bytes, item_id: int) -> bytes:
    """Item asset name: prefix followed by the decimal item id."""
    return prefix + str(item_id).encode()


def valid_quantity(quantity: int, max_per_tx: int) -> bool:
    """Quantity must be positive and within the per-transaction maximum."""
    return quantity > 0 and quantity <= max_per_tx


def within_capacity(minted_count: int, quantity: int, max_supply: int) -> bool:
    """Supply after minting must not exceed the collection capacity."""
    return minted_count + quantity <= max_supply


def mint_cost(quantity: int, unit_price: int) -> int:
    """Total payment required for `quantity` items."""
    return quantity * unit_price


def owner_paid(outputs: List[TxOut], owner: bytes, amount: int) -> bool:
    """Verify outputs to the owner's key carry at least `amount` lovelace."""
    if amount == 0:
        return True
    paid = 0
    for output in outputs:
        cred = output.address.payment_credential
        if isinstance(cred, PubKeyCredential):
            if cred.credential_hash == owner:
                paid = paid + get_lovelace(output.value)
    return paid >= amount


def next_items_minted(minted: Dict[bytes, int], prefix: bytes, minted_count: int, quantity: int) -> bool:
    """Exactly the next `quantity` sequential items are minted, one of each."""
    if len(minted) != quantity:
        return False
    for i in range(quantity):
        name = item_token_name(prefix, minted_count + 1 + i)
        if not name in minted.keys():
            return False
        if minted[name] != 1:
            return False
    return True


def output_to_key(out: TxOut, pkh: bytes) -> bool:
    """Check if output goes to the given public key hash."""
    cred = out.address.payment_credential
    if isinstance(cred, PubKeyCredential):
        return cred.credential_hash == pkh
    return False


def items_delivered(outputs: List[TxOut], recipient: bytes, policy: bytes, prefix: bytes, minted_count: int, quantity: int) -> bool:
    """Every newly minted item ends up at the recipient's key."""
    for i in range(quantity):
        name = item_token_name(prefix, minted_count + 1 + i)
        found = False
        for out in outputs:
            if output_to_key(out, recipient):
                if has_nft(out.value, policy, name):
                    found = True
        if not found:
            return False
    return True


def datum_matches_except_minted_count(new_datum: CollectionDatum, datum: CollectionDatum, expected_count: int) -> bool:
    """Verify all datum fields match except minted_count which should equal expected_count."""
    if new_datum.state_nft_policy != datum.state_nft_policy:
        return False
    if new_datum.state_nft_name != datum.state_nft_name:
        return False
    if new_datum.item_policy != datum.item_policy:
        return False
    if new_datum.owner != datum.owner:
        return False
    if new_datum.base_uri != datum.base_uri:
        return False
    if new_datum.token_prefix != datum.token_prefix:
        return False
    if new_datum.max_supply != datum.max_supply:
        return False
    if new_datum.max_per_tx != datum.max_per_tx:
        return False
    if new_datum.unit_price != datum.unit_price:
        return False
    if new_datum.minted_count != expected_count:
        return False
    return True


def datum_matches_except_base_uri(new_datum: CollectionDatum, datum: CollectionDatum, expected_uri: bytes) -> bool:
    """Verify all datum fields match except base_uri which should equal expected_uri."""
    if new_datum.base_uri != expected_uri:
        return False
    if new_datum.state_nft_policy != datum.state_nft_policy:
        return False
    if new_datum.state_nft_name != datum.state_nft_name:
        return False
    if new_datum.item_policy != datum.item_policy:
        return False
    if new_datum.owner != datum.owner:
        return False
    if new_datum.token_prefix != datum.token_prefix:
        return False
    if new_datum.max_supply != datum.max_supply:
        return False
    if new_datum.max_per_tx != datum.max_per_tx:
        return False
    if new_datum.unit_price != datum.unit_price:
        return False
    if new_datum.minted_count != datum.minted_count:
        return False
    return True


def find_own_input(tx: TxInfo, ref: TxOutRef) -> TxOut:
    """Find the input being spent."""
    for i in tx.inputs:
        if i.out_ref == ref:
            return i.resolved
    assert False, "Own input not found"
    return tx.inputs[0].resolved


def find_continuing_output(tx: TxInfo, addr: Address, policy: bytes, name: bytes) -> TxOut:
    """Find output at same address with the state NFT."""
    for o in tx.outputs:
        if o.address == addr:
            if has_nft(o.value, policy, name):
                return o
    assert False, "Continuing output not found"
    return tx.outputs[0]


def continuing_datum(tx: TxInfo, addr: Address, datum: CollectionDatum) -> CollectionDatum:
    """Datum of the continuing state output."""
    cont = find_continuing_output(tx, addr, datum.state_nft_policy, datum.state_nft_name)
    cont_datum_raw = cont.datum
    assert isinstance(cont_datum_raw, SomeOutputDatum), "Missing inline datum"
    new_datum: CollectionDatum = cont_datum_raw.datum
    return new_datum


def minted_items(tx: TxInfo, item_policy: bytes) -> Dict[bytes, int]:
    """Tokens minted under the item policy in this transaction."""
    assert item_policy in tx.mint.keys(), "No items minted"
    return tx.mint[item_policy]


def no_items_minted(tx: TxInfo, item_policy: bytes) -> bool:
    """The transaction neither mints nor burns under the item policy."""
    return not item_policy in tx.mint.keys()


def single_collection_input(tx: TxInfo, own_cred: Credential) -> bool:
    """Exactly one input is spent from this validator's payment credential."""
    count = 0
    for inp in tx.inputs:
        if inp.resolved.address.payment_credential == own_cred:
            count = count + 1
    return count == 1


# =============================================================================
# VALIDATOR
# =============================================================================

def validator(ctx: ScriptContext) -> None:
    """
    Collection validator - one state UTxO per collection.
    Collection identity verified by state NFT presence.

    NOTE: PlutusV3 validators take ONLY ScriptContext.
    Datum is accessed from the spent input, redeemer from ctx.redeemer.
    """
    tx: TxInfo = ctx.transaction
    purpose = ctx.purpose
    assert isinstance(purpose, Spending)

    own_out = find_own_input(tx, purpose.tx_out_ref)
    own_addr = own_out.address

    own_datum_raw = own_out.datum
    assert isinstance(own_datum_raw, SomeOutputDatum), "Missing inline datum on input"
    datum: CollectionDatum = own_datum_raw.datum

    redeemer: CollectionRedeemer = ctx.redeemer

    # CRITICAL: State NFT proves the datum is trustworthy
    assert has_nft(own_out.value, datum.state_nft_policy, datum.state_nft_name), "State NFT not found"

    # CRITICAL: One collection per transaction (no shared owner payment)
    assert single_collection_input(tx, own_addr.payment_credential), "Only one collection input allowed"

    # ==========================================================================
    # MINT ITEMS (public sale)
    # ==========================================================================
    if isinstance(redeemer, MintItems):
        quantity = redeemer.quantity
        assert valid_quantity(quantity, datum.max_per_tx), "Invalid mint quantity"
        assert within_capacity(datum.minted_count, quantity, datum.max_supply), "Max supply exceeded"

        cost = mint_cost(quantity, datum.unit_price)
        assert owner_paid(tx.outputs, datum.owner, cost), "Insufficient payment"

        minted = minted_items(tx, datum.item_policy)
        assert next_items_minted(minted, datum.token_prefix, datum.minted_count, quantity), "Wrong items minted"
        assert items_delivered(tx.outputs, redeemer.recipient, datum.item_policy, datum.token_prefix, datum.minted_count, quantity), "Items not delivered"

        new_datum = continuing_datum(tx, own_addr, datum)
        assert datum_matches_except_minted_count(new_datum, datum, datum.minted_count + quantity), "Datum mismatch"

    # ==========================================================================
    # RESERVE ITEMS (owner only)
    # ==========================================================================
    elif isinstance(redeemer, ReserveItems):
        assert signed_by(tx, datum.owner), "Owner signature required"
        assert within_capacity(datum.minted_count, RESERVE_BATCH_SIZE, datum.max_supply), "Max supply exceeded"

        minted = minted_items(tx, datum.item_policy)
        assert next_items_minted(minted, datum.token_prefix, datum.minted_count, RESERVE_BATCH_SIZE), "Wrong items minted"
        assert items_delivered(tx.outputs, datum.owner, datum.item_policy, datum.token_prefix, datum.minted_count, RESERVE_BATCH_SIZE), "Items not delivered"

        new_datum = continuing_datum(tx, own_addr, datum)
        assert datum_matches_except_minted_count(new_datum, datum, datum.minted_count + RESERVE_BATCH_SIZE), "Datum mismatch"

    # ==========================================================================
    # SET BASE URI (owner only)
    # ==========================================================================
    elif isinstance(redeemer, SetBaseUri):
        assert signed_by(tx, datum.owner), "Owner signature required"
        assert no_items_minted(tx, datum.item_policy), "Items cannot be minted here"

        new_datum = continuing_datum(tx, own_addr, datum)
        assert datum_matches_except_base_uri(new_datum, datum, redeemer.new_base_uri), "Only base_uri can change"

    # ==========================================================================
    # CLOSE COLLECTION (owner only)
    # ==========================================================================
    elif isinstance(redeemer, CloseCollection):
        assert signed_by(tx, datum.owner), "Owner signature required"
        assert no_items_minted(tx, datum.item_policy), "Items cannot be minted here"

        # State NFT must be burned (prevents reuse)
        assert nft_burned(tx, datum.state_nft_policy, datum.state_nft_name), "State NFT must be burned"

    else:
        assert False, "Invalid redeemer"
