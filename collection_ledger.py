"""
Collection Ledger - Off-chain reference model of an NFT collection.

Mirrors the rules enforced on-chain by collection_validator.py:
- Public mint: bounded quantity, capped supply, paid per item
- Owner reserve: a fixed batch minted to the owner
- Base URI: owner-only, item locator = base_uri + item id

Every operation validates first and mutates after, so a rejected call
leaves the ledger exactly as it was.
"""
from typing import Dict, List, Optional

import structlog

from collection_config import FIRST_ITEM_ID, RESERVE_BATCH_SIZE
from collection_datum_types import CollectionDatum

logger = structlog.get_logger(__name__)


class CollectionError(Exception):
    """An operation was rejected; the ledger is unchanged."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NftCollection:
    """
    In-memory collection state: supply counter, ownership ledger, base URI
    and collected payments.
    """

    def __init__(
        self,
        owner: str,
        max_supply: int,
        max_per_tx: int,
        unit_price: int,
        base_uri: str = "",
        name: str = "Collection",
        token_prefix: str = "Item",
    ):
        if max_supply <= 0:
            raise ValueError("max_supply must be positive")
        if max_per_tx <= 0:
            raise ValueError("max_per_tx must be positive")
        if unit_price < 0:
            raise ValueError("unit_price cannot be negative")

        self.name = name
        self.token_prefix = token_prefix
        self.owner = owner
        self.max_supply = max_supply
        self.max_per_tx = max_per_tx
        self.unit_price = unit_price
        self._base_uri = base_uri
        self._minted_count = 0
        self._owners: Dict[int, str] = {}
        self._balance = 0

    @classmethod
    def from_settings(cls, owner: str, settings=None) -> "NftCollection":
        """Build a collection from collection_settings (or the given Settings)."""
        if settings is None:
            from collection_settings import settings
        return cls(
            owner=owner,
            max_supply=settings.MAX_SUPPLY,
            max_per_tx=settings.MAX_PER_TX,
            unit_price=settings.UNIT_PRICE,
            base_uri=settings.BASE_URI,
            name=settings.COLLECTION_NAME,
            token_prefix=settings.TOKEN_PREFIX,
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    @property
    def total_supply(self) -> int:
        return self._minted_count

    @property
    def remaining_supply(self) -> int:
        return self.max_supply - self._minted_count

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def balance(self) -> int:
        """Payments collected and not yet withdrawn."""
        return self._balance

    def mint_cost(self, quantity: int) -> int:
        return quantity * self.unit_price

    def exists(self, item_id: int) -> bool:
        return item_id in self._owners

    def owner_of(self, item_id: int) -> str:
        if item_id not in self._owners:
            raise CollectionError(f"Item {item_id} does not exist")
        return self._owners[item_id]

    def balance_of(self, holder: str) -> int:
        return sum(1 for h in self._owners.values() if h == holder)

    def wallet_of_owner(self, holder: str) -> List[int]:
        """All item ids held by `holder`, ascending."""
        return sorted(i for i, h in self._owners.items() if h == holder)

    def token_uri(self, item_id: int) -> str:
        """Metadata locator for an existing item."""
        if item_id not in self._owners:
            raise CollectionError(f"URI query for nonexistent item {item_id}")
        return f"{self._base_uri}{item_id}"

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    def mint(self, caller: str, quantity: int, payment: int) -> List[int]:
        """
        Sell `quantity` items to `caller`. Returns the new item ids.

        Raises CollectionError if the quantity is out of range, the supply
        cap would be exceeded, or `payment` is below quantity * unit_price.
        """
        try:
            if quantity <= 0:
                raise CollectionError("Quantity must be positive")
            if quantity > self.max_per_tx:
                raise CollectionError(
                    f"Quantity {quantity} exceeds max per transaction {self.max_per_tx}"
                )
            self._check_capacity(quantity)
            cost = self.mint_cost(quantity)
            if payment < cost:
                raise CollectionError(f"Insufficient payment: {payment} < {cost}")
        except CollectionError as e:
            logger.warning("mint_rejected", caller=caller, quantity=quantity, payment=payment, reason=e.reason)
            raise

        item_ids = self._issue(caller, quantity)
        self._balance += payment
        logger.info("items_minted", caller=caller, item_ids=item_ids, payment=payment, total_supply=self._minted_count)
        return item_ids

    def reserve(self, caller: str) -> List[int]:
        """Mint the reserve batch to the owner. Owner only, no payment."""
        try:
            self._require_owner(caller)
            self._check_capacity(RESERVE_BATCH_SIZE)
        except CollectionError as e:
            logger.warning("reserve_rejected", caller=caller, reason=e.reason)
            raise

        item_ids = self._issue(self.owner, RESERVE_BATCH_SIZE)
        logger.info("items_reserved", item_ids=item_ids, total_supply=self._minted_count)
        return item_ids

    def set_base_uri(self, caller: str, base_uri: str) -> None:
        """Replace the metadata base locator. Owner only."""
        self._require_owner(caller)
        old = self._base_uri
        self._base_uri = base_uri
        logger.info("base_uri_updated", old=old, new=base_uri)

    def withdraw(self, caller: str) -> int:
        """Hand the collected payments to the owner. Owner only."""
        self._require_owner(caller)
        amount = self._balance
        self._balance = 0
        logger.info("funds_withdrawn", amount=amount)
        return amount

    # =========================================================================
    # ON-CHAIN STATE
    # =========================================================================

    def as_datum(
        self,
        state_nft_policy: bytes,
        state_nft_name: bytes,
        item_policy: bytes,
        token_prefix: Optional[bytes] = None,
    ) -> CollectionDatum:
        """
        Render the current state as the CollectionDatum held by the state UTxO.
        `owner` must be a hex payment key hash.
        """
        if token_prefix is None:
            token_prefix = self.token_prefix.encode()
        return CollectionDatum(
            state_nft_policy=state_nft_policy,
            state_nft_name=state_nft_name,
            item_policy=item_policy,
            owner=bytes.fromhex(self.owner),
            base_uri=self._base_uri.encode(),
            token_prefix=token_prefix,
            max_supply=self.max_supply,
            max_per_tx=self.max_per_tx,
            unit_price=self.unit_price,
            minted_count=self._minted_count,
        )

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _require_owner(self, caller: Optional[str]) -> None:
        if caller != self.owner:
            raise CollectionError("Caller is not the owner")

    def _check_capacity(self, quantity: int) -> None:
        if self._minted_count + quantity > self.max_supply:
            raise CollectionError(
                f"Max supply exceeded: {self._minted_count} + {quantity} > {self.max_supply}"
            )

    def _issue(self, holder: str, quantity: int) -> List[int]:
        start = self._minted_count + FIRST_ITEM_ID
        item_ids = list(range(start, start + quantity))
        for item_id in item_ids:
            self._owners[item_id] = holder
        self._minted_count += quantity
        return item_ids
