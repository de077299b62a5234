"""
Collection Contract Configuration - TRUE CONSTANTS ONLY

This file contains ONLY values that are fixed by standards or by the
collection rules themselves:
- CIP-25 metadata label
- Reserve batch size minted to the owner

Collection parameters (supply cap, price, base URI, owner, etc.) live in the
CollectionDatum on-chain and in NftCollection off-chain.
"""

# =============================================================================
# CIP-25 METADATA LABEL - Universal Constant
# =============================================================================
# Reference: https://cips.cardano.org/cip/CIP-0025/

CIP25_METADATA_LABEL: int = 721
CIP25_MAX_STRING_BYTES: int = 64    # Longer metadata strings are split into lists

# =============================================================================
# COLLECTION RULES
# =============================================================================

RESERVE_BATCH_SIZE: int = 3     # Items minted to the owner by a reserve call
FIRST_ITEM_ID: int = 1          # Item ids are sequential, starting here
