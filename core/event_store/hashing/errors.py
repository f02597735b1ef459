"""
Custody Ledger Event Store — Hash-Chain Errors
=================================================
Failure codes reported by chain verification.
"""


class HashRejectionCode:
    """Codes for hash-chain failures."""

    HASH_CHAIN_BROKEN = "HASH_CHAIN_BROKEN"
    HASH_COMPUTATION_MISMATCH = "HASH_COMPUTATION_MISMATCH"
    SEQUENCE_GAP = "SEQUENCE_GAP"
