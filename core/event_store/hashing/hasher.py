"""
Custody Ledger Event Store — Hash Computation
================================================
event_hash = SHA256(canonical_json(envelope_body) + previous_event_hash)

- Canonical JSON: sorted keys, fixed separators, ASCII only
- No salt, no randomness
- The first event in a feed chains from GENESIS_HASH

This module ONLY computes. It does not verify, persist, or dispatch.
"""

import hashlib
import json
from typing import Any


GENESIS_HASH = "GENESIS"


def canonical_serialize(body: Any) -> str:
    """Deterministic JSON for hashing. Non-JSON types fall back to str()."""
    return json.dumps(
        body,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def compute_event_hash(body: Any, previous_event_hash: str) -> str:
    """64-character lowercase hex SHA-256 of body chained to previous_event_hash."""
    hash_input = canonical_serialize(body) + previous_event_hash
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()
