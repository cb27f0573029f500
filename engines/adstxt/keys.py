"""
ARL ads.txt Engine — Composite Keys
====================================
Index keys are SHA-256 digests of the canonical JSON list of the
constituent fields. The list encoding keeps field boundaries, so
("ab", "c") and ("a", "bc") never share a key.

Distinct inputs are assumed (not proven) to map to distinct keys;
that assumption rests on SHA-256 collision resistance.

Domains are hashed exactly as given. No case folding, no trimming.
"""

from core.event_store.hashing import digest


def domain_key(domain: str) -> str:
    return digest([domain])


def seller_key(seller_domain: str, seller_id: str) -> str:
    return digest([seller_domain, seller_id])
