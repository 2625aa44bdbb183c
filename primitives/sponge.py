"""Commitment and transcript hashing over Goldilocks words.

Provides the sponge-level API the Merkle tree and transcript are written
against: a width-preserving permutation, a linear (leaf) hash, a node
compression and the proof-of-work helpers. BLAKE2b does the mixing; outputs
are reduced into canonical field elements so they can be absorbed back into
the transcript.
"""

import hashlib
import struct
from typing import List, Sequence

from primitives.field import GOLDILOCKS_PRIME

# --- Constants ---

HASH_SIZE = 4
"""Field elements per digest (capacity of the sponge)."""

_DIGEST_BYTES = 64
_WORDS_PER_DIGEST = _DIGEST_BYTES // 8

_TAG_PERMUTE = b"membership/perm"
_TAG_LEAF = b"membership/leaf"
_TAG_NODE = b"membership/node"
_TAG_GRIND = b"membership/grind"


# --- Internal Helpers ---

def _pack(values: Sequence[int]) -> bytes:
    """Serialize field elements as little-endian u64 words."""
    return struct.pack(f"<{len(values)}Q", *[int(v) % GOLDILOCKS_PRIME for v in values])


def _expand(tag: bytes, data: bytes, n_words: int) -> List[int]:
    """Squeeze n_words field elements out of BLAKE2b(tag || counter || data)."""
    out: List[int] = []
    counter = 0
    while len(out) < n_words:
        h = hashlib.blake2b(data, digest_size=_DIGEST_BYTES, person=tag.ljust(16, b"\x00")[:16],
                            salt=counter.to_bytes(16, "little"))
        words = struct.unpack(f"<{_WORDS_PER_DIGEST}Q", h.digest())
        out.extend(w % GOLDILOCKS_PRIME for w in words)
        counter += 1
    return out[:n_words]


# --- Sponge API ---

def permute(state: Sequence[int]) -> List[int]:
    """Width-preserving pseudorandom permutation of a sponge state."""
    return _expand(_TAG_PERMUTE, _pack(state), len(state))


def linear_hash(values: Sequence[int]) -> List[int]:
    """Hash an arbitrary-length row of field elements to one digest."""
    return _expand(_TAG_LEAF, _pack(values), HASH_SIZE)


def hash_seq(children: Sequence[int]) -> List[int]:
    """Compress concatenated child digests into a parent digest."""
    return _expand(_TAG_NODE, _pack(children), HASH_SIZE)


# --- Proof of Work ---

def _pow_word(challenge: Sequence[int], nonce: int) -> int:
    return _expand(_TAG_GRIND, _pack(list(challenge) + [nonce]), 1)[0]


def verify_grinding(challenge: Sequence[int], nonce: int, pow_bits: int) -> bool:
    """Check that the nonce drives the top pow_bits bits of the hash to zero."""
    if pow_bits == 0:
        return True
    if not 0 <= nonce < GOLDILOCKS_PRIME:
        return False
    return _pow_word(challenge, nonce) >> (64 - pow_bits) == 0


def grinding(challenge: Sequence[int], pow_bits: int) -> int:
    """Find the smallest nonce satisfying verify_grinding."""
    nonce = 0
    while not verify_grinding(challenge, nonce, pow_bits):
        nonce += 1
    return nonce
