"""Merkle tree commitment over rows of field elements."""

from dataclasses import dataclass, field
from typing import List, Optional, Union

from primitives.sponge import HASH_SIZE, hash_seq, linear_hash

# --- Type Aliases ---

MerkleRoot = List[int]
LeafData = List[int]


def _to_int_list(data: List[Union[int, object]]) -> List[int]:
    """Convert FF elements to plain int before hashing."""
    return [int(x) for x in data]


# --- Data Classes ---

@dataclass
class QueryProof:
    """Query proof containing leaf values and Merkle authentication path.

    Attributes:
        v: Leaf values at query index, one element per committed column
        mp: Merkle path - list of sibling hashes per level, from leaf to root.
           Each level has (arity - 1) * HASH_SIZE elements
    """
    v: List[int] = field(default_factory=list)
    mp: List[List[int]] = field(default_factory=list)


# --- Merkle Tree ---

class MerkleTree:
    """Variable-arity Merkle tree; each leaf commits one row of columns."""

    def __init__(self, arity: int = 4):
        if arity not in [2, 3, 4]:
            raise ValueError(f"arity must be 2, 3, or 4, got {arity}")

        self.arity = arity
        self.height = 0
        self.width = 0
        self.nodes: List[int] = []
        self.num_nodes = 0

        # Store source data for query proof value extraction
        self.source_data: Optional[List[int]] = None

    # --- Core Operations ---

    def merkelize(self, source: LeafData, height: int, width: int) -> None:
        """Build Merkle tree from source data.

        Args:
            source: Flattened row-major leaf data (height * width elements)
            height: Number of leaves (rows)
            width: Elements per leaf
        """
        self.height = height
        self.width = width
        self.num_nodes = self._compute_num_nodes(height)
        self.nodes = [0] * self.num_nodes

        int_source = _to_int_list(source)
        if len(int_source) != height * width:
            raise ValueError(f"Expected {height * width} elements, got {len(int_source)}")
        self.source_data = int_source

        if height == 0:
            return

        # Hash each leaf row
        for i in range(height):
            row_start = i * width
            leaf_hash = linear_hash(int_source[row_start:row_start + width])
            self.nodes[i * HASH_SIZE:(i + 1) * HASH_SIZE] = leaf_hash

        # Build internal nodes bottom-up
        pending = height
        next_index = 0

        while pending > 1:
            extra_zeros = (self.arity - (pending % self.arity)) % self.arity
            next_n = (pending + (self.arity - 1)) // self.arity

            for i in range(next_n):
                child_start = next_index + i * self.arity * HASH_SIZE
                hash_input = self.nodes[child_start:child_start + self.arity * HASH_SIZE]
                parent_idx = next_index + (pending + extra_zeros + i) * HASH_SIZE
                self.nodes[parent_idx:parent_idx + HASH_SIZE] = hash_seq(hash_input)

            next_index += (pending + extra_zeros) * HASH_SIZE
            pending = next_n

    def get_root(self) -> MerkleRoot:
        """Return the Merkle root commitment."""
        if self.num_nodes == 0:
            return [0] * HASH_SIZE
        return self.nodes[self.num_nodes - HASH_SIZE:self.num_nodes]

    def get_group_proof(self, idx: int) -> List[int]:
        """Generate Merkle proof (siblings only) for leaf at index."""
        proof: List[int] = []
        self._collect_proof_siblings(proof, idx, 0, self.height)
        return proof

    def get_query_proof(self, idx: int) -> QueryProof:
        """Extract leaf values and Merkle path for the leaf at idx.

        Raises:
            ValueError: If source_data not available or idx out of range
        """
        if self.source_data is None:
            raise ValueError("Source data not stored - cannot extract leaf values")
        if idx < 0 or idx >= self.height:
            raise ValueError(f"Query index {idx} out of range [0, {self.height})")

        row_start = idx * self.width
        v = self.source_data[row_start:row_start + self.width]

        flat_siblings = self.get_group_proof(idx)
        siblings_per_level = self.get_num_siblings()
        mp = [flat_siblings[i:i + siblings_per_level]
              for i in range(0, len(flat_siblings), siblings_per_level)]

        return QueryProof(v=list(v), mp=mp)

    def verify_group_proof(
        self,
        root: MerkleRoot,
        proof: List[List[int]],
        idx: int,
        leaf_data: LeafData
    ) -> bool:
        """Verify Merkle proof for a leaf."""
        computed = linear_hash(_to_int_list(leaf_data))

        for level_siblings in proof:
            if len(level_siblings) != self.get_num_siblings():
                return False
            curr_idx = idx % self.arity
            idx = idx // self.arity

            inputs: List[int] = []
            p = 0
            for i in range(self.arity):
                if i != curr_idx:
                    inputs.extend(level_siblings[p * HASH_SIZE:(p + 1) * HASH_SIZE])
                    p += 1
                else:
                    inputs.extend(computed)

            computed = hash_seq(inputs)

        return idx == 0 and computed == list(root[:HASH_SIZE])

    # --- Proof Size Utilities ---

    @staticmethod
    def proof_length(height: int, arity: int) -> int:
        """Number of levels in a Merkle proof for a tree of given height."""
        levels = 0
        while height > 1:
            height = (height + arity - 1) // arity
            levels += 1
        return levels

    def get_num_siblings(self) -> int:
        """Number of sibling elements per proof level."""
        return (self.arity - 1) * HASH_SIZE

    # --- Internal Helpers ---

    def _compute_num_nodes(self, height: int) -> int:
        """Calculate total storage needed for tree nodes."""
        num_nodes = height
        nodes_level = height

        while nodes_level > 1:
            extra_zeros = (self.arity - (nodes_level % self.arity)) % self.arity
            num_nodes += extra_zeros
            next_n = (nodes_level + (self.arity - 1)) // self.arity
            num_nodes += next_n
            nodes_level = next_n

        return num_nodes * HASH_SIZE

    def _collect_proof_siblings(
        self,
        proof: List[int],
        idx: int,
        offset: int,
        n: int
    ) -> None:
        """Recursively collect sibling hashes for proof."""
        if n <= 1:
            return

        curr_idx = idx % self.arity
        next_idx = idx // self.arity
        si = idx - curr_idx

        for i in range(self.arity):
            if i != curr_idx:
                node_offset = offset + (si + i) * HASH_SIZE
                proof.extend(self.nodes[node_offset:node_offset + HASH_SIZE])

        extra_zeros = (self.arity - (n % self.arity)) % self.arity
        next_n = (n + (self.arity - 1)) // self.arity
        next_offset = offset + (n + extra_zeros) * HASH_SIZE

        self._collect_proof_siblings(proof, next_idx, next_offset, next_n)
