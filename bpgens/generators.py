"""
Generators for aggregated Bulletproofs range proofs.

A `Generators` bank holds the per-bit bases for `m` range proofs of
`n` bits each. Provers and verifiers rebuild it independently from
the Pedersen bases alone:

    gens = Generators(PedersenGenerators.default(), 64, 4)
    view = gens.share(2)    # bases for the third value
    G_0, H_0 = view.G[0], view.H[0]

Every point is derived with SHA-512 followed by hash_to_curve, under
fixed domain-separation labels, so no discrete log relation between
any two of them is known.
"""
import hashlib
import logging
from dataclasses import dataclass
from itertools import islice
from typing import Tuple

from .secp import GroupElement, Scalar, multiscalar_mul

logger = logging.getLogger("bpgens.generators")

DOMAIN_SEPARATOR = b"Secp256k1_HashToCurve_Bulletproofs_"

CHAIN_INIT_DOMAIN = b"GeneratorsChainInit"
CHAIN_NEXT_DOMAIN = b"GeneratorsChainNext"

B_LABEL = b"Bulletproofs.Generators.B"
B_BLINDING_LABEL = b"Bulletproofs.Generators.B_blinding"

def encode_to_curve(message: bytes, index: int = 0) -> GroupElement:
    msg_to_hash = hashlib.sha256(
        DOMAIN_SEPARATOR + index.to_bytes(1, "big") + message
    ).digest()
    counter = 0
    while counter < 2**16:
        _hash = hashlib.sha256(msg_to_hash + counter.to_bytes(4, "little")).digest()
        try:
            # will error if point does not lie on curve
            return GroupElement(b"\x02" + _hash)
        except ValueError:
            counter += 1
    # it should never reach this point
    raise ValueError("No valid point found")

def hash_to_curve(message: bytes) -> GroupElement:
    """
    Map arbitrary bytes to a curve point.

    Each half of `message` is encoded to the curve on its own and
    the two points are added, so a 64-byte digest contributes all
    of its 512 bits to the result.
    """
    half = len(message) // 2
    return encode_to_curve(message[:half], 0) + encode_to_curve(message[half:], 1)

class InvalidShareIndex(IndexError):
    """Raised when a share is requested for a party that does not exist."""

    def __init__(self, j: int, m: int):
        self.j = j
        self.m = m
        super().__init__(f"share index {j} out of range for {m} parties")

def _is_index(k) -> bool:
    # bool is an int subclass but never a valid size or party index
    return isinstance(k, int) and not isinstance(k, bool)

class GeneratorsChain:
    """
    An endless, deterministic sequence of points seeded by `label`.

    Chains built from the same label yield the same points. A chain
    carries its cursor as private state: iterate it from one place only.
    """

    def __init__(self, label: bytes = b""):
        digest = hashlib.sha512(CHAIN_INIT_DOMAIN + label).digest()
        self._next_point = hash_to_curve(digest)

    def __iter__(self):
        return self

    def __next__(self) -> GroupElement:
        current_point = self._next_point
        digest = hashlib.sha512(
            CHAIN_NEXT_DOMAIN + current_point.serialize(True)
        ).digest()
        self._next_point = hash_to_curve(digest)
        return current_point

    def take(self, k: int) -> Tuple[GroupElement, ...]:
        if k < 0:
            raise ValueError(f"Cannot take {k} points from a chain")
        return tuple(islice(self, k))

@dataclass(frozen=True)
class PedersenGenerators:
    """
    The two bases of a Pedersen commitment.

    Supplied points are taken as they are: nothing checks that B and
    B_blinding are independent, and commitments are only binding and
    hiding when they are.
    """
    B: GroupElement
    B_blinding: GroupElement

    @classmethod
    def default(cls) -> "PedersenGenerators":
        return cls(
            B=next(GeneratorsChain(B_LABEL)),
            B_blinding=next(GeneratorsChain(B_BLINDING_LABEL)),
        )

    def commit(self, value: Scalar, blinding: Scalar) -> GroupElement:
        return multiscalar_mul([value, blinding], [self.B, self.B_blinding])

class Generators:
    """
    All the generators needed to aggregate `m` range proofs of `n` bits each.

    G is drawn from a chain seeded with the compressed encoding of B,
    H from a chain seeded with B_blinding, so both vectors are tied to
    the Pedersen bases in use. Nothing changes after construction and
    a bank can be shared freely between threads.
    """

    def __init__(self, pedersen_generators: PedersenGenerators, n: int, m: int):
        if not _is_index(n) or n < 0:
            raise ValueError(f"Number of bits must be a non-negative integer, got {n!r}")
        if not _is_index(m) or m < 0:
            raise ValueError(f"Number of parties must be a non-negative integer, got {m!r}")
        self._n = n
        self._m = m
        self._pedersen_generators = pedersen_generators

        logger.debug(f"Deriving {n*m} generator pairs for {m} parties of {n} bits")
        self._G = GeneratorsChain(pedersen_generators.B.serialize(True)).take(n*m)
        self._H = GeneratorsChain(pedersen_generators.B_blinding.serialize(True)).take(n*m)

    @property
    def n(self) -> int:
        """Number of bits in a range proof"""
        return self._n

    @property
    def m(self) -> int:
        """Number of values or parties"""
        return self._m

    @property
    def pedersen_generators(self) -> PedersenGenerators:
        return self._pedersen_generators

    def all(self) -> "GeneratorsView":
        return GeneratorsView(self, 0, len(self._G))

    def share(self, j: int) -> "GeneratorsView":
        """Generators of the j-th range proof: G and H over [n*j, n*(j+1))."""
        if not _is_index(j) or not 0 <= j < self._m:
            logger.warning(f"Rejected share {j} of a {self._m}-party bank")
            raise InvalidShareIndex(j, self._m)
        return GeneratorsView(self, self._n*j, self._n*(j+1))

class GeneratorsView:
    """A read-only window onto the G and H vectors of a `Generators` bank."""

    def __init__(self, generators: Generators, start: int, stop: int):
        self._generators = generators
        self._G = generators._G[start:stop]
        self._H = generators._H[start:stop]

    @property
    def pedersen_generators(self) -> PedersenGenerators:
        return self._generators.pedersen_generators

    @property
    def G(self) -> Tuple[GroupElement, ...]:
        return self._G

    @property
    def H(self) -> Tuple[GroupElement, ...]:
        return self._H

    def __len__(self):
        return len(self._G)
