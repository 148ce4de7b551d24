from secp256k1 import PrivateKey, PublicKey
from typing import Sequence

# Constant scalar 0
SCALAR_ZERO = b"\x00"*32
# Constant point to infinity
ELEMENT_ZERO = b"\x02" + b"\x00" * 32

# Order of the curve
q = int('FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141', 16)

class Scalar(PrivateKey):
    """
    An element of the scalar field of secp256k1.

    Built from 32 big-endian bytes, or sampled at random when no
    bytes are given. Zero is tracked separately because libsecp256k1
    refuses it as a secret key.
    """

    def __init__(self, data: bytes | None = None):
        if data is not None and len(data) != 32:
            raise ValueError(f"Scalar must be 32 bytes, got {len(data)}")
        if data == SCALAR_ZERO:
            self.is_zero = True
        else:
            self.is_zero = False
            if data is not None and int.from_bytes(data, "big") >= q:
                raise ValueError("Scalar is not reduced modulo the group order")
            super().__init__(data, raw=True)

    @classmethod
    def from_int(cls, n: int) -> "Scalar":
        return cls((n % q).to_bytes(32, "big"))

    def __int__(self):
        return int.from_bytes(self.to_bytes(), "big")

    def __add__(self, scalar2):
        if isinstance(scalar2, Scalar):
            if scalar2.is_zero:
                return Scalar(self.to_bytes())
            elif self.is_zero:
                return Scalar(scalar2.to_bytes())
            elif int(self) + int(scalar2) == q:
                # tweak_add fails on a zero result
                return Scalar(SCALAR_ZERO)
            else:
                return Scalar(self.tweak_add(scalar2.to_bytes()))
        else:
            raise TypeError(f"Cannot add {scalar2.__class__} and Scalar")

    def __neg__(self):
        if self.is_zero:
            return Scalar(SCALAR_ZERO)
        return Scalar((q - int(self)).to_bytes(32, "big"))

    def __sub__(self, scalar2):
        if isinstance(scalar2, Scalar):
            return self + (-scalar2)
        else:
            raise TypeError(f"Cannot subtract {scalar2.__class__} and Scalar")

    def __mul__(self, obj):
        if isinstance(obj, Scalar):
            if self.is_zero or obj.is_zero:
                return Scalar(SCALAR_ZERO)
            else:
                return Scalar(self.tweak_mul(obj.to_bytes()))
        elif isinstance(obj, GroupElement):
            return obj.__mul__(self)
        else:
            raise TypeError(f"Cannot multiply {obj.__class__} and Scalar")

    def __eq__(self, scalar2):
        if isinstance(scalar2, Scalar):
            return self.to_bytes() == scalar2.to_bytes()
        else:
            raise TypeError(f"Cannot compare {scalar2.__class__} and Scalar")

    def __hash__(self):
        return hash(self.to_bytes())

    def __repr__(self):
        return f"Scalar({self.to_bytes().hex()})"

    def to_bytes(self) -> bytes:
        return self.private_key if not self.is_zero else SCALAR_ZERO

# We extend the public key to define the group operations on points.
# Instances are never mutated once built: every operation returns a new point
# and the in-place PublicKey methods are disabled.
class GroupElement(PublicKey):

    def __init__(self, data: bytes | None = None):
        self._sealed = False
        if data == ELEMENT_ZERO:
            self.is_zero = True
        else:
            self.is_zero = False
            try:
                super().__init__(data, raw=True)
            except Exception as e:
                # libsecp256k1 signals bad encodings with a bare Exception
                raise ValueError(f"Invalid point encoding: {e}") from e
        self._sealed = True

    def __add__(self, pubkey2):
        if isinstance(pubkey2, GroupElement):
            if pubkey2.is_zero:
                return GroupElement(self.serialize(True))
            elif self.is_zero:
                return GroupElement(pubkey2.serialize(True))
            p1, p2 = self.serialize(True), pubkey2.serialize(True)
            if p1[1:] == p2[1:] and p1[0] != p2[0]:
                # P + (-P): combine() cannot represent infinity
                return GroupElement(ELEMENT_ZERO)
            new_pub = PublicKey()
            new_pub.combine([self.public_key, pubkey2.public_key])
            return GroupElement(new_pub.serialize(True))
        else:
            raise TypeError(f"Cannot add {pubkey2.__class__} and GroupElement")

    def combine(self, pubkeys):
        raise TypeError("GroupElement is immutable, use + to add points")

    def deserialize(self, pubkey_ser):
        if self._sealed:
            raise TypeError("GroupElement is immutable, build a new one instead")
        return super().deserialize(pubkey_ser)

    def __neg__(self):
        if self.is_zero:
            return GroupElement(ELEMENT_ZERO)
        serialized = self.serialize()
        first_byte, remainder = serialized[:1], serialized[1:]
        # flip odd/even byte
        first_byte = {b"\x03": b"\x02", b"\x02": b"\x03"}[first_byte]
        return GroupElement(first_byte + remainder)

    def __sub__(self, pubkey2):
        if isinstance(pubkey2, GroupElement):
            return self + (-pubkey2)
        else:
            raise TypeError(f"Cannot subtract {pubkey2.__class__} and GroupElement")

    def __mul__(self, scalar):
        if isinstance(scalar, Scalar):
            if scalar.is_zero or self.is_zero:
                return GroupElement(ELEMENT_ZERO)
            result = self.tweak_mul(scalar.to_bytes())
            return GroupElement(result.serialize(True))
        else:
            raise TypeError(f"Cannot multiply GroupElement with {scalar.__class__}")

    def __eq__(self, el2):
        if isinstance(el2, GroupElement):
            return self.serialize(True) == el2.serialize(True)
        else:
            raise TypeError(f"Cannot compare {el2.__class__} and GroupElement")

    def __hash__(self):
        return hash(self.serialize(True))

    def __repr__(self):
        return f"GroupElement({self.serialize(True).hex()})"

    def serialize(self, compressed: bool = True) -> bytes:
        if self.is_zero:
            return ELEMENT_ZERO
        else:
            return super().serialize(compressed=compressed)

scalar_zero = Scalar(SCALAR_ZERO)
scalar_one = Scalar.from_int(1)
O = GroupElement(ELEMENT_ZERO)

def multiscalar_mul(
    scalars: Sequence[Scalar],
    points: Sequence[GroupElement],
) -> GroupElement:
    """Compute sum(s_i * P_i). The empty sum is the point at infinity."""
    if len(scalars) != len(points):
        raise ValueError(
            f"Got {len(scalars)} scalars but {len(points)} points"
        )
    return sum([s * P for s, P in zip(scalars, points)], O)
