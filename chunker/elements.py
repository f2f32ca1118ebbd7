import copy
from abc import ABC, abstractmethod
from typing import Any, Optional, TYPE_CHECKING

from py_ecc.bn128 import FQ, FQ2, FQ12, curve_order, is_on_curve, b as curve_b, b2 as twist_b
from verystable.core.script import bn2vch

from . import N_LIMBS
from .hashing import hash_items, hash_witness
from .utils import int_to_limbs

if TYPE_CHECKING:
    from .assigner import BCAssigner


def fq_to_witness(x: int) -> list[bytes]:
    """The stack elements of a 254-bit field element: N_LIMBS limbs, the most significant one first."""
    return [bn2vch(limb) for limb in int_to_limbs(x)]


def _coeffs(x: Any) -> list[int]:
    return [c.n for c in x.coeffs]


class Element(ABC):
    """
    Abstract base class for the typed values that flow between segments.

    An element has a name, that identifies the committed quantity across all the segments of
    the protocol, and a fixed number of stack elements once serialized. The data is optional,
    as the graph of segments can be built before the values are known.

    Subclasses define:
        WITNESS_SIZE: the number of stack elements of the serialized value.

        check_data(self, data: Any) -> None:
            Raises ValueError if `data` is not a valid value for this type.

        serialize(self, data: Any) -> list[bytes]:
            Returns the WITNESS_SIZE stack elements encoding `data`, the last one being the
            top of the stack.
    """
    WITNESS_SIZE: int

    def __init__(self, assigner: "BCAssigner", name: str):
        assigner.register(name)
        self.name = name
        self.data: Optional[Any] = None

    def id(self) -> str:
        return self.name

    def witness_size(self) -> int:
        return self.WITNESS_SIZE

    def fill_with_data(self, data: Any) -> "Element":
        self.check_data(data)
        self.data = data
        return self

    def is_filled(self) -> bool:
        return self.data is not None

    def to_witness(self) -> Optional[list[bytes]]:
        if self.data is None:
            return None
        result = self.serialize(self.data)
        assert len(result) == self.WITNESS_SIZE
        return result

    def to_hash(self) -> Optional[bytes]:
        witness = self.to_witness()
        return None if witness is None else hash_items(witness)

    def to_hash_witness(self) -> Optional[list[bytes]]:
        witness = self.to_witness()
        return None if witness is None else hash_witness(witness)

    def clone(self) -> "Element":
        # the data objects are never mutated in place, a shallow copy is enough
        return copy.copy(self)

    @abstractmethod
    def check_data(self, data: Any) -> None:
        raise NotImplementedError()

    @abstractmethod
    def serialize(self, data: Any) -> list[bytes]:
        raise NotImplementedError()

    def __repr__(self):
        return f"{self.__class__.__name__}(name={self.name}, filled={self.is_filled()})"


class IntType(Element):
    """A single script number."""
    WITNESS_SIZE = 1

    def check_data(self, data: int) -> None:
        if not isinstance(data, int) or not -2**31 < data < 2**31:
            raise ValueError(f"Invalid script number: {data}")

    def serialize(self, data: int) -> list[bytes]:
        return [bn2vch(data)]


class FqType(Element):
    WITNESS_SIZE = N_LIMBS

    def check_data(self, data: FQ) -> None:
        if not isinstance(data, FQ):
            raise ValueError("Expected an element of the base field")

    def serialize(self, data: FQ) -> list[bytes]:
        return fq_to_witness(data.n)


class FrType(Element):
    """An element of the scalar field, represented as an integer in [0, curve_order)."""
    WITNESS_SIZE = N_LIMBS

    def check_data(self, data: int) -> None:
        if not isinstance(data, int) or not 0 <= data < curve_order:
            raise ValueError("Expected an element of the scalar field")

    def serialize(self, data: int) -> list[bytes]:
        return fq_to_witness(data)


class Fq2Type(Element):
    WITNESS_SIZE = 2 * N_LIMBS

    def check_data(self, data: FQ2) -> None:
        if not isinstance(data, FQ2):
            raise ValueError("Expected an element of Fq2")

    def serialize(self, data: FQ2) -> list[bytes]:
        return [item for c in _coeffs(data) for item in fq_to_witness(c)]


class Fq12Type(Element):
    WITNESS_SIZE = 12 * N_LIMBS

    def check_data(self, data: FQ12) -> None:
        if not isinstance(data, FQ12):
            raise ValueError("Expected an element of Fq12")

    def serialize(self, data: FQ12) -> list[bytes]:
        return [item for c in _coeffs(data) for item in fq_to_witness(c)]


class G1PointType(Element):
    """An affine point of G1, serialized as x, y."""
    WITNESS_SIZE = 2 * N_LIMBS

    def check_data(self, data) -> None:
        # the point at infinity (None) has no affine coordinates
        if data is None or len(data) != 2 or not all(isinstance(c, FQ) for c in data):
            raise ValueError("Expected an affine point of G1")
        if not is_on_curve(data, curve_b):
            raise ValueError("Point is not on the curve")

    def serialize(self, data) -> list[bytes]:
        x, y = data
        return fq_to_witness(x.n) + fq_to_witness(y.n)


class G2PointType(Element):
    """An affine point of G2, serialized as x.c0, x.c1, y.c0, y.c1."""
    WITNESS_SIZE = 4 * N_LIMBS

    def check_data(self, data) -> None:
        if data is None or len(data) != 2 or not all(isinstance(c, FQ2) for c in data):
            raise ValueError("Expected an affine point of G2")
        if not is_on_curve(data, twist_b):
            raise ValueError("Point is not on the twist")

    def serialize(self, data) -> list[bytes]:
        x, y = data
        return [item for c in _coeffs(x) + _coeffs(y) for item in fq_to_witness(c)]

