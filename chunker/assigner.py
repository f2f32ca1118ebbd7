import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional

from verystable.core.script import OP_EQUALVERIFY, CScript

from . import HASH_LENGTH
from .config import ProtocolConfig
from .elements import Element
from .errors import ChainingError, ConstructionError
from .hashing import tagged_hash

logger = logging.getLogger(__name__)


class BCAssigner(ABC):
    """
    Abstract base class for the bit-commitment schemes binding the operator to every value.

    The commitment to a value is identified by the value's name: every element with a given
    name, in any segment, refers to the same committed quantity.

    Methods:
        locking_script(self, element: Element) -> CScript:
            A script that consumes the opening witness of the commitment from the top of the
            stack, verifies it, and leaves committed_size(element) stack elements with the
            committed value: the raw value for direct-reveal names, its hash otherwise.
            Must return the same script for the same name every time it is called.

        get_witness(self, element: Element) -> list[bytes]:
            The opening witness expected by locking_script(element). Must return the same
            witness for the same name every time it is called.
    """

    def __init__(self, config: Optional[ProtocolConfig] = None):
        self.config = config if config is not None else ProtocolConfig()
        self.names: set[str] = set()
        self._names_lock = threading.Lock()

    def register(self, name: str) -> None:
        with self._names_lock:
            if name in self.names:
                raise ChainingError(f"Name already in use: {name}")
            self.names.add(name)

    def is_direct_reveal(self, name: str) -> bool:
        return self.config.is_direct_reveal(name)

    def committed_size(self, element: Element) -> int:
        if self.is_direct_reveal(element.id()):
            return element.witness_size()
        return HASH_LENGTH

    @abstractmethod
    def locking_script(self, element: Element) -> CScript:
        raise NotImplementedError()

    @abstractmethod
    def get_witness(self, element: Element) -> list[bytes]:
        raise NotImplementedError()


class DummyAssigner(BCAssigner):
    """
    An assigner without any signature: the opening witness is the committed value itself, and
    the locking script is empty. Useful to test the segments without the cost of a real
    bit-commitment scheme.

    The witnesses are cached by name. Asking again for a name with a value that differs from the
    first one is a violation of the chaining invariant and raises ChainingError.
    """

    def __init__(self, config: Optional[ProtocolConfig] = None):
        super().__init__(config)
        self.witnesses: dict[str, list[bytes]] = {}
        self._lock = threading.Lock()

    def locking_script(self, element: Element) -> CScript:
        return CScript([])

    def get_witness(self, element: Element) -> list[bytes]:
        name = element.id()

        if self.is_direct_reveal(name):
            witness = element.to_witness()
        else:
            witness = element.to_hash_witness()
        if witness is None:
            raise ConstructionError(f"Cannot commit to {name}: value not filled")

        with self._lock:
            cached = self.witnesses.setdefault(name, witness)

        if cached != witness:
            raise ChainingError(f"Conflicting values committed for {name}")
        return list(cached)


class TaggedAssigner(DummyAssigner):
    """
    Like DummyAssigner, but each opening witness also carries a tag derived from the name of the
    value, and the locking script checks it. The openings of two different values can therefore
    not be swapped, as it happens with the signatures of a real bit-commitment scheme.

    Opening witness: [<committed value>, <tag>]
    """

    @staticmethod
    def name_tag(name: str) -> bytes:
        return tagged_hash("Commitment", name.encode('utf-8'))

    def locking_script(self, element: Element) -> CScript:
        return CScript([self.name_tag(element.id()), OP_EQUALVERIFY])

    def get_witness(self, element: Element) -> list[bytes]:
        return super().get_witness(element) + [self.name_tag(element.id())]
