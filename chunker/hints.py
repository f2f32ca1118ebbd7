from abc import ABC, abstractmethod

from py_ecc.bn128 import FQ
from verystable.core.script import CScript

from .errors import ConstructionError
from .interpreter import execute_script
from .script_helpers import concat
from .utils import int_to_limbs


class Hint(ABC):
    """
    A value pushed on the stack by the witness, rather than computed by the script.

    Hints are used by the program fragments for values that are cheaper to verify than to
    compute, like the inverse of a field element.
    """
    @abstractmethod
    def push(self) -> CScript:
        raise NotImplementedError()


class IntHint(Hint):
    def __init__(self, value: int):
        self.value = value

    def push(self) -> CScript:
        return CScript([self.value])

    def __repr__(self):
        return f"IntHint({self.value})"


class FqHint(Hint):
    """A field element, pushed with the same limbs used by FqType."""
    def __init__(self, value: FQ | int):
        self.value = value.n if isinstance(value, FQ) else value

    def push(self) -> CScript:
        return CScript(int_to_limbs(self.value))

    def __repr__(self):
        return f"{self.__class__.__name__}({self.value})"


class FrHint(FqHint):
    pass


class BytesHint(Hint):
    def __init__(self, data: bytes):
        self.data = data

    def push(self) -> CScript:
        return CScript([self.data])

    def __repr__(self):
        return f"BytesHint({self.data.hex()})"


def hints_script(hints: list[Hint]) -> CScript:
    return concat(*[hint.push() for hint in hints])


def evaluate_hints(hints: list[Hint]) -> list[bytes]:
    """Runs the pushes of all the hints, and returns the resulting stack, bottom first."""
    res = execute_script(hints_script(hints))
    if not res.success:
        raise ConstructionError(f"Failed to evaluate the hints: {res.error}")
    return res.final_stack
