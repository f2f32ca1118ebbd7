import os
from dataclasses import dataclass, field
from typing import Iterable

from . import DEFAULT_PROOF_NAMES


def _parse_bool(value: str) -> bool:
    value = value.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean value: {value}")


@dataclass(frozen=True)
class ProtocolConfig:
    """
    Settings shared by every segment of one protocol instance.

    Attributes:
        proof_names: names of the parameters that are revealed verbatim (the "direct-reveal" set)
            instead of being compared through their hash.
        gate_final_segments: if True, the aggregate result comparison is also compiled into
            segments marked as final. By default final segments omit it.
    """
    proof_names: frozenset[str] = field(default_factory=lambda: frozenset(DEFAULT_PROOF_NAMES))
    gate_final_segments: bool = False

    def __post_init__(self):
        # accept any iterable of names, but always store a frozenset
        object.__setattr__(self, "proof_names", frozenset(self.proof_names))

    def is_direct_reveal(self, name: str) -> bool:
        return name in self.proof_names

    def with_proof_names(self, names: Iterable[str]) -> "ProtocolConfig":
        return ProtocolConfig(frozenset(names), self.gate_final_segments)

    @classmethod
    def from_env(cls) -> "ProtocolConfig":
        # a .env file, if any, is loaded by the CLI
        proof_names = os.getenv("CHUNKER_PROOF_NAMES")
        gate_final = os.getenv("CHUNKER_GATE_FINAL_SEGMENTS", "0")

        if proof_names is None:
            names = frozenset(DEFAULT_PROOF_NAMES)
        else:
            names = frozenset(name.strip() for name in proof_names.split(",") if name.strip() != "")

        return cls(names, _parse_bool(gate_final))
