# Number of stack items produced by the hash primitive for a single value
HASH_LENGTH: int = 1

# Base field and scalar field elements are split in 9 limbs of 29 bits each
LIMB_BITS: int = 29
N_LIMBS: int = 9

# Parameters revealed verbatim instead of being compared through their hash.
# These are the inputs of the verifier (proof elements and public scalars).
DEFAULT_PROOF_NAMES: tuple[str, ...] = (
    "proof_a",
    "proof_b",
    "proof_c",
    "scalar_1",
    "scalar_2",
    "scalar_3",
    "scalar_4",
)

from .errors import ChainingError, ChunkerError, ConstructionError
from .config import ProtocolConfig
from .assigner import BCAssigner, DummyAssigner, TaggedAssigner
from .segment import Segment, SegmentBuilder, SegmentOutcome, execute_segment

__all__ = [
    "HASH_LENGTH",
    "LIMB_BITS",
    "N_LIMBS",
    "DEFAULT_PROOF_NAMES",
    "ChainingError",
    "ChunkerError",
    "ConstructionError",
    "ProtocolConfig",
    "BCAssigner",
    "DummyAssigner",
    "TaggedAssigner",
    "Segment",
    "SegmentBuilder",
    "SegmentOutcome",
    "execute_segment",
]
