"""
Segments are the leaves of the disprove taptree.

Each segment wraps a fragment of the verifier and checks it against the values the operator
committed to. The script of a segment, executed with the witness built by the same segment,
leaves a single element on the stack:

    - 0 (the empty vector) if the committed results match the recomputed ones;
    - 1 if they don't: the operator lied, and the challenger can use the branch to slash.

Witness layout, bottom to top:

    [hints, param_0, ..., param_{k-1}, bc(param_{k-1}), ..., bc(param_0), bc(result_0), ..., bc(result_{m-1})]

where bc(x) is the opening witness of the bit-commitment of x.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from verystable.core.script import CScript

from . import HASH_LENGTH
from .assigner import BCAssigner
from .elements import Element
from .errors import ConstructionError
from .hashing import hash_var_length
from .hints import Hint, evaluate_hints
from .interpreter import ExecuteInfo, cast_to_bool, execute_script_with_inputs
from .script_helpers import concat, equalverify, from_altstack, not_equal, pick_range, to_altstack

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    name: str
    inner_program: CScript
    parameters: tuple[Element, ...] = ()
    results: tuple[Element, ...] = ()
    hints: tuple[Hint, ...] = ()
    is_terminal: bool = False

    @staticmethod
    def new(script: CScript, name: str = "") -> "SegmentBuilder":
        return SegmentBuilder(name, script)

    @staticmethod
    def new_with_name(name: str, script: CScript) -> "SegmentBuilder":
        return SegmentBuilder(name, script)

    def is_final(self) -> bool:
        return self.is_terminal

    def gated(self, assigner: BCAssigner) -> bool:
        """Whether the comparison of the results is part of the script."""
        return not self.is_terminal or assigner.config.gate_final_segments

    def script(self, assigner: BCAssigner) -> CScript:
        parts: list[CScript] = []

        # 1. unlock the bit-commitments of the results; the committed hashes wait in the altstack
        for result in reversed(self.results):
            parts.append(assigner.locking_script(result))
            parts.append(to_altstack(HASH_LENGTH))

        # 2. unlock the bit-commitments of the parameters
        for parameter in self.parameters:
            parts.append(assigner.locking_script(parameter))
            # the values of the proof are revealed entirely, the others by their hash
            parts.append(to_altstack(assigner.committed_size(parameter)))

        # stack: <hints> <param_0> ... <param_{k-1}>
        # alt  : <h_result_{m-1}> ... <h_result_0> <c_param_0> ... <c_param_{k-1}>

        # 3. check that the parameters on the stack are the committed ones
        base = 0
        for parameter in reversed(self.parameters):
            size = parameter.witness_size()
            parts.append(pick_range(base + size - 1, size))

            if assigner.is_direct_reveal(parameter.id()):
                parts.append(from_altstack(size))
                parts.append(equalverify(size))
            else:
                parts.append(hash_var_length(size))
                parts.append(from_altstack(HASH_LENGTH))
                parts.append(equalverify(HASH_LENGTH))

            base += size

        # 4. run the program, and hash the results
        parts.append(self.inner_program)

        # stack: <result_0> ... <result_{m-1}>
        for result in reversed(self.results):
            parts.append(hash_var_length(result.witness_size()))
            parts.append(to_altstack(HASH_LENGTH))

        # alt  : <h_result_{m-1}> ... <h_result_0> <r_result_{m-1}> ... <r_result_0>
        parts.append(from_altstack(2 * HASH_LENGTH * len(self.results)))

        # stack: <r_result_0> ... <r_result_{m-1}> <h_result_0> ... <h_result_{m-1}>

        # 5. compare the recomputed results with the committed ones
        if self.gated(assigner):
            parts.append(not_equal(HASH_LENGTH * len(self.results)))

        script = concat(*parts)
        logger.debug("compiled segment %s: %d bytes", self.name, len(script))
        return script

    def witness(self, assigner: BCAssigner) -> list[bytes]:
        witness = evaluate_hints(list(self.hints))

        for parameter in self.parameters:
            w = parameter.to_witness()
            if w is None:
                raise ConstructionError(f"extract witness {parameter.id()} fail in {self.name}")
            witness.extend(w)

        for parameter in reversed(self.parameters):
            witness.extend(assigner.get_witness(parameter))

        for result in self.results:
            witness.extend(assigner.get_witness(result))

        logger.debug("witness of segment %s: %d elements", self.name, len(witness))
        return witness

    def __repr__(self):
        params = ", ".join(p.id() for p in self.parameters)
        results = ", ".join(r.id() for r in self.results)
        return f"{self.__class__.__name__}(name={self.name}, parameters=[{params}], results=[{results}], final={self.is_terminal})"


@dataclass(frozen=True)
class SegmentBuilder:
    """
    Builds a Segment. Every method returns a new builder, so a partially built segment can be
    safely shared.
    """
    name: str
    inner_program: CScript
    parameters: tuple[Element, ...] = ()
    results: tuple[Element, ...] = ()
    hints: tuple[Hint, ...] = ()
    is_terminal: bool = False

    # The elements are copied: later changes to the original element are not observed
    def add_parameter(self, x: Element) -> "SegmentBuilder":
        return replace(self, parameters=self.parameters + (x.clone(),))

    def add_result(self, x: Element) -> "SegmentBuilder":
        return replace(self, results=self.results + (x.clone(),))

    def add_hints(self, hints: list[Hint]) -> "SegmentBuilder":
        return replace(self, hints=tuple(hints))

    def mark_terminal(self) -> "SegmentBuilder":
        return replace(self, is_terminal=True)

    def build(self) -> Segment:
        return Segment(self.name, self.inner_program, self.parameters, self.results, self.hints, self.is_terminal)


class SegmentOutcome(Enum):
    NO_FAULT = 0  # the committed values are consistent
    FAULT = 1  # the operator committed to a wrong result
    ABORTED = 2  # the witness does not open the commitments
    UNDECIDED = 3  # more or less than one element left, e.g. final segments without comparison


def classify(res: ExecuteInfo) -> SegmentOutcome:
    if not res.success:
        return SegmentOutcome.ABORTED
    if len(res.final_stack) != 1:
        return SegmentOutcome.UNDECIDED
    return SegmentOutcome.FAULT if cast_to_bool(res.final_stack[0]) else SegmentOutcome.NO_FAULT


def execute_segment(segment: Segment, assigner: BCAssigner, witness: Optional[list[bytes]] = None) -> tuple[SegmentOutcome, ExecuteInfo]:
    """Executes the script of `segment` with `witness` (by default, the segment's own witness)."""
    if witness is None:
        witness = segment.witness(assigner)

    res = execute_script_with_inputs(segment.script(assigner), witness)
    outcome = classify(res)
    logger.debug("segment %s executed: %s", segment.name, outcome.name)
    return outcome, res
