"""
A toy computation split in segments: starting from x_0, each step computes

    x_{i+1} = x_i + step

and a final segment asserts that x_n is the expected value.

The operator commits to all the x_i. If it lies on any of them, the segment computing it
leaves 1 on the stack, and the challenger can slash the operator.
"""

from typing import Optional

from verystable.core.script import OP_ADD, OP_NOT, OP_NUMEQUAL, CScript

from chunker import BCAssigner, Segment
from chunker.elements import IntType
from chunker.hints import IntHint


# x -- x + step
def add_step(step: int) -> CScript:
    return CScript([step, OP_ADD])


def counter_values(assigner: BCAssigner, start: int, n_steps: int, step: int = 1, cheat_at: Optional[int] = None) -> list[IntType]:
    """
    Creates the elements x_0, ..., x_{n_steps}. If cheat_at is given, the operator commits to a
    wrong value for x_{cheat_at}, and the following values are computed from the wrong one.
    """
    assert cheat_at is None or 1 <= cheat_at <= n_steps

    values = []
    x = start
    for i in range(n_steps + 1):
        if i == cheat_at:
            x += 1  # off by one
        values.append(IntType(assigner, f"x_{i}").fill_with_data(x))
        x += step
    return values


def counter_chain(values: list[IntType], step: int = 1) -> list[Segment]:
    return [
        Segment.new_with_name(f"add_{i}", add_step(step))
        .add_parameter(values[i])
        .add_result(values[i + 1])
        .build()
        for i in range(len(values) - 1)
    ]


def hinted_counter_chain(values: list[IntType], step: int = 1) -> list[Segment]:
    """Same as counter_chain, but the step is provided by the witness as a hint."""
    # stack: <step> <x_i>
    return [
        Segment.new_with_name(f"add_hinted_{i}", CScript([OP_ADD]))
        .add_parameter(values[i])
        .add_result(values[i + 1])
        .add_hints([IntHint(step)])
        .build()
        for i in range(len(values) - 1)
    ]


def final_check(value: IntType, expected: int) -> Segment:
    """
    The last assertion of the computation: it has no results, and the program itself leaves 1
    if the committed value is not the expected one.
    """
    return (
        Segment.new_with_name("final_check", CScript([expected, OP_NUMEQUAL, OP_NOT]))
        .add_parameter(value)
        .mark_terminal()
        .build()
    )
