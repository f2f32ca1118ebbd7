"""
Segments moving curve points around, as done at the beginning of the pairing verifier:
the points of the proof are revealed directly, and copied into the values used by the
Miller loop.
"""

from py_ecc.bn128 import G1, G2, multiply
from verystable.core.script import CScript

from chunker import BCAssigner, Segment
from chunker.elements import FrType, G1PointType, G2PointType
from chunker.script_helpers import drop


def copy_g2(assigner: BCAssigner, q, src: str = "q4", dst: str = "t4_init") -> tuple[Segment, G2PointType, G2PointType]:
    """t4_init := q4; the program is empty, as the parameter is exactly the result."""
    q4 = G2PointType(assigner, src).fill_with_data(q)
    t4 = G2PointType(assigner, dst).fill_with_data(q)

    segment = Segment.new_with_name(f"copy_{src}_to_{dst}", CScript([])).add_parameter(q4).add_result(t4).build()
    return segment, q4, t4


def take_proof_point(assigner: BCAssigner, p, scalar: int, point_name: str = "proof_a", scalar_name: str = "scalar_1") -> tuple[Segment, G1PointType, FrType, G1PointType]:
    """
    Consumes a point and a public scalar of the proof, both revealed directly, and outputs a
    hashed copy of the point. The scalar is dropped.
    """
    a = G1PointType(assigner, point_name).fill_with_data(p)
    s = FrType(assigner, scalar_name).fill_with_data(scalar)
    a_copy = G1PointType(assigner, f"{point_name}_copy").fill_with_data(p)

    segment = (
        Segment.new_with_name(f"take_{point_name}", drop(s.witness_size()))
        .add_parameter(a)
        .add_parameter(s)
        .add_result(a_copy)
        .build()
    )
    return segment, a, s, a_copy


def sample_points(k: int = 7):
    return multiply(G1, k), multiply(G2, k)
