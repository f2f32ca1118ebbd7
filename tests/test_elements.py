import pytest

from py_ecc.bn128 import FQ, FQ2, FQ12, G1, G2, curve_order, field_modulus, multiply

from chunker import ChainingError, N_LIMBS
from chunker.elements import Fq12Type, Fq2Type, FqType, FrType, G1PointType, G2PointType, IntType, fq_to_witness
from chunker.hashing import hash_items
from chunker.utils import int_to_limbs, is_minimally_encoded, limbs_to_int, vch2bn


def test_limbs():
    x = field_modulus - 1
    limbs = int_to_limbs(x)
    assert len(limbs) == N_LIMBS
    assert all(0 <= limb < 2**29 for limb in limbs)
    assert limbs_to_int(limbs) == x

    # most significant limb first
    assert int_to_limbs(1) == [0] * (N_LIMBS - 1) + [1]

    with pytest.raises(ValueError):
        int_to_limbs(2**261)


def test_fq_witness_is_made_of_script_numbers():
    witness = fq_to_witness(field_modulus - 2)
    assert len(witness) == N_LIMBS
    assert all(is_minimally_encoded(item) for item in witness)
    assert limbs_to_int([vch2bn(item) for item in witness]) == field_modulus - 2


def test_witness_sizes(assigner):
    p = multiply(G1, 5)
    q = multiply(G2, 5)

    assert len(IntType(assigner, "i").fill_with_data(-12).to_witness()) == 1
    assert len(FqType(assigner, "fq").fill_with_data(FQ(3)).to_witness()) == 9
    assert len(FrType(assigner, "fr").fill_with_data(curve_order - 1).to_witness()) == 9
    assert len(Fq2Type(assigner, "fq2").fill_with_data(FQ2([1, 2])).to_witness()) == 18
    assert len(Fq12Type(assigner, "fq12").fill_with_data(FQ12([1] + [0] * 11)).to_witness()) == 108
    assert len(G1PointType(assigner, "g1").fill_with_data(p).to_witness()) == 18
    assert len(G2PointType(assigner, "g2").fill_with_data(q).to_witness()) == 36


def test_g1_serialization(assigner):
    p = multiply(G1, 11)
    a = G1PointType(assigner, "a").fill_with_data(p)
    assert a.to_witness() == fq_to_witness(p[0].n) + fq_to_witness(p[1].n)


def test_unfilled_element(assigner):
    x = FqType(assigner, "x")
    assert not x.is_filled()
    assert x.to_witness() is None
    assert x.to_hash() is None
    assert x.to_hash_witness() is None


def test_hash(assigner):
    x = FqType(assigner, "x").fill_with_data(FQ(1234567))
    assert x.to_hash() == hash_items(x.to_witness())
    assert x.to_hash_witness() == [x.to_hash()]


def test_invalid_data(assigner):
    with pytest.raises(ValueError):
        G1PointType(assigner, "not_on_curve").fill_with_data((FQ(1), FQ(3)))

    with pytest.raises(ValueError):
        G1PointType(assigner, "infinity").fill_with_data(None)

    with pytest.raises(ValueError):
        G2PointType(assigner, "g1_as_g2").fill_with_data(G1)

    with pytest.raises(ValueError):
        FrType(assigner, "too_large").fill_with_data(curve_order)

    with pytest.raises(ValueError):
        IntType(assigner, "too_large_int").fill_with_data(2**31)


def test_names_are_unique(assigner):
    FqType(assigner, "a0")
    with pytest.raises(ChainingError):
        G1PointType(assigner, "a0")


def test_clone_is_independent(assigner):
    x = IntType(assigner, "x").fill_with_data(1)
    y = x.clone()
    x.fill_with_data(2)

    assert y.id() == x.id()
    assert y.to_witness() == [b'\x01']
    assert x.to_witness() == [b'\x02']
