from verystable.core.script import CScript

from . import LIMB_BITS, N_LIMBS


def vch2bn(s: bytes) -> int:
    """Convert bitcoin-specific little endian format to number."""
    if len(s) == 0:
        return 0
    # The most significant bit of the last byte is the sign bit.
    is_negative = s[-1] & 0x80 != 0
    # Mask off the sign bit.
    s_abs = s[:-1] + bytes([s[-1] & 0x7f])
    v_abs = int.from_bytes(s_abs, 'little')
    # Return as negative number if it's negative.
    return -v_abs if is_negative else v_abs


def is_minimally_encoded(s: bytes) -> bool:
    """Returns True if `s` is the shortest possible encoding of the number it represents."""
    if len(s) == 0:
        return True
    # the last byte can only be 0x00 or 0x80 if it is needed to hold the sign bit
    if s[-1] & 0x7f == 0:
        return len(s) > 1 and s[-2] & 0x80 != 0
    return True


def int_to_limbs(x: int, n_limbs: int = N_LIMBS, limb_bits: int = LIMB_BITS) -> list[int]:
    """Splits a non-negative integer in `n_limbs` limbs, most significant first."""
    assert x >= 0
    if x.bit_length() > n_limbs * limb_bits:
        raise ValueError(f"{x} does not fit in {n_limbs} limbs of {limb_bits} bits")

    mask = (1 << limb_bits) - 1
    return [(x >> (limb_bits * i)) & mask for i in reversed(range(n_limbs))]


def limbs_to_int(limbs: list[int], limb_bits: int = LIMB_BITS) -> int:
    result = 0
    for limb in limbs:
        assert 0 <= limb < (1 << limb_bits)
        result = (result << limb_bits) | limb
    return result


def format_witness(witness: list[bytes], title: str | None = None) -> str:
    n_bytes = sum(len(item) or 1 for item in witness)
    s = f"{title or 'Witness'}: ({len(witness)} elements, {n_bytes} bytes)\n"
    for i, item in enumerate(witness):
        s += f"  - [{i}] ({len(item)} bytes) {repr(CScript([item]))}\n"
    return s
