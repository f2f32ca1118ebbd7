"""
The hash primitive used to commit to values that span several stack elements.

For the elements x_0, x_1, ..., x_{n-1} (x_{n-1} on top of the stack), the digest is computed
starting from the top:

    acc = sha256(x_{n-1})
    acc = sha256(x_i || acc)    for i = n-2, ..., 0

Since acc always has exactly 32 bytes, the concatenation is unambiguous even if some of the
elements are empty (which is the case for every limb equal to 0).
"""

import hashlib

from verystable.core.script import OP_CAT, OP_SHA256, CScript

from . import HASH_LENGTH


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash_items(items: list[bytes]) -> bytes:
    """Computes off-chain the same digest produced by hash_var_length(len(items))."""
    assert len(items) >= 1

    acc = sha256(items[-1])
    for item in reversed(items[:-1]):
        acc = sha256(item + acc)
    return acc


def hash_witness(items: list[bytes]) -> list[bytes]:
    """The HASH_LENGTH stack elements of the digest of `items`."""
    result = [hash_items(items)]
    assert len(result) == HASH_LENGTH
    return result


# x_0, x_1, ..., x_{n-1} -- hash(x_0, ..., x_{n-1})
def hash_var_length(n: int) -> CScript:
    assert n >= 1

    return CScript([OP_SHA256] + [OP_CAT, OP_SHA256] * (n - 1))


def tagged_hash(tag: str, data: bytes) -> bytes:
    ss = sha256(tag.encode('utf-8'))
    ss += ss
    ss += data
    return sha256(ss)
