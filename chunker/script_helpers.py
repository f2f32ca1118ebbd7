from verystable.core.script import (
    OP_1, OP_2DROP, OP_2DUP, OP_2OVER, OP_3DUP, OP_BOOLAND, OP_DROP, OP_DUP, OP_EQUAL, OP_EQUALVERIFY,
    OP_FROMALTSTACK, OP_NOT, OP_PICK, OP_ROLL, OP_TOALTSTACK, CScript
)


# Concatenates scripts byte by byte, so that opaque sub-scripts are embedded verbatim
def concat(*scripts: CScript) -> CScript:
    return CScript(b''.join(bytes(s) for s in scripts))


_SHORT_DUPS = {
    1: [OP_DUP],
    2: [OP_2DUP],
    3: [OP_3DUP],
    4: [OP_2OVER, OP_2OVER],
}


# Duplicates the last n elements of the stack
def dup(n: int = 1) -> CScript:
    assert n >= 1

    if n in _SHORT_DUPS:
        return CScript(_SHORT_DUPS[n])
    return CScript([n - 1, OP_PICK] * n)


# Drops n elements from the stack
def drop(n: int = 1) -> CScript:
    assert n >= 0

    return CScript([OP_2DROP]*(n // 2) + [OP_DROP] * (n % 2))


# x_0, ..., x_{n-1} --    -- x_{n-1}, ..., x_0
def to_altstack(n: int) -> CScript:
    assert n >= 0

    return CScript([OP_TOALTSTACK] * n)


#    -- x_{n-1}, ..., x_0  ==>  x_0, ..., x_{n-1} --
def from_altstack(n: int) -> CScript:
    assert n >= 0

    return CScript([OP_FROMALTSTACK] * n)


# Copies on top of the stack the n elements whose deepest one is at the given depth,
# preserving their order. The elements on top of the stack are copied with dup(n).
def pick_range(depth: int, n: int) -> CScript:
    assert n >= 1 and depth >= n - 1

    if depth == n - 1:
        return dup(n)
    return CScript([depth, OP_PICK] * n)


# a_0, ..., a_{n-1}, b_0, ..., b_{n-1} --
# fails unless a_i == b_i for every i
def equalverify(n: int) -> CScript:
    assert n >= 1

    ret = []
    for i in reversed(range(1, n + 1)):
        # a_{i-1} is right below b_0, ..., b_{i-1}
        ret.extend([i, OP_ROLL, OP_EQUALVERIFY])
    return CScript(ret)


# a_0, ..., a_{n-1}, b_0, ..., b_{n-1} -- <a != b>
# Never fails: leaves 1 if a_i != b_i for at least one i, and 0 (the empty vector) otherwise.
def not_equal(n: int) -> CScript:
    assert n >= 0

    ret = []
    for i in reversed(range(1, n + 1)):
        ret.extend([i, OP_ROLL, OP_EQUAL, OP_TOALTSTACK])

    # stack: <>  --  <a_{n-1} == b_{n-1}> ... <a_0 == b_0>
    ret.append(OP_1)
    ret.extend([OP_FROMALTSTACK, OP_BOOLAND] * n)
    ret.append(OP_NOT)
    return CScript(ret)
