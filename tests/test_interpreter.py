from verystable.core.script import (
    OP_1ADD, OP_ADD, OP_CAT, OP_CHECKSIG, OP_DROP, OP_DUP, OP_ELSE, OP_ENDIF, OP_EQUAL, OP_EQUALVERIFY,
    OP_FROMALTSTACK, OP_IF, OP_NOTIF, OP_PICK, OP_ROLL, OP_SHA256, OP_SWAP, OP_TOALTSTACK, OP_WITHIN, CScript
)

from chunker.hashing import sha256
from chunker.interpreter import MAX_STACK_SIZE, cast_to_bool, execute_script, execute_script_with_inputs

from test_utils import stack_as_numbers


def test_arithmetic():
    res = execute_script(CScript([2, 3, OP_ADD, 100, OP_ADD]))
    assert res.success
    assert stack_as_numbers(res.final_stack) == [105]


def test_inputs_are_below_the_script():
    res = execute_script_with_inputs(CScript([OP_SWAP]), [b'\x01', b'\x02'])
    assert res.success
    assert res.final_stack == [b'\x02', b'\x01']


def test_pick_and_roll():
    inputs = [b'\x0a', b'\x0b', b'\x0c']

    res = execute_script_with_inputs(CScript([2, OP_PICK]), inputs)
    assert res.final_stack == [b'\x0a', b'\x0b', b'\x0c', b'\x0a']

    res = execute_script_with_inputs(CScript([2, OP_ROLL]), inputs)
    assert res.final_stack == [b'\x0b', b'\x0c', b'\x0a']

    res = execute_script_with_inputs(CScript([3, OP_PICK]), inputs)
    assert not res.success


def test_altstack():
    res = execute_script(CScript([1, 2, 3, OP_TOALTSTACK, OP_TOALTSTACK, OP_FROMALTSTACK, OP_FROMALTSTACK]))
    assert stack_as_numbers(res.final_stack) == [1, 2, 3]
    assert res.alt_stack == []

    res = execute_script(CScript([OP_FROMALTSTACK]))
    assert not res.success


def test_conditionals():
    script = CScript([OP_IF, 2, OP_ELSE, 3, OP_ENDIF])

    assert stack_as_numbers(execute_script_with_inputs(script, [b'\x01']).final_stack) == [2]
    assert stack_as_numbers(execute_script_with_inputs(script, [b'']).final_stack) == [3]

    # nested branches that are not executed are skipped entirely
    script = CScript([OP_NOTIF, OP_IF, 5, OP_ENDIF, 6, OP_ELSE, 7, OP_ENDIF])
    assert stack_as_numbers(execute_script_with_inputs(script, [b'\x01']).final_stack) == [7]

    res = execute_script(CScript([1, OP_IF, 2]))
    assert not res.success
    assert res.error == "unbalanced conditional"


def test_equal_and_equalverify():
    res = execute_script(CScript([b'abc', b'abc', OP_EQUAL]))
    assert res.final_stack == [b'\x01']

    res = execute_script(CScript([b'abc', b'abd', OP_EQUAL]))
    assert res.final_stack == [b'']

    res = execute_script(CScript([b'abc', b'abd', OP_EQUALVERIFY]))
    assert not res.success
    assert res.error == "OP_EQUALVERIFY failed"


def test_cat_and_sha256():
    res = execute_script(CScript([b'hello', b'world', OP_CAT, OP_SHA256]))
    assert res.final_stack == [sha256(b'helloworld')]


def test_within():
    assert stack_as_numbers(execute_script(CScript([5, 0, 10, OP_WITHIN])).final_stack) == [1]
    assert stack_as_numbers(execute_script(CScript([10, 0, 10, OP_WITHIN])).final_stack) == [0]


def test_non_minimal_operand():
    res = execute_script_with_inputs(CScript([OP_1ADD]), [b'\x05\x00'])
    assert not res.success
    assert "non-minimally encoded" in res.error

    # 0x0080 is the minimal encoding of 128
    res = execute_script_with_inputs(CScript([OP_1ADD]), [b'\x80\x00'])
    assert stack_as_numbers(res.final_stack) == [129]


def test_numeric_operand_too_large():
    res = execute_script_with_inputs(CScript([OP_1ADD]), [b'\x01\x02\x03\x04\x05'])
    assert not res.success


def test_unsupported_opcode():
    res = execute_script(CScript([b'\x01' * 32, b'\x02' * 64, OP_CHECKSIG]))
    assert not res.success
    assert "unsupported opcode" in res.error


def test_limits():
    res = execute_script_with_inputs(CScript([OP_DUP]), [b''] * MAX_STACK_SIZE)
    assert not res.success
    assert res.error == "stack size limit exceeded"

    res = execute_script(CScript([b'\x00' * 300, OP_DUP, OP_CAT]))
    assert not res.success

    res = execute_script_with_inputs(CScript([OP_DROP]), [b'\x00' * 521])
    assert not res.success


def test_cast_to_bool():
    assert not cast_to_bool(b'')
    assert not cast_to_bool(b'\x00\x00')
    assert not cast_to_bool(b'\x00\x80')  # negative zero
    assert cast_to_bool(b'\x80\x00')
    assert cast_to_bool(b'\x01')


def test_initial_stack_over_the_limit():
    # even if no opcode is executed
    res = execute_script_with_inputs(CScript([]), [b'\x01'] * (MAX_STACK_SIZE + 1))
    assert not res.success
    assert res.error == "stack size limit exceeded"

    res = execute_script_with_inputs(CScript([]), [b'\x01'] * MAX_STACK_SIZE)
    assert res.success


def test_minimal_if():
    script = CScript([OP_IF, 1, OP_ENDIF])

    for arg in [b'\x02', b'\x00', b'\x01\x00']:
        res = execute_script_with_inputs(script, [arg])
        assert not res.success
        assert "must be minimal" in res.error

    res = execute_script_with_inputs(CScript([OP_NOTIF, 1, OP_ENDIF]), [b'\x02'])
    assert not res.success
