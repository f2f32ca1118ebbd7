"""
A reference interpreter for the subset of tapscript used by the segments.

Only the operations that are needed to execute the scripts produced by this package (and the
program fragments they wrap) are implemented: data pushes, conditionals, stack manipulation,
numeric operations, OP_CAT and the sha256-based hashes. Signature checks, timelocks and
transaction introspection are not supported, and fail the execution if reached.

Execution never raises: errors are reported in the returned ExecuteInfo.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from verystable.core.script import (
    OP_0NOTEQUAL, OP_16, OP_1, OP_1ADD, OP_1NEGATE, OP_1SUB, OP_2DROP, OP_2DUP, OP_2OVER,
    OP_2ROT, OP_2SWAP, OP_3DUP, OP_ABS, OP_ADD, OP_BOOLAND, OP_BOOLOR, OP_CAT, OP_DEPTH, OP_DROP,
    OP_DUP, OP_ELSE, OP_ENDIF, OP_EQUAL, OP_EQUALVERIFY, OP_FROMALTSTACK, OP_GREATERTHAN,
    OP_GREATERTHANOREQUAL, OP_HASH256, OP_IF, OP_IFDUP, OP_LESSTHAN, OP_LESSTHANOREQUAL, OP_MAX,
    OP_MIN, OP_NEGATE, OP_NIP, OP_NOP, OP_NOT, OP_NOTIF, OP_NUMEQUAL, OP_NUMEQUALVERIFY,
    OP_NUMNOTEQUAL, OP_OVER, OP_PICK, OP_PUSHDATA4, OP_RETURN, OP_ROLL, OP_ROT, OP_SHA1, OP_SHA256,
    OP_SIZE, OP_SUB, OP_SWAP, OP_TOALTSTACK, OP_TUCK, OP_VERIFY, OP_WITHIN, CScript,
    CScriptInvalidError, CScriptOp, bn2vch
)

from .errors import ScriptExecutionError
from .utils import is_minimally_encoded, vch2bn

logger = logging.getLogger(__name__)

MAX_SCRIPT_ELEMENT_SIZE = 520
MAX_STACK_SIZE = 1000
MAX_NUM_SIZE = 4


def cast_to_bool(v: bytes) -> bool:
    for i, b in enumerate(v):
        if b != 0:
            # negative zero is still false
            if i == len(v) - 1 and b == 0x80:
                return False
            return True
    return False


def decode_num(v: bytes) -> int:
    if len(v) > MAX_NUM_SIZE:
        raise ScriptExecutionError(f"numeric operand too large ({len(v)} bytes)")
    if not is_minimally_encoded(v):
        raise ScriptExecutionError(f"non-minimally encoded numeric operand: {v.hex()}")
    return vch2bn(v)


UNARY_NUM_OPS: dict[int, Callable[[int], int]] = {
    OP_1ADD: lambda a: a + 1,
    OP_1SUB: lambda a: a - 1,
    OP_NEGATE: lambda a: -a,
    OP_ABS: lambda a: abs(a),
    OP_NOT: lambda a: int(a == 0),
    OP_0NOTEQUAL: lambda a: int(a != 0),
}

BINARY_NUM_OPS: dict[int, Callable[[int, int], int]] = {
    OP_ADD: lambda a, b: a + b,
    OP_SUB: lambda a, b: a - b,
    OP_BOOLAND: lambda a, b: int(a != 0 and b != 0),
    OP_BOOLOR: lambda a, b: int(a != 0 or b != 0),
    OP_NUMEQUAL: lambda a, b: int(a == b),
    OP_NUMEQUALVERIFY: lambda a, b: int(a == b),
    OP_NUMNOTEQUAL: lambda a, b: int(a != b),
    OP_LESSTHAN: lambda a, b: int(a < b),
    OP_GREATERTHAN: lambda a, b: int(a > b),
    OP_LESSTHANOREQUAL: lambda a, b: int(a <= b),
    OP_GREATERTHANOREQUAL: lambda a, b: int(a >= b),
    OP_MIN: lambda a, b: min(a, b),
    OP_MAX: lambda a, b: max(a, b),
}

HASH_OPS: dict[int, Callable[[bytes], bytes]] = {
    OP_SHA1: lambda x: hashlib.sha1(x).digest(),
    OP_SHA256: lambda x: hashlib.sha256(x).digest(),
    OP_HASH256: lambda x: hashlib.sha256(hashlib.sha256(x).digest()).digest(),
}


@dataclass
class ExecuteInfo:
    success: bool
    error: Optional[str]
    final_stack: list[bytes]
    alt_stack: list[bytes] = field(default_factory=list)
    opcodes_executed: int = 0

    def __repr__(self):
        stack = ", ".join(item.hex() if len(item) > 0 else "<>" for item in self.final_stack)
        return f"ExecuteInfo(success={self.success}, error={self.error}, opcodes_executed={self.opcodes_executed}, final_stack=[{stack}])"


class StackMachine:
    def __init__(self, inputs: Optional[list[bytes]] = None, max_stack_size: int = MAX_STACK_SIZE):
        self.stack: list[bytes] = list(inputs or [])
        self.altstack: list[bytes] = []
        self.max_stack_size = max_stack_size
        # one entry per open OP_IF/OP_NOTIF, True if the branch is being executed
        self.exec_stack: list[bool] = []
        self.opcodes_executed = 0

    def _pop(self) -> bytes:
        if len(self.stack) == 0:
            raise ScriptExecutionError("invalid stack operation")
        return self.stack.pop()

    def _top(self, depth: int = 0) -> bytes:
        if depth >= len(self.stack):
            raise ScriptExecutionError("invalid stack operation")
        return self.stack[-1 - depth]

    def _pop_num(self) -> int:
        return decode_num(self._pop())

    def _push(self, item: bytes):
        if len(item) > MAX_SCRIPT_ELEMENT_SIZE:
            raise ScriptExecutionError(f"push of {len(item)} bytes exceeds the element size limit")
        self.stack.append(item)

    def _push_num(self, value: int):
        self.stack.append(bn2vch(value))

    def _push_bool(self, value: bool):
        self.stack.append(b'\x01' if value else b'')

    def _executing(self) -> bool:
        return all(self.exec_stack)

    def run(self, script: CScript):
        try:
            ops = list(script.raw_iter())
        except CScriptInvalidError as e:
            raise ScriptExecutionError(f"malformed script: {e}")

        for opcode, data, _ in ops:
            executing = self._executing()

            if data is not None:
                # data pushes, including OP_0 and OP_PUSHDATA{1,2,4}
                assert opcode <= OP_PUSHDATA4
                if executing:
                    self._push(data)
            elif OP_IF <= opcode <= OP_ENDIF:
                self._step_conditional(CScriptOp(opcode), executing)
            elif executing:
                self._step(CScriptOp(opcode))

            if len(self.stack) + len(self.altstack) > self.max_stack_size:
                raise ScriptExecutionError("stack size limit exceeded")

        if len(self.exec_stack) > 0:
            raise ScriptExecutionError("unbalanced conditional")

    def _step_conditional(self, op: CScriptOp, executing: bool):
        if op in (OP_IF, OP_NOTIF):
            value = False
            if executing:
                arg = self._pop()
                # minimal if: only the empty vector and 0x01 are accepted
                if arg not in (b'', b'\x01'):
                    raise ScriptExecutionError(f"{op} argument must be minimal")
                value = arg == b'\x01'
                if op == OP_NOTIF:
                    value = not value
                self.opcodes_executed += 1
            self.exec_stack.append(value)
        elif op == OP_ELSE:
            if len(self.exec_stack) == 0:
                raise ScriptExecutionError("unbalanced conditional")
            self.exec_stack[-1] = not self.exec_stack[-1]
        elif op == OP_ENDIF:
            if len(self.exec_stack) == 0:
                raise ScriptExecutionError("unbalanced conditional")
            self.exec_stack.pop()
        else:
            raise ScriptExecutionError(f"unsupported opcode {op}")

    def _step(self, op: CScriptOp):
        self.opcodes_executed += 1
        stack = self.stack

        if op == OP_1NEGATE or OP_1 <= op <= OP_16:
            self._push_num(op.decode_op_n() if op != OP_1NEGATE else -1)
        elif op == OP_NOP:
            pass
        elif op == OP_VERIFY:
            if not cast_to_bool(self._pop()):
                raise ScriptExecutionError("OP_VERIFY failed")
        elif op == OP_RETURN:
            raise ScriptExecutionError("OP_RETURN")
        elif op == OP_TOALTSTACK:
            self.altstack.append(self._pop())
        elif op == OP_FROMALTSTACK:
            if len(self.altstack) == 0:
                raise ScriptExecutionError("invalid altstack operation")
            stack.append(self.altstack.pop())
        elif op == OP_2DROP:
            self._pop()
            self._pop()
        elif op == OP_2DUP:
            a, b = self._top(1), self._top(0)
            stack.extend([a, b])
        elif op == OP_3DUP:
            a, b, c = self._top(2), self._top(1), self._top(0)
            stack.extend([a, b, c])
        elif op == OP_2OVER:
            a, b = self._top(3), self._top(2)
            stack.extend([a, b])
        elif op == OP_2ROT:
            self._top(5)
            a, b = stack.pop(-6), stack.pop(-5)
            stack.extend([a, b])
        elif op == OP_2SWAP:
            self._top(3)
            stack[-4], stack[-3], stack[-2], stack[-1] = stack[-2], stack[-1], stack[-4], stack[-3]
        elif op == OP_IFDUP:
            if cast_to_bool(self._top()):
                stack.append(self._top())
        elif op == OP_DEPTH:
            self._push_num(len(stack))
        elif op == OP_DROP:
            self._pop()
        elif op == OP_DUP:
            stack.append(self._top())
        elif op == OP_NIP:
            self._top(1)
            stack.pop(-2)
        elif op == OP_OVER:
            stack.append(self._top(1))
        elif op in (OP_PICK, OP_ROLL):
            n = self._pop_num()
            if n < 0 or n >= len(stack):
                raise ScriptExecutionError("invalid stack operation")
            item = stack[-1 - n]
            if op == OP_ROLL:
                del stack[-1 - n]
            stack.append(item)
        elif op == OP_ROT:
            self._top(2)
            stack.append(stack.pop(-3))
        elif op == OP_SWAP:
            self._top(1)
            stack[-2], stack[-1] = stack[-1], stack[-2]
        elif op == OP_TUCK:
            self._top(1)
            stack.insert(-2, stack[-1])
        elif op == OP_CAT:
            b = self._pop()
            a = self._pop()
            self._push(a + b)
        elif op == OP_SIZE:
            self._push_num(len(self._top()))
        elif op in (OP_EQUAL, OP_EQUALVERIFY):
            b = self._pop()
            a = self._pop()
            if op == OP_EQUAL:
                self._push_bool(a == b)
            elif a != b:
                raise ScriptExecutionError("OP_EQUALVERIFY failed")
        elif op in UNARY_NUM_OPS:
            self._push_num(UNARY_NUM_OPS[op](self._pop_num()))
        elif op in BINARY_NUM_OPS:
            b = self._pop_num()
            a = self._pop_num()
            result = BINARY_NUM_OPS[op](a, b)
            if op == OP_NUMEQUALVERIFY:
                if result == 0:
                    raise ScriptExecutionError("OP_NUMEQUALVERIFY failed")
            else:
                self._push_num(result)
        elif op == OP_WITHIN:
            upper = self._pop_num()
            lower = self._pop_num()
            x = self._pop_num()
            self._push_bool(lower <= x < upper)
        elif op in HASH_OPS:
            self._push(HASH_OPS[op](self._pop()))
        else:
            raise ScriptExecutionError(f"unsupported opcode {op}")


def execute_script_with_inputs(script: CScript, inputs: list[bytes], max_stack_size: int = MAX_STACK_SIZE) -> ExecuteInfo:
    """Executes `script` on a stack initialized with `inputs` (the last element is the top)."""
    for item in inputs:
        if len(item) > MAX_SCRIPT_ELEMENT_SIZE:
            return ExecuteInfo(False, "witness element exceeds the element size limit", list(inputs))
    if len(inputs) > max_stack_size:
        return ExecuteInfo(False, "stack size limit exceeded", list(inputs))

    machine = StackMachine(inputs, max_stack_size)
    error = None
    try:
        machine.run(script)
    except ScriptExecutionError as e:
        error = str(e)
        logger.debug("script execution failed after %d opcodes: %s", machine.opcodes_executed, error)

    return ExecuteInfo(error is None, error, machine.stack, machine.altstack, machine.opcodes_executed)


def execute_script(script: CScript, max_stack_size: int = MAX_STACK_SIZE) -> ExecuteInfo:
    return execute_script_with_inputs(script, [], max_stack_size)
