from chunker.utils import vch2bn


def flip_byte(witness: list[bytes], index: int, position: int = 0) -> list[bytes]:
    """Returns a copy of the witness where one byte of the element at `index` is altered."""
    result = list(witness)
    item = result[index]
    if len(item) == 0:
        result[index] = b'\x01'
    else:
        result[index] = item[:position] + bytes([item[position] ^ 0x01]) + item[position + 1:]
    return result


def stack_as_numbers(stack: list[bytes]) -> list[int]:
    return [vch2bn(x) for x in stack]
