"""Run an IR sequence in-process on a byte tape.

Mirrors the runtime of the generated program: one byte tape with the
pointer starting at its middle, byte-at-a-time input and output, and a
read at end of input leaving the cell unchanged. Unlike the generated
program, moving off either end of the tape is an error.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional
from .ir import IRKind, IRNode
from ..utils.errors import UnmatchedCloseError, UnmatchedOpenError


@dataclass
class ExecutionResult:
    output: bytes
    tape: bytearray
    pointer: int
    steps: int


class StepLimitExceeded(RuntimeError):
    def __init__(self, message: str, output: bytes = b""):
        super().__init__(message)
        self.output = output


class TapeBoundsError(IndexError):
    pass


def match_loops(nodes: List[IRNode]) -> Dict[int, int]:
    """Map each loop bracket index to the index of its partner."""
    jumps: Dict[int, int] = {}
    stack: List[int] = []
    for index, node in enumerate(nodes):
        if node.kind == IRKind.LOOP_OPEN:
            stack.append(index)
        elif node.kind == IRKind.LOOP_CLOSE:
            if not stack:
                raise UnmatchedCloseError(node.location)
            start = stack.pop()
            jumps[start] = index
            jumps[index] = start
    if stack:
        raise UnmatchedOpenError(nodes[stack[-1]].location)
    return jumps


def execute(nodes: List[IRNode], stdin: bytes = b"", tape_size: int = 65536,
            max_steps: Optional[int] = None) -> ExecutionResult:
    jumps = match_loops(nodes)
    tape = bytearray(tape_size)
    ptr = tape_size // 2
    pc = 0
    steps = 0
    inp = 0
    out = bytearray()

    while pc < len(nodes):
        steps += 1
        if max_steps is not None and steps > max_steps:
            raise StepLimitExceeded(f"program did not finish within {max_steps} steps", bytes(out))

        node = nodes[pc]
        kind = node.kind
        if kind == IRKind.INCREMENT:
            tape[ptr] = (tape[ptr] + node.magnitude) % 256
        elif kind == IRKind.DECREMENT:
            tape[ptr] = (tape[ptr] - node.magnitude) % 256
        elif kind == IRKind.MOVE_RIGHT:
            ptr += node.magnitude
        elif kind == IRKind.MOVE_LEFT:
            ptr -= node.magnitude
        elif kind == IRKind.OUTPUT:
            out.append(tape[ptr])
        elif kind == IRKind.INPUT:
            if inp < len(stdin):
                tape[ptr] = stdin[inp]
                inp += 1
        elif kind == IRKind.CLEAR:
            tape[ptr] = 0
        elif kind == IRKind.SCAN_RIGHT:
            while 0 <= ptr < tape_size and tape[ptr]:
                ptr += 1
        elif kind == IRKind.SCAN_LEFT:
            while 0 <= ptr < tape_size and tape[ptr]:
                ptr -= 1
        elif kind == IRKind.LOOP_OPEN:
            if tape[ptr] == 0:
                pc = jumps[pc]
        elif kind == IRKind.LOOP_CLOSE:
            pc = jumps[pc] - 1
        if not 0 <= ptr < tape_size:
            raise TapeBoundsError(f"pointer moved off the tape (cell {ptr - tape_size // 2} from start)")
        pc += 1

    return ExecutionResult(bytes(out), tape, ptr, steps)
