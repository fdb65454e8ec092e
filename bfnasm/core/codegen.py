from typing import List, Optional, Tuple
from .ir import IRKind, IRNode
from ..utils.errors import NestingTooDeepError, UnmatchedCloseError, UnmatchedOpenError

# Largest immediate accepted by add/sub r64, imm32 (sign-extended)
IMM32_MAX = 2 ** 31 - 1

SYS_READ = 0
SYS_WRITE = 1
SYS_MMAP = 9
SYS_EXIT = 60

PROT_READ_WRITE = 0x3
MAP_PRIVATE_ANONYMOUS = 0x22


class LoopLabelStack:
    """Ids of the loops currently open, innermost last"""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        self._items: List[Tuple[int, Optional[object]]] = []

    def __len__(self):
        return len(self._items)

    def push(self, loop_id: int, location: Optional[object] = None):
        if len(self._items) >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, location)
        self._items.append((loop_id, location))

    def pop(self, location: Optional[object] = None) -> int:
        if not self._items:
            raise UnmatchedCloseError(location)
        return self._items.pop()[0]

    def check_empty(self):
        if self._items:
            raise UnmatchedOpenError(self._items[-1][1])


class AssemblyCodeGenerator:
    """Emit NASM (x86-64 Linux) for an IR sequence.

    r12 holds the tape pointer for the whole program. The tape is an
    anonymous mapping and r12 starts at its middle.
    """

    def __init__(self, tape_size: int = 64 * 1024 * 1024, max_loop_depth: int = 2048):
        self.tape_size = tape_size
        self.max_loop_depth = max_loop_depth
        self.text_section: List[str] = []
        self.loop_counter = 0
        self.scan_counter = 0
        self.loops = LoopLabelStack(max_loop_depth)

    def generate(self, nodes: List[IRNode]) -> str:
        self.text_section = []
        self.loop_counter = 0
        self.scan_counter = 0
        self.loops = LoopLabelStack(self.max_loop_depth)

        self._emit_prologue()
        for node in nodes:
            self._emit_node(node)
        self.loops.check_empty()
        self._emit_epilogue()

        parts = ['section .text', 'global _start', '_start:']
        parts.extend(self.text_section)
        return '\n'.join(parts) + '\n'

    def _emit(self, line: str):
        self.text_section.append(f'    {line}')

    def _label(self, name: str):
        self.text_section.append(f'{name}:')

    def _emit_prologue(self):
        self._emit(f'mov rax, {SYS_MMAP}')
        self._emit('mov rdi, 0')
        self._emit(f'mov rsi, {self.tape_size}')
        self._emit(f'mov rdx, {PROT_READ_WRITE}')
        self._emit(f'mov r10, {MAP_PRIVATE_ANONYMOUS:#x}')
        self._emit('mov r8, -1')
        self._emit('mov r9, 0')
        self._emit('syscall')
        self._emit(f'lea r12, [rax + {self.tape_size // 2}]')

    def _emit_epilogue(self):
        self._emit(f'mov rax, {SYS_EXIT}')
        self._emit('mov rdi, 0')
        self._emit('syscall')

    def _emit_syscall(self, number: int, fd: int):
        self._emit(f'mov rax, {number}')
        self._emit(f'mov rdi, {fd}')
        self._emit('mov rsi, r12')
        self._emit('mov rdx, 1')
        self._emit('syscall')

    def _emit_node(self, node: IRNode):
        kind = node.kind
        if kind == IRKind.INCREMENT:
            self._emit_cell_add('add', node.magnitude)
        elif kind == IRKind.DECREMENT:
            self._emit_cell_add('sub', node.magnitude)
        elif kind == IRKind.MOVE_RIGHT:
            self._emit_pointer_add('add', node.magnitude)
        elif kind == IRKind.MOVE_LEFT:
            self._emit_pointer_add('sub', node.magnitude)
        elif kind == IRKind.INPUT:
            self._emit_syscall(SYS_READ, 0)
        elif kind == IRKind.OUTPUT:
            self._emit_syscall(SYS_WRITE, 1)
        elif kind == IRKind.CLEAR:
            self._emit('mov byte [r12], 0')
        elif kind == IRKind.SCAN_RIGHT:
            self._emit_scan('inc')
        elif kind == IRKind.SCAN_LEFT:
            self._emit_scan('dec')
        elif kind == IRKind.LOOP_OPEN:
            self._emit_loop_open(node)
        elif kind == IRKind.LOOP_CLOSE:
            self._emit_loop_close(node)
        else:
            raise ValueError(f"unknown IR kind: {kind}")

    def _emit_cell_add(self, op: str, magnitude: int):
        amount = magnitude % 256
        if amount:
            self._emit(f'{op} byte [r12], {amount}')

    def _emit_pointer_add(self, op: str, magnitude: int):
        while magnitude > 0:
            step = min(magnitude, IMM32_MAX)
            self._emit(f'{op} r12, {step}')
            magnitude -= step

    def _emit_scan(self, op: str):
        label = f's{self.scan_counter}'
        self.scan_counter += 1
        self._label(label)
        self._emit('cmp byte [r12], 0')
        self._emit(f'je {label}_e')
        self._emit(f'{op} r12')
        self._emit(f'jmp {label}')
        self._label(f'{label}_e')

    def _emit_loop_open(self, node: IRNode):
        loop_id = self.loop_counter
        self.loops.push(loop_id, node.location)
        self.loop_counter += 1
        self._label(f'l{loop_id}')
        self._emit('cmp byte [r12], 0')
        self._emit(f'je l{loop_id}_e')

    def _emit_loop_close(self, node: IRNode):
        loop_id = self.loops.pop(node.location)
        self._emit(f'jmp l{loop_id}')
        self._label(f'l{loop_id}_e')


def emit_program(nodes: List[IRNode], tape_size: int = 64 * 1024 * 1024, max_loop_depth: int = 2048) -> str:
    """Return the complete NASM program text for ``nodes``."""
    return AssemblyCodeGenerator(tape_size, max_loop_depth).generate(nodes)
