import pytest

from bfnasm.core.codegen import IMM32_MAX, AssemblyCodeGenerator, LoopLabelStack, emit_program
from bfnasm.core.ir import IRKind, IRNode
from bfnasm.core.lexer import BFLexer
from bfnasm.core.pipeline import compile_string
from bfnasm.utils.errors import NestingTooDeepError, StructuralError, UnmatchedCloseError, UnmatchedOpenError

from .conftest import nodes


def body(text: str):
    """Instruction lines between the tape setup and the exit syscall."""
    lines = text.splitlines()
    start = lines.index("    lea r12, [rax + 33554432]") + 1
    end = len(lines) - 3
    return [line.strip() for line in lines[start:end]]


def test_program_layout() -> None:
    text = emit_program([])
    lines = text.splitlines()

    assert lines[:3] == ["section .text", "global _start", "_start:"]
    assert "    mov rsi, 67108864" in lines
    assert "    mov r10, 0x22" in lines
    assert lines[-3:] == ["    mov rax, 60", "    mov rdi, 0", "    syscall"]
    assert text.endswith("\n")


def test_arithmetic_and_moves() -> None:
    text = emit_program(nodes(('+', 3), ('-', 2), ('>', 4), ('<', 1)))

    assert body(text) == [
        "add byte [r12], 3",
        "sub byte [r12], 2",
        "add r12, 4",
        "sub r12, 1",
    ]


def test_io_uses_single_byte_syscalls() -> None:
    text = emit_program(nodes(',', '.'))

    assert body(text) == [
        "mov rax, 0", "mov rdi, 0", "mov rsi, r12", "mov rdx, 1", "syscall",
        "mov rax, 1", "mov rdi, 1", "mov rsi, r12", "mov rdx, 1", "syscall",
    ]


def test_byte_runs_wrap_modulo_256() -> None:
    assert body(emit_program(nodes(('+', 258)))) == ["add byte [r12], 2"]
    assert body(emit_program(nodes(('-', 512)))) == []


def test_large_pointer_moves_are_split() -> None:
    total = 2 * IMM32_MAX + 5
    lines = body(emit_program(nodes(('>', total))))

    assert lines == [f"add r12, {IMM32_MAX}", f"add r12, {IMM32_MAX}", "add r12, 5"]


def test_loops_get_paired_labels() -> None:
    lines = body(emit_program(BFLexer("[[]][]").tokenize()))

    assert lines == [
        "l0:", "cmp byte [r12], 0", "je l0_e",
        "l1:", "cmp byte [r12], 0", "je l1_e",
        "jmp l1", "l1_e:",
        "jmp l0", "l0_e:",
        "l2:", "cmp byte [r12], 0", "je l2_e",
        "jmp l2", "l2_e:",
    ]


def test_clear_and_scans() -> None:
    lines = body(emit_program(nodes('C', 'R', 'L')))

    assert lines == [
        "mov byte [r12], 0",
        "s0:", "cmp byte [r12], 0", "je s0_e", "inc r12", "jmp s0", "s0_e:",
        "s1:", "cmp byte [r12], 0", "je s1_e", "dec r12", "jmp s1", "s1_e:",
    ]


def test_unmatched_close_fails_where_it_occurs() -> None:
    ir = BFLexer("+]\n[", "p.bf").tokenize()

    with pytest.raises(UnmatchedCloseError) as excinfo:
        emit_program(ir)
    assert str(excinfo.value) == "p.bf:1:2: unmatched ']'"


def test_unmatched_open_fails_after_full_pass() -> None:
    ir = BFLexer("[[]", "p.bf").tokenize()

    with pytest.raises(UnmatchedOpenError) as excinfo:
        emit_program(ir)
    assert str(excinfo.value.location) == "p.bf:1:1"


def test_nesting_limit() -> None:
    generator = AssemblyCodeGenerator(max_loop_depth=3)
    generator.generate(BFLexer("[[[]]]").tokenize())

    with pytest.raises(NestingTooDeepError):
        generator.generate(BFLexer("[[[[]]]]").tokenize())


def test_generator_state_resets_between_runs() -> None:
    generator = AssemblyCodeGenerator()
    first = generator.generate(BFLexer("[-][>]").tokenize())
    second = generator.generate(BFLexer("[-][>]").tokenize())

    assert first == second


def test_label_stack() -> None:
    stack = LoopLabelStack(max_depth=2)
    stack.push(0)
    stack.push(1)

    with pytest.raises(NestingTooDeepError):
        stack.push(2)
    assert stack.pop() == 1
    with pytest.raises(UnmatchedOpenError):
        stack.check_empty()
    assert stack.pop() == 0
    stack.check_empty()
    with pytest.raises(UnmatchedCloseError):
        stack.pop()


def test_unknown_kind_is_rejected() -> None:
    node = IRNode(IRKind.INCREMENT)
    node.kind = "bogus"

    with pytest.raises(ValueError):
        emit_program([node])


def test_compile_string_optimized_clear() -> None:
    text = compile_string("+++[-]", optimize=True)

    assert "mov byte [r12], 0" in text
    assert "l0:" not in text


def test_compile_string_raises_structural_error() -> None:
    with pytest.raises(StructuralError):
        compile_string("[", optimize=True)
