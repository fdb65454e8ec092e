"""Core package re-exports for the compilation pipeline"""
from .ir import IRKind, IRNode, SourceLocation, format_ir
from .lexer import BFLexer, filter_commands
from .optimizer import OptimizationPass, PeepholePass, Optimizer, optimize
from .codegen import AssemblyCodeGenerator, LoopLabelStack, emit_program
from .interpreter import ExecutionResult, StepLimitExceeded, TapeBoundsError, execute, match_loops
from .pipeline import CompilerConfig, BFCompiler, compile_string, compile_file, read_source

__all__ = [
    'IRKind', 'IRNode', 'SourceLocation', 'format_ir',
    'BFLexer', 'filter_commands',
    'OptimizationPass', 'PeepholePass', 'Optimizer', 'optimize',
    'AssemblyCodeGenerator', 'LoopLabelStack', 'emit_program',
    'ExecutionResult', 'StepLimitExceeded', 'TapeBoundsError', 'execute', 'match_loops',
    'CompilerConfig', 'BFCompiler', 'compile_string', 'compile_file', 'read_source',
]
