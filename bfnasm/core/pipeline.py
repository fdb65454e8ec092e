from typing import List, Optional
import logging
from .lexer import BFLexer
from .optimizer import Optimizer
from .codegen import AssemblyCodeGenerator
from .ir import IRNode
from ..utils.errors import SourceError

logger = logging.getLogger(__name__)


class CompilerConfig:
    def __init__(self):
        self.optimize = False
        self.tape_size = 64 * 1024 * 1024
        self.max_loop_depth = 2048
        self.output_format = "elf64"


class BFCompiler:
    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config or CompilerConfig()
        self.ir: List[IRNode] = []
        self.command_count = 0

    def build_ir(self, source: str, filename: str = "<stdin>") -> List[IRNode]:
        """Filter the source and run the optimizer when enabled."""
        nodes = BFLexer(source, filename).tokenize()
        self.command_count = len(nodes)
        logger.debug("Filtered %d commands from %s", len(nodes), filename)
        return Optimizer(self.config.optimize).optimize(nodes)

    def compile(self, source: str, filename: str = "<stdin>") -> str:
        self.ir = self.build_ir(source, filename)
        codegen = AssemblyCodeGenerator(self.config.tape_size, self.config.max_loop_depth)
        assembly = codegen.generate(self.ir)
        logger.debug("Generated %d lines of assembly (%d loops)",
                     assembly.count('\n'), codegen.loop_counter)
        return assembly


def read_source(filepath: str) -> str:
    try:
        with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()
    except OSError as e:
        raise SourceError(f"could not open {filepath}", filepath, e) from e


def compile_string(source: str, optimize: bool = False) -> str:
    config = CompilerConfig()
    config.optimize = optimize
    return BFCompiler(config).compile(source, '<string>')


def compile_file(filepath: str, config: Optional[CompilerConfig] = None) -> str:
    source = read_source(filepath)
    return BFCompiler(config).compile(source, filepath)
