#!/usr/bin/env python3
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from .core.pipeline import BFCompiler, CompilerConfig, read_source
from .utils import term
from .utils.build import OutputMode, Toolchain
from .utils.errors import BFError, UsageError
from .utils.term import print_error, print_plain, print_stage, print_success, print_warning

USAGE = """Usage: bfnasm [options] [--] <file.bf>

Compile a Brainfuck program to x86-64 Linux NASM, an object file or an
executable.

Options:
  -a          output only assembly code
  -c          output only object code
  -O          enable the peephole optimizer
  -o <path>   output file (default: out.s, out.o or out)
  -v          verbose output
  -h          show this help and exit
  --          treat the next argument as the source file
"""


@dataclass
class Options:
    source: str
    mode: OutputMode = OutputMode.EXECUTABLE
    optimize: bool = False
    output: Optional[str] = None
    verbose: bool = False
    help: bool = False

    @property
    def output_path(self) -> str:
        return self.output or self.mode.default_output


def parse_args(argv: List[str]) -> Options:
    assembly = False
    obj = False
    optimize = False
    verbose = False
    output = None
    sources: List[str] = []

    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == '--':
            sources.extend(argv[i + 1:])
            break
        if arg == '-h':
            return Options(source='', help=True)
        elif arg == '-a':
            if obj:
                raise UsageError("-a and -c are incompatible")
            assembly = True
        elif arg == '-c':
            if assembly:
                raise UsageError("-a and -c are incompatible")
            obj = True
        elif arg == '-O':
            optimize = True
        elif arg == '-v':
            verbose = True
        elif arg == '-o':
            if i + 1 >= len(argv) or argv[i + 1].startswith('-'):
                raise UsageError("-o requires an output path")
            output = argv[i + 1]
            i += 1
        elif arg.startswith('-') and arg != '-':
            raise UsageError(f"unknown option: {arg}")
        else:
            sources.append(arg)
        i += 1

    if not sources:
        raise UsageError("no source file given")
    if len(sources) > 1:
        raise UsageError(f"only one source file allowed, got {len(sources)}")

    if assembly:
        mode = OutputMode.ASSEMBLY
    elif obj:
        mode = OutputMode.OBJECT
    else:
        mode = OutputMode.EXECUTABLE
    return Options(sources[0], mode, optimize, output, verbose)


def run(options: Options, toolchain: Optional[Toolchain] = None) -> str:
    """Compile ``options.source`` and build the requested artifact."""
    config = CompilerConfig()
    config.optimize = options.optimize

    total = {OutputMode.ASSEMBLY: 2, OutputMode.OBJECT: 3, OutputMode.EXECUTABLE: 4}[options.mode]
    stage = iter(range(1, total + 1))

    print_stage(next(stage), total, f"Compiling {options.source}...")
    source = read_source(options.source)
    compiler = BFCompiler(config)
    assembly = compiler.compile(source, options.source)
    if not compiler.command_count:
        print_warning(f"{options.source}: program is empty")

    print_stage(next(stage), total, f"Writing {options.output_path}...")
    toolchain = toolchain or Toolchain(config.output_format)
    return toolchain.build(assembly, options.output_path, options.mode,
                           on_stage=lambda msg: print_stage(next(stage), total, msg))


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    try:
        options = parse_args(argv)
    except UsageError as e:
        print_error(str(e))
        return 1

    if options.help:
        print_plain(USAGE)
        return 0

    term.VERBOSE = options.verbose
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

    try:
        path = run(options)
    except BFError as e:
        print_error(str(e))
        return 1
    if options.verbose:
        print_success(f"Wrote {path}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
