#!/usr/bin/env python3
import logging
import os
import shutil
import subprocess
import tempfile
from enum import Enum
from typing import Callable, List, Optional

from .errors import SourceError, ToolchainError


class OutputMode(Enum):
    ASSEMBLY = "asm"
    OBJECT = "obj"
    EXECUTABLE = "exe"

    @property
    def default_output(self) -> str:
        return {
            OutputMode.ASSEMBLY: 'out.s',
            OutputMode.OBJECT: 'out.o',
            OutputMode.EXECUTABLE: 'out',
        }[self]


class BuildTools:
    """Build tool detection"""

    @staticmethod
    def nasm() -> str:
        return os.environ.get('BFNASM_NASM', 'nasm')

    @staticmethod
    def linker() -> str:
        return os.environ.get('BFNASM_LD', 'ld')

    @staticmethod
    def get_missing_tools(mode: OutputMode) -> List[str]:
        """Get list of build tools the given mode needs but cannot find"""
        required = []
        if mode in (OutputMode.OBJECT, OutputMode.EXECUTABLE):
            required.append(BuildTools.nasm())
        if mode == OutputMode.EXECUTABLE:
            required.append(BuildTools.linker())
        return [tool for tool in required if shutil.which(tool) is None]

    @staticmethod
    def install_hint(missing: List[str]) -> str:
        hints = []
        if BuildTools.nasm() in missing:
            hints.append("nasm (Ubuntu/Debian: sudo apt install nasm)")
        if BuildTools.linker() in missing:
            hints.append("ld (Ubuntu/Debian: sudo apt install binutils)")
        return "install " + ", ".join(hints) if hints else ""


Runner = Callable[..., subprocess.CompletedProcess]


class Toolchain:
    """Persist program text and drive nasm/ld up to the requested stage.

    Every intermediate artifact lives in a private temporary directory
    that is removed whether the build succeeds or not. Only the artifact
    of the requested stage is moved to the output path.
    """

    def __init__(self, output_format: str = 'elf64', runner: Optional[Runner] = None):
        self.output_format = output_format
        self.runner = runner or subprocess.run
        self.logger = logging.getLogger(__name__)

    def build(self, program_text: str, output_path: str, mode: OutputMode,
              on_stage: Optional[Callable[[str], None]] = None) -> str:
        if mode != OutputMode.ASSEMBLY:
            missing = BuildTools.get_missing_tools(mode)
            if missing:
                hint = BuildTools.install_hint(missing)
                raise ToolchainError(missing[0], f"missing build tools: {', '.join(missing)}; {hint}")

        temp_dir = tempfile.mkdtemp(prefix='bfnasm_')
        try:
            asm_file = os.path.join(temp_dir, 'out.asm')
            self._write(asm_file, program_text)
            if mode == OutputMode.ASSEMBLY:
                return self._deliver(asm_file, output_path)

            if on_stage:
                on_stage("Assembling with NASM...")
            obj_file = os.path.join(temp_dir, 'out.o')
            self.assemble(asm_file, obj_file)
            os.remove(asm_file)
            if mode == OutputMode.OBJECT:
                return self._deliver(obj_file, output_path)

            if on_stage:
                on_stage("Linking...")
            exe_file = os.path.join(temp_dir, 'out')
            self.link(obj_file, exe_file)
            return self._deliver(exe_file, output_path)
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

    def assemble(self, asm_file: str, obj_file: str):
        nasm = BuildTools.nasm()
        self._run(nasm, [nasm, '-f', self.output_format, '-o', obj_file, asm_file],
                  "could not assemble program")

    def link(self, obj_file: str, exe_file: str):
        ld = BuildTools.linker()
        self._run(ld, [ld, '-o', exe_file, obj_file], "could not link object file")

    def _run(self, tool: str, cmd: List[str], failure: str):
        self.logger.debug("Running: %s", ' '.join(cmd))
        try:
            proc = self.runner(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ToolchainError(tool, f"{failure}: {e}") from e
        if proc.returncode != 0:
            raise ToolchainError(tool, f"{failure} ({tool} exited with {proc.returncode})",
                                 proc.returncode, proc.stderr or "")

    def _write(self, path: str, text: str):
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise SourceError("could not create output assembly", path, e) from e

    def _deliver(self, artifact: str, output_path: str) -> str:
        if os.path.isdir(output_path):
            raise SourceError(f"could not write {output_path}: is a directory", output_path)
        out_dir = os.path.dirname(output_path)
        try:
            if out_dir:
                os.makedirs(out_dir, exist_ok=True)
            shutil.move(artifact, output_path)
        except OSError as e:
            raise SourceError(f"could not write {output_path}", output_path, e) from e
        self.logger.debug("Wrote %s", output_path)
        return output_path
