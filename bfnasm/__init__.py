"""Brainfuck to x86-64 NASM compiler"""

__version__ = "0.2.0"
