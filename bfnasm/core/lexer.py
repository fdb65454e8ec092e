"""Command filter: reduce Brainfuck source text to IR nodes.

Only the eight command characters produce nodes; every other character is
a comment. Each node remembers where in the source it came from so later
stages can point at the offending bracket.
"""
from typing import List
from .ir import COMMANDS, IRNode, SourceLocation


class BFLexer:
    def __init__(self, source: str, filename: str = "<stdin>"):
        self.source = source
        self.filename = filename

        # Lexer state
        self.position = 0
        self.line = 1
        self.column = 1

    def tokenize(self) -> List[IRNode]:
        nodes: List[IRNode] = []
        for char in self.source:
            kind = COMMANDS.get(char)
            if kind is not None:
                location = SourceLocation(self.line, self.column, self.filename)
                nodes.append(IRNode(kind, 1, location))
            self._advance(char)
        return nodes

    def _advance(self, char: str):
        self.position += 1
        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1


def filter_commands(source: str) -> str:
    """Return only the command characters of ``source``, in order."""
    return ''.join(c for c in source if c in COMMANDS)
