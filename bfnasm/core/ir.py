from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


class IRKind(Enum):
    INCREMENT = "+"
    DECREMENT = "-"
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INPUT = ","
    OUTPUT = "."
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    # Produced only by the optimizer
    CLEAR = "clear"
    SCAN_RIGHT = "scan>"
    SCAN_LEFT = "scan<"

    @property
    def is_run(self) -> bool:
        """Kinds whose magnitude is a run length"""
        return self in RUN_KINDS

    @property
    def inverse(self) -> Optional["IRKind"]:
        return INVERSES.get(self)


RUN_KINDS = frozenset({IRKind.INCREMENT, IRKind.DECREMENT, IRKind.MOVE_RIGHT, IRKind.MOVE_LEFT})

INVERSES = {
    IRKind.INCREMENT: IRKind.DECREMENT,
    IRKind.DECREMENT: IRKind.INCREMENT,
    IRKind.MOVE_RIGHT: IRKind.MOVE_LEFT,
    IRKind.MOVE_LEFT: IRKind.MOVE_RIGHT,
}

COMMANDS = {kind.value: kind for kind in IRKind if len(kind.value) == 1}


@dataclass
class SourceLocation:
    line: int
    column: int
    file: str = "<stdin>"

    def __str__(self):
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class IRNode:
    kind: IRKind
    magnitude: int = 1
    location: Optional[SourceLocation] = field(default=None, compare=False, repr=False)

    def copy(self) -> "IRNode":
        return IRNode(self.kind, self.magnitude, self.location)

    def __str__(self):
        if self.kind.is_run:
            return f"{self.kind.name}({self.magnitude})"
        return self.kind.name


def format_ir(nodes) -> str:
    """Render an IR sequence one node per line, indented by loop depth"""
    lines = []
    depth = 0
    for node in nodes:
        if node.kind == IRKind.LOOP_CLOSE:
            depth = max(depth - 1, 0)
        lines.append('  ' * depth + str(node))
        if node.kind == IRKind.LOOP_OPEN:
            depth += 1
    return '\n'.join(lines)
