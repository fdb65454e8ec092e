import pytest

from bfnasm.core.ir import IRKind, IRNode

HELLO = "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++."

KINDS = {
    'C': IRKind.CLEAR,
    'R': IRKind.SCAN_RIGHT,
    'L': IRKind.SCAN_LEFT,
}


def nodes(*items):
    """Build IR from ('+', 3) style pairs or bare command characters."""
    result = []
    for item in items:
        if isinstance(item, tuple):
            char, magnitude = item
        else:
            char, magnitude = item, 1
        kind = KINDS.get(char) or IRKind(char)
        result.append(IRNode(kind, magnitude))
    return result


@pytest.fixture
def hello_source() -> str:
    return HELLO
