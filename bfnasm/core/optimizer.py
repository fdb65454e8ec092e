from abc import ABC, abstractmethod
from typing import List
import logging
from .ir import IRKind, IRNode


class OptimizationPass(ABC):
    """Base class for optimization passes"""

    @abstractmethod
    def optimize(self, nodes: List[IRNode]) -> List[IRNode]:
        pass


class PeepholePass(OptimizationPass):
    """Fuse runs, cancel inverse runs and collapse clear/scan loops.

    A single forward pass over the input. The output list works as a stack:
    every rule only looks at its top (and, for the loop idioms, the node
    right below it). Nodes are never reordered.
    """

    SCANS = {
        IRKind.MOVE_RIGHT: IRKind.SCAN_RIGHT,
        IRKind.MOVE_LEFT: IRKind.SCAN_LEFT,
    }

    def optimize(self, nodes: List[IRNode]) -> List[IRNode]:
        out: List[IRNode] = []
        for node in nodes:
            if not out:
                out.append(node.copy())
                continue
            if self._fuse(out, node):
                continue
            if self._annihilate(out, node):
                continue
            if node.kind == IRKind.LOOP_CLOSE:
                if self._clear_loop(out, node) or self._scan_loop(out, node):
                    continue
            out.append(node.copy())
        return out

    def _fuse(self, out: List[IRNode], node: IRNode) -> bool:
        top = out[-1]
        if not node.kind.is_run or top.kind != node.kind:
            return False
        top.magnitude += node.magnitude
        return True

    def _annihilate(self, out: List[IRNode], node: IRNode) -> bool:
        top = out[-1]
        if node.kind.inverse is None or top.kind != node.kind.inverse:
            return False
        remaining = top.magnitude - node.magnitude
        if remaining == 0:
            out.pop()
        elif remaining > 0:
            top.magnitude = remaining
        else:
            # Only reachable when the input was already fused
            out[-1] = IRNode(node.kind, -remaining, node.location)
        return True

    def _loop_body(self, out: List[IRNode]):
        """Return the single node enclosed by an open loop on top, if any"""
        if len(out) < 2 or out[-2].kind != IRKind.LOOP_OPEN:
            return None
        return out[-1]

    def _clear_loop(self, out: List[IRNode], node: IRNode) -> bool:
        body = self._loop_body(out)
        if body is None or body.kind not in (IRKind.INCREMENT, IRKind.DECREMENT):
            return False
        # An odd step is coprime with 256, so the loop always reaches zero
        if body.magnitude % 2 == 0:
            return False
        out.pop()
        opener = out.pop()
        if out and out[-1].kind in (IRKind.INCREMENT, IRKind.DECREMENT):
            out.pop()
        out.append(IRNode(IRKind.CLEAR, 1, opener.location))
        return True

    def _scan_loop(self, out: List[IRNode], node: IRNode) -> bool:
        body = self._loop_body(out)
        if body is None or body.kind not in self.SCANS or body.magnitude != 1:
            return False
        out.pop()
        opener = out.pop()
        out.append(IRNode(self.SCANS[body.kind], 1, opener.location))
        return True


class Optimizer:
    """Main optimizer that runs the enabled passes"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.passes: List[OptimizationPass] = []
        self.logger = logging.getLogger(__name__)

        if enabled:
            self.passes.append(PeepholePass())

    def optimize(self, nodes: List[IRNode]) -> List[IRNode]:
        """Run all optimization passes; a disabled optimizer copies the input"""
        if not self.passes:
            return [node.copy() for node in nodes]
        for pass_obj in self.passes:
            before = len(nodes)
            nodes = pass_obj.optimize(nodes)
            self.logger.debug("%s: %d -> %d nodes", type(pass_obj).__name__, before, len(nodes))
        return nodes


def optimize(nodes: List[IRNode], enabled: bool = True) -> List[IRNode]:
    return Optimizer(enabled).optimize(nodes)
