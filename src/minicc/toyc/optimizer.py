"""
Toy C IR Peephole Optimizer
===========================

A single, deliberately narrow peephole rewrite over IR text:

    ret i32 <A> + <B>     →     ret i32 <A+B>       (A, B integer constants)

Only the *first* such return in the text is folded. Every other line,
including later foldable returns and other operators, passes through
byte-for-byte. The result is always prefixed with the marker line
``; Optimized IR``.

How It Works
------------
Each line is decoded with ``minicc.toyc.ir.parse_instruction``; the
pattern is matched on the decoded ``Ret`` rather than on raw text, so
spacing variations such as ``ret i32 40+2`` are recognised too. Only the
folded line is re-rendered (keeping its indentation); all other lines are
copied unchanged.

Usage
-----
>>> from minicc.toyc.optimizer import PeepholeOptimizer
>>> text, stats = PeepholeOptimizer().optimize("ret i32 40 + 2\\n")
>>> text
'; Optimized IR\\nret i32 42\\n'

The optimizer can be disabled by passing enable=False to the constructor,
which adds the marker line and changes nothing else.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from minicc.toyc.errors import IRFormatError
from minicc.toyc.ir import BinaryExpr, Const, Ret, parse_instruction

logger = logging.getLogger(__name__)


OPTIMIZED_MARKER = "; Optimized IR"


@dataclass
class OptimizationStats:
    """
    Statistics about one optimizer run.

    Attributes:
        constant_folds: Count of ``ret i32 A + B`` lines folded (0 or 1)
        lines_scanned: Number of IR lines examined
    """
    constant_folds: int = 0
    lines_scanned: int = 0

    def __str__(self) -> str:
        lines = ["Optimization Statistics:"]
        lines.append(f"  Constant folds (ret A + B): {self.constant_folds}")
        lines.append(f"  Lines scanned: {self.lines_scanned}")
        return "\n".join(lines)


def _fold(line: str) -> Optional[str]:
    """Return the folded form of a ``ret i32 A + B`` line, or None."""
    try:
        instruction = parse_instruction(line)
    except IRFormatError:
        return None

    if not isinstance(instruction, Ret):
        return None
    value = instruction.value
    if not (
        isinstance(value, BinaryExpr)
        and value.op == "+"
        and isinstance(value.left, Const)
        and isinstance(value.right, Const)
    ):
        return None

    indent = line[: len(line) - len(line.lstrip())]
    folded = Ret(Const(value.left.value + value.right.value))
    return f"{indent}{folded.render()}"


class PeepholeOptimizer:
    """
    Folds the first constant ``ret i32 A + B`` in a piece of IR text.

    Attributes:
        enabled: When False, ``optimize`` only adds the marker line
        stats: Statistics from the most recent run
    """

    def __init__(self, enable: bool = True):
        self.enabled = enable
        self.stats = OptimizationStats()

    def optimize(self, ir_text: str) -> tuple[str, OptimizationStats]:
        """
        Optimize IR text.

        Args:
            ir_text: IR text as produced by the generator (or by hand)

        Returns:
            Tuple of (marker line + optimized text, statistics)
        """
        self.stats = OptimizationStats()
        if not self.enabled:
            return f"{OPTIMIZED_MARKER}\n{ir_text}", self.stats

        lines = ir_text.splitlines(keepends=True)
        for index, line in enumerate(lines):
            self.stats.lines_scanned += 1
            body = line.rstrip("\r\n")
            folded = _fold(body)
            if folded is None:
                continue

            ending = line[len(body):]
            lines[index] = folded + ending
            self.stats.constant_folds += 1
            logger.debug(f"Folded {body.strip()!r} -> {folded.strip()!r}")
            break

        return f"{OPTIMIZED_MARKER}\n" + "".join(lines), self.stats


def optimize(ir_text: str, enable: bool = True) -> str:
    """Optimize IR text and return only the text."""
    text, _ = PeepholeOptimizer(enable).optimize(ir_text)
    return text
