#!/usr/bin/env python3
"""
minicc Pipeline Demo
====================

This script walks a small program through every stage of the pipeline:
1. Tokenize the source
2. Parse and check it
3. Generate IR
4. Optimize the IR
5. Run it with a simulated scanf input

Usage:
    source .venv/bin/activate
    python examples/pipeline_demo.py [input]
"""

import sys
from pathlib import Path

from minicc.toyc import MiniCEngine


def main():
    source = (Path(__file__).parent / "echo.c").read_text()
    engine = MiniCEngine()
    engine.set_input(sys.argv[1] if len(sys.argv) > 1 else "7")

    # ==========================================================================
    # 1. Tokens
    # ==========================================================================
    print("Tokens:")
    print(engine.tokenize(source))

    # ==========================================================================
    # 2. Syntax tree and diagnostics
    # ==========================================================================
    print("Syntax tree:")
    print(engine.parse_and_check(source))

    # ==========================================================================
    # 3-4. IR before and after the peephole pass
    # ==========================================================================
    ir_text = engine.generate_ir_text(source)
    print("IR:")
    print(ir_text)

    optimized = engine.optimize_ir(ir_text)
    print(optimized)

    # ==========================================================================
    # 5. Execution trace
    # ==========================================================================
    print(engine.run(optimized))


if __name__ == "__main__":
    main()
