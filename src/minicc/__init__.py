"""
minicc - A Miniature C-like Compile-and-Run Pipeline
====================================================

minicc takes programs in a tiny C-like language from source text all the
way to a simulated execution trace, exposing every intermediate artifact
as text so that a host (an editor panel, a teaching tool, a test harness)
can show each stage.

Main Components
---------------
- **toyc**: the pipeline itself
    Lexer, parser, semantic analyzer, IR generator, peephole optimizer
    and IR interpreter, driven through MiniCEngine

- **cli**: the ``mcc`` command-line tool
    One sub-command per stage plus ``all``

Quick Start
-----------
    >>> from minicc.toyc import MiniCEngine
    >>> engine = MiniCEngine()
    >>> ir = engine.generate_ir_text("int main() { return 40 + 2; }")
    >>> print(engine.optimize_ir(ir))
    ; Optimized IR
    define i32 @main() {
      ret i32 42
    }

Or from the terminal:
    $ mcc ir hello.c
    $ mcc all hello.c --input 7

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"
__author__ = "minicc contributors"

__all__ = ["__version__"]
