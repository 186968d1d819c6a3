"""
minicc Command-Line Interface
=============================

This package provides the ``mcc`` command-line tool, a Click group with
one sub-command per pipeline stage:

- **tokens**: token listing
- **ast**: syntax tree and semantic diagnostics
- **ir**: generated IR
- **opt**: optimized IR
- **run**: execution trace
- **all**: every stage in order
"""

__all__ = ["mcc"]
