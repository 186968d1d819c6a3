"""
Toy C Compiler Configuration
============================

Compiler options for the toy C pipeline. Configuration can come from:
- Default values (defined here)
- Environment variables, via ``CompilerOptions.from_env()``
- Command-line flags (see minicc.cli.mcc)

Environment variables (all optional):
    MINICC_OPTIMIZE: "0"/"false"/"no"/"off" disables constant folding
    MINICC_FLAT_EXPRESSIONS: truthy value selects flat left-to-right
        expression parsing instead of conventional precedence
    MINICC_MAX_DIAGNOSTICS: cap on collected diagnostics (integer)
"""

import os
from dataclasses import dataclass

_FALSE_WORDS = ("0", "false", "no", "off")


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() not in _FALSE_WORDS


@dataclass
class CompilerOptions:
    """
    Compiler configuration options.

    Attributes:
        optimize: Run the constant-folding pass in ``optimize_ir``. When
            False, the IR is passed through with only the marker line added.
        flat_expressions: Parse ``a + b * c`` as a flat left-to-right chain,
            ``(a + b) * c``. Default is conventional
            precedence.
        max_diagnostics: Maximum diagnostics kept per session.
        report_timing: Append the execution stats block to ``run`` output.
    """
    optimize: bool = True
    flat_expressions: bool = False
    max_diagnostics: int = 100
    report_timing: bool = True

    @classmethod
    def from_env(cls) -> "CompilerOptions":
        """Create CompilerOptions from MINICC_* environment variables."""
        options = cls()
        options.optimize = _env_flag("MINICC_OPTIMIZE", options.optimize)
        options.flat_expressions = _env_flag(
            "MINICC_FLAT_EXPRESSIONS", options.flat_expressions
        )

        if limit := os.environ.get("MINICC_MAX_DIAGNOSTICS"):
            try:
                options.max_diagnostics = max(1, int(limit))
            except ValueError:
                pass  # Ignore invalid values

        return options
