"""
mcc - minicc Command-Line Interface
===================================

This module implements the ``mcc`` tool, which runs the toy C pipeline
from the terminal one stage at a time or all at once.

Usage Examples
--------------
Token listing:
    $ mcc tokens hello.c

Syntax tree and semantic diagnostics:
    $ mcc ast hello.c
    $ mcc ast --strict hello.c        # exit code 1 if there are diagnostics

IR, then optimized IR:
    $ mcc ir hello.c > hello.ir
    $ mcc opt hello.ir

Execute IR (or C source directly):
    $ mcc run hello.ir --input 7
    $ mcc run --from-source hello.c --input 7

Everything:
    $ mcc all hello.c --input 7

Reading from stdin:
    $ echo 'int main() { return 1 + 2; }' | mcc all -
"""

import logging
import sys
from typing import Optional, TextIO

import click

from minicc import __version__
from minicc.cli.errors import ExitCode, handle_cli_exception
from minicc.toyc import CompilerOptions, MiniCEngine
from minicc.toyc.compiler import SUCCESS_MARKER
from minicc.toyc.errors import ToyCError

logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for mcc commands.

    Holds verbosity and the compiler options assembled from the
    environment and the group-level flags.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.options: CompilerOptions = CompilerOptions.from_env()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )

    def engine(self, external_input: Optional[str] = None) -> MiniCEngine:
        engine = MiniCEngine(self.options)
        if external_input is not None:
            engine.set_input(external_input)
        return engine


pass_context = click.make_pass_decorator(Context, ensure=True)


def section(title: str, body: str) -> None:
    """Print a titled block of stage output."""
    click.echo(f"=== {title} ===")
    click.echo(body, nl=not body.endswith("\n"))


source_argument = click.argument("source", type=click.File("r"))

input_option = click.option(
    "-i", "--input", "external_input",
    type=str,
    default=None,
    help="Value stored by scanf",
)

from_source_option = click.option(
    "--from-source",
    is_flag=True,
    help="Treat SOURCE as toy C source instead of IR text",
)

strict_option = click.option(
    "--strict",
    is_flag=True,
    help="Exit with code 1 if any diagnostics were reported",
)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--no-optimize",
    is_flag=True,
    help="Skip constant folding (the marker line is still added)",
)
@click.option(
    "--flat-expressions",
    is_flag=True,
    help="Parse + - * / as one flat left-to-right chain",
)
@click.version_option(version=__version__, prog_name="mcc")
@pass_context
def main(ctx: Context, verbose: bool, no_optimize: bool, flat_expressions: bool) -> None:
    """
    Compile and run programs in the minicc toy C language.

    Each command reads SOURCE (a file, or - for stdin) and prints the
    output of one pipeline stage.

    \b
    Examples:
        mcc tokens hello.c
        mcc ast --strict hello.c
        mcc ir hello.c
        mcc run --from-source hello.c --input 7
        mcc all hello.c
    """
    ctx.verbose = verbose
    if no_optimize:
        ctx.options.optimize = False
    if flat_expressions:
        ctx.options.flat_expressions = True
    ctx.setup_logging()


# =============================================================================
# Stage Commands
# =============================================================================

@main.command()
@source_argument
@pass_context
def tokens(ctx: Context, source: TextIO) -> None:
    """
    List the tokens of SOURCE.

    Example:
        mcc tokens hello.c
    """
    try:
        click.echo(ctx.engine().tokenize(source.read()), nl=False)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command()
@source_argument
@strict_option
@pass_context
def ast(ctx: Context, source: TextIO, strict: bool) -> None:
    """
    Print the syntax tree of SOURCE and its semantic diagnostics.

    Example:
        mcc ast hello.c
    """
    try:
        output = ctx.engine().parse_and_check(source.read())
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    click.echo(output, nl=False)
    if strict and not output.rstrip("\n").endswith(SUCCESS_MARKER):
        sys.exit(ExitCode.BUILD_ERROR)


@main.command()
@source_argument
@pass_context
def ir(ctx: Context, source: TextIO) -> None:
    """
    Print the IR generated for SOURCE.

    Example:
        mcc ir hello.c > hello.ir
    """
    try:
        click.echo(ctx.engine().generate_ir_text(source.read()), nl=False)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command()
@source_argument
@from_source_option
@pass_context
def opt(ctx: Context, source: TextIO, from_source: bool) -> None:
    """
    Print the optimized form of the IR in SOURCE.

    Example:
        mcc opt hello.ir
        mcc opt --from-source hello.c
    """
    try:
        engine = ctx.engine()
        text = source.read()
        if from_source:
            text = engine.generate_ir_text(text)
        click.echo(engine.optimize_ir(text), nl=False)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


@main.command()
@source_argument
@from_source_option
@input_option
@pass_context
def run(
    ctx: Context,
    source: TextIO,
    from_source: bool,
    external_input: Optional[str],
) -> None:
    """
    Execute the IR in SOURCE and print the trace.

    Exits with code 1 if execution stopped with an error.

    Example:
        mcc run hello.ir --input 7
    """
    try:
        engine = ctx.engine(external_input)
        text = source.read()
        if from_source:
            text = engine.optimize_ir(engine.generate_ir_text(text))
        result = engine.execute(text)
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    click.echo(result.format(report_timing=ctx.options.report_timing), nl=False)
    if result.error is not None:
        logger.debug(f"Execution failed: {result.error}")
        sys.exit(ExitCode.BUILD_ERROR)


@main.command("all")
@source_argument
@input_option
@strict_option
@pass_context
def all_stages(
    ctx: Context,
    source: TextIO,
    external_input: Optional[str],
    strict: bool,
) -> None:
    """
    Run every stage on SOURCE and print each artifact.

    Example:
        mcc all hello.c --input 7
    """
    try:
        result = ctx.engine(external_input).compile_and_run(source.read())
    except Exception as e:
        handle_cli_exception(e, ctx.verbose)

    section("Tokens", result.tokens)
    section("Syntax Tree", result.tree)
    section("IR", result.ir)
    section("Optimized IR", result.optimized_ir)
    section("Execution", result.format())

    if result.execution.error is not None:
        sys.exit(ExitCode.BUILD_ERROR)
    if strict:
        try:
            result.raise_for_diagnostics()
        except ToyCError as e:
            handle_cli_exception(e, ctx.verbose)


if __name__ == "__main__":
    main()
