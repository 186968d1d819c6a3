"""
minicc Engine Test Suite
========================

End-to-end tests of the MiniCEngine boundary: every entry point is text
in / text out, creates its own session, and never raises for problems in
the toy program.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from minicc.toyc import compiler
from minicc.toyc import (
    CompilationFailedError,
    CompilerOptions,
    MiniCEngine,
    generate_ir_text,
    optimize_ir,
    parse_and_check,
    run,
    tokenize_text,
)


IO_SOURCE = """
// echo the input, plus one
int main() {
    int x;
    scanf("%d", x);
    printf("%d", x);
    return x + 1;
}
"""


@pytest.fixture
def engine():
    return MiniCEngine()


# =============================================================================
# Stage Entry Points
# =============================================================================

class TestTokenize:
    """Tests for the token listing entry point."""

    def test_listing(self, engine):
        assert engine.tokenize("int x;") == (
            'TOKEN(KEYWORD, "int")\n'
            'TOKEN(IDENTIFIER, "x")\n'
            'TOKEN(SYMBOL, ";")\n'
        )

    def test_empty(self, engine):
        assert engine.tokenize("") == ""


class TestParseAndCheck:
    """Tests for the tree + diagnostics report."""

    def test_success(self, engine):
        assert engine.parse_and_check("int main() { return 42; }") == (
            "ROOT\n"
            "  Function(main)\n"
            "    Params\n"
            "    Block\n"
            "      Return\n"
            "        Literal(42)\n"
            "\n"
            "Semantic analysis passed.\n"
        )

    def test_errors(self, engine):
        output = engine.parse_and_check("int main() { return y; }")
        assert output.endswith("\nSemantic Errors:\n  - Undeclared variable: y\n")

    def test_parse_and_semantic_errors_in_order(self, engine):
        output = engine.parse_and_check("int main() { int x; int x; return z }")
        assert output.endswith(
            "Semantic Errors:\n"
            "  - Expected ';' but got '}'\n"
            "  - Variable 'x' re-declared.\n"
            "  - Undeclared variable: z\n"
        )

    def test_sessions_are_independent(self, engine):
        """Diagnostics and declarations never carry over between calls."""
        broken = "int main() { int x; int x; return x; }"
        first = engine.parse_and_check(broken)
        second = engine.parse_and_check(broken)
        assert first == second
        assert first.count("re-declared") == 1
        assert engine.parse_and_check("int main() { int x; return x; }").endswith(
            "Semantic analysis passed.\n"
        )

    def test_raise_if_errors(self, engine):
        _, session = engine.parse("int main() { return y; }")
        with pytest.raises(CompilationFailedError) as excinfo:
            session.diagnostics.raise_if_errors()
        assert excinfo.value.diagnostics == ["Undeclared variable: y"]
        assert excinfo.value.kind == "CompilationFailed"


class TestGenerateAndOptimize:
    """Tests for IR generation and optimization."""

    def test_generate(self, engine):
        assert engine.generate_ir_text("int main() { return 40 + 2; }") == (
            "define i32 @main() {\n"
            "  ret i32 40 + 2\n"
            "}\n"
        )

    def test_optimize(self, engine):
        ir_text = engine.generate_ir_text("int main() { return 40 + 2; }")
        assert engine.optimize_ir(ir_text) == (
            "; Optimized IR\n"
            "define i32 @main() {\n"
            "  ret i32 42\n"
            "}\n"
        )

    def test_optimize_disabled(self):
        engine = MiniCEngine(CompilerOptions(optimize=False))
        assert engine.optimize_ir("ret i32 1 + 2\n") == "; Optimized IR\nret i32 1 + 2\n"

    def test_generate_ignores_diagnostics(self, engine):
        assert engine.generate_ir_text("int main() { return y; }") == (
            "define i32 @main() {\n"
            "  ret i32 0\n"
            "}\n"
        )


# =============================================================================
# Execution
# =============================================================================

class TestRun:
    """Tests for the run entry point and the stored input."""

    IO_IR = (
        "define i32 @main() {\n"
        '  call i32 @scanf("%d", i32 *x)\n'
        '  call i32 @printf("%d", i32 x)\n'
        "  ret i32 x\n"
        "}\n"
    )

    def test_run_output(self, engine):
        output = engine.run("ret i32 42\n")
        assert output.startswith(
            "[return] Execution result: 42\n\n--- Execution Stats ---\nExecution time: "
        )
        assert output.endswith(
            "Time complexity: O(1) (static placeholder)\n"
            "Space complexity: O(n) (static placeholder)\n"
        )

    def test_set_input(self, engine):
        engine.set_input(7)
        assert "[scanf] x = 7" in engine.run(self.IO_IR)

    def test_set_input_overwrites(self, engine):
        engine.set_input(3)
        engine.set_input(9)
        assert engine.input_value == "9"
        assert "[printf] %d = 9" in engine.run(self.IO_IR)

    def test_explicit_input_wins(self, engine):
        engine.set_input(3)
        assert "[scanf] x = 5" in engine.run(self.IO_IR, external_input=5)

    def test_no_input(self, engine):
        assert "[scanf] x = undefined" in engine.run(self.IO_IR)

    def test_division_by_zero_never_raises(self, engine):
        output = engine.run("%1 = call i32 @div(i32 7, i32 0)\nret i32 %1\n")
        assert "Execution error: division by zero" in output

    def test_without_timing(self):
        engine = MiniCEngine(CompilerOptions(report_timing=False))
        assert engine.run("ret i32 1\n") == "[return] Execution result: 1\n"


# =============================================================================
# Full Pipeline
# =============================================================================

class TestCompileAndRun:
    """Tests for running every stage at once."""

    def test_io_program(self, engine):
        result = engine.compile_and_run(IO_SOURCE, external_input=5)
        assert result.diagnostics == []
        assert result.execution.trace == [
            "[scanf] x = 5",
            "[printf] %d = 5",
            "[return] Execution result: 6",
        ]
        assert result.success
        assert result.tokens.startswith('TOKEN(KEYWORD, "int")\n')
        assert result.tree.endswith("Semantic analysis passed.\n")
        assert result.optimized_ir.startswith("; Optimized IR\n")

    def test_constant_folded_program(self, engine):
        result = engine.compile_and_run("int main() { return 40 + 2; }")
        assert "  ret i32 42\n" in result.optimized_ir
        assert result.execution.return_value == 42

    def test_format(self, engine):
        output = engine.compile_and_run("int main() { return 1; }").format()
        assert output.startswith("[return] Execution result: 1\n")
        assert "\nTotal Compilation Time: " in output
        assert output.endswith(" ms\n")

    def test_diagnostics_reported(self, engine):
        result = engine.compile_and_run("int main() { return y; }")
        assert result.diagnostics == ["Undeclared variable: y"]
        assert not result.success
        assert result.execution.return_value == 0

    @pytest.mark.parametrize("flat, expected", [(False, 14), (True, 20)])
    def test_expression_mode(self, flat, expected):
        engine = MiniCEngine(CompilerOptions(flat_expressions=flat))
        result = engine.compile_and_run("int main() { return 2 + 3 * 4; }")
        assert result.execution.return_value == expected

    def test_call_to_user_function(self, engine):
        source = "int twice(int a) { return a + a; } int main() { return twice(2); }"
        result = engine.compile_and_run(source)
        assert result.diagnostics == []
        assert result.ir.startswith("define i32 @twice(i32 a) {\n")
        assert result.execution.trace == [
            "[call] twice(2) = 4",
            "[return] Execution result: 4",
        ]

    def test_discarded_user_call_result(self, engine):
        source = "int helper(int a) { return a; } int main() { helper(1); return 5; }"
        result = engine.compile_and_run(source)
        assert result.execution.trace == [
            "[call] helper(1) = 1",
            "[return] Execution result: 5",
        ]
        assert result.success

    def test_printf_of_undeclared_name(self, engine):
        result = engine.compile_and_run('int main() { printf("%d", y); return 0; }')
        assert result.diagnostics == ["Undeclared variable: y"]
        assert '  call i32 @printf("%d", i32 y)\n' in result.ir
        assert result.execution.trace == [
            "[printf] %d = undefined",
            "[return] Execution result: 0",
        ]

    def test_tree_matches_parse_and_check(self, engine):
        source = "int main() { return y; }"
        result = engine.compile_and_run(source)
        assert result.tree == engine.parse_and_check(source)

    def test_source_tokenized_once(self, engine, monkeypatch):
        calls = []
        original = compiler.tokenize

        def counting_tokenize(source):
            calls.append(source)
            return original(source)

        monkeypatch.setattr(compiler, "tokenize", counting_tokenize)
        engine.compile_and_run(IO_SOURCE, external_input=1)
        assert len(calls) == 1


# =============================================================================
# Deeply Nested Source
# =============================================================================

LONG_SUM = "int main() { return " + " + ".join(["1"] * 5000) + "; }"
DEEP_PARENS = "int main() { return " + "(" * 3000 + "1" + ")" * 3000 + "; }"


class TestDeepNesting:
    """Source nested past the recursion limit becomes a diagnostic."""

    @pytest.mark.parametrize("source", [LONG_SUM, DEEP_PARENS])
    def test_parse_and_check(self, engine, source):
        assert engine.parse_and_check(source) == (
            "ROOT\n\nSemantic Errors:\n  - Program is nested too deeply to compile.\n"
        )

    @pytest.mark.parametrize("source", [LONG_SUM, DEEP_PARENS])
    def test_generate_ir_text(self, engine, source):
        assert engine.generate_ir_text(source) == ""

    def test_compile_and_run(self, engine):
        result = engine.compile_and_run(LONG_SUM)
        assert "Program is nested too deeply to compile." in result.diagnostics
        assert result.execution.trace == ["Execution error: no recognizable return."]

    def test_moderate_sum_still_compiles(self, engine):
        source = "int main() { return " + " + ".join(["1"] * 50) + "; }"
        result = engine.compile_and_run(source)
        assert result.diagnostics == []
        assert result.execution.return_value == 50


# =============================================================================
# Convenience Functions and Concurrency
# =============================================================================

class TestConvenienceFunctions:
    """Tests for the module-level wrappers."""

    def test_wrappers(self):
        source = "int main() { return 1 + 1; }"
        assert tokenize_text(source).count("\n") == 11
        assert parse_and_check(source).endswith("Semantic analysis passed.\n")
        ir_text = generate_ir_text(source)
        assert optimize_ir(ir_text).splitlines()[2] == "  ret i32 2"
        assert run(optimize_ir(ir_text)).startswith("[return] Execution result: 2\n")

    def test_concurrent_engines(self):
        """Separate engines on separate threads share no state."""
        sources = [
            f"int main() {{ int v{i}; int v{i}; return v{i}; }}" for i in range(16)
        ]

        def check(source):
            return MiniCEngine().parse_and_check(source)

        with ThreadPoolExecutor(max_workers=4) as pool:
            outputs = list(pool.map(check, sources))

        for i, output in enumerate(outputs):
            assert output.endswith(
                f"Semantic Errors:\n  - Variable 'v{i}' re-declared.\n"
            )
