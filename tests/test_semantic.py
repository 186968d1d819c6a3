"""
Toy C Semantic Analyzer Tests
=============================

Tests for declaration checking, scoping and call-target validation.
"""

from minicc.toyc.ast import NodeKind
from minicc.toyc.config import CompilerOptions
from minicc.toyc.errors import DiagnosticList
from minicc.toyc.parser import parse_source
from minicc.toyc.semantic import BUILTIN_FUNCTIONS, SemanticAnalyzer, analyze
from minicc.toyc.session import CompilationSession


def check(source, **options):
    """Parse and analyze source; return the diagnostics as a list."""
    session = CompilationSession(options=CompilerOptions(**options))
    root, session = parse_source(source, session)
    analyze(root, session)
    return list(session.diagnostics)


class TestDeclarations:
    """Tests for VarDecl and Param registration."""

    def test_clean_program(self):
        assert check("int main() { int x = 1; return x; }") == []

    def test_redeclaration(self):
        assert check("int main() { int x; int x; return x; }") == [
            "Variable 'x' re-declared.",
        ]

    def test_n_declarations_give_n_minus_one_diagnostics(self):
        source = "int main() { int x; int x; int x; int x; return x; }"
        assert check(source) == ["Variable 'x' re-declared."] * 3

    def test_duplicate_parameter(self):
        assert check("int f(int a, int a) { return a; }") == [
            "Variable 'a' re-declared.",
        ]

    def test_local_shadowing_parameter_is_redeclaration(self):
        assert check("int f(int a) { int a; return a; }") == [
            "Variable 'a' re-declared.",
        ]

    def test_functions_have_separate_scopes(self):
        source = "int f() { int x; return x; } int g() { int x; return x; }"
        assert check(source) == []

    def test_local_may_shadow_global(self):
        assert check("int x; int main() { int x; return x; }") == []

    def test_initializer_sees_own_name(self):
        """Declarations are registered before their initializer is visited."""
        assert check("int main() { int x = x; return x; }") == []

    def test_declaration_metadata(self):
        session = CompilationSession()
        root, _ = parse_source("int main() { int x; return x; }", session)
        SemanticAnalyzer(session).analyze(root)
        block = root.children[0].child(NodeKind.BLOCK)
        decl, ret = block.children
        assert decl.is_declared
        assert decl.inferred_type == "int"
        assert ret.children[0].inferred_type == "int"


class TestUses:
    """Tests for identifier and assignment checks."""

    def test_undeclared_identifier(self):
        assert check("int main() { return y; }") == ["Undeclared variable: y"]

    def test_undeclared_assignment_target(self):
        assert check("int main() { y = 1; return 0; }") == ["Undeclared variable: y"]

    def test_diagnostics_in_tree_order(self):
        assert check("int main() { return a + b; }") == [
            "Undeclared variable: a",
            "Undeclared variable: b",
        ]

    def test_parameters_visible_in_body(self):
        assert check("int f(int a) { return a; }") == []

    def test_parameters_not_visible_outside(self):
        source = "int f(int a) { return a; } int g() { return a; }"
        assert check(source) == ["Undeclared variable: a"]

    def test_global_visible_in_function(self):
        assert check("int g = 1; int main() { return g; }") == []


class TestCalls:
    """Tests for call-target validation."""

    def test_unknown_function(self):
        assert check("int main() { return foo(1); }") == [
            "Function not defined: foo",
        ]

    def test_declared_function(self):
        source = "int twice(int a) { return a + a; } int main() { return twice(2); }"
        assert check(source) == []

    def test_function_defined_later(self):
        source = "int main() { return later(1); } int later(int a) { return a; }"
        assert check(source) == []

    def test_builtins(self):
        source = (
            'int main() { int x; scanf("%d", x); printf("%d", x); '
            "return add(x, 1); }"
        )
        assert check(source) == []

    def test_builtin_set(self):
        assert BUILTIN_FUNCTIONS >= {"add", "main", "printf", "scanf", "div"}

    def test_arguments_are_checked(self):
        assert check("int main() { return add(z, 1); }") == [
            "Undeclared variable: z",
        ]


class TestDiagnosticLimit:
    """Tests for the diagnostics cap."""

    def test_cap_appends_single_notice(self):
        source = "int main() { return a + b + c + d + e; }"
        messages = check(source, max_diagnostics=2)
        assert messages == [
            "Undeclared variable: a",
            "Undeclared variable: b",
            DiagnosticList.SUPPRESSED,
        ]
