"""
Toy C IR Generator
==================

Lowers the syntax tree to IR text (see minicc.toyc.ir for the format).
Only top-level ``Function`` nodes produce IR; statements outside any
function are parsed and checked but not lowered.

Lowering Rules
--------------
Each function keeps a binding map from variable names to IR operands and
numbers its temporaries ``%1, %2, ...``:

| Source                    | IR                                            |
|---------------------------|-----------------------------------------------|
| ``int x;``                | binds x to the default ``0``                  |
| ``int x = 5;``            | binds x to ``5``                              |
| ``x = f(1);``             | ``%k = call i32 @f(i32 1)``, binds x to %k    |
| ``scanf("%d", x);``       | ``call i32 @scanf("%d", i32 *x)``             |
| ``printf("%d", x);``      | ``call i32 @printf("%d", i32 x)``             |
| ``printf("%d", y);``      | ``y`` unbound: passed by name, ``i32 y``      |
| ``return 42;``            | ``ret i32 42``                                |
| ``return x;``             | ``ret i32 <binding of x, or 0>``              |
| ``return add(2, 3);``     | ``%k = call i32 @add(...)`` + ``ret i32 %k``  |
| ``return 40 + 2;``        | ``ret i32 40 + 2`` (left for the optimizer)   |
| ``a + b`` nested deeper   | ``%k = call i32 @add(i32 a, i32 b)``          |

Parameters and names read by ``scanf`` are runtime values and appear in
the IR by name, so ``int f(int a)`` opens with ``define i32 @f(i32 a) {``.
The generator does no folding of its own; constant folding is the
optimizer's job.

Example
-------
>>> from minicc.toyc.parser import parse_source
>>> root, _ = parse_source("int main() { return 42; }")
>>> print(IRGenerator().generate(root))
define i32 @main() {
  ret i32 42
}
"""

import logging
from typing import Optional

from minicc.toyc.ast import ASTVisitor, NodeKind, SyntaxNode
from minicc.toyc.ir import (
    Argument,
    BinaryExpr,
    Call,
    Const,
    IRFunction,
    IRModule,
    Operand,
    PointerArg,
    Ref,
    Ret,
    StringArg,
    Value,
    ValueArg,
)

logger = logging.getLogger(__name__)


# Builtin arithmetic function used to lower each binary operator
OPERATOR_FUNCTIONS = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "div",
}

DEFAULT_VALUE = Const(0)


class IRGenerator(ASTVisitor):
    """
    Syntax tree → IR text.

    Usage:
        generator = IRGenerator()
        ir_text = generator.generate(root)
        module = generator.module   # the structured form of the same IR
    """

    def __init__(self):
        self.module = IRModule()
        self._function: Optional[IRFunction] = None
        self._bindings: dict[str, Operand] = {}
        self._temp_counter = 0

    def generate(self, root: SyntaxNode) -> str:
        self.module = IRModule()
        self.visit(root)
        logger.debug(f"Generated IR for {len(self.module.functions)} functions")
        return self.module.render()

    # =========================================================================
    # Structure
    # =========================================================================

    def visit_ROOT(self, node: SyntaxNode) -> None:
        for child in node.children:
            if child.kind == NodeKind.FUNCTION:
                self.visit(child)
            else:
                logger.debug(f"Not lowering top-level {child!r}")

    def visit_Function(self, node: SyntaxNode) -> None:
        params = node.child(NodeKind.PARAMS)
        names = tuple(p.label for p in params.children) if params is not None else ()

        self._function = IRFunction(node.label, params=names)
        self._bindings = {name: Ref(name) for name in names}
        self._temp_counter = 0

        block = node.child(NodeKind.BLOCK)
        if block is not None:
            for statement in block.children:
                self.visit(statement)

        self.module.functions.append(self._function)
        self._function = None

    # =========================================================================
    # Statements
    # =========================================================================

    def visit_VarDecl(self, node: SyntaxNode) -> None:
        initializer = self._initializer(node)
        if initializer is None:
            self._bindings[node.label] = DEFAULT_VALUE
        else:
            self._bindings[node.label] = self._operand(initializer)

    def visit_Assignment(self, node: SyntaxNode) -> None:
        if node.children:
            self._bindings[node.label] = self._operand(node.children[0])

    def visit_Call(self, node: SyntaxNode) -> None:
        self._emit_call(node, want_result=node.label not in ("printf", "scanf"))

    def visit_Return(self, node: SyntaxNode) -> None:
        if not node.children:
            self._emit(Ret(DEFAULT_VALUE))
            return
        self._emit(Ret(self._value(node.children[0])))

    # =========================================================================
    # Expressions
    # =========================================================================

    @staticmethod
    def _initializer(node: SyntaxNode) -> Optional[SyntaxNode]:
        for child in node.children:
            if child.kind != NodeKind.TYPE:
                return child
        return None

    def _value(self, node: SyntaxNode) -> Value:
        """Lower a returned expression; a single binary op stays unfolded."""
        if node.kind == NodeKind.BINARY_OP and len(node.children) == 2:
            left, right = node.children
            return BinaryExpr(node.label, self._operand(left), self._operand(right))
        return self._operand(node)

    def _operand(self, node: SyntaxNode) -> Operand:
        """Lower an expression to a single operand, emitting calls as needed."""
        if node.kind == NodeKind.LITERAL:
            if node.is_string_literal():
                logger.warning(f"String literal {node.label} used as an integer")
                return DEFAULT_VALUE
            return Const(int(node.label))

        if node.kind == NodeKind.IDENTIFIER:
            return self._bindings.get(node.label, DEFAULT_VALUE)

        if node.kind == NodeKind.CALL:
            return Ref(self._emit_call(node, want_result=True))

        if node.kind == NodeKind.BINARY_OP and len(node.children) == 2:
            left, right = (self._operand(child) for child in node.children)
            temp = self._new_temp()
            callee = OPERATOR_FUNCTIONS[node.label]
            self._emit(Call(callee, (ValueArg(left), ValueArg(right)), temp))
            return Ref(temp)

        logger.warning(f"Cannot lower {node!r}; using default value")
        return DEFAULT_VALUE

    def _emit_call(self, node: SyntaxNode, want_result: bool) -> Optional[str]:
        if node.label == "scanf":
            args = self._scanf_args(node)
        else:
            args = tuple(self._argument(node.label, arg) for arg in node.children)

        result = self._new_temp() if want_result else None
        self._emit(Call(node.label, args, result))
        return result

    def _scanf_args(self, node: SyntaxNode) -> tuple[Argument, ...]:
        """scanf takes its format string plus the names it stores into."""
        args = []
        for arg in node.children:
            if arg.is_string_literal():
                args.append(StringArg(arg.label[1:-1]))
            elif arg.kind == NodeKind.IDENTIFIER:
                args.append(PointerArg(arg.label))
                self._bindings[arg.label] = Ref(arg.label)
            else:
                logger.warning(f"scanf argument {arg!r} is not a variable; ignored")
        return tuple(args)

    def _argument(self, callee: str, node: SyntaxNode) -> Argument:
        if node.is_string_literal():
            return StringArg(node.label[1:-1])
        if (
            callee == "printf"
            and node.kind == NodeKind.IDENTIFIER
            and node.label not in self._bindings
        ):
            # Unbound names print as "undefined" at run time
            return ValueArg(Ref(node.label))
        return ValueArg(self._operand(node))

    # =========================================================================
    # Helpers
    # =========================================================================

    def _new_temp(self) -> str:
        self._temp_counter += 1
        return f"%{self._temp_counter}"

    def _emit(self, instruction) -> None:
        if self._function is not None:
            self._function.body.append(instruction)


def generate_ir(root: SyntaxNode) -> str:
    """Lower a syntax tree to IR text."""
    return IRGenerator().generate(root)
