"""Intermediate-language code generation from the syntax tree."""

from __future__ import annotations

from typing import TextIO

from .astree import AstNode
from .tokens import Token

_LABEL_PAD = " " * 5
_INDENT = " " * 10

_BINARY_EXPRS = frozenset({*map(ord, "+-/*%<>"), Token.LE, Token.NE, Token.EQ, Token.GE})
_LEAF_EXPRS = frozenset({Token.IDENT, Token.INTCON, Token.STRINGCON, Token.NULLPTR})


class Emitter:
    """Writes intermediate code for a tree to an output stream."""

    def __init__(self, out: TextIO) -> None:
        self.out = out
        self.while_nr = -1
        self.if_nr = -1
        self.register_nr = 0
        self.string_nr = 0
        self.structmap: dict[str, str] = {}
        self._after_label = False

    # Output helpers

    def _write(self, text: str) -> None:
        self.out.write(text)

    def _label(self, text: str) -> None:
        """Write a label; two labels in a row are separated by a newline."""
        if self._after_label:
            self._write("\n")
        self._after_label = True
        self._write(f"{text}:{_LABEL_PAD}")

    def _line(self, text: str) -> None:
        """Write an instruction, indented unless it follows a label."""
        if not self._after_label:
            self._write(_INDENT)
        self._after_label = False
        self._write(text + "\n")

    def _next_register(self) -> int:
        number = self.register_nr
        self.register_nr += 1
        return number

    def struct_name(self, key: str) -> str:
        """Struct type recorded for a pointer variable, or 'null'."""
        return self.structmap.get(key, "null")

    # Top-level traversal

    def emit(self, root: AstNode | None) -> None:
        if root is None:
            return
        if root.symbol == Token.STRUCT:
            self.emit_struct(root)
        elif root.symbol == Token.FUNCTION:
            self.emit_function(root)
        elif root.symbol == Token.VARDECL:
            self.emit_global_vars(root)
        else:
            for child in root.children:
                self.emit(child)

    def emit_struct(self, root: AstNode) -> None:
        for field in root.children:
            if field.symbol == Token.IDENT:
                self._line(f".struct {field.lexinfo}")
            elif field.symbol == Token.INT:
                self._line(f".field int {field.children[0].lexinfo}")
            else:
                self._line(f".field ptr {field.children[0].lexinfo}")
        self._line(".end")

    def emit_function(self, root: AstNode) -> None:
        for child in root.children:
            if child.symbol == Token.TYPE_ID:
                name = child.children[1].lexinfo
                pad = " " * max(0, 9 - len(name))
                kind = " int" if child.children[0].symbol == Token.INT else ""
                self._write(f"{name}:{pad}.function{kind}\n")
            elif child.symbol == Token.PARAM:
                self.emit_param(child)
            elif child.symbol == Token.BLOCK:
                self.emit_local_vars(child)
                self.emit_block(child)
        self._line(".end")

    def emit_local_vars(self, root: AstNode) -> None:
        for child in root.children:
            if child.symbol != Token.VARDECL:
                continue
            kind = "int" if child.children[0].symbol == Token.INT else "ptr"
            self._write(f"{_INDENT}.local {kind} {child.children[1].lexinfo}\n")

    def emit_param(self, root: AstNode) -> None:
        for child in root.children:
            kind = "int" if child.children[0].symbol == Token.INT else "ptr"
            self._write(f"{_INDENT}.param {kind} {child.children[1].lexinfo}\n")

    def emit_global_vars(self, root: AstNode) -> None:
        type_node, name, value = root.children[0], root.children[1], root.children[2]
        if type_node.symbol == Token.INT:
            self._line(f"{name.lexinfo}:.global int {value.lexinfo}")
        elif type_node.symbol == Token.STRING:
            self._line(f'.s{self.string_nr}:"{value.lexinfo}"')
            self.string_nr += 1
        else:
            self._line(f"{name.lexinfo}:.global ptr {value.lexinfo}")

    # Statements

    def emit_block(self, root: AstNode) -> None:
        for child in root.children:
            symbol = child.symbol
            if symbol == Token.RETURN:
                self._line(f"return {child.children[0].lexinfo}")
                self._line("return ")
            elif symbol == Token.CALL:
                self.emit_call(child)
            elif symbol in (Token.IFELSE, Token.IF):
                self.if_nr += 1
                self.emit_if(child)
            elif symbol == Token.WHILE:
                self.while_nr += 1
                self.emit_while(child)
            elif symbol == Token.BLOCK:
                self.emit_block(child)
            else:
                self.emit_expr(child)

    def emit_call(self, root: AstNode) -> None:
        name = root.children[0].lexinfo
        if len(root.children) > 1:
            argument = root.children[1]
            if argument.children:
                self.emit_expr(argument)
                self._line(f"{name}($t{self._next_register()}:i)")
            else:
                self._line(f"{name}({argument.lexinfo})")
        else:
            self._line(f"{name}()")

    def _emit_body(self, node: AstNode) -> None:
        if node.symbol == Token.BLOCK:
            self.emit_block(node)
        else:
            self.emit_expr(node)

    def emit_if(self, root: AstNode) -> None:
        number = self.if_nr
        self._label(f".if{number}")
        self.emit_expr(root.children[0])
        self._line(f"goto .el{number} if not $t{self._next_register()}:i")
        self._label(f".th{number}")
        self._emit_body(root.children[1])
        if len(root.children) == 3:
            self._label(f".el{number}")
            other = root.children[2]
            if other.lexinfo == "if":
                self.if_nr += 1
                self.emit_if(other)
            elif other.lexinfo == "(":
                self.emit_call(other)
            elif other.lexinfo == "=":
                self.emit_asg_expr(other, 0)
            elif other.lexinfo == "{":
                self.emit_block(other)
        self._label(f".fi{number}")

    def emit_while(self, root: AstNode) -> None:
        number = self.while_nr
        self._label(f".wh{number}")
        self.emit_expr(root.children[0])
        self._line(f"goto .od{number} if not $t{self._next_register()}:i")
        self._label(f".do{number}")
        self._emit_body(root.children[1])
        self._label(f".od{number}")

    # Expressions

    def emit_expr(self, root: AstNode) -> None:
        symbol = root.symbol
        if symbol in _BINARY_EXPRS:
            self.emit_bin_expr(root)
        elif symbol == Token.NOT:
            self.emit_unary_expr(root)
        elif symbol == Token.VARDECL:
            self.emit_asg_expr(root, 1)
        elif symbol == ord("="):
            self.emit_asg_expr(root, 0)
        elif symbol in _LEAF_EXPRS:
            self._line(f"$t{self.register_nr}:i = {root.lexinfo}")
        elif symbol == Token.CALL:
            self.emit_call(root)
        elif symbol == Token.ARROW:
            self.emit_arrow_expr(root)
        elif symbol == Token.ALLOC:
            self.emit_alloc_expr(root)
        elif symbol == Token.INDEX:
            self.emit_array_expr(root)

    def _lvalue(self, target: AstNode) -> str:
        if target.symbol == Token.INDEX:
            return f"{target.children[0].lexinfo}[{target.children[1].lexinfo} * :p]"
        if target.symbol == Token.ARROW:
            base = target.children[0].lexinfo
            return f"{base}->{self.struct_name(base)}.{target.children[1].lexinfo}"
        return target.lexinfo

    def emit_asg_expr(self, root: AstNode, start: int) -> None:
        """Assignment ('=' starts at 0) or initialised declaration (starts at 1)."""
        if start == 1 and root.children[0].symbol == Token.PTR:
            self.structmap.setdefault(
                root.children[1].lexinfo, root.children[0].children[0].lexinfo
            )
        target = root.children[start]
        value = root.children[start + 1]
        if not value.children:
            self._line(f"{self._lvalue(target)} = {value.lexinfo}")
        else:
            self.emit_expr(value)
            self._line(f"{self._lvalue(target)} = $t{self._next_register()}:i")

    def emit_bin_expr(self, root: AstNode) -> None:
        if len(root.children) == 1:
            self.emit_unary_expr(root)
            return
        left, right = root.children[0], root.children[1]
        last = root.children[-1]
        op = root.lexinfo
        if not last.children:
            if left.symbol == Token.INDEX:
                self._line(
                    f"$t{self._next_register()}:i = {left.children[0].lexinfo}"
                    f"[{left.children[1].lexinfo} * :p]"
                )
                self._line(
                    f"$t{self.register_nr}:i = $t{self.register_nr - 1}:i "
                    f"{op} {right.lexinfo}"
                )
            elif left.symbol == Token.ARROW:
                base = left.children[0].lexinfo
                self._line(
                    f"$t{self._next_register()}:p = {base}->"
                    f"{self.struct_name(base)}.{left.children[1].lexinfo}"
                )
                self._line(
                    f"$t{self.register_nr}:i = $t{self.register_nr - 1}:i "
                    f"{op} {right.lexinfo}"
                )
            else:
                self._line(
                    f"$t{self.register_nr}:i = {left.lexinfo} {op} {right.lexinfo}"
                )
        else:
            self.emit_expr(last)
            self._line(
                f"$t{self.register_nr + 1}:i = $t{self.register_nr}:i "
                f"{op} {right.lexinfo}"
            )
            self.register_nr += 1

    def emit_unary_expr(self, root: AstNode) -> None:
        operand = root.children[0]
        if not operand.children:
            self._line(f"$t{self.register_nr}:i = {root.lexinfo} {operand.lexinfo}")
        else:
            self.emit_expr(operand)
            self._line(
                f"$t{self.register_nr + 1}:i = {root.lexinfo} $t{self.register_nr}:i"
            )
            self.register_nr += 1

    def emit_array_expr(self, root: AstNode) -> None:
        self._line(
            f"$t{self.register_nr}:p = {root.children[0].lexinfo}"
            f"[{root.children[1].lexinfo} * :p]"
        )

    def emit_alloc_expr(self, root: AstNode) -> None:
        kind = root.children[0]
        if kind.symbol == Token.STRING:
            self._line("malloc(4)")
        elif kind.symbol == Token.ARRAY:
            if root.children[1].lexinfo == "int":
                self._line("malloc(4 * sizeof int)")
            else:
                self._line("malloc(4 * sizeof ptr)")
        elif kind.symbol == Token.TYPE_ID:
            self._line(f"malloc (size of struct {kind.lexinfo})")

    def emit_arrow_expr(self, root: AstNode) -> None:
        base = root.children[0].lexinfo
        self._line(
            f"$t{self.register_nr}:p = {base}->{self.struct_name(base)}."
            f"{root.children[1].lexinfo}"
        )