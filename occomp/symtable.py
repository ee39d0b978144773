"""Symbol tables, declaration listing and expression type checking."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import TextIO

from .astree import AstNode, Attr, Location, attr_name
from .tokens import Token

_NAME_TO_ATTR = {attr_name(attribute): attribute for attribute in Attr}

_BINARY_OPS = frozenset({*map(ord, "+-/*%<>"), Token.LE, Token.GE})
_EQUALITY_OPS = frozenset({Token.EQ, Token.NE})
_CONDITIONALS = frozenset({Token.WHILE, Token.IFELSE, Token.IF})


def to_attr(name: str) -> Attr:
    """Map an attribute name to its attribute; unknown names give NULLPTR_T."""
    return _NAME_TO_ATTR.get(name, Attr.NULLPTR_T)


@dataclass
class Symbol:
    """What the tables record about one declared name."""

    attributes: set[Attr] = field(default_factory=set)
    sequence: int = 0
    fields: dict[str, Symbol] | None = None
    lloc: Location = field(default_factory=Location)
    block_nr: int = 0
    parameters: list[Symbol] | None = None
    type: Attr = Attr.VOID

    def attribute_text(self) -> str:
        return "".join(f" {attr_name(a)}" for a in sorted(self.attributes))


def _insert(table: dict[str, Symbol], name: AstNode, sym: Symbol) -> None:
    # An existing entry is kept; later declarations do not replace it.
    table.setdefault(name.lexinfo, sym)


class SymbolTables:
    """Builds the symbol tables from a tree and writes the declaration list."""

    def __init__(self, out: TextIO | None = None) -> None:
        self.out = out
        self.fn_table: dict[str, Symbol] = {}
        self.struct_table: dict[str, Symbol] = {}
        self.ident_table_global: dict[str, Symbol] = {}
        self.ident_table_local: dict[str, Symbol] = {}
        self.global_block_count = 0
        self.next_block = 0

    def _write(self, text: str) -> None:
        (self.out if self.out is not None else sys.stdout).write(text)

    # Traversals

    def traverse(self, out: TextIO | None, root: AstNode | None) -> None:
        """Walk the tree, filling the tables and listing declarations to out."""
        self.out = out
        if root is None:
            return
        if root.symbol == Token.STRUCT:
            self.traverse_struct(root, Symbol())
        elif root.symbol == Token.FUNCTION:
            self.traverse_function(root, Symbol())
        elif root.symbol == Token.VARDECL:
            self.process_id(root)
        elif root.symbol == Token.IDENT:
            sys.stdout.write("We don't need TOK_IDENT")
        else:
            for child in root.children:
                self.traverse(out, child)

    def traverse_struct(self, root: AstNode, sym: Symbol) -> None:
        sym.attributes.add(Attr.STRUCT)
        sym.lloc = root.lloc
        sym.block_nr = 0
        sym.fields = {}
        name = root.children[0]
        _insert(self.struct_table, name, sym)
        self._print_struct(sym, name)
        seq_num = 0
        for child in root.children:
            if child.symbol == Token.IDENT:
                child.struct_id = child.lexinfo
                continue
            field_sym = Symbol(sequence=seq_num, lloc=child.lloc)
            field_sym.attributes.add(Attr.FIELD)
            sym.fields.setdefault(child.lexinfo, field_sym)
            self._print_field(field_sym, child, child.children[0])
            seq_num += 1

    def traverse_function(self, root: AstNode, sym: Symbol) -> None:
        self.next_block += 1
        cur_block = 1
        sym.lloc = root.lloc
        sym.block_nr = self.global_block_count
        sym.attributes.add(Attr.FUNCTION)
        for child in root.children:
            if child.symbol == Token.TYPE_ID:
                self._print_func(sym, child.children[0], child.children[1])
            elif child.symbol == Token.PARAM:
                self.read_param(child, sym, cur_block)
            elif child.symbol == Token.BLOCK:
                self.traverse_block(child, cur_block)
        self.global_block_count += 1
        _insert(self.fn_table, root.children[0].children[1], sym)

    def traverse_block(self, root: AstNode | None, cur_block: int) -> None:
        if root is None:
            return
        seq_num = 0
        for child in root.children:
            if child.symbol == Token.VARDECL:
                self.read_vardecl(child, cur_block, seq_num)
                seq_num += 1
            elif child.symbol == Token.BLOCK:
                self.traverse_block(child, cur_block + 1)
            elif child.symbol in (Token.CALL, Token.RETURN):
                continue
            else:
                self.typecheck(child)

    def process_id(self, root: AstNode) -> None:
        """Record a global variable declaration."""
        type_node = root.children[0]
        sym = Symbol(lloc=type_node.lloc, block_nr=0)
        sym.attributes.update((Attr.VARIABLE, Attr.LVAL))
        _insert(self.ident_table_global, type_node, sym)
        self._print_globalid(sym, type_node, root.children[1])

    def read_param(self, root: AstNode, func_sym: Symbol, block_nr: int) -> None:
        """Record each parameter of a function in the local table."""
        param_num = 0
        for child in root.children:
            if child.symbol != Token.TYPE_ID:
                continue
            if func_sym.parameters is None:
                func_sym.parameters = []
            sym = Symbol(
                lloc=child.lloc,
                block_nr=block_nr,
                sequence=param_num,
                type=to_attr(child.children[0].lexinfo),
            )
            sym.attributes.update((Attr.VARIABLE, Attr.LVAL, Attr.PARAM))
            self._print_local_ident(sym, child.children[0], child.children[1])
            func_sym.parameters.append(sym)
            _insert(self.ident_table_local, child.children[1], sym)
            param_num += 1

    def read_vardecl(self, root: AstNode, block_nr: int, seq_num: int) -> None:
        """Record a local variable declaration."""
        type_node = root.children[0]
        if type_node.symbol == Token.PTR:
            var_type = Attr.STRUCT
        elif type_node.symbol == Token.ARRAY:
            var_type = to_attr(type_node.children[0].lexinfo)
        else:
            var_type = to_attr(type_node.lexinfo)
        sym = Symbol(
            lloc=root.lloc, block_nr=block_nr, sequence=seq_num, type=var_type
        )
        sym.attributes.update((Attr.VARIABLE, Attr.LVAL, Attr.LOCAL))
        _insert(self.ident_table_local, root.children[1], sym)
        self._print_local_ident(sym, type_node, root.children[1])

    # Type checking

    def typecheck(self, root: AstNode) -> bool:
        symbol = root.symbol
        if symbol in _CONDITIONALS:
            if len(root.children) > 2:
                return self.typecheck(root.children[0]) and self.typecheck(
                    root.children[2]
                )
            return False
        if symbol in _BINARY_OPS:
            return self.check_binary(root)
        if symbol in _EQUALITY_OPS:
            return self.check_equality(root)
        if symbol == Token.NOT:
            return self.find_type(root.children[0]) == Attr.INT
        return symbol == ord(";")

    def check_binary(self, root: AstNode) -> bool:
        """Both operands must be int; the result is int."""
        if len(root.children) < 2:
            return False
        left = self.find_type(root.children[0])
        right = self.find_type(root.children[1])
        if left == right == Attr.INT:
            root.type = attr_name(left)
            return True
        return False

    def check_equality(self, root: AstNode) -> bool:
        """Operands must agree, except that null takes the other's type."""
        if len(root.children) < 2:
            return False
        left = self.find_type(root.children[0])
        right = self.find_type(root.children[1])
        if left == right:
            root.type = attr_name(left)
            return True
        if left == Attr.NULLPTR_T:
            root.type = attr_name(right)
            return True
        if right == Attr.NULLPTR_T:
            root.type = attr_name(left)
            return True
        return False

    def find_type(self, root: AstNode) -> Attr:
        symbol = root.symbol
        if symbol == Token.IDENT:
            return self.get_type(root.lexinfo)
        if symbol in (Token.INTCON, Token.CHARCON):
            return Attr.INT
        if symbol == Token.STRINGCON:
            return Attr.STRING
        if symbol == Token.NULLPTR:
            return Attr.NULLPTR_T
        if symbol == Token.ARROW:
            return self.find_type(root.children[1])
        if symbol == Token.INDEX:
            return self.find_type(root.children[0])
        self.typecheck(root)
        if root.type is not None:
            return to_attr(root.type)
        return Attr.NULLPTR_T

    def _lookup(self, key: str) -> Symbol | None:
        sym = self.ident_table_local.get(key)
        return sym if sym is not None else self.ident_table_global.get(key)

    def get_type(self, key: str) -> Attr:
        """Type of a name, searching local then global; NULLPTR_T if unknown."""
        sym = self._lookup(key)
        return sym.type if sym is not None else Attr.NULLPTR_T

    def get_lloc(self, key: str) -> Location | None:
        """Declaration location of a name, or None if it is not declared."""
        sym = self._lookup(key)
        return sym.lloc if sym is not None else None

    # Printing

    def _print_func(self, sym: Symbol, type_node: AstNode, name: AstNode) -> None:
        if self.global_block_count != 0:
            self._write("\n")
        text = f"{name.lexinfo} ({sym.lloc}) {{{sym.block_nr}}} {type_node.lexinfo}"
        if type_node.lexinfo == "ptr":
            text += f" <struct {type_node.children[0].lexinfo}>"
        self._write(text + sym.attribute_text() + "\n")

    def _print_local_ident(
        self, sym: Symbol, type_node: AstNode, name: AstNode
    ) -> None:
        text = (
            f"   {name.lexinfo} ({sym.lloc}) {{{sym.block_nr}}} {type_node.lexinfo}"
        )
        if type_node.lexinfo == "ptr":
            text += f" <struct {type_node.children[0].lexinfo}>"
        elif type_node.lexinfo == "array":
            text += f" <{type_node.children[0].lexinfo}>"
        self._write(f"{text}{sym.attribute_text()} {sym.sequence}\n")

    def _print_struct(self, sym: Symbol, name: AstNode) -> None:
        self._write(
            f"\n{name.lexinfo} ({sym.lloc}) {{{sym.block_nr}}} struct {name.lexinfo}\n"
        )

    def _print_field(self, sym: Symbol, type_node: AstNode, name: AstNode) -> None:
        head = f"   {name.lexinfo} ({sym.lloc})"
        if type_node.lexinfo == "ptr":
            text = f"{head} ptr <struct {type_node.children[0].lexinfo}>"
        elif type_node.lexinfo == "array":
            text = f"{head} array <{type_node.children[0].lexinfo}>"
        else:
            text = f"{head}  {type_node.lexinfo}"
        self._write(f"{text}{sym.attribute_text()} {sym.sequence}\n")

    def _print_globalid(self, sym: Symbol, type_node: AstNode, name: AstNode) -> None:
        head = f"\n{name.lexinfo} ({sym.lloc})"
        if type_node.lexinfo == "ptr":
            text = f"{head}  ptr <struct {type_node.children[0].lexinfo}>"
        elif type_node.lexinfo == "array":
            text = f"{head} array <{type_node.children[0].lexinfo}>"
        else:
            text = f"{head}  {type_node.lexinfo}"
        self._write(f"{text}{sym.attribute_text()} {sym.sequence}\n")

    def dump_tables(self, out: TextIO) -> None:
        """Write every table's entries for inspection."""
        sections = (
            ("struct_table", self.struct_table, False),
            ("fn_table", self.fn_table, False),
            ("ident_table_global", self.ident_table_global, False),
            ("ident_table_local", self.ident_table_local, True),
        )
        for title, table, show_type in sections:
            out.write(f"\n\n---- Printing {title} ----\n\n")
            for name, sym in table.items():
                line = f"name: {name:<10s} | lloc: ({sym.lloc}){sym.attribute_text()}"
                if show_type:
                    line += f" | type: {attr_name(sym.type)}"
                out.write(line + "\n")