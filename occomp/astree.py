"""Abstract syntax tree nodes, attributes and tree printing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol, TextIO

from .string_set import StringSet
from .tokens import Token, token_name


class Attr(IntEnum):
    VOID = 0
    INT = 1
    NULLPTR_T = 2
    STRING = 3
    STRUCT = 4
    ARRAY = 5
    FUNCTION = 6
    VARIABLE = 7
    FIELD = 8
    TYPEID = 9
    PARAM = 10
    LOCAL = 11
    LVAL = 12
    CONST = 13
    VREG = 14
    VADDR = 15
    BITSET_SIZE = 16


_ATTR_NAMES = {
    Attr.VOID: "void",
    Attr.INT: "int",
    Attr.NULLPTR_T: "null",
    Attr.STRING: "string",
    Attr.STRUCT: "struct",
    Attr.ARRAY: "array",
    Attr.FUNCTION: "function",
    Attr.VARIABLE: "variable",
    Attr.FIELD: "field",
    Attr.TYPEID: "typeid",
    Attr.PARAM: "param",
    Attr.LOCAL: "local",
    Attr.LVAL: "lval",
    Attr.CONST: "const",
    Attr.VREG: "vreg",
    Attr.VADDR: "vaddr",
    Attr.BITSET_SIZE: "bitset_size",
}


def attr_name(attribute: int) -> str:
    """Return the printed name of an attribute."""
    try:
        return _ATTR_NAMES[Attr(attribute)]
    except (ValueError, KeyError):
        raise ValueError(f"attr_name: {attribute}") from None


@dataclass(frozen=True)
class Location:
    filenr: int = 0
    linenr: int = 0
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.filenr}.{self.linenr}.{self.offset}"


class AstNode:
    """An n-way tree node carrying a token code and its lexeme."""

    def __init__(
        self,
        symbol: int,
        lloc: Location,
        lexinfo: str,
        strings: StringSet | None = None,
    ):
        self.symbol = symbol
        self.lloc = lloc
        self.lexinfo = strings.intern(lexinfo) if strings is not None else lexinfo
        self.children: list[AstNode] = []
        self.struct_id: str | None = None
        self.type: str | None = None
        self.attributes: set[Attr] = set()

    def __repr__(self) -> str:
        return f"AstNode({token_name(self.symbol)}, {self.lloc}, {self.lexinfo!r})"

    def adopt(self, *args: AstNode | None) -> AstNode:
        """Append the given children, skipping None; return self."""
        self.children.extend(child for child in args if child is not None)
        return self

    def adopt_sym(self, child: AstNode | None, symbol: int) -> AstNode:
        self.symbol = symbol
        return self.adopt(child)

    def change_sym(self, symbol: int) -> AstNode:
        self.symbol = symbol
        return self

    def dump_node(self) -> str:
        """Describe this node and the identities of its children."""
        text = (
            f"{id(self):#x}->{{{token_name(self.symbol)} {self.lloc} "
            f'"{self.lexinfo}":'
        )
        return text + "".join(f" {id(child):#x}" for child in self.children)

    def dump_tree(self, out: TextIO, depth: int = 0) -> None:
        out.write(" " * (depth * 3) + self.dump_node() + "\n")
        for child in self.children:
            child.dump_tree(out, depth + 1)


class SymbolLookup(Protocol):
    def get_type(self, key: str) -> Attr: ...

    def get_lloc(self, key: str) -> Location | None: ...


_EXPR_SYMBOLS = frozenset(
    {
        Token.WHILE,
        Token.IF,
        *map(ord, "=+-/*%<>"),
        Token.LE,
        Token.GE,
        Token.EQ,
        Token.NE,
        Token.NOT,
    }
)

_SYMBOL_ATTRS: dict[int, tuple[Attr, ...]] = {
    Token.VOID: (Attr.VOID,),
    Token.INT: (Attr.INT,),
    Token.STRING: (Attr.STRING,),
    Token.ARRAY: (Attr.ARRAY,),
    Token.FUNCTION: (Attr.FUNCTION,),
    Token.TYPE_ID: (Attr.TYPEID,),
    Token.VARDECL: (Attr.VARIABLE, Attr.LVAL),
    Token.PARAM: (Attr.PARAM,),
    Token.IDENT: (Attr.VARIABLE,),
    **{ord(op): (Attr.INT, Attr.VREG) for op in "+-*/%="},
    Token.INTCON: (Attr.INT, Attr.CONST),
    Token.CHARCON: (Attr.INT, Attr.CONST),
    Token.STRINGCON: (Attr.STRING, Attr.CONST),
    Token.NULLPTR: (Attr.NULLPTR_T, Attr.CONST),
    **{tok: (Attr.VREG,) for tok in (Token.GE, Token.LT, Token.GT, Token.LE, Token.EQ)},
    Token.INDEX: (Attr.LVAL, Attr.VADDR),
    Token.ARROW: (Attr.LVAL, Attr.VADDR),
}


def is_expr(node: AstNode) -> bool:
    """Whether the node's token is one that carries an expression type."""
    return node.symbol in _EXPR_SYMBOLS


def set_attribute(node: AstNode) -> None:
    """Add the attributes implied by the node's token."""
    node.attributes.update(_SYMBOL_ATTRS.get(node.symbol, ()))


def print_tree(
    out: TextIO,
    tree: AstNode,
    symbols: SymbolLookup | None = None,
    depth: int = 0,
) -> None:
    """Write the tree with attributes, one node per line."""
    set_attribute(tree)
    parts = [
        f'{"|   " * depth}{token_name(tree.symbol)} "{tree.lexinfo}" ({tree.lloc})'
    ]
    if is_expr(tree) and tree.type is not None:
        parts.append(tree.type)
    lookup = symbols if tree.symbol == Token.IDENT else None
    if lookup is not None:
        declared = lookup.get_type(tree.lexinfo)
        if declared != Attr.NULLPTR_T:
            parts.append(attr_name(declared))
    parts.extend(attr_name(attribute) for attribute in sorted(tree.attributes))
    if lookup is not None:
        where = lookup.get_lloc(tree.lexinfo)
        if where is not None:
            parts.append(f"({where})")
    out.write(" ".join(parts) + "\n")
    for child in tree.children:
        print_tree(out, child, symbols, depth + 1)