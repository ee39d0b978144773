import io

import pytest

from occomp.astree import AstNode, Attr, Location, attr_name
from occomp.symtable import Symbol, SymbolTables, to_attr
from occomp.tokens import Token


def node(symbol, lexinfo, *children, loc=(0, 1, 0)):
    tree = AstNode(symbol, Location(*loc), lexinfo)
    tree.adopt(*children)
    return tree


def int_function(name="f", param="a", local="b", loc=(0, 1, 0)):
    return node(
        Token.FUNCTION,
        "",
        node(Token.TYPE_ID, "", node(Token.INT, "int"), node(Token.IDENT, name)),
        node(
            Token.PARAM,
            "(",
            node(
                Token.TYPE_ID,
                "",
                node(Token.INT, "int"),
                node(Token.IDENT, param),
                loc=(0, 1, 5),
            ),
        ),
        node(
            Token.BLOCK,
            "{",
            node(
                Token.VARDECL,
                "=",
                node(Token.INT, "int"),
                node(Token.IDENT, local),
                node(Token.INTCON, "1"),
                loc=(0, 2, 3),
            ),
        ),
        loc=loc,
    )


@pytest.mark.parametrize("attribute", [a for a in Attr])
def test_to_attr_round_trip(attribute):
    assert to_attr(attr_name(attribute)) == attribute


def test_to_attr_unknown_is_null():
    assert to_attr("bogus") == Attr.NULLPTR_T


def test_symbol_defaults():
    sym = Symbol()
    assert sym.type == Attr.VOID
    assert sym.attributes == set()
    assert sym.fields is None and sym.parameters is None


def test_function_listing():
    tables = SymbolTables()
    out = io.StringIO()
    tables.traverse(out, node(Token.ROOT, "", int_function()))
    assert out.getvalue() == (
        "f (0.1.0) {0} int function\n"
        "   a (0.1.5) {1} int variable param lval 0\n"
        "   b (0.2.3) {1} int variable local lval 0\n"
    )


def test_function_tables():
    tables = SymbolTables()
    tables.traverse(io.StringIO(), int_function())
    func = tables.fn_table["f"]
    assert Attr.FUNCTION in func.attributes
    assert func.block_nr == 0
    assert len(func.parameters) == 1
    assert tables.global_block_count == 1
    assert tables.next_block == 1
    assert tables.get_type("a") == Attr.INT
    assert tables.get_type("b") == Attr.INT
    assert tables.get_lloc("b") == Location(0, 2, 3)
    assert tables.ident_table_local["a"].block_nr == 1


def test_second_function_starts_with_blank_line():
    tables = SymbolTables()
    out = io.StringIO()
    tables.traverse(out, node(Token.ROOT, "", int_function(), int_function("g")))
    assert "\ng (" in out.getvalue()
    assert tables.fn_table["g"].block_nr == 1
    assert tables.global_block_count == 2


def test_unknown_name_lookup():
    tables = SymbolTables()
    assert tables.get_type("nowhere") == Attr.NULLPTR_T
    assert tables.get_lloc("nowhere") is None


def test_global_vardecl_listing():
    tables = SymbolTables()
    out = io.StringIO()
    decl = node(
        Token.VARDECL,
        "=",
        node(Token.INT, "int", loc=(0, 4, 0)),
        node(Token.IDENT, "x"),
        node(Token.INTCON, "5"),
    )
    tables.traverse(out, decl)
    assert out.getvalue() == "\nx (0.4.0)  int variable lval 0\n"
    assert tables.ident_table_global["int"].lloc == Location(0, 4, 0)


def test_struct_listing_and_fields():
    tables = SymbolTables()
    out = io.StringIO()
    name = node(Token.IDENT, "node")
    struct = node(
        Token.STRUCT,
        "struct",
        name,
        node(Token.INT, "int", node(Token.IDENT, "value"), loc=(0, 2, 4)),
        node(
            Token.PTR,
            "ptr",
            node(Token.TYPE_ID, "node"),
            node(Token.IDENT, "next"),
            loc=(0, 3, 4),
        ),
    )
    tables.traverse(out, struct)
    text = out.getvalue()
    assert text.startswith("\nnode (0.1.0) {0} struct node\n")
    assert "   value (0.2.4)  int field 0\n" in text
    assert "<struct node> field 1" in text
    entry = tables.struct_table["node"]
    assert Attr.STRUCT in entry.attributes
    assert set(entry.fields) == {"int", "ptr"}
    assert entry.fields["ptr"].sequence == 1
    assert name.struct_id == "node"


def test_local_ptr_and_array_types():
    tables = SymbolTables(io.StringIO())
    block = node(
        Token.BLOCK,
        "{",
        node(
            Token.VARDECL,
            "=",
            node(Token.PTR, "ptr", node(Token.TYPE_ID, "node")),
            node(Token.IDENT, "p"),
        ),
        node(
            Token.VARDECL,
            "=",
            node(Token.ARRAY, "array", node(Token.STRING, "string")),
            node(Token.IDENT, "arr"),
        ),
    )
    tables.traverse_block(block, 1)
    assert tables.get_type("p") == Attr.STRUCT
    assert tables.get_type("arr") == Attr.STRING
    assert tables.ident_table_local["arr"].sequence == 1
    assert "<struct node>" in tables.out.getvalue()
    assert "array <string>" in tables.out.getvalue()


def test_first_declaration_is_kept():
    tables = SymbolTables(io.StringIO())
    block = node(
        Token.BLOCK,
        "{",
        node(Token.VARDECL, "=", node(Token.INT, "int"), node(Token.IDENT, "v"),
             loc=(0, 1, 1)),
        node(Token.VARDECL, "=", node(Token.STRING, "string"),
             node(Token.IDENT, "v"), loc=(0, 9, 1)),
    )
    tables.traverse_block(block, 1)
    assert tables.get_lloc("v") == Location(0, 1, 1)
    assert tables.get_type("v") == Attr.INT


def test_binary_int_operands():
    tables = SymbolTables()
    plus = node(ord("+"), "+", node(Token.INTCON, "1"), node(Token.INTCON, "2"))
    assert tables.typecheck(plus) is True
    assert plus.type == attr_name(Attr.INT)


def test_binary_mismatch_fails():
    tables = SymbolTables()
    plus = node(ord("+"), "+", node(Token.INTCON, "1"), node(Token.STRINGCON, "s"))
    assert tables.typecheck(plus) is False
    assert plus.type is None


def test_binary_single_operand_fails():
    tables = SymbolTables()
    assert tables.check_binary(node(ord("-"), "-", node(Token.INTCON, "1"))) is False


def test_nested_binary():
    tables = SymbolTables()
    inner = node(ord("*"), "*", node(Token.INTCON, "2"), node(Token.INTCON, "3"))
    outer = node(ord("+"), "+", node(Token.INTCON, "1"), inner)
    assert tables.typecheck(outer) is True
    assert inner.type == outer.type == attr_name(Attr.INT)


def test_equality_with_null_takes_other_type():
    tables = SymbolTables()
    eq = node(Token.EQ, "==", node(Token.NULLPTR, "nullptr"),
              node(Token.STRINGCON, "s"))
    assert tables.typecheck(eq) is True
    assert eq.type == attr_name(Attr.STRING)


def test_equality_mismatch_fails():
    tables = SymbolTables()
    ne = node(Token.NE, "!=", node(Token.INTCON, "1"), node(Token.STRINGCON, "s"))
    assert tables.check_equality(ne) is False


def test_not_and_semicolon_and_call():
    tables = SymbolTables()
    assert tables.typecheck(node(Token.NOT, "not", node(Token.INTCON, "0"))) is True
    assert tables.typecheck(node(Token.NOT, "not", node(Token.STRINGCON, "s"))) is False
    assert tables.typecheck(node(ord(";"), ";")) is True
    assert tables.typecheck(node(Token.CALL, "(")) is False


def test_conditionals():
    tables = SymbolTables()
    cond = node(Token.EQ, "==", node(Token.INTCON, "1"), node(Token.INTCON, "1"))
    good = node(Token.IFELSE, "if", cond, node(Token.BLOCK, "{"), node(ord(";"), ";"))
    assert tables.typecheck(good) is True
    short = node(Token.WHILE, "while", cond, node(Token.BLOCK, "{"))
    assert tables.typecheck(short) is False


def test_find_type_index_and_arrow():
    tables = SymbolTables()
    index = node(Token.INDEX, "[", node(Token.STRINGCON, "s"), node(Token.INTCON, "0"))
    arrow = node(Token.ARROW, "->", node(Token.IDENT, "p"), node(Token.INTCON, "1"))
    assert tables.find_type(index) == Attr.STRING
    assert tables.find_type(arrow) == Attr.INT
    assert tables.find_type(node(Token.CALL, "(")) == Attr.NULLPTR_T


def test_traverse_none_writes_nothing():
    tables = SymbolTables()
    out = io.StringIO()
    tables.traverse(out, None)
    assert out.getvalue() == ""


def test_traverse_ident_notes_on_stdout(capsys):
    tables = SymbolTables()
    tables.traverse(io.StringIO(), node(Token.IDENT, "x"))
    assert capsys.readouterr().out == "We don't need TOK_IDENT"


def test_dump_tables():
    tables = SymbolTables()
    tables.traverse(io.StringIO(), int_function())
    out = io.StringIO()
    tables.dump_tables(out)
    text = out.getvalue()
    for title in ("struct_table", "fn_table", "ident_table_global",
                  "ident_table_local"):
        assert f"---- Printing {title} ----" in text
    assert "name: f" in text
    assert "| type: int" in text