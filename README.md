# occomp

`occomp` works on abstract syntax trees for **oc**, a small C-like
teaching language. Given a tree, it builds symbol tables, does simple
type checking of expressions, and writes the listings a course compiler
produces: the symbol listing, the annotated tree listing, the token
trace, the string table and intermediate code (`.oil` style).

## Modules

| Module               | Contents |
|----------------------|----------|
| `occomp.auxlib`      | `Reporter`: writes messages to a stream (standard error by default), replaces a leading `%:` with the program name, sets a failure `exit_status` on `error`, and handles debug flags (`set_debugflags`, `is_debugflag`, `debug`; the flag `@` turns on every flag). `format_wait_status` describes a `wait(2)` status (exit code, terminating or stopping signal, core dump). |
| `occomp.string_set`  | `StringSet`: interns strings and `dump`s them grouped by hash bucket, followed by load factor, bucket count and largest bucket size. |
| `occomp.tokens`      | `Token`: the token codes of the oc grammar; `token_name` gives `TOK_...` names, `'c'` for single characters and `$end` for 0. |
| `occomp.astree`      | `Attr` attribute flags and `attr_name`; `Location`; `AstNode` with `adopt`, `adopt_sym`, `change_sym`, `dump_node` and `dump_tree`; `is_expr`, `set_attribute`, and `print_tree`, which writes the annotated tree listing. |
| `occomp.symtable`    | `Symbol`, `to_attr` and `SymbolTables`: `traverse` walks a tree, records structs, functions, parameters, global and local variables, writes the symbol listing and type-checks expressions (`typecheck`, `check_binary`, `check_equality`, `find_type`). `get_type` and `get_lloc` look a name up locally, then globally. `dump_tables` writes every table. |
| `occomp.emit`        | `Emitter`: `emit` walks a tree and writes intermediate code for structs, functions, parameters, locals, globals, `if`/`while`, calls, assignments and expressions. |
| `occomp.lexer`       | `Lexer`: the bookkeeping side of a scanner. It tracks file, line and column (`advance`, `newline`), handles `# N "file"` line markers (`include`), builds `AstNode` leaves and writes the token trace (`token`, `badtoken`), and reports located errors (`badchar`, `syntax_error`, `located_error`). |

## Example

```python
import io

from occomp.astree import AstNode, Location, print_tree
from occomp.emit import Emitter
from occomp.symtable import SymbolTables
from occomp.tokens import Token

loc = Location(0, 1, 0)
decl = AstNode(Token.VARDECL, loc, "=").adopt(
    AstNode(Token.INT, loc, "int"),
    AstNode(Token.IDENT, loc, "x"),
    AstNode(Token.INTCON, loc, "5"),
)
root = AstNode(Token.ROOT, loc, "").adopt(decl)

symbols = SymbolTables()
sym_out = io.StringIO()
symbols.traverse(sym_out, root)

ast_out = io.StringIO()
print_tree(ast_out, root, symbols)

oil_out = io.StringIO()
Emitter(oil_out).emit(root)
print(oil_out.getvalue())   # "          x:.global int 5"
```

## Intermediate code conventions

* Instructions are indented by ten spaces. A label is written as
  `name:` followed by five spaces, and the next instruction follows on
  the same line; a label directly followed by another label gets a line
  break between them.
* Temporaries are written `$tN:i` for integers and `$tN:p` for
  pointers.
* `if` statements use `.ifN`, `.thN`, `.elN` and `.fiN` labels;
  `while` loops use `.whN`, `.doN` and `.odN`.
* Global string variables are written as `.sN:"..."`.
* Field accesses are written `ptr->struct.field`. The struct name comes
  from the declaration of the pointer variable, and is `null` when it is
  not known.

## What the package does not do

* It has no command-line program; everything is used from Python.
* It does not read oc source text. There is no scanner that splits text
  into tokens and no parser that builds trees: `Lexer` only keeps
  locations and the token trace for tokens handed to it, and trees are
  built by calling `AstNode` and `adopt` directly.
* It does not run a C preprocessor over input files.

## Running the tests

Install the package with its `test` extra, then run `pytest` from the
project directory.