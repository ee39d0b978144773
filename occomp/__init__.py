"""Syntax trees, symbol tables, type checking and intermediate code for the oc language."""

__version__ = "0.5.0"

__all__ = ["auxlib", "string_set", "tokens", "astree", "symtable", "emit", "lexer"]