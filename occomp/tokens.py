"""Token codes shared by the scanner, parser and later passes."""

from __future__ import annotations

from enum import IntEnum


class Token(IntEnum):
    """Multi-character token codes; single characters use their own code."""

    VOID = 258
    INT = 259
    STRING = 260
    IF = 261
    ELSE = 262
    WHILE = 263
    RETURN = 264
    STRUCT = 265
    NULLPTR = 266
    ARRAY = 267
    ARROW = 268
    ALLOC = 269
    PTR = 270
    EQ = 271
    NE = 272
    LT = 273
    LE = 274
    GT = 275
    GE = 276
    NOT = 277
    IDENT = 278
    INTCON = 279
    CHARCON = 280
    STRINGCON = 281
    ROOT = 282
    BLOCK = 283
    CALL = 284
    IFELSE = 285
    INITDECL = 286
    POS = 287
    NEG = 288
    NEWARRAY = 289
    TYPE_ID = 290
    FIELD = 291
    INDEX = 292
    NEWSTRING = 293
    FUNCTION = 294
    PARAM = 295
    VARDECL = 296
    PROTOTYPE = 297


def token_name(symbol: int) -> str:
    """Return the printable name of a token code."""
    try:
        return "TOK_" + Token(symbol).name
    except ValueError:
        pass
    if symbol == 0:
        return "$end"
    if 0 < symbol < 256:
        return f"'{chr(symbol)}'"
    return "$undefined"