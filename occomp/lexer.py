"""Scanner bookkeeping: source locations, file names and the token log."""

from __future__ import annotations

import re
import sys
from dataclasses import replace
from typing import TextIO

from .astree import AstNode, Location
from .auxlib import Reporter
from .string_set import StringSet
from .tokens import token_name

_DIRECTIVE = re.compile(r'#\s*(\d{1,2})\s*"([^"]+)')


class Lexer:
    """Tracks where the scanner is and records each token it produces."""

    def __init__(
        self,
        reporter: Reporter | None = None,
        tok_out: TextIO | None = None,
        echo: TextIO | None = None,
        interactive: bool = True,
        strings: StringSet | None = None,
    ) -> None:
        self.reporter = reporter if reporter is not None else Reporter()
        self.tok_out = tok_out
        self.echo = echo
        self.interactive = interactive
        self.strings = strings
        self.flex_debug = False
        self.lloc = Location(0, 1, 0)
        self.last_yyleng = 0
        self.filenames: list[str] = []

    def newfilename(self, filename: str) -> None:
        self.lloc = replace(self.lloc, filenr=len(self.filenames))
        self.filenames.append(filename)

    def filename(self, filenr: int) -> str:
        return self.filenames[filenr]

    def advance(self, text: str) -> None:
        """Move past the previous lexeme and remember the length of this one."""
        if not self.interactive:
            echo = self.echo if self.echo is not None else sys.stdout
            if self.lloc.offset == 0:
                echo.write(f";{self.lloc.filenr:2d}.{self.lloc.linenr:3d}: ")
            echo.write(text)
        self.lloc = replace(self.lloc, offset=self.lloc.offset + self.last_yyleng)
        self.last_yyleng = len(text)

    def newline(self) -> None:
        self.lloc = replace(self.lloc, linenr=self.lloc.linenr + 1, offset=0)

    def located_error(self, location: Location, message: str) -> None:
        """Report an error prefixed by the file name and position."""
        self.reporter.error(
            f"{self.filename(location.filenr)}:{location.linenr}."
            f"{location.offset}: {message}"
        )

    def badchar(self, bad: int | str) -> None:
        code = (ord(bad) if isinstance(bad, str) else bad) & 0xFF
        shown = chr(code) if 33 <= code <= 126 else f"\\{code:03o}"
        self.located_error(self.lloc, f"invalid source character ({shown})\n")

    def include(self, text: str) -> None:
        """Handle a preprocessor line marker such as '# 1 "file.oc"'."""
        match = _DIRECTIVE.match(text)
        if match is None:
            self.reporter.error(f"{text}: invalid directive, ignored\n")
            return
        linenr = int(match.group(1))
        filename = match.group(2)
        if self.flex_debug:
            self.reporter.stream.write(f'--included # {linenr} "{filename}"\n')
        if self.tok_out is not None:
            self.tok_out.write(f'# {linenr:2d} "{filename}"\n')
        self.lloc = replace(self.lloc, linenr=linenr - 1)
        self.newfilename(filename)

    def token(self, symbol: int, text: str) -> AstNode:
        """Build the tree node for a token and log it to the token file."""
        leaf = AstNode(symbol, self.lloc, text, self.strings)
        if self.tok_out is not None:
            loc = self.lloc
            self.tok_out.write(
                f"{loc.filenr:4d} {loc.linenr}.{loc.offset:05d} {symbol:3d} "
                f"{token_name(symbol):<13s} {text}\n"
            )
        return leaf

    def badtoken(self, symbol: int, text: str) -> AstNode:
        self.located_error(self.lloc, f"invalid token ({text})\n")
        return self.token(symbol, text)

    def syntax_error(self, message: str) -> None:
        if not self.filenames:
            raise RuntimeError("syntax error reported before any input file")
        self.located_error(self.lloc, f"{message}\n")