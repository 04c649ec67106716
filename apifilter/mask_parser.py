"""
mask_parser.py

Extended object mask parser. Converts mask text to a list of MaskNode.
No side effects, deterministic output, no state kept between calls.

Accepted forms:

    mask[id, hostname, datacenter[name]]
    mask(SoftLayer_Hardware_Server).bandwidthAllocation
    mask(SoftLayer_Hardware_Server)[a, b]
    [mask[id], mask(SoftLayer_Ticket).status]

Several fragments may be concatenated or comma-separated.
"""

import string
from dataclasses import dataclass
from typing import List, Optional, Tuple

from apifilter.errors import (
    EmptyMaskError,
    MalformedMaskError,
    MissingNameError,
    UnbalancedMaskError,
    UnexpectedMaskTokenError,
)
from apifilter.mask_nodes import MASK_KEYWORD, MaskNode, MaskProperty

SYMBOLS = {
    "[": "LBRACKET",
    "]": "RBRACKET",
    "(": "LPAREN",
    ")": "RPAREN",
    ",": "COMMA",
    ".": "DOT",
}

PAIRS = {"]": "[", ")": "("}

# Names are ASCII only: [A-Za-z_][A-Za-z0-9_]*
IDENT_START = frozenset(string.ascii_letters + "_")
IDENT_CHARS = IDENT_START | frozenset(string.digits)


@dataclass
class Token:
    """A lexical token."""
    type: str
    value: str
    column: int


class MaskLexer:
    """Tokenizes mask text and checks that delimiters are balanced."""

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []
        self._open: List[Tuple[str, int]] = []

    def tokenize(self) -> List[Token]:
        """Convert source to token list."""
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            column = self.pos + 1

            if ch.isspace():
                self.pos += 1
                continue

            if ch in SYMBOLS:
                self._track_delimiter(ch, column)
                self.tokens.append(Token(SYMBOLS[ch], ch, column))
                self.pos += 1
                continue

            if ch in IDENT_START:
                self.tokens.append(self._read_identifier())
                continue

            raise UnexpectedMaskTokenError(ch, self.source, column)

        if self._open:
            delimiter, column = self._open[-1]
            raise UnbalancedMaskError(delimiter, self.source, column)

        self.tokens.append(Token("EOF", "", len(self.source) + 1))
        return self.tokens

    def _track_delimiter(self, ch: str, column: int) -> None:
        if ch in ("[", "("):
            self._open.append((ch, column))
            return

        opening = PAIRS.get(ch)
        if opening is None:
            return

        if not self._open:
            raise UnbalancedMaskError(ch, self.source, column)

        last, last_column = self._open.pop()
        if last != opening:
            raise UnbalancedMaskError(last, self.source, last_column)

    def _read_identifier(self) -> Token:
        start = self.pos
        while self.pos < len(self.source):
            ch = self.source[self.pos]
            if ch in IDENT_CHARS:
                self.pos += 1
            else:
                break
        return Token("IDENT", self.source[start:self.pos], start + 1)


class MaskParser:
    """Parses mask tokens into MaskNode fragments."""

    def __init__(self, tokens: List[Token], source: str = ""):
        self.tokens = tokens
        self.source = source
        self.pos = 0

    def parse(self) -> List[MaskNode]:
        """Parse tokens into a list of top-level fragments."""
        if self._check("LBRACKET"):
            self._advance()
            nodes = self._parse_fragments("RBRACKET")
            self._consume("RBRACKET", "']'")
        else:
            nodes = self._parse_fragments("EOF")

        if not self._check("EOF"):
            self._unexpected("end of mask")

        return nodes

    def _parse_fragments(self, terminator: str) -> List[MaskNode]:
        """Parse fragments until the terminator token."""
        nodes = [self._parse_fragment()]

        while not self._check(terminator):
            if self._check("COMMA"):
                self._advance()
            nodes.append(self._parse_fragment())

        return nodes

    def _parse_fragment(self) -> MaskNode:
        """Parse: mask[...] | mask(Type).prop | mask(Type)[...]"""
        token = self._peek()
        if token.type != "IDENT" or token.value != MASK_KEYWORD:
            self._unexpected(f"'{MASK_KEYWORD}'")
        self._advance()

        type_scope = None
        if self._check("LPAREN"):
            self._advance()
            type_scope = self._parse_name("type")
            self._consume("RPAREN", "')'")

        if self._check("DOT"):
            self._advance()
            return MaskNode(type_scope, (self._parse_property(),))

        if self._check("LBRACKET"):
            self._advance()
            properties = self._parse_property_list()
            self._consume("RBRACKET", "']'")
            return MaskNode(type_scope, properties)

        self._unexpected("'[' or '.'")

    def _parse_property_list(self) -> Tuple[MaskProperty, ...]:
        """Parse comma-separated properties."""
        properties = [self._parse_property()]

        while self._check("COMMA"):
            self._advance()
            properties.append(self._parse_property())

        return tuple(properties)

    def _parse_property(self) -> MaskProperty:
        """Parse: name [ '[' properties ']' ]"""
        name = self._parse_name("property")

        children: Tuple[MaskProperty, ...] = ()
        if self._check("LBRACKET"):
            self._advance()
            children = self._parse_property_list()
            self._consume("RBRACKET", "']'")

        return MaskProperty(name, children)

    # === Helper methods ===

    def _parse_name(self, what: str) -> str:
        if not self._check("IDENT"):
            raise MissingNameError(what, self.source, self._peek().column)
        return self._advance().value

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _check(self, type_: str) -> bool:
        return self.tokens[self.pos].type == type_

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != "EOF":
            self.pos += 1
        return token

    def _consume(self, type_: str, expected: str) -> Token:
        if self._check(type_):
            return self._advance()
        self._unexpected(expected)

    def _unexpected(self, expected: Optional[str] = None):
        token = self._peek()
        found = token.value if token.type != "EOF" else "end of mask"
        raise UnexpectedMaskTokenError(found, self.source, token.column, expected)


def parse_mask(source: str) -> List[MaskNode]:
    """
    Parse an extended object mask into its top-level fragments.

    Args:
        source: Mask text such as ``"mask[id,hostname]"``

    Returns:
        One MaskNode per fragment, in input order

    Raises:
        MalformedMaskError: If the text is empty or not a valid mask
    """
    if not isinstance(source, str):
        raise MalformedMaskError(
            f"Object mask must be a string, got {type(source).__name__}",
            error_code="E100",
        )
    if not source.strip():
        raise EmptyMaskError(source)

    tokens = MaskLexer(source).tokenize()
    return MaskParser(tokens, source).parse()
