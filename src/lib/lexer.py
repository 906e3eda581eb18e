"""
JavaScript source scanner built on the Pygments JavaScript lexer

Plugin behavior sources are analysed, never executed. Method bodies are
located by matching braces, and a brace (or a method-looking line) that
sits inside a string, template or comment literal must not count. The
Pygments lexer already knows where those literals are, so the scanner
keeps its token stream and answers two questions against it:

- is this offset inside a literal?
- where is the brace that closes the one at this offset?

Token types used:
- String.* (including String.Regex and template text): literal
- Comment.*: literal
- Punctuation: structural braces
- String.Interpol: `${` / `}` of a template interpolation, balanced by the
  lexer itself and ignored here
"""

import re
from bisect import bisect_right
from typing import Iterator, List, Optional, Pattern, Tuple

from pygments.lexers.javascript import JavascriptLexer
from pygments.token import Comment, Punctuation, String

Span = Tuple[int, int]


class JsScanner:
    """
    Token-aware view over one JavaScript source text

    Attributes:
        text: Source text
        tokens: (offset, token type, value) triples from the lexer
        literal_spans: Sorted, merged (start, end) ranges of string and
                       comment literals
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = list(JavascriptLexer().get_tokens_unprocessed(text))
        self.literal_spans = self.literalSpans_collect()
        self._span_starts = [start for start, _ in self.literal_spans]

    def literalSpans_collect(self) -> List[Span]:
        spans: List[Span] = []
        for offset, ttype, value in self.tokens:
            if not value:
                continue
            if ttype in String.Interpol:
                continue
            if ttype not in String and ttype not in Comment:
                continue
            end = offset + len(value)
            if spans and spans[-1][1] >= offset:
                spans[-1] = (spans[-1][0], max(spans[-1][1], end))
            else:
                spans.append((offset, end))
        return spans

    def literal_is(self, offset: int) -> bool:
        """True if offset falls inside a string, template or comment literal"""
        index = bisect_right(self._span_starts, offset) - 1
        if index < 0:
            return False
        start, end = self.literal_spans[index]
        return start <= offset < end

    def matches_inCode(self, pattern: Pattern, group: int = 0) -> Iterator[re.Match]:
        """Matches of pattern whose `group` starts outside any literal"""
        for match in pattern.finditer(self.text):
            if not self.literal_is(match.start(group)):
                yield match

    def brace_findOpening(self, start: int) -> Optional[int]:
        """Offset of the first structural `{` at or after start"""
        for offset, ttype, value in self.tokens:
            if offset + len(value) <= start or ttype not in Punctuation:
                continue
            for i, char in enumerate(value):
                if char == '{' and offset + i >= start:
                    return offset + i
        return None

    def brace_findMatching(self, open_offset: int) -> Optional[int]:
        """
        Offset of the `}` closing the structural `{` at open_offset

        Returns:
            Offset of the closing brace, or None if open_offset is not a
            structural opening brace or the braces never balance
        """
        if open_offset >= len(self.text) or self.text[open_offset] != '{':
            return None
        if self.literal_is(open_offset):
            return None

        depth = 0
        for offset, ttype, value in self.tokens:
            if offset + len(value) <= open_offset or ttype not in Punctuation:
                continue
            if ttype in String.Interpol:
                continue
            for i, char in enumerate(value):
                position = offset + i
                if position < open_offset:
                    continue
                if char == '{':
                    depth += 1
                elif char == '}':
                    depth -= 1
                    if depth == 0:
                        return position
        return None

    def block_extract(self, start: int) -> Optional[Span]:
        """
        Span (inclusive of both braces) of the first block opening at or after start

        Example:
            >>> scanner = JsScanner("onClick() { const s = '}'; }")
            >>> span = scanner.block_extract(0)
            >>> scanner.text[span[0]:span[1]]
            "{ const s = '}'; }"
        """
        opening = self.brace_findOpening(start)
        if opening is None:
            return None
        closing = self.brace_findMatching(opening)
        if closing is None:
            return None
        return (opening, closing + 1)
