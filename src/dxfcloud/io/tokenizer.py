"""Tokenizer turning the lines of an ASCII DXF file into group code/value pairs.

The DXF text format stores every value on its own line, preceded by a line
with the group code that identifies it. :func:`tokenize` pairs the lines up
lazily and :class:`TokenCursor` hands the resulting tokens to the parsers,
with a single slot to give a token back to an enclosing loop.
"""

import logging
from collections.abc import Iterable, Iterator

from ..models import Token

log = logging.getLogger(__name__)


def tokenize(lines: Iterable[str]) -> Iterator[tuple[str, str]]:
    """Pair up code and value lines.

    Parameters
    ----------
    lines : Iterable[str]
        Lines of the DXF file, with or without line endings

    Yields
    ------
    tuple[str, str]
        Trimmed (code line, value line) pairs. A code line without a following
        value line is paired with an empty string.
    """
    line_iter = iter(lines)
    for code_line in line_iter:
        value_line = next(line_iter, None)
        if value_line is None:
            log.debug(f"Group code '{code_line.strip()}' has no value line, using empty value")
            yield code_line.strip(), ""
            return
        yield code_line.strip(), value_line.strip()


def parse_code(code_line: str) -> int | None:
    """Parse a group code line, None if it is not an integer."""
    try:
        return int(code_line)
    except ValueError:
        return None


class TokenCursor:
    """Forward-only cursor over the tokens of one DXF stream.

    The cursor is single-use. :meth:`unread` gives back one token so that the
    next call to :meth:`next` returns it again.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]]) -> None:
        self._pairs = iter(pairs)
        self._pushed_back: Token | None = None
        self._exhausted = False
        self.consumed = 0
        self.has_content = False

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "TokenCursor":
        return cls(tokenize(lines))

    @property
    def exhausted(self) -> bool:
        """Check if no token is left, including a pushed back one."""
        return self._exhausted and self._pushed_back is None

    def next(self) -> Token | None:
        """Get the next token, None when the stream is exhausted."""
        if self._pushed_back is not None:
            token = self._pushed_back
            self._pushed_back = None
            return token
        if self._exhausted:
            return None
        pair = next(self._pairs, None)
        if pair is None:
            self._exhausted = True
            log.debug(f"Token stream exhausted after {self.consumed} tokens")
            return None
        code_line, value = pair
        self.consumed += 1
        if code_line or value:
            self.has_content = True
        return Token(code=parse_code(code_line), value=value)

    def unread(self, token: Token) -> None:
        """Give a token back to the cursor.

        Raises
        ------
        RuntimeError
            If a token was already given back and not read again
        """
        if self._pushed_back is not None:
            raise RuntimeError("Only one token can be unread at a time.")
        self._pushed_back = token

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next()
            if token is None:
                return
            yield token
