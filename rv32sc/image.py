"""Program image loading.

Images use the plain hex format understood by Verilog's ``$readmemh``: one
word per whitespace-separated token, ``//`` line comments and ``/* */`` block
comments, and ``@addr`` directives that move the load point. Addresses in
``@`` directives are word indices, not byte addresses.

A bad image is refused outright, with the line it went wrong on, rather than
being loaded partially.
"""

import logging
import re

from rv32sc.isa import NOP


__all__ = ["ImageError", "parse_hex", "read_hex"]


logger = logging.getLogger(__name__)


_HEX_TOKEN = re.compile(r"[0-9a-fA-F][0-9a-fA-F_]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


class ImageError(ValueError):
    def __init__(self, message, *, line = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


def parse_hex(text, *, depth = None):
    """Parse a hex image and return its words, starting at word 0.

    Slots skipped over by an ``@`` directive are filled with NOP. If ``depth``
    is given, any word that would land at or past it is an error.
    """
    # Keep the newlines inside block comments so line numbers stay right.
    text = _BLOCK_COMMENT.sub(lambda match: "\n" * match.group(0).count("\n"), text)
    if "/*" in text:
        line = text[:text.index("/*")].count("\n") + 1
        raise ImageError("unterminated block comment", line = line)

    words = []
    index = 0
    for line, content in enumerate(text.splitlines(), start = 1):
        content = content.split("//", 1)[0]
        for token in content.split():
            if token.startswith("@"):
                if not _HEX_TOKEN.fullmatch(token[1:]):
                    raise ImageError(f"malformed address directive {token!r}", line = line)
                index = int(token[1:].replace("_", ""), 16)
                logger.debug("line %d: load address now word %#x", line, index)
                continue

            if not _HEX_TOKEN.fullmatch(token):
                raise ImageError(f"{token!r} is not a hex value", line = line)
            value = int(token.replace("_", ""), 16)
            if value >> 32:
                raise ImageError(f"{token!r} does not fit in 32 bits", line = line)
            if depth is not None and index >= depth:
                raise ImageError(f"word {index:#x} is past the end of a {depth}-word memory",
                                 line = line)

            if index >= len(words):
                words.extend([NOP] * (index + 1 - len(words)))
            words[index] = value
            index += 1

    logger.debug("loaded %d words", len(words))
    return words


def read_hex(path, *, depth = None):
    with open(path) as f:
        return parse_hex(f.read(), depth = depth)
