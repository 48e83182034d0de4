"""
Shell-style tokenizing of flag strings such as CPPFLAGS and LDFLAGS.
"""

from typing import List

ESCAPE_CHAR = "\\"
QUOTE_CHAR = '"'
SPLIT_CHAR = " "


def shell_split(line: str) -> List[str]:
    """
    Split a command line the way a shell would, for the simple cases.

    A backslash makes the next character literal, double quotes protect
    spaces, empty tokens are dropped and tokens wrapped in a pair of double
    quotes are unwrapped.

    Example:
        >>> shell_split('-a "b c" -d\\\\ e')
        ['-a', 'b c', '-d e']
    """
    tokens = []
    current: List[str] = []
    in_string = False
    escaped = False

    for char in line:
        if escaped:
            current.append(char)
            escaped = False
        elif char == ESCAPE_CHAR:
            escaped = True
        elif char == SPLIT_CHAR and not in_string:
            tokens.append("".join(current))
            current = []
        else:
            if char == QUOTE_CHAR:
                in_string = not in_string
            current.append(char)
    tokens.append("".join(current))

    return [_unquote(token) for token in tokens if token]


def _unquote(token: str) -> str:
    if len(token) >= 2 and token.startswith(QUOTE_CHAR) and token.endswith(QUOTE_CHAR):
        return token[1:-1]
    return token


__all__ = ["ESCAPE_CHAR", "QUOTE_CHAR", "SPLIT_CHAR", "shell_split"]
