"""
Best-effort repair of truncated or slightly malformed JSON responses.

The generator sometimes stops at its length limit or wraps the payload in a
code fence. The repairer makes a single pass over the text tracking string
and escape state plus the open objects/arrays, then closes whatever is
still open. It does not validate: its output always goes through a strict
JSON parser afterwards.
"""

import re
from typing import List

_FENCE_OPEN = re.compile(r"^\s*```[A-Za-z0-9_+-]*[ \t]*\n?")
_FENCE_CLOSE = "```"
_TRAILING_COMMA = re.compile(r",\s*$")


def strip_wrapping(text: str) -> str:
    """
    Remove code-fence markers and any prose before the first `{`.

    Everything from a closing ``` onwards is dropped as well. Backticks inside
    string values are content, not a fence.
    """
    text = _FENCE_OPEN.sub("", text.strip(), count=1)
    start = text.find("{")
    if start > 0:
        text = text[start:]
    fence_end = _find_closing_fence(text)
    if fence_end != -1:
        text = text[:fence_end]
    return text.strip()


def _find_closing_fence(text: str) -> int:
    """Index of the first ``` outside a string, or -1."""
    in_string = False
    escape_next = False
    for i, char in enumerate(text):
        if escape_next:
            escape_next = False
        elif char == "\\":
            escape_next = in_string
        elif char == '"':
            in_string = not in_string
        elif not in_string and text.startswith(_FENCE_CLOSE, i):
            return i
    return -1


def _strip_trailing_comma(text: str) -> str:
    return _TRAILING_COMMA.sub("", text)


def _strip_dangling_commas(text: str) -> str:
    """Drop commas directly followed (after whitespace) by } or ], outside strings."""
    out: List[str] = []
    in_string = False
    escape_next = False
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if escape_next:
            escape_next = False
        elif char == "\\":
            escape_next = True
        elif char == '"':
            in_string = not in_string
        elif char == "," and not in_string:
            j = i + 1
            while j < length and text[j].isspace():
                j += 1
            if j < length and text[j] in "}]":
                i += 1
                continue
        out.append(char)
        i += 1
    return "".join(out)


class ResponseRepairer:
    """
    Closes unterminated strings and unbalanced braces/brackets.

    Scan state: inside-string flag, escape-next flag, and the positions of
    unmatched `{` and `[` openers. The most recently opened structure is
    closed first.
    """

    def repair(self, text: str) -> str:
        """
        Repair a generation response.

        Args:
            text: Raw response text, possibly fenced, prefixed with prose,
                or cut off mid-structure

        Returns:
            Text with strings and structures closed; feed it to a strict parser
        """
        text = strip_wrapping(text)

        in_string = False
        escape_next = False
        open_braces: List[int] = []
        open_brackets: List[int] = []

        for position, char in enumerate(text):
            if escape_next:
                escape_next = False
                continue
            if char == "\\":
                escape_next = True
                continue
            if char == '"':
                in_string = not in_string
                continue
            if in_string:
                continue
            if char == "{":
                open_braces.append(position)
            elif char == "[":
                open_brackets.append(position)
            elif char == "}" and open_braces:
                open_braces.pop()
            elif char == "]" and open_brackets:
                open_brackets.pop()

        if in_string:
            if escape_next:
                # a lone trailing backslash would escape the closing quote
                text = text[:-1]
            text += '"'

        text = _strip_trailing_comma(text)

        while open_braces or open_brackets:
            last_brace = open_braces[-1] if open_braces else -1
            last_bracket = open_brackets[-1] if open_brackets else -1
            if last_brace > last_bracket:
                open_braces.pop()
                closer = "}"
            else:
                open_brackets.pop()
                closer = "]"
            text = _strip_trailing_comma(text) + closer

        return _strip_dangling_commas(text)


def repair_json(text: str) -> str:
    """Module-level shortcut for ResponseRepairer().repair."""
    return ResponseRepairer().repair(text)
