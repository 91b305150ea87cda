"""Static scanner for controller source files.

Extracts the behaviors a controller implements and the literal values of
its class-level string properties without executing or fully parsing the
source. The scanner tokenizes the text (so comments and string contents
never produce matches) and then recognizes exactly one shape:

    <modifiers> [type] $name = <value> [, $other = <value>] ;

at class-body level. Anything outside that shape is reported as "no value".
Declaration styles it does not recognize are false negatives, never guesses.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from constants import IMPLEMENT_PROPERTY
from errors import NoBehaviorsDeclared

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Token:
    """A significant source token (whitespace and comments are dropped)."""

    kind: str  # string, variable, name, number, heredoc, punct
    text: str
    pos: int

    def is_punct(self, *values: str) -> bool:
        return self.kind == "punct" and self.text in values

    def is_keyword(self, *values: str) -> bool:
        return self.kind == "name" and self.text.lower() in values


_IDENT = r"[^\W\d]\w*"

_TOKEN_PATTERN = re.compile(
    "|".join([
        r"(?P<close_tag>\?>)",
        r"(?P<comment>//[^\n]*|#(?!\[)[^\n]*|/\*.*?(?:\*/|\Z))",
        r"(?P<heredoc><<<[ \t]*(?P<hq>['\"]?)(?P<hid>[A-Za-z_]\w*)(?P=hq)\r?\n.*?^[ \t]*(?P=hid)\b)",
        r"(?P<string>'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\")",
        rf"(?P<variable>\${_IDENT})",
        rf"(?P<name>\\?{_IDENT}(?:\\{_IDENT})*)",
        r"(?P<number>\d[\w.]*)",
        r"(?P<whitespace>\s+)",
        r"(?P<punct>\?->|::|->|=>|\?\?=?|#\[|\S)",
    ]),
    re.DOTALL | re.MULTILINE,
)

_OPEN_TAG = re.compile(r"<\?(?:php\b|=)?", re.IGNORECASE)

_CLASS_NAME = re.compile(rf"^{_IDENT}(?:\\{_IDENT})*$")

# Keywords that may start a class-level property declaration
PROPERTY_MODIFIERS = {"public", "protected", "private", "var", "static", "readonly"}

# Tokens after which a new class-body statement can start
_STATEMENT_BOUNDARY = {";", "{", "}", "]"}

_CLASS_KEYWORDS = {"class", "trait", "interface", "enum"}

_UNRESOLVABLE = {"self", "static", "parent"}

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = {")", "]", "}"}

_DOUBLE_QUOTE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}


def tokenize(source: str) -> list[Token]:
    """Split PHP source into significant tokens.

    Text outside <?php ... ?> blocks is skipped. Source without any open
    tag is treated as code.
    """
    tokens: list[Token] = []
    in_code = _OPEN_TAG.search(source) is None
    pos = 0
    length = len(source)

    while pos < length:
        if not in_code:
            match = _OPEN_TAG.search(source, pos)
            if match is None:
                break
            pos = match.end()
            in_code = True
            continue

        match = _TOKEN_PATTERN.match(source, pos)
        if match is None:
            # Only reachable on a lone character the pattern rejects
            pos += 1
            continue

        kind = match.lastgroup
        if kind in ("hq", "hid"):
            kind = "heredoc"
        pos = match.end()

        if kind == "close_tag":
            in_code = False
            tokens.append(Token("punct", ";", match.start()))
        elif kind in ("comment", "whitespace"):
            continue
        else:
            tokens.append(Token(kind, match.group(), match.start()))

    return tokens


def unescape_string_literal(literal: str) -> str | None:
    """Return the value of a quoted PHP string literal.

    Returns None for double-quoted strings that interpolate variables,
    since their value is not known statically.
    """
    quote, body = literal[0], literal[1:-1]
    if quote == "'":
        return re.sub(r"\\([\\'])", r"\1", body)
    return _unescape_double_quoted(body)


def _unescape_double_quoted(body: str) -> str | None:
    result = []
    i = 0
    while i < len(body):
        char = body[i]
        nxt = body[i + 1] if i + 1 < len(body) else ""

        if char == "$" and (nxt == "{" or nxt == "_" or nxt.isalpha()):
            return None
        if char == "{" and nxt == "$":
            return None
        if char != "\\" or not nxt:
            result.append(char)
            i += 1
            continue

        if nxt in _DOUBLE_QUOTE_ESCAPES:
            result.append(_DOUBLE_QUOTE_ESCAPES[nxt])
            i += 2
            continue

        octal = re.match(r"[0-7]{1,3}", body[i + 1:])
        if octal:
            result.append(chr(int(octal.group(), 8) & 0xFF))
            i += 1 + len(octal.group())
            continue

        hexa = re.match(r"x([0-9A-Fa-f]{1,2})", body[i + 1:])
        if hexa:
            result.append(chr(int(hexa.group(1), 16)))
            i += 1 + len(hexa.group())
            continue

        codepoint = re.match(r"u\{([0-9A-Fa-f]+)\}", body[i + 1:])
        if codepoint:
            result.append(chr(int(codepoint.group(1), 16)))
            i += 1 + len(codepoint.group())
            continue

        # Unknown escape: PHP keeps the backslash
        result.append(char)
        i += 1

    return "".join(result)


def normalize_class_name(name: str) -> str:
    """Normalize a class reference string to Backslash\\Separated\\Form.

    Accepts dotted notation ("Backend.Behaviors.ListController") and a
    leading backslash.
    """
    return name.strip().replace(".", "\\").lstrip("\\")


class SourceScanner:
    """Extracts behavior and property information from controller source."""

    def __init__(self, source: str):
        self.source = source
        self.namespace = ""
        self._tokens = tokenize(source)
        self._imports: dict[str, str] = {}
        self._properties: dict[str, list[Token]] = {}
        self._analyse()

    def list_behaviors(self) -> list[str]:
        """Return the fully-qualified behaviors listed in $implement.

        Order follows the declaration; duplicates keep their first position.

        Raises:
            NoBehaviorsDeclared: If $implement is absent, empty or unreadable.
        """
        value = self._properties.get(IMPLEMENT_PROPERTY)
        elements = _array_elements(value) if value else None
        if elements is None:
            raise NoBehaviorsDeclared("The controller does not declare any behaviors")

        behaviors: list[str] = []
        for element in elements:
            behavior = self._element_class_name(element)
            if behavior is None:
                log.debug(f"Skipping unrecognized $implement element at offset {element[0].pos}")
                continue
            if behavior not in behaviors:
                behaviors.append(behavior)

        if not behaviors:
            raise NoBehaviorsDeclared("The controller does not declare any behaviors")
        return behaviors

    def get_string_property_value(self, property_name: str) -> str:
        """Return the literal string assigned to a class property.

        Returns "" when the property is absent or its value is anything but
        a single quoted string literal without interpolation.
        """
        value = self._properties.get(property_name.lstrip("$"))
        if not value or len(value) != 1 or value[0].kind != "string":
            return ""
        return unescape_string_literal(value[0].text) or ""

    def list_imports(self) -> dict[str, str]:
        """Return the file's use-imports as {alias: fully.qualified\\Name}."""
        return dict(self._imports)

    def resolve_class_name(self, name: str) -> str | None:
        """Resolve a class reference the way PHP does at compile time."""
        if name.startswith("\\"):
            return name[1:]

        first, _, rest = name.partition("\\")
        if not rest and first.lower() in _UNRESOLVABLE:
            return None

        imported = self._imports.get(first.lower())
        if imported:
            return f"{imported}\\{rest}" if rest else imported
        if self.namespace:
            return f"{self.namespace}\\{name}"
        return name

    # -------------------------------------------------------------------------
    # Token walk
    # -------------------------------------------------------------------------

    def _analyse(self) -> None:
        tokens = self._tokens
        depth = 0
        nesting = 0  # open ( and [
        namespace_depth = 0
        class_depths: list[int] = []
        pending_class = False
        i = 0

        while i < len(tokens):
            token = tokens[i]
            prev = tokens[i - 1] if i else None

            if token.is_punct("{"):
                depth += 1
                if pending_class:
                    class_depths.append(depth)
                    pending_class = False
            elif token.is_punct("}"):
                if class_depths and class_depths[-1] == depth:
                    class_depths.pop()
                depth -= 1
            elif token.is_punct("(", "[", "#["):
                nesting += 1
            elif token.is_punct(")", "]"):
                nesting = max(nesting - 1, 0)
            elif token.is_keyword(*_CLASS_KEYWORDS):
                if prev is None or not prev.is_punct("::", "->", "?->"):
                    pending_class = True
            elif token.is_keyword("namespace") and depth == 0 and not class_depths:
                i, namespace_depth = self._read_namespace(i, namespace_depth)
                continue
            elif (
                token.is_keyword("use")
                and depth == namespace_depth
                and not class_depths
                and nesting == 0
            ):
                i = self._read_use(i)
                continue
            elif (
                token.is_keyword(*PROPERTY_MODIFIERS)
                # Outermost class body only; anonymous classes nest deeper
                and len(class_depths) == 1
                and class_depths[0] == depth
                and nesting == 0
                and (prev is None or prev.is_punct(*_STATEMENT_BOUNDARY))
            ):
                end = self._read_property_declaration(i)
                if end is not None:
                    i = end
                    continue

            i += 1

    def _read_namespace(self, i: int, namespace_depth: int) -> tuple[int, int]:
        tokens = self._tokens
        j = i + 1
        name = ""
        if j < len(tokens) and tokens[j].kind == "name":
            name = tokens[j].text.lstrip("\\")
            j += 1

        if j < len(tokens) and tokens[j].is_punct("{"):
            # Braced namespace: the { itself is counted by the main walk
            self.namespace = name
            return j, 1
        if name and j < len(tokens) and tokens[j].is_punct(";"):
            self.namespace = name
            return j + 1, 0
        return i + 1, namespace_depth

    def _read_use(self, i: int) -> int:
        tokens = self._tokens
        end = _find_statement_end(tokens, i + 1)
        if end is None:
            return i + 1

        clause = tokens[i + 1:end]
        if clause and clause[0].is_keyword("function", "const"):
            return end + 1
        if clause and clause[0].is_punct("("):
            # Closure use list, not an import
            return i + 1

        prefix = ""
        if len(clause) >= 3 and clause[0].kind == "name" and clause[1].is_punct("\\") and clause[2].is_punct("{"):
            prefix = clause[0].text.lstrip("\\") + "\\"
            clause = [t for t in clause[3:] if not t.is_punct("}")]

        for item in _split_top_level(clause):
            if not item or item[0].kind != "name":
                continue
            name = prefix + item[0].text.lstrip("\\")
            alias = name.rsplit("\\", 1)[-1]
            if len(item) == 3 and item[1].is_keyword("as") and item[2].kind == "name":
                alias = item[2].text
            elif len(item) != 1:
                continue
            self._imports[alias.lower()] = name

        return end + 1

    def _read_property_declaration(self, i: int) -> int | None:
        """Record the declarations of one property statement.

        Returns the index after the terminating ";" or None when the tokens
        at i do not form a property declaration.
        """
        tokens = self._tokens
        j = i
        while j < len(tokens) and tokens[j].is_keyword(*PROPERTY_MODIFIERS):
            j += 1
        # Optional type: names combined with ?, | and &
        while j < len(tokens) and (tokens[j].kind == "name" or tokens[j].is_punct("?", "|", "&")):
            if tokens[j].is_keyword("function", "const", "fn", "class", "enum", "case"):
                return None
            j += 1

        found: list[tuple[str, list[Token]]] = []
        while j < len(tokens) and tokens[j].kind == "variable":
            name = tokens[j].text[1:]
            j += 1
            value: list[Token] = []
            if j < len(tokens) and tokens[j].is_punct("="):
                end = _find_value_end(tokens, j + 1)
                if end is None:
                    return None
                value = tokens[j + 1:end]
                j = end
            found.append((name, value))

            if j < len(tokens) and tokens[j].is_punct(","):
                j += 1
                continue
            if j < len(tokens) and tokens[j].is_punct(";"):
                for prop, prop_value in found:
                    self._properties.setdefault(prop, prop_value)
                return j + 1
            return None

        return None

    def _element_class_name(self, element: list[Token]) -> str | None:
        if len(element) == 1 and element[0].kind == "string":
            value = unescape_string_literal(element[0].text)
            if value is None:
                return None
            name = normalize_class_name(value)
            return name if _CLASS_NAME.fullmatch(name) else None

        if (
            len(element) == 3
            and element[0].kind == "name"
            and element[1].is_punct("::")
            and element[2].is_keyword("class")
        ):
            return self.resolve_class_name(element[0].text)

        return None


def _find_statement_end(tokens: list[Token], start: int) -> int | None:
    """Index of the ";" ending a statement, skipping nested brackets."""
    return _find_value_end(tokens, start, stop=(";",))


def _find_value_end(tokens: list[Token], start: int, stop: tuple[str, ...] = (",", ";")) -> int | None:
    """Index of the first top-level token in stop, or None if unbalanced."""
    stack: list[str] = []
    for j in range(start, len(tokens)):
        token = tokens[j]
        if token.kind != "punct":
            continue
        if token.text in _OPENERS or token.text == "#[":
            stack.append("]" if token.text == "#[" else _OPENERS[token.text])
        elif token.text in _CLOSERS:
            if not stack or stack.pop() != token.text:
                return None
        elif not stack and token.text in stop:
            return j
    return None


def _split_top_level(tokens: list[Token]) -> list[list[Token]]:
    """Split tokens on commas that are not inside brackets."""
    items: list[list[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.is_punct("(", "[", "{", "#["):
            depth += 1
        elif token.is_punct(")", "]", "}"):
            depth -= 1
        elif depth == 0 and token.is_punct(","):
            items.append([])
            continue
        items[-1].append(token)
    return items


def _array_elements(value: list[Token]) -> list[list[Token]] | None:
    """Return the elements of an array literal value, or None if not one."""
    if len(value) >= 2 and value[0].is_punct("[") and value[-1].is_punct("]"):
        inner = value[1:-1]
    elif (
        len(value) >= 3
        and value[0].is_keyword("array")
        and value[1].is_punct("(")
        and value[-1].is_punct(")")
    ):
        inner = value[2:-1]
    else:
        return None

    # The outer brackets must enclose the whole value: [a][0] is not a literal
    if _find_value_end(inner + [Token("punct", ";", -1)], 0, stop=(";",)) != len(inner):
        return None

    return [element for element in _split_top_level(inner) if element]
