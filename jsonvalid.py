"""Validate JSON and collect its numbers

The grammar is described here:
https://www.json.org/json-en.html

Only a strict subset is accepted: numbers can't have exponents or a leading
plus sign. Nothing is decoded - strings are checked for their escape
sequences and skipped, and numbers are kept as the exact text found in the
input. Every reader takes the data and an index and returns the index just
past what it read, so the input is never copied.

Example:
    >>> validate(b'{"a": [1, 2.5, -3], "b": {"c": 0, "d": -0.5}}')
    Numbers(integers=['1', '-3', '0'], floating=['2.5', '-0.5'])
    >>> validate(b'  [true, false, null, "x\\\\n"]  ')
    Numbers(integers=[], floating=[])
    >>> try:
    ...     validate(b'{"a": 01}')
    ... except ParseError as e:
    ...     print(e)
    cannot parse JSON: unexpected number starting from 0; unparsed tail: '01}'

"""
import re
from typing import List, NamedTuple, Optional, Union

# Objects and arrays nested deeper than this are rejected
DEFAULT_MAX_DEPTH = 256

# Tails longer than this are cut down to their start and end
MAX_TAIL_LEN = 80
TAIL_EDGE_LEN = 40

class ParseError(ValueError):
    """Raised when the data isn't valid JSON

    `pos` is the index where the unparsed tail starts. `tail` is the excerpt
    shown in the message and is only set by `validate`.

    """
    def __init__(self, message: str, pos: int, tail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.pos = pos
        self.tail = tail

class Numbers(NamedTuple):
    integers: List[str]
    floating: List[str]

_WHITESPACE_PATTERN = re.compile(rb"[ \t\n\r]*")
_DIGITS_PATTERN = re.compile(rb"[0-9]*")
_CONTROL_PATTERN = re.compile(rb"[\x00-\x1f]")
_PLAIN_KEY_PATTERN = re.compile(rb'[^"\\\x00-\x1f]*')
_ESCAPE_SET = frozenset(b'"\\/bfnrt')
_HEX_SET = frozenset(b"0123456789abcdefABCDEF")
_LITERALS = {b"t"[0]: b"true", b"f"[0]: b"false", b"n"[0]: b"null"}

def frame_tail(tail: bytes) -> str:
    if len(tail) > MAX_TAIL_LEN:
        tail = tail[:TAIL_EDGE_LEN] + b"..." + tail[-TAIL_EDGE_LEN:]
    return tail.decode("utf-8", "replace")

def _describe(data: bytes, i: int) -> str:
    if i >= len(data):
        return "end of input"
    return repr(chr(data[i]))

def read_whitespace(data: bytes, i: int) -> int:
    return _WHITESPACE_PATTERN.match(data, i).end()

def _check_control(data: bytes, i: int, j: int) -> None:
    match = _CONTROL_PATTERN.search(data, i, j)
    if match is not None:
        k = match.start()
        raise ParseError(f"string cannot contain control char 0x{data[k]:02X}", k)

def _find_closing_quote(data: bytes, i: int) -> int:
    # A quote closes the string when an even number of backslashes precede it
    n = data.find(b'"', i)
    while n >= 0:
        j = n
        while j > i and data[j-1] == b"\\"[0]:
            j -= 1
        if (n - j) % 2 == 0:
            return n
        n = data.find(b'"', n + 1)
    raise ParseError("missing closing '\"'", i)

def read_str(data: bytes, i: int) -> int:
    """Returns the index after the closing quote

    `i` must point just after the opening quote.

    Example:
        >>> data = b'"abc" "a\\\\"c"'
        >>> read_str(data, 1)
        5
        >>> read_str(data, 7)
        12

    """
    # Fast path - a string without escape sequences
    n = data.find(b'"', i)
    if n >= 0 and data.find(b"\\", i, n) < 0:
        _check_control(data, i, n)
        return n + 1

    # Slow path - escape sequences are present
    n = _find_closing_quote(data, i)
    _check_control(data, i, n)
    j = i
    while (j := data.find(b"\\", j, n)) >= 0:
        ch = data[j+1]
        if ch in _ESCAPE_SET:
            j += 2
        elif ch == b"u"[0]:
            digits = data[j+2:min(j+6, n)]
            if len(digits) < 4:
                raise ParseError(f"too short escape sequence: \\u{digits.decode('ascii', 'replace')}", j)
            if not all(c in _HEX_SET for c in digits):
                raise ParseError(f"invalid escape sequence \\u{digits.decode('ascii', 'replace')}", j)
            j += 6
        else:
            raise ParseError(f"unknown escape sequence \\{chr(ch)}", j)
    return n + 1

def read_key(data: bytes, i: int) -> int:
    """Like `read_str` but quicker for short keys without escapes"""
    j = _PLAIN_KEY_PATTERN.match(data, i).end()
    if j < len(data) and data[j] == b'"'[0]:
        return j + 1
    # Escapes, control chars, or no closing quote at all
    return read_str(data, i)

def read_num(data: bytes, i: int) -> int:
    """Returns the index after the number starting at `i`

    Example:
        >>> data = b"-12.50]"
        >>> data[:read_num(data, 0)]
        b'-12.50'

    """
    if i >= len(data):
        raise ParseError("zero-length number", i)
    if data[i] == b"-"[0]:
        i += 1
        if i == len(data):
            raise ParseError("missing number after minus", i)
    j = _DIGITS_PATTERN.match(data, i).end()
    if j == i:
        raise ParseError(f"expecting 0..9 digit, got {_describe(data, i)}", i)
    if data[i] == b"0"[0] and j - i > 1:
        raise ParseError("unexpected number starting from 0", i)
    if j < len(data) and data[j] == b"."[0]:
        i = j + 1
        j = _DIGITS_PATTERN.match(data, i).end()
        if j == i:
            raise ParseError(
                f"expecting 0..9 digit in fractional part, got {_describe(data, i)}",
                i,
            )
    return j

def read_literal(data: bytes, i: int) -> int:
    literal = _LITERALS[data[i]]
    if not data.startswith(literal, i):
        raise ParseError("unexpected value found", i)
    return i + len(literal)

class Validator:
    """Validates one input, collecting the numbers it finds along the way

    `integers` and `floating` are only complete once `validate` returns.

    """
    def __init__(self, data: bytes, *, max_depth: int = DEFAULT_MAX_DEPTH):
        self.data = data
        self.max_depth = max_depth
        self.integers: List[str] = []
        self.floating: List[str] = []

    def add_number(self, number: str) -> None:
        # Classified by how it's written, not by its value
        if "." in number:
            self.floating.append(number)
        else:
            self.integers.append(number)

    def read_value(self, i: int, depth: int = 0) -> int:
        data = self.data
        if i >= len(data):
            raise ParseError("cannot parse empty string", i)
        first_char = data[i]
        if first_char == b"{"[0]:  # object
            return self.read_object(i + 1, depth + 1)
        elif first_char == b"["[0]:  # array
            return self.read_array(i + 1, depth + 1)
        elif first_char == b'"'[0]:  # string
            return read_str(data, i + 1)
        elif first_char in b"tfn":  # true false null
            return read_literal(data, i)
        elif first_char in b"1234567890-":  # numbers
            end = read_num(data, i)
            self.add_number(data[i:end].decode("ascii"))
            return end
        else:
            raise ParseError("unexpected value found", i)

    def _check_depth(self, i: int, depth: int) -> None:
        if depth > self.max_depth:
            raise ParseError(f"exceeded max depth of {self.max_depth}", i - 1)

    def read_object(self, i: int, depth: int) -> int:
        self._check_depth(i, depth)
        data = self.data
        i = read_whitespace(data, i)
        if i == len(data):
            raise ParseError("missing '}'", i)
        if data[i] == b"}"[0]:
            return i + 1

        while True:
            # Key
            i = read_whitespace(data, i)
            if i == len(data) or data[i] != b'"'[0]:
                raise ParseError("cannot find opening '\"' for object key", i)
            i = read_key(data, i + 1)
            i = read_whitespace(data, i)
            if i == len(data) or data[i] != b":"[0]:
                raise ParseError("missing ':' after object key", i)

            # Value
            i = read_whitespace(data, i + 1)
            i = self.read_value(i, depth)
            i = read_whitespace(data, i)
            if i == len(data):
                raise ParseError("unexpected end of object", i)
            if data[i] == b","[0]:
                i += 1
                continue
            if data[i] == b"}"[0]:
                return i + 1
            raise ParseError("missing ',' after object value", i)

    def read_array(self, i: int, depth: int) -> int:
        self._check_depth(i, depth)
        data = self.data
        i = read_whitespace(data, i)
        if i == len(data):
            raise ParseError("missing ']'", i)
        if data[i] == b"]"[0]:
            return i + 1

        while True:
            i = read_whitespace(data, i)
            i = self.read_value(i, depth)
            i = read_whitespace(data, i)
            if i == len(data):
                raise ParseError("unexpected end of array", i)
            if data[i] == b","[0]:
                i += 1
                continue
            if data[i] == b"]"[0]:
                return i + 1
            raise ParseError("missing ',' after array value", i)

    def validate(self) -> Numbers:
        data = self.data
        try:
            i = self.read_value(read_whitespace(data, 0))
        except ParseError as e:
            tail = frame_tail(data[e.pos:])
            raise ParseError(
                f"cannot parse JSON: {e.message}; unparsed tail: {tail!r}",
                e.pos,
                tail,
            ) from None
        i = read_whitespace(data, i)
        if i < len(data):
            tail = frame_tail(data[i:])
            raise ParseError(f"unexpected tail: {tail!r}", i, tail)
        return Numbers(self.integers, self.floating)

def validate(
    data: Union[bytes, bytearray, memoryview, str],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Numbers:
    """Checks that `data` is JSON and returns the numbers inside

    Raises `ParseError` if it isn't.

    """
    if isinstance(data, str):
        data = data.encode()
    else:
        data = bytes(data)
    return Validator(data, max_depth=max_depth).validate()
