"""RFC 6901 JSON pointer implementation with pre-compiled pointer handles."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Final
from urllib.parse import quote
from urllib.parse import unquote

# Characters allowed unescaped in a URI fragment (RFC 3986 section 3.5)
_FRAGMENT_SAFE: Final = "/?:@!$&'()*+,;=-._~"

_MISSING: Final = object()


class JsonPointerError(ValueError):
    """Base class for JSON pointer failures."""


class PointerSyntaxError(JsonPointerError):
    """Raised when a pointer or fragment identifier is malformed."""

    def __init__(self, msg: str, pointer: str) -> None:
        self.msg = msg
        self.pointer = pointer
        super().__init__(f"{msg}: {pointer!r}")


class PointerResolutionError(JsonPointerError, LookupError):
    """Raised when a pointer does not address an existing location."""

    def __init__(self, pointer: str, token: str) -> None:
        self.pointer = pointer
        self.token = token
        super().__init__(f"Cannot resolve {token!r} in {pointer!r}")


def decode_token(token: str, pointer: str = "") -> str:
    """Unescapes a reference token (``~1`` to ``/``, then ``~0`` to ``~``)."""
    if "~" not in token:
        return token
    pos = token.find("~")
    while pos != -1:
        if token[pos + 1 : pos + 2] not in ("0", "1"):
            raise PointerSyntaxError("Invalid escape sequence", pointer)
        pos = token.find("~", pos + 2)
    return token.replace("~1", "/").replace("~0", "~")


def encode_token(token: str) -> str:
    """Escapes a reference token for use inside a pointer string."""
    return token.replace("~", "~0").replace("/", "~1")


def parse_pointer(pointer: str) -> tuple[str, ...]:
    """Splits a pointer or URI fragment identifier into decoded tokens.

    Args:
        pointer: Either a JSON string pointer (``/a/b``) or a URI fragment
            identifier (``#/a/b``)

    Returns:
        Tuple of unescaped reference tokens, empty for the root pointer
    """
    if not isinstance(pointer, str):
        raise TypeError(
            f"pointer must be str, not {type(pointer).__name__}"
        )

    source = pointer
    if pointer.startswith("#"):
        pointer = unquote(pointer[1:])
    if not pointer:
        return ()
    if pointer[0] != "/":
        raise PointerSyntaxError("Pointer must start with '/'", source)
    return tuple(
        decode_token(token, source) for token in pointer[1:].split("/")
    )


def format_pointer(tokens: tuple[str, ...] | list[str]) -> str:
    """Joins reference tokens into a JSON string pointer."""
    return "".join("/" + encode_token(token) for token in tokens)


def to_fragment(pointer: str) -> str:
    """Converts a JSON string pointer to its URI fragment identifier."""
    return "#" + quote(pointer, safe=_FRAGMENT_SAFE)


def _array_index(token: str) -> int | None:
    """Returns the array index a token denotes, or None if it has none."""
    if not token.isdigit() or not token.isascii():
        return None
    if len(token) > 1 and token[0] == "0":
        return None
    return int(token)


class JsonPointer:
    """Pre-compiled JSON pointer.

    Parsing, unescaping and array-index conversion happen once at
    construction so that repeated lookups only walk the document.
    """

    __slots__ = ("_steps", "path", "pointer")

    def __init__(self, pointer: str | tuple[str, ...] | list[str]) -> None:
        """Compiles a pointer from its string, fragment or token form.

        Args:
            pointer: String pointer, URI fragment identifier, or a sequence
                of already-decoded reference tokens
        """
        if isinstance(pointer, str):
            self.path: tuple[str, ...] = parse_pointer(pointer)
        else:
            self.path = tuple(pointer)
        self.pointer: str = format_pointer(self.path)
        self._steps: tuple[tuple[str, int | None], ...] = tuple(
            (token, _array_index(token)) for token in self.path
        )

    @property
    def uri_fragment_identifier(self) -> str:
        return to_fragment(self.pointer)

    def __repr__(self) -> str:
        return f"JsonPointer({self.pointer!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonPointer):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def _walk(
        self, document: Any, steps: tuple[tuple[str, int | None], ...]
    ) -> Any:
        node = document
        for token, index in steps:
            if isinstance(node, dict):
                node = node.get(token, _MISSING)
                if node is _MISSING:
                    raise PointerResolutionError(self.pointer, token)
            elif isinstance(node, list):
                if index is None or index >= len(node):
                    raise PointerResolutionError(self.pointer, token)
                node = node[index]
            else:
                raise PointerResolutionError(self.pointer, token)
        return node

    def get(self, document: Any) -> Any:
        """Returns the value this pointer addresses in the document."""
        return self._walk(document, self._steps)

    def has(self, document: Any) -> bool:
        """Reports whether this pointer addresses an existing location."""
        try:
            self._walk(document, self._steps)
        except PointerResolutionError:
            return False
        return True

    def set(self, document: Any, value: Any) -> Any:
        """Assigns a value at this pointer's location.

        The parent location must already exist. ``-`` (or an index equal to
        the array length) appends to an array.

        Returns:
            The value previously stored at the location, or None
        """
        if not self._steps:
            raise JsonPointerError("Cannot replace the document root")

        parent = self._walk(document, self._steps[:-1])
        token, index = self._steps[-1]
        if isinstance(parent, dict):
            previous = parent.get(token)
            parent[token] = value
            return previous
        if isinstance(parent, list):
            if token == "-" or index == len(parent):
                parent.append(value)
                return None
            if index is None or index > len(parent):
                raise PointerResolutionError(self.pointer, token)
            previous = parent[index]
            parent[index] = value
            return previous
        raise PointerResolutionError(self.pointer, token)


def compile_pointer(pointer: str) -> JsonPointer:
    """Compiles a pointer string into a reusable handle."""
    return JsonPointer(pointer)


def get(document: Any, pointer: str) -> Any:
    """Resolves a string pointer or fragment identifier against a document."""
    return JsonPointer(pointer).get(document)


def has(document: Any, pointer: str) -> bool:
    """Reports whether a string pointer or fragment addresses a location."""
    return JsonPointer(pointer).has(document)


def set_value(document: Any, pointer: str, value: Any) -> Any:
    """Assigns a value at a string pointer or fragment identifier."""
    return JsonPointer(pointer).set(document, value)


@dataclass(frozen=True)
class PointerLocation:
    """One addressable location discovered in a document."""

    pointer: str
    fragment_id: str
    value: Any


def _iter_locations(document: Any) -> list[tuple[str, Any]]:
    """Collects (pointer, value) pairs in pre-order."""
    found: list[tuple[str, Any]] = []
    stack: list[tuple[str, Any]] = [("", document)]
    while stack:
        pointer, value = stack.pop()
        found.append((pointer, value))
        if isinstance(value, dict):
            children = [
                (f"{pointer}/{encode_token(key)}", child)
                for key, child in value.items()
            ]
        elif isinstance(value, list):
            children = [
                (f"{pointer}/{index}", child)
                for index, child in enumerate(value)
            ]
        else:
            continue
        # Reversed so that the first child is popped first
        stack.extend(reversed(children))
    return found


def list_pointers(document: Any) -> list[PointerLocation]:
    """Enumerates every addressable location in document order.

    The root location (pointer ``""``, fragment ``#``) comes first.
    """
    return [
        PointerLocation(pointer, to_fragment(pointer), value)
        for pointer, value in _iter_locations(document)
    ]


def flatten(document: Any, fragment: bool = False) -> dict[str, Any]:
    """Maps every pointer in the document to the value it addresses.

    Args:
        document: Parsed JSON document
        fragment: Key the mapping by URI fragment identifiers instead of
            string pointers
    """
    if fragment:
        return {
            to_fragment(pointer): value
            for pointer, value in _iter_locations(document)
        }
    return dict(_iter_locations(document))
