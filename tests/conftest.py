"""
Pytest configuration and shared fixtures for jptrbench tests.

Provides the RFC 6901 example document with its expected pointer and
fragment resolutions, plus small deterministic library descriptors for
exercising the benchmark harness without the real contestants.
"""

from dataclasses import dataclass
from typing import Any

import pytest

from jptrbench import Capability
from jptrbench import LibraryDescriptor
from jptrbench import Operation


@dataclass(frozen=True)
class PointerTestCase:
    """
    Immutable container for a pointer resolution case.

    Holds the pointer in one representation and the value it must resolve
    to in the RFC 6901 example document.
    """

    description: str
    pointer: str
    expected_output: Any = None
    should_fail: bool = False


# https://www.rfc-editor.org/rfc/rfc6901#section-5
RFC6901_DOCUMENT = {
    "foo": ["bar", "baz"],
    "": 0,
    "a/b": 1,
    "c%d": 2,
    "e^f": 3,
    "g|h": 4,
    "i\\j": 5,
    'k"l': 6,
    " ": 7,
    "m~n": 8,
}


@pytest.fixture
def rfc6901_document() -> dict[str, Any]:
    """Provides a fresh copy of the RFC 6901 example document."""
    return {
        key: list(value) if isinstance(value, list) else value
        for key, value in RFC6901_DOCUMENT.items()
    }


@pytest.fixture
def rfc6901_pointer_cases() -> list[PointerTestCase]:
    """
    Provides the JSON string representation examples of RFC 6901.

    Covers the root pointer, array indexes, the empty key and every escape.
    """
    return [
        PointerTestCase("whole document", "", RFC6901_DOCUMENT),
        PointerTestCase("array member", "/foo", ["bar", "baz"]),
        PointerTestCase("array index", "/foo/0", "bar"),
        PointerTestCase("empty key", "/", 0),
        PointerTestCase("escaped slash", "/a~1b", 1),
        PointerTestCase("percent sign", "/c%d", 2),
        PointerTestCase("caret", "/e^f", 3),
        PointerTestCase("pipe", "/g|h", 4),
        PointerTestCase("backslash", "/i\\j", 5),
        PointerTestCase("double quote", '/k"l', 6),
        PointerTestCase("space", "/ ", 7),
        PointerTestCase("escaped tilde", "/m~0n", 8),
    ]


@pytest.fixture
def rfc6901_fragment_cases() -> list[PointerTestCase]:
    """
    Provides the URI fragment identifier representation examples.

    Same locations as the string examples, percent-encoded per RFC 3986.
    """
    return [
        PointerTestCase("whole document", "#", RFC6901_DOCUMENT),
        PointerTestCase("array member", "#/foo", ["bar", "baz"]),
        PointerTestCase("array index", "#/foo/0", "bar"),
        PointerTestCase("empty key", "#/", 0),
        PointerTestCase("escaped slash", "#/a~1b", 1),
        PointerTestCase("percent sign", "#/c%25d", 2),
        PointerTestCase("caret", "#/e%5Ef", 3),
        PointerTestCase("pipe", "#/g%7Ch", 4),
        PointerTestCase("backslash", "#/i%5Cj", 5),
        PointerTestCase("double quote", "#/k%22l", 6),
        PointerTestCase("space", "#/%20", 7),
        PointerTestCase("escaped tilde", "#/m~0n", 8),
    ]


@pytest.fixture
def unresolvable_cases() -> list[PointerTestCase]:
    """Provides well-formed pointers with no matching location."""
    return [
        PointerTestCase("missing key", "/missing", should_fail=True),
        PointerTestCase("index past end", "/foo/2", should_fail=True),
        PointerTestCase("leading zero", "/foo/01", should_fail=True),
        PointerTestCase("non-numeric index", "/foo/x", should_fail=True),
        PointerTestCase("append marker", "/foo/-", should_fail=True),
        PointerTestCase("through scalar", "/a~1b/c", should_fail=True),
    ]


class DictHandle:
    """Compiled handle for the fake library: a pre-split token list."""

    def __init__(self, pointer: str) -> None:
        self.tokens = pointer.split("/")[1:] if pointer else []

    def get(self, document: Any) -> Any:
        node = document
        for token in self.tokens:
            node = node[int(token)] if isinstance(node, list) else node[token]
        return node


def _fake_get(document: Any, pointer: str) -> Any:
    return DictHandle(pointer).get(document)


def _fake_has(document: Any, pointer: str) -> bool:
    try:
        _fake_get(document, pointer)
    except (KeyError, IndexError):
        return False
    return True


def _fail(*args: Any) -> Any:
    raise RuntimeError("library failure")


@pytest.fixture
def fake_libraries() -> tuple[LibraryDescriptor, ...]:
    """
    Provides three deterministic libraries with distinct capabilities.

    - fast: flatten, has, get and a compiled get
    - broken: get always raises
    - hasonly: has, nothing else
    """
    return (
        LibraryDescriptor(
            name="fast",
            operations={
                Operation.FLATTEN: Capability("dict", lambda doc: {"": doc}),
                Operation.HAS: Capability("has", _fake_has),
                Operation.GET: Capability("get", _fake_get),
            },
            compile=DictHandle,
            compiled={Operation.GET: Capability("get", DictHandle.get)},
        ),
        LibraryDescriptor(
            name="broken",
            operations={Operation.GET: Capability("get", _fail)},
        ),
        LibraryDescriptor(
            name="hasonly",
            operations={Operation.HAS: Capability("has", _fake_has)},
        ),
    )
