"""
Registry of JSON pointer libraries compared by the benchmark.

Each contestant is described by an immutable LibraryDescriptor listing which
operations it implements and, when it can pre-compile pointers, which
operations its compiled handles implement:

- jptr (this package's RFC 6901 implementation)
- jsonpointer (python-json-pointer from PyPI)
- jsonpath (python-jsonpath from PyPI, pointers only)
- naive (re-splits the pointer string on every call)
"""

from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from types import MappingProxyType
from typing import Any
from urllib.parse import unquote

import jsonpath
import jsonpointer

from jptrbench import _pointer


class Operation(Enum):
    """Pointer operations a library may implement."""

    FLATTEN = "flatten"
    HAS = "has"
    GET = "get"
    SET = "set"


@dataclass(frozen=True)
class Capability:
    """
    One implemented operation: the method label shown in reports and the
    callable that performs it.

    Plain capabilities are called as ``func(document, pointer)`` (flatten as
    ``func(document)``); compiled capabilities as ``func(handle, document)``.
    """

    method: str
    func: Callable[..., Any]


@dataclass(frozen=True)
class LibraryDescriptor:
    """
    Immutable description of a library under test.

    Capability checks go through supports() and supports_compiled() so the
    runner never inspects library objects at dispatch time.
    """

    name: str
    operations: Mapping[Operation, Capability] = field(default_factory=dict)
    compile: Callable[[str], Any] | None = None
    compiled: Mapping[Operation, Capability] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("library name must not be empty")
        if self.compiled and self.compile is None:
            raise ValueError(
                f"{self.name}: compiled operations require a compile function"
            )
        # Freeze the capability tables along with the descriptor
        object.__setattr__(
            self, "operations", MappingProxyType(dict(self.operations))
        )
        object.__setattr__(
            self, "compiled", MappingProxyType(dict(self.compiled))
        )

    def supports(self, operation: Operation) -> bool:
        return operation in self.operations

    def supports_compiled(self, operation: Operation) -> bool:
        return self.compile is not None and operation in self.compiled


def _naive_tokens(pointer: str) -> list[str]:
    if pointer.startswith("#"):
        pointer = unquote(pointer[1:])
    if not pointer:
        return []
    return [
        token.replace("~1", "/").replace("~0", "~")
        for token in pointer.split("/")[1:]
    ]


def _naive_step(node: Any, token: str) -> Any:
    if isinstance(node, list):
        return node[int(token)]
    return node[token]


def naive_get(document: Any, pointer: str) -> Any:
    """Walks the document one token at a time, parsing the pointer anew."""
    node = document
    for token in _naive_tokens(pointer):
        node = _naive_step(node, token)
    return node


def naive_has(document: Any, pointer: str) -> bool:
    try:
        naive_get(document, pointer)
    except (KeyError, IndexError, TypeError, ValueError):
        return False
    return True


def naive_set(document: Any, pointer: str, value: Any) -> None:
    tokens = _naive_tokens(pointer)
    if not tokens:
        raise ValueError("cannot replace the document root")
    parent = document
    for token in tokens[:-1]:
        parent = _naive_step(parent, token)
    last = tokens[-1]
    if isinstance(parent, list):
        if last == "-":
            parent.append(value)
        else:
            parent[int(last)] = value
    else:
        parent[last] = value


def _jsonpath_pointer(pointer: str) -> jsonpath.JSONPointer:
    # Tokens are taken literally, without \uXXXX unescaping
    return jsonpath.JSONPointer(pointer, unicode_escape=False)


def jsonpath_get(document: Any, pointer: str) -> Any:
    return _jsonpath_pointer(pointer).resolve(document)


def jsonpath_has(document: Any, pointer: str) -> bool:
    return _jsonpath_pointer(pointer).exists(document)


def naive_dict(document: Any) -> dict[str, Any]:
    """Flattens recursively, building each pointer by string concatenation."""
    result: dict[str, Any] = {}

    def visit(node: Any, pointer: str) -> None:
        result[pointer] = node
        if isinstance(node, dict):
            for key, child in node.items():
                escaped = key.replace("~", "~0").replace("/", "~1")
                visit(child, pointer + "/" + escaped)
        elif isinstance(node, list):
            for index, child in enumerate(node):
                visit(child, pointer + "/" + str(index))

    visit(document, "")
    return result


JPTR = LibraryDescriptor(
    name="jptr",
    operations={
        Operation.FLATTEN: Capability("flatten", _pointer.flatten),
        Operation.HAS: Capability("has", _pointer.has),
        Operation.GET: Capability("get", _pointer.get),
        Operation.SET: Capability("set_value", _pointer.set_value),
    },
    compile=_pointer.compile_pointer,
    compiled={
        Operation.HAS: Capability("has", _pointer.JsonPointer.has),
        Operation.GET: Capability("get", _pointer.JsonPointer.get),
        Operation.SET: Capability("set", _pointer.JsonPointer.set),
    },
)

JSONPOINTER = LibraryDescriptor(
    name="jsonpointer",
    operations={
        Operation.GET: Capability(
            "resolve_pointer", jsonpointer.resolve_pointer
        ),
        Operation.SET: Capability("set_pointer", jsonpointer.set_pointer),
    },
    compile=jsonpointer.JsonPointer,
    compiled={
        Operation.GET: Capability("resolve", jsonpointer.JsonPointer.resolve),
        Operation.SET: Capability("set", jsonpointer.JsonPointer.set),
    },
)

JSONPATH = LibraryDescriptor(
    name="jsonpath",
    operations={
        Operation.HAS: Capability("exists", jsonpath_has),
        Operation.GET: Capability("resolve", jsonpath_get),
    },
    compile=_jsonpath_pointer,
    compiled={
        Operation.HAS: Capability("exists", jsonpath.JSONPointer.exists),
        Operation.GET: Capability("resolve", jsonpath.JSONPointer.resolve),
    },
)

NAIVE = LibraryDescriptor(
    name="naive",
    operations={
        Operation.FLATTEN: Capability("dict", naive_dict),
        Operation.HAS: Capability("has", naive_has),
        Operation.GET: Capability("get", naive_get),
        Operation.SET: Capability("set", naive_set),
    },
)

DEFAULT_LIBRARIES: tuple[LibraryDescriptor, ...] = (
    JPTR,
    JSONPOINTER,
    JSONPATH,
    NAIVE,
)


def select_libraries(
    names: Sequence[str] | None,
    libraries: tuple[LibraryDescriptor, ...] = DEFAULT_LIBRARIES,
) -> tuple[LibraryDescriptor, ...]:
    """Returns the named subset of the registry, preserving registry order."""
    if not names:
        return libraries
    known = {library.name for library in libraries}
    unknown = [name for name in names if name not in known]
    if unknown:
        raise ValueError(
            f"Unknown libraries: {', '.join(unknown)} "
            f"(available: {', '.join(sorted(known))})"
        )
    return tuple(library for library in libraries if library.name in names)
