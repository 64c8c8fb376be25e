"""
Library registry tests.

Validates descriptor capabilities and that every registered contestant
resolves the RFC 6901 examples through its declared operations.
"""

from typing import Any

import jsonpointer
import pytest

from jptrbench import Capability
from jptrbench import LibraryDescriptor
from jptrbench import Operation
from jptrbench import select_libraries
from jptrbench.libraries import DEFAULT_LIBRARIES
from jptrbench.libraries import JPTR
from jptrbench.libraries import JSONPATH
from jptrbench.libraries import JSONPOINTER
from jptrbench.libraries import NAIVE
from jptrbench.libraries import naive_dict
from jptrbench.libraries import naive_has
from jptrbench.libraries import jsonpath_has
from jptrbench.libraries import naive_set

from .conftest import PointerTestCase


def test_registry_order_and_names() -> None:
    assert [lib.name for lib in DEFAULT_LIBRARIES] == [
        "jptr",
        "jsonpointer",
        "jsonpath",
        "naive",
    ]


def test_declared_capabilities() -> None:
    """
    Validates which operations and compiled variants each contestant has.
    """
    assert all(JPTR.supports(op) for op in Operation)
    assert JPTR.supports_compiled(Operation.HAS)
    assert JPTR.supports_compiled(Operation.GET)
    assert not JPTR.supports_compiled(Operation.FLATTEN)

    assert not JSONPOINTER.supports(Operation.HAS)
    assert not JSONPOINTER.supports(Operation.FLATTEN)
    assert JSONPOINTER.supports(Operation.GET)
    assert JSONPOINTER.supports_compiled(Operation.GET)
    assert not JSONPOINTER.supports_compiled(Operation.HAS)

    assert JSONPATH.supports(Operation.HAS)
    assert JSONPATH.supports_compiled(Operation.HAS)
    assert JSONPATH.supports_compiled(Operation.GET)
    assert not JSONPATH.supports(Operation.FLATTEN)
    assert not JSONPATH.supports(Operation.SET)

    assert NAIVE.compile is None
    assert not any(NAIVE.supports_compiled(op) for op in Operation)


@pytest.mark.parametrize(
    "library", DEFAULT_LIBRARIES, ids=lambda lib: lib.name
)
def test_plain_get_resolves_rfc_examples(
    library: LibraryDescriptor,
    rfc6901_document: dict[str, Any],
    rfc6901_pointer_cases: list[PointerTestCase],
) -> None:
    get = library.operations[Operation.GET].func

    for case in rfc6901_pointer_cases:
        assert get(rfc6901_document, case.pointer) == case.expected_output


@pytest.mark.parametrize(
    "library", [JPTR, JSONPOINTER, JSONPATH], ids=lambda lib: lib.name
)
def test_compiled_get_resolves_rfc_examples(
    library: LibraryDescriptor,
    rfc6901_document: dict[str, Any],
    rfc6901_pointer_cases: list[PointerTestCase],
) -> None:
    assert library.compile is not None
    get = library.compiled[Operation.GET].func

    for case in rfc6901_pointer_cases:
        handle = library.compile(case.pointer)
        assert get(handle, rfc6901_document) == case.expected_output


def test_fragment_support(
    rfc6901_document: dict[str, Any],
    rfc6901_fragment_cases: list[PointerTestCase],
) -> None:
    """
    Validates that jptr and naive accept fragment identifiers while
    jsonpointer rejects them.
    """
    for case in rfc6901_fragment_cases:
        for library in (JPTR, NAIVE):
            get = library.operations[Operation.GET].func
            assert get(rfc6901_document, case.pointer) == case.expected_output

        with pytest.raises(jsonpointer.JsonPointerException):
            JSONPOINTER.operations[Operation.GET].func(
                rfc6901_document, case.pointer
            )


def test_naive_flatten_matches_jptr(rfc6901_document: dict[str, Any]) -> None:
    flatten = JPTR.operations[Operation.FLATTEN].func

    assert naive_dict(rfc6901_document) == flatten(rfc6901_document)


def test_naive_has(rfc6901_document: dict[str, Any]) -> None:
    assert naive_has(rfc6901_document, "/m~0n")
    assert naive_has(rfc6901_document, "#/c%25d")
    assert not naive_has(rfc6901_document, "/missing")
    assert not naive_has(rfc6901_document, "/foo/9")
    assert not naive_has(rfc6901_document, "/foo/x")
    assert not naive_has(rfc6901_document, "/a~1b/deeper")


def test_jsonpath_has(rfc6901_document: dict[str, Any]) -> None:
    assert jsonpath_has(rfc6901_document, "/m~0n")
    assert jsonpath_has(rfc6901_document, "/foo/1")
    assert jsonpath_has(rfc6901_document, "/i\\j")
    assert not jsonpath_has(rfc6901_document, "/missing")
    assert not jsonpath_has(rfc6901_document, "/foo/9")

    handle = JSONPATH.compile("/a~1b")  # type: ignore[misc]
    exists = JSONPATH.compiled[Operation.HAS].func
    assert exists(handle, rfc6901_document)
    assert not exists(handle, {"a": {"b": 1}})


def test_naive_set(rfc6901_document: dict[str, Any]) -> None:
    naive_set(rfc6901_document, "/a~1b", 10)
    naive_set(rfc6901_document, "/foo/-", "end")
    naive_set(rfc6901_document, "/foo/0", "first")

    assert rfc6901_document["a/b"] == 10
    assert rfc6901_document["foo"] == ["first", "baz", "end"]
    with pytest.raises(ValueError):
        naive_set(rfc6901_document, "", {})


def test_set_capabilities_agree(rfc6901_document: dict[str, Any]) -> None:
    """
    Validates every declared set writes the same location.
    """
    setters = [lib for lib in DEFAULT_LIBRARIES if lib.supports(Operation.SET)]
    assert [lib.name for lib in setters] == ["jptr", "jsonpointer", "naive"]

    for index, library in enumerate(setters):
        library.operations[Operation.SET].func(
            rfc6901_document, "/m~0n", index
        )
        assert rfc6901_document["m~n"] == index


def test_descriptor_validation() -> None:
    with pytest.raises(ValueError):
        LibraryDescriptor(name="")
    with pytest.raises(ValueError):
        LibraryDescriptor(
            name="orphan",
            compiled={Operation.GET: Capability("get", lambda h, d: None)},
        )


def test_descriptor_tables_are_read_only() -> None:
    operations = {Operation.GET: Capability("get", lambda d, p: None)}
    library = LibraryDescriptor(name="frozen", operations=operations)

    operations[Operation.HAS] = Capability("has", lambda d, p: True)

    assert not library.supports(Operation.HAS)
    with pytest.raises(TypeError):
        library.operations[Operation.HAS] = operations[  # type: ignore[index]
            Operation.HAS
        ]


def test_select_libraries() -> None:
    assert select_libraries(None) == DEFAULT_LIBRARIES
    assert select_libraries([]) == DEFAULT_LIBRARIES
    assert select_libraries(["naive", "jptr"]) == (JPTR, NAIVE)

    with pytest.raises(ValueError, match="Unknown libraries: nope"):
        select_libraries(["nope"])
