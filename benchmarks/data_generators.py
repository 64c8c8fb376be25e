"""
Test document generators for JSON pointer benchmarks.

Creates JSON documents whose shape stresses different pointer paths:
- Wide objects (many keys at one level)
- Deeply nested objects (long pointers)
- Array-heavy documents (index tokens)
- Keys needing escapes (``~`` and ``/``) and percent-encoding in fragments
"""

import random
import string
from typing import Any

# Constants for random data generation
_INT_TYPE = 1
_FLOAT_TYPE = 2
_STRING_TYPE = 3
_BOOL_TYPE = 4
_ESCAPE_PROBABILITY = 0.3


def generate_document(shape: str) -> Any:
    """Generates a parsed JSON document of the specified shape."""
    generators = {
        "zip_records": _generate_zip_records,
        "wide_object": _generate_wide_object,
        "nested_structure": _generate_nested_structure,
        "mixed_array": _generate_mixed_array,
        "escaped_keys": _generate_escaped_keys,
    }

    if shape not in generators:
        raise ValueError(f"Unknown document shape: {shape}")

    return generators[shape]()


def _generate_zip_records() -> list[dict[str, Any]]:
    """Generates records shaped like the bundled zips fixture."""
    return [
        {
            "_id": f"{random.randint(1000, 99999):05d}",
            "city": _random_string(random.randint(4, 14)).upper(),
            "loc": [
                round(random.uniform(-125.0, -67.0), 6),
                round(random.uniform(25.0, 49.0), 6),
            ],
            "pop": random.randint(0, 100000),
            "state": _random_string(2).upper(),
        }
        for _ in range(500)
    ]


def _generate_wide_object() -> dict[str, Any]:
    """Generates a single object with many scalar members."""
    return {f"key_{i}": _random_scalar() for i in range(2000)}


def _generate_nested_structure() -> dict[str, Any]:
    """Generates objects nested deep enough for long pointers."""

    def branch(depth: int) -> dict[str, Any]:
        if depth == 0:
            return {"leaf": _random_scalar()}
        node: dict[str, Any] = {
            f"k{depth}_{i}": branch(depth - 1) for i in range(2)
        }
        node["path"] = [branch(depth - 1)] if depth % 3 == 0 else []
        return node

    return branch(8)


def _generate_mixed_array() -> list[Any]:
    """Generates arrays of arrays so most tokens are indices."""
    return [
        [
            [_random_scalar() for _ in range(random.randint(0, 4))]
            if random.random() < 0.5
            else {"id": row * 100 + col, "tags": [_random_string(4)] * 3}
            for col in range(20)
        ]
        for row in range(60)
    ]


def _generate_escaped_keys() -> dict[str, Any]:
    """Generates members whose keys need pointer or fragment escaping."""

    def create_escaped_key() -> str:
        chars = []
        for _ in range(12):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(["~", "/", "%", " ", "#", "é"]))
            else:
                chars.append(random.choice(string.ascii_letters))
        return "".join(chars)

    return {
        create_escaped_key(): {"n": i, "child": {create_escaped_key(): i}}
        for i in range(300)
    }


def _random_scalar() -> Any:
    choice = random.randint(_INT_TYPE, _BOOL_TYPE + 1)
    if choice == _INT_TYPE:
        return random.randint(-1000, 1000)
    if choice == _FLOAT_TYPE:
        return round(random.uniform(-100.0, 100.0), 3)
    if choice == _STRING_TYPE:
        return _random_string(random.randint(5, 30))
    if choice == _BOOL_TYPE:
        return random.choice([True, False])
    return None


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
