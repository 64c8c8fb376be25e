"""
Micro-benchmark harness comparing JSON pointer (RFC 6901) libraries.

Times flatten, has and get operations of every registered library against a
JSON fixture, with and without pointer pre-compilation, across repeated
cycles, and prints raw and ranked summary tables.
"""

import json
import logging
import os
import random
import time
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from decimal import ROUND_HALF_UP
from decimal import Decimal
from enum import Enum
from functools import partial
from pathlib import Path
from types import MappingProxyType
from typing import Any
from typing import Final
from typing import cast

import orjson
import ujson  # type: ignore[import-untyped]

from jptrbench import _report
from jptrbench._pointer import JsonPointer
from jptrbench._pointer import JsonPointerError
from jptrbench._pointer import PointerLocation
from jptrbench._pointer import PointerResolutionError
from jptrbench._pointer import PointerSyntaxError
from jptrbench._pointer import list_pointers
from jptrbench.libraries import DEFAULT_LIBRARIES
from jptrbench.libraries import Capability
from jptrbench.libraries import LibraryDescriptor
from jptrbench.libraries import Operation
from jptrbench.libraries import select_libraries

__version__ = "0.1.0"

__all__ = [
    "COMPARISON_CYCLES",
    "DEFAULT_FIXTURE",
    "DEFAULT_LIBRARIES",
    "RANDOM_POINTER_COUNT",
    "BenchmarkConfig",
    "BenchmarkError",
    "Capability",
    "ComparisonResult",
    "FixtureLoadError",
    "JsonParser",
    "JsonPointer",
    "JsonPointerError",
    "LibraryDescriptor",
    "Operation",
    "PointerDescriptor",
    "PointerForm",
    "PointerLocation",
    "PointerResolutionError",
    "PointerSyntaxError",
    "Sample",
    "SummaryRow",
    "compare_each",
    "compare_flatten",
    "list_pointers",
    "load_fixture",
    "main",
    "perform_comparisons",
    "run_comparison",
    "select_libraries",
    "summarize",
    "take_random_pointers",
    "timed",
]

logger = logging.getLogger(__name__)

COMPARISON_CYCLES: Final = 10
RANDOM_POINTER_COUNT: Final = 100_000
DEFAULT_FIXTURE: Final = Path(__file__).parent / "data" / "zips.json"

# Placeholder shown where a summary value does not apply
NOT_APPLICABLE: Final = "-"


class BenchmarkError(Exception):
    """Base class for benchmark harness failures."""


class FixtureLoadError(BenchmarkError):
    """
    Raised when the fixture cannot be read or is not valid JSON.

    Fatal to the whole run; the underlying OSError or ValueError is chained
    as __cause__ for diagnostics.
    """

    def __init__(self, msg: str, path: Path) -> None:
        self.msg = msg
        self.path = path
        super().__init__(f"{msg}: {path}")


class JsonParser(Enum):
    """JSON parsers available for loading the fixture."""

    STDLIB = "json"
    ORJSON = "orjson"
    UJSON = "ujson"


_LOADERS: Final[dict[JsonParser, Callable[[bytes], Any]]] = {
    JsonParser.STDLIB: json.loads,
    JsonParser.ORJSON: orjson.loads,
    JsonParser.UJSON: ujson.loads,
}


def _env_int(environ: Mapping[str, str], name: str) -> int | None:
    raw = environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class BenchmarkConfig:
    """
    Configures a benchmark run with immutable settings.

    Defaults reproduce the canonical run: the bundled zips fixture parsed
    with orjson, 10 comparison cycles over 100,000 sampled pointers.
    """

    fixture: Path = DEFAULT_FIXTURE
    parser: JsonParser = JsonParser.ORJSON
    cycles: int = COMPARISON_CYCLES
    sample_size: int = RANDOM_POINTER_COUNT
    seed: int | None = None
    libraries: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.parser, JsonParser):
            raise TypeError("parser must be a JsonParser")
        if self.cycles < 1:
            raise ValueError("cycles must be at least 1")
        if self.sample_size < 1:
            raise ValueError("sample_size must be at least 1")
        select_libraries(self.libraries)
        object.__setattr__(self, "fixture", Path(self.fixture))

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None
    ) -> "BenchmarkConfig":
        """
        Builds a configuration from JPTRBENCH_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        overrides: dict[str, Any] = {}

        if env.get("JPTRBENCH_FIXTURE"):
            overrides["fixture"] = Path(env["JPTRBENCH_FIXTURE"])
        if env.get("JPTRBENCH_PARSER"):
            overrides["parser"] = JsonParser(env["JPTRBENCH_PARSER"])
        if env.get("JPTRBENCH_LIBRARIES"):
            overrides["libraries"] = tuple(
                name.strip()
                for name in env["JPTRBENCH_LIBRARIES"].split(",")
                if name.strip()
            )
        for key, name in (
            ("cycles", "JPTRBENCH_CYCLES"),
            ("sample_size", "JPTRBENCH_SAMPLES"),
            ("seed", "JPTRBENCH_SEED"),
        ):
            value = _env_int(env, name)
            if value is not None:
                overrides[key] = value

        return cls(**overrides)


def load_fixture(
    path: str | Path, parser: JsonParser = JsonParser.ORJSON
) -> Any:
    """
    Reads and parses the JSON fixture.

    Raises FixtureLoadError when the file is unreadable or not valid JSON.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FixtureLoadError("Cannot read fixture", path) from e

    try:
        document = _LOADERS[parser](raw)
    except ValueError as e:
        raise FixtureLoadError("Invalid JSON in fixture", path) from e

    logger.info("Loaded %s (%d bytes) with %s", path, len(raw), parser.value)
    return document


class PointerForm(Enum):
    """Which pointer representation is handed to plain implementations."""

    POINTER = "pointer"
    FRAGMENT = "fragment_id"


@dataclass(frozen=True)
class PointerDescriptor:
    """
    A sampled pointer in both forms, plus each compiling library's
    pre-compiled handle keyed by library name.
    """

    pointer: str
    fragment_id: str
    compiled: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def form(self, form: PointerForm) -> str:
        """Returns the representation selected by form."""
        if form is PointerForm.FRAGMENT:
            return self.fragment_id
        return self.pointer


@dataclass(frozen=True)
class Sample:
    """
    One timing measurement.

    duration and ea are None when the timed action raised; error then holds
    the exception.
    """

    library: str
    operation: str
    compiled: bool
    duration: int | None
    ops: int
    ea: float | None
    error: Exception | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def timed(
    action: Callable[[], Any],
    library: str,
    operation: str,
    compiled: bool = False,
    ops: int = 1,
) -> Sample:
    """
    Runs action once and measures its wall-clock time in nanoseconds.

    Exceptions raised by the action are captured on the Sample rather than
    propagated, so one failing library does not abort the run.
    """
    if ops < 1:
        raise ValueError("ops must be at least 1")

    start = time.perf_counter_ns()
    try:
        action()
    except Exception as e:
        logger.debug("%s %s failed: %r", library, operation, e)
        return Sample(library, operation, compiled, None, ops, None, e)
    duration = time.perf_counter_ns() - start
    return Sample(library, operation, compiled, duration, ops, duration / ops)


def take_random_pointers(
    locations: Sequence[PointerLocation],
    n: int,
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
    rng: random.Random | None = None,
) -> list[PointerDescriptor]:
    """
    Draws n pointers uniformly at random, with replacement.

    Every library able to compile pointers compiles each drawn pointer.
    A failed compilation is logged and omitted from that descriptor; the
    library's compiled sweep then records the failure as an errored sample.
    """
    if not locations:
        raise ValueError("cannot sample from an empty pointer set")
    if n < 1:
        raise ValueError("sample size must be at least 1")

    if rng is None:
        rng = random.Random()

    compilers = [lib for lib in libraries if lib.compile is not None]
    failures: dict[str, int] = {}
    descriptors: list[PointerDescriptor] = []

    for location in rng.choices(locations, k=n):
        normalized = JsonPointer(location.pointer)
        compiled: dict[str, Any] = {}
        for library in compilers:
            try:
                compiled[library.name] = library.compile(  # type: ignore[misc]
                    normalized.pointer
                )
            except Exception as e:
                failures[library.name] = failures.get(library.name, 0) + 1
                logger.debug(
                    "%s cannot compile %r: %r",
                    library.name,
                    normalized.pointer,
                    e,
                )
        descriptors.append(
            PointerDescriptor(
                normalized.pointer,
                normalized.uri_fragment_identifier,
                MappingProxyType(compiled),
            )
        )

    for name, count in failures.items():
        logger.warning(
            "%s failed to compile %d of %d pointers", name, count, n
        )

    return descriptors


def _plain_sweep(
    document: Any, values: list[str], func: Callable[..., Any]
) -> Callable[[], None]:
    def sweep() -> None:
        for value in values:
            func(document, value)

    return sweep


def _compiled_sweep(
    document: Any,
    pointers: Sequence[PointerDescriptor],
    name: str,
    func: Callable[..., Any],
) -> Callable[[], None]:
    def sweep() -> None:
        for descriptor in pointers:
            func(descriptor.compiled[name], document)

    return sweep


def compare_flatten(
    document: Any,
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
    cycles: int = COMPARISON_CYCLES,
) -> list[Sample]:
    """Times one whole-document flatten per library per cycle."""
    samples: list[Sample] = []
    for _ in range(cycles):
        for library in libraries:
            if not library.supports(Operation.FLATTEN):
                continue
            capability = library.operations[Operation.FLATTEN]
            samples.append(
                timed(
                    partial(capability.func, document),
                    library.name,
                    f".{capability.method}(data)",
                )
            )
    return samples


def compare_each(
    document: Any,
    pointers: Sequence[PointerDescriptor],
    form: PointerForm,
    operation: Operation,
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
    cycles: int = COMPARISON_CYCLES,
) -> list[Sample]:
    """
    Times full sweeps over the sampled pointers.

    Per cycle and library, one sweep through the plain implementation and,
    when the library compiles pointers for this operation, one sweep through
    the pre-compiled handles. Each sweep is a single sample whose ops is the
    number of pointers.
    """
    if operation in (Operation.FLATTEN, Operation.SET):
        raise ValueError(f"{operation.value} is not a per-pointer comparison")
    if not pointers:
        raise ValueError("at least one pointer is required")

    ops = len(pointers)
    values = [descriptor.form(form) for descriptor in pointers]
    samples: list[Sample] = []

    for _ in range(cycles):
        for library in libraries:
            if library.supports(operation):
                capability = library.operations[operation]
                samples.append(
                    timed(
                        _plain_sweep(document, values, capability.func),
                        library.name,
                        f".{capability.method}(data, {form.value})",
                        False,
                        ops,
                    )
                )
            if library.supports_compiled(operation):
                capability = library.compiled[operation]
                samples.append(
                    timed(
                        _compiled_sweep(
                            document, pointers, library.name, capability.func
                        ),
                        library.name,
                        f".{capability.method}(data)",
                        True,
                        ops,
                    )
                )
    return samples


@dataclass(frozen=True)
class SummaryRow:
    """
    Aggregated result for one (library, variant) combination.

    samples and avg hold NOT_APPLICABLE when the library lacks the operation
    or no sample succeeded; errors counts the failed samples.
    """

    library: str
    method: str
    compiled: bool
    samples: int | str
    avg: int | str
    slower: str = ""
    errors: int = 0

    @property
    def numeric(self) -> bool:
        return isinstance(self.avg, int)


def _round_half_up(value: float, places: int = 0) -> Decimal:
    """Rounds the exact binary value of a float, halves away from zero."""
    return Decimal(value).quantize(Decimal(1).scaleb(-places), ROUND_HALF_UP)


def _format_percent(value: float) -> str:
    """Formats a percentage with at most two decimals, e.g. 200% or 3.5%."""
    text = f"{_round_half_up(value, 2):f}".rstrip("0").rstrip(".")
    return f"{text}%"


def _summarize_variant(
    samples: Sequence[Sample],
    library: LibraryDescriptor,
    method: str,
    compiled: bool,
) -> SummaryRow:
    matching = [
        s
        for s in samples
        if s.library == library.name and s.compiled == compiled
    ]
    succeeded = [s for s in matching if s.ea is not None]
    errors = len(matching) - len(succeeded)

    if not succeeded:
        return SummaryRow(
            library.name, method, compiled, 0, NOT_APPLICABLE, errors=errors
        )

    combined = sum(s.ea for s in succeeded if s.ea is not None)
    return SummaryRow(
        library=library.name,
        method=method,
        compiled=compiled,
        samples=sum(s.ops for s in succeeded),
        avg=int(_round_half_up(combined / len(succeeded))),
        errors=errors,
    )


def summarize(
    samples: Sequence[Sample],
    operation: Operation,
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
) -> list[SummaryRow]:
    """
    Aggregates samples into ranked rows, fastest first.

    Every library is listed: those lacking the operation get an "n/a" row.
    Failed samples are excluded from averages and counted in errors; rows
    without a numeric average sort last in registry order.
    """
    rows: list[SummaryRow] = []
    for library in libraries:
        if library.supports(operation):
            method = library.operations[operation].method
            rows.append(_summarize_variant(samples, library, method, False))
        else:
            rows.append(
                SummaryRow(
                    library.name, "n/a", False, NOT_APPLICABLE, NOT_APPLICABLE
                )
            )
        if library.supports_compiled(operation):
            method = library.compiled[operation].method
            rows.append(_summarize_variant(samples, library, method, True))

    rows.sort(key=lambda row: (0, row.avg) if row.numeric else (1, 0))

    if not rows or not rows[0].numeric or rows[0].avg == 0:
        return rows

    fastest = cast(int, rows[0].avg)
    ranked = [rows[0]]
    for row in rows[1:]:
        if row.numeric:
            slower = (cast(int, row.avg) - fastest) / fastest * 100
            row = replace(row, slower=_format_percent(slower))
        ranked.append(row)
    return ranked


@dataclass(frozen=True)
class ComparisonResult:
    """Raw samples and ranked summary of one comparison."""

    description: str
    operation: Operation
    samples: tuple[Sample, ...]
    summary: tuple[SummaryRow, ...]


# (operation, pointer form, description) in the order they are run
COMPARISONS: Final = (
    (Operation.FLATTEN, PointerForm.POINTER, ".flatten(obj)"),
    (Operation.HAS, PointerForm.POINTER, ".has(obj, pointer)"),
    (Operation.HAS, PointerForm.FRAGMENT, ".has(obj, fragmentId)"),
    (Operation.GET, PointerForm.POINTER, ".get(obj, pointer)"),
    (Operation.GET, PointerForm.FRAGMENT, ".get(obj, fragmentId)"),
)


def run_comparison(
    document: Any,
    pointers: Sequence[PointerDescriptor],
    operation: Operation,
    form: PointerForm,
    description: str,
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
    cycles: int = COMPARISON_CYCLES,
) -> ComparisonResult:
    """Runs one comparison and prints its raw and summary tables."""
    print(f"\n{description}")
    if operation is Operation.FLATTEN:
        samples = compare_flatten(document, libraries, cycles)
    else:
        samples = compare_each(
            document, pointers, form, operation, libraries, cycles
        )
    summary = summarize(samples, operation, libraries)

    print("\n" + _report.format_samples(samples))
    print("\n" + _report.format_summary(summary) + "\n")

    return ComparisonResult(
        description, operation, tuple(samples), tuple(summary)
    )


def perform_comparisons(
    document: Any,
    pointers: Sequence[PointerDescriptor],
    libraries: Sequence[LibraryDescriptor] = DEFAULT_LIBRARIES,
    cycles: int = COMPARISON_CYCLES,
) -> list[ComparisonResult]:
    """Runs flatten, has and get comparisons in their fixed order."""
    return [
        run_comparison(
            document, pointers, operation, form, description, libraries, cycles
        )
        for operation, form, description in COMPARISONS
    ]


def main(config: BenchmarkConfig | None = None) -> bool:
    """
    Main benchmark execution.

    Returns False, without running any comparison, when the fixture cannot
    be loaded.
    """
    if config is None:
        config = BenchmarkConfig.from_env()
    libraries = select_libraries(config.libraries)

    print(f"jptrbench {__version__}")
    print(f"Libraries: {', '.join(lib.name for lib in libraries)}")
    print(f"Cycles: {config.cycles}, sampled pointers: {config.sample_size}")

    try:
        document = load_fixture(config.fixture, config.parser)
    except FixtureLoadError as e:
        print(f"\n{e}")
        if e.__cause__ is not None:
            print(f"  caused by {e.__cause__!r}")
        return False

    locations = list_pointers(document)
    logger.info("Fixture has %d addressable locations", len(locations))

    pointers = take_random_pointers(
        locations, config.sample_size, libraries, random.Random(config.seed)
    )
    perform_comparisons(document, pointers, libraries, config.cycles)
    return True
