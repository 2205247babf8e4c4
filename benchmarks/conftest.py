from __future__ import annotations

import json
import os
import platform
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from quill import Context, Environment

try:
    import importlib.metadata as importlib_metadata
except ModuleNotFoundError:  # pragma: no cover
    import importlib_metadata  # type: ignore


BASE_DIR = Path(__file__).resolve().parent
BENCHMARK_OUTPUT_DIR = BASE_DIR.parent / ".benchmarks"

MACROS = """\
{% macro badge(label, kind="info") %}<span class="{{ kind }}">{{ label }}</span>{% endmacro badge %}
{% macro row(user) %}<tr><td>{{ user.name | title }}</td><td>{{ self::badge(label=user.role) }}</td></tr>{% endmacro row %}
"""

PAGE = """\
{% import "macros.html" as m %}
<h1>{{ title | upper }}</h1>
<table>
{% for user in users %}{% if user.banned %}{% continue %}{% endif %}{{ m::row(user=user) }}
{% endfor %}
</table>
{% set total = users | length %}<p>{{ total }} users, tags: {{ tags | join(sep=", ") }}</p>
"""

LOOP = """\
{% set found = false %}
{% for item in items %}{% if item.id == stop_at %}{% set_global found = true %}{% break %}{% endif %}\
{{ loop.index }}:{{ item.name }}{% if not loop.last %},{% endif %}{% endfor %}
{{ found }}
"""

BIG_LOOP = """
{%- for object in objects -%}
{{ object.field_a.i }}
{%- if object.field_a.i > 2 -%}
{%- break -%}
{%- endif -%}
{%- endfor -%}
"""

MACRO_LOOP = """
{%- import "fixture_macros.html" as macros -%}
{%- for i in iterations -%}{{ macros::get_first(bo=big_object) }}{% endfor %}"""

FIXTURE_MACROS = """\
{%- macro get_first(bo) -%}{{ bo.field_a.i }}{% endmacro get_first %}
{%- macro show_a(many_fields) -%}
{{ many_fields.a }}
{%- endmacro show_a -%}
"""

NO_LOOP_SET = """
{% set many_fields=two_fields.a -%}
{{ many_fields.a }}
{{ many_fields.b }}
{{ many_fields.c }}
"""

NO_LOOP_MACRO = """\
{%- import "fixture_macros.html" as macros -%}
{{ macros::show_a(many_fields=two_fields.a) }}"""

LONG_TEXT = (
    "Before we get to the details, two important notes about the ownership system. " * 12
)


@dataclass
class DataWrapper:
    i: int
    v: str = LONG_TEXT


@dataclass
class BigObject:
    field_a: DataWrapper
    field_b: DataWrapper
    field_c: DataWrapper
    field_d: DataWrapper
    field_e: DataWrapper
    field_f: DataWrapper

    @classmethod
    def new(cls, i: int) -> BigObject:
        return cls(*(DataWrapper(i) for _ in range(6)))


@dataclass
class ManyFields:
    a: str = "A"
    b: str = "B"
    c: str = "C"
    d: list[BigObject] = field(default_factory=lambda: [BigObject.new(i) for i in range(500)])
    e: list[str] = field(default_factory=lambda: [f"This is String({i})" for i in range(100)])


@dataclass
class TwoFields:
    a: ManyFields = field(default_factory=ManyFields)
    b: str = "B"


def _version(dist: str) -> str:
    try:
        return importlib_metadata.version(dist)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def collect_environment_metadata() -> dict[str, object]:
    """Capture reproducibility metadata for each benchmark run."""
    return {
        "python": {
            "version": platform.python_version(),
            "implementation": platform.python_implementation(),
            "executable": sys.executable,
        },
        "os": {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        },
        "cpu": {
            "processor": platform.processor(),
            "count": os.cpu_count(),
        },
        "quill": _version("quill"),
    }


@pytest.fixture(scope="session")
def environment_metadata() -> dict[str, object]:
    """Write environment metadata to .benchmarks for ingestion."""
    metadata = collect_environment_metadata()
    BENCHMARK_OUTPUT_DIR.mkdir(exist_ok=True)
    (BENCHMARK_OUTPUT_DIR / "environment.json").write_text(json.dumps(metadata, indent=2))
    return metadata


@pytest.fixture(scope="session")
def quill_env() -> Environment:
    env = Environment()
    env.register_many({"macros.html": MACROS, "page.html": PAGE, "loop.txt": LOOP})
    return env


@pytest.fixture(scope="session")
def page_context() -> dict[str, object]:
    return {
        "title": "Team",
        "tags": ["python", "templates", "benchmarks"],
        "users": [
            {"name": f"user {i}", "role": "admin" if i % 7 == 0 else "member", "banned": i % 13 == 0}
            for i in range(100)
        ],
    }


@pytest.fixture(scope="session")
def large_context() -> dict[str, object]:
    return {
        "items": [{"id": i, "name": f"item{i}"} for i in range(1000)],
        "stop_at": 900,
    }


@pytest.fixture(scope="session")
def fixtures_env() -> Environment:
    env = Environment()
    env.register_many(
        {
            "fixture_macros.html": FIXTURE_MACROS,
            "big_loop.html": BIG_LOOP,
            "macro_loop.html": MACRO_LOOP,
            "no_loop_set.html": NO_LOOP_SET,
            "no_loop_macro.html": NO_LOOP_MACRO,
        }
    )
    return env


@pytest.fixture(scope="session")
def big_objects_context() -> Context:
    ctx = Context()
    ctx.insert("objects", [BigObject.new(i) for i in range(100)])
    return ctx


@pytest.fixture(scope="session")
def big_object_context() -> Context:
    ctx = Context()
    ctx.insert("big_object", BigObject.new(1))
    ctx.insert("iterations", list(range(500)))
    return ctx


@pytest.fixture(scope="session")
def two_fields_context() -> Context:
    ctx = Context()
    ctx.insert("two_fields", TwoFields())
    return ctx
