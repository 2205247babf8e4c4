"""Pytest configuration and fixtures for Quill tests."""

import pytest

from quill import Environment
from quill.environment import terminal


@pytest.fixture(autouse=True)
def no_colors(monkeypatch):
    """Keep error messages free of ANSI codes regardless of FORCE_COLOR or a TTY."""
    monkeypatch.setattr(terminal, "_USE_COLORS", False)


@pytest.fixture
def env():
    """Create a basic (strict) Quill Environment."""
    return Environment()


@pytest.fixture
def tolerant_env():
    """Create a Quill Environment that renders undefined values as none."""
    return Environment(strict_undefined=False)


@pytest.fixture
def env_with_templates():
    """Create a Quill Environment with a small set of registered templates."""
    env = Environment()
    env.register_many(
        {
            "macros.html": (
                "{% macro show_a(many_fields) %}{{ many_fields.a }}{% endmacro show_a %}"
                '{% macro greet(name, greeting="Hello") %}'
                "{{ greeting }}, {{ name }}!"
                "{% endmacro greet %}"
                "{% macro add(a, b) %}{{ a + b }}{% endmacro add %}"
            ),
            "partial.html": "<p>{{ title }}</p>",
            "greeting.txt": "Hello {{ name }}",
        }
    )
    return env


def objects_context(count: int = 100) -> dict:
    """Context with ``objects[k].field_a.i == k`` and a ``two_fields`` object."""
    return {
        "objects": [{"field_a": {"i": k}, "field_b": {"i": -k}} for k in range(count)],
        "two_fields": {
            "a": {"a": "A", "b": "B", "c": "C"},
            "b": {"a": "a", "b": "b", "c": "c"},
        },
    }


def assert_template_equal(template_result: str, expected: str) -> None:
    """Assert template result equals expected, normalizing whitespace.

    Args:
        template_result: The actual template rendering result.
        expected: The expected output.
    """
    actual_normalized = " ".join(template_result.split())
    expected_normalized = " ".join(expected.split())
    assert actual_normalized == expected_normalized, (
        f"Template output mismatch:\n"
        f"  Actual: {actual_normalized!r}\n"
        f"  Expected: {expected_normalized!r}"
    )
