"""Tests for the Quill Environment: registration, rendering, registries and threading."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from quill import (
    Context,
    Environment,
    LexerError,
    Template,
    TemplateNotFoundError,
    TemplateRuntimeError,
    TemplateSyntaxError,
    UndefinedError,
    get_render_context,
)

LOGGER = "quill.environment.core"


class TestRegistration:
    def test_register_returns_template(self, env: Environment) -> None:
        template = env.register("a.txt", "Hello {{ name }}")
        assert isinstance(template, Template)
        assert template.name == "a.txt"
        assert template.source == "Hello {{ name }}"
        assert repr(template) == "<Template 'a.txt'>"

    def test_get_and_list(self, env: Environment) -> None:
        env.register("b.txt", "b")
        env.register("a.txt", "a")
        assert env.list_templates() == ["a.txt", "b.txt"]
        assert env.get_template("a.txt").render() == "a"

    def test_not_found_suggests_close_name(self, env: Environment) -> None:
        env.register("missing.html", "")
        with pytest.raises(TemplateNotFoundError, match="Did you mean 'missing.html'"):
            env.render("mising.html")

    def test_not_found_lists_available(self, env: Environment) -> None:
        env.register("a.txt", "")
        with pytest.raises(TemplateNotFoundError, match="Available: a.txt"):
            env.get_template("zzz.html")

    def test_failed_compile_keeps_previous(self, env: Environment) -> None:
        env.register("a.txt", "old")
        with pytest.raises(TemplateSyntaxError):
            env.register("a.txt", "{% if %}")
        assert env.render("a.txt") == "old"

    def test_failed_compile_registers_nothing(self, env: Environment) -> None:
        with pytest.raises(LexerError):
            env.register("a.txt", "{{ unclosed")
        assert env.list_templates() == []

    def test_replace(self, env: Environment) -> None:
        env.register("a.txt", "one")
        env.register("a.txt", "two")
        assert env.render("a.txt") == "two"
        assert env.list_templates() == ["a.txt"]

    def test_register_many_is_all_or_nothing(self, env: Environment) -> None:
        with pytest.raises(TemplateSyntaxError):
            env.register_many({"good.txt": "ok", "bad.txt": "{% for %}"})
        assert env.list_templates() == []

    def test_register_many_accepts_pairs(self, env: Environment) -> None:
        templates = env.register_many(
            [("a.txt", "a"), ("b.txt", "{{ self::m() }}{% macro m() %}b{% endmacro m %}")]
        )
        assert [t.name for t in templates] == ["a.txt", "b.txt"]
        assert env.render("b.txt") == "b"

    @pytest.mark.parametrize(
        "source",
        [
            "{{ " + "(" * 2000 + "1" + ")" * 2000 + " }}",
            "{% if true %}" * 1500 + "x" + "{% endif %}" * 1500,
        ],
        ids=["parentheses", "if-blocks"],
    )
    def test_too_deep_nesting_is_a_syntax_error(self, env: Environment, source: str) -> None:
        with pytest.raises(TemplateSyntaxError, match="too deep") as exc_info:
            env.register("deep.txt", source)
        assert exc_info.value.name == "deep.txt"
        assert env.list_templates() == []

    def test_from_string_does_not_register(self, env: Environment) -> None:
        template = env.from_string("{{ 1 + 1 }}")
        assert template.name == "<string>"
        assert template.render() == "2"
        assert env.list_templates() == []

    def test_from_string_resolves_registered_imports(self, env_with_templates: Environment) -> None:
        template = env_with_templates.from_string(
            '{% import "macros.html" as m %}{{ m::greet(name="Ada", greeting="Hi") }}'
        )
        assert template.render() == "Hi, Ada!"


class TestLogging:
    def test_register_logs(self, env: Environment, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        env.register("a.txt", "a")
        env.register("a.txt", "b")
        messages = [r.getMessage() for r in caplog.records if r.name == LOGGER]
        assert messages == ["Registered template 'a.txt'", "Replaced template 'a.txt'"]

    def test_register_many_logs(self, env: Environment, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        env.register_many({"a.txt": "a", "b.txt": "b"})
        assert "Registered 2 templates: a.txt, b.txt" in caplog.text

    def test_compile_failure_logs(self, env: Environment, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        with pytest.raises(TemplateSyntaxError):
            env.register("bad.txt", "{% endfor %}")
        assert "Failed to compile template 'bad.txt'" in caplog.text


class TestRendering:
    def test_context_and_keywords(self, env: Environment) -> None:
        env.register("a.txt", "{{ a }}{{ b }}")
        assert env.render("a.txt", {"a": 1, "b": 2}, b=3) == "13"

    def test_context_object(self, env: Environment) -> None:
        ctx = Context()
        ctx.insert("name", "Ada")
        assert env.register("a.txt", "{{ name }}").render(ctx) == "Ada"
        assert env.render("a.txt", ctx, name="Bob") == "Bob"
        assert ctx["name"] == "Ada"

    def test_unconvertible_context_value(self, env: Environment) -> None:
        with pytest.raises(TypeError, match="Cannot convert object"):
            env.render_str("{{ v }}", v=object())

    def test_rendering_is_idempotent(self, env_with_templates: Environment) -> None:
        env_with_templates.register(
            "page.html", '{% import "macros.html" as m %}{{ m::greet(name=who) }}'
        )
        first = env_with_templates.render("page.html", who="<Ada>")
        second = env_with_templates.render("page.html", who="<Ada>")
        assert first == second == "Hello, &lt;Ada&gt;!"

    def test_failed_render_leaves_environment_usable(self, env: Environment) -> None:
        env.register("a.txt", "{{ x }}")
        with pytest.raises(UndefinedError):
            env.render("a.txt")
        assert env.render("a.txt", x=1) == "1"

    def test_render_uses_snapshot_taken_at_start(self, env: Environment) -> None:
        env.register("lib.txt", "{% macro v() %}1{% endmacro v %}")

        def swap() -> str:
            env.register("lib.txt", "{% macro v() %}2{% endmacro v %}")
            return ""

        env.add_global("swap", swap)
        env.register("page.txt", '{% import "lib.txt" as lib %}{{ swap() }}{{ lib::v() }}')
        assert env.render("page.txt") == "1"
        assert env.render("page.txt") == "2"

    def test_filter_added_during_render_waits_for_next_render(self, env: Environment) -> None:
        def install() -> str:
            env.add_filter("shout", lambda v: v.upper() + "!")
            return ""

        env.add_global("install", install)
        with pytest.raises(TemplateRuntimeError, match="Unknown filter 'shout'"):
            env.render_str('{{ install() }}{{ "a" | shout }}')
        assert env.render_str('{{ "a" | shout }}') == "A!"

    def test_render_context_is_visible_to_globals(self, env: Environment) -> None:
        def where() -> str:
            ctx = get_render_context()
            assert ctx is not None
            return f"{ctx.template_name}:{ctx.call_depth}"

        env.add_global("where", where)
        env.register("lib.txt", "{% macro m() %}{{ where() }}{% endmacro m %}")
        env.register("page.txt", '{% import "lib.txt" as lib %}{{ where() }} {{ lib::m() }}')
        assert env.render("page.txt") == "page.txt:0 lib.txt:1"
        assert get_render_context() is None

    def test_unnamed_template_errors_say_string(self, env: Environment) -> None:
        with pytest.raises(UndefinedError) as exc_info:
            env.render_str("{{ nope }}")
        assert exc_info.value.template_name == "<string>"


class TestConfiguration:
    @pytest.mark.parametrize("option", ["max_call_depth", "max_include_depth"])
    def test_depth_must_be_positive(self, option: str) -> None:
        with pytest.raises(ValueError):
            Environment(**{option: 0})

    def test_defaults(self, env: Environment) -> None:
        assert env.strict_undefined
        assert env.autoescape_on == (".html", ".htm", ".xml")
        assert env.max_call_depth == 50
        assert env.max_include_depth == 50
        assert repr(env) == "<Environment templates=0 strict=True>"


class TestRegistries:
    def test_builtins_are_present(self, env: Environment) -> None:
        assert "upper" in env.filters
        assert "defined" in env.tests
        assert "range" in env.globals
        assert len(env.filters) == 28

    def test_delete_filter(self, env: Environment) -> None:
        del env.filters["upper"]
        assert "upper" not in env.filters
        with pytest.raises(TemplateRuntimeError, match="Unknown filter 'upper'"):
            env.render_str("{{ 'a' | upper }}")

    def test_update_requires_callables(self, env: Environment) -> None:
        with pytest.raises(TypeError, match="must be callable"):
            env.filters.update({"bad": 1})
        assert "bad" not in env.filters

    def test_update_and_get(self, env: Environment) -> None:
        env.filters.update({"one": lambda v: 1, "two": lambda v: 2})
        assert env.render_str("{{ 0 | one }}{{ 0 | two }}") == "12"
        assert env.filters.get("missing") is None

    def test_copy_is_detached(self, env: Environment) -> None:
        snapshot = env.filters.copy()
        env.add_filter("later", lambda v: v)
        assert "later" not in snapshot
        assert "later" in env.filters

    def test_mapping_views(self, env: Environment) -> None:
        assert set(env.globals.keys()) == {"range", "throw"}
        assert all(callable(func) for func in env.tests.values())
        assert dict(env.globals.items())["range"] is env.globals["range"]


class TestThreadSafety:
    def test_concurrent_renders(self, env_with_templates: Environment) -> None:
        env_with_templates.register(
            "page.html",
            '{% import "macros.html" as m %}'
            "{% for n in names %}{{ m::greet(name=n) }}{% endfor %}",
        )

        def render(i: int) -> str:
            return env_with_templates.render("page.html", names=[f"u{i}", "x"])

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render, range(200)))

        assert results == [f"Hello, u{i}!Hello, x!" for i in range(200)]

    def test_concurrent_errors_keep_their_own_location(self, env: Environment) -> None:
        env.register("a.txt", "\n\n{{ missing_a }}")
        env.register("b.txt", "{{ missing_b }}")

        def render(name: str) -> tuple[str | None, int | None]:
            try:
                env.render(name)
            except UndefinedError as e:
                return e.template_name, e.lineno
            return None, None

        names = ["a.txt", "b.txt"] * 50
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(render, names))

        expected = {"a.txt": ("a.txt", 3), "b.txt": ("b.txt", 1)}
        assert results == [expected[name] for name in names]

    def test_registration_during_renders(self, env: Environment) -> None:
        env.register("lib.txt", "{% macro v() %}old{% endmacro v %}")
        env.register("page.txt", '{% import "lib.txt" as lib %}{{ lib::v() }}{{ lib::v() }}')
        stop = threading.Event()
        seen: set[str] = set()

        def writer() -> None:
            flip = False
            while not stop.is_set():
                body = "new" if flip else "old"
                env.register("lib.txt", "{% macro v() %}" + body + "{% endmacro v %}")
                flip = not flip

        thread = threading.Thread(target=writer)
        thread.start()
        try:
            with ThreadPoolExecutor(max_workers=4) as pool:
                seen.update(pool.map(lambda _: env.render("page.txt"), range(300)))
        finally:
            stop.set()
            thread.join()

        # Each render sees a single version of lib.txt
        assert seen <= {"oldold", "newnew"}
