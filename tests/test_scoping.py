"""Tests for set, set_global and include scoping."""

from __future__ import annotations

import pytest

from quill import Environment, RecursionLimitError, TemplateNotFoundError, UndefinedError

from .conftest import objects_context

SET_TEMPLATE = (
    "\n{% set many_fields=two_fields.a -%}\n"
    "{{ many_fields.a }}\n"
    "{{ many_fields.b }}\n"
    "{{ many_fields.c }}\n"
)


class TestSet:
    def test_set_binds_object(self, env: Environment) -> None:
        env.register("set.html", SET_TEMPLATE)
        assert env.render("set.html", objects_context()) == "\nA\nB\nC\n"

    def test_trimmed_set_drops_following_newline(self, env: Environment) -> None:
        assert env.render_str(SET_TEMPLATE.lstrip("\n"), objects_context()) == "A\nB\nC\n"

    def test_set_shadows_context(self, env: Environment) -> None:
        source = '{{ name }} {% set name = "inner" %}{{ name }}'
        assert env.render_str(source, name="outer") == "outer inner"

    def test_set_can_rebind(self, env: Environment) -> None:
        assert env.render_str("{% set x = 1 %}{% set x = x + 1 %}{{ x }}") == "2"

    def test_set_in_loop_is_local_to_iteration(self, env: Environment) -> None:
        source = "{% for i in [1, 2] %}{% set x = i %}{% endfor %}{{ x }}"
        with pytest.raises(UndefinedError):
            env.render_str(source)

    def test_set_in_loop_does_not_carry_between_iterations(self, tolerant_env: Environment) -> None:
        source = "{% for i in [1, 2] %}[{{ x }}]{% set x = i %}{% endfor %}"
        assert tolerant_env.render_str(source) == "[][]"

    def test_set_in_if_is_template_level(self, env: Environment) -> None:
        assert env.render_str("{% if true %}{% set x = 5 %}{% endif %}{{ x }}") == "5"

    def test_set_global_escapes_loop(self, env: Environment) -> None:
        source = "{% for i in [1, 2, 3] %}{% set_global last = i %}{% endfor %}{{ last }}"
        assert env.render_str(source) == "3"

    def test_set_global_accumulates(self, env: Environment) -> None:
        source = (
            "{% set total = 0 %}"
            "{% for i in [1, 2, 3] %}{% set_global total = total + i %}{% endfor %}"
            "{{ total }}"
        )
        assert env.render_str(source) == "6"

    def test_set_global_in_macro_stays_in_macro(self, env: Environment) -> None:
        source = (
            "{% macro m() %}"
            "{% for i in [1, 2] %}{% set_global seen = i %}{% endfor %}{{ seen }}"
            "{% endmacro m %}"
            "{{ self::m() }}{{ seen | default(value='-') }}"
        )
        assert env.render_str(source) == "2-"


class TestInclude:
    def test_include_sees_current_scope(self, env_with_templates: Environment) -> None:
        source = '{% for name in names %}{% include "greeting.txt" %};{% endfor %}'
        assert env_with_templates.render_str(source, names=["a", "b"]) == "Hello a;Hello b;"

    def test_include_sees_local_set(self, env_with_templates: Environment) -> None:
        source = '{% set name = "set" %}{% include "greeting.txt" %}'
        assert env_with_templates.render_str(source) == "Hello set"

    def test_include_sets_stay_inside(self, env: Environment) -> None:
        env.register("setter.txt", "{% set inner = 1 %}{{ inner }}")
        with pytest.raises(UndefinedError):
            env.render_str('{% include "setter.txt" %}{{ inner }}')

    def test_include_uses_own_autoescape(self, env_with_templates: Environment) -> None:
        source = '{% include "partial.html" %}'
        assert env_with_templates.render_str(source, title="<x>") == "<p>&lt;x&gt;</p>"

    def test_include_uses_own_macros(self, env: Environment) -> None:
        env.register("widget.txt", "{% macro w() %}W{% endmacro w %}{{ self::w() }}")
        assert env.render_str('[{% include "widget.txt" %}]') == "[W]"

    def test_missing_include(self, env: Environment) -> None:
        with pytest.raises(TemplateNotFoundError):
            env.render_str('{% include "nope.txt" %}')

    def test_ignore_missing(self, env: Environment) -> None:
        assert env.render_str('a{% include "nope.txt" ignore missing %}b') == "ab"

    def test_include_registered_later(self, env: Environment) -> None:
        env.register("page.txt", '<{% include "part.txt" %}>')
        env.register("part.txt", "part")
        assert env.render("page.txt") == "<part>"

    def test_recursive_include_is_bounded(self) -> None:
        env = Environment(max_include_depth=5)
        env.register("self.txt", '.{% include "self.txt" %}')
        with pytest.raises(RecursionLimitError, match="Maximum include depth"):
            env.render("self.txt")

    def test_conditional_recursive_include(self, env: Environment) -> None:
        env.register(
            "tree.txt",
            "{{ node.name }}"
            "{% for child in node.children %}"
            '({% set node = child %}{% include "tree.txt" %})'
            "{% endfor %}",
        )
        tree = {
            "name": "root",
            "children": [
                {"name": "a", "children": []},
                {"name": "b", "children": [{"name": "c", "children": []}]},
            ],
        }
        assert env.render("tree.txt", node=tree) == "root(a)(b(c))"
