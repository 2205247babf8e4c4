"""Coverage tests for environment.filters, environment.tests and environment.globals."""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from quill import (
    Environment,
    ErrorCode,
    TemplateRuntimeError,
    TypeMismatchError,
    UndefinedError,
)

from .strategies import sortable_int_list, string_filter_chain


class TestStringFilters:
    """Test string manipulation filters."""

    def test_case_filters(self) -> None:
        env = Environment()
        assert env.render_str("{{ 'hello world' | title }}") == "Hello World"
        assert env.render_str("{{ 'hELLO' | capitalize }}") == "Hello"
        assert env.render_str("{{ 'Hi' | upper }}{{ 'Hi' | lower }}") == "HIhi"

    def test_trim(self) -> None:
        env = Environment()
        assert env.render_str("[{{ '  hello  ' | trim }}]") == "[hello]"

    def test_truncate(self) -> None:
        env = Environment()
        assert env.render_str("{{ 'Hello World' | truncate(length=5) }}") == "Hello…"
        assert env.render_str("{{ 'Hello World' | truncate(length=5, end='...') }}") == "Hello..."

    def test_truncate_no_cut(self) -> None:
        env = Environment()
        assert env.render_str("{{ 'Hi' | truncate(length=2) }}") == "Hi"

    def test_replace_keywords(self) -> None:
        env = Environment()
        assert env.render_str('{{ "hello" | replace(from="l", to="r") }}') == "herro"

    def test_replace_positional(self) -> None:
        env = Environment()
        assert env.render_str("{{ 'hello' | replace('l', 'r') }}") == "herro"

    def test_replace_needs_both_arguments(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError, match="Invalid arguments for filter 'replace'"):
            env.render_str('{{ "hello" | replace(from="l") }}')

    def test_wordcount(self) -> None:
        env = Environment()
        assert env.render_str("{{ text | wordcount }}", text="one two  three\nfour") == "4"

    def test_split(self) -> None:
        env = Environment()
        assert env.render_str('{{ "a,b,c" | split(pat=",") | join(sep="-") }}') == "a-b-c"
        assert env.render_str('{{ " a  b " | split | length }}') == "2"

    def test_striptags(self) -> None:
        env = Environment()
        result = env.render_str("{{ html | striptags }}", html="<p>Hello <b>World</b></p>\n  !")
        assert result == "Hello World !"

    def test_string_filter_on_number_is_an_error(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="needs a string"):
            env.render_str("{{ 3 | upper }}")


class TestSequenceFilters:
    """Test array and object filters."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("abc", "3"), ([1, 2], "2"), ({"a": 1}, "1"), ([], "0")],
    )
    def test_length(self, value: object, expected: str) -> None:
        env = Environment()
        assert env.render_str("{{ v | length }}", v=value) == expected

    def test_length_of_number(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError):
            env.render_str("{{ 5 | length }}")

    def test_first_and_last(self) -> None:
        env = Environment()
        assert env.render_str("{{ v | first }}-{{ v | last }}", v=[1, 2, 3]) == "1-3"
        assert env.render_str("[{{ v | first }}]", v=[]) == "[]"

    def test_reverse(self) -> None:
        env = Environment()
        assert env.render_str("{{ 'abc' | reverse }}") == "cba"
        assert env.render_str("{{ [1, 2] | reverse }}") == "[2, 1]"

    def test_join(self) -> None:
        env = Environment()
        assert env.render_str('{{ [1, "a", true] | join(sep=", ") }}') == "1, a, true"
        assert env.render_str("{{ ['a', 'b'] | join }}") == "ab"

    def test_sort(self) -> None:
        env = Environment()
        assert env.render_str("{{ [3, 1, 2] | sort }}") == "[1, 2, 3]"
        assert env.render_str("{{ ['b', 'a'] | sort | join }}") == "ab"

    def test_sort_by_nested_attribute(self) -> None:
        env = Environment()
        items = [{"m": {"n": 2}, "id": "x"}, {"m": {"n": 1}, "id": "y"}]
        source = '{% for i in items | sort(attribute="m.n") %}{{ i.id }}{% endfor %}'
        assert env.render_str(source, items=items) == "yx"

    def test_sort_mixed_kinds(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="all numbers or all strings"):
            env.render_str("{{ [1, 'a'] | sort }}")

    def test_sort_missing_attribute(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="has no attribute"):
            env.render_str('{{ items | sort(attribute="age") }}', items=[{"name": "a"}])

    def test_unique(self) -> None:
        env = Environment()
        assert env.render_str("{{ ['a', 'A', 'b', 'a'] | unique | join }}") == "ab"
        assert (
            env.render_str("{{ ['a', 'A', 'b'] | unique(case_sensitive=true) | join }}") == "aAb"
        )
        assert env.render_str("{{ [1, 1.0, 2] | unique | length }}") == "2"

    def test_unique_by_attribute(self) -> None:
        env = Environment()
        items = [{"k": 1, "v": "a"}, {"k": 1, "v": "b"}, {"k": 2, "v": "c"}]
        source = '{% for i in items | unique(attribute="k") %}{{ i.v }}{% endfor %}'
        assert env.render_str(source, items=items) == "ac"

    def test_keys_and_values(self) -> None:
        env = Environment()
        obj = {"b": 1, "a": 2}
        assert env.render_str("{{ obj | keys | join(sep=',') }}", obj=obj) == "b,a"
        assert env.render_str("{{ obj | values }}", obj=obj) == "[1, 2]"

    def test_keys_of_array(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="needs an object"):
            env.render_str("{{ [1] | keys }}")


class TestNumberFilters:
    @pytest.mark.parametrize(
        ("value", "args", "expected"),
        [
            (2.5, "", "3"),
            (-2.5, "", "-3"),
            (2.4, "", "2"),
            (2.7, '(method="floor")', "2"),
            (2.1, '(method="ceil")', "3"),
            (3.14159, "(precision=2)", "3.14"),
            (7, "", "7"),
        ],
    )
    def test_round(self, value: float, args: str, expected: str) -> None:
        env = Environment()
        assert env.render_str("{{ n | round" + args + " }}", n=value) == expected

    def test_round_unknown_method(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError, match="Invalid arguments"):
            env.render_str('{{ 1.5 | round(method="up") }}')

    def test_abs(self) -> None:
        env = Environment()
        assert env.render_str("{{ n | abs }}", n=-4) == "4"
        assert env.render_str("{{ n | abs }}", n=-1.5) == "1.5"

    @pytest.mark.parametrize(
        ("value", "args", "expected"),
        [
            ("42", "", "42"),
            ("4.7", "", "4"),
            ("x", "", "0"),
            ("x", "(default=7)", "7"),
            (3.9, "", "3"),
            (True, "", "1"),
            ("ff", "(base=16)", "255"),
        ],
    )
    def test_int(self, value: object, args: str, expected: str) -> None:
        env = Environment()
        assert env.render_str("{{ v | int" + args + " }}", v=value) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("2.5", "2.5"), (1, "1.0"), ("x", "0.0"), (None, "0.0")],
    )
    def test_float(self, value: object, expected: str) -> None:
        env = Environment()
        assert env.render_str("{{ v | float }}", v=value) == expected

    def test_number_filter_on_string(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="needs a number"):
            env.render_str("{{ '3' | abs }}")


class TestConversionFilters:
    def test_string(self) -> None:
        env = Environment()
        assert env.render_str("{{ [1] | string | length }}") == "3"
        assert env.render_str("{{ true | string | upper }}") == "TRUE"

    def test_json_encode(self) -> None:
        env = Environment()
        data = {"a": [1, True, None], "b": "é"}
        assert env.render_str("{{ data | json_encode }}", data=data) == (
            '{"a": [1, true, null], "b": "é"}'
        )

    def test_json_encode_pretty(self) -> None:
        env = Environment()
        assert env.render_str("{{ data | json_encode(pretty=true) }}", data={"a": 1}) == (
            '{\n  "a": 1\n}'
        )

    def test_json_encode_is_escaped_in_html(self) -> None:
        env = Environment()
        env.register("data.html", "{{ data | json_encode }}")
        assert env.render("data.html", data={"a": 1}) == "{&quot;a&quot;: 1}"

    def test_safe_and_escape(self) -> None:
        env = Environment()
        env.register("page.html", "{{ v | safe }}|{{ v | escape }}|{{ v }}")
        assert env.render("page.html", v="<b>") == "<b>|&lt;b&gt;|&lt;b&gt;"

    def test_escape_outside_html(self) -> None:
        env = Environment()
        assert env.render_str("{{ '<a href=\"/\">' | escape }}") == (
            "&lt;a href=&quot;&#x2F;&quot;&gt;"
        )

    def test_default_with_positional_value(self) -> None:
        env = Environment()
        assert env.render_str("{{ missing | default('x') }}") == "x"


class TestFilterErrors:
    def test_unknown_filter_suggestion(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render_str("{{ 'a' | uper }}")
        assert "Unknown filter 'uper'" in str(exc_info.value)
        assert exc_info.value.suggestion == "Did you mean 'upper'?"

    def test_invalid_arguments(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError, match="Invalid arguments for filter 'upper'"):
            env.render_str("{{ 'a' | upper(1) }}")

    def test_failing_custom_filter(self) -> None:
        def explode(value):
            raise ValueError("kaboom")

        env = Environment()
        env.add_filter("explode", explode)
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render_str("{{ 1 | explode }}")
        error = exc_info.value
        assert error.code is ErrorCode.FILTER_ERROR
        assert "Filter 'explode' failed: kaboom" in error.message
        assert isinstance(error.__cause__, ValueError)


class TestCustomFilters:
    def test_add_filter(self) -> None:
        env = Environment()
        env.add_filter("double", lambda value: value * 2)
        assert env.render_str("{{ 21 | double }}") == "42"

    def test_filter_with_arguments(self) -> None:
        env = Environment()
        env.add_filter("wrap", lambda value, left="[", right="]": f"{left}{value}{right}")
        assert env.render_str('{{ "x" | wrap }}{{ "y" | wrap("<", right=">") }}') == "[x]<y>"

    def test_override_builtin(self) -> None:
        env = Environment()
        env.add_filter("upper", lambda value: "custom")
        assert env.render_str("{{ 'a' | upper }}") == "custom"

    def test_environments_are_independent(self) -> None:
        first, second = Environment(), Environment()
        first.add_filter("shout", lambda value: value + "!")
        assert first.render_str("{{ 'a' | shout }}") == "a!"
        with pytest.raises(TemplateRuntimeError, match="Unknown filter"):
            second.render_str("{{ 'a' | shout }}")


class TestFilterBlock:
    def test_filter_block(self) -> None:
        env = Environment()
        assert env.render_str("{% filter upper %}hi {{ name }}{% endfilter %}", name="ada") == (
            "HI ADA"
        )

    def test_filter_block_with_arguments(self) -> None:
        env = Environment()
        source = '{% filter replace(from="a", to="o") %}banana{% endfilter %}'
        assert env.render_str(source) == "bonono"

    def test_filter_block_escapes_inner_output_once(self) -> None:
        env = Environment()
        env.register("block.html", "{% filter upper %}{{ v }}{% endfilter %}")
        assert env.render("block.html", v="<a>") == "&LT;A&GT;"


class TestBuiltinTests:
    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("3 is odd", "true"),
            ("4 is even", "true"),
            ("9 is divisibleby(3)", "true"),
            ("9 is not divisibleby(2)", "true"),
            ("9 is divisibleby(0)", "false"),
            ("'quill' is starting_with('qu')", "true"),
            ("'quill' is ending_with('ll')", "true"),
            ("'quill' is containing('ui')", "true"),
            ("[1, 2] is containing(2)", "true"),
            ("{'a': 1} is containing('b')", "false"),
            ("1.5 is number", "true"),
            ("true is number", "false"),
            ("'a' is string", "true"),
            ("[] is array", "true"),
            ("{} is object", "true"),
            ("'abc' is iterable", "false"),
            ("none is none", "true"),
            ("0 is none", "false"),
        ],
    )
    def test_tests(self, expression: str, expected: str) -> None:
        env = Environment()
        assert env.render_str("{{ " + expression + " }}") == expected

    def test_parity_needs_integer(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError, match="needs an integer"):
            env.render_str("{{ 1.5 is odd }}")

    def test_unknown_test(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError) as exc_info:
            env.render_str("{{ 1 is od }}")
        assert exc_info.value.suggestion == "Did you mean 'odd'?"

    def test_custom_test(self) -> None:
        env = Environment()
        env.add_test("prime", lambda n: n > 1 and all(n % i for i in range(2, n)))
        source = "{% for n in range(end=10) %}{% if n is prime %}{{ n }}{% endif %}{% endfor %}"
        assert env.render_str(source) == "2357"


class TestGlobals:
    def test_range(self) -> None:
        env = Environment()
        assert env.render_str("{{ range(end=3) }}") == "[0, 1, 2]"
        assert env.render_str("{{ range(5, 1, 2) }}") == "[1, 3]"
        assert env.render_str("{{ range(end=5, start=4, step_by=-1) }}") == "[]"

    def test_range_zero_step(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError, match="must not be zero"):
            env.render_str("{{ range(end=3, step_by=0) }}")

    def test_range_needs_integers(self) -> None:
        env = Environment()
        with pytest.raises(TypeMismatchError):
            env.render_str("{{ range(end='3') }}")

    def test_throw(self) -> None:
        env = Environment()
        with pytest.raises(TemplateRuntimeError, match="user is required"):
            env.render_str('{{ throw(message="user is required") }}')

    def test_unknown_function(self) -> None:
        env = Environment()
        with pytest.raises(UndefinedError) as exc_info:
            env.render_str("{{ rnage(end=3) }}")
        assert exc_info.value.kind == "function"
        assert "range" in exc_info.value.suggestion

    def test_add_global(self) -> None:
        env = Environment()
        env.add_global("now", lambda: "2024-01-01")
        assert env.render_str("{{ now() }}") == "2024-01-01"


class TestFilterProperties:
    @given(chain=string_filter_chain)
    @settings(max_examples=100)
    def test_string_chains_produce_strings(self, chain: str) -> None:
        env = Environment()
        result = env.render_str("{{ value | " + chain + " }}", value="Hello <b>World</b>")
        assert isinstance(result, str)

    @given(items=sortable_int_list)
    @settings(max_examples=100)
    def test_sort_matches_sorted(self, items: list[int]) -> None:
        env = Environment()
        result = env.render_str("{{ items | sort | join(sep=',') }}", items=items)
        assert result == ",".join(str(i) for i in sorted(items))

    @given(items=sortable_int_list)
    @settings(max_examples=100)
    def test_reverse_twice_is_identity(self, items: list[int]) -> None:
        env = Environment()
        result = env.render_str("{{ items | reverse | reverse | join(sep=',') }}", items=items)
        assert result == ",".join(str(i) for i in items)
