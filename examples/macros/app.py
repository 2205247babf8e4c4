"""Reusable macros -- import a macro library into a page.

Define macros in one registered template, import them under a namespace
with {% import "..." as ns %}, and call them as {{ ns::name(...) }}.

Run:
    python app.py
"""

from quill import Environment

env = Environment()

env.register(
    "macros.html",
    """\
{% macro card(name, desc) %}<div class="card"><h2 class="card-header">{{ name }}</h2><p>{{ desc }}</p></div>{% endmacro card %}
{% macro alert(message, level="info") %}<div class="alert alert-{{ level }}">{{ message }}</div>{% endmacro alert %}
""",
)

env.register(
    "page.html",
    """\
{%- import "macros.html" as ui -%}
<h1>{{ title }}</h1>
{% for feature in features %}{{ ui::card(name=feature.name, desc=feature.desc) }}
{% endfor %}{{ ui::alert(message=warning_message, level="warning") }}
""",
)

output = env.render(
    "page.html",
    title="Macro Demo",
    features=[
        {"name": "Tree-walking", "desc": "Compiled once, rendered many times"},
        {"name": "Thread-safe", "desc": "Renders share nothing mutable"},
        {"name": "Zero deps", "desc": "Pure Python, <no> dependencies"},
    ],
    warning_message="This is an alpha release. API may change.",
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
