"""Hello World -- the simplest quill example.

Compile a template from a string and render it with context variables.
No registration needed.

Run:
    python app.py
"""

from quill import Environment

env = Environment()

# Compile from string
template = env.from_string("Hello, {{ name }}!")

# Render with context
output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    # Multiple renders with different context
    for name in ["Quill", "Ada", "Python"]:
        print(template.render(name=name))

    # Strict by default; default() supplies a fallback
    print(env.render_str('Hello, {{ nickname | default(value="stranger") }}!'))


if __name__ == "__main__":
    main()
