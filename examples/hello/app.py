"""Hello World -- the simplest tagsplice example.

Build a template from a string and render it with context variables.
No templates directory needed.

Run:
    python app.py
"""

from tagsplice import Environment

env = Environment()

template = env.from_string("Hello, {{ name }}!")

output = template.render(name="World")


def main() -> None:
    print(output)
    print()

    for name in ["tagsplice", "Python"]:
        print(template.render(name=name))


if __name__ == "__main__":
    main()
