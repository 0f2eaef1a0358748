"""DictLoader -- in-memory templates without filesystem.

Templates from a dictionary, with inheritance and an include.
Use case: tests, generated templates, single-file apps.

Run:
    python app.py
"""

from tagsplice import DictLoader, Environment

templates = {
    "base.html": """\
<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
{% include "nav.html" %}
<main>
{% block content %}
{% endblock %}
</main>
</body>
</html>
""",
    "nav.html": """\
<nav>{% for item in nav_items %}<a href="{{ item.url }}">{{ item.label }}</a>{% endfor %}</nav>""",
    "page.html": """\
{% extends "base.html" %}
{% block content %}
    <h1>{{ heading }}</h1>
    <p>{{ message }}</p>
{% endblock %}
""",
}

env = Environment(loader=DictLoader(templates))
template = env.get_template("page.html")

output = template.render(
    title="DictLoader Demo",
    nav_items=[
        {"url": "/", "label": "Home"},
        {"url": "/about", "label": "About"},
    ],
    heading="In-Memory Templates",
    message="No filesystem required. Templates loaded from a dict.",
)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
