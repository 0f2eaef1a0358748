"""File-based templates -- the most common real-world pattern.

Loads templates from disk with FileSystemLoader, demonstrates template
inheritance (extends/block/super) and includes.

Run:
    python app.py
"""

from pathlib import Path

from tagsplice import Environment, FileSystemLoader

templates_dir = Path(__file__).parent / "templates"
env = Environment(loader=FileSystemLoader(templates_dir))

nav_items = [
    {"url": "/", "label": "Home"},
    {"url": "/about", "label": "About"},
]

home_template = env.get_template("home.html")
about_template = env.get_template("about.html")

home_output = home_template.render(
    site_name="My Site",
    nav_items=nav_items,
    current="/",
    title="Welcome",
    message="This is a tagsplice-powered site with template inheritance.",
)

about_output = about_template.render(
    site_name="My Site",
    nav_items=nav_items,
    current="/about",
    title="About Us",
)


def main() -> None:
    print("=== Home Page ===")
    print(home_output)
    print()
    print("=== About Page ===")
    print(about_output)


if __name__ == "__main__":
    main()
