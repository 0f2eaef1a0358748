"""Hypothesis strategies for tagsplice property tests."""

from hypothesis import strategies as st

from tagsplice._types import Edit

# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------

# Text with no delimiter characters, so it never forms or closes a tag.
plain_text = st.text(
    alphabet=st.characters(
        blacklist_categories=("Cs",),
        blacklist_characters="{}%",
    ),
    max_size=40,
)

safe_identifier = st.from_regex(r"[a-z][a-z0-9_]{0,8}", fullmatch=True).filter(
    lambda s: s not in {"and", "or", "not", "in", "is", "if", "else", "true", "false", "none"}
)

safe_integer = st.integers(min_value=-1000, max_value=1000)

# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

expression_tag = safe_identifier.map(lambda name: "{{ " + name + " }}")

statement_tag = st.sampled_from(
    ["{% if x %}", "{% endif %}", "{% for a in b %}", "{% endfor %}", "{% set y = 1 %}"]
)

tag = st.one_of(expression_tag, statement_tag)


@st.composite
def tagged_template(draw):
    """Return ``(source, tag_count)``: plain text interleaved with tags."""
    parts = [draw(plain_text)]
    tags = draw(st.lists(tag, max_size=8))
    for t in tags:
        parts.append(t)
        parts.append(draw(plain_text))
    return "".join(parts), len(tags)


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------


@st.composite
def source_and_edits(draw):
    """Return ``(source, edits)`` where edits are disjoint and shuffled."""
    source = draw(st.text(max_size=60))
    points = sorted(
        draw(st.lists(st.integers(0, len(source)), unique=True, max_size=10))
    )
    edits = [
        Edit(start, end, draw(st.text(max_size=5)))
        for start, end in zip(points[::2], points[1::2], strict=False)
    ]
    return source, draw(st.permutations(edits))


# ---------------------------------------------------------------------------
# Structural lines
# ---------------------------------------------------------------------------

template_line = st.sampled_from(
    [
        "{% block a %}",
        "  {% endblock %}  ",
        "{% extends 'base' %}",
        "{% include 'x' %}",
        "{% only %}",
        "text",
        "x {% block a %}y{% endblock %}",
        "{% if x %}",
        "",
    ]
)

structural_source = st.lists(template_line, max_size=10).map("\n".join)
