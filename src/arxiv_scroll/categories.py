"""arXiv category names, friendly filter tags, and category colors."""

from __future__ import annotations

# Default color for unknown categories (Monokai gray)
DEFAULT_CATEGORY_COLOR = "#888888"

# Category color mapping (Monokai-inspired palette)
CATEGORY_COLORS = {
    "cs.AI": "#f92672",  # Monokai pink
    "cs.CL": "#66d9ef",  # Monokai blue
    "cs.LG": "#a6e22e",  # Monokai green
    "cs.CV": "#e6db74",  # Monokai yellow
    "cs.SE": "#ae81ff",  # Monokai purple
    "cs.HC": "#fd971f",  # Monokai orange
    "cs.RO": "#66d9ef",
    "cs.NE": "#f92672",
    "cs.IR": "#ae81ff",
    "cs.CR": "#fd971f",
}

CATEGORY_NAMES: dict[str, str] = {
    "cs.AI": "Artificial Intelligence",
    "cs.AR": "Hardware Architecture",
    "cs.CC": "Computational Complexity",
    "cs.CE": "Computational Engineering",
    "cs.CG": "Computational Geometry",
    "cs.CL": "Computation & Language",
    "cs.CR": "Cryptography & Security",
    "cs.CV": "Computer Vision",
    "cs.CY": "Computers & Society",
    "cs.DB": "Databases",
    "cs.DC": "Distributed Computing",
    "cs.DL": "Digital Libraries",
    "cs.DM": "Discrete Mathematics",
    "cs.DS": "Data Structures & Algorithms",
    "cs.ET": "Emerging Technologies",
    "cs.FL": "Formal Languages",
    "cs.GL": "General Literature",
    "cs.GR": "Graphics",
    "cs.GT": "Game Theory",
    "cs.HC": "Human-Computer Interaction",
    "cs.IR": "Information Retrieval",
    "cs.IT": "Information Theory",
    "cs.LG": "Machine Learning",
    "cs.LO": "Logic in Computer Science",
    "cs.MA": "Multiagent Systems",
    "cs.MM": "Multimedia",
    "cs.MS": "Mathematical Software",
    "cs.NA": "Numerical Analysis",
    "cs.NE": "Neural & Evolutionary Computing",
    "cs.NI": "Networking & Internet Architecture",
    "cs.OH": "Other Computer Science",
    "cs.OS": "Operating Systems",
    "cs.PF": "Performance",
    "cs.PL": "Programming Languages",
    "cs.RO": "Robotics",
    "cs.SC": "Symbolic Computation",
    "cs.SD": "Sound",
    "cs.SE": "Software Engineering",
    "cs.SI": "Social & Information Networks",
    "cs.SY": "Systems & Control",
}

# Short user-facing tags accepted wherever a category code is
TAG_TO_CATEGORY: dict[str, str] = {
    "ai": "cs.AI",
    "ml": "cs.LG",
    "cv": "cs.CV",
    "nlp": "cs.CL",
    "robotics": "cs.RO",
    "security": "cs.CR",
    "systems": "cs.OS",
    "graphics": "cs.GR",
    "hci": "cs.HC",
    "databases": "cs.DB",
    "networking": "cs.NI",
    "programming": "cs.PL",
    "algorithms": "cs.DS",
    "distributed": "cs.DC",
    "software": "cs.SE",
}

POPULAR_CATEGORIES = (
    "cs.AI",
    "cs.LG",
    "cs.CV",
    "cs.CL",
    "cs.RO",
    "cs.CR",
    "cs.HC",
    "cs.SE",
    "cs.DS",
    "cs.NE",
)

_CODES_BY_LOWER = {code.lower(): code for code in CATEGORY_NAMES}


def get_category_name(code: str) -> str:
    """Return the display name for a category code, or the code itself."""
    return CATEGORY_NAMES.get(code, code)


def resolve_category_tag(tag: str) -> str:
    """Map a friendly tag or loosely-cased code to a canonical category code.

    Unknown values pass through stripped, so codes outside the ``cs`` archive
    (``math.CO``, ``q-bio.NC``) still work as filters.
    """
    cleaned = tag.strip()
    if not cleaned:
        return ""
    lowered = cleaned.lower()
    if lowered in TAG_TO_CATEGORY:
        return TAG_TO_CATEGORY[lowered]
    return _CODES_BY_LOWER.get(lowered, cleaned)


def get_category_color(code: str) -> str:
    return CATEGORY_COLORS.get(code, DEFAULT_CATEGORY_COLOR)


__all__ = [
    "CATEGORY_COLORS",
    "CATEGORY_NAMES",
    "DEFAULT_CATEGORY_COLOR",
    "POPULAR_CATEGORIES",
    "TAG_TO_CATEGORY",
    "get_category_color",
    "get_category_name",
    "resolve_category_tag",
]
