# Maps filter operators to SQL clause templates.
# `{col}` is the resolved column, `{p}` the positional placeholder of the bound value.
# A template may reference `{p}` more than once; the value is bound a single time.
OPERATOR_MAP = {
    "eq": "{col} = {p}",        # Equal
    "gte": "{col} >= {p}",      # Greater Than or Equal
    "lte": "{col} <= {p}",      # Less Than or Equal
    "contains": "{col} {like} {p}{escape}",   # Case-insensitive substring
    # Production span contains the year; an open years_end means still in production.
    "span": "({col} <= {p} AND ({end} IS NULL OR {end} >= {p}))",
}

# Operators whose bound value is wrapped in `%...%`.
LIKE_OPERATORS = {"contains"}

# Per-dialect case-insensitive match keyword and escape suffix.
# PostgreSQL already treats backslash as the LIKE escape character.
DIALECTS = {
    "postgresql": ("ILIKE", ""),
    "sqlite": ("LIKE", " ESCAPE '\\'"),
}


def like_pattern(term: str) -> str:
    """Wrap a literal term for substring matching, escaping LIKE metacharacters."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
