"""Route pattern compilation.

A pattern is a literal path with ``{name}`` placeholders. Each
placeholder becomes a group matching one or more non-slash characters,
and the whole expression is anchored to the full path::

    "/user/{id}"  ->  ^/user/([^/]+)$

Placeholder names are only kept for display; captured values are bound
to handler parameters by position.
"""

import re

PLACEHOLDER = re.compile(r"\{(\w+)\}")
SEGMENT = r"([^/]+)"


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Translate *pattern* into an anchored regular expression.

    Literal text between placeholders is escaped, so ``.`` or ``+`` in a
    pattern match themselves.
    """
    parts: list[str] = []
    last = 0
    for placeholder in PLACEHOLDER.finditer(pattern):
        parts.append(re.escape(pattern[last : placeholder.start()]))
        parts.append(SEGMENT)
        last = placeholder.end()
    parts.append(re.escape(pattern[last:]))
    return re.compile(f"^{''.join(parts)}$")


def placeholder_names(pattern: str) -> tuple[str, ...]:
    """Names of the placeholders in *pattern*, in order of appearance."""
    return tuple(PLACEHOLDER.findall(pattern))
