"""
SQL fingerprint normalizer.

Literal values are replaced with a placeholder by an ordered table of regex
rewrites. Keywords and identifiers are left untouched, including their case.
Rules only ever match literal shapes, never the placeholder itself, so running
the normalizer on its own output is a no-op.
"""

import re
from dataclasses import dataclass
from typing import Callable, Union

PLACEHOLDER = "???"

# '...' with doubled or backslash-escaped quotes. The second form is a
# standard-conforming string ending in a backslash, e.g. 'C:\'.
_STRING = r"(?:'(?:[^'\\]|\\.|'')*'|'[^']*')"
_NUMBER = r"(?<![\w.])[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?(?![\w.])"
# DB-API markers: %s, %(name)s, $1
_PARAM = r"%s|%\(\w+\)s|\$\d+"

LITERAL = rf"(?:{_STRING}|{_NUMBER}|{_PARAM})"


@dataclass(frozen=True)
class NormalizationRule:
    """A single lexical rewrite applied by ``clean_sql_query``."""

    name: str
    pattern: "re.Pattern[str]"
    replacement: Union[str, Callable[["re.Match[str]"], str]]

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


def masking_rule(name: str, body: str, template: str, flags: int = 0) -> NormalizationRule:
    """
    Build a rule rewriting ``body`` matches with ``template``.

    Quoted strings met outside of ``body`` are consumed whole and returned
    unchanged, so nothing inside a string literal is ever rewritten.
    """
    pattern = re.compile(rf"(?P<hit>{body})|{_STRING}", flags)

    def replace(match: "re.Match[str]") -> str:
        if match.group("hit") is None:
            return match.group(0)
        return match.expand(template)

    return NormalizationRule(name, pattern, replace)


NORMALIZATION_RULES: tuple[NormalizationRule, ...] = (
    NormalizationRule(
        "collapse_whitespace",
        re.compile(r"\s+"),
        " ",
    ),
    masking_rule(
        "literal_lists",
        rf"\(\s*{LITERAL}(?:\s*,\s*{LITERAL})*\s*\)",
        f"({PLACEHOLDER})",
    ),
    masking_rule(
        "comparison_operands",
        rf"(?P<op>(?<![-<>!=])(?:<=|>=|<>|!=|=|<|>)\s*){LITERAL}",
        rf"\g<op>{PLACEHOLDER}",
    ),
    masking_rule(
        "between_operands",
        rf"(?P<between>\bBETWEEN\s+){LITERAL}(?P<and>\s+AND\s+){LITERAL}",
        rf"\g<between>{PLACEHOLDER}\g<and>{PLACEHOLDER}",
        re.IGNORECASE,
    ),
    masking_rule(
        "limit_offset",
        rf"(?P<keyword>\b(?:LIMIT|OFFSET)\s+){LITERAL}",
        rf"\g<keyword>{PLACEHOLDER}",
        re.IGNORECASE,
    ),
    masking_rule(
        "pattern_operands",
        rf"(?P<keyword>\b(?:I?LIKE|SIMILAR\s+TO)\s+){LITERAL}",
        rf"\g<keyword>{PLACEHOLDER}",
        re.IGNORECASE,
    ),
    masking_rule(
        "list_elements",
        rf"(?<=[(,])(?P<lead>\s*){LITERAL}(?=\s*[,)])",
        rf"\g<lead>{PLACEHOLDER}",
    ),
)


def clean_sql_query(query, rules=NORMALIZATION_RULES) -> str:
    """
    Return ``query`` with every recognized literal replaced by ``???``.

    Args:
        query: Raw SQL text, ``None`` is treated as empty.
        rules: Rewrite table applied in order.

    Returns:
        The whitespace-collapsed, literal-masked statement.
    """
    text = str(query or "")
    for rule in rules:
        text = rule.apply(text)
    return text.strip()


def fingerprint(query) -> str:
    """Aggregation key: the cleaned statement folded to lower case."""
    return clean_sql_query(query).lower()
