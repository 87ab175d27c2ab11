"""Placeholder substitution for template file contents.

The rewriter is a fixed, ordered list of rule objects. Order matters: the
module path must be replaced before the bare project identifier (which is a
substring of its last segment), and the line-oriented metadata rules must see
the already-substituted identifiers. The identifier tokens are replaced in a
single scan so a replacement is never rewritten by a later token. Keeping
the order in one list means no caller can apply the passes out of sequence.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .models import ProjectMeta

# ---------------------------------------------------------------------------
# Placeholder tokens carried by the scaffold template
# ---------------------------------------------------------------------------

TEMPLATE_MODULE = "github.com/richer/ai_skeleton"
TEMPLATE_NAME = "ai_skeleton"
TEMPLATE_TITLE = "AI Skeleton"
TEMPLATE_KEBAB = "ai-skeleton"
TEMPLATE_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Name transforms
# ---------------------------------------------------------------------------


def to_title(name: str) -> str:
    """Convert ``my_app`` to ``My App``.

    Words are split on underscores; only the first character of each word is
    upper-cased, the rest is kept as-is.
    """
    words = name.split("_")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def to_kebab_case(name: str) -> str:
    """Convert ``My_App`` to ``my-app``."""
    return name.lower().replace("_", "-")


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


class RewriteRule(ABC):
    """One substitution pass over a file's text."""

    @abstractmethod
    def apply(self, content: str, meta: ProjectMeta) -> str:
        """Return *content* with this rule's substitution applied."""


@dataclass(frozen=True)
class LiteralRule(RewriteRule):
    """Replace every occurrence of *token* with a value derived from the meta."""

    token: str
    replacement: Callable[[ProjectMeta], str]

    def apply(self, content: str, meta: ProjectMeta) -> str:
        return content.replace(self.token, self.replacement(meta))


@dataclass(frozen=True)
class IdentifierRule(RewriteRule):
    """Replace several tokens in one scan of the text.

    Tokens are tried in the given order at each position, so a token that
    contains another must be listed first. Substituted text is never scanned
    again, so a project name that itself contains a template token is left
    intact.
    """

    rules: tuple[LiteralRule, ...]

    @property
    def tokens(self) -> list[str]:
        return [rule.token for rule in self.rules]

    def apply(self, content: str, meta: ProjectMeta) -> str:
        if not self.rules:
            return content
        values = {rule.token: rule.replacement(meta) for rule in self.rules}
        pattern = re.compile("|".join(re.escape(token) for token in self.tokens))
        return pattern.sub(lambda match: values[match.group(0)], content)


@dataclass(frozen=True)
class YamlProjectRule(RewriteRule):
    """Rewrite the ``project:`` block of the backend YAML configuration.

    Applies only when the text contains both ``project:`` and ``name:``.
    """

    template_name: str = TEMPLATE_NAME
    template_version: str = TEMPLATE_VERSION

    def apply(self, content: str, meta: ProjectMeta) -> str:
        if "project:" not in content or "name:" not in content:
            return content

        # The identifier pass has usually rewritten the name already.
        content = content.replace(f'name: "{self.template_name}"', f'name: "{meta.name}"')
        content = content.replace(
            f'version: "{self.template_version}"', f'version: "{meta.version}"'
        )

        if meta.description:
            lines = content.split("\n")
            for i, line in enumerate(lines):
                if "description:" in line:
                    lines[i] = f'  description: "{meta.description}"'
                    break
            content = "\n".join(lines)
        return content


@dataclass(frozen=True)
class PackageDescriptorRule(RewriteRule):
    """Rewrite name/version/description lines of the frontend ``package.json``.

    Applies only when the text contains both a ``"name":`` and a
    ``"version":`` key. Each matching line is replaced whole.
    """

    name_suffix: str = "-frontend"

    def apply(self, content: str, meta: ProjectMeta) -> str:
        if '"name":' not in content or '"version":' not in content:
            return content

        package_name = f"{to_kebab_case(meta.name)}{self.name_suffix}"
        lines = content.split("\n")
        for i, line in enumerate(lines):
            if '"name":' in line:
                lines[i] = f'  "name": "{package_name}",'
            elif '"version":' in line:
                lines[i] = f'  "version": "{meta.version}",'
            elif meta.description and '"description":' in line:
                lines[i] = f'  "description": "{meta.description}",'
        return "\n".join(lines)


DEFAULT_RULES: tuple[RewriteRule, ...] = (
    IdentifierRule(
        (
            # Module path first: the identifiers below are substrings of it.
            LiteralRule(TEMPLATE_MODULE, lambda meta: meta.module),
            LiteralRule(TEMPLATE_NAME, lambda meta: meta.name),
            LiteralRule(TEMPLATE_TITLE, lambda meta: to_title(meta.name)),
            LiteralRule(TEMPLATE_KEBAB, lambda meta: to_kebab_case(meta.name)),
        )
    ),
    YamlProjectRule(),
    PackageDescriptorRule(),
)


# ---------------------------------------------------------------------------
# ContentRewriter
# ---------------------------------------------------------------------------


class ContentRewriter:
    """Applies an ordered sequence of ``RewriteRule`` objects to file text."""

    def __init__(self, rules: Sequence[RewriteRule] | None = None) -> None:
        self.rules: tuple[RewriteRule, ...] = tuple(DEFAULT_RULES if rules is None else rules)

    def rewrite(self, content: str, meta: ProjectMeta) -> str:
        result = content
        for rule in self.rules:
            result = rule.apply(result, meta)
        return result


_default_rewriter = ContentRewriter()


def rewrite_content(content: str, meta: ProjectMeta) -> str:
    """Rewrite *content* with the default rule pipeline."""
    return _default_rewriter.rewrite(content, meta)
