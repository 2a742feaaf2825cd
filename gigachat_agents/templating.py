"""Templates rendered against event payloads.

Placeholders use the Liquid-style ``{{ name }}`` syntax already used by
agent options, with dotted paths (``{{ article.title }}``) for nested data.
"""

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from gigachat_agents.exceptions import TemplateError

_PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}")
_PATH = re.compile(r"^[\w-]+(\.[\w-]+)*$")


class PromptTemplate(ABC):
    """Abstract base class for templates."""

    @abstractmethod
    def render(self, data: Mapping[str, Any]) -> str:
        """Render the template with the provided data.

        Args:
            data: Template variables.

        Returns:
            Rendered string.
        """
        ...


class EventTemplate(PromptTemplate):
    """Template substituting payload values into ``{{ path }}`` placeholders.

    Missing keys and ``None`` render as an empty string. Lists and
    mappings render as JSON.
    """

    def __init__(self, source: str) -> None:
        """Initialize the template.

        Args:
            source: Template text.

        Raises:
            TemplateError: If a placeholder is not a plain dotted path.
                Filters and tags are not supported.
        """
        self.source = source
        self.paths = [match.group(1).strip() for match in _PLACEHOLDER.finditer(source)]
        for path in self.paths:
            if not _PATH.match(path):
                raise TemplateError(
                    f"Invalid placeholder: {{{{ {path} }}}}",
                    details={"placeholder": path},
                )

    def render(self, data: Mapping[str, Any]) -> str:
        """Render the template against a payload."""
        return _PLACEHOLDER.sub(
            lambda m: _to_text(lookup(data, m.group(1).strip())), self.source
        )


def lookup(data: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path in nested mappings and lists.

    Returns None when any segment is missing.
    """
    current: Any = data
    for part in path.split("."):
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        else:
            return None
        if current is None:
            return None
    return current


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)
