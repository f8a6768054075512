"""Structured document representation produced by document processors.

A StructuredDocument is an intermediate form: produced once per
extraction, consumed once by the chunking service, never persisted.
"""

from dataclasses import dataclass, field
from enum import Enum


class ElementType(str, Enum):
    """Kind of a structural element."""

    HEADING1 = "Heading1"
    HEADING2 = "Heading2"
    HEADING3 = "Heading3"
    PARAGRAPH = "Paragraph"
    LIST_ITEM = "ListItem"
    CODE_BLOCK = "CodeBlock"
    TABLE = "Table"
    IMAGE = "Image"
    QUOTE = "Quote"

    @property
    def is_heading(self) -> bool:
        return self in (ElementType.HEADING1, ElementType.HEADING2, ElementType.HEADING3)

    @classmethod
    def for_heading_level(cls, level: int) -> "ElementType":
        if level <= 1:
            return cls.HEADING1
        if level == 2:
            return cls.HEADING2
        return cls.HEADING3


@dataclass
class DocumentElement:
    """A single element of a structured document."""

    type: ElementType
    text: str
    section_path: str = ""
    heading_level: int | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass
class StructuredDocument:
    """A title plus an ordered sequence of typed elements."""

    title: str = ""
    elements: list[DocumentElement] = field(default_factory=list)

    @property
    def has_content(self) -> bool:
        """True when at least one element carries non-blank text."""
        return any(element.text.strip() for element in self.elements)

    def to_plain_text(self) -> str:
        """Element texts separated by blank lines, led by the title.

        The title is not repeated when the first element already carries it.
        """
        texts = [element.text for element in self.elements if element.text.strip()]
        if self.title and (not texts or texts[0] != self.title):
            texts.insert(0, self.title)
        return "\n\n".join(texts)
