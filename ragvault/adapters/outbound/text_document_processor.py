"""Plain text and markdown document processor."""

import asyncio
import logging
import re
from pathlib import Path

from ...core.domain import DocumentElement, ElementType, StructuredDocument
from ...core.domain.exceptions import DocumentProcessingError
from ...core.ports.document_processor_port import DocumentProcessorPort

HEADING_LINE = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$")
LIST_ITEM_LINE = re.compile(r"^\s*[*\-+]\s+(.+)$")
QUOTE_LINE = re.compile(r"^\s*>\s?(.*)$")
TITLE_UNDERLINE = re.compile(r"^[=\-]{3,}$")
FENCE = "```"

# A first line longer than this is body text, not a title
MAX_TITLE_LENGTH = 100
TITLE_SCAN_LINES = 5


class _ElementBuilder:
    """Accumulates elements while tracking the heading lineage."""

    def __init__(self) -> None:
        self.elements: list[DocumentElement] = []
        self._lineage: list[tuple[int, str]] = []
        self._paragraph: list[str] = []

    @property
    def section_path(self) -> str:
        return " > ".join(title for _, title in self._lineage)

    def heading(self, level: int, text: str) -> None:
        self.flush_paragraph()
        while self._lineage and self._lineage[-1][0] >= level:
            self._lineage.pop()
        self._lineage.append((level, text))
        self.add(ElementType.for_heading_level(level), text, heading_level=level)

    def add(self, element_type: ElementType, text: str, heading_level: int | None = None) -> None:
        if not text.strip():
            return
        self.elements.append(
            DocumentElement(
                type=element_type,
                text=text,
                section_path=self.section_path,
                heading_level=heading_level,
            )
        )

    def append_line(self, line: str) -> None:
        self._paragraph.append(line)

    def flush_paragraph(self) -> None:
        if self._paragraph:
            self.add(ElementType.PARAGRAPH, "\n".join(self._paragraph).strip())
            self._paragraph = []


def parse_structure(content: str, default_title: str = "") -> StructuredDocument:
    """Recognize title, headings, lists, quotes, code and paragraphs in text.

    Args:
        content: Raw file text.
        default_title: Title used when the text has none of its own.

    Returns:
        The structured document. Its title is also emitted as a level 1
        heading so no text is lost.
    """
    lines = content.splitlines()
    document = StructuredDocument(title=default_title)
    builder = _ElementBuilder()

    start = 0
    for i, line in enumerate(lines[:TITLE_SCAN_LINES]):
        candidate = line.strip()
        if not candidate:
            continue
        underlined = i + 1 < len(lines) and bool(TITLE_UNDERLINE.match(lines[i + 1].strip()))
        is_markup = (
            candidate.startswith(FENCE)
            or HEADING_LINE.match(candidate)
            or LIST_ITEM_LINE.match(candidate)
            or QUOTE_LINE.match(candidate)
        )
        if not is_markup and (underlined or len(candidate) < MAX_TITLE_LENGTH):
            document.title = candidate
            builder.heading(1, candidate)
            start = i + 2 if underlined else i + 1
        break

    in_code = False
    code_lines: list[str] = []
    for line in lines[start:]:
        if line.strip().startswith(FENCE):
            if in_code:
                builder.add(ElementType.CODE_BLOCK, "\n".join(code_lines))
                code_lines = []
            else:
                builder.flush_paragraph()
            in_code = not in_code
            continue
        if in_code:
            code_lines.append(line)
            continue

        heading = HEADING_LINE.match(line)
        if heading:
            builder.heading(len(heading.group(1)), heading.group(2).strip())
            continue

        list_item = LIST_ITEM_LINE.match(line)
        if list_item:
            builder.flush_paragraph()
            builder.add(ElementType.LIST_ITEM, list_item.group(1).strip())
            continue

        quote = QUOTE_LINE.match(line)
        if quote:
            builder.flush_paragraph()
            builder.add(ElementType.QUOTE, quote.group(1).strip())
            continue

        if line.strip():
            builder.append_line(line.strip())
        else:
            builder.flush_paragraph()

    # An unterminated fence keeps its lines as code
    if in_code:
        builder.add(ElementType.CODE_BLOCK, "\n".join(code_lines))
    builder.flush_paragraph()

    document.elements = builder.elements
    return document


class TextDocumentProcessor(DocumentProcessorPort):
    """Reads UTF-8 text and markdown files."""

    supported_extensions = (".txt", ".md", ".markdown")
    supports_structured_extraction = True

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    async def extract_text(self, path: Path) -> str:
        content = await asyncio.to_thread(self._read, Path(path))
        self._logger.debug("Read %d characters from %s", len(content), Path(path).name)
        return content

    async def extract_structured_content(self, path: Path) -> StructuredDocument:
        path = Path(path)
        content = await asyncio.to_thread(self._read, path)
        structured = parse_structure(content, default_title=path.stem)
        self._logger.debug(
            "Extracted %d structural elements from %s", len(structured.elements), path.name
        )
        return structured

    def _read(self, path: Path) -> str:
        try:
            # utf-8-sig drops a leading byte order mark
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentProcessingError(
                f"Failed to read {path.name}",
                cause=e,
                context={"path": str(path)},
            ) from e
