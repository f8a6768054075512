"""Chunking engine: turns a document into ordered, stably-identified chunks.

Strategies are tried in a fixed priority order and the first applicable one
that yields chunks wins:

1. StructuredChunkingStrategy - a StructuredDocument with content is supplied
2. MarkdownChunkingStrategy - plain text containing markdown headings
3. TextChunkingStrategy - always applicable fallback

Everything here is pure: no I/O and no suspension points.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..domain import (
    DEFAULT_CHUNK_TYPE,
    Document,
    DocumentChunk,
    StructuredDocument,
    make_chunk_id,
)
from ..domain.exceptions import InvalidChunkingConfigurationError
from ..ports.chunking_port import ChunkingStrategy

PARAGRAPH_SPLIT = re.compile(r"\r?\n\s*\r?\n")
MARKDOWN_HEADING = re.compile(r"^(#{1,6})[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE)
WHITESPACE = re.compile(r"\s+")
SENTENCE_BREAKS = (". ", ".\n", "? ", "?\n", "! ", "!\n")
SECTION_SEPARATOR = " > "

# Markdown sections up to this multiple of chunk_size are kept whole
SECTION_SLACK = 1.5


def validate_chunking_config(chunk_size: int, chunk_overlap: int) -> None:
    """Fail fast on a size/overlap pair that cannot make progress.

    Raises:
        InvalidChunkingConfigurationError: If chunk_size is not positive,
            chunk_overlap is negative, or chunk_overlap >= chunk_size.
    """
    context = {"chunk_size": chunk_size, "chunk_overlap": chunk_overlap}
    if chunk_size <= 0:
        raise InvalidChunkingConfigurationError("chunk_size must be positive", context=context)
    if chunk_overlap < 0:
        raise InvalidChunkingConfigurationError(
            "chunk_overlap must be non-negative", context=context
        )
    if chunk_overlap >= chunk_size:
        raise InvalidChunkingConfigurationError(
            "chunk_overlap must be less than chunk_size", context=context
        )


def sliding_window(text: str, chunk_size: int, chunk_overlap: int) -> list[str]:
    """Split text into windows of about chunk_size characters.

    Consecutive windows share up to chunk_overlap characters and every
    window after the first starts on a word. A window prefers to end on a
    sentence boundary when one falls past both its midpoint and its overlap,
    so each window ends further into the text than the one before.
    """
    text = text.strip()
    if not text:
        return []
    if len(text) <= chunk_size:
        return [text]

    windows = []
    start = 0
    while start < len(text):
        end = start + chunk_size
        if end < len(text):
            floor = start + max(chunk_size // 2, chunk_overlap)
            for punct in SENTENCE_BREAKS:
                last_punct = text.rfind(punct, start, end)
                if last_punct > floor:
                    end = last_punct + 1
                    break
        window = text[start:end].strip()
        if window:
            windows.append(window)
        if end >= len(text):
            break
        start = word_start(text, end - chunk_overlap, end)
    return windows


def word_start(text: str, position: int, limit: int) -> int:
    """First word start at or after position, searching no further than limit."""
    if position == 0 or text[position - 1].isspace() or text[position].isspace():
        return position
    match = WHITESPACE.search(text, position, limit)
    return match.end() if match else position


def overlap_tail(text: str, chunk_overlap: int) -> str:
    """Last chunk_overlap characters of text, starting on a word boundary."""
    if chunk_overlap <= 0 or len(text) <= chunk_overlap:
        return ""
    tail = text[-chunk_overlap:]
    first_space = tail.find(" ")
    if 0 < first_space < len(tail) - 1:
        tail = tail[first_space + 1 :]
    return tail.strip()


@dataclass
class ChunkDraft:
    """Chunk text plus structural labels, before ids are assigned."""

    content: str
    section_path: str = ""
    chunk_type: str = DEFAULT_CHUNK_TYPE
    heading_level: int | None = None


def materialize(document: Document, drafts: Sequence[ChunkDraft]) -> list[DocumentChunk]:
    """Number drafts in document order and derive their ids."""
    return [
        DocumentChunk(
            id=make_chunk_id(document.id, index),
            document_id=document.id,
            content=draft.content,
            chunk_index=index,
            source=document.name,
            section_path=draft.section_path,
            chunk_type=draft.chunk_type,
            heading_level=draft.heading_level,
        )
        for index, draft in enumerate(drafts)
    ]


class TextChunkingStrategy(ChunkingStrategy):
    """Paragraph-aware sliding-window chunking over plain text.

    Paragraphs are packed into chunks of up to chunk_size characters;
    consecutive chunks share an overlap tail. Paragraphs longer than
    chunk_size go through the sliding window on their own.
    """

    def __init__(
        self,
        chunk_size: int,
        chunk_overlap: int,
        logger: logging.Logger | None = None,
    ) -> None:
        validate_chunking_config(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._logger = logger or logging.getLogger(__name__)

    def can_chunk(self, document: Document, structured_doc: StructuredDocument | None) -> bool:
        return True

    def chunk(
        self, document: Document, structured_doc: StructuredDocument | None
    ) -> list[DocumentChunk]:
        drafts = [ChunkDraft(content=text) for text in self.split_text(document.content or "")]
        self._logger.debug("Text chunking produced %d chunks for %s", len(drafts), document.id)
        return materialize(document, drafts)

    def split_text(self, text: str) -> list[str]:
        paragraphs = [p.strip() for p in PARAGRAPH_SPLIT.split(text) if p.strip()]
        chunks: list[str] = []
        current: list[str] = []
        carry = ""

        for paragraph in paragraphs:
            if len(paragraph) > self.chunk_size:
                if current:
                    chunks.append("\n\n".join(current))
                    current = []
                windows = sliding_window(paragraph, self.chunk_size, self.chunk_overlap)
                chunks.extend(windows)
                carry = overlap_tail(windows[-1], self.chunk_overlap)
                continue

            if current and len("\n\n".join([*current, paragraph])) > self.chunk_size:
                chunks.append("\n\n".join(current))
                carry = overlap_tail(chunks[-1], self.chunk_overlap)
                current = []

            if not current:
                if carry and len(carry) + 2 + len(paragraph) <= self.chunk_size:
                    current.append(carry)
                carry = ""
            current.append(paragraph)

        if current:
            chunks.append("\n\n".join(current))
        return chunks


class MarkdownChunkingStrategy(ChunkingStrategy):
    """Split plain text at markdown headings, keeping sections whole when small."""

    def __init__(self, text_strategy: TextChunkingStrategy, logger: logging.Logger | None = None):
        self._text = text_strategy
        self._logger = logger or logging.getLogger(__name__)

    def can_chunk(self, document: Document, structured_doc: StructuredDocument | None) -> bool:
        if structured_doc is not None and structured_doc.has_content:
            return False
        return bool(document.content and MARKDOWN_HEADING.search(document.content))

    def chunk(
        self, document: Document, structured_doc: StructuredDocument | None
    ) -> list[DocumentChunk]:
        content = document.content or ""
        headings = list(MARKDOWN_HEADING.finditer(content))
        if not headings:
            return []

        drafts: list[ChunkDraft] = []
        preface = content[: headings[0].start()].strip()
        if preface:
            drafts.extend(self._section_drafts(preface, "", 0))

        lineage: list[tuple[int, str]] = []
        for i, match in enumerate(headings):
            level = len(match.group(1))
            title = match.group(2).strip()
            while lineage and lineage[-1][0] >= level:
                lineage.pop()
            lineage.append((level, title))
            path = SECTION_SEPARATOR.join(t for _, t in lineage)

            end = headings[i + 1].start() if i + 1 < len(headings) else len(content)
            section = content[match.start() : end].strip()
            if section:
                drafts.extend(self._section_drafts(section, path, level))

        self._logger.debug(
            "Markdown chunking produced %d chunks from %d headings for %s",
            len(drafts),
            len(headings),
            document.id,
        )
        return materialize(document, drafts)

    def _section_drafts(self, section: str, path: str, level: int) -> list[ChunkDraft]:
        heading_level = level or None
        if len(section) <= self._text.chunk_size * SECTION_SLACK:
            chunk_type = "Section" if level else DEFAULT_CHUNK_TYPE
            return [ChunkDraft(section, path, chunk_type, heading_level)]
        return [
            ChunkDraft(part, path, "SubSection", heading_level)
            for part in self._text.split_text(section)
        ]


class StructuredChunkingStrategy(ChunkingStrategy):
    """Pack structural elements into chunks without splitting small elements.

    A heading always opens a new chunk. An element larger than chunk_size is
    split with the sliding window. Each chunk takes its section path and
    type from the first element in it.
    """

    def __init__(
        self,
        chunk_size: int,
        chunk_overlap: int,
        logger: logging.Logger | None = None,
    ) -> None:
        validate_chunking_config(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._logger = logger or logging.getLogger(__name__)

    def can_chunk(self, document: Document, structured_doc: StructuredDocument | None) -> bool:
        return structured_doc is not None and structured_doc.has_content

    def chunk(
        self, document: Document, structured_doc: StructuredDocument | None
    ) -> list[DocumentChunk]:
        if structured_doc is None:
            return []

        drafts: list[ChunkDraft] = []
        group: ChunkDraft | None = None

        for element in structured_doc.elements:
            text = element.text.strip()
            if not text:
                continue

            if len(text) > self.chunk_size:
                if group:
                    drafts.append(group)
                    group = None
                for part in sliding_window(text, self.chunk_size, self.chunk_overlap):
                    drafts.append(
                        ChunkDraft(
                            part,
                            element.section_path,
                            f"{element.type.value}Part",
                            element.heading_level,
                        )
                    )
                continue

            starts_new = element.type.is_heading or (
                group is not None and len(group.content) + 2 + len(text) > self.chunk_size
            )
            if group and starts_new:
                drafts.append(group)
                group = None

            if group is None:
                chunk_type = "Section" if element.type.is_heading else element.type.value
                group = ChunkDraft(text, element.section_path, chunk_type, element.heading_level)
            else:
                group.content = f"{group.content}\n\n{text}"

        if group:
            drafts.append(group)

        self._logger.debug(
            "Structured chunking produced %d chunks from %d elements for %s",
            len(drafts),
            len(structured_doc.elements),
            document.id,
        )
        return materialize(document, drafts)


class ChunkingService:
    """Chooses a chunking strategy for a document and runs it."""

    def __init__(
        self,
        chunk_size: int,
        chunk_overlap: int,
        strategies: Sequence[ChunkingStrategy] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            chunk_size: Target chunk length in characters.
            chunk_overlap: Characters shared by consecutive windows.
            strategies: Strategies in priority order. Defaults to
                structured, markdown, then plain text.
            logger: Diagnostics sink; defaults to this module's logger.

        Raises:
            InvalidChunkingConfigurationError: If overlap >= chunk size.
        """
        validate_chunking_config(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._logger = logger or logging.getLogger(__name__)
        if strategies is None:
            text = TextChunkingStrategy(chunk_size, chunk_overlap, self._logger)
            strategies = (
                StructuredChunkingStrategy(chunk_size, chunk_overlap, self._logger),
                MarkdownChunkingStrategy(text, self._logger),
                text,
            )
        self._strategies = tuple(strategies)
        self._logger.debug(
            "Chunking service ready with strategies: %s",
            ", ".join(s.name for s in self._strategies),
        )

    @property
    def strategies(self) -> tuple[ChunkingStrategy, ...]:
        return self._strategies

    def chunk(
        self,
        document: Document,
        structured_doc: StructuredDocument | None = None,
    ) -> list[DocumentChunk]:
        """Chunk a document, preferring structure when it is available.

        Returns:
            Chunks in document order; empty when there is nothing to chunk.

        Raises:
            InvalidChunkingConfigurationError: If the size/overlap pair was
                changed to an invalid combination after construction.
        """
        validate_chunking_config(self.chunk_size, self.chunk_overlap)
        has_text = bool(document.content and document.content.strip())
        has_structure = structured_doc is not None and structured_doc.has_content
        if not has_text and not has_structure:
            self._logger.warning("Nothing to chunk for document %s", document.id)
            return []

        for strategy in self._strategies:
            if not strategy.can_chunk(document, structured_doc):
                self._logger.debug("%s not applicable to %s", strategy.name, document.id)
                continue

            chunks = strategy.chunk(document, structured_doc)
            if chunks:
                self._logger.info(
                    "%s created %d chunks for document %s",
                    strategy.name,
                    len(chunks),
                    document.id,
                )
                return chunks
            self._logger.warning(
                "%s returned no chunks for %s, trying next strategy", strategy.name, document.id
            )

        return []
