"""
Strategy Content Markup
=======================
Deterministic parsing of the light markup used in result writeups.

Rules:
- Paragraphs are separated by a blank line
- A short paragraph (< 100 chars) with a line starting with a capital letter
  and no sentence punctuation is a HEADING
- A paragraph containing any of • ✓ ✗ □ is a BULLET LIST; each non-empty line
  is one item, its leading glyph kept (• when absent)
- Everything else is a PARAGRAPH
- Inline: **bold**, *italic*
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List
from xml.sax.saxutils import escape

BULLET_GLYPHS = ("•", "✓", "✗", "□")
DEFAULT_GLYPH = "•"
HEADING_MAX_LENGTH = 100

HEADING_PATTERN = re.compile(r"^[A-Z][^.!?]*$", re.MULTILINE)
LEADING_GLYPH_PATTERN = re.compile(r"^([•✓✗□])\s*")
INLINE_PATTERN = re.compile(r"\*\*(.+?)\*\*|\*(?!\s)(.+?)(?<!\s)\*", re.DOTALL)


class BlockType(str, Enum):
    HEADING = "heading"
    BULLETS = "bullets"
    PARAGRAPH = "paragraph"


@dataclass
class BulletItem:
    glyph: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"glyph": self.glyph, "text": self.text}


@dataclass
class ContentBlock:
    """One rendered block of a writeup."""
    type: BlockType
    text: str = ""
    items: List[BulletItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type.value}
        if self.type == BlockType.BULLETS:
            data["items"] = [item.to_dict() for item in self.items]
        else:
            data["text"] = self.text
        return data


@dataclass
class InlineSpan:
    text: str
    bold: bool = False
    italic: bool = False


def is_heading(paragraph: str) -> bool:
    return len(paragraph) < HEADING_MAX_LENGTH and bool(HEADING_PATTERN.search(paragraph))


def is_bullet_list(paragraph: str) -> bool:
    return any(glyph in paragraph for glyph in BULLET_GLYPHS)


def parse_bullets(paragraph: str) -> List[BulletItem]:
    items = []
    for line in paragraph.split("\n"):
        if not line.strip():
            continue
        match = LEADING_GLYPH_PATTERN.match(line)
        glyph = match.group(1) if match else DEFAULT_GLYPH
        text = LEADING_GLYPH_PATTERN.sub("", line, count=1)
        items.append(BulletItem(glyph=glyph, text=text))
    return items


def parse_content(content: str) -> List[ContentBlock]:
    """Split a writeup into heading, bullet list and paragraph blocks."""
    blocks = []
    for paragraph in content.split("\n\n"):
        if not paragraph.strip():
            continue
        if is_heading(paragraph):
            blocks.append(ContentBlock(type=BlockType.HEADING, text=paragraph))
        elif is_bullet_list(paragraph):
            blocks.append(ContentBlock(type=BlockType.BULLETS, items=parse_bullets(paragraph)))
        else:
            blocks.append(ContentBlock(type=BlockType.PARAGRAPH, text=paragraph))
    return blocks


def parse_inline(text: str) -> List[InlineSpan]:
    """Split text into plain, bold and italic spans."""
    spans = []
    pos = 0
    for match in INLINE_PATTERN.finditer(text):
        if match.start() > pos:
            spans.append(InlineSpan(text=text[pos:match.start()]))
        if match.group(1) is not None:
            spans.append(InlineSpan(text=match.group(1), bold=True))
        else:
            spans.append(InlineSpan(text=match.group(2), italic=True))
        pos = match.end()
    if pos < len(text):
        spans.append(InlineSpan(text=text[pos:]))
    return spans


def strip_inline(text: str) -> str:
    """Plain text with inline markers removed."""
    return "".join(span.text for span in parse_inline(text))


def to_reportlab_markup(text: str) -> str:
    """
    Convert inline markup to ReportLab paragraph markup.

    Text is XML-escaped; newlines become <br/>.
    """
    parts = []
    for span in parse_inline(text):
        chunk = escape(span.text).replace("\n", "<br/>")
        if span.bold:
            chunk = f"<b>{chunk}</b>"
        if span.italic:
            chunk = f"<i>{chunk}</i>"
        parts.append(chunk)
    return "".join(parts)
