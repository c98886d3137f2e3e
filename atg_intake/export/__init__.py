"""
Results Export

Markup parsing of strategy writeups and the branded results PDF.

Version: export_v1
"""

from .markup import (
    BlockType,
    BulletItem,
    ContentBlock,
    InlineSpan,
    parse_content,
    parse_inline,
    strip_inline,
    to_reportlab_markup,
)
from .pdf import ExportError, ResultsPDFExporter

__all__ = [
    "BlockType",
    "BulletItem",
    "ContentBlock",
    "InlineSpan",
    "parse_content",
    "parse_inline",
    "strip_inline",
    "to_reportlab_markup",
    "ExportError",
    "ResultsPDFExporter",
]

__version__ = "export_v1"
