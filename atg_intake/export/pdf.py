"""
Results PDF Export

Generates the branded "Your Tax Planning Results" document using ReportLab:
thank-you copy, then each matched strategy writeup rendered from its markup.
"""

import io
import logging
from datetime import datetime
from typing import List, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from atg_intake.catalog.models import ThankYou
from atg_intake.conditions.models import ResultDefinition
from atg_intake.config import Branding
from atg_intake.contacts.models import ContactInfo
from .markup import BlockType, parse_content, to_reportlab_markup

logger = logging.getLogger(__name__)

NO_RESULTS_NOTICE = (
    "Based on your responses, we'll provide personalized recommendations "
    "during your consultation with {firm_name}."
)

RESPONSIBILITY_NOTICE = (
    "At <b>{firm_name}</b>, we use these results to provide guidance and recommendations. "
    "While we offer professional insight, remember that <b>you are ultimately responsible "
    "for implementing any strategies</b>. Proper documentation, timing, and adherence to IRS "
    "rules are essential to fully realize the benefits of these planning strategies."
)

# Standard fonts have no check/cross/box glyphs; draw them from ZapfDingbats
GLYPH_MARKUP = {
    "•": '<font name="Helvetica">&#8226;</font>',
    "✓": '<font name="ZapfDingbats" color="{primary}">4</font>',
    "✗": '<font name="ZapfDingbats" color="#b91c1c">8</font>',
    "□": '<font name="ZapfDingbats">o</font>',
}


class ExportError(Exception):
    """PDF could not be generated."""


class ResultsPDFExporter:
    """Generates the results PDF with firm branding."""

    def __init__(self, branding: Optional[Branding] = None):
        self.branding = branding or Branding()
        self._primary = colors.HexColor(self.branding.primary_color)
        self._styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self._styles.add(ParagraphStyle(
            'FirmHeader',
            parent=self._styles['Normal'],
            fontSize=14,
            fontName='Helvetica-Bold',
            alignment=TA_CENTER,
            textColor=self._primary,
            spaceAfter=2,
        ))

        self._styles.add(ParagraphStyle(
            'FirmSubheader',
            parent=self._styles['Normal'],
            fontSize=9,
            alignment=TA_CENTER,
            textColor=colors.gray,
            spaceAfter=12,
        ))

        self._styles.add(ParagraphStyle(
            'DocTitle',
            parent=self._styles['Heading1'],
            fontSize=20,
            spaceAfter=12,
        ))

        self._styles.add(ParagraphStyle(
            'StrategyTitle',
            parent=self._styles['Heading2'],
            fontSize=14,
            fontName='Helvetica-Bold',
            textColor=self._primary,
            spaceBefore=18,
            spaceAfter=8,
        ))

        self._styles.add(ParagraphStyle(
            'BlockHeading',
            parent=self._styles['Heading3'],
            fontSize=11,
            spaceBefore=10,
            spaceAfter=6,
        ))

        self._styles.add(ParagraphStyle(
            'Body',
            parent=self._styles['Normal'],
            fontSize=10,
            leading=14,
            alignment=TA_JUSTIFY,
            spaceAfter=8,
        ))

        self._styles.add(ParagraphStyle(
            'BulletItem',
            parent=self._styles['Normal'],
            fontSize=10,
            leading=14,
            leftIndent=16,
            spaceAfter=3,
        ))

        self._styles.add(ParagraphStyle(
            'Footer',
            parent=self._styles['Normal'],
            fontSize=8,
            leading=10,
            textColor=colors.gray,
            alignment=TA_CENTER,
            spaceBefore=24,
        ))

    def _bullet(self, glyph: str, text: str) -> Paragraph:
        marker = GLYPH_MARKUP.get(glyph, GLYPH_MARKUP["•"]).format(primary=self.branding.primary_color)
        return Paragraph(f"{marker}&nbsp;&nbsp;{to_reportlab_markup(text)}", self._styles['BulletItem'])

    def _result_flowables(self, result: ResultDefinition) -> list:
        story = [Paragraph(to_reportlab_markup(result.title), self._styles['StrategyTitle'])]
        for block in parse_content(result.content):
            if block.type == BlockType.HEADING:
                story.append(Paragraph(to_reportlab_markup(block.text), self._styles['BlockHeading']))
            elif block.type == BlockType.BULLETS:
                story.extend(self._bullet(item.glyph, item.text) for item in block.items)
                story.append(Spacer(1, 4))
            else:
                story.append(Paragraph(to_reportlab_markup(block.text), self._styles['Body']))
        return story

    def build_story(
        self,
        results: Sequence[ResultDefinition],
        thank_you: ThankYou,
        contact: Optional[ContactInfo] = None,
        generated_at: Optional[datetime] = None,
    ) -> list:
        """Flowables for the whole document."""
        firm_name = escape(self.branding.firm_name)
        generated_at = generated_at or datetime.utcnow()
        story: List = []

        story.append(Paragraph(firm_name, self._styles['FirmHeader']))
        story.append(Paragraph(escape(self.branding.product_title), self._styles['FirmSubheader']))
        story.append(HRFlowable(width="100%", color=self._primary, thickness=1))
        story.append(Spacer(1, 0.2 * inch))

        story.append(Paragraph(to_reportlab_markup(thank_you.title), self._styles['DocTitle']))
        prepared = f"Prepared {generated_at.strftime('%B %d, %Y')}"
        if contact is not None:
            prepared = f"Prepared for {escape(contact.name)} ({escape(contact.email)}) on {generated_at.strftime('%B %d, %Y')}"
        story.append(Paragraph(prepared, self._styles['Body']))

        if thank_you.introduction:
            story.append(Paragraph(to_reportlab_markup(thank_you.introduction), self._styles['Body']))

        if thank_you.benefits:
            story.append(Paragraph(
                "<b>The results of this questionnaire are important because they:</b>",
                self._styles['Body'],
            ))
            story.extend(self._bullet("✓", benefit) for benefit in thank_you.benefits)

        story.append(Spacer(1, 6))
        story.append(Paragraph(RESPONSIBILITY_NOTICE.format(firm_name=firm_name), self._styles['Body']))

        if thank_you.goals:
            story.append(Paragraph(
                "By carefully reviewing your results and acting on the opportunities identified, "
                "you are taking a critical step toward:",
                self._styles['Body'],
            ))
            story.extend(self._bullet("•", goal) for goal in thank_you.goals)

        if thank_you.closing_statement:
            story.append(Spacer(1, 6))
            story.append(Paragraph(to_reportlab_markup(thank_you.closing_statement), self._styles['Body']))

        if results:
            story.append(Spacer(1, 0.2 * inch))
            story.append(Paragraph("Your Personalized Strategies", self._styles['DocTitle']))
            for result in results:
                story.extend(self._result_flowables(result))
        else:
            story.append(Spacer(1, 0.2 * inch))
            story.append(Paragraph(NO_RESULTS_NOTICE.format(firm_name=firm_name), self._styles['Body']))

        story.append(Paragraph(
            f"© {generated_at.year} {firm_name}. All rights reserved. {escape(self.branding.tagline)}",
            self._styles['Footer'],
        ))
        return story

    def generate_pdf(
        self,
        results: Sequence[ResultDefinition],
        thank_you: ThankYou,
        contact: Optional[ContactInfo] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Generate the results PDF.

        Args:
            results: matched results, in display order
            thank_you: closing copy from the questionnaire
            contact: client the document is prepared for
            generated_at: date printed on the document (defaults to now)

        Returns:
            PDF bytes

        Raises:
            ExportError: ReportLab failed to lay out the document
        """
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75 * inch,
            leftMargin=0.75 * inch,
            topMargin=0.75 * inch,
            bottomMargin=0.75 * inch,
            title=thank_you.title,
            author=self.branding.firm_name,
        )

        try:
            story = self.build_story(results, thank_you, contact=contact, generated_at=generated_at)
            doc.build(story)
        except Exception as e:
            logger.error(f"PDF export failed: {e}")
            raise ExportError(f"PDF export failed: {e}") from e

        pdf = buffer.getvalue()
        logger.info(f"Generated results PDF: {len(results)} strategies, {len(pdf)} bytes")
        return pdf
