"""Lay out the report PDF: a cover page then one page per instance."""

from __future__ import annotations

import dataclasses as dc
import io
import typing as typ
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from reportlab.platypus import Flowable

_MARGIN = 15 * mm
_COVER_TOP_SPACE = 40 * mm
_CAPTION_SPACE = 4 * mm
_CHART_SPACE = 10 * mm


@dc.dataclass(frozen=True, slots=True)
class ChartImage:
    """One captioned chart on a report page."""

    caption: str
    png: bytes


@dc.dataclass(frozen=True, slots=True)
class ReportPage:
    """Charts for one instance, in catalogue order."""

    instance_name: str
    charts: tuple[ChartImage, ...]


def _styles() -> tuple[ParagraphStyle, ParagraphStyle]:
    base = getSampleStyleSheet()
    title = ParagraphStyle(
        "ReportTitle",
        parent=base["Title"],
        fontName="Times-Bold",
        fontSize=24,
        leading=30,
        alignment=TA_CENTER,
    )
    caption = ParagraphStyle(
        "ChartCaption",
        parent=base["Heading2"],
        fontName="Times-Bold",
        fontSize=16,
        leading=20,
        alignment=TA_CENTER,
    )
    return title, caption


def _chart_flowable(png: bytes, width: float) -> Image:
    image_width, image_height = ImageReader(io.BytesIO(png)).getSize()
    height = width * image_height / image_width
    return Image(io.BytesIO(png), width=width, height=height)


def render_report_pdf(title: str, pages: cabc.Sequence[ReportPage]) -> bytes:
    """Render the report and return the PDF bytes.

    Parameters
    ----------
    title
        Cover page title, e.g. ``Metrics Weekly Report 2018/10/28 - 2018/11/04``.
    pages
        Instance pages in the order they appear after the cover.

    """
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=_MARGIN,
        rightMargin=_MARGIN,
        topMargin=_MARGIN,
        bottomMargin=_MARGIN,
        title=title,
    )
    title_style, caption_style = _styles()

    story: list[Flowable] = [
        Spacer(1, _COVER_TOP_SPACE),
        Paragraph(escape(title), title_style),
    ]
    for page in pages:
        story.append(PageBreak())
        for chart in page.charts:
            story.append(Paragraph(escape(chart.caption), caption_style))
            story.append(Spacer(1, _CAPTION_SPACE))
            story.append(_chart_flowable(chart.png, doc.width))
            story.append(Spacer(1, _CHART_SPACE))

    doc.build(story)
    return buffer.getvalue()
