# export.py - trip -> paginated PDF (layout pass, then reportlab serialization)
import asyncio
import logging
import re
from contextlib import contextmanager
from datetime import datetime
from io import BytesIO
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas as rl_canvas

import config
from errors import ExportError, PreconditionError
from models import ExportDocument, Page, Place, SeparatorLine, TextBlock, TripPlan, TripStatistics
from trips import trip_statistics

logger = logging.getLogger(__name__)

FILE_SUFFIX = "_trip_plan.pdf"

# Layout metrics, all in points
MARGIN = 20 * mm
BOTTOM_MARGIN = 25 * mm  # content must end above this distance from the bottom edge
FOOTER_OFFSET = 10 * mm
INDENT = 6 * mm
TITLE_HEIGHT = 12 * mm
LINE_HEIGHT = 7 * mm
DETAIL_HEIGHT = 6 * mm
SECTION_GAP = 4 * mm
SEPARATOR_GAP = 5 * mm

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_ITALIC = "Helvetica-Oblique"
TITLE_SIZE = 20
HEADER_SIZE = 16
NAME_SIZE = 12
BODY_SIZE = 11
DETAIL_SIZE = 10
FOOTER_SIZE = 8

NO_PLACES_NOTICE = "No places added to this trip yet."


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9]", "_", name)


def export_filename(trip_name: str) -> str:
    return f"{sanitize_filename(trip_name)}{FILE_SUFFIX}"


def format_trip_date(d) -> str:
    return f"{d:%B} {d.day}, {d.year}"


class ExportResult(BaseModel):
    filename: str
    content: bytes
    document: ExportDocument
    media_type: str = "application/pdf"

    @property
    def page_count(self) -> int:
        return self.document.page_count


class _Cursor:
    """Vertical write position on the current page, measured from the top edge."""

    def __init__(self, doc: ExportDocument):
        self.doc = doc
        self.y = MARGIN
        self.new_page()

    @property
    def page(self) -> Page:
        return self.doc.pages[-1]

    @property
    def limit(self) -> float:
        return self.doc.height - BOTTOM_MARGIN

    def new_page(self):
        self.doc.pages.append(Page())
        self.y = MARGIN

    def fits(self, height: float) -> bool:
        return self.y + height <= self.limit

    def ensure(self, height: float):
        """Start a new page unless the next height fits; a fresh page always accepts."""
        if not self.fits(height) and self.y > MARGIN:
            self.new_page()

    def text(self, text, x, font=FONT, size=BODY_SIZE, align="left", entry=None):
        self.page.blocks.append(
            TextBlock(text=text, x=x, y=self.y, font=font, size=size, align=align, entry=entry)
        )

    def line(self, x1, x2):
        self.page.lines.append(SeparatorLine(x1=x1, x2=x2, y=self.y))


class DocumentExporter:
    """
    Renders a TripPlan into an ExportDocument and serializes it to PDF.

    Layout is deterministic: the same trip, statistics and clock give the
    same page structure. Each itinerary entry is measured before it is
    placed and moved to a fresh page whole when it would cross the bottom
    margin; an entry taller than a page flows row by row onto continuation
    pages. The footer is stamped on the last page only unless
    footer_on_every_page is set.
    """

    def __init__(
        self,
        generator_name: str = config.GENERATOR_NAME,
        footer_on_every_page: bool = config.FOOTER_ON_EVERY_PAGE,
        pagesize: Tuple[float, float] = A4,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.generator_name = generator_name
        self.footer_on_every_page = footer_on_every_page
        self.pagesize = pagesize
        self.clock = clock
        self._running = 0

    @property
    def is_exporting(self) -> bool:
        return self._running > 0

    @property
    def content_width(self) -> float:
        return self.pagesize[0] - 2 * MARGIN

    # ---------------------------
    # Layout
    def _wrap(self, text: str, font: str, size: float, width: float) -> List[str]:
        return simpleSplit(text, font, size, width) or [""]

    def _entry_lines(self, index: int, place: Place) -> List[Tuple[str, str, float, float, float]]:
        """(text, font, size, x, advance) rows making up one itinerary entry."""
        rows = []
        for chunk in self._wrap(f"{index + 1}. {place.name}", FONT_BOLD, NAME_SIZE, self.content_width):
            rows.append((chunk, FONT_BOLD, NAME_SIZE, MARGIN, LINE_HEIGHT))
        details = [
            f"Address: {place.address}",
            f"Category: {place.category.capitalize()}",
            f"Rating: {place.rating}/5",
            f"Price: {place.price or 'N/A'}",
        ]
        detail_width = self.content_width - INDENT
        for detail in details:
            for chunk in self._wrap(detail, FONT, DETAIL_SIZE, detail_width):
                rows.append((chunk, FONT, DETAIL_SIZE, MARGIN + INDENT, DETAIL_HEIGHT))
        return rows

    def layout(self, trip: TripPlan, stats: TripStatistics) -> ExportDocument:
        width, height = self.pagesize
        doc = ExportDocument(width=width, height=height)
        cur = _Cursor(doc)

        for chunk in self._wrap(trip.name, FONT_BOLD, TITLE_SIZE, self.content_width):
            cur.ensure(TITLE_HEIGHT)
            cur.text(chunk, width / 2, font=FONT_BOLD, size=TITLE_SIZE, align="center")
            cur.y += TITLE_HEIGHT

        avg = f"{stats.avg_rating:.1f}" if stats.count > 0 else "N/A"
        for line in (
            f"Date: {format_trip_date(trip.date)}",
            f"Places: {stats.count}",
            f"Average rating: {avg}",
            f"Estimated duration: {stats.est_duration_hours} hours",
        ):
            cur.ensure(LINE_HEIGHT)
            cur.text(line, MARGIN)
            cur.y += LINE_HEIGHT
        cur.y += SECTION_GAP

        if not trip.places:
            cur.ensure(LINE_HEIGHT)
            cur.text(NO_PLACES_NOTICE, MARGIN, font=FONT_ITALIC)
            cur.y += LINE_HEIGHT
        else:
            cur.ensure(LINE_HEIGHT + SECTION_GAP)
            cur.text("Itinerary", MARGIN, font=FONT_BOLD, size=HEADER_SIZE)
            cur.y += LINE_HEIGHT + SECTION_GAP
            last = len(trip.places) - 1
            for index, place in enumerate(trip.places):
                rows = self._entry_lines(index, place)
                entry_height = sum(row[4] for row in rows)
                cur.ensure(entry_height)
                # only an entry taller than a whole page continues onto the next one
                for text, font, size, x, advance in rows:
                    cur.ensure(advance)
                    cur.text(text, x, font=font, size=size, entry=index)
                    cur.y += advance
                if index != last:
                    cur.line(MARGIN, width - MARGIN)
                    cur.y += SEPARATOR_GAP

        self._stamp_footer(doc)
        return doc

    def _stamp_footer(self, doc: ExportDocument):
        stamp = f"Generated by {self.generator_name} on {self.clock():%Y-%m-%d %H:%M}"
        pages = doc.pages if self.footer_on_every_page else doc.pages[-1:]
        for page in pages:
            page.blocks.append(
                TextBlock(text=stamp, x=doc.width / 2, y=doc.height - FOOTER_OFFSET,
                          size=FOOTER_SIZE, align="center")
            )

    # ---------------------------
    # Serialization
    def render(self, doc: ExportDocument, title: str = "") -> bytes:
        buf = BytesIO()
        c = rl_canvas.Canvas(buf, pagesize=(doc.width, doc.height))
        c.setTitle(title)
        c.setAuthor(self.generator_name)
        for page in doc.pages:
            for block in page.blocks:
                c.setFont(block.font, block.size)
                if block.align == "center":
                    c.drawCentredString(block.x, doc.height - block.y, block.text)
                else:
                    c.drawString(block.x, doc.height - block.y, block.text)
            c.setStrokeGray(0.75)
            for sep in page.lines:
                c.line(sep.x1, doc.height - sep.y, sep.x2, doc.height - sep.y)
            c.showPage()
        c.save()
        return buf.getvalue()

    # ---------------------------
    # Entry points
    def export(self, trip: Optional[TripPlan], stats: Optional[TripStatistics] = None) -> ExportResult:
        if trip is None:
            raise PreconditionError("No trip selected for export")
        if stats is None:
            stats = trip_statistics(trip.places)
        try:
            document = self.layout(trip, stats)
            content = self.render(document, title=trip.name)
        except Exception as e:
            logger.error("Export of trip %s failed: %s", trip.id, e, exc_info=True)
            raise ExportError(f"Failed to export trip '{trip.name}'") from e
        logger.info("Exported trip %s: %d page(s)", trip.id, document.page_count)
        return ExportResult(filename=export_filename(trip.name), content=content, document=document)

    @contextmanager
    def exporting(self):
        self._running += 1
        try:
            yield self
        finally:
            self._running -= 1

    async def export_async(self, trip: Optional[TripPlan], stats: Optional[TripStatistics] = None) -> ExportResult:
        """Run export() in a worker thread; is_exporting is set for the duration."""
        with self.exporting():
            return await asyncio.to_thread(self.export, trip, stats)
