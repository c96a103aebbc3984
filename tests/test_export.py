import asyncio
from datetime import date

import pytest

import export as export_mod
from errors import ExportError, PreconditionError
from export import NO_PLACES_NOTICE, DocumentExporter, export_filename
from models import TripPlan
from trips import trip_statistics


def _trip(places, name="Weekend Eco Adventure"):
    return TripPlan(id="trip-1", name=name, places=places, date=date(2025, 1, 25), user_id="u")


def _texts(doc):
    return [b.text for page in doc.pages for b in page.blocks]


@pytest.fixture
def exporter(fixed_clock):
    return DocumentExporter(clock=fixed_clock)


def test_filename_sanitized():
    assert export_filename("Weekend Eco Adventure!") == "Weekend_Eco_Adventure__trip_plan.pdf"
    assert export_filename("Café/2025") == "Caf__2025_trip_plan.pdf"


def test_small_trip_layout(exporter, catalog):
    trip = _trip([catalog.get("1"), catalog.get("2"), catalog.get("5")])
    result = exporter.export(trip)
    doc = result.document

    assert result.filename == "Weekend_Eco_Adventure_trip_plan.pdf"
    assert result.content.startswith(b"%PDF")
    assert doc.page_count == 1

    title = doc.pages[0].blocks[0]
    assert title.text == "Weekend Eco Adventure"
    assert title.align == "center"

    texts = _texts(doc)
    assert "Date: January 25, 2025" in texts
    assert "Places: 3" in texts
    assert "Average rating: 4.6" in texts
    assert "Estimated duration: 6 hours" in texts
    assert "Itinerary" in texts
    assert "1. Eco Gardens Café" in texts
    assert "2. Sunset Beach Park" in texts
    assert "Rating: 4.8/5" in texts
    assert "Price: Free" in texts
    # separators between entries only
    assert len(doc.pages[0].lines) == 2


def test_missing_price_shows_placeholder(exporter, place_factory):
    doc = exporter.export(_trip([place_factory("a")])).document
    assert "Price: N/A" in _texts(doc)
    assert doc.pages[0].lines == []


def test_empty_trip_has_notice(exporter):
    doc = exporter.export(_trip([])).document
    texts = _texts(doc)
    assert doc.page_count == 1
    assert "Itinerary" not in texts
    assert "Average rating: N/A" in texts
    notice = next(b for b in doc.pages[0].blocks if b.text == NO_PLACES_NOTICE)
    assert notice.font == "Helvetica-Oblique"


def test_footer_once_on_last_page(exporter, place_factory):
    places = [place_factory(str(i)) for i in range(30)]
    doc = exporter.export(_trip(places)).document
    footers = [(n, b) for n, page in enumerate(doc.pages) for b in page.blocks
               if b.text.startswith("Generated by RelevanTrip")]
    assert len(footers) == 1
    page_no, footer = footers[0]
    assert page_no == doc.page_count - 1
    assert footer.text == "Generated by RelevanTrip on 2025-01-25 09:30"
    assert footer.align == "center"


def test_footer_on_every_page_option(fixed_clock, place_factory):
    exporter = DocumentExporter(clock=fixed_clock, footer_on_every_page=True)
    doc = exporter.export(_trip([place_factory(str(i)) for i in range(30)])).document
    for page in doc.pages:
        assert sum(b.text.startswith("Generated by") for b in page.blocks) == 1


def test_long_trip_paginates_without_splitting_entries(exporter, place_factory):
    places = [place_factory(str(i), address="A rather long address line " * (i % 4 + 1)) for i in range(40)]
    doc = exporter.export(_trip(places)).document
    assert doc.page_count > 1

    limit = doc.height - export_mod.BOTTOM_MARGIN
    pages_by_entry = {}
    for n, page in enumerate(doc.pages):
        for block in page.blocks:
            if block.entry is not None:
                pages_by_entry.setdefault(block.entry, set()).add(n)
                assert block.y <= limit
    assert sorted(pages_by_entry) == list(range(40))
    assert all(len(pages) == 1 for pages in pages_by_entry.values())

    # a new page is only started when the next entry would not fit
    for n, page in enumerate(doc.pages[1:], start=1):
        first_entry = min(b.entry for b in page.blocks if b.entry is not None)
        prev_blocks = [b for b in doc.pages[n - 1].blocks if b.entry is not None]
        assert max(b.entry for b in prev_blocks) == first_entry - 1
        entry_rows = [b for b in page.blocks if b.entry == first_entry]
        entry_height = sum(
            export_mod.LINE_HEIGHT if b.font == "Helvetica-Bold" else export_mod.DETAIL_HEIGHT
            for b in entry_rows
        )
        prev_bottom = max(b.y for b in prev_blocks) + export_mod.DETAIL_HEIGHT + export_mod.SEPARATOR_GAP
        assert prev_bottom + entry_height > limit


def test_no_trip_selected(exporter):
    with pytest.raises(PreconditionError):
        exporter.export(None)


def test_render_failure_becomes_export_error(exporter, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("font missing")

    monkeypatch.setattr(exporter, "render", boom)
    with pytest.raises(ExportError):
        exporter.export(_trip([]))


def test_uses_given_statistics(exporter, catalog):
    trip = _trip([catalog.get("1")])
    stats = trip_statistics(trip.places, min_duration_hours=2, hours_per_place=1)
    assert "Estimated duration: 2 hours" in _texts(exporter.export(trip, stats).document)


def test_async_export_clears_flag(exporter, catalog):
    result = asyncio.run(exporter.export_async(_trip([catalog.get("3")])))
    assert result.page_count == 1
    assert exporter.is_exporting is False


def test_async_export_clears_flag_on_failure(exporter):
    with pytest.raises(PreconditionError):
        asyncio.run(exporter.export_async(None))
    assert exporter.is_exporting is False


def test_flag_set_while_exporting(exporter):
    with exporter.exporting():
        assert exporter.is_exporting is True
    assert exporter.is_exporting is False


def test_flag_survives_overlapping_exports(exporter):
    with exporter.exporting():
        with exporter.exporting():
            assert exporter.is_exporting is True
        # the outer export is still running
        assert exporter.is_exporting is True
    assert exporter.is_exporting is False


def test_concurrent_async_exports_clear_flag(exporter, catalog):
    async def run_both():
        return await asyncio.gather(
            exporter.export_async(_trip([catalog.get("1")])),
            exporter.export_async(_trip([catalog.get("2")])),
        )

    results = asyncio.run(run_both())
    assert [r.page_count for r in results] == [1, 1]
    assert exporter.is_exporting is False


def _body_blocks(doc):
    return [b for page in doc.pages for b in page.blocks if not b.text.startswith("Generated by")]


def test_entry_taller_than_a_page_continues_on_next_page(exporter, place_factory):
    places = [place_factory("a"), place_factory("b", address="very long address words " * 400)]
    doc = exporter.export(_trip(places)).document
    assert doc.page_count > 1

    limit = doc.height - export_mod.BOTTOM_MARGIN
    assert all(b.y <= limit for b in _body_blocks(doc))

    pages = {n for n, page in enumerate(doc.pages) for b in page.blocks if b.entry == 1}
    assert len(pages) > 1
    # no wrapped text is lost across the break
    words = " ".join(b.text for b in _body_blocks(doc) if b.entry == 1).split()
    assert words.count("very") == 400
    assert "Category: Outdoor" in _texts(doc)


def test_very_long_title_stays_inside_margins(exporter, catalog):
    doc = exporter.export(_trip([catalog.get("1")], name="Trip " * 600)).document
    assert doc.page_count > 1
    limit = doc.height - export_mod.BOTTOM_MARGIN
    assert all(b.y <= limit for b in _body_blocks(doc))
    assert "1. Eco Gardens Café" in _texts(doc)
