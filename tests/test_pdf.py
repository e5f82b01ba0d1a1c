from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pypdf import PdfReader
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from taproom.api.deps import require_admin, require_user
from taproom.api.v1 import events, pdf
from taproom.db.session import get_db
from taproom.pdf import render
from taproom.pdf.analyze import analyze_template
from taproom.pdf.field_map import find_field, get_field_map, name_variations, validate_field_map
from taproom.pdf.overlay import BEER_ROW_Y, plan_beer_rows
from taproom.pdf.render import PdfRenderError, check_template, render_event_pdf
from taproom.pdf.sheet import BeerLine, EventSheet
from taproom.security.csrf import require_csrf
from taproom.security.rate_limit import init_rate_limiting


def _template(text_fields=("Event Name", "Event Date", "DP Staff Attending"), checkboxes=("Tasting", "Beer Fest", "Ice")):
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 740, "Event Form")
    form = c.acroForm
    y = 700
    for name in text_fields:
        form.textfield(name=name, x=150, y=y, width=300, height=16)
        y -= 24
    for name in checkboxes:
        form.checkbox(name=name, x=72, y=y, size=12)
        y -= 20
    c.showPage()
    c.save()
    return buf.getvalue()


def _blank_template() -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 740, "Event Form")
    c.showPage()
    c.save()
    return buf.getvalue()


def _sheet(**overrides) -> EventSheet:
    values = dict(
        title="Summer Fest",
        date="2024-07-04",
        time="13:05",
        setup_time="12:00",
        event_type="beer_fest",
        contact_name="Pat",
        contact_phone="555-0100",
        supplies={"ice": True},
        beers=[BeerLine("Pilsner", "Draft", 2), BeerLine("IPA", "Cans", 5)],
        staff=["Ann", "Bob"],
    )
    values.update(overrides)
    return EventSheet(**values)


def test_sheet_display_values() -> None:
    sheet = _sheet()
    assert sheet.display_date == "7/4/2024"
    assert sheet.display_time == "1:05 PM"
    assert sheet.display_setup_time == "12:00 PM"
    assert sheet.staff_attending == "Ann, Bob"
    assert sheet.contact == "Pat 555-0100"
    assert _sheet(contact_name=None).contact == ""
    assert _sheet(time="TBD").display_time == "TBD"


def test_sheet_from_payload_accepts_preformatted_staff() -> None:
    sheet = EventSheet.from_payload(
        {
            "title": "Pint Night",
            "staffAttending": "Ann, Bob ,",
            "supplies": {"cups": 1, "additional_supplies": "Coasters"},
            "beers": [{"beer_style": "Stout", "packaging": "Cans", "quantity": 3}, "junk"],
        }
    )
    assert sheet.staff == ["Ann", "Bob"]
    assert sheet.supply("cups") is True
    assert sheet.additional_supplies == "Coasters"
    assert sheet.beers == [BeerLine("Stout", "Cans", 3)]


def test_beer_rows_use_fixed_positions_and_cap_at_five() -> None:
    placements = plan_beer_rows(_sheet())
    assert sorted({p.y for p in placements}, reverse=True) == list(BEER_ROW_Y[:2])
    assert {p.text for p in placements} == {"Pilsner", "Draft", "2", "IPA", "Cans", "5"}

    many = _sheet(beers=[BeerLine(f"Beer {i}", "Draft", i + 1) for i in range(7)])
    assert len({p.y for p in plan_beer_rows(many)}) == 5


def test_find_field_tries_variations_then_substring() -> None:
    assert find_field("Beer Style 1", ["Beer_Style_1"]) == "Beer_Style_1"
    assert find_field("Beer Style 1", ["Beer Style #1"]) == "Beer Style #1"
    assert find_field("Event Name", ["Event Name:"]) == "Event Name:"
    assert find_field("Event Contact", ["Primary Event Contact Info"]) == "Primary Event Contact Info"
    assert find_field("Nothing", ["Event Name"]) is None
    assert "Beer Style #1" in name_variations("Beer Style 1")


def test_field_map_validation_reports_missing_and_unmapped() -> None:
    fmap = get_field_map("2024.1")
    report = validate_field_map(["Event Name", "Mystery"], fmap)
    assert not report.ok
    assert "Event Date" in report.missing
    assert report.unmapped == ["Mystery"]
    assert validate_field_map(fmap.all_names(), fmap).ok
    with pytest.raises(ValueError):
        get_field_map("1999.9")


def test_analyze_template_counts_fields() -> None:
    info = analyze_template(_template())
    assert info["totalFields"] == 6
    assert info["fieldsByType"] == {"text": 3, "checkbox": 3}
    assert info["fieldDetails"]["Event Name"]["type"] == "text"


def test_combined_fills_fields_and_checks_boxes() -> None:
    out = render_event_pdf(_template(), _sheet())
    reader = PdfReader(io.BytesIO(out))

    texts = reader.get_form_text_fields()
    assert texts["Event Name"] == "Summer Fest"
    assert texts["Event Date"] == "7/4/2024"
    assert texts["DP Staff Attending"] == "Ann, Bob"

    fields = reader.get_fields()
    assert fields["Beer Fest"]["/V"] == "/Yes"
    assert fields["Ice"]["/V"] == "/Yes"
    assert fields["Tasting"]["/V"] == "/Off"

    # beer table is drawn, not filled
    assert "Pilsner" in reader.pages[0].extract_text()


def test_fields_strategy_fills_beer_rows() -> None:
    template = _template(text_fields=("Event Name", "Beer Style 1", "Package Style 1", "Quantity 1"), checkboxes=())
    out = render_event_pdf(template, _sheet(), strategy="fields")
    texts = PdfReader(io.BytesIO(out)).get_form_text_fields()
    assert texts["Beer Style 1"] == "Pilsner"
    assert texts["Package Style 1"] == "Draft"
    assert texts["Quantity 1"] == "2"


def test_template_without_fields_is_drawn_entirely() -> None:
    out = render_event_pdf(_blank_template(), _sheet())
    text = PdfReader(io.BytesIO(out)).pages[0].extract_text()
    assert "Summer Fest" in text
    assert "Pat 555-0100" in text
    assert "IPA" in text


def test_render_rejects_garbage_and_unknown_strategy() -> None:
    with pytest.raises(PdfRenderError):
        render_event_pdf(b"not a pdf", _sheet())
    with pytest.raises(ValueError):
        render_event_pdf(_template(), _sheet(), strategy="magic")


def test_check_template_flags_missing_fields() -> None:
    report = check_template(_template(), "2024.1")
    assert not report.ok
    assert "Event Instructions" in report.missing


def _client(session_local) -> TestClient:
    app = FastAPI()
    init_rate_limiting(app)
    app.include_router(events.router)
    app.include_router(pdf.router)

    def override_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[require_admin] = lambda: {"ok": True}
    app.dependency_overrides[require_user] = lambda: {"ok": True}
    app.dependency_overrides[require_csrf] = lambda: None
    app.dependency_overrides[pdf.get_pdf_template] = lambda: _template()
    return TestClient(app)


def test_pdf_endpoints(session_local) -> None:
    client = _client(session_local)

    posted = client.post(
        "/api/v1/pdf/event",
        json={"title": "Summer Fest", "date": "2024-07-04", "event_type": "tasting", "staff": ["Ann"]},
    )
    assert posted.status_code == 200
    assert posted.headers["content-type"] == "application/pdf"
    assert posted.headers["content-disposition"] == 'attachment; filename="Summer_Fest_Form.pdf"'
    assert PdfReader(io.BytesIO(posted.content)).get_fields()["Tasting"]["/V"] == "/Yes"

    event_id = client.post(
        "/api/v1/events", json={"title": "Pint Night", "date": "2024-07-10", "event_type": "pint_night"}
    ).json()["id"]
    stored = client.get(f"/api/v1/events/{event_id}/pdf", params={"strategy": "coordinates"})
    assert stored.status_code == 200
    assert "Pint Night" in PdfReader(io.BytesIO(stored.content)).pages[0].extract_text()

    assert client.get("/api/v1/events/999/pdf").status_code == 404

    analysis = client.get("/api/v1/pdf/analyze").json()
    assert analysis["totalFields"] == 6


def test_missing_template_is_500(session_local) -> None:
    client = _client(session_local)
    client.app.dependency_overrides.pop(pdf.get_pdf_template)
    r = client.post("/api/v1/pdf/event", json={"title": "X"})
    assert r.status_code == 500


def test_posted_event_with_bad_date_is_400(session_local) -> None:
    client = _client(session_local)
    r = client.post("/api/v1/pdf/event", json={"title": "Fest", "date": "7/4/2024"})
    assert r.status_code == 400


def test_posted_event_with_wrong_shapes_is_400(app_client) -> None:
    app_client.app.dependency_overrides[pdf.get_pdf_template] = lambda: _template()

    r = app_client.post("/api/v1/pdf/event", json={"title": "Fest", "supplies": ["ice"]})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "invalid_request"

    r = app_client.post("/api/v1/pdf/event", json={"title": "Fest", "beers": [{"quantity": "lots"}]})
    assert r.status_code == 400

    ok = app_client.post(
        "/api/v1/pdf/event",
        json={"title": "Fest", "supplies": {"ice": True, "additional_supplies": "Coasters"}, "extra": 1},
    )
    assert ok.status_code == 200


def test_render_defaults_to_configured_field_map(monkeypatch) -> None:
    monkeypatch.setattr(render, "get_settings", lambda: SimpleNamespace(pdf_field_map_version="1999.9"))
    with pytest.raises(ValueError, match="1999.9"):
        render_event_pdf(_template(), _sheet())
