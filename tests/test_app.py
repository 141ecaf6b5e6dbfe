from __future__ import annotations

import io

import pytest

from conftest import DictStore, FailingStore, trade_input
from tradelog.app import allowed_file, create_app
from tradelog.config import JournalConfig

HEADER = "ID,Date,TradeSetup,RR,PnL,ActiveMgmt,Execution,Note"


@pytest.fixture
def client():
    app = create_app(JournalConfig(), store=DictStore())
    app.config["TESTING"] = True
    return app.test_client()


def test_allowed_file() -> None:
    assert allowed_file("trades.csv")
    assert allowed_file("TRADES.CSV")
    assert not allowed_file("trades.txt")
    assert not allowed_file("csv")


def test_add_list_and_stats(client) -> None:
    r = client.post("/trades", json=trade_input())
    assert r.status_code == 201
    assert r.get_json()["trade"]["id"] == 1

    client.post("/trades", data=trade_input(setup="Swing: PB", pnl="-25"))
    body = client.get("/").get_json()
    assert [t["id"] for t in body["trades"]] == [2, 1]
    assert body["stats"]["overall"]["total_trades"] == 2
    assert body["stats"]["swing"]["average_loss"] == 25
    assert client.get("/stats").get_json()["scalp"]["win_rate"] == 100


def test_validation_error_is_400(client) -> None:
    r = client.post("/trades", json=trade_input(rr="2"))
    assert r.status_code == 400
    assert r.get_json()["field"] == "rr"


def test_edit_and_delete(client) -> None:
    client.post("/trades", json=trade_input())
    r = client.put("/trades/1", json=trade_input(note="revised"))
    assert r.status_code == 200
    assert r.get_json()["trade"]["note"] == "revised"
    assert client.get("/trades/1").get_json()["trade"]["note"] == "revised"

    assert client.delete("/trades/1").status_code == 200
    assert client.delete("/trades/1").status_code == 404
    assert client.put("/trades/5", json=trade_input()).status_code == 404


def test_clear_requires_confirmation(client) -> None:
    client.post("/trades", json=trade_input())
    assert client.post("/clear").status_code == 400
    assert len(client.get("/trades").get_json()["trades"]) == 1

    assert client.post("/clear", data={"confirm": "yes"}).status_code == 200
    assert client.get("/trades").get_json()["trades"] == []


def test_export(client) -> None:
    assert client.get("/export").status_code == 404

    client.post("/trades", json=trade_input(note="a, b"))
    r = client.get("/export")
    assert r.status_code == 200
    assert r.mimetype == "text/csv"
    assert "trading_journal.csv" in r.headers["Content-Disposition"]
    lines = r.get_data(as_text=True).splitlines()
    assert lines[0] == HEADER
    assert lines[1].endswith(',"a, b"')


def test_import_file_upload(client) -> None:
    text = HEADER + "\n3,2026-01-05,Scalp: W,1:1,10,+EV,A,\nbad row\n"
    r = client.post(
        "/import",
        data={"file": (io.BytesIO(text.encode()), "journal.csv")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 200
    body = r.get_json()
    assert (body["imported"], body["skipped"]) == (1, 1)
    assert client.get("/trades/3").status_code == 200


def test_import_rejects_non_csv_upload(client) -> None:
    r = client.post(
        "/import",
        data={"file": (io.BytesIO(b"x"), "journal.txt")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 400


def test_import_raw_body_header_mismatch(client) -> None:
    r = client.post("/import", data="Id,Date\n1,2026-01-01\n", content_type="text/csv")
    assert r.status_code == 400
    assert r.get_json()["expected"] == HEADER
    assert client.get("/trades").get_json()["trades"] == []


def test_import_empty_body(client) -> None:
    assert client.post("/import", data="", content_type="text/csv").status_code == 400


def test_save_failure_surfaces_warning() -> None:
    app = create_app(JournalConfig(), store=FailingStore())
    r = app.test_client().post("/trades", json=trade_input())
    assert r.status_code == 201
    assert "quota exceeded" in r.get_json()["warning"]
