import io
import json
from pathlib import Path

import pytest
from werkzeug.datastructures import FileStorage

from scanner import main
from scanner.extractors.candidates import BarcodeData, ScanResult
from scanner.extractors.errors import ScanError


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("MAX_UPLOAD_MB", "1")
    app = main.create_app()
    app.instance_path = str(tmp_path)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def test_alive(client):
    r = client.get("/alive")
    assert r.status_code == 200
    assert r.data == b""


def test_health(client):
    assert client.get("/health").get_json() == {"ok": True}


def test_scan_requires_file(client):
    r = client.post("/scanner/scan", data={}, content_type="multipart/form-data")
    assert r.status_code == 400
    assert "message" in r.get_json()


def test_scan_returns_barcodes(client, monkeypatch, tmp_path):
    seen = {}

    def fake_process(path, hints):
        seen["path"] = path
        seen["hints"] = hints
        return ScanResult(barcodes=[BarcodeData(type="QR_CODE", data="x", date="2024-03-01T00:00:00+00:00")])

    monkeypatch.setattr(main, "process_file", fake_process)
    r = client.post(
        "/scanner/scan",
        data={
            "file": (io.BytesIO(b"%PDF-1.7"), "avviso.pdf"),
            "json": json.dumps({"formats": ["QR_CODE"]}),
        },
        content_type="multipart/form-data",
    )
    assert r.status_code == 200
    assert r.get_json() == {"barcodes": [{"type": "QR_CODE", "data": "x", "date": "2024-03-01T00:00:00+00:00"}]}
    assert seen["hints"].symbols == ("QRCODE",)
    assert seen["path"].name.endswith("avviso.pdf")
    assert not seen["path"].exists()  # upload supprimé après traitement


def test_scan_unknown_format(client):
    r = client.post(
        "/scanner/scan",
        data={
            "file": (io.BytesIO(b"%PDF-1.7"), "avviso.pdf"),
            "json": json.dumps({"formats": ["NOPE"]}),
        },
        content_type="multipart/form-data",
    )
    assert r.status_code == 400
    assert "NOPE" in r.get_json()["message"]


def test_scan_invalid_json(client):
    r = client.post(
        "/scanner/scan",
        data={"file": (io.BytesIO(b"x"), "a.png"), "json": "{not json"},
        content_type="multipart/form-data",
    )
    assert r.status_code == 400


def test_scan_error_is_500(client, monkeypatch):
    def fail(path, hints):
        raise ScanError("Unexpected file type: .txt")

    monkeypatch.setattr(main, "process_file", fail)
    r = client.post(
        "/scanner/scan",
        data={"file": (io.BytesIO(b"hello"), "notes.txt")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 500
    assert r.get_json() == {"message": "Unexpected file type: .txt"}


def test_upload_too_large(client):
    r = client.post(
        "/scanner/scan",
        data={"file": (io.BytesIO(b"0" * (2 * 1024 * 1024)), "big.pdf")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 413


def test_failed_save_leaves_no_partial_upload(client, monkeypatch, tmp_path):
    def broken_save(self, dst, buffer_size=16384):
        Path(dst).write_bytes(b"%PDF-1.")
        raise OSError("No space left on device")

    monkeypatch.setattr(FileStorage, "save", broken_save)
    r = client.post(
        "/scanner/scan",
        data={"file": (io.BytesIO(b"%PDF-1.7"), "avviso.pdf")},
        content_type="multipart/form-data",
    )
    assert r.status_code == 500
    assert list((tmp_path / "uploads").iterdir()) == []
