# scanner/main.py
from __future__ import annotations
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.utils import secure_filename

from scanner.extractors.errors import ScanError
from scanner.extractors.io_pdf_image import create_hints
from scanner.extractors.process import process_file

logger = logging.getLogger(__name__)


def _max_upload_bytes() -> int:
    raw = os.getenv("MAX_UPLOAD_MB", "")
    mb = int(raw) if raw.isdigit() and int(raw) > 0 else 20
    return mb * 1024 * 1024


def create_app() -> Flask:
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = _max_upload_bytes()
    CORS(app)

    try:
        (Path(app.instance_path) / "uploads").mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("cannot create upload dir under %s", app.instance_path)

    @app.get("/alive")
    def alive():
        return "", 200

    @app.get("/health")
    def health():
        return jsonify({"ok": True}), 200

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_e):
        return _json_err("Fichier trop volumineux", 413)

    @app.post("/scanner/scan")
    def scan_file():
        file = request.files.get("file")
        if not file or not getattr(file, "filename", ""):
            return _json_err("Aucun fichier reçu", 400)

        try:
            formats = _read_formats()
            hints = create_hints(formats)
        except ValueError as e:
            return _json_err(str(e), 400)

        tmp = Path(app.instance_path) / "uploads"
        tmp.mkdir(parents=True, exist_ok=True)
        # nom unique : deux requêtes concurrentes peuvent envoyer le même fichier
        safe_name = secure_filename(file.filename) or "upload"
        dest = tmp / f"{uuid.uuid4().hex}_{safe_name}"
        try:
            file.save(dest)
            result = process_file(dest, hints)
            return jsonify(result.to_dict()), 200
        except ScanError as e:
            return _json_err(str(e), 500)
        except Exception as e:
            logger.exception("scan failed for %s", safe_name)
            return _json_err(str(e), 500)
        finally:
            dest.unlink(missing_ok=True)

    return app


def _read_formats() -> Optional[List[str]]:
    """Champ multipart optionnel `json` : {"formats": [...]}, en champ texte ou en fichier."""
    raw: Any = request.form.get("json")
    if raw is None and "json" in request.files:
        raw = request.files["json"].read().decode("utf-8", errors="replace")
    if not raw:
        return None
    try:
        cfg: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid json field: {e.msg}") from e
    if not isinstance(cfg, dict):
        raise ValueError("Invalid json field: expected an object")
    formats = cfg.get("formats")
    if formats is None:
        return None
    if not isinstance(formats, list):
        raise ValueError("Invalid json field: 'formats' must be a list")
    return [str(f) for f in formats]


def _json_err(msg: str, status: int):
    return jsonify({"message": msg}), status
