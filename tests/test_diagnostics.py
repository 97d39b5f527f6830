import json
import logging

import pytest

from diagnostics import crash_capture, logging_setup, tracing


def test_configure_logging_writes_kv_lines(tmp_path) -> None:
    info = logging_setup.configure_logging(tmp_path, attach_modules=False)
    assert info["format"] == "kv"
    logger = logging.getLogger(info["logger_name"])
    logger.info("tier built name=full")
    for handler in logger.handlers:
        handler.flush()
    text = (tmp_path / "logs" / "artmap.log").read_text(encoding="utf-8")
    assert "level=INFO" in text
    assert "msg=tier built name=full" in text


def test_crash_marker_records_exception(tmp_path) -> None:
    path = crash_capture.write_crash_marker(ValueError("bad raster"), {"stage": "bitmaps", "size": 16384}, tmp_path)
    assert path.parent == tmp_path / "crashes"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["exception_type"] == "ValueError"
    assert payload["message"] == "bad raster"
    assert payload["context"] == {"stage": "bitmaps", "size": "16384"}


def test_spans_record_duration_and_errors() -> None:
    tracing.clear_spans()
    with tracing.span("thumbnails.batch", start=0, end=200):
        pass
    with pytest.raises(RuntimeError):
        with tracing.span("bitmap.build", tier="full"):
            raise RuntimeError("boom")

    batch, = tracing.get_recent_spans("thumbnails.batch")
    assert batch["status"] == "ok"
    assert batch["duration_ms"] >= 0
    build, = tracing.get_recent_spans("bitmap.build")
    assert build["status"] == "error"
    assert build["attrs"] == {"tier": "full", "error": "RuntimeError"}
    assert len(tracing.get_recent_spans()) == 2
