import asyncio
import builtins
import io

import pytest
from PIL import Image

from productstamp import cutout
from productstamp.cutout import CutoutConfig, preload_model, remove_background, run_cutout
from productstamp.errors import CutoutFailure

from image_helpers import png_bytes


@pytest.fixture
def no_rembg(monkeypatch):
    real_import = builtins.__import__

    def _import(name, *args, **kwargs):
        if name == "rembg":
            raise ImportError("No module named 'rembg'")
        return real_import(name, *args, **kwargs)

    monkeypatch.setattr(builtins, "__import__", _import)
    monkeypatch.setattr(cutout, "_SESSIONS", {})


def test_missing_rembg_reports_install_hint(no_rembg) -> None:
    with pytest.raises(CutoutFailure, match="pip install productstamp\\[cutout\\]"):
        asyncio.run(remove_background(png_bytes((4, 4), (0, 0, 0))))


def test_preload_model_logs_and_returns_false_on_failure(no_rembg, caplog) -> None:
    assert preload_model(CutoutConfig(model="u2net")) is False
    assert "Preloading failed" in caplog.text


def test_remove_background_uses_cached_session(monkeypatch) -> None:
    calls: list[tuple[str, object]] = []

    class _FakeRembg:
        @staticmethod
        def new_session(model: str) -> str:
            calls.append(("session", model))
            return f"session:{model}"

        @staticmethod
        def remove(data: bytes, session=None) -> bytes:
            calls.append(("remove", session))
            return png_bytes((8, 6), (255, 0, 0, 0))

    monkeypatch.setattr(cutout, "_import_rembg", lambda: _FakeRembg)
    monkeypatch.setattr(cutout, "_SESSIONS", {})

    for _ in range(2):
        result = asyncio.run(remove_background(b"input", CutoutConfig(model="u2netp")))
        with Image.open(io.BytesIO(result)) as image:
            assert image.format == "PNG"
            assert image.size == (8, 6)

    assert calls.count(("session", "u2netp")) == 1
    assert calls.count(("remove", "session:u2netp")) == 2


def test_remove_background_reencodes_requested_format(monkeypatch) -> None:
    class _FakeRembg:
        @staticmethod
        def new_session(model: str) -> object:
            return object()

        @staticmethod
        def remove(data: bytes, session=None) -> bytes:
            return png_bytes((8, 6), (255, 0, 0, 128))

    monkeypatch.setattr(cutout, "_import_rembg", lambda: _FakeRembg)
    monkeypatch.setattr(cutout, "_SESSIONS", {})

    result = asyncio.run(remove_background(b"input", CutoutConfig(output_format="webp", quality=0.8)))
    with Image.open(io.BytesIO(result)) as image:
        assert image.format == "WEBP"


def test_engine_errors_become_cutout_failures(monkeypatch) -> None:
    class _FakeRembg:
        @staticmethod
        def new_session(model: str) -> object:
            return object()

        @staticmethod
        def remove(data: bytes, session=None) -> bytes:
            raise RuntimeError("onnx session crashed")

    monkeypatch.setattr(cutout, "_import_rembg", lambda: _FakeRembg)
    monkeypatch.setattr(cutout, "_SESSIONS", {})

    with pytest.raises(CutoutFailure, match="onnx session crashed"):
        asyncio.run(remove_background(b"input"))


def test_run_cutout_passes_cutout_failures_through() -> None:
    async def _engine(image: bytes, config: CutoutConfig) -> bytes:
        raise CutoutFailure("already classified")

    with pytest.raises(CutoutFailure, match="^already classified$"):
        asyncio.run(run_cutout(_engine, b"x", CutoutConfig()))
