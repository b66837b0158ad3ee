from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from productstamp import pipeline
from productstamp.cli import app
from productstamp.errors import DecodeFailure

from image_helpers import passthrough_cutout, png_bytes

runner = CliRunner()


def _write_photo(path: Path) -> Path:
    path.write_bytes(png_bytes((400, 300), (20, 60, 200, 255)))
    return path


def test_render_writes_jpeg_post(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    photo = _write_photo(tmp_path / "shoe.png")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "render",
            str(photo),
            "--out",
            str(out_dir),
            "--price",
            "1500",
            "--price-position",
            "50,50",
            "--config",
            str(tmp_path / "missing.yaml"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "success=1" in result.output
    output = out_dir / "shoe__post.jpg"
    with Image.open(output) as image:
        assert image.size == (720, 720)


def test_render_writes_cutout_when_degraded(monkeypatch, tmp_path: Path) -> None:
    def _fail_decode(data: bytes, label: str = "image"):
        raise DecodeFailure("broken")

    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    monkeypatch.setattr(pipeline, "decode_image_bytes", _fail_decode)
    photo = _write_photo(tmp_path / "shoe.png")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["render", str(photo), "--out", str(out_dir), "--config", str(tmp_path / "missing.yaml")],
    )

    assert result.exit_code == 0, result.output
    assert "degraded=1" in result.output
    assert (out_dir / "shoe__post.png").read_bytes() == photo.read_bytes()


def test_render_reports_cutout_failures(monkeypatch, tmp_path: Path) -> None:
    async def _reject(image: bytes, config) -> bytes:
        raise ValueError("no model")

    monkeypatch.setattr(pipeline, "remove_background", _reject)
    photo = _write_photo(tmp_path / "shoe.png")

    result = runner.invoke(
        app,
        ["render", str(photo), "--out", str(tmp_path / "out"), "--config", str(tmp_path / "missing.yaml")],
    )

    assert result.exit_code == 1
    assert "failed=1" in result.output


def test_render_rejects_invalid_position(tmp_path: Path) -> None:
    photo = _write_photo(tmp_path / "shoe.png")
    result = runner.invoke(
        app,
        ["render", str(photo), "--logo-position", "middle", "--config", str(tmp_path / "missing.yaml")],
    )
    assert result.exit_code == 1


def test_render_skips_existing_outputs(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    photo = _write_photo(tmp_path / "shoe.png")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "shoe__post.jpg").write_bytes(b"old")

    result = runner.invoke(
        app,
        ["render", str(photo), "--out", str(out_dir), "--config", str(tmp_path / "missing.yaml")],
    )

    assert result.exit_code == 0, result.output
    assert "skipped=1" in result.output
    assert (out_dir / "shoe__post.jpg").read_bytes() == b"old"


def test_render_directory_ignores_output_folder(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    _write_photo(tmp_path / "a.png")
    _write_photo(tmp_path / "b.png")

    first = runner.invoke(app, ["render", str(tmp_path), "--config", str(tmp_path / "missing.yaml")])
    second = runner.invoke(
        app,
        ["render", str(tmp_path), "--no-skip-existing", "--config", str(tmp_path / "missing.yaml")],
    )

    assert "success=2" in first.output
    assert "success=2" in second.output
    assert sorted(p.name for p in (tmp_path / "output").iterdir()) == ["a__post.jpg", "b__post.jpg"]


def test_init_config_writes_file(monkeypatch, tmp_path: Path) -> None:
    target = tmp_path / "Config" / "config.yaml"
    monkeypatch.setattr("productstamp.config.get_config_path", lambda: target)

    result = runner.invoke(app, ["init-config"])

    assert result.exit_code == 0, result.output
    assert target.exists()


def test_render_rejects_unknown_name_template_key(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    photo = _write_photo(tmp_path / "shoe.png")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["render", str(photo), "--out", str(out_dir), "--name", "{nope}.jpg", "--config", str(tmp_path / "missing.yaml")],
    )

    assert result.exit_code == 1
    assert "Invalid name template" in result.output
    assert not out_dir.exists()


def test_render_keeps_going_after_unexpected_per_file_error(monkeypatch, tmp_path: Path) -> None:
    def _read(path: Path) -> bytes:
        if path.stem == "a":
            raise ValueError("unexpected input")
        return path.read_bytes()

    monkeypatch.setattr(pipeline, "remove_background", passthrough_cutout)
    monkeypatch.setattr("productstamp.cli.read_image_file", _read)
    _write_photo(tmp_path / "a.png")
    _write_photo(tmp_path / "b.png")

    result = runner.invoke(app, ["render", str(tmp_path), "--config", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
    assert "success=1" in result.output
    assert "failed=1" in result.output
    assert "unexpected input" in result.output
    assert (tmp_path / "output" / "b__post.jpg").exists()


def test_render_skips_when_degraded_output_exists(monkeypatch, tmp_path: Path) -> None:
    async def _unused(image: bytes, config) -> bytes:
        raise AssertionError("cutout should not run for an already rendered input")

    monkeypatch.setattr(pipeline, "remove_background", _unused)
    photo = _write_photo(tmp_path / "shoe.png")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    (out_dir / "shoe__post.png").write_bytes(b"old cutout")

    result = runner.invoke(
        app,
        ["render", str(photo), "--out", str(out_dir), "--config", str(tmp_path / "missing.yaml")],
    )

    assert result.exit_code == 0, result.output
    assert "skipped=1" in result.output
    assert (out_dir / "shoe__post.png").read_bytes() == b"old cutout"
    assert not (out_dir / "shoe__post.jpg").exists()
