from __future__ import annotations

from pathlib import Path

import pytest

pytest.importorskip("textual")


def test_missing_file_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from hexgrid.cli import main

    assert main([str(tmp_path / "nope.bin")]) == 2
    assert "file not found" in capsys.readouterr().err


def test_bad_config_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    from hexgrid.cli import main

    data = tmp_path / "d.bin"
    data.write_bytes(b"\x00" * 8)
    cfg = tmp_path / "config.yaml"
    cfg.write_text("default_cols: -3\n", encoding="utf-8")
    assert main([str(data), "--config", str(cfg)]) == 2
    assert "bad config" in capsys.readouterr().err
