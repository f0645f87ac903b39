"""报告序列化、请求边界与命令行的测试。"""

from __future__ import annotations

import csv
import re
import subprocess
from datetime import datetime
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from image_resizer.api import handlers
from image_resizer.cli.main import app
from image_resizer.core.exceptions import (
    EncodeError,
    FileBrowserError,
    InvalidConfigurationError,
    SourceNotFoundError,
)
from image_resizer.core.models import BatchReport, Failed, FileOutcome, Skipped, Success, UnsupportedFormat
from image_resizer.core.output_manager import save_image_file
from image_resizer.core.report import format_processing_time, outcome_to_dict, report_to_dict, write_csv_report
from image_resizer.utils import file_browser

TIMESTAMP = datetime(2024, 5, 1, 12, 30, 5)


def _sample_report(tmp_path: Path) -> BatchReport:
    out = tmp_path / "out"
    return BatchReport(
        output_folder=out,
        elapsed=1.23456,
        outcomes=(
            Success(source_path=tmp_path / "a.png", timestamp=TIMESTAMP, destination=out / "a.png"),
            Skipped(source_path=tmp_path / "b.png", timestamp=TIMESTAMP, destination=out / "b.png"),
            UnsupportedFormat(source_path=tmp_path / "c.txt", timestamp=TIMESTAMP),
            Failed(source_path=tmp_path / "d.png", timestamp=TIMESTAMP, error="无法解码图像", destination=out / "d.png"),
        ),
    )


def test_outcome_serialization(tmp_path: Path) -> None:
    report = _sample_report(tmp_path)
    success, skipped, unsupported, failed = (outcome_to_dict(o) for o in report.outcomes)

    assert success["status"] == "success"
    assert success["output_file"] == str(tmp_path / "out" / "a.png")
    assert success["timestamp"] == "2024-05-01 12:30:05"
    assert skipped["status"] == "skipped"
    assert "output_file" not in unsupported
    assert unsupported["status"] == "unsupported_format"
    assert failed["status"] == "error"
    assert failed["message"] == "无法解码图像"


def test_outcome_base_cannot_be_instantiated(tmp_path: Path) -> None:
    with pytest.raises(TypeError):
        FileOutcome(source_path=tmp_path / "a.png", timestamp=TIMESTAMP)


def test_build_request_defaults_worker_count_when_absent() -> None:
    request = handlers.build_request({"input_folder": "in", "output_folder": "out"})

    assert request.max_workers >= 1
    assert handlers.build_request({"input_folder": "in", "output_folder": "out", "max_workers": 3}).max_workers == 3


def test_report_serialization(tmp_path: Path) -> None:
    payload = report_to_dict(_sample_report(tmp_path))

    assert payload["output_folder"] == str(tmp_path / "out")
    assert payload["processing_time"] == "1.23 seconds"
    assert len(payload["results"]) == 4
    assert format_processing_time(0) == "0.00 seconds"


def test_report_counts(tmp_path: Path) -> None:
    report = _sample_report(tmp_path)

    assert report.counts() == {"success": 1, "skipped": 1, "unsupported_format": 1, "error": 1}
    assert [o.source_path.name for o in report.failed] == ["d.png"]


def test_csv_report(tmp_path: Path) -> None:
    report_path = write_csv_report(_sample_report(tmp_path), tmp_path / "reports" / "report.csv")

    with report_path.open("r", encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))

    assert [row["status"] for row in rows] == ["success", "skipped", "unsupported_format", "error"]
    assert rows[2]["output_file"] == ""


def test_process_images_round_trip(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (100, 50), "blue").save(source / "a.png")
    (source / "b.txt").write_text("x")

    response = handlers.process_images(
        {
            "input_folder": str(source),
            "output_folder": str(tmp_path / "output"),
            "width": 50,
            "height": None,
            "keep_aspect_ratio": True,
            "overwrite": False,
        }
    )

    assert response["output_folder"] == str(tmp_path / "output")
    assert re.fullmatch(r"\d+\.\d{2} seconds", response["processing_time"])
    statuses = {Path(item["file"]).name: item["status"] for item in response["results"]}
    assert statuses == {"a.png": "success", "b.txt": "unsupported_format"}
    with Image.open(tmp_path / "output" / "a.png") as img:
        assert img.size == (50, 25)


def test_process_images_missing_source(tmp_path: Path) -> None:
    with pytest.raises(SourceNotFoundError):
        handlers.process_images(
            {
                "input_folder": str(tmp_path / "missing"),
                "output_folder": str(tmp_path / "output"),
                "keep_aspect_ratio": False,
                "overwrite": False,
            }
        )


@pytest.mark.parametrize(
    "payload",
    [
        {"output_folder": "out"},
        {"input_folder": "in", "output_folder": "out", "width": -1},
        {"input_folder": "in", "output_folder": "out", "width": "100"},
        {"input_folder": "in", "output_folder": "out", "keep_aspect_ratio": "yes"},
        {"input_folder": "in", "output_folder": "out", "executor": "gpu"},
        {"input_folder": "in", "output_folder": "out", "max_workers": 0},
    ],
)
def test_build_request_rejects_malformed_payload(payload: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        handlers.build_request(payload)


def test_file_browser_command_per_platform() -> None:
    assert file_browser.file_browser_command("C:\\out", "win32") == ["explorer", "C:\\out"]
    assert file_browser.file_browser_command("/tmp/out", "darwin") == ["open", "/tmp/out"]
    assert file_browser.file_browser_command("/tmp/out", "linux") == ["xdg-open", "/tmp/out"]


def test_open_file_explorer_launches_process(monkeypatch: pytest.MonkeyPatch) -> None:
    launched: list[list[str]] = []
    monkeypatch.setattr(file_browser.subprocess, "Popen", lambda command: launched.append(command))

    handlers.open_file_explorer("/tmp/out")

    assert launched == [file_browser.file_browser_command("/tmp/out")]


def test_open_file_explorer_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(command):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(subprocess, "Popen", fail)

    with pytest.raises(FileBrowserError):
        file_browser.open_in_file_browser("/tmp/out", platform="linux")


def test_cli_run_and_missing_source(tmp_path: Path) -> None:
    source = tmp_path / "input"
    source.mkdir()
    Image.new("RGB", (40, 20), "blue").save(source / "a.png")
    runner = CliRunner()

    result = runner.invoke(
        app,
        ["run", str(source), "-o", str(tmp_path / "output"), "--width", "20", "--keep-aspect", "-w", "1"],
    )
    assert result.exit_code == 0, result.output
    assert "成功 1 张" in result.output
    with Image.open(tmp_path / "output" / "a.png") as img:
        assert img.size == (20, 10)

    missing = runner.invoke(app, ["run", str(tmp_path / "nope"), "-o", str(tmp_path / "output")])
    assert missing.exit_code == 1


def test_unknown_output_extension_is_encode_error(tmp_path: Path) -> None:
    image = Image.new("RGB", (4, 4), "blue")

    with pytest.raises(EncodeError):
        save_image_file(image, tmp_path / "out.bmp")
