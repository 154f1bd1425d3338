"""Integration tests for generator behavior."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from spring_to_typescript_generator.cli import main
from spring_to_typescript_generator.generator import (
    EndpointError,
    MetadataLoadError,
    SignatureError,
    WriteError,
    run_generation,
)
from spring_to_typescript_generator.model_types import GenerationOptions
from .fixture_helpers import iter_fixture_paths, metadata_path, parametrize_fixtures

_PROJECT_ROOT = Path(__file__).resolve().parent.parent

_BROKEN_PAGED_CONTROLLER = """
classes:
  - name: com.example.BrokenController
    annotations: [RestController]
    methods:
      - name: list
        descriptor: "()V"
        return_type: void
        annotations: [GetMapping, PagedQuery]
"""

_MALFORMED_SIGNATURE = """
classes:
  - name: com.example.Item
    fields:
      - name: tags
        type: java.util.List
        signature: "Ljava/util/List<Ljava/lang/String;>;>;"
  - name: com.example.ItemController
    annotations: [RestController]
    methods:
      - name: get
        descriptor: "()Lcom/example/Item;"
        return_type: com.example.Item
        annotations: [GetMapping]
"""

_UNKNOWN_CLASS = """
classes:
  - name: com.example.LegacyController
    annotations: [RestController]
    methods:
      - name: fetch
        descriptor: "()Lcom/example/Legacy;"
        return_type: com.example.Legacy
        annotations: [GetMapping]
"""


def _write_document(tmp_path: Path, source: str) -> Path:
    path = tmp_path / "metadata.yaml"
    path.write_text(source, encoding="utf-8")
    return path


@parametrize_fixtures()
@pytest.mark.parametrize("types", ["typescript", "zod"])
@pytest.mark.parametrize("api", ["react-query", "angular"])
def test_generation_smoke(fixture_path: Path, types: str, api: str, tmp_path: Path) -> None:
    """Each fixture should generate a source tree in every flavour without crashing."""
    output_dir = tmp_path / f"{fixture_path.stem}_{types}_{api}"
    result = run_generation(
        input_path=fixture_path,
        output_dir=output_dir,
        options=GenerationOptions(types=types, api=api),
    )

    assert Path(result.output_dir) == output_dir
    assert result.endpoint_count > 0
    assert result.files
    for relative_path in result.files:
        assert (output_dir / relative_path).is_file(), relative_path
    assert any(path.startswith("types/") for path in result.files)
    assert any(path.startswith("endpoints/") for path in result.files)


def test_generation_result_lists_files(tmp_path: Path) -> None:
    """The result reports every written file and the endpoint count."""
    output_dir = tmp_path / "users"
    result = run_generation(input_path=metadata_path("users_api.yaml"), output_dir=output_dir)

    assert result.endpoint_count == 4
    assert sorted(result.files) == [
        "endpoints/UserController.ts",
        "types/BaseEntity.ts",
        "types/Role.ts",
        "types/User.ts",
    ]
    assert result.warnings == ()


def test_generation_is_deterministic(tmp_path: Path) -> None:
    """Two runs over the same input produce identical trees."""
    first = run_generation(input_path=metadata_path("catalog_api.yaml"), output_dir=tmp_path / "a")
    second = run_generation(input_path=metadata_path("catalog_api.yaml"), output_dir=tmp_path / "b")

    assert first.files == second.files
    for relative_path in first.files:
        left = (tmp_path / "a" / relative_path).read_text(encoding="utf-8")
        right = (tmp_path / "b" / relative_path).read_text(encoding="utf-8")
        assert left == right, relative_path


def test_string_dates_option(tmp_path: Path) -> None:
    """Dates render as strings when requested."""
    output_dir = tmp_path / "dates"
    run_generation(
        input_path=metadata_path("catalog_api.yaml"),
        output_dir=output_dir,
        options=GenerationOptions(use_string_as_date=True),
    )
    product = (output_dir / "types" / "Product.ts").read_text(encoding="utf-8")
    assert "  createdAt: string;\n" in product


def test_output_directory_must_not_exist(tmp_path: Path) -> None:
    """Generator refuses to write into pre-existing output directories."""
    output_dir = tmp_path / "existing"
    output_dir.mkdir(parents=True)

    with pytest.raises(WriteError):
        run_generation(input_path=iter_fixture_paths()[0], output_dir=output_dir)


def test_fatal_errors_leave_no_output(tmp_path: Path) -> None:
    """A fatal error stops the run before the output directory is created."""
    input_path = _write_document(tmp_path, _BROKEN_PAGED_CONTROLLER)
    output_dir = tmp_path / "generated"

    with pytest.raises(EndpointError, match=r"BrokenController\.list"):
        run_generation(input_path=input_path, output_dir=output_dir)
    assert not output_dir.exists()


def test_malformed_signature_is_fatal(tmp_path: Path) -> None:
    """A misaligned generic close aborts generation."""
    input_path = _write_document(tmp_path, _MALFORMED_SIGNATURE)

    with pytest.raises(SignatureError, match="Misaligned"):
        run_generation(input_path=input_path, output_dir=tmp_path / "generated")


def test_missing_input_is_a_load_error(tmp_path: Path) -> None:
    """Unreadable input is reported as a metadata load error."""
    with pytest.raises(MetadataLoadError):
        run_generation(input_path=tmp_path / "missing.yaml", output_dir=tmp_path / "generated")


def test_unknown_classes_are_warnings(tmp_path: Path) -> None:
    """Unknown classes degrade to empty objects and are reported."""
    input_path = _write_document(tmp_path, _UNKNOWN_CLASS)
    output_dir = tmp_path / "generated"
    result = run_generation(input_path=input_path, output_dir=output_dir)

    assert result.warnings == ("Could not load class com.example.Legacy",)
    legacy = (output_dir / "types" / "Legacy.ts").read_text(encoding="utf-8")
    assert legacy == "export default interface Legacy {\n}\n"


def test_cli_prints_warnings(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """The CLI reports warnings and exits successfully."""
    input_path = _write_document(tmp_path, _UNKNOWN_CLASS)
    exit_code = main(["--input", str(input_path), "--output", str(tmp_path / "generated")])

    captured = capsys.readouterr()
    assert exit_code == 0
    assert "Warning: Could not load class com.example.Legacy" in captured.out


def test_cli_reports_fatal_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Fatal errors exit through argparse with status 2."""
    input_path = _write_document(tmp_path, _BROKEN_PAGED_CONTROLLER)

    with pytest.raises(SystemExit) as exc_info:
        main(["--input", str(input_path), "--output", str(tmp_path / "generated")])

    assert exc_info.value.code == 2
    assert "BrokenController.list" in capsys.readouterr().err


def test_cli_help_screen() -> None:
    """Running the CLI help should succeed and print usage information."""
    result = subprocess.run(
        [sys.executable, "-m", "spring_to_typescript_generator", "--help"],
        check=False,
        capture_output=True,
        text=True,
        cwd=_PROJECT_ROOT / "src",
    )
    assert result.returncode == 0
    assert "usage:" in result.stdout.lower()
    assert "--types" in result.stdout
