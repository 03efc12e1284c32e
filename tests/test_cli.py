from __future__ import annotations

import json
from pathlib import Path

from invoice_export.cli.main import EXIT_EMPTY, EXIT_FAILED, EXIT_OK, main


def _write(path: Path, payload) -> str:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_export_artikel(tmp_path: Path):
    src = _write(tmp_path / "items.json", [{"productCode": "A1", "productName": "Widget", "quantity": 2, "unitPrice": 9.5}])
    out = tmp_path / "out"
    code = main(["export", "--dialect", "artikel-csv", "--input", src, "--output-dir", str(out)])
    assert code == EXIT_OK
    assert (out / "artikel_export.csv").read_text(encoding="utf-8").endswith("A1,Widget,Produkte,Stk")


def test_export_json(tmp_path: Path):
    src = _write(tmp_path / "items.json", [{"productCode": "A1", "productName": "Widget"}])
    out = tmp_path / "out"
    assert main(["export", "--json", "items", "--input", src, "--output-dir", str(out)]) == EXIT_OK
    assert json.loads((out / "extracted_invoice_data.json").read_text(encoding="utf-8"))[0]["quantity"] == 0


def test_export_empty_input(tmp_path: Path):
    src = _write(tmp_path / "items.json", [])
    out = tmp_path / "out"
    code = main(["export", "--dialect", "invoice-items-csv", "--input", src, "--output-dir", str(out)])
    assert code == EXIT_EMPTY
    assert not (out / "extracted_invoice_data.csv").exists()


def test_export_invalid_input(tmp_path: Path):
    src = _write(tmp_path / "items.json", [{"productName": "no code"}])
    code = main(["export", "--dialect", "invoice-items-csv", "--input", src, "--output-dir", str(tmp_path)])
    assert code == EXIT_FAILED


def test_missing_input_file(tmp_path: Path):
    code = main(["export", "--dialect", "invoice-items-csv", "--input", str(tmp_path / "nope.json")])
    assert code == EXIT_FAILED


def test_list_dialects(capsys):
    assert main(["dialects"]) == EXIT_OK
    assert "product-catalog-csv" in capsys.readouterr().out
