# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pandas as pd
import pytest

HEADERS = ["ID Pesanan", "Status", "Channel", "Nama Toko", "Nama Pembeli",
           "AWB/No. Tracking", "Kurir", "Nama Produk", "Variant Produk", "SKU", "Jumlah"]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        # setenv 経由で元の状態を記録し、.env 読み込みによる汚染を teardown で戻す
        for name in ("API_BASE_URL", "API_TOKEN"):
            monkeypatch.setenv(name, "")
            monkeypatch.delenv(name)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: http://backend.test/api
  timeout: 5
  token: secret-token
sheet: "0"
nested: true
output_directory: ./output
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write an .xlsx where each sheet is written verbatim (no pandas header/index)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def sample_workbook(temp_workdir: Path) -> Path:
    """Marketplace export: merged order cells (blank id on continuation rows)."""
    return _make_excel(
        temp_workdir / "data" / "orders.xlsx",
        {
            "Pesanan": [
                HEADERS,
                ["INV-001", "shipped", "Shopee", "Toko A", "Budi", "1234567890123456", "JNE", "Kaos", "Merah/L", "KS-01", "2"],
                ["", "", "", "", "", "", "", "Celana", "Hitam/32", "CL-02", "1"],
                ["INV-002", "unpaid", "Tokopedia", "Toko B", "Sari", "JP998877", "J&T", "Topi", "", "TP-09", "3"],
            ],
            "Catatan": [["memo"], ["not an order sheet"]],
        },
    )


@pytest.fixture()
def orphan_workbook(temp_workdir: Path) -> Path:
    """Detail row above the first order id (order_id stays empty)."""
    return _make_excel(
        temp_workdir / "data" / "orphan.xlsx",
        {
            "Pesanan": [
                HEADERS,
                ["", "", "", "", "", "", "", "Kaos", "", "KS-01", "1"],
                ["INV-009", "", "Shopee", "", "", "", "", "Topi", "", "TP-09", "2"],
            ],
        },
    )
