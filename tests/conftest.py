"""Shared fixtures for the ``loyalty_receipts`` test suite.

CSV exports are kept inline as small snapshots. Every test runs with the
``LR_*`` / log-level environment variables cleared so a developer's local
``.env`` or shell never leaks into assertions.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

import pytest

from loyalty_receipts import logging_setup

_ENV_VARS = (
    "LR_CSV_ENCODING",
    "LR_RANK_LIMIT",
    "LR_MEMBER_LIST_LIMIT",
    "LOYALTY_RECEIPTS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear configuration env vars and run from an empty working directory."""

    for name in _ENV_VARS:
        # Set first so teardown also removes values loaded from a test's .env.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_package_logger(monkeypatch: pytest.MonkeyPatch):
    """Undo ``configure_logging`` calls made by CLI tests.

    The CLI root callback configures the package logger once per process and
    stops propagation; restoring it keeps ``caplog`` working in later tests.
    """

    logger = logging.getLogger("loyalty_receipts")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


TOMODS_CSV = textwrap.dedent(
    """\
    会員番号/匿名会員番号,買上日,買上時間,店舗名,商品名,買上金額（会員）,買上点数（会員）,メーカー/取引先,大分類,中分類,小分類,JANコード
    M1,2024/01/05,13:05,渋谷店,Apple,100,1,MakerA,食品,果物,りんご,4900000000011
    M1,2024/01/05,13:05,渋谷店,Banana,200,1,MakerB,食品,果物,バナナ,4900000000028
    M1,2024/01/07,0930,新宿店,Shampoo,"1,200",2,MakerC,日用品,ヘアケア,シャンプー,4900000000035
    M2,2024/01/06,101500,渋谷店,Apple,300,3,MakerA,食品,果物,りんご,4900000000011
    M3,2024/01/08,18,渋谷店,Milk,150,1,MakerD,食品,乳製品,牛乳,4900000000042
    """
)

SUMMIT_CSV = textwrap.dedent(
    """\
    匿名会員番号,買上日,買上時間,店舗名,商品名,買上金額（会員),買上点数（会員),コーナー名,ライン名,部門名,カテゴリ名,JANコード
    S1,2024-02-01,09:00:00,大宮店,Tofu,98,1,日配,豆腐,食品,大豆製品,4900000001001
    S1,2024-02-01,09:00:00,大宮店,Natto,88,2,日配,納豆,食品,大豆製品,4900000001002
    S2,2024-02-02,12:30,浦和店,Tofu,98,1,日配,豆腐,食品,大豆製品,4900000001001
    """
)


@pytest.fixture
def tomods_csv() -> str:
    return TOMODS_CSV


@pytest.fixture
def summit_csv() -> str:
    return SUMMIT_CSV


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write CSV text to a file under ``tmp_path`` and return its path."""

    def _write(text: str, name: str = "export.csv", encoding: str = "utf-8") -> Path:
        path = tmp_path / name
        path.write_bytes(text.encode(encoding))
        return path

    return _write
