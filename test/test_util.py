from __future__ import annotations
from pathlib import Path
import pytest
from async_ps1.util import cat, env_flag


def test_cat(tmp_path: Path) -> None:
    p = tmp_path / "file.txt"
    p.write_text("  contents\n\n", encoding="utf-8")
    assert cat(p) == "contents"


def test_cat_missing(tmp_path: Path) -> None:
    assert cat(tmp_path / "nonexistent") is None


@pytest.mark.parametrize(
    "value,default,flag",
    [
        (None, False, False),
        (None, True, True),
        ("", True, False),
        ("0", True, False),
        (" 0 ", True, False),
        ("1", False, True),
        ("yes", False, True),
    ],
)
def test_env_flag(value: str | None, default: bool, flag: bool) -> None:
    assert env_flag(value, default=default) is flag
