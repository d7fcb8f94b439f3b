from __future__ import annotations

import pytest

from camportal.util.security import resolve_path_within_base, validate_entity_id


def test_validate_entity_id_accepts_common_ids() -> None:
    assert validate_entity_id("cam-1") == "cam-1"
    assert validate_entity_id("cam_2") == "cam_2"
    assert validate_entity_id("cam.3") == "cam.3"
    assert validate_entity_id("64f1c2a9e4b0") == "64f1c2a9e4b0"


@pytest.mark.parametrize(
    "entity_id",
    ["", "../cam", "cam/1", r"cam\1", "cam 1", "cam$1", ".cam", "a" * 65, "cam,2"],
)
def test_validate_entity_id_rejects_unsafe_values(entity_id: str) -> None:
    with pytest.raises(ValueError, match="Invalid id"):
        validate_entity_id(entity_id)


def test_resolve_path_within_base(tmp_path) -> None:
    (tmp_path / "index.html").write_text("ok", encoding="utf-8")
    assert resolve_path_within_base(tmp_path, "index.html") == (tmp_path / "index.html").resolve()
    assert resolve_path_within_base(tmp_path, "../outside.txt") is None
