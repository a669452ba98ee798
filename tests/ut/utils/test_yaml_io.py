"""YAML 读写工具测试"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from mvnuploader.utils import yaml_io
from mvnuploader.utils.yaml_io import load_yaml, save_yaml


class TestLoadYaml:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_yaml(tmp_path / "nope.yml") == {}

    def test_empty_file(self, tmp_path: Path) -> None:
        p = tmp_path / "empty.yml"
        p.write_text("", encoding="utf-8")
        assert load_yaml(p) == {}

    def test_non_mapping(self, tmp_path: Path) -> None:
        p = tmp_path / "list.yml"
        p.write_text("- a\n- b\n", encoding="utf-8")
        assert load_yaml(p) == {}

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        p = tmp_path / "bad.yml"
        p.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(yaml.YAMLError):
            load_yaml(p)

    def test_size_limit(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(yaml_io, "MAX_YAML_SIZE", 4)
        p = tmp_path / "big.yml"
        p.write_text("key: value\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML 文件过大"):
            load_yaml(p)


class TestSaveYaml:
    def test_roundtrip_keeps_order_and_unicode(self, tmp_path: Path) -> None:
        p = tmp_path / "out" / "report.yml"
        save_yaml(p, {"z": 1, "a": "中文"})
        text = p.read_text(encoding="utf-8")
        assert text.index("z:") < text.index("a:")
        assert "中文" in text
        assert load_yaml(p) == {"z": 1, "a": "中文"}
        assert list(p.parent.glob("*.tmp")) == []
