import pytest
from pydantic import ValidationError

from godeps.config import AnalyzerConfig, load_config


def test_defaults(tmp_path):
	config = load_config(tmp_path)
	assert config == AnalyzerConfig()
	assert config.conflict_policy == "last"
	assert config.on_malformed == "skip"
	assert config.max_workers is None


def test_reads_own_toml_first(tmp_path):
	(tmp_path / ".godeps.toml").write_text('[godeps]\nconflict_policy = "first"\nmax_workers = 4\n')
	(tmp_path / "pyproject.toml").write_text('[tool.godeps]\non_malformed = "raise"\n')
	config = load_config(tmp_path)
	assert config.conflict_policy == "first"
	assert config.max_workers == 4
	assert config.on_malformed == "skip"


def test_reads_pyproject_tool_table(tmp_path):
	(tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n\n[tool.godeps]\non_malformed = "raise"\nmodule_path = "example.com/m"\n')
	config = load_config(tmp_path)
	assert config.on_malformed == "raise"
	assert config.module_path == "example.com/m"


def test_invalid_values_rejected(tmp_path):
	(tmp_path / ".godeps.toml").write_text('[godeps]\nconflict_policy = "newest"\n')
	with pytest.raises(ValidationError):
		load_config(tmp_path)
	with pytest.raises(ValidationError):
		AnalyzerConfig(max_workers=0)
