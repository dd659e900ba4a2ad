from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field


class AnalyzerConfig(BaseModel):
	# Which declaration survives when a field or method is redeclared differently.
	conflict_policy: Literal["last", "first"] = "last"
	# What to do with a file whose declarations cannot be summarised.
	on_malformed: Literal["skip", "raise"] = "skip"
	max_workers: Optional[int] = Field(default=None, gt=0)
	module_path: str = ""


def load_config(project_dir: Path) -> AnalyzerConfig:
	"""Read settings from ``.godeps.toml`` or ``[tool.godeps]`` in ``pyproject.toml``.

	Missing files and tables fall back to defaults; present but invalid
	values raise ``pydantic.ValidationError``.
	"""
	own_toml = project_dir / ".godeps.toml"
	if own_toml.exists():
		with open(own_toml, "rb") as f:
			data = tomllib.load(f)
		return AnalyzerConfig(**data.get("godeps", {}))

	pyproject = project_dir / "pyproject.toml"
	if pyproject.exists():
		with open(pyproject, "rb") as f:
			data = tomllib.load(f)
		return AnalyzerConfig(**data.get("tool", {}).get("godeps", {}))

	return AnalyzerConfig()
