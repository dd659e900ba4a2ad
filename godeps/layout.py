from __future__ import annotations

import logging
import os
import re
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_MODULE_DIRECTIVE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)


def package_path_for(root: str, file_path: str, module_path: str = "") -> str:
	"""Package path of *file_path*: its directory relative to *root*, under *module_path*."""
	rel_dir = os.path.dirname(os.path.relpath(file_path, root))
	parts = [p for p in rel_dir.split(os.sep) if p and p != "."]
	if module_path:
		parts.insert(0, module_path.rstrip("/"))
	return "/".join(parts) or "."


def read_module_path(root: str) -> str:
	go_mod = os.path.join(root, "go.mod")
	if not os.path.isfile(go_mod):
		return ""
	with open(go_mod, "r", encoding="utf-8") as fh:
		text = fh.read()
	match = _MODULE_DIRECTIVE.search(text)
	if match is None:
		logger.warning("No module directive in %s", go_mod)
		return ""
	return match.group(1)


def package_path_resolver(root: str, module_path: Optional[str] = None) -> Callable[[str], str]:
	"""Return a ``file path -> package path`` function for files under *root*.

	When *module_path* is None it is read from ``go.mod`` so that package paths
	line up with the import paths other files use.
	"""
	root = os.path.abspath(root)
	if module_path is None:
		module_path = read_module_path(root)
	logger.debug("Package paths under %s use module path %r", root, module_path)

	def resolve(file_path: str) -> str:
		return package_path_for(root, os.path.abspath(file_path), module_path)

	return resolve
