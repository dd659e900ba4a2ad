"""One full analysis run: extract -> merge types -> build graph -> resolve usage."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from .config import AnalyzerConfig
from .errors import MalformedSource
from .extract import extract_file
from .graph import build_graph
from .layout import package_path_resolver
from .model import AnalysisResult, FileInfo, StructInfo
from .registry import build_registries
from .resolve import resolve_all
from .syntax import SourceFile

logger = logging.getLogger(__name__)


def _extract_one(item: Tuple[str, SourceFile]) -> Tuple[str, Union[FileInfo, MalformedSource]]:
	file_id, source = item
	try:
		return file_id, extract_file(source)
	except MalformedSource as exc:
		return file_id, exc


def analyze(
	sources: Iterable[Tuple[str, SourceFile]],
	package_path_of: Callable[[str], str],
	config: Optional[AnalyzerConfig] = None,
) -> AnalysisResult:
	"""Analyze ``(file_id, SourceFile)`` pairs into a dependency graph and file summaries.

	*package_path_of* maps a file id to the project-relative path of its
	package. Extraction runs on a thread pool; everything after it is a
	sequential reduction over the collected results, in input order.
	"""
	config = config or AnalyzerConfig()
	items = list(sources)

	with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
		extracted = list(executor.map(_extract_one, items))

	files: Dict[str, FileInfo] = {}
	file_packages: Dict[str, str] = {}
	skipped: Dict[str, str] = {}
	for file_id, outcome in extracted:
		if isinstance(outcome, MalformedSource):
			if config.on_malformed == "raise":
				raise MalformedSource(f"{file_id}: {outcome}") from outcome
			logger.warning("Skipping %s: %s", file_id, outcome)
			skipped[file_id] = str(outcome)
			continue
		files[file_id] = outcome
		file_packages[file_id] = package_path_of(file_id)

	structs_by_package: Dict[str, List[List[StructInfo]]] = {}
	for file_id, info in files.items():
		structs_by_package.setdefault(file_packages[file_id], []).append(info.structs)
	registries = build_registries(structs_by_package, config.conflict_policy)

	graph = build_graph((file_id, file_packages[file_id], info) for file_id, info in files.items())

	resolved, unresolved = resolve_all(files, registries)

	diagnostics = []
	for registry in registries.values():
		for conflict in registry.diagnostics:
			logger.warning("Conflicting declaration in %s: %s", conflict.package_path, conflict.detail)
		diagnostics.extend(registry.diagnostics)
	for ref in unresolved:
		logger.debug("Dropped %s.%s used in %s (%s)", ref.package_path, ref.subject, ref.file_id, ref.reason)
	diagnostics.extend(unresolved)

	logger.info(
		"Analyzed %d files in %d packages (%d skipped, %d external imports)",
		len(files),
		len(graph.nodes),
		len(skipped),
		len(graph.external_packages()),
	)

	return AnalysisResult(
		graph=graph,
		files=resolved,
		file_packages=file_packages,
		structs={pkg: registry.structs() for pkg, registry in registries.items()},
		diagnostics=diagnostics,
		skipped=skipped,
	)


def analyze_tree(
	root: str,
	sources: Iterable[Tuple[str, SourceFile]],
	config: Optional[AnalyzerConfig] = None,
) -> AnalysisResult:
	"""Like ``analyze`` for sources keyed by their file path under *root*.

	Package paths are the directories relative to *root*, prefixed with
	``config.module_path`` or, when that is empty, the module path in
	``root/go.mod``.
	"""
	config = config or AnalyzerConfig()
	package_path_of = package_path_resolver(root, config.module_path or None)
	return analyze(sources, package_path_of, config)
