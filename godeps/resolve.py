from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Tuple

from .errors import UnresolvedReference
from .model import FileInfo, StructInfo
from .registry import TypeRegistry


def resolve_used_structs(
	info: FileInfo,
	registries: Mapping[str, TypeRegistry],
	file_id: Optional[str] = None,
) -> Tuple[FileInfo, List[UnresolvedReference]]:
	"""Replace a file's imported type references with full struct definitions.

	Only packages present in *registries* (the internal ones) can resolve a
	reference. References into external packages, and names an internal
	package does not define as a struct, are dropped and returned as
	UnresolvedReference diagnostics for the caller to report. The input
	FileInfo is left unchanged.
	"""
	used: List[StructInfo] = []
	unresolved: List[UnresolvedReference] = []
	for ref in info.imported_type_refs:
		registry = registries.get(ref.package_path)
		struct = registry.get(ref.name) if registry is not None else None
		if struct is None:
			unresolved.append(
				UnresolvedReference(
					package_path=ref.package_path,
					subject=ref.name,
					reason="external_package" if registry is None else "unknown_type",
					file_id=file_id,
				)
			)
			continue
		resolved = struct.model_copy(deep=True)
		resolved.package_path = ref.package_path
		used.append(resolved)

	return info.model_copy(update={"used_imported_structs": used}), unresolved


def resolve_all(
	files: Mapping[str, FileInfo],
	registries: Mapping[str, TypeRegistry],
) -> Tuple[Dict[str, FileInfo], List[UnresolvedReference]]:
	resolved: Dict[str, FileInfo] = {}
	unresolved: List[UnresolvedReference] = []
	for file_id, info in files.items():
		resolved[file_id], dropped = resolve_used_structs(info, registries, file_id)
		unresolved.extend(dropped)
	return resolved, unresolved
