from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel

from .errors import ConflictingDeclaration, Diagnostic, UnresolvedReference


def is_exported(name: str) -> bool:
	"""Go visibility rule: an identifier is exported when it starts with an upper-case letter."""
	return bool(name) and name[0].isupper()


class StructField(BaseModel):
	name: str
	type: str


class StructMethod(BaseModel):
	name: str
	comment: str = ""
	parameters: List[str] = []
	return_types: List[str] = []

	def signature(self) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
		return tuple(self.parameters), tuple(self.return_types)


class StructInfo(BaseModel):
	name: str
	comment: str = ""
	fields: List[StructField] = []
	methods: Dict[str, StructMethod] = {}
	# False while only methods have been seen for this name.
	declared: bool = False
	package_path: Optional[str] = None

	def field_names(self) -> List[str]:
		return [f.name for f in self.fields]

	def get_field(self, name: str) -> Optional[StructField]:
		for f in self.fields:
			if f.name == name:
				return f
		return None


class ImportedTypeRef(BaseModel):
	package_path: str
	name: str


class FileInfo(BaseModel):
	package_name: str
	imports: List[str] = []
	functions: List[str] = []
	structs: List[StructInfo] = []
	imported_type_refs: List[ImportedTypeRef] = []
	used_imported_structs: List[StructInfo] = []

	def exported_functions(self) -> List[str]:
		return [name for name in self.functions if is_exported(name)]


class Node(BaseModel):
	pkg_path: str
	name: str = ""
	functions: Set[str] = set()
	depends_on: Set[str] = set()
	files: Set[str] = set()


class DependencyEdge(BaseModel):
	from_package: str
	to_package: str
	internal: bool


class DependencyGraph(BaseModel):
	nodes: Dict[str, Node] = {}

	def __contains__(self, pkg_path: object) -> bool:
		return pkg_path in self.nodes

	def get(self, pkg_path: str) -> Optional[Node]:
		return self.nodes.get(pkg_path)

	def is_internal(self, pkg_path: str) -> bool:
		return pkg_path in self.nodes

	def internal_dependencies(self, pkg_path: str) -> List[str]:
		return sorted(p for p in self.nodes[pkg_path].depends_on if p in self.nodes)

	def external_dependencies(self, pkg_path: str) -> List[str]:
		return sorted(p for p in self.nodes[pkg_path].depends_on if p not in self.nodes)

	def external_packages(self) -> List[str]:
		external: Set[str] = set()
		for node in self.nodes.values():
			external.update(p for p in node.depends_on if p not in self.nodes)
		return sorted(external)

	def dependents(self, pkg_path: str) -> List[str]:
		"""Internal packages that import *pkg_path*."""
		return sorted(path for path, node in self.nodes.items() if pkg_path in node.depends_on)

	def edges(self) -> List[DependencyEdge]:
		result: List[DependencyEdge] = []
		for path in sorted(self.nodes):
			for dep in sorted(self.nodes[path].depends_on):
				result.append(DependencyEdge(from_package=path, to_package=dep, internal=dep in self.nodes))
		return result

	def find_cycles(self) -> List[List[str]]:
		from .graph import find_cycles

		return find_cycles(self)


class AnalysisResult(BaseModel):
	graph: DependencyGraph
	files: Dict[str, FileInfo] = {}
	file_packages: Dict[str, str] = {}
	structs: Dict[str, List[StructInfo]] = {}
	diagnostics: List[Union[ConflictingDeclaration, UnresolvedReference, Diagnostic]] = []
	skipped: Dict[str, str] = {}
