from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import ConflictingDeclaration
from .model import StructInfo


class TypeRegistry:
	"""Struct definitions of one package, merged across its files.

	A type's declaration and its methods may live in different files, so
	records for the same name are unioned: fields by field name, methods by
	method name. When the same field or method is seen again with a
	different type or signature, ``conflict_policy`` picks the survivor
	("last" keeps the later one, "first" the earlier one) and a
	ConflictingDeclaration is appended to ``diagnostics``.
	"""

	def __init__(self, package_path: str, conflict_policy: str = "last") -> None:
		if conflict_policy not in ("last", "first"):
			raise ValueError(f"unknown conflict policy: {conflict_policy!r}")
		self.package_path = package_path
		self.conflict_policy = conflict_policy
		self.diagnostics: List[ConflictingDeclaration] = []
		self._structs: Dict[str, StructInfo] = {}

	def __contains__(self, name: object) -> bool:
		return name in self._structs

	def __iter__(self) -> Iterator[StructInfo]:
		return iter(self._structs.values())

	def __len__(self) -> int:
		return len(self._structs)

	def get(self, name: str) -> Optional[StructInfo]:
		return self._structs.get(name)

	def structs(self) -> List[StructInfo]:
		return list(self._structs.values())

	def add(self, struct: StructInfo) -> None:
		existing = self._structs.get(struct.name)
		if existing is None:
			self._structs[struct.name] = struct.model_copy(deep=True)
			return

		if not existing.comment and struct.comment:
			existing.comment = struct.comment
		existing.declared = existing.declared or struct.declared
		self._merge_fields(existing, struct)
		self._merge_methods(existing, struct)

	def add_all(self, structs: Iterable[StructInfo]) -> None:
		for struct in structs:
			self.add(struct)

	def _conflict(self, kind: str, subject: str, old: str, new: str) -> None:
		kept, discarded = (new, old) if self.conflict_policy == "last" else (old, new)
		self.diagnostics.append(
			ConflictingDeclaration(
				package_path=self.package_path,
				subject=subject,
				kind=kind,
				kept=kept,
				discarded=discarded,
				detail=f"{kind} {subject} declared as {old!r} and {new!r}",
			)
		)

	def _merge_fields(self, existing: StructInfo, incoming: StructInfo) -> None:
		for field in incoming.fields:
			current = existing.get_field(field.name)
			if current is None:
				existing.fields.append(field.model_copy())
			elif current.type != field.type:
				self._conflict("field", f"{existing.name}.{field.name}", current.type, field.type)
				if self.conflict_policy == "last":
					current.type = field.type

	def _merge_methods(self, existing: StructInfo, incoming: StructInfo) -> None:
		for name, method in incoming.methods.items():
			current = existing.methods.get(name)
			if current is None:
				existing.methods[name] = method.model_copy(deep=True)
				continue
			if current == method:
				continue
			if current.signature() != method.signature():
				self._conflict(
					"method",
					f"{existing.name}.{name}",
					_format_signature(current.signature()),
					_format_signature(method.signature()),
				)
			if self.conflict_policy == "last":
				existing.methods[name] = method.model_copy(deep=True)


def _format_signature(signature) -> str:
	params, results = signature
	rendered = f"({', '.join(params)})"
	if len(results) == 1:
		return f"{rendered} {results[0]}"
	if results:
		return f"{rendered} ({', '.join(results)})"
	return rendered


def build_registries(
	structs_by_package: Mapping[str, Iterable[Iterable[StructInfo]]],
	conflict_policy: str = "last",
) -> Dict[str, TypeRegistry]:
	"""Build one registry per package from its files' struct lists, in file order."""
	registries: Dict[str, TypeRegistry] = {}
	for pkg_path, per_file in structs_by_package.items():
		registry = TypeRegistry(pkg_path, conflict_policy)
		for structs in per_file:
			registry.add_all(structs)
		registries[pkg_path] = registry
	return registries
