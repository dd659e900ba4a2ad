from __future__ import annotations

import re
from typing import Dict, List, Optional, Set, Tuple

from .errors import MalformedSource
from .model import FileInfo, ImportedTypeRef, StructField, StructInfo, StructMethod
from .syntax import (
	Field,
	FuncDecl,
	GenDecl,
	Ident,
	ImportSpec,
	IndexExpr,
	Node,
	NodeVisitor,
	ParenExpr,
	SelectorExpr,
	SourceFile,
	StarExpr,
	StructType,
	TypeSpec,
	TypeSwitchStmt,
	ValueSpec,
	expr_string,
	iter_child_nodes,
)

_MAJOR_VERSION = re.compile(r"^v[0-9]+$")
_IDENT_PREFIX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*")

_SPEC_KINDS = {"import": ImportSpec, "type": TypeSpec, "var": ValueSpec, "const": ValueSpec}


def assumed_package_name(import_path: str) -> str:
	"""Qualifier a file uses for an unaliased import of *import_path*."""
	elems = import_path.rstrip("/").split("/")
	name = elems[-1]
	if _MAJOR_VERSION.match(name) and len(elems) > 1:
		name = elems[-2]
	if name.startswith("go-"):
		name = name[3:]
	match = _IDENT_PREFIX.match(name)
	return match.group(0) if match else name


def _comment(*candidates: Optional[str]) -> str:
	for text in candidates:
		if text and text.strip():
			return text.strip()
	return ""


def _type_list(fields: List[Field]) -> List[str]:
	types: List[str] = []
	for f in fields:
		typ = expr_string(f.type)
		types.extend([typ] * max(1, len(f.names)))
	return types


def _base_type_name(expr: Node) -> str:
	# *T, (T), T[P] and pkg.T all reduce to the bare identifier.
	while True:
		if isinstance(expr, (StarExpr, ParenExpr, IndexExpr)):
			expr = expr.x
		elif isinstance(expr, SelectorExpr):
			return expr.sel
		elif isinstance(expr, Ident):
			return expr.name
		else:
			raise MalformedSource(f"cannot determine type name of {type(expr).__name__}")


def _struct_fields(struct: StructType) -> List[StructField]:
	fields: List[StructField] = []
	for f in struct.fields:
		typ = expr_string(f.type)
		if f.names:
			fields.extend(StructField(name=name, type=typ) for name in f.names)
		else:
			fields.append(StructField(name=_base_type_name(f.type), type=typ))
	return fields


def _collect_imports(decls: List[Node]) -> Tuple[List[str], Dict[str, str]]:
	imports: List[str] = []
	aliases: Dict[str, str] = {}
	for decl in decls:
		if not (isinstance(decl, GenDecl) and decl.tok == "import"):
			continue
		for spec in decl.specs:
			if spec.path not in imports:
				imports.append(spec.path)
			name = spec.name if spec.name is not None else assumed_package_name(spec.path)
			if name not in ("_", "."):
				aliases[name] = spec.path
	return imports, aliases


class _ImportedTypeCollector(NodeVisitor):
	"""Collect ``alias.Type`` references that appear in type positions."""

	def __init__(self, aliases: Dict[str, str]) -> None:
		self.aliases = aliases
		self.refs: List[ImportedTypeRef] = []
		self._seen: Set[Tuple[str, str]] = set()
		self._in_type = False

	def _visit_as(self, child: Node, in_type: bool) -> None:
		saved = self._in_type
		self._in_type = in_type
		self.visit(child)
		self._in_type = saved

	def generic_visit(self, node: Node) -> None:
		for name, child in iter_child_nodes(node):
			if name in node.TYPE_FIELDS:
				self._visit_as(child, True)
			elif name in node.VALUE_FIELDS:
				self._visit_as(child, False)
			else:
				self.visit(child)

	def visit_TypeSwitchStmt(self, node: TypeSwitchStmt) -> None:
		for stmt in (node.init, node.assign):
			if stmt is not None:
				self.visit(stmt)
		for clause in node.body:
			for typ in clause.list:
				self._visit_as(typ, True)
			for stmt in clause.body:
				self._visit_as(stmt, False)

	def visit_SelectorExpr(self, node: SelectorExpr) -> None:
		if self._in_type and isinstance(node.x, Ident) and node.x.name in self.aliases:
			key = (self.aliases[node.x.name], node.sel)
			if key not in self._seen:
				self._seen.add(key)
				self.refs.append(ImportedTypeRef(package_path=key[0], name=key[1]))
		self.generic_visit(node)


class _FileExtractor:
	def __init__(self, source: SourceFile) -> None:
		self.source = source
		self.functions: List[str] = []
		self.structs: Dict[str, StructInfo] = {}

	def run(self) -> FileInfo:
		package = self.source.package
		if not package or not package.strip():
			raise MalformedSource("missing package clause")

		imports, aliases = _collect_imports(self._checked_decls())
		for decl in self.source.decls:
			if isinstance(decl, FuncDecl):
				self._add_func(decl)
			elif decl.tok == "type":
				for spec in decl.specs:
					self._add_type(spec, decl)

		collector = _ImportedTypeCollector(aliases)
		for decl in self.source.decls:
			collector.visit(decl)

		return FileInfo(
			package_name=package,
			imports=imports,
			functions=self.functions,
			structs=list(self.structs.values()),
			imported_type_refs=collector.refs,
		)

	def _checked_decls(self) -> List[Node]:
		for decl in self.source.decls:
			if isinstance(decl, FuncDecl):
				continue
			if not isinstance(decl, GenDecl):
				raise MalformedSource(f"unexpected top-level declaration {type(decl).__name__}")
			kind = _SPEC_KINDS[decl.tok]
			for spec in decl.specs:
				if not isinstance(spec, kind):
					raise MalformedSource(f"{decl.tok} declaration holds a {type(spec).__name__}")
		return self.source.decls

	def _add_type(self, spec: TypeSpec, decl: GenDecl) -> None:
		if not isinstance(spec.type, StructType):
			return
		doc = _comment(spec.doc, decl.doc if len(decl.specs) == 1 else None)
		existing = self.structs.get(spec.name)
		if existing is not None and existing.declared:
			raise MalformedSource(f"type {spec.name} redeclared")
		if existing is None:
			existing = self.structs[spec.name] = StructInfo(name=spec.name)
		existing.comment = doc
		existing.fields = _struct_fields(spec.type)
		existing.declared = True

	def _add_func(self, decl: FuncDecl) -> None:
		if decl.recv is None:
			if decl.name not in self.functions:
				self.functions.append(decl.name)
			return
		receiver = _base_type_name(decl.recv.type)
		struct = self.structs.get(receiver)
		if struct is None:
			struct = self.structs[receiver] = StructInfo(name=receiver)
		struct.methods[decl.name] = StructMethod(
			name=decl.name,
			comment=_comment(decl.doc),
			parameters=_type_list(decl.type.params),
			return_types=_type_list(decl.type.results),
		)


def extract_file(source: SourceFile) -> FileInfo:
	"""Summarise one parsed file.

	Raises MalformedSource when the file has no package clause or a
	declaration of a shape the extractor cannot read. ``used_imported_structs``
	is left empty; see ``godeps.resolve``.
	"""
	return _FileExtractor(source).run()
