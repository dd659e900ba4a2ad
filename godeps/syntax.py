"""Declaration tree for parsed Go source files.

The nodes mirror the shapes of Go's ``go/ast`` package closely enough that a
parser front end can emit them directly. Only the shapes the extractor cares
about are modelled: declarations, type expressions, and the expression and
statement forms that can carry a type reference inside a function body.

Each node class lists in ``TYPE_FIELDS`` the attributes that hold a type
expression, which lets visitors tell ``b.Widget{}`` (a type) apart from
``b.NewWidget()`` (a value). ``VALUE_FIELDS`` marks the reverse case, such
as the length of an array type.
"""

from __future__ import annotations

from typing import ClassVar, Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel

from .errors import MalformedSource


class Node(BaseModel):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ()
	# Fields holding values even when the node itself sits in a type (array lengths).
	VALUE_FIELDS: ClassVar[Tuple[str, ...]] = ()


# Type expressions


class Ident(Node):
	name: str


class SelectorExpr(Node):
	x: Node
	sel: str


class StarExpr(Node):
	x: Node


class ParenExpr(Node):
	x: Node


class ArrayType(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("elt",)
	VALUE_FIELDS: ClassVar[Tuple[str, ...]] = ("len",)

	elt: Node
	len: Optional[Node] = None


class MapType(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("key", "value")

	key: Node
	value: Node


class ChanType(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("value",)

	value: Node
	dir: Literal["both", "send", "recv"] = "both"


class Ellipsis(Node):
	"""``...T`` in a variadic parameter, or bare ``...`` as the length of ``[...]T``."""

	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("elt",)

	elt: Optional[Node] = None


class IndexExpr(Node):
	"""Generic instantiation ``X[A, B]`` (or an index expression in a body)."""

	x: Node
	indices: List[Node] = []


class Field(Node):
	"""One entry of a field, parameter, or result list."""

	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("type",)

	names: List[str] = []
	type: Node
	tag: Optional[str] = None
	doc: Optional[str] = None


class FuncType(Node):
	params: List[Field] = []
	results: List[Field] = []


class StructType(Node):
	fields: List[Field] = []


class InterfaceType(Node):
	methods: List[Field] = []


# Expressions and statements that may carry type references


class BasicLit(Node):
	value: str


class CompositeLit(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("type",)

	type: Optional[Node] = None
	elts: List[Node] = []


class KeyValueExpr(Node):
	key: Node
	value: Node


class TypeAssertExpr(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("type",)

	x: Node
	type: Optional[Node] = None


class CallExpr(Node):
	fun: Node
	args: List[Node] = []


class UnaryExpr(Node):
	op: str
	x: Node


class BinaryExpr(Node):
	op: str
	x: Node
	y: Node


class FuncLit(Node):
	type: FuncType
	body: List[Node] = []


class ExprStmt(Node):
	x: Node


class AssignStmt(Node):
	lhs: List[Node] = []
	rhs: List[Node] = []
	tok: str = "="


class ReturnStmt(Node):
	results: List[Node] = []


class BlockStmt(Node):
	stmts: List[Node] = []


class DeclStmt(Node):
	decl: Node


class IncDecStmt(Node):
	x: Node
	tok: Literal["++", "--"] = "++"


class SendStmt(Node):
	chan: Node
	value: Node


class GoStmt(Node):
	call: Node


class DeferStmt(Node):
	call: Node


class LabeledStmt(Node):
	label: str
	stmt: Node


class BranchStmt(Node):
	tok: Literal["break", "continue", "goto", "fallthrough"]
	label: Optional[str] = None


class IfStmt(Node):
	init: Optional[Node] = None
	cond: Node
	body: List[Node] = []
	else_: Optional[Node] = None


class ForStmt(Node):
	init: Optional[Node] = None
	cond: Optional[Node] = None
	post: Optional[Node] = None
	body: List[Node] = []


class RangeStmt(Node):
	key: Optional[Node] = None
	value: Optional[Node] = None
	tok: str = ":="
	x: Node
	body: List[Node] = []


class CaseClause(Node):
	"""One ``case``/``default`` arm; ``list`` is empty for ``default``.

	Inside a TypeSwitchStmt the ``list`` entries are types, not values.
	"""

	list: List[Node] = []
	body: List[Node] = []


class SwitchStmt(Node):
	init: Optional[Node] = None
	tag: Optional[Node] = None
	body: List[CaseClause] = []


class TypeSwitchStmt(Node):
	"""``switch v := x.(type) { ... }``; ``assign`` holds the ``x.(type)`` statement."""

	init: Optional[Node] = None
	assign: Node
	body: List[CaseClause] = []


class CommClause(Node):
	"""One ``select`` arm; ``comm`` is None for ``default``."""

	comm: Optional[Node] = None
	body: List[Node] = []


class SelectStmt(Node):
	body: List[CommClause] = []


# Declarations


class ImportSpec(Node):
	path: str
	name: Optional[str] = None


class TypeSpec(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("type",)

	name: str
	type: Node
	type_params: List[Field] = []
	doc: Optional[str] = None


class ValueSpec(Node):
	TYPE_FIELDS: ClassVar[Tuple[str, ...]] = ("type",)

	names: List[str]
	type: Optional[Node] = None
	values: List[Node] = []


class GenDecl(Node):
	tok: Literal["import", "type", "var", "const"]
	specs: List[Node] = []
	doc: Optional[str] = None


class FuncDecl(Node):
	name: str
	type: FuncType
	recv: Optional[Field] = None
	body: List[Node] = []
	doc: Optional[str] = None


class SourceFile(Node):
	"""One parsed file: its package clause and top-level declarations."""

	package: Optional[str] = None
	decls: List[Node] = []


def iter_child_nodes(node: Node) -> Iterator[Tuple[str, Node]]:
	"""Yield ``(field_name, child)`` for every direct child node of *node*."""
	for name in type(node).model_fields:
		value = getattr(node, name)
		if isinstance(value, Node):
			yield name, value
		elif isinstance(value, list):
			for item in value:
				if isinstance(item, Node):
					yield name, item


class NodeVisitor:
	"""Walks a declaration tree, dispatching to ``visit_<ClassName>`` methods."""

	def visit(self, node: Node) -> None:
		method = getattr(self, "visit_" + type(node).__name__, self.generic_visit)
		method(node)

	def generic_visit(self, node: Node) -> None:
		for _, child in iter_child_nodes(node):
			self.visit(child)


def _field_list(fields: List[Field], sep: str) -> str:
	parts: List[str] = []
	for f in fields:
		typ = expr_string(f.type)
		parts.append(f"{', '.join(f.names)} {typ}" if f.names else typ)
	return sep.join(parts)


def _method_list(methods: List[Field]) -> str:
	parts: List[str] = []
	for m in methods:
		if m.names and isinstance(m.type, FuncType):
			# Close() error, not Close func() error
			parts.append(m.names[0] + _signature(m.type))
		else:
			parts.append(expr_string(m.type))
	return "; ".join(parts)


def _signature(func: FuncType) -> str:
	return f"({_field_list(func.params, ', ')}){_results(func.results)}"


def _results(fields: List[Field]) -> str:
	if not fields:
		return ""
	if len(fields) == 1 and not fields[0].names:
		return " " + expr_string(fields[0].type)
	return f" ({_field_list(fields, ', ')})"


def expr_string(node: Node) -> str:
	"""Render a type (or constant) expression the way Go source spells it."""
	if isinstance(node, Ident):
		return node.name
	if isinstance(node, SelectorExpr):
		return f"{expr_string(node.x)}.{node.sel}"
	if isinstance(node, StarExpr):
		return "*" + expr_string(node.x)
	if isinstance(node, ParenExpr):
		return f"({expr_string(node.x)})"
	if isinstance(node, ArrayType):
		size = expr_string(node.len) if node.len is not None else ""
		return f"[{size}]{expr_string(node.elt)}"
	if isinstance(node, MapType):
		return f"map[{expr_string(node.key)}]{expr_string(node.value)}"
	if isinstance(node, ChanType):
		prefix = {"both": "chan ", "send": "chan<- ", "recv": "<-chan "}[node.dir]
		return prefix + expr_string(node.value)
	if isinstance(node, Ellipsis):
		return "..." + (expr_string(node.elt) if node.elt is not None else "")
	if isinstance(node, IndexExpr):
		return f"{expr_string(node.x)}[{', '.join(expr_string(i) for i in node.indices)}]"
	if isinstance(node, FuncType):
		return "func" + _signature(node)
	if isinstance(node, StructType):
		return "struct{" + _field_list(node.fields, "; ") + "}"
	if isinstance(node, InterfaceType):
		return "interface{" + _method_list(node.methods) + "}"
	# Value expressions, e.g. array lengths such as [maxLen + 1]byte
	if isinstance(node, BasicLit):
		return node.value
	if isinstance(node, UnaryExpr):
		return node.op + expr_string(node.x)
	if isinstance(node, BinaryExpr):
		return f"{expr_string(node.x)} {node.op} {expr_string(node.y)}"
	if isinstance(node, CallExpr):
		return f"{expr_string(node.fun)}({', '.join(expr_string(a) for a in node.args)})"
	if isinstance(node, KeyValueExpr):
		return f"{expr_string(node.key)}: {expr_string(node.value)}"
	if isinstance(node, CompositeLit):
		typ = expr_string(node.type) if node.type is not None else ""
		return f"{typ}{{{', '.join(expr_string(e) for e in node.elts)}}}"
	if isinstance(node, TypeAssertExpr):
		typ = expr_string(node.type) if node.type is not None else "type"
		return f"{expr_string(node.x)}.({typ})"
	if isinstance(node, FuncLit):
		return "func" + _signature(node.type) + " {...}"
	# Statements and declarations never occur inside an expression.
	raise MalformedSource(f"{type(node).__name__} is not an expression")
