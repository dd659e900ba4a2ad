import logging

import pytest

from godeps.config import AnalyzerConfig
from godeps.errors import ConflictingDeclaration, MalformedSource, UnresolvedReference
from godeps.pipeline import analyze, analyze_tree
from godeps.syntax import (
	CompositeLit,
	ExprStmt,
	Field,
	FuncDecl,
	FuncType,
	GenDecl,
	Ident,
	ImportSpec,
	SelectorExpr,
	SourceFile,
	StarExpr,
	StructType,
	TypeSpec,
)

MODULE = "example.com/proj"


def _package_of(file_id):
	return MODULE + "/" + file_id.rsplit("/", 1)[0]


def _imports(*paths):
	return GenDecl(tok="import", specs=[ImportSpec(path=p) for p in paths])


def _struct(name, **fields):
	body = StructType(fields=[Field(names=[n], type=t) for n, t in fields.items()])
	return GenDecl(tok="type", specs=[TypeSpec(name=name, type=body)])


def _method(recv, name, result=None):
	results = [Field(type=Ident(name=result))] if result else []
	return FuncDecl(name=name, recv=Field(names=["r"], type=recv), type=FuncType(results=results))


def _project():
	return [
		(
			"pkg/a/a.go",
			SourceFile(
				package="a",
				decls=[
					_imports(MODULE + "/pkg/b", "fmt"),
					_struct("Foo", X=Ident(name="int"), W=StarExpr(x=SelectorExpr(x=Ident(name="b"), sel="Widget"))),
					_method(Ident(name="Foo"), "Bar", "string"),
					FuncDecl(name="NewFoo", type=FuncType()),
				],
			),
		),
		(
			"pkg/a/b.go",
			SourceFile(package="a", decls=[_method(StarExpr(x=Ident(name="Foo")), "Baz", "int")]),
		),
		(
			"pkg/b/b.go",
			SourceFile(
				package="b",
				decls=[
					_imports(MODULE + "/pkg/a"),
					_struct("Widget", ID=Ident(name="int")),
					_method(Ident(name="Widget"), "Name", "string"),
					FuncDecl(
						name="Use",
						type=FuncType(),
						body=[ExprStmt(x=CompositeLit(type=SelectorExpr(x=Ident(name="a"), sel="Foo")))],
					),
				],
			),
		),
		(
			"pkg/c/c.go",
			SourceFile(
				package="c",
				decls=[
					_imports("github.com/other/b"),
					_struct("Holder", W=SelectorExpr(x=Ident(name="b"), sel="Widget")),
				],
			),
		),
	]


def test_analyze_project():
	result = analyze(_project(), _package_of)
	graph = result.graph

	assert set(graph.nodes) == {MODULE + "/pkg/a", MODULE + "/pkg/b", MODULE + "/pkg/c"}
	node_a = graph.get(MODULE + "/pkg/a")
	assert node_a.files == {"pkg/a/a.go", "pkg/a/b.go"}
	assert node_a.functions == {"NewFoo"}
	assert node_a.depends_on == {MODULE + "/pkg/b", "fmt"}
	assert graph.find_cycles() == [[MODULE + "/pkg/a", MODULE + "/pkg/b"]]

	[foo] = result.structs[MODULE + "/pkg/a"]
	assert foo.field_names() == ["X", "W"]
	assert set(foo.methods) == {"Bar", "Baz"}

	# a.go uses b.Widget, b.go uses a.Foo with its methods from both files
	[widget] = result.files["pkg/a/a.go"].used_imported_structs
	assert widget.name == "Widget"
	assert list(widget.methods) == ["Name"]
	[used_foo] = result.files["pkg/b/b.go"].used_imported_structs
	assert set(used_foo.methods) == {"Bar", "Baz"}

	# github.com/other/b is external: dropped, not stubbed
	assert result.files["pkg/c/c.go"].used_imported_structs == []
	unresolved = [d for d in result.diagnostics if isinstance(d, UnresolvedReference)]
	assert [(d.package_path, d.subject, d.file_id) for d in unresolved] == [("github.com/other/b", "Widget", "pkg/c/c.go")]

	assert result.file_packages["pkg/c/c.go"] == MODULE + "/pkg/c"
	assert result.skipped == {}


def test_malformed_file_is_skipped_and_logged(caplog):
	sources = _project() + [("pkg/d/d.go", SourceFile(package=None))]
	with caplog.at_level(logging.WARNING, logger="godeps.pipeline"):
		result = analyze(sources, _package_of)
	assert "pkg/d/d.go" in result.skipped
	assert MODULE + "/pkg/d" not in result.graph
	assert "Skipping pkg/d/d.go" in caplog.text


def test_malformed_file_raises_when_configured():
	sources = [("pkg/d/d.go", SourceFile(package=None))]
	with pytest.raises(MalformedSource, match="pkg/d/d.go"):
		analyze(sources, _package_of, AnalyzerConfig(on_malformed="raise"))


def test_conflicts_are_reported_not_raised(caplog):
	sources = [
		("p/x.go", SourceFile(package="p", decls=[_method(Ident(name="T"), "Do", "int")])),
		("p/y.go", SourceFile(package="p", decls=[_method(Ident(name="T"), "Do", "string")])),
	]
	with caplog.at_level(logging.WARNING, logger="godeps.pipeline"):
		result = analyze(sources, _package_of, AnalyzerConfig(max_workers=2))
	[t] = result.structs[MODULE + "/p"]
	assert t.methods["Do"].return_types == ["string"]
	[conflict] = [d for d in result.diagnostics if isinstance(d, ConflictingDeclaration)]
	assert conflict.subject == "T.Do"
	assert "Conflicting declaration" in caplog.text


def test_result_is_independent_of_input_order():
	forward = analyze(_project(), _package_of)
	backward = analyze(list(reversed(_project())), _package_of)
	assert forward.graph.model_dump() == backward.graph.model_dump()
	for pkg, structs in forward.structs.items():
		other = {s.name: s for s in backward.structs[pkg]}
		for s in structs:
			assert set(s.methods) == set(other[s.name].methods)
			assert set(s.field_names()) == set(other[s.name].field_names())


def test_analyze_tree_uses_go_mod(tmp_path):
	(tmp_path / "go.mod").write_text("module example.com/tree\n")
	root = str(tmp_path)
	sources = [
		(str(tmp_path / "cmd" / "main.go"), SourceFile(package="main", decls=[_imports("example.com/tree/lib")])),
		(str(tmp_path / "lib" / "lib.go"), SourceFile(package="lib", decls=[FuncDecl(name="Run", type=FuncType())])),
	]
	result = analyze_tree(root, sources)
	assert set(result.graph.nodes) == {"example.com/tree/cmd", "example.com/tree/lib"}
	assert result.graph.internal_dependencies("example.com/tree/cmd") == ["example.com/tree/lib"]
	assert result.graph.get("example.com/tree/lib").functions == {"Run"}

	overridden = analyze_tree(root, sources, AnalyzerConfig(module_path="x.org/y"))
	assert set(overridden.graph.nodes) == {"x.org/y/cmd", "x.org/y/lib"}
