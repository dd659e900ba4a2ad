"""Structural summaries and package dependency graphs for parsed Go sources.

Modules:
- syntax.py: Declaration tree produced by a Go parser front end.
- extract.py: Per-file summaries (package, imports, functions, structs, imported type references).
- registry.py: Per-package struct registry merging declarations and methods across files.
- graph.py: Package dependency graph construction and cycle detection.
- resolve.py: Attaches full struct definitions to a file's imported type references.
- pipeline.py: Runs all of the above over a project.
- layout.py: File path to package path helpers.
- config.py, errors.py, model.py: Settings, exceptions/diagnostics, data structures.
"""

from .config import AnalyzerConfig, load_config
from .errors import AnalyzerError, ConflictingDeclaration, Diagnostic, MalformedSource, UnresolvedReference
from .extract import extract_file
from .graph import GraphBuilder, build_graph, find_cycles
from .model import (
	AnalysisResult,
	DependencyEdge,
	DependencyGraph,
	FileInfo,
	ImportedTypeRef,
	Node,
	StructField,
	StructInfo,
	StructMethod,
)
from .pipeline import analyze, analyze_tree
from .registry import TypeRegistry, build_registries
from .resolve import resolve_all, resolve_used_structs

__all__ = [
	"AnalysisResult",
	"AnalyzerConfig",
	"AnalyzerError",
	"ConflictingDeclaration",
	"DependencyEdge",
	"DependencyGraph",
	"Diagnostic",
	"FileInfo",
	"GraphBuilder",
	"ImportedTypeRef",
	"MalformedSource",
	"Node",
	"StructField",
	"StructInfo",
	"StructMethod",
	"TypeRegistry",
	"UnresolvedReference",
	"analyze",
	"analyze_tree",
	"build_graph",
	"build_registries",
	"extract_file",
	"find_cycles",
	"load_config",
	"resolve_all",
	"resolve_used_structs",
]
