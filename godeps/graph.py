from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Set, Tuple

from .model import DependencyGraph, FileInfo, Node

logger = logging.getLogger(__name__)


class GraphBuilder:
	"""Fold per-file facts into one Node per package path."""

	def __init__(self) -> None:
		self.graph = DependencyGraph()

	def add_file(self, file_id: str, pkg_path: str, info: FileInfo) -> Node:
		node = self.graph.nodes.get(pkg_path)
		if node is None:
			node = Node(pkg_path=pkg_path, name=info.package_name)
			self.graph.nodes[pkg_path] = node
			logger.debug("New package node %s (%s)", pkg_path, info.package_name)
		elif node.name != info.package_name:
			# e.g. an external foo_test package next to foo
			logger.debug("%s declares package %s inside %s (%s)", file_id, info.package_name, pkg_path, node.name)

		node.files.add(file_id)
		node.functions.update(info.exported_functions())
		node.depends_on.update(imp for imp in info.imports if imp != pkg_path)
		return node

	def build(self) -> DependencyGraph:
		return self.graph


def build_graph(entries: Iterable[Tuple[str, str, FileInfo]]) -> DependencyGraph:
	"""Build the dependency graph from ``(file_id, package_path, FileInfo)`` entries."""
	builder = GraphBuilder()
	for file_id, pkg_path, info in entries:
		builder.add_file(file_id, pkg_path, info)
	return builder.build()


def find_cycles(graph: DependencyGraph) -> List[List[str]]:
	"""Return strongly-connected components of size >= 2 using Tarjan's algorithm.

	Each returned list is a sorted group of package paths that are mutually
	reachable through internal import edges, i.e. an import cycle. External
	edges never take part in a cycle. The walk keeps its own stack of
	successor iterators, so long import chains do not hit the recursion limit.
	"""
	index: Dict[str, int] = {}
	lowlink: Dict[str, int] = {}
	on_stack: Set[str] = set()
	stack: List[str] = []
	sccs: List[List[str]] = []

	def _successors(v: str) -> Iterator[str]:
		return iter([w for w in sorted(graph.nodes[v].depends_on) if w in graph.nodes])

	for root in sorted(graph.nodes):
		if root in index:
			continue
		index[root] = lowlink[root] = len(index)
		stack.append(root)
		on_stack.add(root)
		work: List[Tuple[str, Iterator[str]]] = [(root, _successors(root))]

		while work:
			v, successors = work[-1]
			advanced = False
			for w in successors:
				if w not in index:
					index[w] = lowlink[w] = len(index)
					stack.append(w)
					on_stack.add(w)
					work.append((w, _successors(w)))
					advanced = True
					break
				if w in on_stack:
					lowlink[v] = min(lowlink[v], index[w])
			if advanced:
				continue

			work.pop()
			if work:
				parent = work[-1][0]
				lowlink[parent] = min(lowlink[parent], lowlink[v])

			if lowlink[v] == index[v]:
				scc: List[str] = []
				while True:
					w = stack.pop()
					on_stack.discard(w)
					scc.append(w)
					if w == v:
						break
				if len(scc) >= 2:
					sccs.append(sorted(scc))

	return sorted(sccs)
