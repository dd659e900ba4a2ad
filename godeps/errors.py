from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel


class AnalyzerError(Exception):
	"""Base exception for analysis errors."""


class MalformedSource(AnalyzerError):
	"""A source file cannot be summarised (missing package clause, bad declaration shape)."""


class Diagnostic(BaseModel):
	"""A non-fatal finding reported alongside the analysis result."""

	package_path: str
	subject: str
	detail: str = ""


class ConflictingDeclaration(Diagnostic):
	"""A field or method of one type was declared twice with different types."""

	kind: Literal["field", "method"]
	kept: str
	discarded: str


class UnresolvedReference(Diagnostic):
	"""A used imported type that could not be matched to an internal struct."""

	reason: Literal["external_package", "unknown_type"]
	file_id: Optional[str] = None
