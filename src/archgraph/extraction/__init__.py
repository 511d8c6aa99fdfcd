"""Extraction adapters: source files in, structural facts out.

In-process adapters (Python via ``ast``, JavaScript via tree-sitter) share
the FactExtractor contract. External diagram tools (pyreverse, goplantuml,
go-callvis) emit artifacts directly and live in ``external``.
"""

from ..exceptions import ConfigurationError
from .base import FactExtractor, ResolutionRules
from .external import EXTERNAL_TOOLS, ExternalDiagramTool, GeneratedArtifact, ToolRequest, get_tool
from .facts import (
    DEFAULT_EXPORT,
    NAMESPACE_IMPORT,
    Accessor,
    ExportedSymbolFact,
    ExtractionWarning,
    Fact,
    FactKind,
    FileFacts,
    ImportFact,
    MemberFact,
    MemberKind,
    TypeDeclarationFact,
    fact_set_digest,
)
from .javascript_adapter import JavaScriptFactExtractor
from .python_adapter import PythonFactExtractor
from .scanner import ExtractionResult, SourceScanner, discover_files

__all__ = [
    "FactExtractor",
    "ResolutionRules",
    "PythonFactExtractor",
    "JavaScriptFactExtractor",
    "get_extractor",
    "EXTRACTORS",
    "EXTERNAL_TOOLS",
    "ExternalDiagramTool",
    "GeneratedArtifact",
    "ToolRequest",
    "get_tool",
    "DEFAULT_EXPORT",
    "NAMESPACE_IMPORT",
    "Accessor",
    "ExportedSymbolFact",
    "ExtractionWarning",
    "Fact",
    "FactKind",
    "FileFacts",
    "ImportFact",
    "MemberFact",
    "MemberKind",
    "TypeDeclarationFact",
    "fact_set_digest",
    "ExtractionResult",
    "SourceScanner",
    "discover_files",
]

EXTRACTORS = {
    PythonFactExtractor.language: PythonFactExtractor,
    JavaScriptFactExtractor.language: JavaScriptFactExtractor,
}


def get_extractor(language: str) -> FactExtractor:
    """Adapter instance for a language name ("python" or "javascript")."""
    factory = EXTRACTORS.get(language)
    if factory is None:
        raise ConfigurationError(
            f"No extractor for language: {language}",
            details={"supported": ", ".join(sorted(EXTRACTORS))},
        )
    return factory()
