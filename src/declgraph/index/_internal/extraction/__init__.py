"""Per-file extraction: declarations, references, imports, manifests."""

from declgraph.index._internal.extraction.extractor import DeclarationExtractor, extract
from declgraph.index._internal.extraction.manifest import ManifestInfo, read_manifest

__all__ = [
    "DeclarationExtractor",
    "ManifestInfo",
    "extract",
    "read_manifest",
]
