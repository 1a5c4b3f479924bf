"""
Layout text reconstruction modules.
"""

from .document import DocumentRecord, PageRecord, TokenRecord, TextSegment, Vertex, parse_document
from .extractor import TokenExtractor, Word, PageGeometry, ExtractionResult
from .clustering import Line, LineClusterer, OverlapClusterer, FixedThresholdClusterer, create_clusterer
from .slots import SlotModel, compute_slot_model
from .renderer import (
    LineRenderer, RenderContext, GridSpacing, WordGapSpacing,
    FixedGapPolicy, StatisticalGapPolicy, create_spacing, create_gap_policy
)
from .assembler import LayoutAssembler, PageResult, DocumentResult
from .diagnostics import DiagnosticSink, NullSink, LoggingSink, CollectingSink, TeeSink
from .io import list_json_files, load_document, load_json, save_json, save_text, ensure_dir

__all__ = [
    # Records
    "DocumentRecord", "PageRecord", "TokenRecord", "TextSegment", "Vertex", "parse_document",
    # Extraction
    "TokenExtractor", "Word", "PageGeometry", "ExtractionResult",
    # Clustering
    "Line", "LineClusterer", "OverlapClusterer", "FixedThresholdClusterer", "create_clusterer",
    # Slots
    "SlotModel", "compute_slot_model",
    # Rendering
    "LineRenderer", "RenderContext", "GridSpacing", "WordGapSpacing",
    "FixedGapPolicy", "StatisticalGapPolicy", "create_spacing", "create_gap_policy",
    # Assembly
    "LayoutAssembler", "PageResult", "DocumentResult",
    # Diagnostics
    "DiagnosticSink", "NullSink", "LoggingSink", "CollectingSink", "TeeSink",
    # IO
    "list_json_files", "load_document", "load_json", "save_json", "save_text", "ensure_dir",
]
