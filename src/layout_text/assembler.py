"""
Page assembler for layout text reconstruction.

Provides:
- Page and document result models
- Pipeline orchestration (extract, cluster, slot, render) per page
- Page joining with separators and empty markers
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Dict, Any, Union, Iterable

from .clustering import LineClusterer, create_clusterer
from .diagnostics import DiagnosticSink, NullSink
from .document import DocumentRecord, PageRecord
from .extractor import TokenExtractor
from .renderer import LineRenderer, RenderContext, create_spacing, create_gap_policy
from .slots import compute_slot_model

logger = logging.getLogger(__name__)

EMPTY_PAGE_PLACEHOLDER = "[empty page]"
PAGE_SEPARATOR = "\n---\n"
NO_PAGES_MESSAGE = "No pages found in the document."


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PageResult:
    """Rendered output of one page."""
    page_number: int
    lines: List[str] = field(default_factory=list)
    word_count: int = 0
    line_count: int = 0
    global_slot: Optional[float] = None
    row_height: Optional[float] = None
    is_empty: bool = False

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "word_count": self.word_count,
            "line_count": self.line_count,
            "global_slot": self.global_slot,
            "row_height": self.row_height,
            "is_empty": self.is_empty,
            "text": self.text
        }


@dataclass
class DocumentResult:
    """Rendered output of a document."""
    source_file: str = ""
    pages: List[PageResult] = field(default_factory=list)
    page_separator: str = PAGE_SEPARATOR
    no_pages_message: str = NO_PAGES_MESSAGE
    processing_time_seconds: float = 0.0

    @property
    def has_pages(self) -> bool:
        return bool(self.pages)

    @property
    def text(self) -> str:
        if not self.pages:
            return self.no_pages_message
        return self.page_separator.join(p.text for p in self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_file": self.source_file,
            "pages": [p.to_dict() for p in self.pages],
            "processing_time_seconds": round(self.processing_time_seconds, 4)
        }


# ============================================================================
# Layout Assembler
# ============================================================================

class LayoutAssembler:
    """
    Orchestrates layout reconstruction.

    Coordinates:
    - Token extraction
    - Line clustering
    - Slot estimation
    - Line rendering
    - Page joining
    """

    def __init__(
        self,
        token_source: str = "tokens",
        clustering: str = "overlap",
        overlap_threshold: float = 65.0,
        row_tolerance: float = 0.015,
        significance_ratio: float = 0.30,
        slot_scope: str = "global",
        spacing: str = "grid",
        gap_policy: str = "fixed",
        gap_multiplier: float = 1.5,
        gap_std_factor: float = 1.0,
        max_spaces: int = 25,
        empty_page_placeholder: str = EMPTY_PAGE_PLACEHOLDER,
        page_separator: str = PAGE_SEPARATOR,
        no_pages_message: str = NO_PAGES_MESSAGE,
        debug_mode: bool = False,
        output_dir: Optional[Union[str, Path]] = None,
        debug_image_max_side: int = 1600,
        diagnostics: Optional[DiagnosticSink] = None
    ):
        self.token_source = token_source
        self.clustering = clustering
        self.overlap_threshold = overlap_threshold
        self.row_tolerance = row_tolerance
        self.significance_ratio = significance_ratio
        self.slot_scope = slot_scope
        self.spacing = spacing
        self.gap_policy = gap_policy
        self.gap_multiplier = gap_multiplier
        self.gap_std_factor = gap_std_factor
        self.max_spaces = max_spaces
        self.empty_page_placeholder = empty_page_placeholder
        self.page_separator = page_separator
        self.no_pages_message = no_pages_message
        self.debug_mode = debug_mode
        self.output_dir = Path(output_dir) if output_dir else None
        self.debug_image_max_side = debug_image_max_side
        self.diagnostics = diagnostics or NullSink()

        # Initialize components lazily
        self._extractor = None
        self._clusterer = None
        self._renderer = None

    @classmethod
    def from_config(
        cls,
        config,
        output_dir: Optional[Union[str, Path]] = None,
        diagnostics: Optional[DiagnosticSink] = None
    ) -> 'LayoutAssembler':
        """Build an assembler from a PipelineConfig."""
        return cls(
            token_source=config.extraction.token_source,
            clustering=config.clustering.strategy,
            overlap_threshold=config.clustering.overlap_threshold,
            row_tolerance=config.clustering.row_tolerance,
            significance_ratio=config.slots.significance_ratio,
            slot_scope=config.slots.slot_scope,
            spacing=config.render.spacing,
            gap_policy=config.render.gap_policy,
            gap_multiplier=config.render.gap_multiplier,
            gap_std_factor=config.render.gap_std_factor,
            max_spaces=config.render.max_spaces,
            empty_page_placeholder=config.output.empty_page_placeholder,
            page_separator=config.output.page_separator,
            no_pages_message=config.output.no_pages_message,
            debug_mode=config.debug_mode and config.output_debug_images,
            output_dir=output_dir,
            debug_image_max_side=config.debug_image_max_side,
            diagnostics=diagnostics
        )

    @property
    def extractor(self) -> TokenExtractor:
        if self._extractor is None:
            self._extractor = TokenExtractor(
                token_source=self.token_source,
                diagnostics=self.diagnostics
            )
        return self._extractor

    @property
    def clusterer(self) -> LineClusterer:
        if self._clusterer is None:
            self._clusterer = create_clusterer(
                self.clustering,
                overlap_threshold=self.overlap_threshold,
                row_tolerance=self.row_tolerance,
                diagnostics=self.diagnostics
            )
        return self._clusterer

    @property
    def renderer(self) -> LineRenderer:
        if self._renderer is None:
            self._renderer = LineRenderer(
                spacing=create_spacing(self.spacing, max_spaces=self.max_spaces),
                gap_policy=create_gap_policy(
                    self.gap_policy,
                    multiplier=self.gap_multiplier,
                    std_factor=self.gap_std_factor
                ),
                slot_scope=self.slot_scope,
                diagnostics=self.diagnostics
            )
        return self._renderer

    def _empty_page(self, page_number: int) -> PageResult:
        return PageResult(
            page_number=page_number,
            lines=[self.empty_page_placeholder],
            is_empty=True
        )

    def process_page(
        self,
        page: PageRecord,
        text: str,
        debug_name: str = "page"
    ) -> PageResult:
        """
        Reconstruct the text layout of a single page.

        Args:
            page: Parsed page record
            text: Full document text buffer
            debug_name: Prefix for debug image file names

        Returns:
            PageResult with rendered lines
        """
        extraction = self.extractor.extract(page, text)
        if extraction.is_empty:
            logger.debug(f"Page {page.page_number} has no usable words")
            return self._empty_page(page.page_number)

        geometry = extraction.geometry
        lines = self.clusterer.group_into_lines(extraction.words, geometry)
        if not lines:
            logger.debug(f"Page {page.page_number} has no clusterable words")
            return self._empty_page(page.page_number)

        slot_model = compute_slot_model(
            lines,
            geometry,
            significance_ratio=self.significance_ratio,
            diagnostics=self.diagnostics
        )
        rendered = self.renderer.render(lines, RenderContext(geometry=geometry, slot_model=slot_model))

        if self.debug_mode and self.output_dir:
            self._save_debug_image(extraction.words, lines, geometry, debug_name, page.page_number)

        logger.debug(
            f"Page {page.page_number}: {len(extraction.words)} words, "
            f"{len(lines)} lines, slot {slot_model.global_slot:.2f}px"
        )

        return PageResult(
            page_number=page.page_number,
            lines=rendered,
            word_count=len(extraction.words),
            line_count=len(lines),
            global_slot=slot_model.global_slot,
            row_height=geometry.row_height
        )

    def process_document(
        self,
        document: DocumentRecord,
        pages: Optional[Iterable[int]] = None
    ) -> DocumentResult:
        """
        Reconstruct every page of a document.

        Args:
            document: Parsed document
            pages: Optional 1-indexed page positions to keep

        Returns:
            DocumentResult with one PageResult per processed page
        """
        start_time = time.time()
        result = DocumentResult(
            source_file=document.source_file,
            page_separator=self.page_separator,
            no_pages_message=self.no_pages_message
        )

        selected = set(pages) if pages is not None else None
        debug_name = Path(document.source_file).stem if document.source_file else "page"

        for i, page in enumerate(document.pages, 1):
            if selected is not None and i not in selected:
                continue
            result.pages.append(self.process_page(page, document.text, debug_name=debug_name))

        result.processing_time_seconds = time.time() - start_time
        if not result.has_pages:
            logger.warning(f"No pages found in {document.source_file or 'document'}")
        return result

    def render_document(
        self,
        document: DocumentRecord,
        pages: Optional[Iterable[int]] = None
    ) -> str:
        """Reconstruct a document and return its joined text."""
        return self.process_document(document, pages=pages).text

    def _save_debug_image(self, words, lines, geometry, debug_name: str, page_number: int):
        """Save debug image with word boxes and line bands."""
        from .debug import draw_page_debug, save_debug_image

        image = draw_page_debug(words, lines, geometry, max_side=self.debug_image_max_side)
        debug_path = self.output_dir / f"debug/{debug_name}_page_{page_number:04d}_debug.png"
        save_debug_image(image, debug_path)
