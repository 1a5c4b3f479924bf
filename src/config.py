"""
Configuration and constants for the layout text reconstruction pipeline.

This module provides:
- Global configuration settings
- Tunable layout heuristics (overlap, gap and significance thresholds)
- Strategy selection for clustering, spacing and gap detection
- Output markers (page separator, placeholders)
"""

import os
from dataclasses import dataclass, field
from typing import Optional
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("layout_text")


# ============================================================================
# Strategy Names
# ============================================================================

class ClusteringStrategy:
    """Line clustering strategy identifiers."""
    OVERLAP = "overlap"
    FIXED = "fixed"
    ALL = (OVERLAP, FIXED)


class SpacingStrategy:
    """Horizontal spacing strategy identifiers."""
    GRID = "grid"
    WORD_GAP = "word_gap"
    ALL = (GRID, WORD_GAP)


class GapStrategy:
    """Paragraph gap detection identifiers."""
    FIXED = "fixed"
    STATISTICAL = "statistical"
    ALL = (FIXED, STATISTICAL)


class SlotScope:
    """Which slot a line is rendered with."""
    GLOBAL = "global"
    LINE = "line"
    ALL = (GLOBAL, LINE)


class TokenSource:
    """Which Document AI page records are read as words."""
    TOKENS = "tokens"
    LINES = "lines"
    ALL = (TOKENS, LINES)


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class ExtractionConfig:
    """Token extraction configuration."""
    token_source: str = TokenSource.TOKENS


@dataclass
class ClusteringConfig:
    """Line clustering configuration."""
    strategy: str = ClusteringStrategy.OVERLAP
    # Percentage of a word's height that must overlap a line to join it
    overlap_threshold: float = 65.0
    # Fixed strategy: max vertical distance between consecutive words,
    # as a fraction of page height
    row_tolerance: float = 0.015


@dataclass
class SlotConfig:
    """Slot model configuration."""
    # Fraction of used page width a line must cover to anchor the slot
    significance_ratio: float = 0.30
    slot_scope: str = SlotScope.GLOBAL


@dataclass
class RenderConfig:
    """Line rendering configuration."""
    spacing: str = SpacingStrategy.GRID
    gap_policy: str = GapStrategy.FIXED
    # Fixed policy: blank line when gap > gap_multiplier * row height
    gap_multiplier: float = 1.5
    # Statistical policy: blank line when gap > mean + gap_std_factor * std
    gap_std_factor: float = 1.0
    # Word gap spacing clamps runs to [1, max_spaces]
    max_spaces: int = 25


@dataclass
class OutputConfig:
    """Output markers."""
    empty_page_placeholder: str = "[empty page]"
    page_separator: str = "\n---\n"
    no_pages_message: str = "No pages found in the document."
    output_extension: str = ".txt"


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    slots: SlotConfig = field(default_factory=SlotConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Global settings
    debug_mode: bool = False
    output_debug_images: bool = False
    debug_image_max_side: int = 1600
    max_pages: Optional[int] = None  # None = process all pages


# ============================================================================
# Default Configuration Instance
# ============================================================================

def _env_choice(name: str, choices, current: str) -> str:
    """Read a strategy name from the environment, ignoring unknown values."""
    value = os.environ.get(name)
    if not value:
        return current
    value = value.lower()
    if value not in choices:
        logger.warning(f"Ignoring {name}={value!r}; expected one of {', '.join(choices)}")
        return current
    return value


def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("LAYOUT_TEXT_DEBUG", "").lower() == "true":
        config.debug_mode = True
        config.output_debug_images = True

    config.extraction.token_source = _env_choice(
        "LAYOUT_TEXT_TOKEN_SOURCE", TokenSource.ALL, config.extraction.token_source
    )
    config.clustering.strategy = _env_choice(
        "LAYOUT_TEXT_CLUSTERING", ClusteringStrategy.ALL, config.clustering.strategy
    )
    config.slots.slot_scope = _env_choice(
        "LAYOUT_TEXT_SLOT_SCOPE", SlotScope.ALL, config.slots.slot_scope
    )
    config.render.spacing = _env_choice(
        "LAYOUT_TEXT_SPACING", SpacingStrategy.ALL, config.render.spacing
    )
    config.render.gap_policy = _env_choice(
        "LAYOUT_TEXT_GAP_POLICY", GapStrategy.ALL, config.render.gap_policy
    )

    max_pages = os.environ.get("LAYOUT_TEXT_MAX_PAGES")
    if max_pages:
        try:
            config.max_pages = int(max_pages)
        except ValueError:
            logger.warning(f"Ignoring LAYOUT_TEXT_MAX_PAGES={max_pages!r}; expected an integer")

    return config
