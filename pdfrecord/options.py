"""Run configuration for a document extraction session."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

__all__ = ["Options", "DEFAULT_MAX_OUTLINE_DEPTH"]

DEFAULT_MAX_OUTLINE_DEPTH = 64


@dataclass(frozen=True, slots=True)
class Options:
    """Options controlling how a PDF is read and serialized.

    ``page_number`` is zero-based; ``None`` selects every page. Empty
    passwords mean no password.
    """

    pdf_filename: str | Path
    page_number: int | None = None
    omit_outline: bool = False
    link_output_only: bool = False
    force_pre_process_fonts: bool = False
    use_page_crop_box: bool = False
    include_debug_info: bool = False
    owner_password: str = ""
    user_password: str = ""
    max_outline_depth: int = DEFAULT_MAX_OUTLINE_DEPTH

    def __post_init__(self) -> None:
        if self.page_number is not None and self.page_number < 0:
            raise ValueError("page_number must be a non-negative, 0-indexed value")
        if self.max_outline_depth < 1:
            raise ValueError("max_outline_depth must be at least 1")

    @property
    def all_pages(self) -> bool:
        return self.page_number is None
