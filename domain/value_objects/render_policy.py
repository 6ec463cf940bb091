"""Fixed rasterization policy for uploaded documents."""

MAX_PAGES = 5
"""Pages beyond this cap are never rendered or represented."""

RENDER_SCALE = 2.0
"""Render scale relative to the native page size; high enough for OCR-grade transcription."""
