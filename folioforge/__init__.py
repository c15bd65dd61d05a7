"""FolioForge: LLM portfolio generation with truncated-output continuation."""

__version__ = "1.0.0"
