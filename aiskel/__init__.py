"""ai-skeleton -- materialize new projects from the AI Skeleton scaffold template."""

__version__ = "1.0.0"
