"""Resume export service: browser-rendered PDF and banner exports plus DOCX, LaTeX and JSON."""

__version__ = "0.1.0"
