"""sitepipe: static site asset pipeline (Sass, page templates, scripts,
images, linters and accessibility reports) on a small task orchestrator."""

__version__ = "0.1.0"
