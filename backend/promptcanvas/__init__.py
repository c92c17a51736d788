"""promptcanvas: canvas annotations to image-generation prompts, dispatched across AI providers."""

__version__ = "0.1.0"
