"""Prompt construction: presets, template rendering, classification and enhancement."""
