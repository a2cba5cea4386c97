"""Prompt templates and rendering helpers."""
