"""Utility helpers for Quill."""
