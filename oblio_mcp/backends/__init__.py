"""Oblio backends: argument models, HTTP client and tool handlers."""
