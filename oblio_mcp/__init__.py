"""MCP server exposing the Oblio invoicing and e-Factura API."""

__version__ = "0.1.0"
