"""Logging and metrics for the Linear MCP server."""
