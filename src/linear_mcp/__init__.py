"""Linear MCP server: Linear issues, projects, teams and initiatives as MCP tools."""

__version__ = "0.1.0"
