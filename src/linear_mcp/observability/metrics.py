"""Prometheus metrics for the Linear MCP server.

Metrics are created on first use and only when enabled with
``configure_metrics(True)``; otherwise every recorder is a no-op. The
stdio server exposes them with ``start_metrics_server`` on a side port.
tool_name is a label (bounded by the tool catalog).
"""

import logging

import prometheus_client

logger = logging.getLogger(__name__)

_enabled = False
_metrics = {}


def configure_metrics(enabled: bool) -> None:
    global _enabled
    _enabled = enabled
    logger.debug("Metrics %s", "enabled" if enabled else "disabled")


def _metric(name, metric_type, description, labelnames=()):
    """Get or create a Prometheus metric; ``None`` while metrics are disabled."""
    if not _enabled:
        return None
    if name in _metrics:
        return _metrics[name]
    cls = getattr(prometheus_client, metric_type)
    m = cls(name, description, labelnames=labelnames)
    _metrics[name] = m
    return m


def tool_calls_total():
    return _metric(
        "linear_mcp_tool_calls_total",
        "Counter",
        "Total tool calls",
        labelnames=["tool_name", "status"],
    )


def tool_call_duration():
    return _metric(
        "linear_mcp_tool_call_duration_seconds",
        "Histogram",
        "Tool call duration in seconds",
        labelnames=["tool_name", "status"],
    )


def token_refresh_total():
    return _metric(
        "linear_mcp_token_refresh_total",
        "Counter",
        "OAuth token refresh attempts",
        labelnames=["status"],
    )


# --- Helper functions for recording metrics ---

def record_tool_call(tool_name: str, status: str, duration: float):
    tc = tool_calls_total()
    if tc:
        tc.labels(tool_name=tool_name, status=status).inc()
    tcd = tool_call_duration()
    if tcd:
        tcd.labels(tool_name=tool_name, status=status).observe(duration)


def record_token_refresh(status: str):
    m = token_refresh_total()
    if m:
        m.labels(status=status).inc()


def start_metrics_server(port: int, addr: str = "127.0.0.1") -> None:
    """Serve the default registry at ``http://<addr>:<port>/metrics`` from a daemon thread."""
    prometheus_client.start_http_server(port, addr=addr)
    logger.info("Prometheus metrics exposed on %s:%d/metrics", addr, port)
