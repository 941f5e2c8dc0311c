"""
=============================================================================
ACCESS LOGGING
=============================================================================

One line per answered request, on the "minihttpd.access" logger:

    127.0.0.1 - - [18/Oct/2026:10:15:32 +0000] "GET /about" 200 412 0.31ms

Keeping access lines on their own logger lets operators route or silence
them separately from diagnostic logs:

    logging.getLogger("minihttpd.access").setLevel(logging.WARNING)

=============================================================================
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone


logger = logging.getLogger("minihttpd.access")


@dataclass
class RequestLog:
    """A single access log entry."""

    client_ip: str
    method: str
    path: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_text(self) -> str:
        """Apache common-log-like text format."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


def log_request(
    client_ip: str,
    method: str,
    path: str,
    status_code: int,
    content_length: int,
    duration_ms: float,
) -> RequestLog:
    """Build an entry, emit it at INFO, and return it."""
    entry = RequestLog(
        client_ip=client_ip or "-",
        method=method or "-",
        path=path or "-",
        status_code=status_code,
        content_length=content_length,
        duration_ms=duration_ms,
        timestamp=datetime.now(timezone.utc).strftime("%d/%b/%Y:%H:%M:%S %z"),
    )
    logger.info(entry.to_text())
    return entry
