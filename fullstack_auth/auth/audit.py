"""Audit trail for authentication events.

AuthService reports every signup, signin and current-user lookup to an
AuditSink it receives at construction. The base class discards records;
LoggingAuditSink writes one JSON line per record to the
``fullstack_auth.audit`` logger.

Records identify the account by email or id. Passwords and hashes are never
passed to a sink.
"""

import json
import logging

from ..utils import isodatetime

AUDIT_LOGGER_NAME = "fullstack_auth.audit"

# Outcomes
ATTEMPT = "attempt"
SUCCESS = "success"
FAILURE = "failure"


class AuditSink:
    """No-op sink. Subclasses override record()."""

    def record(self, action: str, outcome: str, **fields) -> None:
        """
        Record one audit event.

        Args:
            action: Operation name (signup, signin, current_user)
            outcome: attempt, success or failure
            **fields: Identifying fields such as email, account_id, reason
        """


class LoggingAuditSink(AuditSink):
    """Writes audit records as JSON through the standard logging module."""

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record(self, action: str, outcome: str, **fields) -> None:
        entry = {
            "timestamp": isodatetime.now(),
            "action": action,
            "outcome": outcome,
            **fields,
        }
        level = logging.WARNING if outcome == FAILURE else logging.INFO
        self._logger.log(level, json.dumps(entry, sort_keys=True))
