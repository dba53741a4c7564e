"""Audit trail of identity register runs.

Every CLI run appends one JSON line per reconciled subject (a single object or
a whole manifest) recording whether keystone was changed. Lines are signed
with HMAC-SHA256 when a signing key is configured, so an operator can later
check that nobody rewrote a "changed" outcome into "unchanged".
"""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import os
import sys
from pathlib import Path
from typing import Any, Iterator, Literal, NamedTuple

AUDIT_LOG_DIR = Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit"))
AUDIT_LOG_FILE = AUDIT_LOG_DIR / "register-events.jsonl"

_default_secret_paths: list[Path] = [
    Path(p) for p in (os.environ.get("AUDIT_LOG_SIGNING_KEY_FILE"),) if p
] + [
    Path(".runtime/secrets/audit_log_signing_key"),
    AUDIT_LOG_DIR / "audit_log_signing_key",
]

ObjectKind = Literal[
    "tenant", "service", "endpoint", "role", "user", "role-grant", "ec2-credentials",
    "manifest",
]


class AuditReport(NamedTuple):
    """Outcome of :func:`verify_audit_log`."""
    total: int
    valid: int
    changed: int
    failed: int


def _signing_key() -> bytes:
    """Signing key: ``AUDIT_LOG_SIGNING_KEY`` wins, then the first readable key file."""
    if "AUDIT_LOG_SIGNING_KEY" in os.environ:
        return os.environ["AUDIT_LOG_SIGNING_KEY"].strip().encode("utf-8")
    for path in _default_secret_paths:
        try:
            return path.read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError:
            continue
    return b""


def _sign_event(event: dict[str, Any]) -> str:
    key = _signing_key()
    if not key:
        return ""
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_register_event(
    kind: ObjectKind,
    name: str,
    *,
    operator: str = "system",
    changed: bool = False,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a reconciliation outcome to the audit trail.

    Args:
        kind: Object kind that was reconciled
        name: Name of the declared object (or manifest path)
        operator: Who triggered the run
        changed: Whether a state-changing command was issued
        details: Additional context (never secrets)
        success: Whether reconciliation completed without error
    """
    AUDIT_LOG_DIR.mkdir(parents=True, exist_ok=True)
    AUDIT_LOG_DIR.chmod(0o700)

    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "kind": kind,
        "name": name,
        "operator": operator,
        # A failed run converged nothing, whatever it got through first.
        "changed": changed and success,
        "success": success,
        "details": details or {},
    }
    signature = _sign_event(event)
    if signature:
        event["signature"] = signature

    with AUDIT_LOG_FILE.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")
    AUDIT_LOG_FILE.chmod(0o600)


def safe_log_register_event(
    kind: ObjectKind,
    name: str,
    *,
    operator: str = "system",
    changed: bool = False,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log a register event without ever raising.

    Audit failures are reported on stderr so that a broken audit directory
    never turns a converged run into a failed one.

    Returns:
        True if the event was written, False otherwise
    """
    try:
        log_register_event(
            kind,
            name,
            operator=operator,
            changed=changed,
            details=details,
            success=success,
        )
        return True
    except Exception as e:
        print(f"[audit] Warning: Failed to log {kind} event for {name}: {e}", file=sys.stderr)
        return False


def read_events() -> Iterator[tuple[dict[str, Any], bool]]:
    """Yield ``(event, signature_ok)`` for every parseable line of the trail."""
    if not AUDIT_LOG_FILE.exists():
        return
    with AUDIT_LOG_FILE.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            try:
                event = json.loads(line)
            except json.JSONDecodeError:
                yield {}, False
                continue
            stored = event.pop("signature", "")
            yield event, bool(stored) and hmac.compare_digest(stored, _sign_event(event))


def verify_audit_log() -> AuditReport:
    """Check every signature and count converging and failed runs.

    Returns:
        AuditReport(total, valid, changed, failed)
    """
    total = valid = changed = failed = 0
    for event, signature_ok in read_events():
        total += 1
        valid += signature_ok
        changed += bool(event.get("changed"))
        failed += event.get("success") is False
    return AuditReport(total, valid, changed, failed)


if __name__ == "__main__":
    report = verify_audit_log()
    print(
        f"Audit log: {report.valid}/{report.total} events with valid signatures "
        f"({report.changed} changed, {report.failed} failed)"
    )
    sys.exit(0 if report.total == report.valid else 1)
