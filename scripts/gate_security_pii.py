#!/usr/bin/env python3
"""Security & PII gate for runtime code (src/**).

Fails if:
- print( is used anywhere in runtime code
- a logger call mentions guest contact or mobile-money data without going
  through the redaction helpers

Logger calls are checked as a whole, so a multi-line
``logger.info(..., extra={"extra_fields": safe_log_context(...)})`` passes.

Usage:
    uv run python scripts/gate_security_pii.py
"""

from __future__ import annotations

import re
import sys
from pathlib import Path

SENSITIVE_KEYWORDS = (
    "numero_mobile_money",
    "nom_mobile_money",
    "mobile_money",
    "phone",
    "email",
    "request.body",
    "request.json",
    "payload",
)

PRINT_PATTERN = re.compile(r"\bprint\s*\(")

LOGGER_CALL_PATTERN = re.compile(
    r"logger\.(debug|info|warning|error|critical|exception)\s*\("
)

REDACTION_PATTERNS = (
    "safe_log_context",
    "redact_value",
    "redact_string",
    "mask_account_number",
)


def _code_part(line: str) -> str:
    return line.split("#", 1)[0]


def _logger_call_text(lines: list[str], start: int) -> str:
    """Join lines from ``start`` until the logger call's parentheses close."""
    depth = 0
    collected: list[str] = []
    for line in lines[start:]:
        code = _code_part(line)
        collected.append(code)
        depth += code.count("(") - code.count(")")
        if depth <= 0:
            break
    return "\n".join(collected)


def check_source(text: str, label: str) -> list[str]:
    """Return violations found in one file's text."""
    errors: list[str] = []
    lines = text.splitlines()

    for index, line in enumerate(lines):
        lineno = index + 1
        code = _code_part(line)
        if not code.strip():
            continue

        if PRINT_PATTERN.search(code):
            errors.append(f"{label}:{lineno}: print() not allowed in runtime code")

        if not LOGGER_CALL_PATTERN.search(code):
            continue

        call = _logger_call_text(lines, index)
        if any(pattern in call for pattern in REDACTION_PATTERNS):
            continue
        call_lower = call.lower()
        for keyword in SENSITIVE_KEYWORDS:
            if keyword in call_lower:
                errors.append(
                    f"{label}:{lineno}: logger call with '{keyword}' "
                    "must use redaction (safe_log_context/redact_value)"
                )

    return errors


def check_tree(src_dir: Path) -> list[str]:
    errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        try:
            text = pyfile.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            continue
        errors.extend(check_source(text, str(pyfile)))
    return errors


def main() -> int:
    src_dir = Path("src")
    if not src_dir.exists():
        src_dir = Path(__file__).parent.parent / "src"

    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    errors = check_tree(src_dir)
    if errors:
        sys.stderr.write("PII gate FAILED - violations found:\n")
        for err in errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("PII gate PASSED - no violations found\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
