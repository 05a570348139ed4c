"""Secret detection using detect-secrets.

Detects API keys, tokens and connection strings that people paste into
event descriptions ("here's the staging key...") so they can be replaced
before the text leaves the process.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass

from detect_secrets.core.scan import scan_line
from detect_secrets.settings import transient_settings

from calguard.config import SECRET_MARKER

# Token-format plugins only. The entropy and keyword plugins fire on
# ordinary meeting prose ("password: see the wiki").
DETECT_SECRETS_PLUGINS: tuple[str, ...] = (
    "AWSKeyDetector",
    "BasicAuthDetector",
    "GitHubTokenDetector",
    "JwtTokenDetector",
    "PrivateKeyDetector",
    "SlackDetector",
    "StripeDetector",
)

# detect-secrets keeps its plugin settings in process-global state
_SETTINGS_LOCK = threading.Lock()
_PLUGIN_SETTINGS = {"plugins_used": [{"name": name} for name in DETECT_SECRETS_PLUGINS]}

# (secret_type, pattern) rows, scanned after the plugins
_CUSTOM_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("AWS Access Key", re.compile(r"AKIA[0-9A-Z]{16}")),
    (
        "API Key",
        re.compile(
            r'["\']?(?:api[_-]?key|apikey|secret[_-]?key|auth[_-]?token|access[_-]?token)["\']?'
            r'\s*[:=]\s*["\']?[a-zA-Z0-9_\-]{20,}["\']?',
            re.IGNORECASE,
        ),
    ),
    ("API Key", re.compile(r"sk-[a-zA-Z0-9]{20,}")),  # OpenAI style keys
    ("API Key", re.compile(r"gh[pos]_[a-zA-Z0-9]{36}")),  # GitHub tokens
    ("Slack Token", re.compile(r"xox[abpr]-[a-zA-Z0-9-]{10,}")),
    ("Private Key", re.compile(r"-----BEGIN (?:[A-Z]+ )?PRIVATE KEY-----")),
    (
        "Connection String",
        re.compile(r'(?:postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^\s"\']+', re.IGNORECASE),
    ),
    (
        "Connection String",
        re.compile(
            r"Server\s*=\s*[^;]+;\s*Database\s*=\s*[^;]+;\s*(?:User\s*Id|Uid)\s*=\s*[^;]+;"
            r"\s*(?:Password|Pwd)\s*=\s*[^;]+",
            re.IGNORECASE,
        ),
    ),
]


@dataclass
class SecretFinding:
    """A detected secret in text."""

    secret_type: str
    line_number: int
    start: int
    end: int


def detect_secrets_in_text(text: str) -> list[SecretFinding]:
    """Detect API keys, tokens and connection strings.

    Args:
        text: The text to scan for secrets

    Returns:
        List of SecretFinding objects with type and absolute offsets
    """
    findings: list[SecretFinding] = []
    if not text:
        return findings

    current_pos = 0
    with _SETTINGS_LOCK, transient_settings(_PLUGIN_SETTINGS):
        for line_num, line in enumerate(text.split("\n"), start=1):
            for finding in _scan_line_for_secrets(line, line_num):
                finding.start += current_pos
                finding.end += current_pos
                findings.append(finding)
            current_pos += len(line) + 1  # +1 for newline

    return findings


def _scan_line_for_secrets(line: str, line_number: int) -> list[SecretFinding]:
    """Scan one line with the detect-secrets plugins, then the custom rows."""
    findings: list[SecretFinding] = []

    for potential in scan_line(line):
        secret_value = potential.secret_value or ""
        start = line.find(secret_value) if secret_value else -1
        if start < 0:
            continue
        findings.append(
            SecretFinding(
                secret_type=potential.type,
                line_number=line_number,
                start=start,
                end=start + len(secret_value),
            )
        )

    # A span already reported by a plugin keeps the plugin's type
    seen = {(f.start, f.end) for f in findings}
    findings.extend(
        f for f in _match_custom_patterns(line, line_number) if (f.start, f.end) not in seen
    )
    return findings


def _match_custom_patterns(line: str, line_number: int) -> list[SecretFinding]:
    findings: list[SecretFinding] = []
    for secret_type, pattern in _CUSTOM_PATTERNS:
        for match in pattern.finditer(line):
            findings.append(
                SecretFinding(
                    secret_type=secret_type,
                    line_number=line_number,
                    start=match.start(),
                    end=match.end(),
                )
            )
    return findings


def contains_secret(text: str) -> bool:
    return bool(detect_secrets_in_text(text))


def redact_secrets(text: str, findings: list[SecretFinding] | None = None) -> str:
    """Replace detected secrets with ``[SECRET_REMOVED]``.

    Overlapping findings are merged first so a key inside a longer
    connection string is replaced exactly once.

    Args:
        text: The original text
        findings: Findings to redact; detected from ``text`` when omitted

    Returns:
        Text with every finding replaced
    """
    if not text:
        return text
    if findings is None:
        findings = detect_secrets_in_text(text)
    if not findings:
        return text

    spans: list[list[int]] = []
    for finding in sorted(findings, key=lambda f: f.start):
        if spans and finding.start <= spans[-1][1]:
            spans[-1][1] = max(spans[-1][1], finding.end)
        else:
            spans.append([finding.start, finding.end])

    # Replace from end to start so earlier offsets stay valid
    result = text
    for start, end in reversed(spans):
        result = result[:start] + SECRET_MARKER + result[end:]
    return result
