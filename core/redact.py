"""
Secret hygiene for the unified spec.

Two independent transforms live here:
- sanitize (storage): rewrite a secret-looking env/header value into a
  ${ENV_VAR} placeholder before the unified spec is persisted.
- redact (display): mask secret-looking values in any structure printed to
  a human. Nothing redacted is ever written back.

Classification is best-effort. An un-prefixed credential stored under an
innocuous key is not detected; callers that know more shapes can extend a
SecretClassifier with extra patterns.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Pattern

PLACEHOLDER_SIGIL = '$'
MASK = '***'

SECRET_KEY_LIKE = re.compile(
    r'(token|secret|password|api[_-]?key|access[_-]?token|refresh[_-]?token)',
    re.IGNORECASE,
)
KEY_SUFFIX = re.compile(r'key$', re.IGNORECASE)
BEARER = re.compile(r'(Bearer)\s+\S+', re.IGNORECASE)

DEFAULT_VALUE_PATTERNS = (
    r'Bearer\s+\S+',
    r'^figd_[A-Za-z0-9_-]+$',
    r'^(sk|rk|pk)_[A-Za-z0-9_-]+$',
    r'^sb_(publishable|secret)_[A-Za-z0-9_-]+$',
)


class SecretClassifier:
    """
    Decides whether a key/value pair holds a secret.

    Key patterns are searched case-insensitively anywhere in the key; a key
    ending in "key" always counts. Value patterns describe literal
    credential shapes (bearer tokens, vendor prefixes).
    """

    def __init__(self, key_patterns: Optional[Iterable[str]] = None,
                 value_patterns: Optional[Iterable[str]] = None):
        self.key_patterns: List[Pattern] = [SECRET_KEY_LIKE]
        self.value_patterns: List[Pattern] = [
            re.compile(p, re.IGNORECASE if p.startswith('Bearer') else 0)
            for p in DEFAULT_VALUE_PATTERNS
        ]
        for pattern in key_patterns or ():
            self.add_key_pattern(pattern)
        for pattern in value_patterns or ():
            self.add_value_pattern(pattern)

    def add_key_pattern(self, pattern: str):
        self.key_patterns.append(re.compile(pattern, re.IGNORECASE))

    def add_value_pattern(self, pattern: str):
        self.value_patterns.append(re.compile(pattern))

    def is_secret_key(self, key: str) -> bool:
        return any(p.search(key) for p in self.key_patterns) or bool(KEY_SUFFIX.search(key))

    def is_secret_value(self, value: str) -> bool:
        return any(p.search(value) for p in self.value_patterns)


DEFAULT_CLASSIFIER = SecretClassifier()


def to_env_var_name(key: str) -> str:
    """API-Key -> API_KEY; runs of non-alphanumerics collapse to one underscore."""
    name = re.sub(r'[^A-Za-z0-9]+', '_', key.strip())
    return name.strip('_').upper()


def is_placeholder(value: str) -> bool:
    return value.startswith(PLACEHOLDER_SIGIL)


def sanitize_key_value(key: str, value: str,
                       classifier: Optional[SecretClassifier] = None) -> str:
    """
    Return the value to persist for one env/header pair.

    Placeholders are kept as-is, so sanitizing twice equals sanitizing once.
    """
    classifier = classifier or DEFAULT_CLASSIFIER
    if is_placeholder(value):
        return value
    if classifier.is_secret_key(key) or classifier.is_secret_value(value):
        return '${' + to_env_var_name(key) + '}'
    return value


def sanitize_record(record: Optional[Dict[str, str]],
                    classifier: Optional[SecretClassifier] = None) -> Optional[Dict[str, str]]:
    if record is None:
        return None
    return {key: sanitize_key_value(key, value, classifier) for key, value in record.items()}


def redact_object(value: Any) -> Any:
    """
    Mask secrets in an arbitrary structure for display.

    Keys that look secret have their whole value replaced with MASK; any
    string containing a bearer token keeps the scheme and loses the token.
    URLs are only masked when their own key looks secret.
    """
    if isinstance(value, list):
        return [redact_object(v) for v in value]
    if isinstance(value, dict):
        out = {}
        for key, val in value.items():
            if isinstance(key, str) and SECRET_KEY_LIKE.search(key):
                out[key] = MASK
            else:
                out[key] = redact_object(val)
        return out
    if isinstance(value, str):
        return BEARER.sub(r'\1 ' + MASK, value)
    return value
