"""Internal constants shared across the library."""

import re

PATH_SEPARATOR = "."

# Runs of characters outside this set are collapsed into a single "_".
FORBIDDEN_CHARS_PATTERN = r"[^A-Za-z0-9._\-/ :!#$%&()+=@^{}|~]+"
FORBIDDEN_CHARS_RE = re.compile(FORBIDDEN_CHARS_PATTERN)

# Full base64 alphabet with mandatory trailing padding.
BASE64_RE = re.compile(r"(?:[0-9a-zA-Z+/]{4})*(?:[0-9a-zA-Z+/]{2}==|[0-9a-zA-Z+/]{3}=)")

PASSWORD_MARKER = "password"

# ------------------------------------------------------------------
# Epoch timestamp windows used for ``value.time`` role detection
# ------------------------------------------------------------------

EPOCH_MS_DIGITS = 13
EPOCH_MS_MIN = 1_500_000_000_000
EPOCH_MS_MAX = 2_000_000_000_000

EPOCH_S_DIGITS = 10
EPOCH_S_MIN = 1_500_000_000
EPOCH_S_MAX = 2_000_000_000

# Array indices below this value are zero-padded to two digits.
INDEX_PAD_LIMIT = 10

SNAPSHOT_LEAF = "json"
