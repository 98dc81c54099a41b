"""Engine Configuration

Module-level settings for the content graph engine. Values that an operator
may want to tune are read from the environment once, at import time.

Environment variables:
  CONTENT_GRAPH_MAX_DEPTH: Relationship depth budget (default: 5)
  CONTENT_GRAPH_SNAPSHOT: Default snapshot path used by the CLI
"""

import os

# Depth budget shared by every relationship traversal. An expansion whose
# cost would reach this value is not attempted at all.
MAX_DEPTH = int(os.getenv("CONTENT_GRAPH_MAX_DEPTH", "5"))

DEFAULT_SNAPSHOT_PATH = os.getenv(
    "CONTENT_GRAPH_SNAPSHOT", "data/sample_snapshot.json"
)

# Locale served straight from the base records (no translation lookup).
DEFAULT_LANGUAGE = "en-gb"

# Language code of the set metadata rows used when the requested locale has
# no metadata of its own.
SET_METADATA_LANGUAGE = "en-GB"

SEARCH_RESULT_LIMIT = 20
SEARCH_HIGHLIGHT_CLASS = "search-highlight"

# Availability slugs whose window is computed at request time.
ACTIVE_NEXT_SUNDAY_SLUG = "active-next-sunday"
ACTIVE_UNTIL_NEXT_SUNDAY_SLUG = "active-until-next-sunday"
DYNAMIC_WINDOW_HOUR = 21
