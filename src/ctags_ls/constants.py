"""
Shared constants for the ctags language server.
"""

SERVER_NAME = "ctags-ls"

# Tag file discovery
DEFAULT_TAG_PATTERNS = ["tags"]

# External indexer
READTAGS_COMMAND = "readtags"
DEFAULT_READTAGS_TIMEOUT = 10.0  # seconds

# Characters stripped from both ends of a tag pattern field, e.g. /^int foo() {$/;"
PATTERN_DELIMITERS = '/^$;"'

# Pseudo-tags at the top of a tag file (!_TAG_FILE_FORMAT etc.)
PSEUDO_TAG_PREFIX = "!_TAG_"

# Tag kinds, short and long forms as written by ctags
PROTOTYPE_KINDS = frozenset({"p", "prototype"})
FUNCTION_KINDS = frozenset({"f", "function"})

# Logging
LOG_FILE_NAME = "ctags_ls.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LOG_LEVEL = "INFO"

# Environment overrides
ENV_READTAGS = "CTAGS_LS_READTAGS"
ENV_READTAGS_TIMEOUT = "CTAGS_LS_READTAGS_TIMEOUT"
ENV_LOG_LEVEL = "CTAGS_LS_LOG_LEVEL"
ENV_LOG_FILE = "CTAGS_LS_LOG_FILE"
