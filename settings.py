"""
Configuration for the Strategy Matrix project.
"""

# Model configuration
SCORING_MODEL = "claude-haiku-4-5-20251001"  # Scoring is a matching task over two short lists, Haiku is enough
SCORING_TEMPERATURE = 0.2  # Low temperature to reduce run-to-run variance between identical documents
SCORING_MAX_TOKENS = 2048

# Scoring limits
MAX_DOCUMENT_CHARS = 8000  # Only this prefix of the document is sent to the model
MAX_TOP_CELLS = 5
MIN_SCORE = 0
MAX_SCORE = 3

# Oracle retry policy (1 = no retry, a failed call surfaces immediately)
ORACLE_MAX_ATTEMPTS = 1
ORACLE_RETRY_INITIAL_INTERVAL = 1.0  # seconds, doubled on each attempt

# File paths (defaults, can be overridden via CLI)
DEFAULT_RESULT_FILE = "alignment_result.json"
LOG_FILE = "alignment.log"
