"""Shared reason code constants for skip, fallback and failure paths."""

# Scrape decision
NO_URL = "no_url"
INVALID_URL = "invalid_url"
BLOCKED_DOMAIN = "blocked_domain"
LOW_CONFIDENCE_WEBSITE = "low_confidence_website"
SCRAPE = "scrape"

# Classifier verdicts
INVALID_STRUCTURE = "invalid_structure"
NO_CONTENT = "no_content"
REAL_BUSINESS = "real_business"
LOW_CONFIDENCE = "low_confidence"

# Discovery
NO_SEARCH_RESULTS = "no_search_results"
ALL_CANDIDATES_REJECTED = "all_candidates_rejected"

# Search clients
API_KEY_MISSING = "api_key_missing"
SEARCH_FAILED = "search_failed"
RATE_LIMITED = "rate_limited"

# Extraction fallback
NO_EXTRACTABLE_CONTENT = "no_extractable_content"
SCRAPE_ERROR = "scrape_error"

SKIP_REASONS = [
    NO_URL,
    INVALID_URL,
    BLOCKED_DOMAIN,
    LOW_CONFIDENCE_WEBSITE,
]

FALLBACK_REASONS = [
    NO_EXTRACTABLE_CONTENT,
    SCRAPE_ERROR,
]
