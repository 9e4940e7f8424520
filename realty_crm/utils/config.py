"""Application configuration read from environment variables."""

import os


class CRMConfig:
    """Centralized application settings."""

    SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
    SUPABASE_SERVICE_ROLE_KEY = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "")
    SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")

    # CSV import
    IMPORT_BATCH_SIZE = int(os.environ.get("IMPORT_BATCH_SIZE", "50"))
    IMPORT_DUPLICATE_POLICY = os.environ.get("IMPORT_DUPLICATE_POLICY", "allow").lower()

    # Filter thresholds
    NEW_BUYER_DAYS = int(os.environ.get("NEW_BUYER_DAYS", "7"))
    HIGH_SCORE_THRESHOLD = int(os.environ.get("HIGH_SCORE_THRESHOLD", "80"))
    HOT_SCORE_THRESHOLD = int(os.environ.get("HOT_SCORE_THRESHOLD", "85"))

    @classmethod
    def supabase_key(cls) -> str:
        """Service role key if set, otherwise the anon key."""
        return cls.SUPABASE_SERVICE_ROLE_KEY or cls.SUPABASE_ANON_KEY
