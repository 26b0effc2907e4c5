"""
Unit tests for application settings.

Run: pytest tests/unit/test_settings.py -v
"""

import pytest
from pydantic import ValidationError

from config.settings import Settings


class TestSettings:

    def test_anon_key_is_enough(self):
        settings = Settings(supabase_url="http://localhost:54321", supabase_key="anon")

        assert settings.unfulfilled_cache_ttl_seconds == 60
        assert settings.unfulfilled_refresh_interval_seconds == 60
        assert "supabase_service_key" not in Settings.model_fields

    def test_refresh_interval_floor(self):
        with pytest.raises(ValidationError):
            Settings(
                supabase_url="http://localhost:54321",
                supabase_key="anon",
                unfulfilled_refresh_interval_seconds=1,
            )
