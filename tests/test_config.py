"""Tests for settings and repository selection."""

import asyncio

from summit.backend import build_repository, close_repository
from summit.config import Settings, local_user
from summit.db import AgendaDB
from summit.rest import RestRepository


class TestSettings:
    def test_local_backend_by_default(self, tmp_path):
        settings = Settings(_env_file=None, supabase_url=None, supabase_anon_key=None,
                            db_path=tmp_path / "x.db")
        assert settings.backend == "local"

    def test_rest_backend_needs_url_and_key(self):
        assert Settings(_env_file=None, supabase_url="https://x.supabase.co",
                        supabase_anon_key=None).backend == "local"
        assert Settings(_env_file=None, supabase_url="https://x.supabase.co",
                        supabase_anon_key="k").backend == "rest"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("SUMMIT_SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUMMIT_SUPABASE_ANON_KEY", "env-key")
        monkeypatch.setenv("SUMMIT_LOCAL_USER_ID", "someone")
        settings = Settings(_env_file=None)
        assert settings.backend == "rest"
        assert local_user(settings).user_id == "someone"


class TestBuildRepository:
    def test_local(self, tmp_path):
        settings = Settings(_env_file=None, supabase_url=None, supabase_anon_key=None,
                            db_path=tmp_path / "data" / "summit.db")
        repository = build_repository(settings, local_user(settings))
        assert isinstance(repository, AgendaDB)
        assert (tmp_path / "data" / "summit.db").exists()
        asyncio.run(close_repository(repository))

    def test_rest(self):
        settings = Settings(_env_file=None, supabase_url="https://x.supabase.co",
                            supabase_anon_key="k")
        repository = build_repository(settings, None)
        assert isinstance(repository, RestRepository)
        asyncio.run(close_repository(repository))
