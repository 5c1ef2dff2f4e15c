"""Supabase tables and storage for appointments, unavailability and gallery."""

from .supabase_client import SupabaseClient, get_db_client

__all__ = ["SupabaseClient", "get_db_client"]
