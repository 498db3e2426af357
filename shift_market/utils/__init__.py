"""Shared helpers: logging and the Supabase REST client."""
