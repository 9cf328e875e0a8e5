"""Ledger Store persistence (Supabase)."""
