"""Persistence: document-store contract, Supabase store and row mapping."""
