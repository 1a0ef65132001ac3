# Supabase table: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- email: text (unique, not null) - stored trimmed and lower-cased
- password_hash: text (not null) - bcrypt hash, never returned by the API
- role: text (not null, default: 'member') - values: admin, member
- profile_image_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Users are never hard-deleted.
"""
