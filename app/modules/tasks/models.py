# Supabase table: tasks
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key, default: gen_random_uuid())
- title: text (not null)
- description: text (nullable)
- priority: text (not null, default: 'medium') - values: low, medium, high
- status: text (not null, default: 'pending') - values: pending, in_progress, completed
- due_date: timestamp (nullable)
- assigned_to: uuid[] (not null) - ids of users in the users table
- attachments: text[] (default: '{}')
- todo_checklist: jsonb (default: '[]') - ordered [{"text": "...", "completed": false}, ...]
- progress: integer (not null, default: 0) - percentage of checklist items completed
- created_by: uuid (foreign key to users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
