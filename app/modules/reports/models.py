# Supabase views: task_export_rows, user_task_counts
# This file documents the expected database views
# Reports read each one with a single select, so every export is one statement

"""
Expected read-only views over the tasks and users tables:

task_export_rows: every tasks column plus
- assignees: jsonb - [{"id", "name", "email"}, ...] in assigned_to order;
  ids with no matching user are left out

user_task_counts: public users columns (no password_hash) plus
- total_tasks, pending_tasks, in_progress_tasks, completed_tasks: bigint -
  tasks whose assigned_to contains the user, by status

    create or replace view task_export_rows as
    select t.*,
        coalesce((
            select jsonb_agg(
                jsonb_build_object('id', u.id, 'name', u.name, 'email', u.email)
                order by a.ord
            )
            from unnest(t.assigned_to) with ordinality as a(user_id, ord)
            join users u on u.id = a.user_id
        ), '[]'::jsonb) as assignees
    from tasks t;

    create or replace view user_task_counts as
    select u.id, u.name, u.email, u.role, u.profile_image_url,
        u.created_at, u.updated_at,
        count(t.id) as total_tasks,
        count(t.id) filter (where t.status = 'pending') as pending_tasks,
        count(t.id) filter (where t.status = 'in_progress') as in_progress_tasks,
        count(t.id) filter (where t.status = 'completed') as completed_tasks
    from users u
    left join tasks t on u.id = any(t.assigned_to)
    group by u.id;
"""
