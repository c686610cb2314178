"""add_rls_policies

Revision ID: 8c3e5f6a1b27
Revises: 4b1d7e2a9c10
Create Date: 2026-10-12 11:02:51.870114

"""

from collections.abc import Sequence

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c3e5f6a1b27"
down_revision: str | Sequence[str] | None = "4b1d7e2a9c10"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TABLES = ["profiles", "role_requests", "notifications", "activity_log"]


def upgrade() -> None:
    """Add Row Level Security policies and publish notifications over realtime.

    Note: The FastAPI backend connects with a service account that bypasses RLS.
    These policies cover direct Supabase client access from the browser
    (profile reads and the notifications realtime channel).
    """
    # --- Helper function to avoid RLS recursion ---
    # Checking the caller's role reads profiles, which is itself RLS-protected.
    op.execute("""
        CREATE OR REPLACE FUNCTION is_admin(uid UUID)
        RETURNS BOOLEAN
        LANGUAGE sql
        SECURITY DEFINER
        STABLE
        SET search_path = public
        AS $$
            SELECT EXISTS (SELECT 1 FROM profiles WHERE id = uid AND role = 'admin');
        $$;
    """)

    for table in TABLES:
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY;")

    # --- Profiles policies ---
    # SELECT: any signed-in member can see the directory
    op.execute("""
        CREATE POLICY profiles_select ON profiles
            FOR SELECT USING (
                (SELECT auth.uid()) IS NOT NULL
            );
    """)
    # UPDATE: own row only, and never the role column's value
    op.execute("""
        CREATE POLICY profiles_update_own ON profiles
            FOR UPDATE USING (
                id = (SELECT auth.uid())
            ) WITH CHECK (
                id = (SELECT auth.uid())
                AND role = (SELECT p.role FROM profiles p WHERE p.id = (SELECT auth.uid()))
            );
    """)

    # --- Role request policies ---
    op.execute("""
        CREATE POLICY role_requests_select ON role_requests
            FOR SELECT USING (
                user_id = (SELECT auth.uid()) OR is_admin((SELECT auth.uid()))
            );
    """)

    # --- Notification policies ---
    # SELECT / UPDATE: recipient only (mark as read from the browser)
    op.execute("""
        CREATE POLICY notifications_select ON notifications
            FOR SELECT USING (
                user_id = (SELECT auth.uid())
            );
    """)
    op.execute("""
        CREATE POLICY notifications_update ON notifications
            FOR UPDATE USING (
                user_id = (SELECT auth.uid())
            );
    """)

    # --- Activity Log policies ---
    op.execute("""
        CREATE POLICY activity_log_select ON activity_log
            FOR SELECT USING (
                is_admin((SELECT auth.uid()))
            );
    """)

    # --- Realtime ---
    op.execute("ALTER PUBLICATION supabase_realtime ADD TABLE notifications;")


def downgrade() -> None:
    """Drop RLS policies, realtime publication and helper function."""
    op.execute("ALTER PUBLICATION supabase_realtime DROP TABLE notifications;")

    policies = [
        ("activity_log_select", "activity_log"),
        ("notifications_update", "notifications"),
        ("notifications_select", "notifications"),
        ("role_requests_select", "role_requests"),
        ("profiles_update_own", "profiles"),
        ("profiles_select", "profiles"),
    ]
    for policy_name, table_name in policies:
        op.execute(f"DROP POLICY IF EXISTS {policy_name} ON {table_name};")

    for table in reversed(TABLES):
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY;")

    op.execute("DROP FUNCTION IF EXISTS is_admin(UUID);")
