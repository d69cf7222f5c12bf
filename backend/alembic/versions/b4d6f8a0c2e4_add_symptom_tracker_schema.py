"""add profiles, symptom_entries, risk_assessments with RLS and triggers

Row-level security mirrors the repository rules: owners read and write
their own rows, admins read everything. Patients cannot grant themselves
the admin role. The requesting identity is taken from the
``app.current_user_id`` setting, which the API sets per transaction once
a bearer token is verified (``app.database.set_current_user``).

Policies bind only roles that do not own the tables, so the API should
connect as a separate login role granted SELECT/INSERT/UPDATE/DELETE on
these tables. Migrations and maintenance scripts (admin seeding) run as
the owner and bypass the policies.

Triggers:
- on_auth_user_created: insert a patient profile for every new user
- set_updated_at: stamp profiles.updated_at on update

Revision ID: b4d6f8a0c2e4
Revises: a1c3e5f7b9d2
Create Date: 2025-10-06
"""

from collections.abc import Sequence
from typing import Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "b4d6f8a0c2e4"
down_revision: Union[str, Sequence[str], None] = "a1c3e5f7b9d2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_CURRENT_USER = "current_setting('app.current_user_id', true)"
# SECURITY DEFINER function so the admin check on profiles does not recurse
# through the profiles policies themselves
_IS_ADMIN = f"is_admin({_CURRENT_USER})"

# (table, policy name, command, USING, WITH CHECK)
_POLICIES = [
    ("profiles", "Users can view own profile", "SELECT", f"{_CURRENT_USER} = id", None),
    (
        "profiles",
        "Users can insert own profile",
        "INSERT",
        None,
        f"{_CURRENT_USER} = id AND role = 'patient'",
    ),
    (
        "profiles",
        "Users can update own profile",
        "UPDATE",
        f"{_CURRENT_USER} = id",
        f"{_CURRENT_USER} = id AND (role = 'patient' OR {_IS_ADMIN})",
    ),
    ("profiles", "Admins can view all profiles", "SELECT", _IS_ADMIN, None),
    ("symptom_entries", "Users can view own symptom entries", "SELECT", f"{_CURRENT_USER} = user_id", None),
    ("symptom_entries", "Users can insert own symptom entries", "INSERT", None, f"{_CURRENT_USER} = user_id"),
    ("symptom_entries", "Users can update own symptom entries", "UPDATE", f"{_CURRENT_USER} = user_id", None),
    ("symptom_entries", "Users can delete own symptom entries", "DELETE", f"{_CURRENT_USER} = user_id", None),
    ("symptom_entries", "Admins can view all symptom entries", "SELECT", _IS_ADMIN, None),
    ("risk_assessments", "Users can view own risk assessments", "SELECT", f"{_CURRENT_USER} = user_id", None),
    (
        "risk_assessments",
        "Users can insert own risk assessments",
        "INSERT",
        None,
        f"{_CURRENT_USER} = user_id AND EXISTS ("
        f"SELECT 1 FROM symptom_entries e WHERE e.id = symptom_entry_id AND e.user_id = {_CURRENT_USER})",
    ),
    ("risk_assessments", "Admins can view all risk assessments", "SELECT", _IS_ADMIN, None),
]


def upgrade() -> None:
    # --- profiles ---
    op.create_table(
        "profiles",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column(
            "role",
            sa.Enum("patient", "admin", name="profile_role"),
            nullable=False,
            server_default="patient",
        ),
        sa.Column("full_name", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["id"], ["user.id"], ondelete="CASCADE"),
    )

    # --- symptom_entries ---
    op.create_table(
        "symptom_entries",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("symptoms", postgresql.JSONB(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_symptom_entries_user_id", "symptom_entries", ["user_id"])
    op.create_index("idx_symptom_entries_user_created", "symptom_entries", ["user_id", "created_at"])

    # --- risk_assessments ---
    op.create_table(
        "risk_assessments",
        sa.Column("id", postgresql.UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("symptom_entry_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("predictions", postgresql.JSONB(), nullable=False),
        sa.Column("risk_level", sa.Enum("low", "medium", "high", name="risk_level"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["symptom_entry_id"], ["symptom_entries.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_risk_assessments_symptom_entry_id", "risk_assessments", ["symptom_entry_id"])
    op.create_index("ix_risk_assessments_user_id", "risk_assessments", ["user_id"])

    # --- row-level security ---
    op.execute(
        """
        CREATE OR REPLACE FUNCTION is_admin(uid text)
        RETURNS boolean
        LANGUAGE sql
        STABLE
        SECURITY DEFINER
        AS $$
          SELECT EXISTS (SELECT 1 FROM profiles WHERE id = uid AND role = 'admin')
        $$
        """
    )

    for table in ("profiles", "symptom_entries", "risk_assessments"):
        op.execute(f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY")

    for table, name, command, using, check in _POLICIES:
        clause = f'CREATE POLICY "{name}" ON {table} FOR {command}'
        if using:
            clause += f" USING ({using})"
        if check:
            clause += f" WITH CHECK ({check})"
        op.execute(clause)

    # --- triggers ---
    op.execute(
        """
        CREATE OR REPLACE FUNCTION handle_new_user()
        RETURNS TRIGGER
        LANGUAGE plpgsql
        SECURITY DEFINER
        AS $$
        BEGIN
          INSERT INTO profiles (id, full_name, role)
          VALUES (NEW.id, COALESCE(NEW.name, ''), 'patient')
          ON CONFLICT (id) DO NOTHING;
          RETURN NEW;
        END;
        $$
        """
    )
    op.execute(
        """
        CREATE TRIGGER on_auth_user_created
          AFTER INSERT ON "user"
          FOR EACH ROW
          EXECUTE FUNCTION handle_new_user()
        """
    )
    op.execute(
        """
        CREATE OR REPLACE FUNCTION handle_updated_at()
        RETURNS TRIGGER
        LANGUAGE plpgsql
        AS $$
        BEGIN
          NEW.updated_at = now();
          RETURN NEW;
        END;
        $$
        """
    )
    op.execute(
        """
        CREATE TRIGGER set_updated_at
          BEFORE UPDATE ON profiles
          FOR EACH ROW
          EXECUTE FUNCTION handle_updated_at()
        """
    )


def downgrade() -> None:
    op.execute("DROP TRIGGER IF EXISTS set_updated_at ON profiles")
    op.execute("DROP FUNCTION IF EXISTS handle_updated_at()")
    op.execute('DROP TRIGGER IF EXISTS on_auth_user_created ON "user"')
    op.execute("DROP FUNCTION IF EXISTS handle_new_user()")

    for table, name, *_ in reversed(_POLICIES):
        op.execute(f'DROP POLICY IF EXISTS "{name}" ON {table}')
    op.execute("DROP FUNCTION IF EXISTS is_admin(text)")

    op.drop_index("ix_risk_assessments_user_id", table_name="risk_assessments")
    op.drop_index("ix_risk_assessments_symptom_entry_id", table_name="risk_assessments")
    op.drop_table("risk_assessments")
    op.drop_index("idx_symptom_entries_user_created", table_name="symptom_entries")
    op.drop_index("ix_symptom_entries_user_id", table_name="symptom_entries")
    op.drop_table("symptom_entries")
    op.drop_table("profiles")

    sa.Enum(name="risk_level").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="profile_role").drop(op.get_bind(), checkfirst=True)
