"""Inspection tracking schema.

- product_lines
- models
- leakage_types
- machines
- profiles
- user_roles
- inspection_records
- repair_records
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c1d0a7e52b4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "product_lines",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("code", name="uq_product_lines_code"),
    )

    op.create_table(
        "models",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("product_line_id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_line_id"], ["product_lines.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_models_product_line_id", "models", ["product_line_id"])

    op.create_table(
        "leakage_types",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("product_line_id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["product_line_id"], ["product_lines.id"], ondelete="RESTRICT"),
    )
    op.create_index("ix_leakage_types_product_line_id", "leakage_types", ["product_line_id"])

    op.create_table(
        "machines",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("model_id", sa.Uuid(), nullable=False),
        sa.Column("chassis_number", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["model_id"], ["models.id"], ondelete="RESTRICT"),
        sa.UniqueConstraint("chassis_number", "model_id", name="uq_machines_chassis_model"),
    )
    op.create_index("ix_machines_model_id", "machines", ["model_id"])
    op.create_index("ix_machines_chassis_number", "machines", ["chassis_number"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("full_name", sa.Text(), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.text("true"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_profiles_email"),
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
        sa.CheckConstraint("role IN ('admin', 'tester', 'repairman')", name="ck_user_roles_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "inspection_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("machine_id", sa.Uuid(), nullable=False),
        sa.Column("tester_id", sa.Uuid(), nullable=False),
        sa.Column("leakage_type_id", sa.Uuid(), nullable=True),
        sa.Column("severity", sa.Text(), nullable=False, server_default="None"),
        sa.Column("status", sa.Text(), nullable=False, server_default="Pending"),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["machine_id"], ["machines.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["tester_id"], ["profiles.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["leakage_type_id"], ["leakage_types.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "severity IN ('None', 'Low', 'Medium', 'High')", name="ck_inspection_records_severity"
        ),
        sa.CheckConstraint(
            "status IN ('Pending', 'Completed', 'Delayed')", name="ck_inspection_records_status"
        ),
    )
    op.create_index("ix_inspection_records_machine_id", "inspection_records", ["machine_id"])
    op.create_index("ix_inspection_records_tester_id", "inspection_records", ["tester_id"])
    op.create_index("ix_inspection_records_status", "inspection_records", ["status"])
    op.create_index("ix_inspection_records_created_at", "inspection_records", ["created_at"])

    op.create_table(
        "repair_records",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("inspection_id", sa.Uuid(), nullable=False),
        sa.Column("repairman_id", sa.Uuid(), nullable=False),
        sa.Column("repair_status", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["inspection_id"], ["inspection_records.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["repairman_id"], ["profiles.id"], ondelete="RESTRICT"),
        sa.CheckConstraint(
            "repair_status IN ('Repairable', 'Not Repairable')", name="ck_repair_records_repair_status"
        ),
    )
    op.create_index("ix_repair_records_inspection_id", "repair_records", ["inspection_id"])
    op.create_index("ix_repair_records_repairman_id", "repair_records", ["repairman_id"])


def downgrade() -> None:
    op.drop_table("repair_records")
    op.drop_table("inspection_records")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_table("machines")
    op.drop_table("leakage_types")
    op.drop_table("models")
    op.drop_table("product_lines")
