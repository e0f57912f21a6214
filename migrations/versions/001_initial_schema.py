"""Initial schema: riders, drivers and rides.

Revision ID: 001
Create Date: 2026-10-16
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── users (riders) ────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=True),
        sa.Column("phone_number", sa.String(20), unique=True, nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=True),
        sa.Column("notification_token", sa.String(255), nullable=True),
        sa.Column("ratings", sa.Float, default=0.0, nullable=False),
        sa.Column("total_rides", sa.Integer, default=0, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── drivers ───────────────────────────────────────────────────────
    op.create_table(
        "drivers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(120), nullable=False),
        sa.Column("country", sa.String(80), nullable=False),
        sa.Column("phone_number", sa.String(20), unique=True, nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column(
            "vehicle_type",
            sa.Enum("Car", "Motorcycle", "cng", name="vehicletype"),
            nullable=False,
        ),
        sa.Column(
            "registration_number", sa.String(40), unique=True, nullable=False
        ),
        sa.Column("registration_date", sa.Date, nullable=False),
        sa.Column("driving_license", sa.String(40), nullable=False),
        sa.Column("vehicle_color", sa.String(40), nullable=True),
        sa.Column("rate", sa.Float, nullable=False),
        sa.Column("ratings", sa.Float, default=0.0, nullable=False),
        sa.Column("total_earning", sa.Float, default=0.0, nullable=False),
        sa.Column("total_rides", sa.Integer, default=0, nullable=False),
        sa.Column("pending_rides", sa.Integer, default=0, nullable=False),
        sa.Column("cancel_rides", sa.Integer, default=0, nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "inactive", name="driverstatus"),
            default="inactive",
            nullable=False,
        ),
        sa.Column("notification_token", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── rides ─────────────────────────────────────────────────────────
    op.create_table(
        "rides",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column(
            "driver_id", sa.Integer, sa.ForeignKey("drivers.id"), nullable=False
        ),
        sa.Column("charge", sa.Float, nullable=False),
        sa.Column("current_location_name", sa.String(255), nullable=False),
        sa.Column("destination_location_name", sa.String(255), nullable=False),
        sa.Column("distance", sa.Float, nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "Processing",
                "Ongoing",
                "Completed",
                "Cancelled",
                name="ridestatus",
            ),
            default="Processing",
            nullable=False,
        ),
        sa.Column("rating", sa.Float, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_rides_user", "rides", ["user_id"])
    op.create_index("idx_rides_driver", "rides", ["driver_id"])
    op.create_index("idx_rides_status", "rides", ["status"])


def downgrade() -> None:
    op.drop_table("rides")
    op.drop_table("drivers")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS ridestatus")
    op.execute("DROP TYPE IF EXISTS driverstatus")
    op.execute("DROP TYPE IF EXISTS vehicletype")
