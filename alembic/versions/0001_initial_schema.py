"""initial schema: licenses, people, links, mail logs, templates, smtp settings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "licenses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("provider", sa.String(length=255), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=True),
        sa.Column("issued_date", sa.Date(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="ACTIVE"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notify_six_month", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notify_monthly", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notify_daily_last_30", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("six_month_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_licenses_id", "licenses", ["id"])
    op.create_index("ix_licenses_name", "licenses", ["name"])
    op.create_index("ix_licenses_expiry_date", "licenses", ["expiry_date"])
    op.create_index("ix_licenses_status", "licenses", ["status"])
    op.create_index("ix_licenses_status_expiry", "licenses", ["status", "expiry_date"])

    op.create_table(
        "people",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("designation", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="ACTIVE"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_people_id", "people", ["id"])
    op.create_index("uq_people_email_lower", "people", [sa.text("lower(email)")], unique=True)

    op.create_table(
        "license_people",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("license_id", sa.Integer(), sa.ForeignKey("licenses.id", ondelete="CASCADE"), nullable=False),
        sa.Column("person_id", sa.Integer(), sa.ForeignKey("people.id", ondelete="CASCADE"), nullable=False),
        sa.Column("responsibility", sa.String(length=20), nullable=False),
        sa.UniqueConstraint("license_id", "person_id", "responsibility", name="uq_license_person_role"),
        sa.CheckConstraint(
            "responsibility IN ('RESPONSIBLE', 'STAKEHOLDER')",
            name="ck_license_people_responsibility",
        ),
    )
    op.create_index("ix_license_people_id", "license_people", ["id"])
    op.create_index("ix_license_people_license_id", "license_people", ["license_id"])
    op.create_index("ix_license_people_person_id", "license_people", ["person_id"])

    op.create_table(
        "mail_logs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("license_id", sa.Integer(), sa.ForeignKey("licenses.id", ondelete="SET NULL"), nullable=True),
        sa.Column("person_id", sa.Integer(), sa.ForeignKey("people.id", ondelete="SET NULL"), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("mail_type", sa.String(length=20), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_mail_logs_id", "mail_logs", ["id"])
    op.create_index("ix_mail_logs_license_id", "mail_logs", ["license_id"])
    op.create_index("ix_mail_logs_person_id", "mail_logs", ["person_id"])
    op.create_index("ix_mail_logs_sent_at", "mail_logs", ["sent_at"])

    op.create_table(
        "message_templates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("responsible_subject", sa.Text(), nullable=False),
        sa.Column("responsible_body", sa.Text(), nullable=False),
        sa.Column("stakeholder_subject", sa.Text(), nullable=False),
        sa.Column("stakeholder_body", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "smtp_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sender_email", sa.String(length=320), nullable=True),
        sa.Column("sender_password_enc", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("smtp_settings")
    op.drop_table("message_templates")
    op.drop_index("ix_mail_logs_sent_at", table_name="mail_logs")
    op.drop_index("ix_mail_logs_person_id", table_name="mail_logs")
    op.drop_index("ix_mail_logs_license_id", table_name="mail_logs")
    op.drop_index("ix_mail_logs_id", table_name="mail_logs")
    op.drop_table("mail_logs")
    op.drop_index("ix_license_people_person_id", table_name="license_people")
    op.drop_index("ix_license_people_license_id", table_name="license_people")
    op.drop_index("ix_license_people_id", table_name="license_people")
    op.drop_table("license_people")
    op.drop_index("uq_people_email_lower", table_name="people")
    op.drop_index("ix_people_id", table_name="people")
    op.drop_table("people")
    op.drop_index("ix_licenses_status_expiry", table_name="licenses")
    op.drop_index("ix_licenses_status", table_name="licenses")
    op.drop_index("ix_licenses_expiry_date", table_name="licenses")
    op.drop_index("ix_licenses_name", table_name="licenses")
    op.drop_index("ix_licenses_id", table_name="licenses")
    op.drop_table("licenses")
