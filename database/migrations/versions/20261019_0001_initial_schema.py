"""initial schema

Revision ID: 20261019_0001
Revises: None
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("SUPER_ADMIN", "SCHOOL_ADMIN", "TEACHER", name="user_role")
day_of_week_enum = sa.Enum(
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY", name="day_of_week"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _school_fk() -> sa.Column:
    return sa.Column(
        "school_id", sa.String(length=36), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "schools",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("school_email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=50), nullable=True),
        sa.Column("country", sa.String(length=50), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("current_academic_year", sa.String(length=9), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "school_admins",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        _school_fk(),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "school_id", name="uq_school_admins_user_school"),
    )
    op.create_index("ix_school_admins_user_id", "school_admins", ["user_id"])
    op.create_index("ix_school_admins_school_id", "school_admins", ["school_id"])

    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("staff_id", sa.String(length=50), nullable=True),
        sa.Column("phone_number", sa.String(length=20), nullable=True),
        sa.Column("qualifications", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "email", name="uq_teachers_school_email"),
        sa.UniqueConstraint("school_id", "staff_id", name="uq_teachers_school_staff_id"),
    )
    op.create_index("ix_teachers_school_id", "teachers", ["school_id"])

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=True),
        sa.Column("description", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "name", name="uq_subjects_school_name"),
        sa.UniqueConstraint("school_id", "code", name="uq_subjects_school_code"),
    )
    op.create_index("ix_subjects_school_id", "subjects", ["school_id"])

    op.create_table(
        "classes",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=True),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column(
            "homeroom_teacher_id",
            sa.String(length=36),
            sa.ForeignKey("teachers.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "school_id", "name", "section", "academic_year", name="uq_classes_school_name_section_year"
        ),
    )
    op.create_index("ix_classes_school_id", "classes", ["school_id"])

    op.create_table(
        "school_periods",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False),
        sa.Column("is_break", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "name", name="uq_school_periods_school_name"),
        sa.UniqueConstraint("school_id", "sort_order", name="uq_school_periods_school_sort_order"),
    )
    op.create_index("ix_school_periods_school_id", "school_periods", ["school_id"])

    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("day_of_week", day_of_week_enum, nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("room", sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("class_id", "day_of_week", "start_time", name="uq_timetable_slots_class_day_start"),
        sa.UniqueConstraint("teacher_id", "day_of_week", "start_time", name="uq_timetable_slots_teacher_day_start"),
        sa.UniqueConstraint(
            "school_id", "room", "day_of_week", "start_time", name="uq_timetable_slots_room_day_start"
        ),
    )
    op.create_index("ix_timetable_slots_school_id", "timetable_slots", ["school_id"])
    op.create_index("ix_timetable_slots_class_id", "timetable_slots", ["class_id"])
    op.create_index("ix_timetable_slots_teacher_id", "timetable_slots", ["teacher_id"])

    op.create_table(
        "grade_scales",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "name", name="uq_grade_scales_school_name"),
    )
    op.create_index("ix_grade_scales_school_id", "grade_scales", ["school_id"])

    op.create_table(
        "grade_scale_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "grade_scale_id",
            sa.String(length=36),
            sa.ForeignKey("grade_scales.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("min_percentage", sa.Float(), nullable=False),
        sa.Column("max_percentage", sa.Float(), nullable=False),
        sa.Column("grade_letter", sa.String(length=10), nullable=False),
        sa.Column("grade_point", sa.Float(), nullable=True),
        sa.Column("remark", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("grade_scale_id", "min_percentage", name="uq_grade_scale_entries_scale_min"),
    )
    op.create_index("ix_grade_scale_entries_grade_scale_id", "grade_scale_entries", ["grade_scale_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("school_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_school_id", "activity_logs", ["school_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_school_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_grade_scale_entries_grade_scale_id", table_name="grade_scale_entries")
    op.drop_table("grade_scale_entries")
    op.drop_index("ix_grade_scales_school_id", table_name="grade_scales")
    op.drop_table("grade_scales")
    op.drop_index("ix_timetable_slots_teacher_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_class_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_school_id", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    op.drop_index("ix_school_periods_school_id", table_name="school_periods")
    op.drop_table("school_periods")
    op.drop_index("ix_classes_school_id", table_name="classes")
    op.drop_table("classes")
    op.drop_index("ix_subjects_school_id", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_teachers_school_id", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("ix_school_admins_school_id", table_name="school_admins")
    op.drop_index("ix_school_admins_user_id", table_name="school_admins")
    op.drop_table("school_admins")
    op.drop_table("schools")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    day_of_week_enum.drop(op.get_bind(), checkfirst=True)
    user_role_enum.drop(op.get_bind(), checkfirst=True)
