"""students, class subjects, assessments and attendance

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


gender_enum = sa.Enum("MALE", "FEMALE", "OTHER", name="gender")
term_period_enum = sa.Enum("FIRST_TERM", "SECOND_TERM", "THIRD_TERM", name="term_period")
# Shared by two tables, so the type is created once up front.
term_period_column = postgresql.ENUM(
    "FIRST_TERM", "SECOND_TERM", "THIRD_TERM", name="term_period", create_type=False
)
attendance_status_enum = sa.Enum("PRESENT", "ABSENT", "LATE", "EXCUSED", name="attendance_status")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _school_fk() -> sa.Column:
    return sa.Column(
        "school_id", sa.String(length=36), sa.ForeignKey("schools.id", ondelete="CASCADE"), nullable=False
    )


def _user_fk(name: str) -> sa.Column:
    return sa.Column(name, sa.String(length=36), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


def upgrade() -> None:
    term_period_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "class_subject_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "class_id", "subject_id", "academic_year", name="uq_class_subject_assignments_class_subject_year"
        ),
    )
    op.create_index("ix_class_subject_assignments_class_id", "class_subject_assignments", ["class_id"])
    op.create_index("ix_class_subject_assignments_subject_id", "class_subject_assignments", ["subject_id"])
    op.create_index("ix_class_subject_assignments_teacher_id", "class_subject_assignments", ["teacher_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("student_id_number", sa.String(length=50), nullable=False),
        sa.Column("first_name", sa.String(length=50), nullable=False),
        sa.Column("middle_name", sa.String(length=50), nullable=True),
        sa.Column("last_name", sa.String(length=50), nullable=False),
        sa.Column("date_of_birth", sa.Date(), nullable=False),
        sa.Column("gender", gender_enum, nullable=False),
        sa.Column("enrollment_date", sa.Date(), nullable=False),
        sa.Column(
            "current_class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="SET NULL"), nullable=True
        ),
        sa.Column("address", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=50), nullable=True),
        sa.Column("state_or_region", sa.String(length=50), nullable=True),
        sa.Column("country", sa.String(length=50), nullable=True),
        sa.Column("postal_code", sa.String(length=20), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=100), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=20), nullable=True),
        sa.Column("blood_group", sa.String(length=5), nullable=True),
        sa.Column("allergies", sa.String(length=500), nullable=True),
        sa.Column("medical_notes", sa.String(length=1000), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("school_id", "student_id_number", name="uq_students_school_id_number"),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index("ix_students_current_class_id", "students", ["current_class_id"])

    op.create_table(
        "assessments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("subject_id", sa.String(length=36), sa.ForeignKey("subjects.id"), nullable=False),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("term", term_period_column, nullable=False),
        sa.Column("max_marks", sa.Float(), nullable=False),
        sa.Column("assessment_date", sa.Date(), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        _user_fk("created_by_user_id"),
        *_timestamps(),
        sa.UniqueConstraint(
            "class_id", "subject_id", "academic_year", "term", "name", name="uq_assessments_definition"
        ),
    )
    op.create_index("ix_assessments_school_id", "assessments", ["school_id"])
    op.create_index("ix_assessments_class_id", "assessments", ["class_id"])
    op.create_index("ix_assessments_subject_id", "assessments", ["subject_id"])

    op.create_table(
        "student_marks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "assessment_id", sa.String(length=36), sa.ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("marks_obtained", sa.Float(), nullable=True),
        sa.Column("remarks", sa.String(length=500), nullable=True),
        _user_fk("recorded_by_id"),
        *_timestamps(),
        sa.UniqueConstraint("assessment_id", "student_id", name="uq_student_marks_assessment_student"),
    )
    op.create_index("ix_student_marks_assessment_id", "student_marks", ["assessment_id"])
    op.create_index("ix_student_marks_student_id", "student_marks", ["student_id"])

    op.create_table(
        "student_attendance",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        _school_fk(),
        sa.Column("student_id", sa.String(length=36), sa.ForeignKey("students.id", ondelete="CASCADE"), nullable=False),
        sa.Column("class_id", sa.String(length=36), sa.ForeignKey("classes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("academic_year", sa.String(length=9), nullable=False),
        sa.Column("term", term_period_column, nullable=False),
        sa.Column("status", attendance_status_enum, nullable=False),
        sa.Column("remarks", sa.String(length=255), nullable=True),
        _user_fk("recorded_by_id"),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "attendance_date", "class_id", "academic_year", "term", name="uq_student_attendance_daily"
        ),
    )
    op.create_index("ix_student_attendance_school_id", "student_attendance", ["school_id"])
    op.create_index("ix_student_attendance_student_id", "student_attendance", ["student_id"])
    op.create_index("ix_student_attendance_class_id", "student_attendance", ["class_id"])


def downgrade() -> None:
    op.drop_index("ix_student_attendance_class_id", table_name="student_attendance")
    op.drop_index("ix_student_attendance_student_id", table_name="student_attendance")
    op.drop_index("ix_student_attendance_school_id", table_name="student_attendance")
    op.drop_table("student_attendance")
    op.drop_index("ix_student_marks_student_id", table_name="student_marks")
    op.drop_index("ix_student_marks_assessment_id", table_name="student_marks")
    op.drop_table("student_marks")
    op.drop_index("ix_assessments_subject_id", table_name="assessments")
    op.drop_index("ix_assessments_class_id", table_name="assessments")
    op.drop_index("ix_assessments_school_id", table_name="assessments")
    op.drop_table("assessments")
    op.drop_index("ix_students_current_class_id", table_name="students")
    op.drop_index("ix_students_school_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_class_subject_assignments_teacher_id", table_name="class_subject_assignments")
    op.drop_index("ix_class_subject_assignments_subject_id", table_name="class_subject_assignments")
    op.drop_index("ix_class_subject_assignments_class_id", table_name="class_subject_assignments")
    op.drop_table("class_subject_assignments")
    attendance_status_enum.drop(op.get_bind(), checkfirst=True)
    term_period_enum.drop(op.get_bind(), checkfirst=True)
    gender_enum.drop(op.get_bind(), checkfirst=True)
