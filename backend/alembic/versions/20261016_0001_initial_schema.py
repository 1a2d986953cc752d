"""Initial school portal schema."""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None


ATTENDANCE_STATUS = sa.Enum(
    "Present",
    "Absent",
    "Late",
    "Leave",
    name="attendance_status_enum",
    native_enum=False,
    length=10,
)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "districts",
        sa.Column("district_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
        sa.Column("code", sa.String(length=20), nullable=True, unique=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "blocks",
        sa.Column("block_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "district_id",
            sa.Integer(),
            sa.ForeignKey("districts.district_id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=100), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("blocks_district_idx", "blocks", ["district_id"])

    op.create_table(
        "schools",
        sa.Column("school_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "block_id",
            sa.Integer(),
            sa.ForeignKey("blocks.block_id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("school_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("total_students", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_teachers", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        sa.Column("established_year", sa.Integer(), nullable=True),
        sa.Column("facilities", sa.JSON(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("total_students >= 0", name="ck_schools_total_students_non_negative"),
        sa.CheckConstraint("total_teachers >= 0", name="ck_schools_total_teachers_non_negative"),
    )
    op.create_index("schools_block_status_idx", "schools", ["block_id", "status"])
    op.create_index("schools_name_idx", "schools", ["name"])

    op.create_table(
        "students",
        sa.Column("student_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "school_id",
            sa.Integer(),
            sa.ForeignKey("schools.school_id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("admission_no", sa.String(length=30), nullable=False),
        sa.Column("roll_no", sa.Integer(), nullable=True),
        sa.Column("first_name", sa.String(length=60), nullable=False),
        sa.Column("last_name", sa.String(length=60), nullable=False),
        sa.Column("gender", sa.String(length=10), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("class_number", sa.Integer(), nullable=False),
        sa.Column("section", sa.String(length=5), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=True),
        sa.Column("guardian_name", sa.String(length=120), nullable=True),
        sa.Column("guardian_phone", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "students_admission_school_idx", "students", ["admission_no", "school_id"]
    )
    op.create_index(
        "students_school_class_idx", "students", ["school_id", "class_number", "section"]
    )
    op.create_index("students_name_idx", "students", ["last_name", "first_name"])

    op.create_table(
        "teachers",
        sa.Column("teacher_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "school_id",
            sa.Integer(),
            sa.ForeignKey("schools.school_id", onupdate="CASCADE"),
            nullable=False,
        ),
        sa.Column("employee_code", sa.String(length=30), nullable=False, unique=True),
        sa.Column("first_name", sa.String(length=60), nullable=False),
        sa.Column("last_name", sa.String(length=60), nullable=False),
        sa.Column("subject", sa.String(length=60), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index("teachers_school_status_idx", "teachers", ["school_id", "status"])

    op.create_table(
        "student_attendance",
        sa.Column("attendance_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.student_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("status", ATTENDANCE_STATUS, nullable=False),
        _timestamp("created_at"),
    )
    op.create_index(
        "student_attendance_student_date_idx",
        "student_attendance",
        ["student_id", "attendance_date"],
    )
    op.create_index("student_attendance_date_idx", "student_attendance", ["attendance_date"])

    op.create_table(
        "student_attendance_archive",
        sa.Column("attendance_id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("status", ATTENDANCE_STATUS, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "examinations",
        sa.Column("exam_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("class_number", sa.Integer(), nullable=True),
        sa.Column("exam_date", sa.Date(), nullable=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "exam_results",
        sa.Column("result_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "exam_id",
            sa.Integer(),
            sa.ForeignKey("examinations.exam_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.student_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("subject", sa.String(length=60), nullable=False),
        sa.Column("marks_obtained", sa.Numeric(5, 2), nullable=False),
        sa.Column("max_marks", sa.Numeric(5, 2), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index(
        "exam_results_exam_student_idx", "exam_results", ["exam_id", "student_id"]
    )

    op.create_table(
        "fee_payments",
        sa.Column("payment_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("students.student_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("paid_on", sa.Date(), nullable=False),
        sa.Column("method", sa.String(length=30), nullable=True),
        sa.Column("receipt_no", sa.String(length=40), nullable=True, unique=True),
        _timestamp("created_at"),
    )
    op.create_index("fee_payments_student_date_idx", "fee_payments", ["student_id", "paid_on"])

    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(length=60), nullable=False, unique=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("role", sa.String(length=30), nullable=False, server_default="viewer"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
    )


def downgrade() -> None:
    op.drop_table("users")
    op.drop_index("fee_payments_student_date_idx", table_name="fee_payments")
    op.drop_table("fee_payments")
    op.drop_index("exam_results_exam_student_idx", table_name="exam_results")
    op.drop_table("exam_results")
    op.drop_table("examinations")
    op.drop_table("student_attendance_archive")
    op.drop_index("student_attendance_date_idx", table_name="student_attendance")
    op.drop_index("student_attendance_student_date_idx", table_name="student_attendance")
    op.drop_table("student_attendance")
    op.drop_index("teachers_school_status_idx", table_name="teachers")
    op.drop_table("teachers")
    op.drop_index("students_name_idx", table_name="students")
    op.drop_index("students_school_class_idx", table_name="students")
    op.drop_index("students_admission_school_idx", table_name="students")
    op.drop_table("students")
    op.drop_index("schools_name_idx", table_name="schools")
    op.drop_index("schools_block_status_idx", table_name="schools")
    op.drop_table("schools")
    op.drop_index("blocks_district_idx", table_name="blocks")
    op.drop_table("blocks")
    op.drop_table("districts")
