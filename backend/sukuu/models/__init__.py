from sukuu.models.activity_log import ActivityLog  # noqa: F401
from sukuu.models.assessment import Assessment, StudentMark, TermPeriod  # noqa: F401
from sukuu.models.attendance import AttendanceStatus, StudentAttendance  # noqa: F401
from sukuu.models.grading import GradeScale, GradeScaleEntry  # noqa: F401
from sukuu.models.school import School, SchoolAdmin  # noqa: F401
from sukuu.models.school_class import ClassSubjectAssignment, SchoolClass  # noqa: F401
from sukuu.models.student import Gender, Student  # noqa: F401
from sukuu.models.subject import Subject  # noqa: F401
from sukuu.models.teacher import Teacher  # noqa: F401
from sukuu.models.timetable import DayOfWeek, SchoolPeriod, TimetableSlot  # noqa: F401
from sukuu.models.user import User, UserRole  # noqa: F401
