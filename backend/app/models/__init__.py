from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.class_group import ClassGroup  # noqa: F401
from app.models.curriculum import ClassSubject, TrainerSubjectAssignment  # noqa: F401
from app.models.lesson_period import LessonPeriod  # noqa: F401
from app.models.room import Room, RoomType  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.term import Term, TermClass  # noqa: F401
from app.models.timetable_slot import SlotStatus, TimetableSlot  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
