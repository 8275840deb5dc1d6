from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id, utcnow


class Course(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "courses"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(200), nullable=False)
    code = db.Column(db.String(40), nullable=False, unique=True)
    description = db.Column(db.Text)
    duration = db.Column(db.Integer)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    teacher_id = db.Column(db.String(32), db.ForeignKey("teachers.id", ondelete="SET NULL"))
    classroom_id = db.Column(db.String(32), db.ForeignKey("classrooms.id", ondelete="SET NULL"))
    schedule = db.Column(db.String(200))
    start_date = db.Column(db.Date)
    end_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default="active")  # active | inactive | completed

    teacher = db.relationship("Teacher")
    classroom = db.relationship("Classroom")

    def __repr__(self):
        return f"<Course {self.code}>"


class Enrollment(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "enrollments"
    __table_args__ = (db.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),)

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    student_id = db.Column(db.String(32), db.ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id = db.Column(db.String(32), db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    enrollment_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    status = db.Column(db.String(20), nullable=False, default="active")

    student = db.relationship("Student")
    course = db.relationship("Course")

    def __repr__(self):
        return f"<Enrollment {self.student_id} -> {self.course_id}>"
