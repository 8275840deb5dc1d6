from .user import User
from .student import Student
from .teacher import Teacher
from .classroom import Classroom
from .course import Course, Enrollment
from .attendance import Attendance
from .assignment import Assignment, Grade
from .material import Material, MaterialMovement
from .financeiro import FinancialTransaction, Invoice, Payment

__all__ = [
    "User", "Student", "Teacher", "Classroom", "Course", "Enrollment",
    "Attendance", "Assignment", "Grade", "Material", "MaterialMovement",
    "FinancialTransaction", "Invoice", "Payment",
]
