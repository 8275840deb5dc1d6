from escola.extensions import db
from .mixins import SerializerMixin, TimestampMixin, new_id


class Invoice(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    student_id = db.Column(db.String(32), db.ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    enrollment_id = db.Column(db.String(32), db.ForeignKey("enrollments.id", ondelete="SET NULL"))
    invoice_number = db.Column(db.String(40), nullable=False, unique=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    description = db.Column(db.Text)
    due_date = db.Column(db.Date, nullable=False)
    payment_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending | paid | overdue
    barcode = db.Column(db.String(120))
    pdf_url = db.Column(db.String(255))

    def __repr__(self):
        return f"<Invoice {self.invoice_number} {self.status}>"


class FinancialTransaction(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "financial_transactions"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    type = db.Column(db.String(20), nullable=False)  # income | expense
    category = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    payment_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending | paid | overdue
    student_id = db.Column(db.String(32), db.ForeignKey("students.id", ondelete="SET NULL"))
    teacher_id = db.Column(db.String(32), db.ForeignKey("teachers.id", ondelete="SET NULL"))
    course_id = db.Column(db.String(32), db.ForeignKey("courses.id", ondelete="SET NULL"))
    invoice_id = db.Column(db.String(32), db.ForeignKey("invoices.id", ondelete="SET NULL"))

    def __repr__(self):
        return f"<FinancialTransaction {self.type} {self.amount}>"


class Payment(TimestampMixin, SerializerMixin, db.Model):
    __tablename__ = "payments"

    id = db.Column(db.String(32), primary_key=True, default=new_id)
    teacher_id = db.Column(db.String(32), db.ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    reference_month = db.Column(db.String(20), nullable=False)
    reference_year = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default="pending")

    def __repr__(self):
        return f"<Payment {self.teacher_id} {self.reference_month}/{self.reference_year}>"
