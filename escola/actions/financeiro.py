import time
from datetime import date
from typing import Literal, Optional

from pydantic import Field

from escola.errors import NotFound, ValidationFailed
from escola.extensions import db
from escola.fields import Money, OptMoney, OptStr
from escola.models import Course, Enrollment, FinancialTransaction, Invoice, Payment, Student, Teacher
from escola.models.mixins import new_id
from escola.pipeline import ById, Schema, action_client

FINANCEIRO = ("/financeiro",)

TransactionType = Literal["income", "expense"]
Status = Literal["pending", "paid", "overdue"]
PaymentStatus = Literal["pending", "paid", "cancelled"]


# ------------------------- schemas -------------------------
class CreateTransactionInput(Schema):
    type: TransactionType
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)
    amount: Money = Field(gt=0)
    due_date: date
    payment_date: Optional[date] = None
    status: Status = "pending"
    student_id: OptStr = None
    teacher_id: OptStr = None
    course_id: OptStr = None


class UpdateTransactionInput(Schema):
    id: str = Field(min_length=1)
    type: Optional[TransactionType] = None
    category: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    amount: OptMoney = Field(default=None, gt=0)
    due_date: Optional[date] = None
    payment_date: Optional[date] = None
    status: Optional[Status] = None


class ListTransactionsInput(Schema):
    type: Optional[TransactionType] = None
    status: Optional[Status] = None
    start: Optional[date] = None
    end: Optional[date] = None


class CreateInvoiceInput(Schema):
    student_id: str = Field(min_length=1)
    enrollment_id: OptStr = None
    amount: Money = Field(gt=0)
    description: OptStr = None
    due_date: date


class UpdateInvoiceStatusInput(Schema):
    id: str = Field(min_length=1)
    status: Status
    payment_date: Optional[date] = None


class ListInvoicesInput(Schema):
    student_id: OptStr = None
    status: Optional[Status] = None


class CreatePaymentInput(Schema):
    teacher_id: str = Field(min_length=1)
    amount: Money = Field(gt=0)
    payment_date: date
    reference_month: str = Field(min_length=1)
    reference_year: int = Field(ge=2000, le=2100)
    description: OptStr = None
    status: PaymentStatus = "pending"


class UpdatePaymentInput(Schema):
    id: str = Field(min_length=1)
    amount: OptMoney = Field(default=None, gt=0)
    payment_date: Optional[date] = None
    reference_month: Optional[str] = Field(default=None, min_length=1)
    reference_year: Optional[int] = Field(default=None, ge=2000, le=2100)
    description: OptStr = None
    status: Optional[PaymentStatus] = None


class ListPaymentsInput(Schema):
    teacher_id: OptStr = None


def _get(model, obj_id, message):
    obj = db.session.get(model, obj_id)
    if obj is None:
        raise NotFound(message)
    return obj


def _check_links(student_id=None, teacher_id=None, course_id=None, enrollment_id=None):
    errors = {}
    if student_id and db.session.get(Student, student_id) is None:
        errors["student_id"] = "Aluno não encontrado"
    if teacher_id and db.session.get(Teacher, teacher_id) is None:
        errors["teacher_id"] = "Professor não encontrado"
    if course_id and db.session.get(Course, course_id) is None:
        errors["course_id"] = "Curso não encontrado"
    if enrollment_id:
        enrollment = db.session.get(Enrollment, enrollment_id)
        if enrollment is None:
            errors["enrollment_id"] = "Matrícula não encontrada"
        elif student_id and enrollment.student_id != student_id:
            errors["enrollment_id"] = "Matrícula não pertence ao aluno"
    if errors:
        raise ValidationFailed(errors)


def _apply(obj, changes, required=()):
    for key, value in changes.items():
        if value is None and key in required:
            continue
        setattr(obj, key, value)


# ------------------------- transações -------------------------
@action_client.action(CreateTransactionInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def create_transaction(data, caller):
    _check_links(student_id=data.student_id, teacher_id=data.teacher_id, course_id=data.course_id)
    tx = FinancialTransaction(**data.model_dump())
    db.session.add(tx)
    db.session.commit()
    return {"id": tx.id}


@action_client.action(UpdateTransactionInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def update_transaction(data, caller):
    tx = _get(FinancialTransaction, data.id, "Transação não encontrada")
    _apply(
        tx,
        data.model_dump(exclude_unset=True, exclude={"id"}),
        required=("type", "category", "description", "amount", "due_date", "status"),
    )
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def delete_transaction(data, caller):
    tx = _get(FinancialTransaction, data.id, "Transação não encontrada")
    db.session.delete(tx)
    db.session.commit()
    return {}


@action_client.action(ListTransactionsInput, perm="gerenciar_financeiro")
def list_transactions(data, caller):
    q = FinancialTransaction.query
    if data.type:
        q = q.filter(FinancialTransaction.type == data.type)
    if data.status:
        q = q.filter(FinancialTransaction.status == data.status)
    if data.start:
        q = q.filter(FinancialTransaction.due_date >= data.start)
    if data.end:
        q = q.filter(FinancialTransaction.due_date <= data.end)
    rows = q.order_by(FinancialTransaction.due_date.desc()).all()

    income = sum((t.amount for t in rows if t.type == "income"), start=0)
    expense = sum((t.amount for t in rows if t.type == "expense"), start=0)
    return {
        "transactions": [t.to_dict() for t in rows],
        "totals": {"income": str(income), "expense": str(expense), "balance": str(income - expense)},
    }


# ------------------------- boletos -------------------------
def _invoice_number() -> str:
    return f"INV-{int(time.time() * 1000)}-{new_id()[:4].upper()}"


@action_client.action(CreateInvoiceInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def create_invoice(data, caller):
    _check_links(student_id=data.student_id, enrollment_id=data.enrollment_id)
    invoice = Invoice(invoice_number=_invoice_number(), status="pending", **data.model_dump())
    db.session.add(invoice)
    db.session.commit()
    return {"id": invoice.id, "invoice_number": invoice.invoice_number}


@action_client.action(UpdateInvoiceStatusInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def update_invoice_status(data, caller):
    invoice = _get(Invoice, data.id, "Boleto não encontrado")
    invoice.status = data.status
    if data.status == "paid":
        invoice.payment_date = data.payment_date or date.today()
    else:
        invoice.payment_date = None
    db.session.commit()
    return {}


@action_client.action(ListInvoicesInput, perm="gerenciar_financeiro")
def list_invoices(data, caller):
    q = Invoice.query
    if data.student_id:
        q = q.filter(Invoice.student_id == data.student_id)
    if data.status:
        q = q.filter(Invoice.status == data.status)
    rows = q.order_by(Invoice.due_date.desc()).all()
    return {"invoices": [i.to_dict() for i in rows]}


# ------------------------- pagamentos de professores -------------------------
@action_client.action(CreatePaymentInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def create_payment(data, caller):
    _check_links(teacher_id=data.teacher_id)
    payment = Payment(**data.model_dump())
    db.session.add(payment)
    db.session.commit()
    return {"id": payment.id}


@action_client.action(UpdatePaymentInput, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def update_payment(data, caller):
    payment = _get(Payment, data.id, "Pagamento não encontrado")
    _apply(
        payment,
        data.model_dump(exclude_unset=True, exclude={"id"}),
        required=("amount", "payment_date", "reference_month", "reference_year", "status"),
    )
    db.session.commit()
    return {}


@action_client.action(ById, perm="gerenciar_financeiro", revalidate=FINANCEIRO)
def delete_payment(data, caller):
    payment = _get(Payment, data.id, "Pagamento não encontrado")
    db.session.delete(payment)
    db.session.commit()
    return {}


@action_client.action(ListPaymentsInput, perm="gerenciar_financeiro")
def list_payments(data, caller):
    q = Payment.query
    if data.teacher_id:
        q = q.filter(Payment.teacher_id == data.teacher_id)
    rows = q.order_by(Payment.payment_date.desc()).all()
    return {"payments": [p.to_dict() for p in rows]}
