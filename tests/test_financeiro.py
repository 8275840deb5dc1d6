from datetime import date
from decimal import Decimal

from escola.actions import financeiro
from escola.extensions import db
from escola.models import FinancialTransaction, Invoice, Payment


class TestTransacoes:

    def test_create_and_totals(self, people, act_as):
        with act_as(people.admin):
            financeiro.create_transaction({
                "type": "income", "category": "Mensalidade", "description": "Março",
                "amount": "R$ 1.200,00", "due_date": "2024-03-10",
            })
            financeiro.create_transaction({
                "type": "expense", "category": "Limpeza", "description": "Material",
                "amount": "150,50", "due_date": "2024-03-15",
            })
            result = financeiro.list_transactions({})
        assert len(result["transactions"]) == 2
        assert Decimal(result["totals"]["income"]) == Decimal("1200.00")
        assert Decimal(result["totals"]["expense"]) == Decimal("150.50")
        assert Decimal(result["totals"]["balance"]) == Decimal("1049.50")

    def test_filters(self, people, act_as):
        with act_as(people.admin):
            for due, kind in [("2024-01-05", "income"), ("2024-02-05", "income"), ("2024-02-06", "expense")]:
                financeiro.create_transaction({
                    "type": kind, "category": "Geral", "description": "x", "amount": 10, "due_date": due,
                })
            feb = financeiro.list_transactions({"start": "2024-02-01", "end": "2024-02-28"})
            income = financeiro.list_transactions({"type": "income"})
        assert len(feb["transactions"]) == 2
        assert len(income["transactions"]) == 2

    def test_amount_must_be_positive(self, people, act_as):
        with act_as(people.admin):
            result = financeiro.create_transaction({
                "type": "income", "category": "Geral", "description": "x", "amount": "0", "due_date": "2024-01-01",
            })
        assert "amount" in result["validationErrors"]

    def test_unknown_links(self, people, act_as):
        with act_as(people.admin):
            result = financeiro.create_transaction({
                "type": "income", "category": "Geral", "description": "x", "amount": 1,
                "due_date": "2024-01-01", "student_id": "nao-existe",
            })
        assert result["validationErrors"] == {"student_id": "Aluno não encontrado"}

    def test_update_and_delete(self, people, act_as):
        with act_as(people.admin):
            tx = financeiro.create_transaction({
                "type": "expense", "category": "Luz", "description": "Conta", "amount": 300, "due_date": "2024-04-01",
            })
            financeiro.update_transaction({"id": tx["id"], "status": "paid", "payment_date": "2024-04-02"})
            row = db.session.get(FinancialTransaction, tx["id"])
            assert row.status == "paid"
            assert row.payment_date == date(2024, 4, 2)
            assert financeiro.delete_transaction({"id": tx["id"]})["success"]
            assert FinancialTransaction.query.count() == 0

    def test_teacher_is_forbidden(self, people, act_as):
        with act_as(people.teacher_user):
            assert financeiro.list_transactions({})["kind"] == "Forbidden"


class TestBoletos:

    def test_create_invoice_numbers_are_unique(self, people, act_as):
        with act_as(people.admin):
            first = financeiro.create_invoice({"student_id": people.student, "amount": "250", "due_date": "2024-05-10"})
            second = financeiro.create_invoice({"student_id": people.student, "amount": "250", "due_date": "2024-06-10"})
        assert first["invoice_number"].startswith("INV-")
        assert first["invoice_number"] != second["invoice_number"]

    def test_mark_paid_sets_payment_date(self, people, act_as):
        with act_as(people.admin):
            inv = financeiro.create_invoice({"student_id": people.student, "amount": "250", "due_date": "2024-05-10"})
            financeiro.update_invoice_status({"id": inv["id"], "status": "paid", "payment_date": "2024-05-09"})
            row = db.session.get(Invoice, inv["id"])
            assert row.status == "paid"
            assert row.payment_date == date(2024, 5, 9)

            financeiro.update_invoice_status({"id": inv["id"], "status": "overdue"})
            assert db.session.get(Invoice, inv["id"]).payment_date is None

    def test_list_by_student(self, people, act_as):
        with act_as(people.admin):
            financeiro.create_invoice({"student_id": people.student, "amount": "250", "due_date": "2024-05-10"})
            assert len(financeiro.list_invoices({"student_id": people.student})["invoices"]) == 1
            assert financeiro.list_invoices({"student_id": "outro"})["invoices"] == []


class TestPagamentos:

    def test_crud(self, people, act_as):
        with act_as(people.admin):
            created = financeiro.create_payment({
                "teacher_id": people.teacher, "amount": "3.000,00", "payment_date": "2024-03-05",
                "reference_month": "Fevereiro", "reference_year": 2024,
            })
            assert financeiro.update_payment({"id": created["id"], "status": "paid"})["success"]
            assert db.session.get(Payment, created["id"]).status == "paid"
            assert len(financeiro.list_payments({"teacher_id": people.teacher})["payments"]) == 1
            assert financeiro.delete_payment({"id": created["id"]})["success"]

    def test_reference_year_range(self, people, act_as):
        with act_as(people.admin):
            result = financeiro.create_payment({
                "teacher_id": people.teacher, "amount": 10, "payment_date": "2024-03-05",
                "reference_month": "Março", "reference_year": 1999,
            })
        assert "reference_year" in result["validationErrors"]
