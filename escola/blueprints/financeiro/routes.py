from escola.actions import financeiro as actions
from escola.http import call

from . import financeiro_bp


# ------------------------- transações -------------------------
@financeiro_bp.get("/transacoes")
def listar_transacoes():
    return call(actions.list_transactions)


@financeiro_bp.post("/transacoes")
def criar_transacao():
    return call(actions.create_transaction)


@financeiro_bp.route("/transacoes/<tx_id>", methods=["PUT", "PATCH"])
def editar_transacao(tx_id):
    return call(actions.update_transaction, id=tx_id)


@financeiro_bp.delete("/transacoes/<tx_id>")
def excluir_transacao(tx_id):
    return call(actions.delete_transaction, id=tx_id)


# ------------------------- boletos -------------------------
@financeiro_bp.get("/boletos")
def listar_boletos():
    return call(actions.list_invoices)


@financeiro_bp.post("/boletos")
def criar_boleto():
    return call(actions.create_invoice)


@financeiro_bp.route("/boletos/<invoice_id>/status", methods=["PUT", "PATCH"])
def status_boleto(invoice_id):
    return call(actions.update_invoice_status, id=invoice_id)


# ------------------------- pagamentos -------------------------
@financeiro_bp.get("/pagamentos")
def listar_pagamentos():
    return call(actions.list_payments)


@financeiro_bp.post("/pagamentos")
def criar_pagamento():
    return call(actions.create_payment)


@financeiro_bp.route("/pagamentos/<payment_id>", methods=["PUT", "PATCH"])
def editar_pagamento(payment_id):
    return call(actions.update_payment, id=payment_id)


@financeiro_bp.delete("/pagamentos/<payment_id>")
def excluir_pagamento(payment_id):
    return call(actions.delete_payment, id=payment_id)
