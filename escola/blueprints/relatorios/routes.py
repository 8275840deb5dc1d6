from datetime import datetime, timedelta
from io import BytesIO

from flask import request, send_file
from sqlalchemy import or_

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from openpyxl import Workbook

from escola.extensions import db
from escola.ledger import stock_status
from escola.models import Material, MaterialMovement, User
from escola.permissions import perm_required

from . import relatorios_bp

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

STATUS_LABELS = {"critical": "Crítico", "low": "Baixo", "normal": "Normal", None: "-"}
DIRECTION_LABELS = {"entry": "Entrada", "exit": "Saída"}


# =========================
# Helpers
# =========================
def _parse_date(s: str | None):
    if not s:
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d")
    except ValueError:
        return None


def _wb_to_bytes(wb: Workbook) -> BytesIO:
    bio = BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio


def _send_xlsx(wb: Workbook, filename: str):
    return send_file(
        _wb_to_bytes(wb),
        as_attachment=True,
        download_name=filename,
        mimetype=XLSX_MIMETYPE,
    )


def _pdf_table(title: str, headers: list[str], rows: list[list[str]], filename: str):
    bio = BytesIO()
    c = canvas.Canvas(bio, pagesize=A4)
    w, h = A4

    x = 15 * mm
    y = h - 20 * mm

    c.setFont("Helvetica-Bold", 14)
    c.drawString(x, y, title)
    y -= 10 * mm

    c.setFont("Helvetica", 9)
    c.drawString(x, y, f"Gerado em: {datetime.now().strftime('%d/%m/%Y %H:%M')}")
    y -= 8 * mm

    colw = (w - 30 * mm) / max(1, len(headers))

    def header_row(y):
        c.setFont("Helvetica-Bold", 9)
        for i, head in enumerate(headers):
            c.drawString(x + i * colw, y, head[:28])
        c.setFont("Helvetica", 9)
        return y - 6 * mm

    y = header_row(y)
    for row in rows:
        if y < 20 * mm:
            c.showPage()
            y = header_row(h - 20 * mm)
        for i, cell in enumerate(row):
            c.drawString(x + i * colw, y, str(cell)[:28])
        y -= 5 * mm

    c.showPage()
    c.save()
    bio.seek(0)

    return send_file(bio, as_attachment=True, download_name=filename, mimetype="application/pdf")


def _materials():
    q = (request.args.get("q") or "").strip()
    query = Material.query
    if q:
        like = f"%{q}%"
        query = query.filter(or_(Material.name.ilike(like), Material.category.ilike(like)))
    return query.order_by(Material.name.asc()).all()


def _movements():
    de = _parse_date(request.args.get("de"))
    ate = _parse_date(request.args.get("ate"))

    query = (
        db.session.query(MaterialMovement, Material, User)
        .join(Material, MaterialMovement.material_id == Material.id)
        .outerjoin(User, MaterialMovement.user_id == User.id)
    )
    if de:
        query = query.filter(MaterialMovement.created_at >= de)
    if ate:
        # "ate" inclui o dia inteiro
        query = query.filter(MaterialMovement.created_at < ate + timedelta(days=1))
    return query.order_by(MaterialMovement.created_at.desc()).all()


# =========================
# 1) ESTOQUE ATUAL
# =========================
@relatorios_bp.get("/estoque.xlsx")
@perm_required("ver_relatorios")
def relatorio_estoque_xlsx():
    wb = Workbook()
    ws = wb.active
    ws.title = "Estoque Atual"
    ws.append(["Material", "Categoria", "Unidade", "Quantidade", "Mínimo", "Situação", "Preço", "Local"])

    for m in _materials():
        ws.append([
            m.name,
            m.category or "",
            m.unit,
            m.quantity,
            m.min_quantity,
            STATUS_LABELS[stock_status(m.quantity, m.min_quantity)],
            float(m.price) if m.price is not None else None,
            m.location or "",
        ])

    return _send_xlsx(wb, "relatorio_estoque.xlsx")


@relatorios_bp.get("/estoque.pdf")
@perm_required("ver_relatorios")
def relatorio_estoque_pdf():
    headers = ["Material", "Categoria", "Un", "Qtd", "Mín", "Situação"]
    rows = []
    for m in _materials():
        rows.append([
            m.name,
            m.category or "-",
            m.unit,
            str(m.quantity),
            str(m.min_quantity),
            STATUS_LABELS[stock_status(m.quantity, m.min_quantity)],
        ])

    return _pdf_table("Relatório de Estoque Atual", headers, rows, "relatorio_estoque.pdf")


# =========================
# 2) MOVIMENTAÇÕES POR PERÍODO
# =========================
@relatorios_bp.get("/movimentacoes.xlsx")
@perm_required("ver_relatorios")
def relatorio_movimentacoes_xlsx():
    wb = Workbook()
    ws = wb.active
    ws.title = "Movimentações"
    ws.append(["Data", "Material", "Tipo", "Quantidade", "Motivo", "Usuário"])

    for mov, material, user in _movements():
        ws.append([
            mov.created_at.strftime("%d/%m/%Y %H:%M"),
            material.name,
            DIRECTION_LABELS.get(mov.direction, mov.direction),
            mov.quantity,
            mov.reason or "",
            user.name if user else "",
        ])

    return _send_xlsx(wb, "relatorio_movimentacoes.xlsx")


@relatorios_bp.get("/movimentacoes.pdf")
@perm_required("ver_relatorios")
def relatorio_movimentacoes_pdf():
    headers = ["Data", "Material", "Tipo", "Qtd", "Motivo", "Usuário"]
    rows = []
    for mov, material, user in _movements():
        rows.append([
            mov.created_at.strftime("%d/%m/%Y %H:%M"),
            material.name,
            DIRECTION_LABELS.get(mov.direction, mov.direction),
            str(mov.quantity),
            mov.reason or "-",
            user.name if user else "-",
        ])

    return _pdf_table("Relatório de Movimentações de Estoque", headers, rows, "relatorio_movimentacoes.pdf")
