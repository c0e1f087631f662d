import io
from xml.sax.saxutils import escape
from reportlab.lib.pagesizes import A4
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet

from catering.utilities.constants import UNIT_TYPE_LABELS

HEADER_COLOR = "#B5442F"


def _table(data):
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0,0), (-1,0), colors.HexColor(HEADER_COLOR)),
        ("TEXTCOLOR", (0,0), (-1,0), colors.whitesmoke),
        ("ALIGN", (1,0), (-1,-1), "CENTER"),
        ("FONTNAME", (0,0), (-1,0), "Helvetica-Bold"),
        ("FONTSIZE", (0,0), (-1,0), 11),
        ("BOTTOMPADDING", (0,0), (-1,0), 8),
        ("GRID", (0,0), (-1,-1), 0.5, colors.grey),
    ]))
    return table


def _wings_rows(block):
    base = block.get("base", {})
    changes = block.get("changes") or {}
    current = changes.get("units", base.get("units", {}))
    rows = [["Unit type", "Package", "Order"]]
    for unit_type, count in base.get("units", {}).items():
        rows.append([UNIT_TYPE_LABELS.get(unit_type, unit_type), count, current.get(unit_type, count)])
    rows.append(["Total", base.get("total", 0), changes.get("total", base.get("total", 0))])
    return rows


def _sauce_rows(block):
    changes = block.get("changes") or {}
    sauces = changes.get("sauces", block.get("base", {}).get("sauces", []))
    rows = [["Sauce", "Units", "Method", "Containers"]]
    for line in sauces:
        containers = line.get("containers", {}).get("count", "-")
        rows.append([
            f"{line.get('variant_id')} ({UNIT_TYPE_LABELS.get(line.get('unit_type'), line.get('unit_type'))})",
            line.get("count", 0),
            line.get("application_method", "tossed").replace("_", " "),
            containers,
        ])
    return rows


def _pack_rows(block):
    changes = block.get("changes") or {}
    if changes.get("skipped"):
        return [["Item", "Count"], ["Skipped", "-"]]
    selections = changes.get("selections", block.get("base", {}).get("selections", []))
    rows = [["Item", "Count"]]
    for s in selections:
        rows.append([s.get("name") or s.get("id"), s.get("count", 0)])
    for a in changes.get("add_ons", []):
        rows.append([f"+ {a.get('name') or a.get('id')}", a.get("count", 0)])
    bundle = changes.get("bundle", block.get("base", {}).get("bundle"))
    if bundle:
        rows.append([f"Packs of {bundle.get('pack_size')}", bundle.get("packs_needed")])
    return rows


def render_breakdown_pdf(breakdown, package):
    """Generate a kitchen sheet: wings, sauces, then one table per pack category."""
    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf, pagesize=A4,
        rightMargin=20, leftMargin=20, topMargin=20, bottomMargin=20
    )

    styles = getSampleStyleSheet()
    elements = [
        Paragraph(f"Kitchen Sheet: {escape(package.name or package.id)}", styles["Title"]),
        Spacer(1, 12),
    ]

    for key, block in breakdown.items():
        elements.append(Paragraph(escape(block.get("label", key)), styles["Heading2"]))
        details = (block.get("changes") or {}).get("details")
        if details:
            elements.append(Paragraph(escape(details), styles["Italic"]))
        if key == "wings":
            elements.append(_table(_wings_rows(block)))
            elements.append(Spacer(1, 8))
            elements.append(_table(_sauce_rows(block)))
        else:
            elements.append(_table(_pack_rows(block)))
        elements.append(Spacer(1, 12))

    doc.build(elements)
    return buf.getvalue()
