from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import ListFlowable, ListItem, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from clausecraft.schemas import AnalysisResult

SEVERITY_COLORS = {
    "high": colors.HexColor("#fee2e2"),
    "medium": colors.HexColor("#fef9c3"),
    "low": colors.HexColor("#dcfce7"),
}


def build_analysis_pdf(result: AnalysisResult, title: str = "Contract Risk Report") -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=LETTER, leftMargin=36, rightMargin=36, topMargin=36, bottomMargin=36,
                            title=title, author="ClauseCraft AI")
    styles = getSampleStyleSheet()
    cell = styles["BodyText"]
    elems = []

    elems.append(Paragraph(f"ClauseCraft AI — {escape(title)}", styles["Title"]))
    elems.append(Paragraph(f"Overall Risk: <b>{result.overallRisk.title()}</b>", styles["Heading2"]))
    elems.append(Paragraph(escape(result.summary), styles["BodyText"]))
    elems.append(Spacer(1, 12))

    if result.risks:
        # Paragraph cells so long clauses wrap instead of overflowing the page
        data = [["Severity", "Category", "Clause"]]
        for r in result.risks:
            data.append([
                r.severity.title(),
                Paragraph(escape(r.category), cell),
                Paragraph(escape(r.clauseText[:300]), cell),
            ])

        tbl = Table(data, colWidths=[70, 110, 360], repeatRows=1)
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#111827")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#e5e7eb")),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        for row, r in enumerate(result.risks, start=1):
            style.append(("BACKGROUND", (0, row), (0, row), SEVERITY_COLORS[r.severity]))
        tbl.setStyle(TableStyle(style))
        elems.append(tbl)
        elems.append(Spacer(1, 12))

        for r in result.risks:
            elems.append(Paragraph(f"{escape(r.category)} — {r.severity.title()}", styles["Heading3"]))
            elems.append(Paragraph(escape(r.explanation), styles["BodyText"]))
            elems.append(Paragraph("<b>Recommendation:</b> " + escape(r.recommendation), styles["BodyText"]))
            elems.append(Spacer(1, 6))

    if result.recommendations:
        elems.append(Paragraph("Recommendations", styles["Heading2"]))
        elems.append(ListFlowable(
            [ListItem(Paragraph(escape(rec), cell)) for rec in result.recommendations],
            bulletType="bullet",
        ))

    doc.build(elems)
    return buf.getvalue()
