# game/pdf_utils.py
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import letter
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

from .sudoku import CELLS_TO_REMOVE


def format_time(seconds):
    """Format a number of seconds as m:ss."""
    minutes = seconds // 60
    remaining_seconds = seconds % 60
    return f"{minutes}:{remaining_seconds:02d}"


def generate_best_times_pdf(name, best_times, buffer, brand="Geezy Sudoku"):
    """Generate a PDF report of a player's personal best per difficulty"""
    doc = SimpleDocTemplate(buffer, pagesize=letter)
    elements = []

    styles = getSampleStyleSheet()

    # Title
    title = Paragraph(f"{escape(brand)} - Personal Bests", styles['Title'])
    elements.append(title)
    elements.append(Spacer(1, 0.2 * inch))

    # Player info
    player_info = Paragraph(f"<b>Player:</b> {escape(name)}", styles['Normal'])
    elements.append(player_info)
    elements.append(Spacer(1, 0.2 * inch))

    # Results table, one row per difficulty in the order easy, medium, hard
    if best_times:
        data = [['Difficulty', 'Time (seconds)', 'Formatted Time']]

        for difficulty in CELLS_TO_REMOVE:
            if difficulty not in best_times:
                continue
            seconds = best_times[difficulty]
            data.append([difficulty.capitalize(), str(seconds), format_time(seconds)])

        table = Table(data)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 14),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
            ('BACKGROUND', (0, 1), (-1, -1), colors.beige),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -1), 12),
            ('GRID', (0, 0), (-1, -1), 1, colors.black)
        ]))

        elements.append(table)
    else:
        no_data = Paragraph("No puzzles completed yet.", styles['Normal'])
        elements.append(no_data)

    # Generate PDF
    doc.build(elements)
