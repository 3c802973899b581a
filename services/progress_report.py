from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.platypus import Table, TableStyle
from datetime import datetime

STATUS_LABELS = {
	"completed": "Completed",
	"current": "In Progress",
	"pending": "Pending",
}


def generate_progress_report_pdf(pdf_path, student, timeline: list, progress: int = 0):
	"""
	Generate a one-page PDF with the application timeline of a student.

	`timeline` is the list produced by services.phases.build_timeline:
	  key, label, description, status, estimated_date
	"""
	page_size = A4
	c = canvas.Canvas(pdf_path, pagesize=page_size)
	width, height = page_size

	# Title
	c.setFont("Helvetica-Bold", 18)
	c.drawString(20 * mm, height - 25 * mm, "Application Progress Report")
	c.setFont("Helvetica", 11)
	y = height - 40 * mm
	c.drawString(20 * mm, y, f"Student: {student.full_name}")
	c.drawString(110 * mm, y, f"Student ID: {student.id}")
	y -= 6 * mm
	c.drawString(20 * mm, y, f"Email: {student.email or ''}")
	c.drawString(110 * mm, y, f"Overall progress: {progress}%")

	# Divider
	y -= 8 * mm
	c.setStrokeColor(colors.grey)
	c.setLineWidth(1)
	c.line(20 * mm, y, width - 20 * mm, y)

	data = [["#", "Phase", "Status", "Estimated Date"]]
	for i, phase in enumerate(timeline, start=1):
		data.append([
			str(i),
			phase["label"],
			STATUS_LABELS.get(phase["status"], phase["status"]),
			phase.get("estimated_date") or "-",
		])

	total_width = width - 40 * mm
	col_widths = [total_width * 0.08, total_width * 0.42, total_width * 0.22, total_width * 0.28]
	table = Table(data, colWidths=col_widths)
	style = [
		("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
		("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
		("BOTTOMPADDING", (0, 0), (-1, 0), 8),
		("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
	]
	# highlight the phase the student is in now
	for row, phase in enumerate(timeline, start=1):
		if phase["status"] == "current":
			style.append(("BACKGROUND", (0, row), (-1, row), colors.HexColor("#e3f2fd")))
	table.setStyle(TableStyle(style))
	_, table_height = table.wrapOn(c, width, height)
	table.drawOn(c, 20 * mm, y - 6 * mm - table_height)

	c.setFont("Helvetica-Oblique", 8)
	c.drawString(20 * mm, 12 * mm, f"Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
	c.save()
	return pdf_path
