"""
PDF Export for QuickQuote

Generates a one-page estimate summary for a computed quote.
"""

from io import BytesIO
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, HRFlowable
)
from reportlab.lib.enums import TA_CENTER, TA_LEFT

from calculator import Quote, RateTable, format_range
from calculator.rates import DEFAULT_RATE_TABLE

PDF_FILENAME = "QuickQuote_Estimate.pdf"
REPORT_TITLE = "QuickQuote Estimate"


class PDFReportGenerator:
    """Generates PDF summaries of renovation quotes."""

    # Brand colors
    PRIMARY_COLOR = colors.HexColor('#0284C7')  # Sky
    SECONDARY_COLOR = colors.HexColor('#0F172A')  # Slate
    LIGHT_GRAY = colors.HexColor('#F1F5F9')
    BORDER_COLOR = colors.HexColor('#E2E8F0')

    def __init__(self, rate_table: Optional[RateTable] = None):
        self.rate_table = rate_table or DEFAULT_RATE_TABLE
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='ReportTitle',
            parent=self.styles['Heading1'],
            fontSize=22,
            textColor=self.SECONDARY_COLOR,
            spaceAfter=12,
            alignment=TA_LEFT
        ))

        self.styles.add(ParagraphStyle(
            name='ReportSection',
            parent=self.styles['Heading2'],
            fontSize=13,
            textColor=self.SECONDARY_COLOR,
            spaceBefore=16,
            spaceAfter=8
        ))

        self.styles.add(ParagraphStyle(
            name='ReportBody',
            parent=self.styles['Normal'],
            fontSize=10,
            textColor=self.SECONDARY_COLOR,
            spaceAfter=4
        ))

        self.styles.add(ParagraphStyle(
            name='ReportSmall',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.gray,
            spaceAfter=4
        ))

        self.styles.add(ParagraphStyle(
            name='ReportFooter',
            parent=self.styles['Normal'],
            fontSize=8,
            textColor=colors.gray,
            alignment=TA_CENTER
        ))

    def generate_report(self, quote: Quote) -> BytesIO:
        """
        Generate the PDF summary for a quote.

        Returns: BytesIO buffer containing the PDF
        """
        buffer = BytesIO()

        doc = SimpleDocTemplate(
            buffer,
            pagesize=letter,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch,
            title=REPORT_TITLE
        )

        doc.build(self.build_story(quote))
        buffer.seek(0)
        return buffer

    def build_story(self, quote: Quote) -> List:
        """All flowables of the report, in order."""
        story = []
        story.extend(self._build_header(quote))

        client = quote.inputs.client.trimmed()
        if any(client.to_dict().values()):
            story.extend(self._build_client(quote))

        story.extend(self._build_breakdown(quote))
        story.extend(self._build_adjustments(quote))
        story.extend(self._build_rates_used(quote))
        story.extend(self._build_footer())
        return story

    def _build_header(self, quote: Quote) -> List:
        """Build the report header with the quote inputs."""
        inputs = quote.inputs
        unit_label = 'sq m' if inputs.unit == 'sqm' else 'sq ft'
        elements = []

        elements.append(Paragraph(f'<b>{REPORT_TITLE}</b>', self.styles['ReportTitle']))

        info = [
            ('Role', inputs.role),
            ('Project', inputs.project_type),
            ('Quality', inputs.quality),
            ('Location', f'{inputs.location} ({quote.currency})'),
            ('Room Size', f'{inputs.size:g} {unit_label}'),
        ]
        for label, value in info:
            elements.append(Paragraph(f'<b>{label}:</b> {escape(str(value))}', self.styles['ReportBody']))

        elements.append(Paragraph(
            f'<b>Generated:</b> {datetime.now().strftime("%B %d, %Y at %I:%M %p")}',
            self.styles['ReportSmall']
        ))

        elements.append(Spacer(1, 8))
        elements.append(HRFlowable(
            width="100%",
            thickness=1,
            color=self.BORDER_COLOR,
            spaceAfter=8
        ))

        return elements

    def _build_client(self, quote: Quote) -> List:
        """Build the client snapshot section."""
        client = quote.inputs.client.trimmed()
        elements = [Paragraph('Client', self.styles['ReportSection'])]

        rows = [
            ('Name', client.name),
            ('Company', client.company),
            ('Email', client.email),
            ('Phone', client.phone),
            ('Notes', client.notes),
        ]
        for label, value in rows:
            if value:
                elements.append(Paragraph(f'<b>{label}:</b> {escape(value)}', self.styles['ReportBody']))

        return elements

    def _build_breakdown(self, quote: Quote) -> List:
        """Build the labor/material/total table."""
        fmt = quote.formatter
        estimate = quote.estimate
        elements = [Paragraph('Breakdown', self.styles['ReportSection'])]

        data = [
            ['Labor', fmt.format(estimate.labor)],
            ['Material', fmt.format(estimate.material)],
            ['Total', fmt.format(estimate.total)],
        ]

        table = Table(data, colWidths=[2*inch, 2*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (0, -1), self.LIGHT_GRAY),
            ('TEXTCOLOR', (0, 0), (-1, -1), self.SECONDARY_COLOR),
            ('ALIGN', (0, 0), (0, -1), 'LEFT'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
            ('FONTNAME', (1, -1), (1, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('GRID', (0, 0), (-1, -1), 0.5, self.BORDER_COLOR),
        ]))

        elements.append(table)
        return elements

    def _build_adjustments(self, quote: Quote) -> List:
        """Build the markups, extras, overhead, discount and tax table."""
        fmt = quote.formatter
        inputs = quote.inputs
        totals = quote.totals
        elements = [Paragraph('Adjustments', self.styles['ReportSection'])]

        data = [
            [f'Labor (+{inputs.labor_markup_pct:g}% markup)', fmt.format(totals.markup_labor)],
        ]
        for extra in inputs.material_additions:
            data.append([f'  {extra.name}', fmt.format(extra.cost)])
        if inputs.material_additions:
            data.append(['Material extras', fmt.format(totals.material_extras_total)])
        data.extend([
            [f'Material (+{inputs.material_markup_pct:g}% markup)', fmt.format(totals.markup_material)],
            ['Subtotal', fmt.format(totals.subtotal)],
            [f'Overhead ({inputs.overhead_pct:g}%)', fmt.format(totals.overhead_amt)],
            [f'Discount ({inputs.discount_pct:g}%)', f'-{fmt.format(totals.discount_amt)}'],
            [f'Tax ({inputs.tax_pct:g}%)', fmt.format(totals.tax_amt)],
            ['Grand Total', fmt.format(totals.grand_total)],
            ['Range', format_range(fmt, totals.range_low, totals.range_high)],
        ])

        table = Table(data, colWidths=[3*inch, 2*inch])
        table.setStyle(TableStyle([
            ('ALIGN', (0, 0), (0, -1), 'LEFT'),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('FONTSIZE', (0, 0), (-1, -1), 10),
            ('TEXTCOLOR', (0, 0), (-1, -1), self.SECONDARY_COLOR),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            # Grand total row
            ('FONTNAME', (0, -2), (-1, -2), 'Helvetica-Bold'),
            ('FONTSIZE', (0, -2), (-1, -2), 12),
            ('TEXTCOLOR', (1, -2), (1, -2), self.PRIMARY_COLOR),
            ('LINEABOVE', (0, -2), (-1, -2), 1, self.BORDER_COLOR),
            ('TEXTCOLOR', (0, -1), (-1, -1), colors.gray),
        ]))

        elements.append(table)
        return elements

    def _build_rates_used(self, quote: Quote) -> List:
        """Build the per-area rates section, if the project is in the rate table."""
        project = self.rate_table.get_project(quote.inputs.project_type)
        if project is None:
            return []

        return [
            Paragraph('Rates used', self.styles['ReportSection']),
            Paragraph(f'Labor per sq ft: {project.labor_per_area:g}', self.styles['ReportBody']),
            Paragraph(f'Material per sq ft: {project.material_per_area:g}', self.styles['ReportBody']),
        ]

    def _build_footer(self) -> List:
        """Build the report footer with disclaimer."""
        elements = []

        elements.append(HRFlowable(
            width="100%",
            thickness=1,
            color=self.BORDER_COLOR,
            spaceBefore=20,
            spaceAfter=10
        ))

        elements.append(Paragraph(
            'Estimates are ballpark figures for guidance only. Actual costs vary with '
            'site conditions, material availability and local labor rates.',
            self.styles['ReportSmall']
        ))

        elements.append(Paragraph('Generated by QuickQuote', self.styles['ReportFooter']))

        return elements
