# utils/excel_utils.py

import pandas as pd
from io import BytesIO
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

RECAP_COLUMNS = [
    "Code étudiant",
    "Nom",
    "Prénom",
    "Moyenne générale",
    "ECTS",
    "Absences justifiées",
    "Absences non justifiées",
    "Retards",
]

SHEET_NAME = "Récapitulatif"


def build_recap_rows(bulletins):
    """Flatten StudentBulletin objects into one recap row per student."""
    from utils.formatting import parse_decimal

    rows = []
    for bulletin in bulletins:
        absences = bulletin.absences
        unit_credits = sum(
            credits for code, credits in bulletin.credits.items()
            if code in bulletin.unit_codes
        )
        rows.append({
            "Code étudiant": bulletin.student_id,
            "Nom": bulletin.last_name,
            "Prénom": bulletin.first_name,
            "Moyenne générale": parse_decimal(bulletin.general_average),
            "ECTS": unit_credits,
            "Absences justifiées": absences.justified_duration if absences else "00h00",
            "Absences non justifiées": absences.unjustified_duration if absences else "00h00",
            "Retards": absences.late_duration if absences else "00h00",
        })
    return rows


def create_recap_workbook(rows, group_name, period):
    """
    Create the group recap workbook shipped next to the bulletins.

    Args:
        rows: List of dicts keyed by RECAP_COLUMNS
        group_name: Group label used in the title row
        period: Evaluation period label used in the title row

    Returns:
        BytesIO containing the Excel file
    """
    df = pd.DataFrame(rows, columns=RECAP_COLUMNS)

    output = BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        # Leave two rows for the title
        df.to_excel(writer, index=False, startrow=2, sheet_name=SHEET_NAME)
        worksheet = writer.sheets[SHEET_NAME]

        worksheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(RECAP_COLUMNS))
        cell = worksheet.cell(row=1, column=1)
        cell.value = f"{group_name} - {period}"
        cell.font = Font(bold=True, size=14)
        cell.alignment = Alignment(horizontal='left')

        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        for idx, col in enumerate(RECAP_COLUMNS, 1):
            cell = worksheet.cell(row=3, column=idx)
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal='center')
            cell.fill = PatternFill(start_color="D3D3D3", end_color="D3D3D3", fill_type="solid")
            cell.border = thin_border

            # Auto-adjust column width based on content
            max_length = len(col)
            for row_idx in range(4, len(df) + 4):  # data starts at row 4
                data_cell = worksheet.cell(row=row_idx, column=idx)
                data_cell.border = thin_border
                if data_cell.value is not None:
                    max_length = max(max_length, len(str(data_cell.value)))

            worksheet.column_dimensions[get_column_letter(idx)].width = max(12, max_length + 2)

        for row_idx in range(4, len(df) + 4):
            worksheet.cell(row=row_idx, column=4).number_format = "0.00"

    output.seek(0)
    return output
