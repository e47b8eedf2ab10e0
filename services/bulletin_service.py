# services/bulletin_service.py
import time
import zipfile
from datetime import datetime, timezone
from io import BytesIO
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from loguru import logger

from database import get_batch_collection
from models.attendance_model import AttendanceSummary
from models.bulletin_model import BulletinData, BulletinRequest, StudentBulletin
from services.attendance_service import aggregate_absences
from services.credit_service import credits_by_subject, rollup_credits
from utils.diagnostics import DiagnosticCollector
from utils.excel_utils import build_recap_rows, create_recap_workbook
from utils.file_storage import FileStorage
from utils.formatting import safe_filename_part
from utils.pdf_utils import create_student_pdf


def _first_for_student(rows: List[Dict[str, Any]], student_id: str) -> Optional[Dict[str, Any]]:
    return next((row for row in rows if str(row.get("CODE_APPRENANT", "")) == student_id), None)


def build_student_bulletins(data: BulletinData, period: str, report=None) -> List[StudentBulletin]:
    """
    Assemble the per-student drawing input for a whole group.

    The absence and credit aggregations run once here and their results
    are shared by every student's bulletin.
    """
    absences: Dict[str, AttendanceSummary] = {
        summary.student_id: summary for summary in aggregate_absences(data.ABSENCES, report)
    }
    rolled = rollup_credits(data.ECTS_PAR_MATIERE, report)
    credits = credits_by_subject(rolled)
    unit_codes: Dict[str, set] = {}
    for item in rolled:
        if item.is_unit:
            unit_codes.setdefault(item.student_id, set()).add(item.subject_code)

    group = data.GROUPE[0] if data.GROUPE else None
    campus = data.SITE[0] if data.SITE else None

    bulletins = []
    for student in data.APPRENANT:
        student_id = str(student.get("CODE_APPRENANT") or "")
        average = _first_for_student(data.MOYENNE_GENERALE, student_id)
        observation = _first_for_student(data.OBSERVATIONS, student_id)

        bulletins.append(StudentBulletin(
            student_id=student_id,
            last_name=str(student.get("NOM_APPRENANT") or ""),
            first_name=str(student.get("PRENOM_APPRENANT") or ""),
            birth_date=student.get("DATE_NAISSANCE"),
            period=period,
            grades=[g for g in data.MOYENNES_UE if str(g.get("CODE_APPRENANT", "")) == student_id],
            credits=credits.get(student_id, {}),
            unit_codes=unit_codes.get(student_id, set()),
            general_average=average.get("MOYENNE_GENERALE") if average else None,
            observation=(observation.get("MEMO_OBSERVATION") or "") if observation else None,
            absences=absences.get(student_id),
            group=group,
            campus=campus,
        ))
    return bulletins


def build_archive_id(group_name: str, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"bulletins_{safe_filename_part(group_name)}_{timestamp_ms}.zip"


async def generate_bulletins(request: BulletinRequest, storage: FileStorage, school_name: str):
    """Draw every bulletin of a group, zip them and store the archive"""
    data = request.data
    if data is None:
        raise HTTPException(status_code=400, detail="Aucune donnée fournie")
    if not data.APPRENANT:
        raise HTTPException(status_code=400, detail="Aucun étudiant dans les données fournies")

    logger.info(
        "Generating bulletins for {} ({} students, {} grades, {} absences, {} curriculum rows)",
        request.group_name, len(data.APPRENANT), len(data.MOYENNES_UE),
        len(data.ABSENCES), len(data.ECTS_PAR_MATIERE)
    )

    diagnostics = DiagnosticCollector(context=request.group_name)
    bulletins = build_student_bulletins(data, request.period, diagnostics)

    success_count = 0
    failure_count = 0
    zip_buffer = BytesIO()
    with zipfile.ZipFile(zip_buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for bulletin in bulletins:
            try:
                pdf_bytes = create_student_pdf(bulletin, school_name)
            except Exception:
                failure_count += 1
                logger.exception("PDF generation failed for student {}", bulletin.student_id)
                continue
            archive.writestr(bulletin.filename, pdf_bytes)
            success_count += 1
            logger.debug("Added {} to archive", bulletin.filename)

        if success_count:
            recap = create_recap_workbook(build_recap_rows(bulletins), request.group_name, request.period)
            archive.writestr(f"recapitulatif_{safe_filename_part(request.group_name)}.xlsx", recap.getvalue())

    if success_count == 0:
        raise HTTPException(
            status_code=500,
            detail=f"Aucun PDF n'a pu être généré: {failure_count} bulletins ont échoué"
        )

    archive_id = build_archive_id(request.group_name)
    storage.store_file(archive_id, zip_buffer.getvalue())
    if not storage.has_file(archive_id):
        raise HTTPException(status_code=500, detail="Erreur lors du stockage du fichier ZIP")

    await get_batch_collection().insert_one({
        "archive_id": archive_id,
        "group": request.group_name,
        "period": request.period,
        "student_count": success_count,
        "failure_count": failure_count,
        "warnings": diagnostics.messages,
        "created_at": datetime.now(timezone.utc),
    })

    logger.info(
        "Archive {} ready: {} bulletins, {} failures, {} warnings",
        archive_id, success_count, failure_count, len(diagnostics)
    )

    return {
        "success": True,
        "path": f"/api/download?id={archive_id}",
        "studentCount": success_count,
        "failureCount": failure_count,
        "warningCount": len(diagnostics),
    }
