import asyncio
import zipfile
from io import BytesIO

import pytest
from fastapi import HTTPException
from openpyxl import load_workbook

from models.bulletin_model import BulletinData, BulletinRequest, StudentBulletin
from services import bulletin_service
from services.bulletin_service import build_archive_id, build_student_bulletins, generate_bulletins
from utils.excel_utils import RECAP_COLUMNS, SHEET_NAME, build_recap_rows, create_recap_workbook
from utils.pdf_utils import create_student_pdf, wrap_text


class TestBuildStudentBulletins:
    def test_joins_rows_per_student(self, group_data):
        bulletins = build_student_bulletins(BulletinData(**group_data), "Semestre 1")
        marie, paul = bulletins

        assert marie.student_id == "101"
        assert marie.filename == "DUPONT_Marie_101.pdf"
        assert [g["CODE_MATIERE"] for g in marie.grades] == ["UE1", "M1", "M2"]
        assert marie.credits == {"M1": 3, "M2": 2, "UE1": 5}
        assert marie.unit_codes == {"UE1"}
        assert marie.general_average == "13,25"
        assert marie.observation.startswith("Très bon")
        assert marie.absences.justified_duration == "02h00"
        assert marie.absences.late_duration == "00h15"
        assert marie.group["NOM_GROUPE"] == "BTS PI 1"
        assert marie.campus["NOM_SITE"] == "Paris"

        assert paul.absences is None
        assert paul.observation is None
        assert paul.unit_codes == set()
        assert paul.credits == {"M1": 3}

    def test_missing_sections_are_empty(self):
        data = BulletinData(APPRENANT=[{"CODE_APPRENANT": 1, "NOM_APPRENANT": "A", "PRENOM_APPRENANT": "B"}], SITE=None)
        (bulletin,) = build_student_bulletins(data, "P")
        assert bulletin.student_id == "1"
        assert bulletin.grades == []
        assert bulletin.campus is None


class TestDocuments:
    def test_pdf_bytes(self, group_data):
        bulletins = build_student_bulletins(BulletinData(**group_data), "Semestre 1")
        for bulletin in bulletins:
            pdf = create_student_pdf(bulletin, "ÉCOLE TEST")
            assert pdf.startswith(b"%PDF")

    def test_long_tables_break_pages(self):
        grades = [{"CODE_MATIERE": f"M{i}", "NOM_MATIERE": f"Matière {i}", "MOYENNE": "10"} for i in range(80)]
        bulletin = StudentBulletin(student_id="1", grades=grades, observation="mot " * 500)
        assert create_student_pdf(bulletin, "ÉCOLE TEST").startswith(b"%PDF")

    def test_wrap_text_respects_width(self):
        lines = wrap_text("un deux trois quatre cinq six sept huit neuf dix " * 10, "Times-Roman", 10, 100)
        assert len(lines) > 1
        assert " ".join(lines).split() == ("un deux trois quatre cinq six sept huit neuf dix " * 10).split()

    def test_recap_workbook(self, group_data):
        bulletins = build_student_bulletins(BulletinData(**group_data), "Semestre 1")
        rows = build_recap_rows(bulletins)
        assert rows[0]["ECTS"] == 5
        assert rows[0]["Moyenne générale"] == 13.25
        assert rows[1]["Retards"] == "00h00"

        workbook = load_workbook(create_recap_workbook(rows, "BTS PI 1", "Semestre 1"))
        sheet = workbook[SHEET_NAME]
        assert sheet.cell(row=1, column=1).value == "BTS PI 1 - Semestre 1"
        assert [sheet.cell(row=3, column=i).value for i in range(1, len(RECAP_COLUMNS) + 1)] == RECAP_COLUMNS
        assert sheet.cell(row=4, column=1).value == "101"
        assert sheet.cell(row=5, column=2).value == "MARTIN"


class TestGenerateBulletins:
    def test_archive_is_stored(self, group_data, storage, batch_collection):
        request = BulletinRequest(data=group_data, periodeEvaluation="Semestre 1", groupName="BTS PI 1")
        result = asyncio.run(generate_bulletins(request, storage, "ÉCOLE TEST"))

        assert result["success"] is True
        assert result["studentCount"] == 2
        assert result["failureCount"] == 0
        archive_id = result["path"].split("id=", 1)[1]
        assert archive_id.startswith("bulletins_BTS_PI_1_")
        assert storage.has_file(archive_id)

        with zipfile.ZipFile(BytesIO(storage.read_file(archive_id))) as archive:
            assert sorted(archive.namelist()) == [
                "DUPONT_Marie_101.pdf",
                "MARTIN_Paul_102.pdf",
                "recapitulatif_BTS_PI_1.xlsx",
            ]

        batch = batch_collection.documents[0]
        assert batch["archive_id"] == archive_id
        assert batch["student_count"] == 2

    def test_defaults_for_period_and_group(self):
        request = BulletinRequest(data={}, periodeEvaluation="", groupName=None)
        assert request.period == "Période non spécifiée"
        assert request.group_name == "Groupe non spécifié"

    def test_missing_data(self, storage, batch_collection):
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(generate_bulletins(BulletinRequest(), storage, "X"))
        assert excinfo.value.status_code == 400

    def test_one_failure_is_not_fatal(self, group_data, storage, batch_collection, monkeypatch):
        real = bulletin_service.create_student_pdf

        def flaky(bulletin, school_name):
            if bulletin.student_id == "102":
                raise RuntimeError("font error")
            return real(bulletin, school_name)

        monkeypatch.setattr(bulletin_service, "create_student_pdf", flaky)
        result = asyncio.run(generate_bulletins(BulletinRequest(data=group_data), storage, "X"))
        assert result["studentCount"] == 1
        assert result["failureCount"] == 1

    def test_all_failures(self, group_data, storage, batch_collection, monkeypatch):
        def broken(bulletin, school_name):
            raise RuntimeError("font error")

        monkeypatch.setattr(bulletin_service, "create_student_pdf", broken)
        with pytest.raises(HTTPException) as excinfo:
            asyncio.run(generate_bulletins(BulletinRequest(data=group_data), storage, "X"))
        assert excinfo.value.status_code == 500
        assert storage.get_all_file_ids() == []

    def test_archive_id(self):
        assert build_archive_id("BTS PI 1 (Paris)", 1700000000000) == "bulletins_BTS_PI_1_Paris_1700000000000.zip"
