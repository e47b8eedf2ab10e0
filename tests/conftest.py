import pytest
from fastapi.testclient import TestClient


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    """Stands in for a motor collection; only insert_one is needed."""

    def __init__(self):
        self.documents = []

    async def insert_one(self, document):
        self.documents.append(dict(document))
        return FakeInsertResult(f"fake-{len(self.documents)}")


@pytest.fixture
def batch_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr("services.bulletin_service.get_batch_collection", lambda: collection)
    return collection


@pytest.fixture
def extraction_collection(monkeypatch):
    collection = FakeCollection()
    monkeypatch.setattr("services.extraction_service.get_extraction_collection", lambda: collection)
    return collection


@pytest.fixture
def storage(tmp_path):
    from utils.file_storage import FileStorage
    return FileStorage(tmp_path / "archives")


@pytest.fixture
def api_client(storage, batch_collection, extraction_collection):
    from main import app
    from routers.dependencies import get_file_storage

    app.dependency_overrides[get_file_storage] = lambda: storage
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def group_data():
    """A small but complete payload as returned by POST /api/sql."""
    return {
        "APPRENANT": [
            {"CODE_APPRENANT": "101", "NOM_APPRENANT": "DUPONT", "PRENOM_APPRENANT": "Marie", "DATE_NAISSANCE": "2002-03-14 00:00:00"},
            {"CODE_APPRENANT": "102", "NOM_APPRENANT": "MARTIN", "PRENOM_APPRENANT": "Paul", "DATE_NAISSANCE": None},
        ],
        "MOYENNES_UE": [
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "UE1", "NOM_MATIERE": "UE 1 - Droit", "MOYENNE": "13,25"},
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "M1", "NOM_MATIERE": "Droit immobilier", "MOYENNE": "14,5"},
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "M2", "NOM_MATIERE": "Droit des contrats", "MOYENNE": 12},
            {"CODE_APPRENANT": "102", "CODE_MATIERE": "M1", "NOM_MATIERE": "Droit immobilier", "MOYENNE": None},
        ],
        "MOYENNE_GENERALE": [
            {"CODE_APPRENANT": "101", "MOYENNE_GENERALE": "13,25"},
            {"CODE_APPRENANT": "102", "MOYENNE_GENERALE": "abc"},
        ],
        "OBSERVATIONS": [
            {"CODE_APPRENANT": "101", "MEMO_OBSERVATION": "Très bon semestre.\r\nContinuez ainsi."},
        ],
        "ECTS_PAR_MATIERE": [
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "UE1", "NOM_MATIERE": "UE 1 - Droit", "CODE_TYPE_MATIERE": "2", "NUM_ORDRE": "1", "CREDIT_ECTS": None},
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "M1", "NOM_MATIERE": "Droit immobilier", "CODE_TYPE_MATIERE": "3", "NUM_ORDRE": "2", "CREDIT_ECTS": "3"},
            {"CODE_APPRENANT": "101", "CODE_MATIERE": "M2", "NOM_MATIERE": "Droit des contrats", "CODE_TYPE_MATIERE": "3", "NUM_ORDRE": "3", "CREDIT_ECTS": "2"},
            {"CODE_APPRENANT": "102", "CODE_MATIERE": "M1", "NOM_MATIERE": "Droit immobilier", "CODE_TYPE_MATIERE": "3", "NUM_ORDRE": "2", "CREDIT_ECTS": "3"},
        ],
        "ABSENCES": [
            {"CODE_APPRENANT": "101", "NOM_APPRENANT": "DUPONT", "PRENOM_APPRENANT": "Marie", "HEURE_DEBUT": "480", "HEURE_FIN": "600", "IS_JUSTIFIE": "1", "IS_RETARD": "0"},
            {"CODE_APPRENANT": "101", "NOM_APPRENANT": "DUPONT", "PRENOM_APPRENANT": "Marie", "HEURE_DEBUT": "840", "HEURE_FIN": "855", "IS_JUSTIFIE": "0", "IS_RETARD": "1"},
        ],
        "GROUPE": [{"NOM_GROUPE": "BTS PI 1", "ETENDU_GROUPE": "BTS Professions Immobilières", "NOM_FORMATION": "BTS PI"}],
        "SITE": [{"CODE_SITE": 3, "NOM_SITE": "Paris"}],
    }
