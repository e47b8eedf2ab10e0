# services/extraction_service.py
from database import get_extraction_collection
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from loguru import logger
from models.bulletin_model import ExtractionRequest
from services.ymag_client import YmagClient, YmagQueryError


def build_group_queries(group_code: int, campus_code: int, period_code: Optional[int] = None) -> Dict[str, str]:
    """SQL statements needed to build the bulletins of one group."""
    group_code = int(group_code)
    campus_code = int(campus_code)
    period_filter = f" AND e.CODE_PERIODE_EVALUATION = {int(period_code)}" if period_code is not None else ""
    students = f"SELECT CODE_APPRENANT FROM INSCRIPTION WHERE CODE_GROUPE = {group_code}"

    return {
        "GROUPE": (
            "SELECT g.CODE_GROUPE, g.NOM_GROUPE, g.ETENDU_GROUPE, f.NOM_FORMATION "
            "FROM GROUPE g LEFT JOIN FORMATION f ON g.CODE_FORMATION = f.CODE_FORMATION "
            f"WHERE g.CODE_GROUPE = {group_code}"
        ),
        "SITE": f"SELECT CODE_SITE, NOM_SITE FROM SITE WHERE CODE_SITE = {campus_code}",
        "APPRENANT": (
            "SELECT CODE_APPRENANT, NOM_APPRENANT, PRENOM_APPRENANT, DATE_NAISSANCE "
            f"FROM APPRENANT WHERE CODE_APPRENANT IN ({students})"
        ),
        "MOYENNES_UE": (
            "SELECT a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, m.CODE_MATIERE, m.NOM_MATIERE, "
            "AVG(n.VALEUR_NOTE) AS MOYENNE "
            "FROM NOTE n "
            "INNER JOIN EVALUATION e ON n.CODE_EVALUATION = e.CODE_EVALUATION "
            "INNER JOIN APPRENANT a ON n.CODE_APPRENANT = a.CODE_APPRENANT "
            "INNER JOIN MATIERE m ON e.CODE_MATIERE = m.CODE_MATIERE "
            f"WHERE e.CODE_GROUPE = {group_code}{period_filter} "
            "GROUP BY a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, m.CODE_MATIERE, m.NOM_MATIERE"
        ),
        "MOYENNE_GENERALE": (
            "SELECT a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, AVG(n.VALEUR_NOTE) AS MOYENNE_GENERALE "
            "FROM NOTE n "
            "INNER JOIN EVALUATION e ON n.CODE_EVALUATION = e.CODE_EVALUATION "
            "INNER JOIN APPRENANT a ON n.CODE_APPRENANT = a.CODE_APPRENANT "
            f"WHERE e.CODE_GROUPE = {group_code}{period_filter} "
            "GROUP BY a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT"
        ),
        "OBSERVATIONS": (
            "SELECT a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, o.MEMO_OBSERVATION "
            "FROM OBSERVATION_APPRENANT o "
            "INNER JOIN APPRENANT a ON o.CODE_APPRENANT = a.CODE_APPRENANT "
            f"WHERE o.CODE_GROUPE = {group_code}"
        ),
        "ECTS_PAR_MATIERE": (
            "SELECT i.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, m.CODE_MATIERE, m.NOM_MATIERE, "
            "m.CODE_TYPE_MATIERE, pm.NUM_ORDRE, pm.CREDIT_ECTS "
            "FROM INSCRIPTION i "
            "INNER JOIN APPRENANT a ON i.CODE_APPRENANT = a.CODE_APPRENANT "
            "INNER JOIN PROGRAMME_MATIERE pm ON pm.CODE_GROUPE = i.CODE_GROUPE "
            "INNER JOIN MATIERE m ON pm.CODE_MATIERE = m.CODE_MATIERE "
            f"WHERE i.CODE_GROUPE = {group_code}"
        ),
        "ABSENCES": (
            "SELECT a.CODE_APPRENANT, a.NOM_APPRENANT, a.PRENOM_APPRENANT, "
            "ab.HEURE_DEBUT, ab.HEURE_FIN, ab.IS_JUSTIFIE, ab.IS_RETARD "
            "FROM ABSENCE ab "
            "INNER JOIN APPRENANT a ON ab.CODE_APPRENANT = a.CODE_APPRENANT "
            f"WHERE ab.CODE_APPRENANT IN ({students})"
        ),
    }


async def extract_group_data(request: ExtractionRequest, client: YmagClient):
    """Run every group query, keep going on failures and save a snapshot"""
    queries = build_group_queries(request.group, request.campus, request.period_code)
    timestamp = datetime.now(timezone.utc).isoformat()

    results: Dict[str, List[Dict[str, Any]]] = {}
    snapshot = {
        "timestamp": timestamp,
        "campus": str(request.campus),
        "group": str(request.group),
        "semester": request.semester or "s1",
        "period": request.period,
        "queries": {},
    }

    for name, sql in queries.items():
        logger.info("Running query {} for group {}", name, request.group)
        try:
            rows = await client.execute_query(sql)
            results[name] = rows
            snapshot["queries"][name] = {"query": sql, "results": rows}
        except YmagQueryError as e:
            logger.error("Query {} failed: {}", name, e)
            results[name] = []
            snapshot["queries"][name] = {"query": sql, "results": [], "error": str(e)}

    inserted = await get_extraction_collection().insert_one(snapshot)
    logger.info("Extraction snapshot saved as {}", inserted.inserted_id)

    return {
        "success": True,
        "data": results,
        "timestamp": timestamp,
        "extractionId": str(inserted.inserted_id),
    }


def _parse_api_datetime(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).strip().replace(" ", "T", 1))
    except ValueError:
        return None


def filter_periods(periods: List[Dict[str, Any]], start: date, end: date) -> List[Dict[str, Any]]:
    """Keep the evaluation periods that lie within [start, end]."""
    kept = []
    for period in periods:
        period_start = _parse_api_datetime(period.get("DATE_DEB"))
        period_end = _parse_api_datetime(period.get("DATE_FIN"))
        if period_start is None or period_end is None:
            logger.warning("Skipping period with unreadable dates: {}", period.get("CODE_PERIODE_EVALUATION"))
            continue
        if period_start.date() >= start and period_end.date() <= end:
            kept.append(period)
    return kept


async def list_periods(client: YmagClient, start: date, end: date):
    periods = await client.execute_query(
        "SELECT CODE_PERIODE_EVALUATION, NOM_PERIODE_EVALUATION, DATE_DEB, DATE_FIN FROM PERIODE_EVALUATION"
    )
    return {"success": True, "data": filter_periods(periods, start, end)}


async def list_campuses(client: YmagClient):
    sites = await client.execute_query("SELECT CODE_SITE, NOM_SITE FROM SITE ORDER BY NOM_SITE")
    return [
        {"id": f"campus-{site.get('CODE_SITE')}-{index}", "codeSite": site.get("CODE_SITE"), "label": site.get("NOM_SITE")}
        for index, site in enumerate(sites)
    ]


async def list_groups(client: YmagClient, campus_code: int):
    groups = await client.execute_query(
        f"SELECT CODE_GROUPE, NOM_GROUPE, CODE_SITE FROM GROUPE WHERE CODE_SITE = {int(campus_code)} ORDER BY NOM_GROUPE"
    )
    return [{"id": group.get("CODE_GROUPE"), "label": group.get("NOM_GROUPE")} for group in groups]
