"""Pattern-based field parser for Italian pickup orders ("buoni di ritiro").

Works on the labelled layout these documents share:

    BUONO DI RITIRO  N°: 925511058895
    Data emissione buono 14 maggio 2025
    Mittente CC DOMUS RICYCLE
      ZONA INDUSTRIALE - STATALE PRIMOSOLE 13
      CATANIA CT
      INFO@DOMUSRICYCLE.COM
    Destinatario CSS ECOLOGISTIC SPA
      ...
    Trasportatore - ...
    Distanza Chilometrica 174,503
    Data Carico / Scarico tra 19 maggio 2025 / 21 maggio 2025
    Lista bacini ... 2002048 A COMUNE DI SIRACUSA

A value read next to its label scores 1.0, a value found only by a generic pattern
scores lower, and a missing key field scores 0.0.
"""
import logging
import re
from datetime import date

import opik

from src.services.parsing.base import KEY_FIELDS, FieldParser, ParsedFields

logger = logging.getLogger("pickup_intake.parsing")

LABELLED = 1.0
GENERIC = 0.6
DETAIL = 0.8

ITALIAN_MONTHS = {
    "gennaio": 1, "febbraio": 2, "marzo": 3, "aprile": 4, "maggio": 5, "giugno": 6,
    "luglio": 7, "agosto": 8, "settembre": 9, "ottobre": 10, "novembre": 11, "dicembre": 12,
}

DATE = r"\d{1,2}\s+[A-Za-zÀ-ÿ]+\s+\d{4}|\d{1,2}[/.-]\d{1,2}[/.-]\d{4}"
NUMBER = r"\d+(?:[.,]\d+)?"
COMPANY = r"[A-Z][A-Z0-9 \t&.'-]*?(?:\b(?:RICYCLE|SPA|SRL)\b|S\.R\.L\.|S\.P\.A\.)"

ORDER_NUMBER_PATTERNS = [
    (re.compile(r"N[°º.]\s*:?\s*(\d{6,})", re.I), LABELLED),
    (re.compile(r"Numero.*?(\d{10,})", re.I), LABELLED),
    (re.compile(r"BUONO DI RITIRO.*?(\d{10,})", re.I), LABELLED),
    (re.compile(r"\b(\d{11,12})\b"), GENERIC),
]
ISSUE_DATE_PATTERNS = [
    (re.compile(rf"Data emissione(?: buono)?\s*:?\s*({DATE})", re.I), LABELLED),
    (re.compile(rf"emissione.*?({DATE})", re.I), GENERIC),
]
SCHEDULED_DATE_PATTERNS = [
    (re.compile(rf"Data (?:ritiro|programmata)\s*:?\s*({DATE})", re.I), LABELLED),
]
SHIPPING_REQUEST_PATTERNS = [
    (re.compile(rf"Data richiesta(?: di)? spedizione\s*:?\s*({DATE})", re.I), LABELLED),
]
AVAILABILITY_PATTERNS = [
    (re.compile(rf"Data Disponibilit[àa']\s*:?\s*({DATE})", re.I), LABELLED),
    (re.compile(rf"Disponibilit[àa']\s*:?\s*({DATE})", re.I), GENERIC),
]
LOADING_WINDOW_PATTERNS = [
    (re.compile(rf"Data Carico\s*/\s*Scarico(?: tra)?\s*({DATE})\s*/\s*({DATE})", re.I), LABELLED),
    (re.compile(rf"({DATE})\s*/\s*({DATE})"), GENERIC),
]
SENDER_PATTERNS = [
    (re.compile(rf"Mittente\s*:?\s*({COMPANY})", re.I), LABELLED),
    (re.compile(r"^\s*Mittente\s*:?[ \t]*(\S[^\n]*)$", re.I | re.M), GENERIC),
    (re.compile(r"^\s*Mittente\s*:?\s*\n\s*(\S[^\n]*)$", re.I | re.M), GENERIC),
]
RECIPIENT_PATTERNS = [
    (re.compile(rf"Destinatario\s*:?\s*({COMPANY})", re.I), LABELLED),
    (re.compile(r"^\s*Destinatario\s*:?[ \t]*(\S[^\n]*)$", re.I | re.M), GENERIC),
    (re.compile(r"^\s*Destinatario\s*:?\s*\n\s*(\S[^\n]*)$", re.I | re.M), GENERIC),
]
TRANSPORT_PATTERNS = [
    (re.compile(r"Trasportatore\s*:?[ \t]*-*[ \t]*(\S[^\n]*)", re.I), LABELLED),
]
DISTANCE_PATTERNS = [
    (re.compile(rf"Distanza Chilometrica\s*:?\s*({NUMBER})", re.I), LABELLED),
    (re.compile(rf"Distanza.*?({NUMBER})", re.I), GENERIC),
    (re.compile(rf"({NUMBER})\s*km\b", re.I), GENERIC),
]
QUANTITY_PATTERNS = [
    (re.compile(rf"Quantit[àa'](?: prevista| stimata)?\s*:?\s*({NUMBER})", re.I), LABELLED),
]
BASIN_PATTERNS = [
    (re.compile(r"(?:Lista bacini|Bacino)[\s\S]*?\b(\d{7})\s+([A-Z])\s+([^\n]+)", re.I), LABELLED),
    (re.compile(r"\b(\d{7})\s+([A-Z])\s+(COMUNE\s+DI\s+[^\n]+)", re.I), GENERIC),
]

EMAIL = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
ADDRESS = re.compile(
    r"^(?:VIA|V\.LE|VIALE|PIAZZA|P\.ZZA|CORSO|C\.SO|CONTRADA|C\.DA|ZONA|STRADA|LOCALIT[AÀ]'?|LOC\.)\b.*",
    re.I,
)
CITY = re.compile(r"^(?:\d{5}\s+)?[A-Za-zÀ-ÿ' ]+?\s+\(?[A-Z]{2}\)?$")
SECTION_END = r"Trasportatore|Lista bacini|Bacino|Distanza|Data Carico|Data Disponibilit"


def parse_italian_date(value: str) -> date | None:
    """Parse "28 maggio 2025" or "28/05/2025". Returns None for anything else."""
    value = value.strip()
    m = re.fullmatch(r"(\d{1,2})\s+([A-Za-zÀ-ÿ]+)\s+(\d{4})", value)
    if m:
        month = ITALIAN_MONTHS.get(m.group(2).lower())
        if month is None:
            return None
        day, year = int(m.group(1)), int(m.group(3))
    else:
        m = re.fullmatch(r"(\d{1,2})[/.-](\d{1,2})[/.-](\d{4})", value)
        if not m:
            return None
        day, month, year = (int(g) for g in m.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_number(value: str) -> float | None:
    """Italian decimals use a comma: "174,503" → 174.503."""
    try:
        return float(value.replace(",", "."))
    except ValueError:
        return None


def _search(patterns, text: str):
    for pattern, confidence in patterns:
        m = pattern.search(text)
        if m:
            return m, confidence
    return None, 0.0


def _section(text: str, label: str, stop: str) -> str:
    start = re.search(label, text, re.I)
    if not start:
        return ""
    rest = text[start.end():]
    end = re.search(stop, rest, re.I)
    return rest[: end.start()] if end else rest


def _party_details(section: str, prefix: str) -> dict:
    details = {}
    email = EMAIL.search(section)
    if email:
        details[f"{prefix}_email"] = email.group(0)
    for line in (ln.strip() for ln in section.splitlines()[1:]):
        if not line or EMAIL.search(line):
            continue
        if f"{prefix}_address" not in details and ADDRESS.match(line):
            details[f"{prefix}_address"] = line
        elif f"{prefix}_city" not in details and CITY.match(line):
            details[f"{prefix}_city"] = line
    return details


class RegexFieldParser(FieldParser):
    """Reads pickup order fields with labelled regular expressions."""

    @opik.track(name="regex_parse_fields")
    def parse(self, text: str) -> ParsedFields:
        raw = text or ""
        clean = re.sub(r"\s+", " ", raw).strip()
        values: dict = {}
        confidences: dict[str, float] = {}

        def found(field: str, value, confidence: float) -> None:
            if value is None or value == "":
                return
            values[field] = value
            confidences[field] = confidence

        m, conf = _search(ORDER_NUMBER_PATTERNS, clean)
        if m:
            found("order_number", m.group(1), conf)

        for field, patterns in (
            ("issue_date", ISSUE_DATE_PATTERNS),
            ("scheduled_date", SCHEDULED_DATE_PATTERNS),
            ("shipping_request_date", SHIPPING_REQUEST_PATTERNS),
            ("availability_date", AVAILABILITY_PATTERNS),
        ):
            m, conf = _search(patterns, clean)
            if m:
                found(field, parse_italian_date(m.group(1)), conf)

        m, conf = _search(LOADING_WINDOW_PATTERNS, clean)
        if m:
            found("loading_date", parse_italian_date(m.group(1)), conf)
            found("unloading_date", parse_italian_date(m.group(2)), conf)

        m, conf = _search(SENDER_PATTERNS, raw)
        if m:
            found("sender_name", m.group(1).strip(), conf)
        m, conf = _search(RECIPIENT_PATTERNS, raw)
        if m:
            found("recipient_name", m.group(1).strip(), conf)

        sender_section = _section(raw, "Mittente", "Destinatario|" + SECTION_END)
        for field, value in _party_details(sender_section, "sender").items():
            found(field, value, DETAIL)
        recipient_section = _section(raw, "Destinatario", SECTION_END)
        for field, value in _party_details(recipient_section, "recipient").items():
            found(field, value, DETAIL)

        m, conf = _search(TRANSPORT_PATTERNS, raw)
        if m:
            found("transport_type", m.group(1).strip(), conf)

        m, conf = _search(DISTANCE_PATTERNS, clean)
        if m:
            found("distance_km", parse_number(m.group(1)), conf)
        m, conf = _search(QUANTITY_PATTERNS, clean)
        if m:
            found("expected_quantity", parse_number(m.group(1)), conf)

        m, conf = _search(BASIN_PATTERNS, raw)
        if m:
            found("basin_code", m.group(1), conf)
            found("flow_type", m.group(2).upper(), conf)
            found("basin_description", m.group(3).strip(), conf)

        warnings = []
        for field in KEY_FIELDS:
            if field not in values:
                confidences[field] = 0.0
                warnings.append(f"Field '{field}' not found in document text")

        logger.debug(f"Regex parser matched {len(values)} fields, missing {len(warnings)} key fields")
        return ParsedFields(values=values, field_confidences=confidences, warnings=warnings)
