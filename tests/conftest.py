"""Shared pytest fixtures."""
import os

import pytest

# Keep @opik.track from exporting spans during tests.
os.environ.setdefault("OPIK_TRACK_DISABLE", "true")

SAMPLE_ORDER_TEXT = """\
BUONO DI RITIRO N°: 925511058895
Data emissione buono 14 maggio 2025
Mittente CC DOMUS RICYCLE
ZONA INDUSTRIALE - STATALE PRIMOSOLE 13
CATANIA CT
INFO@DOMUSRICYCLE.COM
Destinatario CSS ECOLOGISTIC SPA
VIA DELLE INDUSTRIE 12
SIRACUSA SR
ordini@cssecologistic.it
Trasportatore - AUTOTRASPORTI SUD SRL
Distanza Chilometrica 174,503
Data Carico / Scarico tra 19 maggio 2025 / 21 maggio 2025
Lista bacini
Codice Flusso Descrizione
2002048 A COMUNE DI SIRACUSA
"""

MINIMAL_PDF = b"%PDF-1.4\n" + b"0" * 41


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_ORDER_TEXT


@pytest.fixture
def pdf_bytes() -> bytes:
    """A 50-byte buffer that passes the header check; not a renderable PDF."""
    return MINIMAL_PDF
