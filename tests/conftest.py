import pytest

from parsing.match_report_parser import MatchReportParser
from parsing.match_record import MatchRecord
from parsing.team_resolver import TeamDirectory, TeamEntry, default_directory


FULL_REPORT = """
GALATASARAY A.Ş.
FENERBAHÇE A.Ş.
2
1
30.01.2026
20:00
RAMS PARK STADYUMU - İstanbul
ALİ ŞANSALAN (Hakem)
MEHMET KISA (1. Yardımcı Hakem)
ONUR ÖZGÜR (2. Yardımcı Hakem)
VOLKAN BAYARSLAN (Dördüncü Hakem)
HALİL UMUT MELER (VAR)
HALİL UMUT MELER (VAR)
ZORBAY KÜÇÜK (AVAR)
AHMET ÇAKAR (Gözlemci)
SERDAR KAYA (Temsilci)
GALATASARAY A.Ş.
İlk 11
1. FERNANDO MUSLERA
9. MAURO ICARDI
Yedekler
19. GÜNAY GÜVENÇ
Teknik Sorumlu
OKAN BURUK
Goller
35.dk MAURO ICARDI (P)
Kartlar
Sarı Kart 40.dk FERNANDO MUSLERA
Sarı Kart
Oyundan Çıkanlar
70.dk MAURO ICARDI
Oyuna Girenler
70.dk GÜNAY GÜVENÇ
FENERBAHÇE A.Ş.
İlk 11
1. DOMINIK LIVAKOVIC
10. DUSAN TADIC
Yedekler
53. ERTUĞRUL ÇETİN
Teknik Sorumlu
JOSE MOURINHO
Goller
90+2.dk DUSAN TADIC
Kartlar
Kırmızı Kart Çift Sarıdan 88.dk DUSAN TADIC
"""


@pytest.fixture
def directory() -> TeamDirectory:
    return default_directory()


@pytest.fixture
def small_directory() -> TeamDirectory:
    return TeamDirectory([
        TeamEntry(id="gal", name="Galatasaray", short="gal"),
        TeamEntry(id="fen", name="Fenerbahçe", short="fen"),
        TeamEntry(id="bes", name="Beşiktaş", short="bes", aliases=("bjk",)),
    ])


@pytest.fixture
def parser(directory) -> MatchReportParser:
    return MatchReportParser(resolver=directory)


@pytest.fixture
def base_match() -> MatchRecord:
    return MatchRecord(id="", week=1, status="draft")


@pytest.fixture
def full_report() -> str:
    return FULL_REPORT
