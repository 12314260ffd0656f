"""
Tests for the pasted match report parser.
"""
import re

from parsing.match_record import MatchLineups, MatchOfficials, MatchRecord
from parsing.match_report_parser import (
    AWAY,
    HOME,
    SECTION_COACH,
    SECTION_NONE,
    SECTION_SUBS,
    SECTION_XI,
    RosterCursor,
    detect_kickoff,
    detect_score,
    detect_stadium,
    detect_teams,
    extract_lineups,
    extract_officials,
    find_boundary_index,
    parse_match_report,
    roster_transition,
    scan_cards,
    scan_section_events,
    tokenize,
)

MINUTE = re.compile(r"^\d+(\+\d+)?\.dk$")


# ---------------------------------------------------------------- tokenizer

def test_tokenize_trims_and_drops_blank_lines():
    assert tokenize("  GALATASARAY \r\n\r\n\t İlk 11\rYedekler\n  ") == ["GALATASARAY", "İlk 11", "Yedekler"]


def test_tokenize_empty():
    assert tokenize("") == []
    assert tokenize("   \n \n") == []


def test_blank_text_returns_existing_unchanged(parser, base_match):
    assert parser.parse("", base_match) is base_match
    assert parser.parse("  \n\t\n ", base_match) is base_match


# ------------------------------------------------------------------- header

def test_detect_teams_takes_first_two_distinct(directory):
    lines = ["12", "GS", "GALATASARAY A.Ş. 2-1 FENERBAHÇE A.Ş.", "GALATASARAY A.Ş.", "FENERBAHÇE A.Ş."]
    assert detect_teams(lines, directory) == ["gal", "fen"]


def test_detect_teams_ignores_punctuation_only_lines(directory):
    assert detect_teams(["...", "GALATASARAY", "---", "TRABZONSPOR A.Ş."], directory) == ["gal", "tra"]


def test_detect_teams_only_scans_first_twenty_lines(directory):
    lines = ["GALATASARAY"] + [f"filler line {i}" for i in range(19)] + ["FENERBAHÇE"]
    assert detect_teams(lines, directory) == ["gal"]


def test_detect_score_uses_first_two_standalone_numbers():
    assert detect_score(["GALATASARAY", "3", "x", "123", "0", "7"]) == (3, 0)
    assert detect_score(["GALATASARAY", "3"]) is None


def test_detect_score_ignores_numbers_after_line_fifteen():
    lines = ["2"] + ["text"] * 14 + ["1"]
    assert detect_score(lines) is None


def test_detect_kickoff_time_on_same_line():
    kickoff = detect_kickoff(["30.01.2026 - 20:00"])
    assert (kickoff.year, kickoff.month, kickoff.day, kickoff.hour, kickoff.minute) == (2026, 1, 30, 20, 0)


def test_detect_kickoff_time_on_short_next_line():
    kickoff = detect_kickoff(["30/01/2026", "19:30"])
    assert (kickoff.hour, kickoff.minute) == (19, 30)


def test_detect_kickoff_ignores_long_next_line():
    kickoff = detect_kickoff(["30-01-2026", "Kickoff is scheduled at 20:00 local time"])
    assert (kickoff.hour, kickoff.minute) == (0, 0)


def test_detect_kickoff_last_valid_date_wins_and_invalid_is_skipped():
    kickoff = detect_kickoff(["01.02.2026 19:00", "05.02.2026", "32.13.2026"])
    assert (kickoff.month, kickoff.day, kickoff.hour) == (2, 5, 0)


def test_detect_kickoff_window():
    lines = ["text"] * 30 + ["30.01.2026 20:00"]
    assert detect_kickoff(lines) is None


def test_detect_stadium_truncates_at_separator():
    assert detect_stadium(["GALATASARAY", "RAMS PARK STADYUMU - İstanbul"]) == "RAMS PARK STADYUMU"
    assert detect_stadium(["Şükrü Saracoğlu Stadı"]) == "Şükrü Saracoğlu Stadı"
    assert detect_stadium(["no venue here"]) is None


def test_detect_stadium_arena_and_park_are_whole_words():
    assert detect_stadium(["Ülker Arena"]) == "Ülker Arena"
    assert detect_stadium(["Papara Park - Trabzon"]) == "Papara Park"
    assert detect_stadium(["Parkspor"]) is None
    assert detect_stadium(["Arenaspor Kulübü"]) is None


def test_detect_stadium_ignores_long_lines():
    assert detect_stadium(["STADYUMU " + "x" * 100]) is None


# ---------------------------------------------------------------- officials

def test_extract_officials_buckets_roles(full_report):
    result = extract_officials(tokenize(full_report))
    officials = result.officials
    assert officials.referees == ["ALİ ŞANSALAN", "MEHMET KISA", "ONUR ÖZGÜR", "VOLKAN BAYARSLAN"]
    assert officials.var_referees == ["HALİL UMUT MELER", "ZORBAY KÜÇÜK"]
    assert officials.observers == ["AHMET ÇAKAR"]
    assert officials.representatives == ["SERDAR KAYA"]
    assert result.referee == "ALİ ŞANSALAN"
    assert result.var_referee == "HALİL UMUT MELER"


def test_extract_officials_is_case_insensitive():
    result = extract_officials([
        "Ali Şansalan (HAKEM)",
        "Mehmet Kısa (1. YARDIMCI HAKEM)",
        "Bir Gözlemci (gözlemci)",
        "AHMET ÇAKAR (GÖZLEMCİ)",
        "SERDAR KAYA (TEMSİLCİ)",
        "VOLKAN BAYARSLAN (DÖRDÜNCÜ HAKEM)",
    ])
    assert result.officials.referees == ["Ali Şansalan", "Mehmet Kısa", "", "VOLKAN BAYARSLAN"]
    assert result.officials.observers == ["Bir Gözlemci", "AHMET ÇAKAR"]
    assert result.officials.representatives == ["SERDAR KAYA"]


def test_extract_officials_appends_to_existing_without_mutating_it():
    existing = MatchOfficials(referees=["OLD"], observers=["ESKİ GÖZLEMCİ"])
    result = extract_officials(["YENİ GÖZLEMCİ (Gözlemci)"], existing)
    assert result.officials.referees == ["OLD", "", "", ""]
    assert result.officials.observers == ["ESKİ GÖZLEMCİ", "YENİ GÖZLEMCİ"]
    assert existing.observers == ["ESKİ GÖZLEMCİ"]


def test_extract_officials_observers_are_not_deduplicated():
    result = extract_officials(["AHMET (Gözlemci)", "AHMET (Gözlemci)"])
    assert result.officials.observers == ["AHMET", "AHMET"]


# ------------------------------------------------------------------ lineups

def test_roster_transitions():
    cursor = RosterCursor()
    assert roster_transition(cursor, "FERNANDO MUSLERA") is None

    home_xi = roster_transition(cursor, "İLK 11")
    assert (home_xi.team, home_xi.section) == (HOME, SECTION_XI)

    subs = roster_transition(home_xi, "Yedekler")
    assert (subs.team, subs.section) == (HOME, SECTION_SUBS)

    coach = roster_transition(subs, "TEKNİK DİREKTÖR")
    assert (coach.team, coach.section) == (HOME, SECTION_COACH)

    closed = roster_transition(coach, "Oyundan Çıkanlar")
    assert closed.section == SECTION_NONE

    away_xi = roster_transition(closed, "ilk 11")
    assert (away_xi.team, away_xi.section) == (AWAY, SECTION_XI)
    # A third block is still attributed to the away side.
    assert roster_transition(away_xi, "İlk 11").team == AWAY


def test_lineups_scenario_home_and_away_coaches(parser, base_match):
    text = """
        GALATASARAY A.Ş. 2-1 FENERBAHÇE A.Ş.
        30.01.2026 - 20:00
        RAMS PARK STADYUMU

        Hakem: ALİ ŞANSALAN

        GALATASARAY A.Ş.
        ilk 11
        1. FERNANDO MUSLERA
        10. DRIES MERTENS

        Yedekler
        19. GÜNAY GÜVENÇ

        Teknik Sorumlu
        OKAN BURUK

        Kartlar
        ...

        FENERBAHÇE A.Ş.
        İlk 11
        1. DOMINIK LIVAKOVIC

        Yedekler
        53. ERTUĞRUL ÇETİN

        Teknik Sorumlu
        JOSE MOURINHO

        Kartlar
        ...
    """
    result = parser.parse(text, base_match)

    assert result.lineups.home_coach == "OKAN BURUK"
    assert result.lineups.away_coach == "JOSE MOURINHO"
    assert len(result.lineups.home) == 2
    assert len(result.lineups.away) == 1
    assert result.lineups.home_subs[0].number == "19"
    assert result.lineups.away_subs[0].name == "ERTUĞRUL ÇETİN"
    assert (result.home_team_id, result.away_team_id) == ("gal", "fen")
    assert result.stadium == "RAMS PARK STADYUMU"
    assert result.date == "2026-01-30T17:00:00.000Z"
    assert result.id == "week1-gal-fen-2026-01-30"


def test_coach_marker_is_case_insensitive(parser, base_match):
    text = """
        Team A
        İlk 11
        1. Player A

        TEKNİK DİREKTÖR
        Home Coach Name

        Team B
        İlk 11
        2. Player B

        TEKNİK SORUMLU
        Away Coach Name
    """
    result = parser.parse(text, base_match)
    assert result.lineups.home_coach == "Home Coach Name"
    assert result.lineups.away_coach == "Away Coach Name"


def test_coach_marker_case_variants_give_identical_lineups():
    upper = extract_lineups(["İlk 11", "1. A", "TEKNİK SORUMLU", "COACH"])
    lower = extract_lineups(["İlk 11", "1. A", "teknik sorumlu", "COACH"])
    assert upper == lower


def test_coach_after_starting_eleven_without_substitutes(parser, base_match):
    text = """
        TRABZONSPOR A.Ş.
        ilk 11
        1. UĞURCAN ÇAKIR
        Teknik Sorumlu
        ŞENOL GÜNEŞ

        BEŞİKTAŞ A.Ş.
        İLK 11
        34. MERT GÜNOK
        Teknik Sorumlu
        GIOVANNI VAN BRONKHORST
    """
    result = parser.parse(text, base_match)
    assert result.lineups.home_coach == "ŞENOL GÜNEŞ"
    assert result.lineups.away_coach == "GIOVANNI VAN BRONKHORST"
    assert (result.home_team_id, result.away_team_id) == ("tra", "bes")


def test_coach_takes_only_first_name_line():
    lineup = extract_lineups(["İlk 11", "Teknik Direktör", "5. NOT A COACH", "ab", "REAL COACH", "Cezalı"])
    assert lineup.home_coach == "REAL COACH"


def test_lineups_blank_extraction_overwrites_manual_entries(parser):
    existing = MatchRecord(
        lineups=MatchLineups(home_coach="Manual Coach", home=[{"number": "1", "name": "Manual"}])
    )
    result = parser.parse("some unrelated text", existing)
    assert result.lineups == MatchLineups()
    assert existing.lineups.home_coach == "Manual Coach"


# ------------------------------------------------------------------- events

def test_boundary_index_is_second_starting_eleven():
    lines = ["A", "İlk 11", "B", "ilk 11", "C"]
    assert find_boundary_index(lines) == 3
    assert find_boundary_index(["İlk 11", "x"]) == 2


def test_card_tally_counts_every_keyword_but_events_need_a_minute():
    lines = ["İlk 11", "Sarı Kart 40.dk MUSLERA", "Sarı Kart", "İlk 11", "Kırmızı Kart Çift Sarıdan 88.dk TADIC"]
    tally = scan_cards(lines, find_boundary_index(lines))
    assert (tally.home_yellow, tally.away_yellow, tally.home_red, tally.away_red) == (2, 0, 0, 1)
    assert [(e.type, e.minute, e.player, e.team_id) for e in tally.events] == [
        ("yellow_card", "40.dk", "MUSLERA", "home"),
        ("red_card", "88.dk", "TADIC", "away"),
    ]


def test_section_events_follow_context_markers():
    lines = [
        "Goller", "35.dk MAURO ICARDI (P)",
        "Kartlar", "Sarı Kart 40.dk MUSLERA",
        "Oyundan Çıkanlar", "70.dk MAURO ICARDI",
        "Oyuna Girenler", "70.dk GÜNAY GÜVENÇ",
        "Yedekler", "80.dk NOT AN EVENT",
    ]
    events = scan_section_events(lines, len(lines))
    assert [(e.type, e.minute, e.player) for e in events] == [
        ("goal", "35.dk", "MAURO ICARDI"),
        ("substitution_out", "70.dk", "MAURO ICARDI"),
        ("substitution_in", "70.dk", "GÜNAY GÜVENÇ"),
    ]


# ---------------------------------------------------------------- assembler

def test_full_report(parser, base_match, full_report):
    result = parser.parse(full_report, base_match)

    assert result.home_team_id == "gal"
    assert result.home_team_name == "Galatasaray"
    assert result.away_team_id == "fen"
    assert result.away_team_name == "Fenerbahçe"
    assert (result.home_score, result.away_score, result.score) == (2, 1, "2-1")
    assert result.date == "2026-01-30T17:00:00.000Z"
    assert result.stadium == "RAMS PARK STADYUMU"
    assert result.referee == "ALİ ŞANSALAN"
    assert result.var_referee == "HALİL UMUT MELER"
    assert result.id == "week1-gal-fen-2026-01-30"

    assert [p.name for p in result.lineups.home] == ["FERNANDO MUSLERA", "MAURO ICARDI"]
    assert [p.number for p in result.lineups.away] == ["1", "10"]
    assert result.lineups.home_coach == "OKAN BURUK"
    assert result.lineups.away_coach == "JOSE MOURINHO"

    assert [(e.type, e.minute, e.player, e.team_id) for e in result.events] == [
        ("yellow_card", "40.dk", "FERNANDO MUSLERA", "home"),
        ("red_card", "88.dk", "DUSAN TADIC", "away"),
        ("goal", "35.dk", "MAURO ICARDI", "home"),
        ("substitution_out", "70.dk", "MAURO ICARDI", "home"),
        ("substitution_in", "70.dk", "GÜNAY GÜVENÇ", "home"),
        ("goal", "90+2.dk", "DUSAN TADIC", "away"),
    ]
    assert result.stats.home_yellow_cards == 2
    assert result.stats.away_yellow_cards == 0
    assert result.stats.home_red_cards == 0
    assert result.stats.away_red_cards == 1


def test_event_minutes_are_well_formed(parser, full_report):
    result = parser.parse(full_report)
    assert result.events
    assert all(MINUTE.match(e.minute) for e in result.events)


def test_parse_is_deterministic_and_does_not_mutate_input(parser, base_match, full_report):
    before = base_match.model_dump()
    first = parser.parse(full_report, base_match)
    second = parser.parse(full_report, base_match)
    assert first.model_dump() == second.model_dump()
    assert base_match.model_dump() == before


def test_teams_untouched_when_fewer_than_two_resolve(parser):
    existing = MatchRecord(home_team_id="bes", home_team_name="Beşiktaş", away_team_id="kon", away_team_name="Konyaspor")
    result = parser.parse("GALATASARAY A.Ş.\nİlk 11\n1. FERNANDO MUSLERA", existing)
    assert (result.home_team_id, result.away_team_id) == ("bes", "kon")
    assert (result.home_team_name, result.away_team_name) == ("Beşiktaş", "Konyaspor")


def test_home_and_away_are_distinct(parser):
    result = parser.parse("GALATASARAY\nGALATASARAY A.Ş.\nFENERBAHÇE")
    assert result.home_team_id == "gal"
    assert result.away_team_id == "fen"


def test_placeholder_id_is_regenerated(parser, full_report):
    result = parser.parse(full_report, MatchRecord(id="week1-takim-takim", week=21))
    assert result.id == "week21-gal-fen-2026-01-30"


def test_finalized_id_is_kept(parser, full_report):
    result = parser.parse(full_report, MatchRecord(id="derby-2026", week=21))
    assert result.id == "derby-2026"


def test_id_uses_competition_prefix_and_group(directory, full_report):
    result = parse_match_report(
        full_report,
        MatchRecord(week=3, competition="cup", group="B"),
        resolver=directory,
        competition_prefixes={"cup": "kupa"},
    )
    assert result.id == "kupa3-B-gal-fen-2026-01-30"


def test_injected_resolver_is_used(small_directory):
    result = parse_match_report("BJK\nGalatasaray\n01.03.2026 19:00", resolver=small_directory)
    assert (result.home_team_id, result.away_team_id) == ("bes", "gal")
    assert result.id == "week1-bes-gal-2026-03-01"


def test_garbage_input_never_raises(parser):
    junk = "\x00\xff�\n99.99.9999 99:99\n((((\n)))\n45+.dk\n" + "ş" * 500
    result = parser.parse(junk, MatchRecord(id="keep-me"))
    assert result.id == "keep-me"
    assert result.events == []


def test_out_of_range_year_is_skipped(parser):
    result = parser.parse("01.01.0001\nsomething", MatchRecord(id="keep"))
    assert result.id == "keep"
    assert result.date is None


def test_out_of_range_year_keeps_earlier_date():
    kickoff = detect_kickoff(["30.01.2026 20:00", "01.01.0001"])
    assert (kickoff.year, kickoff.month, kickoff.day, kickoff.hour) == (2026, 1, 30, 20)
