"""
Parser for the statistics block of a TFF match page.

Accepted layouts per statistic (first value is home, second away)::

    Topla Oynama        %55                 Topla Oynama: 55 - 45
    %55                 Topla Oynama
    %45                 %45

Labels glued to numbers ("%55Topla Oynama%45") are split onto their own line
first.
"""
import logging
import re
from collections import defaultdict
from typing import Dict, List, Optional

from .match_record import MatchRecord, MatchStats
from .text_utils import marker_pattern, normalize_key, split_lines

logger = logging.getLogger("match_stats_parser")

STAT_LABELS = (
    ("Topla Oynama", "possession"),
    ("Toplam Şut", "shots"),
    ("Kaleyi Bulan Şut", "shots_on_target"),
    ("İsabetli Şut", "shots_on_target"),
    ("Net Gol Şansı", "big_chances"),
    ("Köşe Vuruşu", "corners"),
    ("Ofsayt", "offsides"),
    ("Kurtarışlar", "saves"),
    ("Kurtarış", "saves"),
    ("Fauller", "fouls"),
    ("Faul", "fouls"),
    ("Sarı Kart", "yellow_cards"),
    ("Kırmızı Kart", "red_cards"),
)
LABEL_KEYS = {normalize_key(label): label for label, _ in STAT_LABELS}
FLOAT_FIELDS = {"possession"}
NUMBER = re.compile(r"\d+(?:[.,]\d+)?")


def _glue_splitters():
    splitters = []
    for label, _ in STAT_LABELS:
        body = marker_pattern(label).pattern
        splitters.append((re.compile(rf"([\d%])({body})", re.IGNORECASE), r"\1\n\2"))
        splitters.append((re.compile(rf"({body})(?=[\d%])", re.IGNORECASE), r"\1\n"))
    return splitters


GLUE_SPLITTERS = _glue_splitters()


def label_of(line: str) -> Optional[str]:
    """The statistic label a line starts with (text before ':'), if any."""
    return LABEL_KEYS.get(normalize_key(line.split(":", 1)[0]))


def _number(text: str) -> Optional[str]:
    found = NUMBER.search(text)
    return found.group(0).replace(",", ".") if found else None


def collect_values(lines: List[str]) -> Dict[str, List[str]]:
    values: Dict[str, List[str]] = defaultdict(list)
    pending: Optional[str] = None
    i = 0
    while i < len(lines):
        line = lines[i]
        label = label_of(line)
        if label is None:
            pending = _number(line)
            i += 1
            continue

        found: List[str] = []
        inline = line.split(":", 1)[1] if ":" in line else ""
        if inline.strip():
            found = [n.replace(",", ".") for n in NUMBER.findall(inline)]
        else:
            if pending is not None:
                found.append(pending)
            j = i + 1
            while j < len(lines) and len(found) < 2 and label_of(lines[j]) is None:
                number = _number(lines[j])
                if number is None:
                    break
                found.append(number)
                j += 1
            i = j - 1
        pending = None
        values[label].extend(found[:2])
        i += 1
    return values


def _convert(field: str, raw: str):
    try:
        return float(raw) if field in FLOAT_FIELDS else int(float(raw))
    except ValueError:
        logger.debug("Ignoring unparsable %s value %r", field, raw)
        return None


def parse_match_stats(raw_text: str, existing: Optional[MatchRecord] = None) -> MatchRecord:
    """Fill ``stats`` from a pasted statistics block; blank text returns ``existing``."""
    if existing is None:
        existing = MatchRecord()
    if not raw_text or not raw_text.strip():
        return existing

    text = raw_text
    for pattern, replacement in GLUE_SPLITTERS:
        text = pattern.sub(replacement, text)
    values = collect_values(split_lines(text))

    record = existing.model_copy(deep=True)
    if record.stats is None:
        record.stats = MatchStats()
    for label, field in STAT_LABELS:
        found = values.get(label) or []
        if len(found) >= 1:
            home = _convert(field, found[0])
            if home is not None:
                setattr(record.stats, f"home_{field}", home)
        if len(found) >= 2:
            away = _convert(field, found[1])
            if away is not None:
                setattr(record.stats, f"away_{field}", away)

    logger.debug("Parsed statistics for %d labels", len(values))
    return record
