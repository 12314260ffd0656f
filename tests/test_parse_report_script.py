import json
import sys

from scripts.parse_report import html_to_text, main


def test_html_to_text_flattens_blocks():
    markup = """
    <html><head><style>td { color: red }</style><script>var x = 1;</script></head>
    <body>
      <div>GALATASARAY A.Ş.</div><div>FENERBAHÇE A.Ş.</div>
      <table><tr><td>İlk 11</td></tr><tr><td>1. FERNANDO MUSLERA</td></tr></table>
    </body></html>
    """
    assert html_to_text(markup).splitlines() == [
        "GALATASARAY A.Ş.",
        "FENERBAHÇE A.Ş.",
        "İlk 11",
        "1. FERNANDO MUSLERA",
    ]


def test_main_prints_record_json(tmp_path, monkeypatch, capsys, full_report):
    report = tmp_path / "report.txt"
    report.write_text(full_report, encoding="utf-8")
    existing = tmp_path / "draft.json"
    existing.write_text(json.dumps({"id": "", "week": 21}), encoding="utf-8")
    stats = tmp_path / "stats.txt"
    stats.write_text("Toplam Şut: 12 - 8", encoding="utf-8")

    monkeypatch.setattr(
        sys, "argv", ["parse_report.py", str(report), "--existing", str(existing), "--stats", str(stats)]
    )
    assert main() == 0
    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "week21-gal-fen-2026-01-30"
    assert data["stats"]["homeShots"] == 12
    assert data["stats"]["homeYellowCards"] == 2


def test_main_reports_missing_file(tmp_path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["parse_report.py", str(tmp_path / "missing.txt")])
    assert main() == 1
