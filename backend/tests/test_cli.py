import csv

import mhike


def test_cli_end_to_end(tmp_db_path, tmp_path, capsys):
    base = ["--db", tmp_db_path]
    mhike.main(base + ["init"])
    mhike.main(base + ["register", "--name", "A", "--email", "a@x.com", "--password", "secret1"])
    mhike.main(base + ["add-hike", "--user-id", "1", "--name", "Ridge Walk", "--location", "Hills",
                       "--date", "2024-05-01", "--length", "8", "--difficulty", "easy",
                       "--duration", "3 hours", "--parking"])
    mhike.main(base + ["observe", "--hike-id", "1", "--type", "wildlife", "--comment", "saw a deer",
                       "--time", "2024-05-01T10:00:00Z"])
    mhike.main(base + ["complete", "--hike-id", "1"])
    mhike.main(base + ["search", "--user-id", "1", "ridge", "--status", "completed"])

    out = capsys.readouterr().out
    assert "User #1 created" in out
    assert "Hike #1 added" in out
    assert "Ridge Walk" in out

    out_dir = tmp_path / "exports"
    mhike.main(base + ["export", "--user-id", "1", "--out", str(out_dir)])
    with open(out_dir / "hikes_user1.csv", encoding="utf-8-sig") as f:
        rows = list(csv.DictReader(f))
    assert [r["name"] for r in rows] == ["Ridge Walk"]
    with open(out_dir / "observations_user1.csv", encoding="utf-8-sig") as f:
        assert [r["comment"] for r in csv.DictReader(f)] == ["saw a deer"]
