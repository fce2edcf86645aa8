import json

import pytest


def _write_contest_set(contest_set_dir, include_broken=True, run_config=None):

    cvr_dir = contest_set_dir / "cvr"
    cvr_dir.mkdir(parents=True)

    mayor = {
        "candidates": ["Yellow Bird", "Chipotle Cholula", "Tabasco"],
        "ballots": [
            {"voterId": "1", "rankings": [{"candidate": "Yellow Bird", "rank": 1}, {"candidate": "Tabasco", "rank": 2}]},
            {"voterId": "2", "rankings": [{"candidate": "Tabasco", "rank": 1}, {"candidate": "Yellow Bird", "rank": 2}]},
            {"voterId": "3", "rankings": [{"candidate": "Chipotle Cholula", "rank": 1}, {"candidate": "Tabasco", "rank": 2}]},
            {"voterId": "4", "rankings": [{"candidate": "Yellow Bird", "rank": 1}]},
            {"voterId": "5", "rankings": [{"candidate": "Tabasco", "rank": 1}]},
        ],
    }
    (cvr_dir / "mayor.json").write_text(json.dumps(mayor))

    (cvr_dir / "council.csv").write_text(
        "voter_id,candidate,rank\n"
        "1,A,1\n"
        "2,A,1\n"
        "3,B,1\n"
        "3,A,2\n"
        "4,C,1\n"
    )

    broken = {
        "candidates": ["A", "B"],
        "ballots": [{"voterId": "1", "rankings": [{"candidate": "A", "rank": 2}]}],
    }
    (cvr_dir / "broken.json").write_text(json.dumps(broken))

    rows = [
        "name,cvr_path,parser_func,rcv_type,ignore_contest",
        "mayor,cvr/mayor.json,election_json,,",
        "council,cvr/council.csv,rank_long_csv,SingleElimination,false",
        "skipped,cvr/missing.json,election_json,,true",
    ]
    if include_broken:
        rows.append("broken,cvr/broken.json,,,")
    (contest_set_dir / "contest_set.csv").write_text("\n".join(rows) + "\n")

    (contest_set_dir / "run_config.json").write_text(json.dumps(run_config or {}))

    return contest_set_dir


@pytest.fixture
def make_contest_set(tmp_path):
    """Factory writing a small contest set directory: 'mayor', 'council', an ignored
    contest and, optionally, 'broken', whose ballot fails validation."""

    def make(include_broken=True, run_config=None):
        return _write_contest_set(tmp_path / "contest_set", include_broken, run_config)

    return make
