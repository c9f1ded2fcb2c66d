from pathlib import Path


def test_required_configs_exist():
    repo = Path(__file__).resolve().parents[1]
    assert (repo / "pyproject.toml").exists()
    assert (repo / ".env.example").exists()
    assert (repo / "sql" / "migrations" / "001_influencers.sql").exists()
    assert (repo / "web" / "templates" / "influencers_list.html").exists()
