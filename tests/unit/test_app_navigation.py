"""Unit tests for the page registry behind the Streamlit navigation."""

from pathlib import Path

from src.ui import app

UI_DIR = Path(app.__file__).parent


def test_every_page_script_exists():
    for page in app.PAGE_REGISTRY:
        assert (UI_DIR / page.script).is_file(), page.script


def test_pages_group_into_sections_in_registry_order():
    grouped = app._group_by_section(app.PAGE_REGISTRY)

    assert list(grouped) == ["Play", "Standings", "Administration"]
    assert [page.title for page in grouped["Play"]] == ["Account", "MVP Vote", "Bets"]

