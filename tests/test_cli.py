"""Tests for the recipebox-admin command line."""

from contextlib import contextmanager

import pytest

from recipebox import cli
from recipebox.models import Recipe


@pytest.fixture(autouse=True)
def use_test_session(db, monkeypatch):
    @contextmanager
    def _session():
        yield db
        db.commit()

    monkeypatch.setattr(cli, "get_db_session", _session)


def test_validate_clean(capsys):
    assert cli.main(["validate"]) == 0
    assert "passed" in capsys.readouterr().out


def test_destructive_command_needs_confirmation(db, make_user, make_recipe):
    make_recipe(make_user("a@example.com"), "Pancakes")

    assert cli.main(["reset-recipes"]) == 2
    assert db.query(Recipe).count() == 1

    assert cli.main(["reset-recipes", "--yes"]) == 0
    assert db.query(Recipe).count() == 0


def test_rebuild_fts(capsys, make_user, make_recipe):
    user = make_user("a@example.com")
    make_recipe(user, "Pancakes")
    make_recipe(user, "Waffles")

    assert cli.main(["rebuild-fts"]) == 0
    assert "2 recipes indexed" in capsys.readouterr().out


def test_unknown_command_exits():
    with pytest.raises(SystemExit):
        cli.main(["explode"])
