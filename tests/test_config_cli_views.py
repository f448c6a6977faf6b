import pytest
from pydantic import ValidationError

from hashdrop_backend.app import views
from hashdrop_backend.app.cli import build_parser, settings_from_args
from hashdrop_backend.app.core.config import Settings
from hashdrop_backend.app.main import __version__


def test_settings_defaults():
    s = Settings()
    assert s.filename_len == 6
    assert s.rand_prefix == 24
    assert s.disallow_chars == "lIO0-"
    assert s.index_view == "minimal"
    assert s.hash_algorithm == "sha256"


def test_settings_are_immutable():
    s = Settings()
    with pytest.raises(ValidationError):
        s.filename_len = 8


@pytest.mark.parametrize("field, value", [
    ("index_view", "fancy"),
    ("hash_algorithm", "shake_256"),
    ("filename_len", 0),
    ("rand_prefix", -1),
])
def test_settings_validation(field, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("HASHDROP_UPLOAD_DIR", "/srv/files")
    monkeypatch.setenv("HASHDROP_FILENAME_LEN", "8")
    monkeypatch.setenv("HASHDROP_TITLE", "drop")
    s = Settings()
    assert s.store_dir == "/srv/files"
    assert s.filename_len == 8
    assert s.title == "drop"


def test_flags_override_environment(monkeypatch):
    monkeypatch.setenv("HASHDROP_FILENAME_LEN", "8")
    monkeypatch.setenv("HASHDROP_PORT", "9000")
    args = build_parser().parse_args(["--filename-len", "10", "--upload-dir", "/data", "--index-view", "index"])
    s = settings_from_args(args)
    assert s.filename_len == 10
    assert s.store_dir == "/data"
    assert s.index_view == "index"
    assert s.port == 9000


def test_version_flag(capsys):
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["-v"])
    assert exc.value.code == 0
    assert capsys.readouterr().out.strip() == __version__


@pytest.mark.parametrize("view", sorted(views.VIEWS))
def test_views_escape_client_names(view):
    s = Settings(index_view=view, file_uri="http://files.example")
    html = views.render(view, s, {"abc.txt": "<script>x</script>.txt"})
    assert "<script>x" not in html
    assert "&lt;script&gt;" in html
    assert "http://files.example/abc.txt" in html


@pytest.mark.parametrize("view", sorted(views.VIEWS))
def test_views_without_data_show_form_only(view):
    html = views.render(view, Settings(), None)
    assert "<form" in html
    assert "abc.txt" not in html


def test_unknown_view():
    with pytest.raises(ValueError):
        views.render("nope", Settings())


def test_import_builds_no_app(monkeypatch):
    """A bad HASHDROP_* value must not break importing the package."""
    import importlib

    from hashdrop_backend.app import main

    monkeypatch.setenv("HASHDROP_FILENAME_LEN", "zero")
    importlib.reload(main)
    assert not hasattr(main, "app")
    with pytest.raises(ValidationError):
        main.create_app()
