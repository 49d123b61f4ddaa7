import pytest

from nvim_bootstrap.lib import aptfix
from nvim_bootstrap.lib.aptfix import clean_source_lines, ubuntu_sources
from nvim_bootstrap.lib.command import CommandError


def test_drops_malformed_and_duplicate_lines():
    lines = [
        "deb http://archive.ubuntu.com/ubuntu jammy main\n",
        "deb http://ppa.launchpad.net/x/ubuntu $(lsb_release -cs) main\n",
        "deb http://archive.ubuntu.com/ubuntu jammy main\n",
        "# comment\n",
        "deb http://security.ubuntu.com/ubuntu jammy-security main\n",
    ]
    assert clean_source_lines(lines) == [
        "deb http://archive.ubuntu.com/ubuntu jammy main\n",
        "# comment\n",
        "deb http://security.ubuntu.com/ubuntu jammy-security main\n",
    ]


def test_clean_file_is_unchanged():
    lines = ["deb a b c\n", "deb d e f\n"]
    assert clean_source_lines(lines) == lines


def test_ubuntu_sources_for_codename():
    text = ubuntu_sources("focal")
    assert text.count("\n") == 4
    assert "deb http://archive.ubuntu.com/ubuntu focal-updates main restricted universe multiverse" in text
    assert "deb http://security.ubuntu.com/ubuntu focal-security" in text


def test_temp_file_removed_when_copy_fails(tmp_path, monkeypatch):
    monkeypatch.setattr("tempfile.tempdir", str(tmp_path))

    def failing_cp(argv, **kwargs):
        raise CommandError(argv, 1, "cp: permission denied")

    monkeypatch.setattr(aptfix, "run_cmd", failing_cp)
    with pytest.raises(CommandError):
        aptfix._write_root_file(str(tmp_path / "sources.list"), "deb a b c\n", dry_run=False)

    assert list(tmp_path.glob("*.list")) == []
