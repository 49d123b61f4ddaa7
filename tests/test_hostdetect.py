import pytest

from nvim_bootstrap.context import OsKind
from nvim_bootstrap.lib import hostdetect
from nvim_bootstrap.lib.command import CmdResult


@pytest.fixture
def ubuntu_release(monkeypatch):
    def set_release(id_="ubuntu", like="debian", version="22.04"):
        monkeypatch.setattr(hostdetect.distro, "info", lambda: {"id": id_, "codename": "jammy"})
        monkeypatch.setattr(hostdetect.distro, "like", lambda: like)
        monkeypatch.setattr(hostdetect.distro, "version", lambda: version)

    set_release()
    return set_release


@pytest.fixture
def glibc_235(monkeypatch):
    monkeypatch.setattr(hostdetect.platform, "libc_ver", lambda: ("glibc", "2.35"))


def test_darwin_ostype_is_macos():
    ctx = hostdetect.probe_context(ostype="darwin23")
    assert ctx.os_kind is OsKind.MACOS
    assert ctx.distro_version is None


def test_ubuntu(ubuntu_release, glibc_235):
    ctx = hostdetect.probe_context(ostype="linux-gnu")
    assert ctx.os_kind is OsKind.DEBIAN_LIKE
    assert ctx.distro_version == "22.04"
    assert ctx.runtime_library_version == "2.35"


def test_debian_derivative_via_id_like(ubuntu_release, glibc_235):
    ubuntu_release(id_="linuxmint", like="ubuntu debian", version="21.2")
    ctx = hostdetect.probe_context(ostype="linux-gnu")
    assert ctx.os_kind is OsKind.DEBIAN_LIKE
    assert ctx.distro_version == "21.2"


def test_debian_without_version_id(ubuntu_release, glibc_235):
    ubuntu_release(id_="debian", like="", version="")
    ctx = hostdetect.probe_context(ostype="linux-gnu")
    assert ctx.os_kind is OsKind.DEBIAN_LIKE
    assert ctx.distro_version == "unknown"


def test_other_linux_is_unknown(ubuntu_release, glibc_235):
    ubuntu_release(id_="fedora", like="", version="40")
    ctx = hostdetect.probe_context(ostype="linux-gnu")
    assert ctx.os_kind is OsKind.UNKNOWN
    assert ctx.distro_version is None


def test_other_ostype_is_unknown():
    ctx = hostdetect.probe_context(ostype="freebsd14.0")
    assert ctx.os_kind is OsKind.UNKNOWN


def test_falls_back_to_platform_when_ostype_unset(monkeypatch):
    monkeypatch.delenv("OSTYPE", raising=False)
    monkeypatch.setattr(hostdetect.platform, "system", lambda: "Darwin")
    assert hostdetect.probe_context().os_kind is OsKind.MACOS


def test_glibc_from_ldd_when_libc_ver_is_empty(monkeypatch):
    monkeypatch.setattr(hostdetect.platform, "libc_ver", lambda: ("", ""))
    monkeypatch.setattr(
        hostdetect,
        "run_cmd",
        lambda argv, check=False: CmdResult(argv, 0, "ldd (Ubuntu GLIBC 2.31-0ubuntu9.9) 2.31\nCopyright\n", ""),
    )
    assert hostdetect.detect_glibc_version() == "2.31"


def test_glibc_unparseable(monkeypatch):
    monkeypatch.setattr(hostdetect.platform, "libc_ver", lambda: ("", ""))
    monkeypatch.setattr(hostdetect, "run_cmd", lambda argv, check=False: CmdResult(argv, 127, "", ""))
    assert hostdetect.detect_glibc_version() is None


def test_os_name(ubuntu_release):
    assert hostdetect.detect_os_name("linux-gnu") == "ubuntu"
    assert hostdetect.detect_os_name("darwin22") == "macos"
    assert hostdetect.detect_os_name("msys") == "unknown"
