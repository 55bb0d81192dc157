"""Tests for remote record validation."""
import pytest

from remotes.errors import ValidationError
from remotes.validation import validate_probe_target, validate_remote


def smb_remote(**overrides):
    data = {
        "name": "media",
        "type": "smb",
        "server": "192.168.1.5",
        "share": "movies",
    }
    data.update(overrides)
    return data


def test_minimal_smb_and_nfs_are_valid():
    validate_remote(smb_remote())
    validate_remote(smb_remote(type="nfs", share="export/media"))


def test_full_smb_record_is_valid():
    validate_remote(smb_remote(
        username="bob", password="pw", domain="WORKGROUP",
        version="2.0", uid=1000, gid=0, auto_mount=True,
    ))


@pytest.mark.parametrize("field", ["name", "type", "server", "share"])
@pytest.mark.parametrize("value", [None, "", "   "])
def test_required_fields(field, value):
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(**{field: value}))
    assert exc.value.field == field


def test_missing_key_is_required():
    data = smb_remote()
    del data["share"]
    with pytest.raises(ValidationError) as exc:
        validate_remote(data)
    assert exc.value.field == "share"


def test_unknown_type():
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(type="webdav"))
    assert exc.value.field == "type"


@pytest.mark.parametrize("version", ["4.0", "3", "", 3.0])
def test_bad_smb_version(version):
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(version=version))
    assert exc.value.field == "version"


def test_version_rejected_for_nfs():
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(type="nfs", version="3.0"))
    assert exc.value.field == "version"


@pytest.mark.parametrize("field", ["uid", "gid"])
@pytest.mark.parametrize("value", [-1, "1000", 1.5, True])
def test_uid_gid_must_be_non_negative_integers(field, value):
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(**{field: value}))
    assert exc.value.field == field


@pytest.mark.parametrize("server", ["nas.local", "my-nas", "10.0.0.1", "NAS01"])
def test_valid_servers(server):
    validate_remote(smb_remote(server=server))


@pytest.mark.parametrize("server", ["nas local", "nas;reboot", "//nas", "nas/share", "$(id)"])
def test_invalid_servers(server):
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(server=server))
    assert exc.value.field == "server"


def test_auto_mount_must_be_boolean():
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(auto_mount="yes"))
    assert exc.value.field == "auto_mount"


def test_credentials_must_be_strings():
    with pytest.raises(ValidationError) as exc:
        validate_remote(smb_remote(password=1234))
    assert exc.value.field == "password"


def test_probe_target():
    validate_probe_target("nas", "nfs")
    with pytest.raises(ValidationError):
        validate_probe_target("", "smb")
    with pytest.raises(ValidationError):
        validate_probe_target("nas", "ftp")
    with pytest.raises(ValidationError):
        validate_probe_target("bad host", "smb")
