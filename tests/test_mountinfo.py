import pytest

from procmetrics.mountinfo import (
    MountInfo,
    get_proc_mounts,
    parse_mount_options,
    parse_mountinfo,
    parse_mountinfo_string,
)

TMPFS_SUPER = {"rw": "", "size": "405096k", "mode": "700", "uid": "112", "gid": "116"}
TMPFS_OPTS = {"rw": "", "nosuid": "", "nodev": "", "relatime": ""}


@pytest.mark.parametrize(
    "line, expected",
    [
        (
            "16 21 0:16 / /sys rw,nosuid,nodev,noexec,relatime shared:7 - sysfs sysfs rw",
            MountInfo(
                mount_id=16,
                parent_id=21,
                major_minor_ver="0:16",
                root="/",
                mount_point="/sys",
                options={"rw": "", "nosuid": "", "nodev": "", "noexec": "", "relatime": ""},
                optional_fields={"shared": "7"},
                fs_type="sysfs",
                source="sysfs",
                super_options={"rw": ""},
            ),
        ),
        (
            "225 20 0:39 / /run/user/112 rw,nosuid,nodev,relatime shared:177 - tmpfs tmpfs "
            "rw,size=405096k,mode=700,uid=112,gid=116",
            MountInfo(
                mount_id=225,
                parent_id=20,
                major_minor_ver="0:39",
                root="/",
                mount_point="/run/user/112",
                options=TMPFS_OPTS,
                optional_fields={"shared": "177"},
                fs_type="tmpfs",
                source="tmpfs",
                super_options=TMPFS_SUPER,
            ),
        ),
        (
            "225 20 0:39 / /run/user/112 rw,nosuid,nodev,relatime  - tmpfs tmpfs "
            "rw,size=405096k,mode=700,uid=112,gid=116",
            MountInfo(
                mount_id=225,
                parent_id=20,
                major_minor_ver="0:39",
                root="/",
                mount_point="/run/user/112",
                options=TMPFS_OPTS,
                optional_fields=None,
                fs_type="tmpfs",
                source="tmpfs",
                super_options=TMPFS_SUPER,
            ),
        ),
        (
            "225 20 0:39 / /run/user/112 rw,nosuid,nodev,relatime shared:177 master:8 - tmpfs tmpfs "
            "rw,size=405096k,mode=700,uid=112,gid=116",
            MountInfo(
                mount_id=225,
                parent_id=20,
                major_minor_ver="0:39",
                root="/",
                mount_point="/run/user/112",
                options=TMPFS_OPTS,
                optional_fields={"shared": "177", "master": "8"},
                fs_type="tmpfs",
                source="tmpfs",
                super_options=TMPFS_SUPER,
            ),
        ),
        (
            "225 20 0:39 / /run/user/112 rw,nosuid,nodev,relatime shared:177 master:8 foo:bar - "
            "tmpfs tmpfs rw,size=405096k,mode=700,uid=112,gid=116",
            MountInfo(
                mount_id=225,
                parent_id=20,
                major_minor_ver="0:39",
                root="/",
                mount_point="/run/user/112",
                options=TMPFS_OPTS,
                optional_fields={"shared": "177", "master": "8"},
                fs_type="tmpfs",
                source="tmpfs",
                super_options=TMPFS_SUPER,
            ),
        ),
    ],
)
def test_parse_mountinfo_string(line, expected):
    assert parse_mountinfo_string(line) == expected


def test_not_enough_information():
    with pytest.raises(ValueError, match="no separator"):
        parse_mountinfo_string("hello")


def test_too_few_fields():
    with pytest.raises(ValueError, match="too few fields"):
        parse_mountinfo_string("1 2 - a b")


def test_bad_mount_id():
    with pytest.raises(ValueError, match="mount ID"):
        parse_mountinfo_string("x 21 0:16 / /sys rw - sysfs sysfs rw")


def test_bad_parent_id():
    with pytest.raises(ValueError, match="parent ID"):
        parse_mountinfo_string("16 y 0:16 / /sys rw - sysfs sysfs rw")


def test_parse_mountinfo_multiple_lines():
    text = (
        "16 21 0:16 / /sys rw shared:7 - sysfs sysfs rw\n"
        "17 21 0:4 / /proc rw shared:12 - proc proc rw\n"
    )
    mounts = parse_mountinfo(text)
    assert [m.mount_point for m in mounts] == ["/sys", "/proc"]
    assert mounts[1].optional_fields == {"shared": "12"}


def test_parse_mountinfo_from_iterable_propagates_error():
    with pytest.raises(ValueError):
        parse_mountinfo(["16 21 0:16 / /sys rw - sysfs sysfs rw\n", "bad\n"])


def test_parse_mount_options():
    assert parse_mount_options("rw,size=10k,mode") == {"rw": "", "size": "10k", "mode": ""}


def test_parse_mount_options_empty():
    assert parse_mount_options("") == {"": ""}


def test_get_proc_mounts_missing_process():
    with pytest.raises(FileNotFoundError):
        get_proc_mounts(999999999)