"""Runtime information about iSCSI targets, read from configfs and sysfs."""

from __future__ import annotations

import glob
import os
from dataclasses import dataclass, field

from procmetrics.fsroot import DEFAULT_CONFIGFS_MOUNT_POINT, PseudoFS
from procmetrics.util import read_uint_from_file

# Every iSCSI target lives under <configfs>/target/iscsi/iqn*.
IQN_GLOB = "target/iscsi/iqn*"

# Backstores live under <configfs>/target/core.
TARGET_CORE = "target/core"

_TRUE_WORDS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_WORDS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


@dataclass
class LUN:
    """A logical unit exported by a target portal group."""

    name: str = ""
    lun_path: str = ""
    backstore: str = ""
    object_name: str = ""
    type_number: str = ""


@dataclass
class TPGT:
    """A target portal group tag and its logical units."""

    name: str = ""
    tpgt_path: str = ""
    is_enable: bool = False
    luns: list[LUN] = field(default_factory=list)


@dataclass
class FILEIO:
    """A file-backed backstore."""

    name: str = ""
    fnumber: str = ""
    object_name: str = ""
    filename: str = ""


@dataclass
class IBLOCK:
    """A block-device backstore."""

    name: str = ""
    bnumber: str = ""
    object_name: str = ""
    iblock: str = ""


@dataclass
class RBD:
    """A Ceph RBD backstore."""

    name: str = ""
    rnumber: str = ""
    pool: str = ""
    image: str = ""


@dataclass
class RDMCP:
    """A RAM-disk backstore."""

    name: str = ""
    object_name: str = ""


@dataclass
class Stats:
    """One iSCSI target and its portal groups."""

    name: str = ""
    tpgt: list[TPGT] = field(default_factory=list)
    root_path: str = ""


class ISCSIFS:
    """The configfs pseudo-filesystem holding iSCSI target configuration.

    An empty mount point selects the usual configfs location.
    """

    def __init__(self, mount_point: str = DEFAULT_CONFIGFS_MOUNT_POINT) -> None:
        if not mount_point.strip():
            mount_point = DEFAULT_CONFIGFS_MOUNT_POINT
        self._configfs = PseudoFS(mount_point)

    def iscsi_stats(self) -> list[Stats]:
        """Collect information on every iSCSI target."""
        return [get_stats(path) for path in sorted(glob.glob(self._configfs.path(IQN_GLOB)))]


def get_stats(iqn_path: str) -> Stats:
    """Describe the target at ``iqn_path`` with its portal groups and LUNs."""
    stats = Stats(name=os.path.basename(iqn_path), root_path=os.path.dirname(iqn_path))
    for tpgt_path in sorted(glob.glob(os.path.join(iqn_path, "tpgt*"))):
        try:
            enabled = _is_path_enable(tpgt_path)
        except (OSError, ValueError):
            enabled = False
        tpgt = TPGT(name=os.path.basename(tpgt_path), tpgt_path=tpgt_path, is_enable=enabled)
        if enabled:
            for lun_path in sorted(glob.glob(os.path.join(tpgt_path, "lun", "lun*"))):
                try:
                    tpgt.luns.append(_get_lun_link_target(lun_path))
                except (OSError, LookupError):
                    continue
        stats.tpgt.append(tpgt)
    return stats


def _parse_go_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(f"parsing {text!r}: invalid syntax")


def _is_path_enable(path: str) -> bool:
    """Report whether the ``enable`` file in ``path`` holds a true value."""
    enable_path = os.path.join(path, "enable")
    try:
        with open(enable_path, encoding="utf-8") as handle:
            content = handle.read()
    except OSError as exc:
        raise OSError(exc.errno, f"iscsi: isPathEnable ReadFile error {exc}") from exc
    try:
        return _parse_go_bool(content.strip())
    except ValueError as exc:
        raise ValueError(f"iscsi: isPathEnable ParseBool error {exc}") from exc


def _get_lun_link_target(lun_path: str) -> LUN:
    """Describe a LUN from the backstore its symbolic link points to."""
    lun = LUN(name=os.path.basename(lun_path), lun_path=lun_path)
    try:
        names = sorted(os.listdir(lun_path))
    except OSError as exc:
        raise OSError(
            exc.errno, f"getLunLinkTarget: ReadDir path {lun_path} error {exc}"
        ) from exc
    for name in names:
        entry = os.path.join(lun_path, name)
        if not os.path.islink(entry):
            continue
        try:
            target = os.readlink(entry)
        except OSError as exc:
            raise OSError(exc.errno, f"getLunLinkTarget: Readlink err {exc}") from exc
        target_dir, object_name = os.path.split(target)
        type_with_number = os.path.basename(os.path.normpath(target_dir))
        backstore, underscore, number = type_with_number.rpartition("_")
        if underscore:
            lun.backstore = backstore
            lun.type_number = number
        lun.object_name = object_name
        return lun
    raise LookupError("iscsi: getLunLinkTarget: Lun Link does not exist")


def _read_counter(path: str, label: str) -> int:
    try:
        return read_uint_from_file(path)
    except OSError as exc:
        raise OSError(
            exc.errno, f"iscsi: ReadWriteOPS: {label} error file {path} and {exc}"
        ) from exc
    except ValueError as exc:
        raise ValueError(f"iscsi: ReadWriteOPS: {label} error file {path} and {exc}") from exc


def read_write_ops(iqn_path: str, tpgt: str, lun: str) -> tuple[int, int, int]:
    """Return megabytes read, megabytes written and commands received by a LUN."""
    stats_dir = os.path.join(iqn_path, tpgt, "lun", lun, "statistics", "scsi_tgt_port")
    read_mb = _read_counter(os.path.join(stats_dir, "read_mbytes"), "read_mbytes")
    write_mb = _read_counter(os.path.join(stats_dir, "write_mbytes"), "write_mbytes")
    iops = _read_counter(os.path.join(stats_dir, "in_cmds"), "in_cmds")
    return read_mb, write_mb, iops


def _read_udev_path(udev_path: str, missing: str, unreadable: str) -> str:
    try:
        with open(udev_path, encoding="utf-8") as handle:
            return handle.read().strip()
    except FileNotFoundError as exc:
        raise FileNotFoundError(exc.errno, missing) from exc
    except OSError as exc:
        raise OSError(exc.errno, unreadable) from exc


def get_fileio_udev(target_core_path: str, fileio_number: str, object_name: str) -> FILEIO:
    """Describe a fileio backstore and the file it exports."""
    fileio = FILEIO(
        name=f"fileio_{fileio_number}", fnumber=fileio_number, object_name=object_name
    )
    udev_path = os.path.join(target_core_path, fileio.name, object_name, "udev_path")
    fileio.filename = _read_udev_path(
        udev_path,
        f"iscsi: GetFileioUdev: fileio_{fileio_number} is missing file name",
        f"iscsi: GetFileioUdev: Cannot read filename from udev link :{udev_path}",
    )
    return fileio


def get_iblock_udev(target_core_path: str, iblock_number: str, object_name: str) -> IBLOCK:
    """Describe an iblock backstore and the block device it exports."""
    iblock = IBLOCK(
        name=f"iblock_{iblock_number}", bnumber=iblock_number, object_name=object_name
    )
    udev_path = os.path.join(target_core_path, iblock.name, object_name, "udev_path")
    iblock.iblock = _read_udev_path(
        udev_path,
        f"iscsi: GetIBlockUdev: iblock_{iblock_number} is missing file name",
        f"iscsi: GetIBlockUdev: Cannot read iblock from udev link :{udev_path}",
    )
    return iblock


def _read_trimmed(path: str) -> str | None:
    try:
        with open(path, encoding="utf-8") as handle:
            return handle.read().strip()
    except OSError:
        return None


def get_rbd_match(sys_device_path: str, rbd_number: str, pool_image: str) -> RBD | None:
    """Find the mapped RBD device whose position and ``pool-image`` match.

    Returns None when no device matches.
    """
    pattern = os.path.join(sys_device_path, "devices", "rbd", "[0-9]*")
    for index, rbd_path in enumerate(sorted(glob.glob(pattern))):
        pool = _read_trimmed(os.path.join(rbd_path, "pool"))
        if pool is None:
            continue
        image = _read_trimmed(os.path.join(rbd_path, "name"))
        if image is None:
            continue
        if str(index) == rbd_number and f"{pool}-{image}" == pool_image:
            return RBD(name=f"rbd_{rbd_number}", rnumber=rbd_number, pool=pool, image=image)
    return None


def get_rdmcp_path(target_core_path: str, rdmcp_number: str, object_name: str) -> RDMCP | None:
    """Describe an enabled RAM-disk backstore; None when it is disabled."""
    rdmcp = RDMCP(name=f"rd_mcp_{rdmcp_number}", object_name=object_name)
    rdmcp_path = os.path.join(target_core_path, rdmcp.name, object_name)
    try:
        os.stat(rdmcp_path)
    except FileNotFoundError as exc:
        raise FileNotFoundError(
            exc.errno, f"iscsi: GetRDMCPPath: {rdmcp_path} does not exist"
        ) from exc
    try:
        enabled = _is_path_enable(rdmcp_path)
    except OSError as exc:
        raise OSError(exc.errno, f"iscsi: GetRDMCPPath: error {exc}") from exc
    except ValueError as exc:
        raise ValueError(f"iscsi: GetRDMCPPath: error {exc}") from exc
    return rdmcp if enabled else None