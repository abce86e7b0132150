"""Parse system, kernel and device metrics from the Linux proc, sys and configfs pseudo-filesystems."""

__version__ = "0.1.0"

__all__ = [
    "bcache",
    "blockdevice",
    "buddyinfo",
    "fsroot",
    "ipvs",
    "iscsi",
    "mdstat",
    "mountinfo",
    "proc",
    "util",
]