# procmetrics

Read system, kernel and device statistics from the Linux pseudo-filesystems
`/proc`, `/sys` and `/sys/kernel/config`, and get them back as plain Python
dataclasses.

Every filesystem object takes its mount point as an argument, so a copy of a
pseudo-filesystem tree (a test fixture, a snapshot from another host) works
just as well as the live one. Most parsers also accept text directly, so they
can be used on content obtained some other way.

## Installation

```
pip install procmetrics
```

The package has no third-party dependencies. To run its tests:

```
pip install "procmetrics[test]"
pytest
```

## What it reads

| Module | Reads | Main names |
| --- | --- | --- |
| `procmetrics.proc` | `/proc` | `ProcFS` with `buddy_info()`, `ipvs_stats()`, `ipvs_backend_status()`, `mdstat()` |
| `procmetrics.buddyinfo` | `/proc/buddyinfo` | `BuddyInfo`, `parse_buddyinfo()` |
| `procmetrics.ipvs` | `/proc/net/ip_vs_stats`, `/proc/net/ip_vs` | `IPVSStats`, `IPVSBackendStatus`, `parse_ipvs_stats()`, `parse_ipvs_backend_status()`, `parse_ip_port()` |
| `procmetrics.mdstat` | `/proc/mdstat` | `MDStat`, `parse_mdstat()` |
| `procmetrics.mountinfo` | `/proc/<pid>/mountinfo` | `MountInfo`, `parse_mountinfo()`, `parse_mountinfo_string()`, `parse_mount_options()`, `get_mounts()`, `get_proc_mounts()` |
| `procmetrics.blockdevice` | `/proc/diskstats`, `/sys/block` | `BlockDeviceFS`, `Diskstats`, `IOStats`, `Info` |
| `procmetrics.bcache` | `/sys/fs/bcache` | `BcacheFS`, `Stats`, `get_stats()`, `dehumanize()`, `parse_pseudo_float()` |
| `procmetrics.iscsi` | `/sys/kernel/config/target` | `ISCSIFS`, `Stats`, `TPGT`, `LUN`, `read_write_ops()` and the backstore lookups `get_fileio_udev()`, `get_iblock_udev()`, `get_rbd_match()`, `get_rdmcp_path()` |
| `procmetrics.fsroot` | any mount point | `PseudoFS`, which checks a mount point and joins paths under it |
| `procmetrics.util` | | small helpers: `parse_uint32s()`, `parse_uint64s()`, `read_uint_from_file()`, `parse_bool()`, `sys_read_file()`, `ValueParser` |

## Examples

Memory fragmentation and RAID state from the running system:

```python
from procmetrics.proc import ProcFS

fs = ProcFS.default()

for info in fs.buddy_info():
    print(info.node, info.zone, info.sizes)

for md in fs.mdstat():
    print(md.name, md.activity_state, md.blocks_synced, "/", md.blocks_total)
```

The same, against a copied tree:

```python
fs = ProcFS("/srv/snapshots/host1/proc")
```

IPVS virtual and real servers:

```python
for backend in fs.ipvs_backend_status():
    print(backend.proto, backend.local_address, backend.local_port,
          backend.remote_address, backend.remote_port, backend.active_conn)
```

Mounts of the current process, or of another one:

```python
from procmetrics.mountinfo import get_mounts, get_proc_mounts

for mount in get_mounts():
    print(mount.mount_point, mount.fs_type, mount.options)

mounts_of_init = get_proc_mounts(1)
```

Disk I/O counters:

```python
from procmetrics.blockdevice import BlockDeviceFS

fs = BlockDeviceFS.default()
for disk in fs.proc_diskstats():
    print(disk.device_name, disk.read_ios, disk.write_ios, disk.io_stats_count)

for device in fs.sys_block_devices():
    stats, count = fs.sys_block_device_stat(device)
    print(device, count, stats.weighted_io_ticks)
```

bcache and iSCSI targets:

```python
from procmetrics.bcache import BcacheFS
from procmetrics.iscsi import ISCSIFS

for cache in BcacheFS.default().stats():
    print(cache.name, cache.bcache.average_key_size, len(cache.bdevs))

for target in ISCSIFS().iscsi_stats():
    print(target.name, [t.name for t in target.tpgt])
```

`BcacheFS`, `BlockDeviceFS` and `ISCSIFS` fall back to the usual mount point
when given an empty or blank one.

## Errors

Creating a filesystem object fails with `OSError` if the mount point cannot
be read, and with `NotADirectoryError` if it is not a directory. A file that
cannot be opened raises the usual `OSError`; content that does not match the
expected format raises `ValueError` with a message naming the problem.

A few readers skip rather than fail on purpose: `BlockDeviceFS.proc_diskstats()`
leaves out lines that have neither 14 nor 18 fields, and `get_stats()` in
`procmetrics.iscsi` treats a portal group whose `enable` file cannot be read
as disabled and leaves out LUNs that have no backstore link.

## What it does not do

`procmetrics` is a library only. It has no command-line tool and does not
serve or export metrics; it reads the files and hands back the values, and
collecting, storing or publishing them is left to the caller.