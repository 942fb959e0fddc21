"""CPU and NIC placement for the two-socket evaluation machines."""

from __future__ import annotations

import os

_CORES_PER_SOCKET = 24
_NIC_CORES_PER_SOCKET = 12

_SOCKET0 = tuple(range(0, 2 * _CORES_PER_SOCKET, 2))
_SOCKET1 = tuple(range(1, 2 * _CORES_PER_SOCKET, 2))


def core_per_socket() -> int:
    return _CORES_PER_SOCKET


def _lookup(table: tuple[int, ...], core: int) -> int:
    if not 0 <= core < len(table):
        raise IndexError(f"core {core} out of range 0..{len(table) - 1}")
    return table[core]


def socket0_id(core: int) -> int:
    return _lookup(_SOCKET0, core)


def socket1_id(core: int) -> int:
    return _lookup(_SOCKET1, core)


def cpu_id(socket: int, core: int) -> int:
    """The OS cpu id of a core on a socket."""
    if socket == 0:
        return socket0_id(core)
    if socket == 1:
        return socket1_id(core)
    raise ValueError(f"unknown socket {socket}")


def bind(socket: int, core: int) -> int:
    """Pin the calling process to one core; returns the cpu id chosen.

    Affinity failures are ignored, as is the absence of affinity support.
    """
    cpu = cpu_id(socket, core)
    setaffinity = getattr(os, "sched_setaffinity", None)
    if setaffinity is not None:
        try:
            setaffinity(0, {cpu})
        except OSError:
            pass
    return cpu


def choose_nic(tid: int) -> int:
    """NIC index for a thread: threads 12 and above use the second NIC."""
    if tid < 0:
        raise ValueError(f"thread id must be non-negative, got {tid}")
    return min(tid // _NIC_CORES_PER_SOCKET, 1)