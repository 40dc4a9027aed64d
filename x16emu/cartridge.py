"""Cartridge images: a header followed by up to 224 banks of 16 KiB."""

from __future__ import annotations

import contextlib
import enum
import os
import random
import warnings

from x16emu.files import SeekOrigin, X16File, find_extension, is_compressed_type

MAX_BANKS = 224
BANK_SIZE = 0x4000
MAX_SIZE = BANK_SIZE * MAX_BANKS
FIRST_BANK = 32

MAGIC_NUMBER = b"CX16 CARTRIDGE\r\n"
CURRENT_VERSION = b"01.00" + b" " * 11

TEXT_FIELD_SIZE = 32
RESERVED_SIZE = 64 + 32
HEADER_SIZE = len(MAGIC_NUMBER) + len(CURRENT_VERSION) + 4 * TEXT_FIELD_SIZE + RESERVED_SIZE + MAX_BANKS

_WINDOW_BASE = 0xC000
_SPACE = " \t\n\v\f\r"


class CartridgeError(Exception):
    """A cartridge could not be loaded or saved."""


class BankType(enum.IntEnum):
    NONE = 0
    ROM = 1
    UNINITIALIZED_RAM = 2
    INITIALIZED_RAM = 3
    UNINITIALIZED_NVRAM = 4
    INITIALIZED_NVRAM = 5


_WRITABLE = frozenset(
    {
        BankType.UNINITIALIZED_RAM,
        BankType.INITIALIZED_RAM,
        BankType.UNINITIALIZED_NVRAM,
        BankType.INITIALIZED_NVRAM,
    }
)
_STORED_IN_IMAGE = frozenset({BankType.ROM, BankType.INITIALIZED_RAM, BankType.INITIALIZED_NVRAM})
_NVRAM = frozenset({BankType.UNINITIALIZED_NVRAM, BankType.INITIALIZED_NVRAM})
_KNOWN = frozenset(BankType)


class _TextField:
    """A fixed-width, space-padded header text field."""

    def __init__(self, size: int) -> None:
        self.size = size

    def __set_name__(self, owner, name: str) -> None:
        self.attr = "_" + name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        raw = getattr(obj, self.attr).split(b"\0", 1)[0]
        return raw.decode("utf-8", errors="replace").rstrip(_SPACE)

    def __set__(self, obj, value) -> None:
        if value is None:
            return
        raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        raw = raw.split(b"\0", 1)[0][: self.size]
        setattr(obj, self.attr, raw.ljust(self.size, b" "))


def _bank_index(bank: int) -> int | None:
    index = bank - FIRST_BANK
    return index if 0 <= index < MAX_BANKS else None


def _require_bank(bank: int) -> int:
    index = _bank_index(bank)
    if index is None:
        raise ValueError(f"bank {bank} is outside the cartridge range")
    return index


def _bank_slice(index: int) -> slice:
    return slice(index * BANK_SIZE, (index + 1) * BANK_SIZE)


def _warn_unknown(index: int) -> None:
    warnings.warn(f"Unknown cartridge bank type at {index}", stacklevel=3)


class Cartridge:
    """A cartridge image held in memory."""

    description = _TextField(TEXT_FIELD_SIZE)
    author = _TextField(TEXT_FIELD_SIZE)
    copyright = _TextField(TEXT_FIELD_SIZE)
    program_version = _TextField(TEXT_FIELD_SIZE)

    def __init__(self) -> None:
        self.magic_number = MAGIC_NUMBER
        self.cart_version = CURRENT_VERSION
        self._description = bytes(TEXT_FIELD_SIZE)
        self._author = bytes(TEXT_FIELD_SIZE)
        self._copyright = bytes(TEXT_FIELD_SIZE)
        self._program_version = bytes(TEXT_FIELD_SIZE)
        self.reserved = bytes(RESERVED_SIZE)
        self.bank_info = bytearray(MAX_BANKS)
        self.data = bytearray(MAX_SIZE)
        self.path: str | None = None
        self.nvram_path: str | None = None

    def header_bytes(self) -> bytes:
        """The header as it is stored at the start of a cartridge file."""
        return b"".join(
            (
                self.magic_number,
                self.cart_version,
                self._description,
                self._author,
                self._copyright,
                self._program_version,
                self.reserved,
                bytes(self.bank_info),
            )
        )

    def _set_header(self, header: bytes) -> None:
        fields = []
        offset = 0
        for size in (16, 16, 32, 32, 32, 32, RESERVED_SIZE, MAX_BANKS):
            fields.append(header[offset : offset + size])
            offset += size
        (
            self.magic_number,
            self.cart_version,
            self._description,
            self._author,
            self._copyright,
            self._program_version,
            self.reserved,
            bank_info,
        ) = fields
        self.bank_info = bytearray(bank_info)

    @classmethod
    def load(cls, path: str | os.PathLike, randomize: bool = False) -> Cartridge:
        """Load a .crt file, taking initialised NVRAM banks from its .nvram file if present."""
        path = os.fspath(path)
        extension = find_extension(path)
        if extension is None or extension.lower() != ".crt":
            raise CartridgeError(f'Path "{path}" does not appear to be a cartridge (.crt) file.')
        nvram_path = path[:-3] + "nvram"
        cart = cls()
        with contextlib.ExitStack() as stack:
            try:
                image = stack.enter_context(X16File(path, "rb"))
            except OSError as exc:
                raise CartridgeError(f'Could not load cartridge "{path}": Could not read header.') from exc
            try:
                nvram = stack.enter_context(X16File(nvram_path, "rb"))
            except OSError:
                nvram = None

            header = image.read(HEADER_SIZE)
            if len(header) != HEADER_SIZE:
                raise CartridgeError(f'Could not load cartridge "{path}": Could not read header.')
            cart._set_header(header)
            if cart.magic_number != MAGIC_NUMBER:
                raise CartridgeError(f'Could not load cartridge "{path}": Not a cartridge file.')
            if cart.cart_version != CURRENT_VERSION:
                raise CartridgeError(f'Could not load cartridge "{path}": Unsupported version.')

            for index, kind in enumerate(cart.bank_info):
                if kind in (BankType.ROM, BankType.INITIALIZED_RAM):
                    block = image.read(BANK_SIZE)
                elif kind in (BankType.UNINITIALIZED_RAM, BankType.UNINITIALIZED_NVRAM):
                    block = random.randbytes(BANK_SIZE) if randomize else bytes(BANK_SIZE)
                elif kind == BankType.INITIALIZED_NVRAM:
                    if nvram is not None:
                        block = nvram.read(BANK_SIZE)
                        image.seek(BANK_SIZE, SeekOrigin.CUR)
                    else:
                        block = image.read(BANK_SIZE)
                elif kind == BankType.NONE:
                    continue
                else:
                    _warn_unknown(index)
                    continue
                if len(block) != BANK_SIZE:
                    raise CartridgeError(f'Could not load cartridge "{path}": Could not read bank {index}.')
                cart.data[_bank_slice(index)] = block

        cart.path = path
        cart.nvram_path = nvram_path
        return cart

    def save(self, path: str | os.PathLike) -> None:
        """Write the header and every bank that the image stores."""
        path = os.fspath(path)
        extension = find_extension(path)
        if extension is None or not extension.startswith(".crt"):
            raise CartridgeError(f'Path "{path}" does not appear to be a cartridge (.crt) file.')
        mode = "wb6" if is_compressed_type(path) else "wb"
        try:
            image = X16File(path, mode)
        except OSError as exc:
            raise CartridgeError(f'Could not save cartridge "{path}": Could not write header.') from exc
        with image:
            if image.write(self.header_bytes()) != HEADER_SIZE:
                raise CartridgeError(f'Could not save cartridge "{path}": Could not write header.')
            for index, kind in enumerate(self.bank_info):
                if kind in _STORED_IN_IMAGE:
                    if image.write(self.data[_bank_slice(index)]) != BANK_SIZE:
                        raise CartridgeError(
                            "Failed to save some cartridge data. The cartridge may be corrupt."
                        )
                elif kind not in _KNOWN:
                    _warn_unknown(index)

    def save_nvram(self) -> None:
        """Write the NVRAM banks to the .nvram file beside the loaded cartridge."""
        if self.nvram_path is None:
            raise CartridgeError("No cartridge has been loaded, so there is no nvram file.")
        with X16File(self.nvram_path, "wb") as nvram:
            for index, kind in enumerate(self.bank_info):
                if kind in _NVRAM:
                    if nvram.write(self.data[_bank_slice(index)]) != BANK_SIZE:
                        raise CartridgeError("Failed to save some nvram data. The nvram may be corrupt.")
                elif kind not in _KNOWN:
                    _warn_unknown(index)

    def define_bank_range(self, start_bank: int, end_bank: int, bank_type: int) -> None:
        """Set the type of banks ``start_bank`` to ``end_bank`` inclusive."""
        start = _require_bank(start_bank)
        end = _require_bank(end_bank)
        if start > end:
            raise ValueError(f"start bank {start_bank} is after end bank {end_bank}")
        if bank_type > len(BankType) - 1:
            warnings.warn(
                f"Attempting to define unknown cartridge bank type {bank_type}", stacklevel=2
            )
        self.bank_info[start : end + 1] = bytes([int(bank_type)]) * (end + 1 - start)

    def import_files(self, paths, start_bank: int, bank_type: int, fill_value: int) -> None:
        """Copy files one after another from ``start_bank`` on, padding the last bank."""
        start = _require_bank(start_bank)
        address = start * BANK_SIZE
        for path in paths:
            available = MAX_SIZE - address
            if available == 0:
                raise CartridgeError("The cartridge is full.")
            try:
                with X16File(path, "rb") as source:
                    chunk = source.read(available)
            except OSError as exc:
                raise CartridgeError(f'Could not read "{os.fspath(path)}".') from exc
            self.data[address : address + len(chunk)] = chunk
            address += len(chunk)

        fill_end = min((address + BANK_SIZE - 1) & (0xFF << 14), MAX_SIZE)
        self.data[address:fill_end] = bytes([fill_value]) * (fill_end - address)
        last = (address - 1) >> 14
        self.bank_info[start : last + 1] = bytes([int(bank_type)]) * max(0, last + 1 - start)

    def fill(self, start_bank: int, end_bank: int, bank_type: int, fill_value: int) -> None:
        """Fill banks ``start_bank`` to ``end_bank`` with one value and set their type."""
        start = _require_bank(start_bank)
        end = _require_bank(end_bank)
        if start > end:
            raise ValueError(f"start bank {start_bank} is after end bank {end_bank}")
        first = start * BANK_SIZE
        stop = (end + 1) * BANK_SIZE
        self.data[first:stop] = bytes([fill_value]) * (stop - first)
        self.bank_info[start : end + 1] = bytes([int(bank_type)]) * (end + 1 - start)

    def read(self, address: int, bank: int) -> int:
        """Read a byte seen at ``address`` in the $C000 window with ``bank`` selected."""
        index = _bank_index(bank)
        if index is None:
            return 0
        return self.data[index * BANK_SIZE + address - _WINDOW_BASE]

    def write(self, address: int, bank: int, value: int) -> None:
        """Write a byte; writes to anything but RAM and NVRAM banks are ignored."""
        index = _bank_index(bank)
        if index is None or self.bank_info[index] not in _WRITABLE:
            return
        self.data[index * BANK_SIZE + address - _WINDOW_BASE] = value & 0xFF

    def get_bank_type(self, bank: int) -> int:
        index = _bank_index(bank)
        if index is None:
            return BankType.NONE
        return self.bank_info[index]