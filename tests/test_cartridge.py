import pytest

from x16emu.cartridge import BANK_SIZE, BankType, Cartridge, CartridgeError


def test_new_header_holds_magic_and_version():
    header = Cartridge().header_bytes()
    assert header[:16] == b"CX16 CARTRIDGE\r\n"
    assert header[16:32] == b"01.00           "
    assert len(header) == 480


def test_text_fields_default_empty():
    cart = Cartridge()
    assert cart.description == ""
    assert cart.author == ""


def test_text_field_round_trip_and_padding():
    cart = Cartridge()
    cart.description = "Demo"
    assert cart.description == "Demo"
    assert cart.header_bytes()[32:64] == b"Demo".ljust(32, b" ")


def test_text_field_truncated():
    cart = Cartridge()
    cart.author = "x" * 40
    assert cart.author == "x" * 32


def test_text_field_none_keeps_value():
    cart = Cartridge()
    cart.copyright = "Someone"
    cart.copyright = None
    assert cart.copyright == "Someone"


def test_define_bank_range():
    cart = Cartridge()
    cart.define_bank_range(32, 34, BankType.ROM)
    assert [cart.get_bank_type(b) for b in (32, 33, 34, 35)] == [
        BankType.ROM,
        BankType.ROM,
        BankType.ROM,
        BankType.NONE,
    ]


@pytest.mark.parametrize("start,end", [(31, 33), (33, 32), (32, 256), (256, 256)])
def test_define_bank_range_rejects_bad_banks(start, end):
    with pytest.raises(ValueError):
        Cartridge().define_bank_range(start, end, BankType.ROM)


def test_define_unknown_bank_type_warns():
    cart = Cartridge()
    with pytest.warns(UserWarning):
        cart.define_bank_range(40, 40, 9)
    assert cart.get_bank_type(40) == 9


def test_get_bank_type_outside_range():
    assert Cartridge().get_bank_type(10) == BankType.NONE


def test_fill_and_read():
    cart = Cartridge()
    cart.fill(32, 33, BankType.ROM, 0xAA)
    assert cart.read(0xC000, 32) == 0xAA
    assert cart.read(0xFFFF, 33) == 0xAA
    assert cart.read(0xC000, 34) == 0
    assert cart.get_bank_type(33) == BankType.ROM


def test_read_outside_range_is_zero():
    cart = Cartridge()
    cart.fill(32, 32, BankType.ROM, 0x55)
    assert cart.read(0xC000, 5) == 0


def test_write_only_to_ram():
    cart = Cartridge()
    cart.fill(32, 32, BankType.ROM, 0x11)
    cart.fill(33, 33, BankType.INITIALIZED_RAM, 0x11)
    cart.write(0xC010, 32, 0x77)
    cart.write(0xC010, 33, 0x77)
    assert cart.read(0xC010, 32) == 0x11
    assert cart.read(0xC010, 33) == 0x77


def test_import_files_pads_last_bank(tmp_path):
    source = tmp_path / "prog.bin"
    payload = b"\x5a" * (BANK_SIZE + 100)
    source.write_bytes(payload)
    cart = Cartridge()
    cart.import_files([source], 32, BankType.ROM, 0xFF)
    assert cart.get_bank_type(32) == BankType.ROM
    assert cart.get_bank_type(33) == BankType.ROM
    assert cart.get_bank_type(34) == BankType.NONE
    assert cart.read(0xC000 + 99, 33) == 0x5A
    assert cart.read(0xC000 + 100, 33) == 0xFF
    assert cart.read(0xFFFF, 33) == 0xFF


def test_import_missing_file(tmp_path):
    with pytest.raises(CartridgeError):
        Cartridge().import_files([tmp_path / "missing.bin"], 32, BankType.ROM, 0)


def test_save_load_round_trip(tmp_path):
    cart = Cartridge()
    cart.description = "Game"
    cart.author = "Tester"
    cart.fill(32, 32, BankType.ROM, 0x42)
    cart.fill(33, 33, BankType.INITIALIZED_RAM, 0x43)
    cart.define_bank_range(34, 34, BankType.UNINITIALIZED_RAM)
    path = tmp_path / "game.crt"
    cart.save(path)

    loaded = Cartridge.load(path)
    assert loaded.header_bytes() == cart.header_bytes()
    assert loaded.description == "Game"
    assert loaded.read(0xC123, 32) == 0x42
    assert loaded.read(0xC123, 33) == 0x43
    assert loaded.read(0xC123, 34) == 0
    assert loaded.get_bank_type(34) == BankType.UNINITIALIZED_RAM
    assert loaded.nvram_path == str(tmp_path / "game.nvram")


def test_load_uppercase_extension(tmp_path):
    cart = Cartridge()
    cart.fill(32, 32, BankType.ROM, 0x21)
    path = tmp_path / "GAME.CRT"
    cart.save(tmp_path / "tmp.crt")
    path.write_bytes((tmp_path / "tmp.crt").read_bytes())
    assert Cartridge.load(path).read(0xC000, 32) == 0x21


def test_load_rejects_wrong_extension(tmp_path):
    path = tmp_path / "game.bin"
    path.write_bytes(Cartridge().header_bytes())
    with pytest.raises(CartridgeError):
        Cartridge.load(path)


def test_load_rejects_bad_magic(tmp_path):
    path = tmp_path / "bad.crt"
    path.write_bytes(b"\x00" * len(Cartridge().header_bytes()))
    with pytest.raises(CartridgeError):
        Cartridge.load(path)


def test_load_rejects_short_header(tmp_path):
    path = tmp_path / "short.crt"
    path.write_bytes(b"CX16")
    with pytest.raises(CartridgeError):
        Cartridge.load(path)


def test_load_rejects_missing_bank_data(tmp_path):
    cart = Cartridge()
    cart.define_bank_range(32, 32, BankType.ROM)
    path = tmp_path / "trunc.crt"
    path.write_bytes(cart.header_bytes())
    with pytest.raises(CartridgeError):
        Cartridge.load(path)


def test_save_rejects_wrong_extension(tmp_path):
    with pytest.raises(CartridgeError):
        Cartridge().save(tmp_path / "game.bin")


def test_save_nvram_without_path():
    with pytest.raises(CartridgeError):
        Cartridge().save_nvram()


def test_nvram_round_trip(tmp_path):
    cart = Cartridge()
    cart.fill(32, 32, BankType.INITIALIZED_NVRAM, 0x11)
    path = tmp_path / "save.crt"
    cart.save(path)

    loaded = Cartridge.load(path)
    assert loaded.read(0xC000, 32) == 0x11
    loaded.write(0xC000, 32, 0x22)
    loaded.save_nvram()
    assert (tmp_path / "save.nvram").stat().st_size == BANK_SIZE

    reloaded = Cartridge.load(path)
    assert reloaded.read(0xC000, 32) == 0x22
    assert reloaded.read(0xC001, 32) == 0x11


def test_randomized_uninitialized_ram_is_not_written(tmp_path):
    cart = Cartridge()
    cart.define_bank_range(32, 32, BankType.UNINITIALIZED_RAM)
    path = tmp_path / "ram.crt"
    cart.save(path)
    assert path.stat().st_size == len(cart.header_bytes())
    loaded = Cartridge.load(path, randomize=True)
    assert loaded.get_bank_type(32) == BankType.UNINITIALIZED_RAM