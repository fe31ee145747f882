import pytest

from rvpipe.disassembler import (
    INVALID,
    INVALID_CAPITALISED,
    OUT_OF_BOUNDS,
    binary_to_decimal,
    disassemble,
    disassemble_program,
    hex_to_binary,
    main,
)


def _word(value):
    return f"{value & 0xFFFFFFFF:08x}"


def r_type(f7, f3, rd, rs1, rs2):
    return _word((f7 << 25) | (rs2 << 20) | (rs1 << 15) | (f3 << 12) | (rd << 7) | 0b0110011)


def i_type(opcode, f3, rd, rs1, imm):
    return _word(((imm & 0xFFF) << 20) | (rs1 << 15) | (f3 << 12) | (rd << 7) | opcode)


def s_type(f3, rs1, rs2, imm):
    imm &= 0xFFF
    return _word(
        ((imm >> 5) << 25) | (rs2 << 20) | (rs1 << 15) | (f3 << 12) | ((imm & 0x1F) << 7) | 0b0100011
    )


def b_type(f3, rs1, rs2, imm):
    imm &= 0x1FFF
    value = (
        (((imm >> 12) & 1) << 31)
        | (((imm >> 5) & 0x3F) << 25)
        | (rs2 << 20)
        | (rs1 << 15)
        | (f3 << 12)
        | (((imm >> 1) & 0xF) << 8)
        | (((imm >> 11) & 1) << 7)
        | 0b1100011
    )
    return _word(value)


def j_type(rd, imm):
    imm &= 0x1FFFFF
    value = (
        (((imm >> 20) & 1) << 31)
        | (((imm >> 1) & 0x3FF) << 21)
        | (((imm >> 11) & 1) << 20)
        | (((imm >> 12) & 0xFF) << 12)
        | (rd << 7)
        | 0b1101111
    )
    return _word(value)


def u_type(opcode, rd, imm):
    return _word((imm << 12) | (rd << 7) | opcode)


@pytest.mark.parametrize("word", ["00500093", "ffffffff", "12345678", "abcdef01"])
def test_hex_to_binary_matches_value(word):
    bits = hex_to_binary(word)
    assert len(bits) == 32
    assert int(bits, 2) == int(word, 16)


def test_hex_to_binary_uses_first_eight_digits():
    assert hex_to_binary("00500093 trailing") == hex_to_binary("00500093")


@pytest.mark.parametrize("text", ["0050", "0050009g", ""])
def test_hex_to_binary_rejects_bad_input(text):
    with pytest.raises(ValueError):
        hex_to_binary(text)


@pytest.mark.parametrize("value", range(-8, 8))
def test_binary_to_decimal_signed_round_trip(value):
    assert binary_to_decimal(format(value & 0xF, "04b"), True) == value


@pytest.mark.parametrize("value", [0, 1, 9, 255, 4095])
def test_binary_to_decimal_unsigned_round_trip(value):
    assert binary_to_decimal(format(value, "012b")) == value


@pytest.mark.parametrize(
    "mnemonic,f7,f3",
    [
        ("add", 0b0000000, 0b000),
        ("sub", 0b0100000, 0b000),
        ("xor", 0b0000000, 0b100),
        ("or", 0b0000000, 0b110),
        ("and", 0b0000000, 0b111),
        ("sll", 0b0000000, 0b001),
        ("srl", 0b0000000, 0b101),
        ("sra", 0b0100000, 0b101),
        ("mul", 0b0000001, 0b000),
        ("div", 0b0000001, 0b100),
        ("rem", 0b0000001, 0b111),
    ],
)
def test_r_format(mnemonic, f7, f3):
    rd, rs1, rs2 = 5, 17, 31
    assert disassemble(r_type(f7, f3, rd, rs1, rs2), 1, 1) == f"{mnemonic} x{rd} x{rs1} x{rs2}"


def test_r_format_invalid():
    assert disassemble(r_type(0b0000001, 0b001, 1, 2, 3), 1, 1) == INVALID


@pytest.mark.parametrize(
    "mnemonic,f3", [("addi", 0b000), ("xori", 0b100), ("ori", 0b110), ("andi", 0b111)]
)
@pytest.mark.parametrize("imm", [5, -7, 2047, -2048])
def test_i_format_arithmetic(mnemonic, f3, imm):
    word = i_type(0b0010011, f3, 3, 4, imm)
    assert disassemble(word, 1, 1) == f"{mnemonic} x3 x4 {imm}"


@pytest.mark.parametrize(
    "mnemonic,f3,top", [("slli", 0b001, 0), ("srli", 0b101, 0), ("srai", 0b101, 0b010000)]
)
def test_i_format_shifts(mnemonic, f3, top):
    shamt = 31
    word = i_type(0b0010011, f3, 1, 2, (top << 6) | shamt)
    assert disassemble(word, 1, 1) == f"{mnemonic} x1 x2 {shamt}"


def test_i_format_invalid_shift():
    word = i_type(0b0010011, 0b001, 1, 2, (0b100000 << 6) | 3)
    assert disassemble(word, 1, 1) == INVALID_CAPITALISED


@pytest.mark.parametrize(
    "mnemonic,f3",
    [("lb", 0), ("lh", 1), ("lw", 2), ("ld", 3), ("lbu", 4), ("lhu", 5), ("lwu", 6)],
)
def test_load_format(mnemonic, f3):
    word = i_type(0b0000011, f3, 9, 10, -16)
    assert disassemble(word, 1, 1) == f"{mnemonic} x9 -16 x10"


def test_load_invalid():
    assert disassemble(i_type(0b0000011, 0b111, 1, 2, 0), 1, 1) == INVALID


@pytest.mark.parametrize("mnemonic,f3", [("sb", 0), ("sh", 1), ("sw", 2), ("sd", 3)])
@pytest.mark.parametrize("imm", [0, 40, -4])
def test_store_format(mnemonic, f3, imm):
    word = s_type(f3, 6, 7, imm)
    assert disassemble(word, 1, 1) == f"{mnemonic} x7 {imm} x6"


def test_store_invalid():
    assert disassemble(s_type(0b100, 1, 2, 0), 1, 1) == INVALID_CAPITALISED


@pytest.mark.parametrize(
    "mnemonic,f3",
    [("beq", 0), ("bne", 1), ("blt", 4), ("bge", 5), ("bltu", 6), ("bgeu", 7)],
)
@pytest.mark.parametrize("imm", [8, -4])
def test_branch_format(mnemonic, f3, imm):
    word = b_type(f3, 1, 2, imm)
    assert disassemble(word, 1, 5) == f"{mnemonic} x1 x2 {imm}"


@pytest.mark.parametrize("inst_no,total,imm", [(1, 5, 64), (1, 5, -8)])
def test_branch_out_of_bounds(inst_no, total, imm):
    assert disassemble(b_type(0, 1, 2, imm), inst_no, total) == OUT_OF_BOUNDS


def test_jal_format_and_bounds():
    assert disassemble(j_type(1, 12), 2, 6) == "jal x1 12"
    assert disassemble(j_type(1, -4), 2, 6) == "jal x1 -4"
    assert disassemble(j_type(1, 400), 2, 6) == OUT_OF_BOUNDS


def test_jalr_always_links_x0():
    word = i_type(0b1100111, 0, 5, 8, -12)
    assert disassemble(word, 1, 1) == "jalr x0 x8 -12"


def test_lui_prints_decimal_nibbles():
    assert disassemble(u_type(0b0110111, 5, 0x12345), 1, 1) == "lui x5 0x12345"
    assert disassemble(u_type(0b0110111, 5, 0xA0000), 1, 1) == "lui x5 0x100000"


@pytest.mark.parametrize("imm", [1, 0x12, 0xFFFFF])
def test_auipc_shifts_immediate(imm):
    word = u_type(0b0010111, 3, imm)
    assert disassemble(word, 1, 1) == f"auipc x3 {hex((imm << 12) & 0xFFFFFFFF)}"


def test_unknown_opcode():
    assert disassemble("0000007f", 1, 1) == INVALID


def test_disassemble_program_numbers_lines():
    words = [i_type(0b0010011, 0, 1, 0, 4), b_type(0, 1, 0, -4), "", j_type(0, 8)]
    result = disassemble_program(words)
    assert len(result) == 3
    assert result[0] == "addi x1 x0 4"
    assert result[1] == "beq x1 x0 -4"
    assert result[2] == disassemble(words[3], 3, 3)


def test_main_writes_output(tmp_path):
    source = tmp_path / "given_input.txt"
    target = tmp_path / "instructions.txt"
    words = [i_type(0b0010011, 0, 2, 0, 7), r_type(0, 0, 3, 2, 2)]
    source.write_text("\n".join(words) + "\n")
    assert main(["--input", str(source), "--output", str(target)]) == 0
    assert target.read_text().splitlines() == disassemble_program(words)


def test_main_missing_input_writes_empty_output(tmp_path):
    target = tmp_path / "instructions.txt"
    missing = tmp_path / "absent.txt"
    assert main(["-i", str(missing), "-o", str(target)]) == 0
    assert target.read_text() == ""