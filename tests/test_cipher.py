import pytest

from pixiu.cipher import decrypt, encrypt

PLAINTEXTS = [b"aaaaaaa", b"bbbbbbb", b"ccccccc"]
CIPHERTEXTS = [
    "Obx1VwUPs7B09CqalouHQg==",
    "Zol2IPDQuGTo/K0IYDkkAQ==",
    "nmW+Ha3epblxZmgVvcvaSQ==",
]


@pytest.mark.parametrize("text", PLAINTEXTS)
def test_encrypt_round_trip(text):
    encoded = encrypt(text)
    assert decrypt(encoded) == text


@pytest.mark.parametrize("text", PLAINTEXTS)
def test_encrypt_is_deterministic_and_one_block(text):
    first = encrypt(text)
    assert first == encrypt(text)
    assert len(first) == len(CIPHERTEXTS[0])


def test_distinct_inputs_give_distinct_ciphertexts():
    results = {encrypt(text) for text in PLAINTEXTS}
    assert len(results) == len(PLAINTEXTS)


@pytest.mark.parametrize("text", CIPHERTEXTS)
def test_decrypt_known_ciphertexts(text):
    plain = decrypt(text)
    assert len(plain) < 16
    assert encrypt(plain) == text


def test_encrypt_accepts_str():
    assert encrypt("aaaaaaa") == encrypt(b"aaaaaaa")


def test_block_aligned_input_gets_full_padding_block():
    data = b"x" * 16
    encoded = encrypt(data)
    assert len(encoded) == 2 * len(CIPHERTEXTS[0])
    assert decrypt(encoded) == data


def test_empty_input_round_trip():
    assert decrypt(encrypt(b"")) == b""


def test_decrypt_rejects_invalid_base64():
    with pytest.raises(ValueError):
        decrypt("not base64 !!")


def test_decrypt_rejects_partial_block():
    with pytest.raises(ValueError):
        decrypt("YWJj")


def test_decrypt_rejects_empty():
    with pytest.raises(ValueError):
        decrypt("")