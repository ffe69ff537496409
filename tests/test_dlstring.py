import pytest

from me3.dlstring import DlCharacterSet, DlString, EncodingError


def test_character_set_tags_are_fixed():
    assert [member.value for member in DlCharacterSet] == [0, 1, 2, 3, 4, 5]
    assert DlCharacterSet(3) is DlCharacterSet.SHIFT_JIS


@pytest.mark.parametrize("charset", list(DlCharacterSet))
def test_text_round_trip(charset):
    value = "Elden"
    string = DlString(value.encode(charset.codec), int(charset), charset)
    assert string.text() == value


def test_utf16_text_round_trip_non_ascii():
    value = "mörgott ✓"
    string = DlString(value.encode("utf-16-le"), 1, DlCharacterSet.UTF16)
    assert string.text() == value


def test_get_returns_data_when_tag_matches():
    data = "map".encode("utf-8")
    assert DlString(data, 0, DlCharacterSet.UTF8).get() == data


def test_mismatched_tag_raises():
    string = DlString(b"abc", 0, DlCharacterSet.UTF16)
    with pytest.raises(EncodingError) as info:
        string.get()
    assert info.value.expected is DlCharacterSet.UTF16
    assert info.value.actual == 0


def test_text_checks_tag():
    with pytest.raises(EncodingError):
        DlString(b"abc", 2, DlCharacterSet.UTF8).text()


def test_character_set_known_and_unknown():
    assert DlString(b"", 4, DlCharacterSet.UTF8).character_set() is DlCharacterSet.EUC_JP
    with pytest.raises(ValueError):
        DlString(b"", 9, DlCharacterSet.UTF8).character_set()


def test_unknown_tag_error_mentions_tag():
    with pytest.raises(EncodingError) as info:
        DlString(b"", 9, DlCharacterSet.UTF8).get()
    assert "9" in str(info.value)
    assert info.value.actual == 9


def test_invalid_expected_encoding_rejected():
    with pytest.raises(ValueError):
        DlString(b"", 0, 7)


def test_tag_must_fit_in_byte():
    with pytest.raises(ValueError):
        DlString(b"", 256, DlCharacterSet.UTF8)


def test_invalid_bytes_are_replaced():
    string = DlString(b"ok\xff", 0, DlCharacterSet.UTF8)
    assert string.text().startswith("ok")
    assert "\ufffd" in string.text()