from slpstream.text import decode_shift_jis, to_halfwidth


def test_fullwidth_letters_fold_to_ascii():
    assert to_halfwidth("ＡＢＣ＃１２３") == "ABC#123"


def test_special_characters_fold_to_ascii():
    assert to_halfwidth("　’”") == " '\""


def test_other_characters_unchanged():
    assert to_halfwidth("マリオ abc") == "マリオ abc"


def test_decode_stops_at_nul():
    raw = "ＦＯＸ＃１".encode("shift-jis") + b"\x00\x00garbage"
    assert decode_shift_jis(raw) == "FOX#1"


def test_decode_invalid_returns_empty():
    # lone lead byte
    assert decode_shift_jis(b"\x81") == ""


def test_decode_missing_returns_empty():
    assert decode_shift_jis(None) == ""
    assert decode_shift_jis(b"\x00" * 8) == ""
