from stockai.utils.validators import derive_change_percent, to_native_float, to_native_int


def test_numeric_cleaning_nan():
    assert to_native_float(float("nan")) == 0.0
    assert to_native_float(float("inf")) == 0.0


def test_native_types():
    value = to_native_float(1)
    assert isinstance(value, float)
    assert value == 1.0


def test_percent_string_is_parsed():
    assert to_native_float("1.2345%") == 1.2345
    assert to_native_float(" -0.51% ") == -0.51


def test_unparseable_uses_default():
    assert to_native_float("N/A") == 0.0
    assert to_native_float("", default=None) is None
    assert to_native_float("abc", default=None) is None


def test_int_from_strings():
    assert to_native_int("48213400") == 48213400
    assert to_native_int("1.5e3") == 1500
    assert to_native_int("n/a") == 0


def test_derived_change_percent():
    assert derive_change_percent(105.0, 5.0) == 5.0
    assert derive_change_percent(99.0, -1.0) == -1.0
    assert derive_change_percent(12.3456, 1.1) == round(1.1 / (12.3456 - 1.1) * 100, 4)


def test_derived_change_percent_zero_previous_close():
    assert derive_change_percent(2.0, 2.0) == 0.0
