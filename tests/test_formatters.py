from kakeibo.formatters import format_currency, format_currency_for_chart, format_percent_change


def test_format_currency():
    assert format_currency(3500) == "¥3,500"
    assert format_currency(0) == "¥0"


def test_format_currency_for_chart():
    assert format_currency_for_chart(0) == "¥0"
    assert format_currency_for_chart(850) == "¥850"
    assert format_currency_for_chart(3500) == "¥3.5k"
    assert format_currency_for_chart(12000) == "¥12k"


def test_format_percent_change():
    assert format_percent_change(None) == "-"
    assert format_percent_change(12.34) == "+12.3%"
    assert format_percent_change(-5.0) == "-5.0%"
    assert format_percent_change(0.0) == "0.0%"
