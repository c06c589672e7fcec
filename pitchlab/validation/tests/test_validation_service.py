from pitchlab.common.errors import InputValidationError
from pitchlab.validation.service import sanitize_input, validate_message, validate_text_input


def test_text_input_accepts_persona_and_trims():
    result = validate_text_input("   You are a skeptical CFO at a mid-size firm.  ")
    assert result.ok
    assert result.errors == []
    assert result.sanitized == "You are a skeptical CFO at a mid-size firm."


def test_text_input_accepts_length_bounds():
    assert validate_text_input("a" * 10).ok
    assert validate_text_input("a" * 5000).ok


def test_text_input_rejects_short_and_long():
    short = validate_text_input("too short")
    assert not short.ok
    assert short.errors == ["Text input is too short (minimum 10 characters)"]

    long = validate_text_input("x" * 5001)
    assert not long.ok
    assert long.errors == ["Text input is too long (maximum 5000 characters)"]


def test_text_input_collects_every_reason_for_whitespace():
    result = validate_text_input("     ")
    assert not result.ok
    assert "Text input cannot be empty" in result.errors
    assert "Text input is too short (minimum 10 characters)" in result.errors
    assert result.sanitized == ""


def test_text_input_requires_a_string():
    for value in (None, "", 42, ["persona"]):
        result = validate_text_input(value)
        assert not result.ok
        assert result.errors == ["Text input is required"]


def test_message_has_no_minimum_but_caps_at_1000():
    assert validate_message("Hi").ok
    assert validate_message("m" * 1000).ok
    result = validate_message("m" * 1001)
    assert result.errors == ["Message is too long (maximum 1000 characters)"]


def test_message_rejects_blank_and_missing():
    assert validate_message("   ").errors == ["Message cannot be empty"]
    assert validate_message(None).errors == ["Message is required"]


def test_raise_for_errors_carries_itemized_reasons():
    try:
        validate_text_input("   ").raise_for_errors()
        assert False, "expected InputValidationError"
    except InputValidationError as exc:
        assert exc.http_status == 400
        assert len(exc.errors) == 2
        assert exc.details["errors"] == exc.errors
        assert exc.message.startswith("Validation failed: ")


def test_sanitize_input_collapses_and_strips_symbols():
    assert sanitize_input("  Hello   there,\n\tbuyer! <script>#$ ") == "Hello there, buyer! script"
    assert sanitize_input(None) == ""
    assert len(sanitize_input("a" * 6000)) == 5000
