from opgate.core.utils.sanitizer import REDACTED, redact_params


def test_nested_and_case_insensitive():
    params = {
        "fields": {"summary": "x", "Authorization": "Bearer abc"},
        "items": [{"clientSecret": "s"}, {"name": "ok"}],
        "refreshToken": "r",
    }
    out = redact_params(params)

    assert out["fields"] == {"summary": "x", "Authorization": REDACTED}
    assert out["items"] == [{"clientSecret": REDACTED}, {"name": "ok"}]
    assert out["refreshToken"] == REDACTED


def test_original_untouched():
    params = {"password": "hunter2", "nested": {"token": "t"}}
    redact_params(params)
    assert params == {"password": "hunter2", "nested": {"token": "t"}}


def test_whole_subtree_masked_for_sensitive_key():
    assert redact_params({"credentials": {"user": "u", "pw": "p"}}) == {"credentials": REDACTED}


def test_scalars_and_none_pass_through():
    assert redact_params(None) is None
    assert redact_params("text") == "text"
    assert redact_params([1, 2]) == [1, 2]
