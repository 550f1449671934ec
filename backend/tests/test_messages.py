import pytest

from aas_portal.core.messages import MESSAGES, negotiate_locale, translate


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, "ar"),
        ("", "ar"),
        ("en-US,en;q=0.9", "en"),
        ("fr-FR,en;q=0.5", "en"),
        ("ar-MR", "ar"),
        ("de", "ar"),
    ],
)
def test_negotiate_locale(header, expected):
    assert negotiate_locale(header) == expected


def test_catalogues_have_same_keys():
    assert set(MESSAGES["ar"]) == set(MESSAGES["en"])


def test_translate_with_parameters():
    message = translate("files_too_large", "en", max_size=200, names="a.jpg, b.jpg")
    assert message == "The following files are too large (over 200MB): a.jpg, b.jpg"


def test_translate_falls_back_to_arabic():
    assert translate("loading", "fr") == MESSAGES["ar"]["loading"]
    assert translate("no_such_key", "en") == "no_such_key"
