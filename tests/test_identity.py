from __future__ import annotations

import itertools

import pytest

from golf_edge.identity import clean_display_name, fold_to_ascii, identity_key


def test_identity_key_is_invariant_to_name_order() -> None:
    assert identity_key("Woods, Tiger") == identity_key("Tiger Woods") == "tiger woods"


def test_identity_key_is_invariant_under_token_permutation() -> None:
    tokens = ["Matt", "Fitzpatrick", "Jr."]
    keys = {identity_key(" ".join(order)) for order in itertools.permutations(tokens)}

    assert keys == {"fitzpatrick jr matt"}


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  SCHEFFLER,   scottie ", "scheffler scottie"),
        ("Byeong-Hun An", "an byeonghun"),
        ("Tom Kim (a)", "a kim tom"),
        ("", ""),
        (None, ""),
        ("123 !!", ""),
    ],
)
def test_identity_key_strips_punctuation(raw: str | None, expected: str) -> None:
    assert identity_key(raw) == expected


def test_identity_key_folds_accents_by_default() -> None:
    assert identity_key("Ludvig Åberg") == "aberg ludvig"
    assert identity_key("Åberg, Ludvig") == identity_key("Ludvig Aberg")


def test_identity_key_legacy_mode_drops_non_ascii_letters() -> None:
    assert identity_key("Ludvig Åberg", fold_accents=False) == "berg ludvig"


def test_fold_to_ascii() -> None:
    assert fold_to_ascii("Niklas Nørgaard") == "Niklas Nrgaard"
    assert fold_to_ascii("José María Olazábal") == "Jose Maria Olazabal"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Scheffler, Scottie", "Scottie Scheffler"),
        ("🇺🇸 Scottie Scheffler", "Scottie Scheffler"),
        ("Jackson Koivun (a)", "Jackson Koivun"),
        ("McIlroy, Rory (NIR)", "Rory McIlroy"),
        ("Davis Love, III, Jr", "Davis Love III Jr"),
        ("", ""),
    ],
)
def test_clean_display_name(raw: str, expected: str) -> None:
    assert clean_display_name(raw) == expected
