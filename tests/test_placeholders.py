"""Placeholder substitution tests."""

from datetime import date

import pytest

from bootstrapper.materialize import (
    build_replacements,
    replace_placeholders,
    to_camel_case,
    to_pascal_case,
)

TODAY = date(2024, 3, 5)


@pytest.mark.parametrize(
    ("value", "camel", "pascal"),
    [
        ("my-cool_app", "myCoolApp", "MyCoolApp"),
        ("demo", "demo", "Demo"),
        ("web--api", "webApi", "WebApi"),
        ("trailing-", "trailing", "Trailing"),
        ("Already_Mixed", "AlreadyMixed", "AlreadyMixed"),
    ],
)
def test_case_conversions(value: str, camel: str, pascal: str) -> None:
    assert to_camel_case(value) == camel
    assert to_pascal_case(value) == pascal


def test_build_replacements_for_hyphenated_name() -> None:
    replacements = build_replacements("my-app", TODAY)

    assert replacements == {
        "PROJECT_NAME": "my-app",
        "PROJECT_NAME_UPPER": "MY-APP",
        "PROJECT_NAME_LOWER": "my-app",
        "PROJECT_NAME_CAMEL": "myApp",
        "PROJECT_NAME_PASCAL": "MyApp",
        "DATE": "2024-03-05",
        "YEAR": "2024",
    }


def test_delimited_tokens_are_replaced_everywhere() -> None:
    content = "name={{PROJECT_NAME}};class {{PROJECT_NAME_PASCAL}}Service; (c) {{YEAR}}"

    result = replace_placeholders(content, "my-app", TODAY)

    assert result == "name=my-app;class MyAppService; (c) 2024"


def test_bare_tokens_respect_identifier_boundaries() -> None:
    content = "PROJECT_NAME PROJECT_NAME_UPPER MY_PROJECT_NAME_2 PROJECT_NAMES DATE"

    result = replace_placeholders(content, "demo", TODAY)

    assert result == "demo DEMO MY_PROJECT_NAME_2 PROJECT_NAMES 2024-03-05"


def test_bare_tokens_next_to_punctuation() -> None:
    content = 'const app = "PROJECT_NAME_CAMEL";\n// PROJECT_NAME-v1 (YEAR)\n'

    result = replace_placeholders(content, "shop_front", TODAY)

    assert result == 'const app = "shopFront";\n// shop_front-v1 (2024)\n'


def test_values_are_inserted_literally() -> None:
    assert replace_placeholders("PROJECT_NAME", r"a\1b", TODAY) == r"a\1b"


def test_delimited_pass_runs_before_bare_pass() -> None:
    assert replace_placeholders("{{PROJECT_NAME}}", "YEAR", TODAY) == "2024"


def test_content_without_tokens_is_unchanged() -> None:
    content = "nothing to see here\r\n"

    assert replace_placeholders(content, "demo", TODAY) == content


def test_date_defaults_to_today() -> None:
    assert replace_placeholders("{{YEAR}}", "demo") == str(date.today().year)


def test_documented_boundary_examples() -> None:
    assert replace_placeholders("MY_PROJECT_NAME_EXTRA", "myapp", TODAY) == "MY_PROJECT_NAME_EXTRA"
    assert replace_placeholders("use PROJECT_NAME here", "myapp", TODAY) == "use myapp here"
