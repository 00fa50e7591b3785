"""Utilities for validating PAYE settings files and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Sequence

from .brackets import schedule_issues
from .schema import MAX_RATE, PayeSettings, Reliefs, StatutoryRates, TaxBracket
from .settings_store import available_years, load_settings


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []

    for issue in schedule_issues(brackets):
        scope = "tax_brackets" if issue.index is None else f"tax_brackets[{issue.index}]"
        errors.append(_format_scope(scope, issue.message))

    for index, bracket in enumerate(brackets):
        scope = f"tax_brackets[{index}]"
        if bracket.rate < 0 or bracket.rate > MAX_RATE:
            errors.append(_format_scope(scope, f"rate {bracket.rate} must be between 0 and 1"))
        if bracket.upper_bound is not None and bracket.upper_bound <= bracket.lower_bound:
            errors.append(_format_scope(scope, "maximum must exceed the minimum"))
        if not bracket.description.strip():
            errors.append(_format_scope(scope, "description must not be empty"))

    if brackets and brackets[0].rate != 0:
        errors.append(
            _format_scope("tax_brackets[0]", "the first bracket should be a zero-rate threshold")
        )

    return errors


def _validate_statutory_rates(rates: StatutoryRates) -> list[str]:
    errors: list[str] = []
    for name, value in rates:
        if value < 0 or value > MAX_RATE:
            errors.append(
                _format_scope("statutory_rates", f"{name} rate {value} must be between 0 and 1")
            )
    return errors


def _validate_reliefs(reliefs: Reliefs) -> list[str]:
    errors: list[str] = []
    if reliefs.rent_relief < 0 or reliefs.rent_relief > MAX_RATE:
        errors.append(
            _format_scope("reliefs", f"rent relief rate {reliefs.rent_relief} must be between 0 and 1")
        )
    if reliefs.rent_relief_cap < 0:
        errors.append(_format_scope("reliefs", "rent relief cap must be non-negative"))
    return errors


def validate_settings(settings: PayeSettings) -> list[str]:
    """Return a list of validation issues for the provided settings."""

    errors: list[str] = []

    errors.extend(_validate_brackets(settings.tax_brackets))
    errors.extend(_validate_statutory_rates(settings.statutory_rates))
    errors.extend(_validate_reliefs(settings.reliefs))

    effective = settings.effective_date
    if effective is not None and effective.year != settings.tax_year:
        errors.append(
            _format_scope(
                "effective_date",
                f"{effective.isoformat()} does not fall within tax year {settings.tax_year}",
            )
        )

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        settings = load_settings(year)
        results[int(year)] = validate_settings(settings)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured PAYE settings and report issues."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            settings = load_settings(year)
        except (FileNotFoundError, ValueError) as error:
            print(f"[{year}] failed to load settings: {error}")
            exit_code = 1
            continue

        issues = validate_settings(settings)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
