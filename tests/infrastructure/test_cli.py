"""End-to-end tests for the click CLI against a throwaway SQLite file."""

import re

import pytest
import structlog
from click.testing import CliRunner

from catalog.infrastructure.cli.main import cli


@pytest.fixture
def runner(tmp_path, monkeypatch) -> CliRunner:
    monkeypatch.setenv("CATALOG_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("CATALOG_LOG_LEVEL", "WARNING")
    monkeypatch.setenv("CATALOG_ACTOR_ID", "cli-user")
    runner = CliRunner()
    result = runner.invoke(cli, ["db", "init"])
    assert result.exit_code == 0, result.output
    yield runner
    structlog.reset_defaults()


def _create(runner: CliRunner, sku: str = "WID-001", name: str = "Widget", price: str = "15.00") -> str:
    result = runner.invoke(
        cli, ["product", "create", "--sku", sku, "--name", name, "--price", price]
    )
    assert result.exit_code == 0, result.output
    return re.search(r"Product (\S+) ", result.output).group(1)


class TestProductCommands:

    def test_create_and_show(self, runner):
        product_id = _create(runner)

        result = runner.invoke(cli, ["product", "show", "--id", product_id])

        assert result.exit_code == 0, result.output
        assert "WID-001" in result.output
        assert "15.00 USD" in result.output
        assert "Draft" in result.output

    def test_duplicate_sku_is_an_error(self, runner):
        _create(runner)
        result = runner.invoke(
            cli, ["product", "create", "--sku", "wid-001", "--name", "Other", "--price", "1"]
        )
        assert result.exit_code == 1
        assert "duplicate_sku" in result.output

    def test_bad_price_is_a_usage_error(self, runner):
        result = runner.invoke(
            cli, ["product", "create", "--sku", "WID-001", "--name", "Widget", "--price", "abc"]
        )
        assert result.exit_code == 2

    @pytest.mark.parametrize("price", ["nan", "inf", "-Infinity"])
    def test_non_numeric_price_is_a_usage_error(self, runner, price):
        result = runner.invoke(
            cli, ["product", "create", "--sku", "WID-001", "--name", "Widget", "--price", price]
        )
        assert result.exit_code == 2
        assert "is not a number" in result.output

    def test_search_rejects_non_numeric_bound(self, runner):
        result = runner.invoke(cli, ["product", "search", "--min-price", "NaN"])
        assert result.exit_code == 2

    def test_update(self, runner):
        product_id = _create(runner)
        result = runner.invoke(
            cli,
            [
                "product", "update", "--id", product_id, "--name", "Gadget",
                "--price", "20", "--currency", "EUR",
            ],
        )
        assert result.exit_code == 0, result.output

        shown = runner.invoke(cli, ["product", "show", "--id", product_id])
        assert "Gadget" in shown.output
        assert "20.00 EUR" in shown.output

    def test_publish_then_discontinue(self, runner):
        product_id = _create(runner)

        published = runner.invoke(cli, ["product", "publish", "--id", product_id])
        discontinued = runner.invoke(cli, ["product", "discontinue", "--id", product_id])
        again = runner.invoke(cli, ["product", "publish", "--id", product_id])

        assert "Published" in published.output
        assert "Discontinued" in discontinued.output
        assert again.exit_code == 1
        assert "invalid_state_transition" in again.output

    def test_delete(self, runner):
        product_id = _create(runner)

        deleted = runner.invoke(cli, ["product", "delete", "--id", product_id])
        shown = runner.invoke(cli, ["product", "show", "--id", product_id])
        again = runner.invoke(cli, ["product", "delete", "--id", product_id])

        assert deleted.exit_code == 0
        assert shown.exit_code == 1
        assert "not found" in shown.output
        assert again.exit_code == 1

    def test_search(self, runner):
        _create(runner, "WID-001", "Blue Widget", "10")
        _create(runner, "WID-002", "Red Widget", "30")
        _create(runner, "GAD-001", "Gadget", "20")

        result = runner.invoke(cli, ["product", "search", "--term", "widget", "--price-desc"])

        assert result.exit_code == 0, result.output
        assert result.output.index("Red Widget") < result.output.index("Blue Widget")
        assert "Gadget" not in result.output
        assert "Page 1 of 1 (2 products)" in result.output

    def test_search_without_matches(self, runner):
        result = runner.invoke(cli, ["product", "search", "--term", "nothing"])
        assert result.exit_code == 0
        assert "No products found." in result.output

    def test_search_rejects_oversized_page(self, runner):
        result = runner.invoke(cli, ["product", "search", "--page-size", "500"])
        assert result.exit_code == 1
        assert "validation" in result.output

    def test_search_rejects_zero_page_size(self, runner):
        result = runner.invoke(cli, ["product", "search", "--page-size", "0"])
        assert result.exit_code == 1
        assert "Page size must be greater than 0" in result.output
