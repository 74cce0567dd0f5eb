"""Tests for the command-line entry point."""

import json
import logging
from decimal import Decimal

import pytest
import structlog

from tradecalc.config import AppSettings
from tradecalc.main import build_calculator, main


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Run from an empty directory (no .env) and restore logging afterwards."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def dai_market(monkeypatch: pytest.MonkeyPatch) -> None:
    """HOT-DAI market with 0.1% maker fee and 0.5 DAI gas."""
    monkeypatch.setenv("MARKET_BASE_TOKEN", "HOT")
    monkeypatch.setenv("MARKET_QUOTE_TOKEN", "DAI")
    monkeypatch.setenv("MARKET_AS_MAKER_FEE_RATE", "0.001")
    monkeypatch.setenv("MARKET_GAS_FEE_AMOUNT", "0.5")


class TestBuildCalculator:
    def test_log_settings_reach_root_logger(self) -> None:
        build_calculator(AppSettings(log_level="DEBUG", log_format="json"))
        assert logging.getLogger().level == logging.DEBUG

    def test_discount_rules_bound(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DISCOUNT_RULES", '[["100", "0.7"], ["-1", "1"]]')
        calculator = build_calculator(AppSettings())
        assert len(calculator.discount_tiers) == 2


class TestMain:
    def test_limit_buy_prints_result(
        self, dai_market, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """2 @ 100 with 0.1% maker fee and 0.5 gas: 200 + 0.2 + 0.5."""
        exit_code = main(["limit", "buy", "100", "2"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert Decimal(output["result"]["total_quote_tokens"]) == Decimal("200.7")
        assert output["result"]["is_maker_fee"] is True
        assert output["errors"] == {}

    def test_margin_flags(self, dai_market, capsys: pytest.CaptureFixture[str]) -> None:
        """10 @ 100 at 5x long liquidates at 800 * 1.15 / 10 = 92."""
        main(["limit", "buy", "100", "10", "--margin", "--leverage", "5"])

        result = json.loads(capsys.readouterr().out)["result"]
        assert Decimal(result["user_collateral_committed"]) == Decimal("200")
        assert Decimal(result["estimated_liquidation_price"]) == Decimal("92")

    def test_invalid_order_exits_nonzero(
        self, dai_market, capsys: pytest.CaptureFixture[str]
    ) -> None:
        exit_code = main(["limit", "buy", "0", "2"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert output["errors"]["price"] == "Price must be greater than 0"

    def test_log_env_applied(
        self, dai_market, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """LOG_LEVEL and LOG_FORMAT flow through AppSettings into the log handler."""
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "json")

        main(["market", "sell", "100", "2"])

        events = [json.loads(line)["event"] for line in capsys.readouterr().err.splitlines()]
        assert "trade_computed" in events
        assert "order_priced" in events

    @pytest.mark.parametrize("price", ["abc", "NaN", "Infinity"])
    def test_non_numeric_argument_rejected(self, price: str) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["limit", "buy", price, "2"])
        assert exc_info.value.code == 2
