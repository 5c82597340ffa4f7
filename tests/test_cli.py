"""Tests for the CLI interface."""

import pytest
from click.testing import CliRunner

from tradebook.cli import _open_store, cli
from tradebook.config import StorageConfig, TradebookConfig
from tradebook.storage import FileStore, load_coins, load_trades
from tradebook.storage.database import PostgresStore


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRADEBOOK_CONFIG", raising=False)
    return tmp_path / "data"


def _run(data_dir, *args, **kwargs):
    runner = CliRunner()
    return runner.invoke(cli, ["--data-dir", str(data_dir), *args], **kwargs)


def _only_trade(data_dir):
    (trade,) = load_trades(FileStore(data_dir))
    return trade


class TestCLI:
    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Tradebook" in result.output

    def test_buy_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["buy", "--help"])
        assert result.exit_code == 0
        assert "--quote" in result.output

    def test_report_summary_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["report", "summary", "--help"])
        assert result.exit_code == 0
        assert "--filter" in result.output


class TestBuyAndSell:
    def test_buy_with_quote_derives_amount(self, data_dir):
        result = _run(data_dir, "buy", "Dip buy", "BTC", "--price", "60000", "--quote", "600")
        assert result.exit_code == 0, result.output
        assert "saved" in result.output

        trade = _only_trade(data_dir)
        assert trade.amount == pytest.approx(0.01)
        assert trade.usdt_used == 600
        assert trade.remaining_amount == trade.amount
        assert trade.sells == []

    def test_buy_with_amount_derives_quote(self, data_dir):
        result = _run(data_dir, "buy", "Long", "ETH", "--price", "3000", "--amount", "0.5")
        assert result.exit_code == 0, result.output
        assert _only_trade(data_dir).usdt_used == 1500

    def test_buy_requires_amount_or_quote(self, data_dir):
        result = _run(data_dir, "buy", "Nothing", "ETH", "--price", "3000")
        assert result.exit_code == 1
        assert "Either amount or quote" in result.output

    def test_buy_keeps_both_amount_and_quote(self, data_dir):
        result = _run(
            data_dir, "buy", "Fees", "BTC", "--price", "100", "--amount", "1", "--quote", "105"
        )
        assert result.exit_code == 0, result.output
        assert "1.00000000 BTC for 105.00" in result.output
        trade = _only_trade(data_dir)
        assert trade.amount == 1
        assert trade.usdt_used == 105

    def test_buy_uppercases_symbol(self, data_dir):
        _run(data_dir, "coins", "add", "Bitcoin", "BTC")
        result = _run(data_dir, "buy", "Lower", "btc", "--price", "10", "--amount", "1")
        assert result.exit_code == 0, result.output
        trade = _only_trade(data_dir)
        assert trade.currency_name == "BTC"
        assert "(Bitcoin)" in _run(data_dir, "trades", "show", trade.id).output
        assert "Trades:            1" in _run(data_dir, "report", "coin", "btc").output

    def test_sell_reduces_remaining(self, data_dir):
        _run(data_dir, "buy", "Long", "ETH", "--price", "100", "--amount", "2")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "sell", trade_id, "--price", "120", "--amount", "0.5")
        assert result.exit_code == 0, result.output
        assert "Remaining: 1.50000000" in result.output

        trade = _only_trade(data_dir)
        assert trade.sells[0].usdt_received == 60
        assert trade.remaining_amount == pytest.approx(1.5)

    def test_sell_keeps_both_amount_and_quote(self, data_dir):
        _run(data_dir, "buy", "Long", "ETH", "--price", "100", "--amount", "2")
        trade_id = _only_trade(data_dir).id

        result = _run(
            data_dir, "sell", trade_id, "--price", "120", "--amount", "1", "--quote", "118.5"
        )
        assert result.exit_code == 0, result.output
        (sell,) = _only_trade(data_dir).sells
        assert sell.sold_amount == 1
        assert sell.usdt_received == 118.5

    def test_sell_on_completed_trade_rejected(self, data_dir):
        _run(data_dir, "buy", "Long", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id
        _run(data_dir, "sell", trade_id, "--price", "120", "--amount", "1")

        result = _run(data_dir, "sell", trade_id, "--price", "120", "--quote", "0")
        assert result.exit_code == 1
        assert "already completed" in result.output
        assert len(_only_trade(data_dir).sells) == 1

    def test_oversell_rejected(self, data_dir):
        _run(data_dir, "buy", "Long", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "sell", trade_id, "--price", "120", "--amount", "2")
        assert result.exit_code == 1
        assert "Cannot sell more than remaining amount" in result.output
        assert _only_trade(data_dir).sells == []

    def test_sell_unknown_trade(self, data_dir):
        result = _run(data_dir, "sell", "nope", "--price", "1", "--amount", "1")
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestTradeCommands:
    def test_list_empty(self, data_dir):
        result = _run(data_dir, "trades", "list")
        assert result.exit_code == 0
        assert "No trades recorded." in result.output

    def test_list_and_show(self, data_dir):
        _run(data_dir, "coins", "add", "Solana", "sol")
        _run(data_dir, "buy", "Swing", "SOL", "--price", "10", "--amount", "10")
        trade_id = _only_trade(data_dir).id
        _run(data_dir, "sell", trade_id, "--price", "12", "--amount", "5")

        listed = _run(data_dir, "trades", "list")
        assert trade_id in listed.output
        assert "Active" in listed.output

        shown = _run(data_dir, "trades", "show", trade_id)
        assert shown.exit_code == 0, shown.output
        assert "Swing (Solana)" in shown.output
        assert "Net PNL:           10.00" in shown.output
        assert "ROI:               20.00%" in shown.output

    def test_edit(self, data_dir):
        _run(data_dir, "buy", "Old", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "trades", "edit", trade_id, "--name", "New", "--amount", "3")
        assert result.exit_code == 0, result.output
        trade = _only_trade(data_dir)
        assert trade.name == "New"
        assert trade.remaining_amount == 3

    def test_edit_uppercases_symbol(self, data_dir):
        _run(data_dir, "buy", "Old", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "trades", "edit", trade_id, "--symbol", "sol")
        assert result.exit_code == 0, result.output
        assert _only_trade(data_dir).currency_name == "SOL"

    def test_delete(self, data_dir):
        _run(data_dir, "buy", "Gone", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "trades", "delete", trade_id, "--yes")
        assert result.exit_code == 0, result.output
        assert load_trades(FileStore(data_dir)) == []

    def test_delete_aborts_without_confirmation(self, data_dir):
        _run(data_dir, "buy", "Kept", "ETH", "--price", "100", "--amount", "1")
        trade_id = _only_trade(data_dir).id

        result = _run(data_dir, "trades", "delete", trade_id, input="n\n")
        assert result.exit_code != 0
        assert _only_trade(data_dir).id == trade_id


class TestSellCommands:
    def _trade_with_sell(self, data_dir):
        _run(data_dir, "buy", "Long", "ETH", "--price", "100", "--amount", "2")
        trade_id = _only_trade(data_dir).id
        _run(data_dir, "sell", trade_id, "--price", "120", "--amount", "1")
        return trade_id, _only_trade(data_dir).sells[0].id

    def test_edit(self, data_dir):
        trade_id, sell_id = self._trade_with_sell(data_dir)
        result = _run(
            data_dir, "sells", "edit", trade_id, sell_id,
            "--price", "130", "--amount", "1.5", "--quote", "195",
        )
        assert result.exit_code == 0, result.output
        trade = _only_trade(data_dir)
        assert trade.sells[0].usdt_received == 195
        assert trade.remaining_amount == pytest.approx(0.5)

    def test_edit_beyond_remaining(self, data_dir):
        trade_id, sell_id = self._trade_with_sell(data_dir)
        result = _run(
            data_dir, "sells", "edit", trade_id, sell_id,
            "--price", "130", "--amount", "3", "--quote", "390",
        )
        assert result.exit_code == 1
        assert "Cannot increase sell amount" in result.output

    def test_delete_restores_remaining(self, data_dir):
        trade_id, sell_id = self._trade_with_sell(data_dir)
        result = _run(data_dir, "sells", "delete", trade_id, sell_id)
        assert result.exit_code == 0, result.output
        trade = _only_trade(data_dir)
        assert trade.sells == []
        assert trade.remaining_amount == 2


class TestCoinCommands:
    def test_add_list_edit_delete(self, data_dir):
        result = _run(data_dir, "coins", "add", "Solana", "sol")
        assert "Coin SOL added." in result.output
        assert "SOL" in _run(data_dir, "coins", "list").output

        (coin,) = load_coins(FileStore(data_dir))
        _run(data_dir, "coins", "edit", coin.id, "--name", "Wrapped SOL", "--symbol", "wsol")
        assert load_coins(FileStore(data_dir))[0].symbol == "WSOL"

        assert "Coin deleted." in _run(data_dir, "coins", "delete", coin.id).output
        assert "No custom coins." in _run(data_dir, "coins", "list").output

    def test_add_requires_symbol(self, data_dir):
        result = _run(data_dir, "coins", "add", "Solana", "")
        assert result.exit_code == 1


class TestReportCommands:
    @pytest.fixture
    def ledger(self, data_dir):
        _run(data_dir, "buy", "A", "BTC", "--price", "10", "--amount", "10")
        trade_id = _only_trade(data_dir).id
        _run(data_dir, "sell", trade_id, "--price", "12", "--amount", "5")
        return data_dir

    def test_summary(self, ledger):
        result = _run(ledger, "report", "summary")
        assert result.exit_code == 0, result.output
        assert "Window: lifetime" in result.output
        assert "Total PNL:  10.00 USDT" in result.output
        assert "Total ROI:  10.00%" in result.output

    def test_summary_today(self, ledger):
        result = _run(ledger, "report", "summary", "--filter", "today")
        assert "Trades:     1" in result.output

    def test_summary_custom_requires_dates(self, ledger):
        result = _run(ledger, "report", "summary", "--filter", "custom")
        assert result.exit_code == 2
        assert "--start and --end" in result.output

    def test_summary_custom_outside_range(self, ledger):
        result = _run(
            ledger, "report", "summary", "--filter", "custom",
            "--start", "2001-01-01", "--end", "2001-12-31",
        )
        assert result.exit_code == 0, result.output
        assert "Trades:     0" in result.output

    def test_coin(self, ledger):
        result = _run(ledger, "report", "coin", "BTC")
        assert result.exit_code == 0, result.output
        assert "Total profit:      10.00" in result.output

    def test_daily_and_cumulative(self, ledger):
        daily = _run(ledger, "report", "daily")
        assert daily.exit_code == 0, daily.output
        assert "sells   1" in daily.output
        cumulative = _run(ledger, "report", "cumulative")
        assert "10.00" in cumulative.output

    def test_deep(self, ledger):
        result = _run(ledger, "report", "deep")
        assert result.exit_code == 0, result.output
        assert "Most traded coin:     BTC" in result.output
        assert "Risk / reward:        1.00" in result.output

    def test_empty_reports(self, data_dir):
        assert "No activity." in _run(data_dir, "report", "daily").output
        assert "No activity." in _run(data_dir, "report", "cumulative").output
        deep = _run(data_dir, "report", "deep")
        assert deep.exit_code == 0, deep.output
        assert "Most traded coin:     N/A" in deep.output


class TestOpenStore:
    def test_file_backend(self, tmp_path):
        config = TradebookConfig(storage=StorageConfig(path=str(tmp_path)))
        store = _open_store(config)
        assert isinstance(store, FileStore)
        assert store.root == tmp_path

    def test_postgres_backend_is_lazy(self):
        config = TradebookConfig(storage=StorageConfig(backend="postgres"))
        store = _open_store(config)
        assert isinstance(store, PostgresStore)
        store.close()
