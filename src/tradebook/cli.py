"""Tradebook CLI — record trades and sells, and report on them."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from datetime import datetime
from typing import NoReturn

import click

from tradebook.analytics import (
    DateRange,
    TimeFilter,
    calculate_pnl,
    calculate_roi,
    calculate_total_pnl,
    calculate_total_roi,
    get_coin_analytics,
    get_cumulative_data,
    get_daily_data,
    get_deep_analytics,
    get_filtered_trades,
    get_trade_analytics,
)
from tradebook.config import TradebookConfig
from tradebook.ledger import (
    CustomCoin,
    LedgerError,
    QuantityCalculator,
    Trade,
    add_coin,
    add_trade,
    create_trade,
    delete_coin,
    delete_sell,
    delete_trade,
    find_trade,
    record_sell,
    resolve_coin_name,
    sort_for_display,
    update_coin,
    update_sell,
    update_trade,
)
from tradebook.storage import (
    FileStore,
    KeyValueStore,
    StorageError,
    load_coins,
    load_trades,
    save_coins,
    save_trades,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
FILTER_CHOICES = tuple(f.value for f in TimeFilter)
DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S"]


def _setup_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def _open_store(config: TradebookConfig) -> KeyValueStore:
    """Build the storage backend selected in config."""
    if config.storage.backend == "postgres":
        from tradebook.storage.database import PostgresStore

        return PostgresStore(config.database.with_env_overrides())
    return FileStore(config.storage.root)


def _config(ctx: click.Context) -> TradebookConfig:
    return ctx.obj["config"]


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _money(value: float | None) -> str:
    return "N/A" if value is None else f"{value:,.2f}"


def _pct(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.2f}%"


def _quantities(price: float, amount: float | None, quote: float | None) -> tuple[float, float]:
    """Resolve (amount, quote), deriving only the one that was not given."""
    return QuantityCalculator(amount=amount, price=price, quote=quote).resolve()


def _mutate_trades(
    ctx: click.Context, change: Callable[[list[Trade]], list[Trade]]
) -> list[Trade]:
    """Load the ledger, apply ``change`` to it and save the result."""
    try:
        with _open_store(_config(ctx)) as store:
            trades = change(load_trades(store))
            save_trades(store, trades)
    except (LedgerError, StorageError) as exc:
        _fail(str(exc))
    return trades


def _read_trades(ctx: click.Context) -> list[Trade]:
    try:
        with _open_store(_config(ctx)) as store:
            return load_trades(store)
    except StorageError as exc:
        _fail(str(exc))


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    help="Set logging verbosity.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True),
    default=None,
    help="Path to tradebook.toml config file.",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the file storage backend (overrides config).",
)
@click.pass_context
def cli(
    ctx: click.Context, log_level: str, config_path: str | None, data_dir: str | None
) -> None:
    """Tradebook - personal trade journal with realized PNL analytics.

    \b
    Quick start:
      1. tradebook buy "Dip buy" BTC --price 60000 --quote 600
      2. tradebook trades list
      3. tradebook sell <TRADE_ID> --price 66000 --amount 0.005
      4. tradebook report summary --filter 30d

    \b
    Storage:
      Trades and coins live in ~/.tradebook by default. Set
      [storage] backend = "postgres" in tradebook.toml to use PostgreSQL,
      with TRADEBOOK_DB_HOST  TRADEBOOK_DB_PORT  TRADEBOOK_DB_NAME
           TRADEBOOK_DB_USER  TRADEBOOK_DB_PASSWORD
    """
    _setup_logging(log_level)
    ctx.ensure_object(dict)
    config = TradebookConfig.find_and_load(config_path) or TradebookConfig()
    if data_dir:
        config = config.model_copy(
            update={"storage": config.storage.model_copy(update={"path": data_dir})}
        )
    ctx.obj["config"] = config


# --- Coin registry commands ---


@cli.group()
def coins() -> None:
    """Manage custom coin names."""
    pass


def _mutate_coins(
    ctx: click.Context, change: Callable[[list[CustomCoin]], list[CustomCoin]]
) -> None:
    with _open_store(_config(ctx)) as store:
        try:
            updated = change(load_coins(store))
        except LedgerError as exc:
            _fail(str(exc))
        save_coins(store, updated)


@coins.command("add")
@click.argument("name")
@click.argument("symbol")
@click.pass_context
def coins_add(ctx: click.Context, name: str, symbol: str) -> None:
    """Register a coin NAME under SYMBOL."""
    _mutate_coins(ctx, lambda cs: add_coin(cs, name, symbol))
    click.echo(f"Coin {symbol.upper()} added.")


@coins.command("list")
@click.pass_context
def coins_list(ctx: click.Context) -> None:
    """List registered coins."""
    with _open_store(_config(ctx)) as store:
        registered = load_coins(store)
    if not registered:
        click.echo("No custom coins.")
        return
    for coin in registered:
        click.echo(f"{coin.id}  {coin.symbol:<8} {coin.name}")


@coins.command("edit")
@click.argument("coin_id")
@click.option("--name", required=True, help="New display name.")
@click.option("--symbol", required=True, help="New symbol.")
@click.pass_context
def coins_edit(ctx: click.Context, coin_id: str, name: str, symbol: str) -> None:
    """Rename a registered coin."""
    _mutate_coins(ctx, lambda cs: update_coin(cs, coin_id, name, symbol))
    click.echo("Coin updated.")


@coins.command("delete")
@click.argument("coin_id")
@click.pass_context
def coins_delete(ctx: click.Context, coin_id: str) -> None:
    """Remove a registered coin."""
    _mutate_coins(ctx, lambda cs: delete_coin(cs, coin_id))
    click.echo("Coin deleted.")


# --- Buy / sell commands ---


@cli.command()
@click.argument("name")
@click.argument("symbol")
@click.option("--price", required=True, type=float, help="Purchase unit price.")
@click.option("--amount", type=float, default=None, help="Quantity bought.")
@click.option("--quote", type=float, default=None, help="Total quote currency spent.")
@click.pass_context
def buy(
    ctx: click.Context,
    name: str,
    symbol: str,
    price: float,
    amount: float | None,
    quote: float | None,
) -> None:
    """Record a purchase of SYMBOL labelled NAME.

    Give --amount, --quote or both; a missing one is derived from --price.

    \b
    Examples:
      tradebook buy "Long term" ETH --price 3000 --amount 0.5
      tradebook buy "Dip buy" BTC --price 60000 --quote 600
    """
    try:
        final_amount, final_quote = _quantities(price, amount, quote)
        trade = create_trade(name, symbol.upper(), price, final_amount, final_quote)
    except LedgerError as exc:
        _fail(str(exc))
    _mutate_trades(ctx, lambda ts: add_trade(ts, trade))
    click.echo(f"Trade {trade.id} saved: {final_amount:.8f} {trade.currency_name} for {final_quote:,.2f}.")


@cli.command()
@click.argument("trade_id")
@click.option("--price", required=True, type=float, help="Unit price received.")
@click.option("--amount", type=float, default=None, help="Quantity sold.")
@click.option("--quote", type=float, default=None, help="Total quote currency received.")
@click.pass_context
def sell(
    ctx: click.Context,
    trade_id: str,
    price: float,
    amount: float | None,
    quote: float | None,
) -> None:
    """Record a partial or full sell against TRADE_ID."""
    try:
        sold_amount, received = _quantities(price, amount, quote)
    except LedgerError as exc:
        _fail(str(exc))
    trades = _mutate_trades(
        ctx, lambda ts: record_sell(ts, trade_id, price, sold_amount, received)
    )
    remaining = find_trade(trades, trade_id).remaining_amount
    click.echo(f"Sell saved. Remaining: {remaining:.8f}")


# --- Trade commands ---


@cli.group()
def trades() -> None:
    """Inspect and edit recorded trades."""
    pass


@trades.command("list")
@click.pass_context
def trades_list(ctx: click.Context) -> None:
    """List trades, open positions first."""
    ledger = _read_trades(ctx)
    if not ledger:
        click.echo("No trades recorded.")
        return
    for trade in sort_for_display(ledger):
        status = "Completed" if trade.is_completed else "Active"
        click.echo(
            f"{trade.id}  {trade.timestamp:%Y-%m-%d}  {trade.currency_name:<8} "
            f"{trade.name:<20} {status:<9} "
            f"PNL {_money(calculate_pnl(trade)):>12}  ROI {_pct(calculate_roi(trade)):>9}"
        )


@trades.command("show")
@click.argument("trade_id")
@click.pass_context
def trades_show(ctx: click.Context, trade_id: str) -> None:
    """Show detailed analytics and sell history for TRADE_ID."""
    ledger = _read_trades(ctx)
    try:
        trade = find_trade(ledger, trade_id)
    except LedgerError as exc:
        _fail(str(exc))
    with _open_store(_config(ctx)) as store:
        display_name = resolve_coin_name(load_coins(store), trade.currency_name)

    a = get_trade_analytics(trade)
    click.echo(f"{trade.name} ({display_name})  [{a.status}]")
    click.echo(f"  Invested:          {_money(a.total_invested)}")
    click.echo(f"  Received:          {_money(a.total_received)}")
    click.echo(f"  Net PNL:           {_money(a.net_pnl)}")
    click.echo(f"  ROI:               {_pct(a.roi)}")
    click.echo(f"  Avg buy price:     {_money(a.average_buy_price)}")
    click.echo(f"  Avg sell price:    {_money(a.average_sell_price)}")
    click.echo(f"  Sold:              {a.sold_amount:.8f} ({a.sold_percentage:.2f}%)")
    click.echo(f"  Remaining:         {a.remaining_amount:.8f}")
    click.echo(f"  Remaining cost:    {_money(a.remaining_cost_basis)}")
    click.echo(f"  Days held:         {a.days_held}")
    if a.best_sell and a.worst_sell:
        click.echo(f"  Best sell price:   {_money(a.best_sell.sell_price)}")
        click.echo(f"  Worst sell price:  {_money(a.worst_sell.sell_price)}")
    click.echo(f"  Sells ({a.number_of_sells}):")
    for s in trade.sells:
        click.echo(
            f"    {s.id}  {s.timestamp:%Y-%m-%d %H:%M}  price {_money(s.sell_price)}  "
            f"amount {s.sold_amount:.8f}  received {_money(s.usdt_received)}"
        )


@trades.command("edit")
@click.argument("trade_id")
@click.option("--name", default=None, help="New label.")
@click.option("--symbol", default=None, help="New asset symbol.")
@click.option("--price", type=float, default=None, help="New purchase price.")
@click.option("--amount", type=float, default=None, help="New quantity (resets remaining).")
@click.option("--quote", type=float, default=None, help="New total cost.")
@click.pass_context
def trades_edit(
    ctx: click.Context,
    trade_id: str,
    name: str | None,
    symbol: str | None,
    price: float | None,
    amount: float | None,
    quote: float | None,
) -> None:
    """Edit fields of TRADE_ID.

    Changing --amount resets the remaining amount to the new amount;
    recorded sells are not rescaled.
    """
    _mutate_trades(
        ctx,
        lambda ts: update_trade(
            ts,
            trade_id,
            name=name,
            currency_name=symbol.upper() if symbol else symbol,
            price=price,
            amount=amount,
            usdt_used=quote,
        ),
    )
    click.echo("Trade updated.")


@trades.command("delete")
@click.argument("trade_id")
@click.confirmation_option(prompt="Delete this trade and all of its sells?")
@click.pass_context
def trades_delete(ctx: click.Context, trade_id: str) -> None:
    """Delete TRADE_ID and its sell history."""
    _mutate_trades(ctx, lambda ts: delete_trade(ts, trade_id))
    click.echo("Trade deleted.")


# --- Sell record commands ---


@cli.group()
def sells() -> None:
    """Edit or delete recorded sells."""
    pass


@sells.command("edit")
@click.argument("trade_id")
@click.argument("sell_id")
@click.option("--price", required=True, type=float, help="Unit price received.")
@click.option("--amount", required=True, type=float, help="Quantity sold.")
@click.option("--quote", required=True, type=float, help="Total quote currency received.")
@click.pass_context
def sells_edit(
    ctx: click.Context,
    trade_id: str,
    sell_id: str,
    price: float,
    amount: float,
    quote: float,
) -> None:
    """Replace the figures of SELL_ID on TRADE_ID."""
    _mutate_trades(
        ctx,
        lambda ts: update_sell(
            ts, trade_id, sell_id, sell_price=price, sold_amount=amount, usdt_received=quote
        ),
    )
    click.echo("Sell record updated.")


@sells.command("delete")
@click.argument("trade_id")
@click.argument("sell_id")
@click.pass_context
def sells_delete(ctx: click.Context, trade_id: str, sell_id: str) -> None:
    """Delete SELL_ID and return its amount to TRADE_ID."""
    _mutate_trades(ctx, lambda ts: delete_sell(ts, trade_id, sell_id))
    click.echo("Sell record deleted.")


# --- Report commands ---


@cli.group()
def report() -> None:
    """Profitability reports."""
    pass


@report.command("summary")
@click.option(
    "--filter",
    "time_filter",
    type=click.Choice(FILTER_CHOICES),
    default=None,
    help="Time window (default from config, normally lifetime).",
)
@click.option("--start", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option("--end", type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.pass_context
def report_summary(
    ctx: click.Context,
    time_filter: str | None,
    start: datetime | None,
    end: datetime | None,
) -> None:
    """Total realized PNL and ROI of trades opened in a time window.

    \b
    Examples:
      tradebook report summary --filter 7d
      tradebook report summary --filter custom --start 2025-01-01 --end 2025-03-31
    """
    selected = TimeFilter(time_filter) if time_filter else _config(ctx).display.default_filter
    custom_range = None
    if selected == TimeFilter.CUSTOM:
        if start is None or end is None:
            raise click.UsageError("--filter custom requires --start and --end")
        custom_range = DateRange(start=start, end=end)

    filtered = get_filtered_trades(_read_trades(ctx), selected, custom_range)
    currency = _config(ctx).display.quote_currency
    click.echo(f"Window: {selected}")
    click.echo(f"  Trades:     {len(filtered)}")
    click.echo(f"  Total PNL:  {_money(calculate_total_pnl(filtered))} {currency}")
    click.echo(f"  Total ROI:  {_pct(calculate_total_roi(filtered))}")


@report.command("coin")
@click.argument("symbol")
@click.pass_context
def report_coin(ctx: click.Context, symbol: str) -> None:
    """Aggregate figures for every trade in SYMBOL."""
    symbol = symbol.upper()
    a = get_coin_analytics(symbol, _read_trades(ctx))
    click.echo(symbol)
    click.echo(f"  Trades:            {a.total_trades}")
    click.echo(f"  Invested:          {_money(a.total_invested)}")
    click.echo(f"  Sold:              {_money(a.total_sold)}")
    click.echo(f"  Holdings at cost:  {_money(a.current_holdings)}")
    click.echo(f"  Total profit:      {_money(a.total_profit)}")
    click.echo(f"  Average ROI:       {_pct(a.average_roi)}")
    click.echo(f"  Best trade:        {_money(a.best_trade)}")
    click.echo(f"  Worst trade:       {_money(a.worst_trade)}")


@report.command("daily")
@click.pass_context
def report_daily(ctx: click.Context) -> None:
    """Per-day activity and realized PNL."""
    days = get_daily_data(_read_trades(ctx))
    if not days:
        click.echo("No activity.")
        return
    for day in days:
        click.echo(
            f"{day.date}  trades {day.trades:>3}  sells {day.sells:>3}  "
            f"PNL {_money(day.pnl):>12}  ROI {_pct(day.roi):>9}"
        )


@report.command("cumulative")
@click.pass_context
def report_cumulative(ctx: click.Context) -> None:
    """Running total of realized PNL by day."""
    series = get_cumulative_data(_read_trades(ctx))
    if not series.data:
        click.echo("No activity.")
        return
    for label, value in zip(series.labels, series.data):
        click.echo(f"{label:<8} {_money(value):>14}")


@report.command("deep")
@click.pass_context
def report_deep(ctx: click.Context) -> None:
    """Portfolio-wide statistics."""
    a = get_deep_analytics(_read_trades(ctx))
    click.echo("Portfolio")
    click.echo(f"  Trades:               {a.total_trades}")
    click.echo(f"  Invested:             {_money(a.total_invested)}")
    click.echo(f"  Sold:                 {_money(a.total_sold)}")
    click.echo(f"  Net PNL (cash flow):  {_money(a.net_pnl)}")
    click.echo(f"  Win rate:             {a.win_rate:.1f}%")
    click.echo(f"  Average ROI:          {_pct(a.average_roi)}")
    click.echo(f"  Best / worst trade:   {_money(a.best_trade)} / {_money(a.worst_trade)}")
    click.echo(f"  Average hold (days):  {a.average_hold_time}")
    click.echo(f"  Most traded coin:     {a.most_traded_coin or 'N/A'}")
    click.echo(f"  Most profitable coin: {a.most_profitable_coin or 'N/A'}")
    click.echo(f"  Best / worst day:     {_money(a.best_day_pnl)} / {_money(a.worst_day_pnl)}")
    click.echo(f"  Sharpe ratio:         {a.sharpe_ratio:.2f}")
    click.echo(f"  Profit factor:        {a.profit_factor:.2f}")
    click.echo(f"  Max drawdown:         {a.max_drawdown:.2f}%")
    rr = "N/A" if a.risk_reward_ratio is None else f"{a.risk_reward_ratio:.2f}"
    click.echo(f"  Risk / reward:        {rr}")
    click.echo(f"  Consistency:          {a.trading_consistency:.1f}% of months profitable")
    if a.monthly_performance:
        click.echo("  Monthly PNL:")
        for month in a.monthly_performance:
            click.echo(f"    {month.month:<16} {_money(month.pnl):>14}")
