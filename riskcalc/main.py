"""RiskCalc — application entry point.

Builds the FastAPI server and provides the CLI entry point for serving
the API or running a one-off calculation from the shell.
"""

import logging

from fastapi import FastAPI

from riskcalc.api.routers import router

app = FastAPI(title="RiskCalc Position Size API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("riskcalc")


@app.get("/health")
async def health():
    """Liveness probe."""
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _build_parser():
    import argparse

    parser = argparse.ArgumentParser(description="RiskCalc position size calculator")
    parser.add_argument(
        "--mode",
        choices=["serve", "calc"],
        default="serve",
        help="Run the API server or a single calculation (default: serve)",
    )
    parser.add_argument("--env-file", help="Path to a .env file")

    calc = parser.add_argument_group("calculation (--mode calc)")
    calc.add_argument(
        "--asset-class",
        choices=["crypto", "stocks", "forex", "futures"],
        default="crypto",
    )
    calc.add_argument("--balance", default="")
    calc.add_argument("--risk", default="1", help="Risk as percent of balance")
    calc.add_argument("--risk-fiat", help="Risk as a currency amount (overrides --risk)")
    calc.add_argument("--entry", default="")
    calc.add_argument("--stop", default="", help="Stop-loss price")
    calc.add_argument("--pips", help="Forex stop-loss distance in pips")
    calc.add_argument("--target", default="")
    calc.add_argument("--leverage", help="Defaults to 50 for forex, 10 otherwise")
    calc.add_argument("--lot-size", default="50", help="Futures contract size per lot")
    calc.add_argument("--pair", default="EURUSD", help="Forex pair symbol")
    calc.add_argument("--locale", help="Display locale (default from config)")
    return parser


def _inputs_from_args(args):
    from dataclasses import replace

    from riskcalc.models.calculator import CalculatorInputs
    from riskcalc.risk.input_state import select_asset_class, sync_risk_fields

    inputs = CalculatorInputs(
        balance=args.balance,
        risk_mode="fiat" if args.risk_fiat else "percent",
        risk_percent=args.risk,
        risk_fiat=args.risk_fiat or "",
        entry_price=args.entry,
        stop_loss_price=args.stop,
        stop_loss_pips=args.pips or "",
        stop_loss_mode="pips" if args.pips else "price",
        target_price=args.target,
        lot_size=args.lot_size,
        forex_pair=args.pair,
    )
    inputs = select_asset_class(inputs, args.asset_class)
    if args.leverage:
        inputs = replace(inputs, leverage=args.leverage)
    return sync_risk_fields(inputs)


def _run_cli(argv=None) -> None:
    """Parse CLI arguments and dispatch to the appropriate mode."""
    from riskcalc.config import configure_logging, load_config

    args = _build_parser().parse_args(argv)

    config = load_config(env_path=args.env_file)
    configure_logging(config.log_level)

    if args.mode == "calc":
        _run_calc(args, args.locale or config.default_locale)
    else:
        _run_server(config)


def _run_calc(args, locale: str) -> None:
    """Compute one position size and print the report."""
    from riskcalc.cli.report import print_result
    from riskcalc.risk.position_sizer import PositionSizeEngine

    inputs = _inputs_from_args(args)
    outputs = PositionSizeEngine().compute(inputs)
    print_result(inputs, outputs, locale)


def _run_server(config) -> None:
    """Wire services into the routers and serve the API."""
    import uvicorn

    from riskcalc.api.routers import configure_routers
    from riskcalc.feedback.notifier import FeedbackNotifier
    from riskcalc.feedback.rate_limiter import SubmissionRateLimiter
    from riskcalc.pricing.coingecko_client import CoinGeckoClient

    configure_routers(
        price_client=CoinGeckoClient(config),
        notifier=FeedbackNotifier(config.feedback_webhook_url),
        rate_limiter=SubmissionRateLimiter(max_submissions=config.feedback_max_per_hour),
        default_locale=config.default_locale,
    )
    if not config.feedback_webhook_url:
        logger.warning("FEEDBACK_WEBHOOK_URL not set — feedback will only be logged.")

    logger.info("Starting RiskCalc API on http://%s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    _run_cli()
