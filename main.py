# main.py  (print-only front end for the local evaluators)

from __future__ import annotations

import argparse
import json
import logging
from typing import Any, Dict, List, Optional

from config import RemoteConfig, trades_path_from_environment
from draft_values import draft_capital, net_draft_capital, pick_value_table
from leaderboard import build_leaderboard
from orchestrator import EvaluationOrchestrator
from remote_client import RemoteEvaluationClient
from scenarios import SCENARIO_TYPES, run_scenario
from season import project_season
from simulation import VOLATILITY_TIERS, simulate_outcomes
from trades import load_trade_store


def hr(char="─", n=80):  # horizontal rule
    print(char * n)


def print_kv(title, kvs, key_hdr="Metric", val_hdr="Value", fmt=str):
    print(title); hr()
    print(f"{key_hdr:<28} {val_hdr}")
    hr("—", 80)
    for k, v in kvs.items():
        print(f"{k:<28} {fmt(v)}")
    print()


def print_distribution(distribution):
    print("Grade distribution"); hr()
    for bucket in distribution:
        bar = "█" * (bucket["percentage"] // 2)
        print(f"{bucket['label']:>7} {bucket['count']:>6} {bucket['percentage']:>4}% {bar}")
    print()


def print_board(title, rows):
    print(title); hr()
    print(f"{'#':<4}{'User':<28} {'GM Score':>9} {'Trades':>7} {'Acc':>5} {'Avg':>6}")
    hr("—", 80)
    for i, row in enumerate(rows, 1):
        name = row.display_name or row.email or row.user_id
        print(
            f"{i:<4}{name[:27]:<28} {row.total_gm_score:>9} {row.total_trades:>7} "
            f"{row.accepted_trades:>5} {row.average_grade:>6.1f}"
        )
    print()


def _store(path: Optional[str]):
    return load_trade_store(path or trades_path_from_environment())


def cmd_simulate(args) -> None:
    result = simulate_outcomes(
        args.grade,
        args.num_simulations,
        args.volatility,
        injury_factor=not args.no_injury,
        development_factor=not args.no_development,
    )
    print_kv(
        f"Monte Carlo — base grade {result.original_grade} ({result.volatility} volatility)",
        {
            "Simulations": result.num_simulations,
            "Mean": result.mean_grade,
            "Median": result.median_grade,
            "Std deviation": result.std_deviation,
            "Downside risk (%)": result.risk_analysis["downside_risk"],
            "Upside potential (%)": result.risk_analysis["upside_potential"],
            "Variance band": result.risk_analysis["variance_band"],
        },
    )
    print_kv("Percentiles", result.percentiles, key_hdr="Percentile", val_hdr="Grade")
    print_distribution(result.to_dict()["distribution"])


def cmd_what_if(args) -> None:
    params: Dict[str, Any] = json.loads(args.params) if args.params else {}
    result = run_scenario(args.scenario, args.grade, params)
    print_kv(
        result.description,
        {
            "Original grade": result.original_grade,
            "Adjusted grade": result.adjusted_grade,
            "Delta": f"{result.grade_delta:+d}",
        },
    )
    print(result.reasoning)
    print()


def cmd_leaderboard(args) -> None:
    store = _store(args.trades)
    board = build_leaderboard(
        store.list_trades(),
        page=args.page,
        limit=args.limit,
        search=args.search,
        sort_by=args.sort_by,
        sort_order=args.sort_order,
    )
    print_board(f"GM leaderboard — page {board.page}/{board.total_pages} ({board.total} users)", board.users)


def cmd_draft(args) -> None:
    store = _store(args.trades)
    trade = store.get_trade(args.trade_id)
    if trade is None:
        raise SystemExit(f"Trade '{args.trade_id}' not found")
    sent = draft_capital(trade.draft_picks_sent)
    received = draft_capital(trade.draft_picks_received)
    for title, side in (("Picks sent", sent), ("Picks received", received)):
        print(title); hr()
        table = pick_value_table(side.picks)
        print(table.to_string(index=False) if not table.empty else "(none)")
        print(f"Total {side.total:.1f}  ({side.unvalued_picks} unvalued)")
        print()
    print(f"Net draft capital: {net_draft_capital(sent, received):+.1f}")


def cmd_season(args) -> None:
    store = _store(args.trades)
    trades = store.list_session_trades(args.session_id, status="accepted")
    projection = project_season(trades, args.sport, args.team, season_year=args.season_year, depth=args.depth)
    print_kv(
        f"Season projection — {projection.team_key} {projection.season_year} ({projection.simulation_version})",
        {
            "Baseline": f"{projection.baseline.wins}-{projection.baseline.losses}",
            "Projected": f"{projection.modified.wins}-{projection.modified.losses}",
            "Playoffs": "yes" if projection.modified.made_playoffs else "no",
            "GM score": projection.gm_score,
            "Trades considered": projection.trades_considered,
        },
    )
    print(projection.summary)


def cmd_grade(args) -> None:
    store = _store(args.trades)
    orchestrator = EvaluationOrchestrator(store, RemoteEvaluationClient(RemoteConfig.from_environment()))
    evaluation = orchestrator.grade(args.trade_id, user_token=args.token)
    print(json.dumps(evaluation.to_dict(), indent=2))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate and simulate graded trades.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    sub = parser.add_subparsers(dest="command", required=True)

    sim = sub.add_parser("simulate", help="Run the Monte Carlo outcome simulation for a grade.")
    sim.add_argument("grade", type=int, help="Base trade grade (0-100).")
    sim.add_argument("-n", "--num-simulations", type=int, default=None)
    sim.add_argument("--volatility", choices=VOLATILITY_TIERS, default="medium")
    sim.add_argument("--no-injury", action="store_true", help="Disable injury shocks.")
    sim.add_argument("--no-development", action="store_true", help="Disable player development drift.")
    sim.set_defaults(func=cmd_simulate)

    what_if = sub.add_parser("what-if", help="Apply a what-if scenario to a grade.")
    what_if.add_argument("scenario", choices=SCENARIO_TYPES)
    what_if.add_argument("grade", type=int)
    what_if.add_argument("--params", help='Scenario parameters as JSON, e.g. \'{"injury_severity": "major"}\'.')
    what_if.set_defaults(func=cmd_what_if)

    board = sub.add_parser("leaderboard", help="Show the GM leaderboard from a trades file.")
    board.add_argument("--trades", help="Path to a JSON array of trade records (defaults to TRADES_PATH).")
    board.add_argument("--page", type=int, default=1)
    board.add_argument("--limit", type=int, default=25)
    board.add_argument("--search")
    board.add_argument("--sort-by", default="total_gm_score")
    board.add_argument("--sort-order", default="desc", choices=("asc", "desc"))
    board.set_defaults(func=cmd_leaderboard)

    draft = sub.add_parser("draft", help="Show synthesized draft capital for a stored trade.")
    draft.add_argument("trade_id")
    draft.add_argument("--trades")
    draft.set_defaults(func=cmd_draft)

    season = sub.add_parser("season", help="Project a season from a session's accepted trades.")
    season.add_argument("session_id")
    season.add_argument("sport")
    season.add_argument("team")
    season.add_argument("--season-year", type=int, default=None)
    season.add_argument("--depth", type=int, default=None)
    season.add_argument("--trades")
    season.set_defaults(func=cmd_season)

    grade = sub.add_parser("grade", help="Grade a stored trade via the remote service with local fallback.")
    grade.add_argument("trade_id")
    grade.add_argument("--token", help="Bearer token forwarded to the grading service.")
    grade.add_argument("--trades")
    grade.set_defaults(func=cmd_grade)
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        args.func(args)
    except (ValueError, LookupError) as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
