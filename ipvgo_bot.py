#!/usr/bin/env python3
"""
Run the IPvGO move engine against the local game and report how it played.
"""
import argparse
import asyncio
import logging
import time
from collections import Counter
from typing import List, Optional

from tqdm import tqdm

from engine_config import EngineConfig
from local_game import LocalGoGame
from play_session import PlaySession, SessionStats


def setup_logging(level: int = logging.WARNING, log_file: Optional[str] = None) -> logging.Logger:
    """Console handler with bare messages, plus an optional timestamped file handler"""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter('%(message)s'))
    root.addHandler(ch)

    if log_file:
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root.addHandler(fh)

    return root


async def run_session(config: EngineConfig, games: int, session_id: int = 0,
                      pbar: Optional[tqdm] = None) -> SessionStats:
    """Play `games` games on a private LocalGoGame"""
    seed = None if config.seed is None else config.seed + session_id
    game = LocalGoGame(size=config.board_size, opponent=config.opponent, seed=seed,
                       pass_rate=config.opponent_pass_rate, own_char=config.own_char,
                       opponent_char=config.opponent_char, empty_char=config.empty_char)
    session = PlaySession(game, config.replace(seed=seed))

    for _ in range(games):
        if not await session.play_one():
            break
        if pbar is not None:
            pbar.update(1)
    return session.stats


async def run_all(config: EngineConfig, games: int, sessions: int) -> List[SessionStats]:
    per_session = [games // sessions + (1 if i < games % sessions else 0) for i in range(sessions)]
    with tqdm(total=games, desc="IPvGO games") as pbar:
        return await asyncio.gather(*(
            run_session(config, n, session_id=i, pbar=pbar) for i, n in enumerate(per_session)
        ))


def print_summary(results: List[SessionStats], elapsed: float):
    total = SessionStats()
    counts = Counter()
    for stats in results:
        total.games_completed += stats.games_completed
        total.games_aborted += stats.games_aborted
        total.moves += stats.moves
        total.passes += stats.passes
        total.retries += stats.retries
        counts.update(stats.strategy_counts)

    print(f"\n{'='*50}")
    print("IPvGO bot summary")
    print(f"{'='*50}")
    print(f"Games completed: {total.games_completed}")
    print(f"Games aborted:   {total.games_aborted}")
    print(f"Moves played:    {total.moves}")
    print(f"Passes:          {total.passes}")
    print(f"Retries:         {total.retries}")
    print("Moves by strategy:")
    for name, count in counts.most_common():
        share = count / total.moves * 100 if total.moves else 0.0
        print(f"  {name:<10} {count:>6} ({share:.1f}%)")
    print(f"Elapsed: {elapsed:.2f}s")


def main(argv=None):
    parser = argparse.ArgumentParser(description='Greedy IPvGO bot against a local random opponent')
    parser.add_argument('--config', type=str, help='JSON config file')
    parser.add_argument('--games', type=int, default=10, help='Number of games to play')
    parser.add_argument('--sessions', type=int, default=1, help='Independent sessions run concurrently')
    parser.add_argument('--board-size', type=int, help='Size of the board')
    parser.add_argument('--opponent', type=str, help='Opponent faction name')
    parser.add_argument('--strategies', type=str, help='Comma-separated strategy order, e.g. capture,random')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--opponent-pass-rate', type=float, help='Probability the opponent passes')
    parser.add_argument('--turn-delay', type=float, help='Seconds to wait after each opponent turn (0 without --config)')
    parser.add_argument('--retry-delay', type=float, help='Seconds to wait before re-sampling (0 without --config)')
    parser.add_argument('--save-config', type=str, help='Write the effective config to this path and exit')
    parser.add_argument('--log-file', type=str, help='Write debug log to this file')
    parser.add_argument('-v', '--verbose', action='count', default=0, help='-v for INFO, -vv for DEBUG')

    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    setup_logging(level, args.log_file)

    try:
        if args.config:
            config = EngineConfig.load(args.config)
        else:
            # Local games need no pacing unless asked for
            config = EngineConfig(turn_delay=0.0, retry_delay=0.0)
        config = config.replace(
            board_size=args.board_size,
            opponent=args.opponent,
            strategy_order=args.strategies.split(',') if args.strategies else None,
            seed=args.seed,
            opponent_pass_rate=args.opponent_pass_rate,
            turn_delay=args.turn_delay,
            retry_delay=args.retry_delay,
        )
    except (OSError, ValueError) as e:
        parser.error(str(e))

    if args.save_config:
        config.save(args.save_config)
        print(f"Config saved to {args.save_config}")
        return 0

    if args.games < 1 or args.sessions < 1 or args.sessions > args.games:
        parser.error('--games and --sessions must be positive and sessions <= games')

    print(f"Board: {config.board_size}x{config.board_size} vs {config.opponent}")
    print(f"Strategies: {', '.join(config.strategy_order)}")

    start = time.time()
    results = asyncio.run(run_all(config, args.games, args.sessions))
    print_summary(results, time.time() - start)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
