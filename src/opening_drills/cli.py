#!/usr/bin/env python3
"""
Command-line host for importing repertoires and drilling lines in the terminal.

Usage:
    python run_trainer.py import repertoire.pgn
    python run_trainer.py import-study abc123XY
    python run_trainer.py list
    python run_trainer.py drill <repertoire-id> [--line <line-id>] [--side black]
"""

import argparse
import logging
import sys
from typing import List, Optional

import chess

from opening_drills.lib.api.lichess import StudyManager, export_study_pgn, get_lichess_client
from opening_drills.lib.data.repository import JsonRepertoireRepository
from opening_drills.lib.errors import NoLinesFound, RepertoireNotFound
from opening_drills.lib.utils import load_settings, setup_logging
from opening_drills.trainer.scheduler import format_next_review, mastery_percent
from opening_drills.trainer.service import RepertoireTrainer
from opening_drills.trainer.session import DrillSessionState, Phase

logger = logging.getLogger("opening_drills")

QUIT_WORDS = ("quit", "exit", "q")


def render(state: DrillSessionState):
    """Print the board, recent moves and the live annotations."""
    board = chess.Board(state.fen)
    print()
    print(board.unicode(empty_square=".", orientation=state.user_side))
    if state.played_moves:
        print("Moves: " + " ".join(state.played_moves))
    for move in state.live_annotations:
        if move.comment:
            print(f"  {move.move_text}: {move.comment}")
        marks = [f"{m.square}({m.color.name.lower()})" for m in move.highlighted_squares]
        marks += [f"{a.from_square}->{a.to_square}({a.color.name.lower()})" for a in move.arrows]
        if marks:
            print("  " + ", ".join(marks))
    print(f"Remaining: {state.remaining_user_moves}  correct: {state.correct_count}  wrong: {state.incorrect_count}")


def _drill(trainer: RepertoireTrainer, args) -> int:
    side = chess.BLACK if args.side == "black" else chess.WHITE
    engine = trainer.open_session(args.repertoire_id, line_id=args.line, user_side=side,
                                  auto_play_delay=args.delay)
    print(f"Drilling {engine.state.line.name or engine.state.line.id} "
          f"({len(engine.state.line.moves)} moves). Type a move, 'hint' or 'quit'.")

    while not engine.state.is_finished:
        render(engine.state)
        try:
            answer = input("> ").strip()
        except EOFError:
            answer = "quit"

        if answer.lower() in QUIT_WORDS:
            engine.exit()
            break
        if answer.lower() == "hint":
            hint = engine.hint()
            if hint is None:
                print("No hint yet: try a move first.")
            elif hint.arrow:
                print(f"Move the piece from {hint.arrow[0]} to {hint.arrow[1]}.")
            else:
                print(f"Move the piece on {hint.origin_square}.")
            continue

        state = engine.submit(answer)
        if state.phase is Phase.FEEDBACK_INCORRECT:
            print("Not the move of this line, try again.")
        elif state.phase is Phase.COMPLETE:
            render(state)

    report = trainer.finish_session(args.repertoire_id, engine)
    if report.completed:
        print(f"Line complete: {report.outcome.value}. "
              f"{format_next_review(report.line.scheduling, trainer.clock())}.")
    elif report.faulted:
        print("This line contains a move that cannot be played; fix the PGN and import it again.")
    else:
        print("Session saved without rescheduling.")
    return 0


def _list(trainer: RepertoireTrainer) -> int:
    now = trainer.clock()
    for repertoire in trainer.repository.list_all():
        due = trainer.repository.list_due(repertoire.id, now)
        print(f"{repertoire.id}  {repertoire.name}  lines={len(repertoire.lines)} due={len(due)} "
              f"accuracy={repertoire.accuracy}% streak={repertoire.current_streak}")
    return 0


def _due(trainer: RepertoireTrainer, repertoire_id: str) -> int:
    repertoire = trainer.repository.get_by_id(repertoire_id)
    if repertoire is None:
        raise RepertoireNotFound(f"Repertoire not found: {repertoire_id}")
    now = trainer.clock()
    for line in repertoire.lines:
        print(f"{line.id}  {line.name}  {format_next_review(line.scheduling, now)}  "
              f"mastery={mastery_percent(line.scheduling)}%")
    return 0


def _import_study(trainer: RepertoireTrainer, args, token: Optional[str]) -> int:
    study_id = args.study
    if args.user:
        study_id = StudyManager(token).find_study_by_name(args.user, args.study)
        if not study_id:
            logger.error(f"Study {args.study!r} not found for user {args.user}.")
            return 1

    pgn_text = export_study_pgn(get_lichess_client(token), study_id)
    if not pgn_text:
        return 1
    repertoire = trainer.import_pgn(pgn_text, name=args.name or args.study)
    print(f"{repertoire.id}  {repertoire.name}  lines={len(repertoire.lines)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Drill PGN repertoires with spaced repetition')
    sub = parser.add_subparsers(dest='command', required=True)

    p_import = sub.add_parser('import', help='Import a PGN file as a repertoire')
    p_import.add_argument('pgn', help='Path to PGN file')
    p_import.add_argument('--name', help='Repertoire name (default: file name)')

    p_study = sub.add_parser('import-study', help='Import a Lichess study as a repertoire')
    p_study.add_argument('study', help='Study id, or study name together with --user')
    p_study.add_argument('--user', help='Lichess user owning the study (look up by name)')
    p_study.add_argument('--name', help='Repertoire name')

    sub.add_parser('list', help='List repertoires')

    p_due = sub.add_parser('due', help='Show review status of every line')
    p_due.add_argument('repertoire_id')

    p_drill = sub.add_parser('drill', help='Drill a line (first due line by default)')
    p_drill.add_argument('repertoire_id')
    p_drill.add_argument('--line', help='Line id')
    p_drill.add_argument('--side', choices=['white', 'black'], default='white')
    p_drill.add_argument('--delay', type=float, default=None,
                         help='Seconds between auto-played moves (default: AUTO_PLAY_DELAY_MS)')

    p_delete = sub.add_parser('delete', help='Delete a repertoire')
    p_delete.add_argument('repertoire_id')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    settings = load_settings()
    trainer = RepertoireTrainer(JsonRepertoireRepository(settings.store_path))

    try:
        if args.command == 'import':
            repertoire = trainer.import_file(args.pgn, name=args.name)
            print(f"{repertoire.id}  {repertoire.name}  lines={len(repertoire.lines)}")
            return 0
        if args.command == 'import-study':
            return _import_study(trainer, args, settings.lichess_token)
        if args.command == 'list':
            return _list(trainer)
        if args.command == 'due':
            return _due(trainer, args.repertoire_id)
        if args.command == 'drill':
            if args.delay is None:
                args.delay = settings.auto_play_delay
            return _drill(trainer, args)
        if args.command == 'delete':
            return 0 if trainer.repository.delete(args.repertoire_id) else 1
    except (NoLinesFound, RepertoireNotFound) as e:
        logger.error(str(e))
        return 1
    except FileNotFoundError as e:
        logger.error(f"File not found: {e.filename}")
        return 1
    return 1


if __name__ == '__main__':
    sys.exit(main())
