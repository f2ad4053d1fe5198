"""Main entry point for the study tool."""
import argparse
import logging
import sys
from typing import List, Optional

from vocabdeck.config import ensure_directories, settings
from vocabdeck.logging_config import setup_logging
from vocabdeck.models.base import SessionLocal, init_db
from vocabdeck.monitoring import start_monitoring
from vocabdeck.services.quiz_service import QuizSession
from vocabdeck.services.state_store import StateStore
from vocabdeck.services.study_service import StudyService
from vocabdeck.services.transfer_service import StateImportError, write_export
from vocabdeck.services.vocabulary_service import (
    VocabularyLoadError,
    build_vocabulary_map,
    enrich_words,
    find_section,
    load_vocabulary,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vocabdeck", description="Vocabulary flashcards with spaced repetition")
    parser.add_argument("--session", default=None, help="Session key (default: SESSION_KEY)")
    parser.add_argument("--vocabulary", default=None, help="Path to the vocabulary file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sections", help="List vocabulary sections")

    quiz = subparsers.add_parser("quiz", help="Run a quiz")
    source = quiz.add_mutually_exclusive_group(required=True)
    source.add_argument("--section", help="Quiz a vocabulary section")
    source.add_argument("--list", dest="list_name", help="Quiz a custom list")
    source.add_argument("--due", action="store_true", help="Quiz words due for review")
    source.add_argument("--difficult", action="store_true", help="Quiz the most difficult words")
    source.add_argument("--favorites", action="store_true", help="Quiz favorite words")

    subparsers.add_parser("due", help="Show words due for review")
    subparsers.add_parser("difficult", help="Show words ranked by difficulty")
    subparsers.add_parser("forecast", help="Show upcoming reviews by date")

    favorite = subparsers.add_parser("favorite", help="Toggle a word as favorite")
    favorite.add_argument("word")
    known = subparsers.add_parser("known", help="Toggle a word as known")
    known.add_argument("word")

    subparsers.add_parser("lists", help="Show custom lists")
    list_create = subparsers.add_parser("list-create", help="Create a custom list")
    list_create.add_argument("name")
    list_toggle = subparsers.add_parser("list-toggle", help="Add a word to a list or remove it")
    list_toggle.add_argument("name")
    list_toggle.add_argument("word")

    intervals = subparsers.add_parser("intervals", help="Show or change SRS intervals")
    intervals.add_argument("--set", nargs=2, type=int, metavar=("LEVEL", "DAYS"))
    intervals.add_argument("--reset", action="store_true")

    export = subparsers.add_parser("export", help="Export progress to a JSON file")
    export.add_argument("path", nargs="?", default=None)
    import_ = subparsers.add_parser("import", help="Import progress from a JSON file")
    import_.add_argument("path")
    return parser


def run_quiz(args: argparse.Namespace, service: StudyService) -> int:
    vocabulary = load_vocabulary(args.vocabulary)
    vocabulary_map = build_vocabulary_map(vocabulary, service.state.word_stats)

    if args.section:
        section = find_section(vocabulary, args.section)
        if section is None:
            print(f"Section {args.section!r} not found")
            return 1
        title = section.title
        words = [entry.word for entry in section.vocabulary]
    elif args.list_name:
        custom_list = service.state.get_list(args.list_name)
        if custom_list is None:
            print(f"List {args.list_name!r} not found")
            return 1
        title = custom_list.name
        words = list(custom_list.words)
    elif args.due:
        title, words = "Due for review", service.due_words()
    elif args.difficult:
        title, words = "Difficult words", service.difficult_words(limit=settings.study.difficult_words_limit)
    else:
        title, words = "Favorites", service.favorite_words()

    known = set(service.known_words())
    if not args.section:
        words = [word for word in words if word not in known]

    quiz = QuizSession(enrich_words(words, vocabulary_map), title, service)
    if quiz.total == 0:
        print("No words to quiz.")
        return 0

    while not quiz.is_finished:
        entry = quiz.current
        print(f"\n[{quiz.position + 1}/{quiz.total}] {entry.word} ({entry.vocabulary.pos})")
        input("Press Enter to show the definition...")
        print(f"  {entry.definition}")
        reply = ""
        while reply not in ("y", "n"):
            reply = input("Did you know it? [y/n] ").strip().lower()
        quiz.answer(reply == "y")

    print(f"\nQuiz complete! {quiz.correct_count} of {quiz.total} correct in {title!r}.")
    return 0


def run(args: argparse.Namespace, service: StudyService) -> int:
    if args.command == "sections":
        for section in load_vocabulary(args.vocabulary).sections:
            print(f"{section.title} ({len(section.vocabulary)} words)")
    elif args.command == "quiz":
        return run_quiz(args, service)
    elif args.command == "due":
        for word in service.due_words():
            print(f"{word}\t{service.get_stat(word).next_review}")
    elif args.command == "difficult":
        for word in service.difficult_words(limit=settings.study.difficult_words_limit):
            print(f"{word}\t{service.difficulty(word):.1f}")
    elif args.command == "forecast":
        for day, words in service.review_forecast().items():
            print(f"{day}\t{len(words)}\t{', '.join(words)}")
    elif args.command == "favorite":
        state = "added to" if service.toggle_favorite(args.word) else "removed from"
        print(f"{args.word} {state} favorites")
    elif args.command == "known":
        state = "marked" if service.toggle_known(args.word) else "unmarked"
        print(f"{args.word} {state} as known")
    elif args.command == "lists":
        for custom_list in service.custom_lists:
            print(f"{custom_list.name} ({len(custom_list.words)} words)")
    elif args.command == "list-create":
        if not service.create_list(args.name):
            print("A list with this name already exists.")
            return 1
        print(f"Created list {args.name.strip()!r}")
    elif args.command == "list-toggle":
        in_list = service.toggle_word_in_list(args.name, args.word)
        print(f"{args.word} {'added to' if in_list else 'removed from'} {args.name!r}")
    elif args.command == "intervals":
        if args.reset:
            service.reset_intervals()
        elif args.set:
            service.set_interval(*args.set)
        for level, days in service.intervals.items():
            print(f"Level {level}: {days} days")
    elif args.command == "export":
        path = write_export(service.state, args.path or settings.paths.export_dir)
        print(f"Exported to {path}")
    elif args.command == "import":
        service.import_file(args.path)
        print("Import successful!")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line interface."""
    args = build_parser().parse_args(argv)

    ensure_directories()
    setup_logging(level=settings.logging.level)
    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)

    init_db()
    db = SessionLocal()
    try:
        service = StudyService.load(StateStore(db), args.session)
        return run(args, service)
    except (VocabularyLoadError, StateImportError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 130
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
