"""
WordLens: look up a word from the command line
-----------------------------------------------

Fetches images, example phrases and an explanation for one word, records the
search and optionally exports the first phrases as flashcards.
"""

import argparse
import asyncio
import sys

from wordlens import VocabularyApp
from wordlens.deck import ApkgBridge
from wordlens.utils import setup_logger


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Study a word with images, phrases and flashcards.")
    parser.add_argument("word", help="Word or expression to look up")
    parser.add_argument("--export", type=int, nargs="?", const=2, default=0, metavar="N",
                        help="Export the first N phrases to Anki (default 2)")
    parser.add_argument("--apkg", metavar="PATH",
                        help="Write the exported cards to an .apkg file instead of AnkiConnect")
    parser.add_argument("--log-level", default=None, help="Logging level (default: WORDLENS_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def print_result(result) -> None:
    print(f"\n=== {result.word} ===")

    print("\nExplanation:")
    print(f"  {result.explanation}" if result.explanation else "  (no explanation available)")

    print("\nExample phrases:")
    for phrase in result.phrases:
        print(f"  [{phrase.category}] {phrase.text}")
        print(f"      {phrase.translation}")

    print("\nImages:")
    for image in result.images:
        print(f"  {image.title or image.url} ({image.source or 'unknown'})")
        print(f"      {image.url}")


async def main(argv=None) -> bool:
    """Main entry point."""
    args = parse_args(argv)
    setup_logger(level=args.log_level)

    bridge = ApkgBridge(args.apkg) if args.apkg else None
    async with VocabularyApp(bridge=bridge) as app:
        result = await app.lookup(args.word)
        print_result(result)

        if args.export or args.apkg:
            count = args.export or 2
            summary = await app.create_cards_for_selection(
                result.word, result.explanation, result.phrases[:count], result.images[:1]
            )
            print(f"\nFlashcards: {summary.succeeded} added, {summary.failed} failed")
            if args.apkg and summary.succeeded:
                print(f"Package written to {bridge.write()}")
            return summary.failed == 0

    return True


if __name__ == "__main__":
    try:
        success = asyncio.run(main())
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
