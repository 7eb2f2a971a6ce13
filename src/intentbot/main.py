"""
intentbot command line

Usage:
    intentbot build-models            # Write the four NLTK pipeline artifacts
    intentbot train --cache PATH      # Train and persist the classifier
    intentbot classify "How much is it?"
    intentbot chat                    # Answer messages read from stdin

Global flags:
    --debug      Enable debug logging (shows every pipeline stage)
    --console    Use pretty console logging instead of JSON
    --config     Explicit YAML config file
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import NoReturn

from intentbot import __version__
from intentbot.config import IntentBotConfig, get_config, load_config
from intentbot.errors import IntentBotError
from intentbot.intent.engine import IntentEngine
from intentbot.intent.pipeline import ClassifiedSentence
from intentbot.intent.trainer import TrainingParams, save_classifier, train_classifier
from intentbot.nlp.build import build_models
from intentbot.nlp.models import initialize
from intentbot.utils.logging import get_logger, setup_logging

logger = get_logger("intentbot.cli")

DEFAULT_CACHE = Path("models/classifier.joblib")


def cmd_build_models(args: argparse.Namespace, config: IntentBotConfig) -> int:
    output_dir = args.output_dir or Path(config.models.sentence).parent
    paths = build_models(output_dir, train_text=args.train_text, lemma_dictionary=args.lemma_dict)
    print(f"Wrote models to {output_dir}")
    for stage_path in (paths.sentence, paths.token, paths.pos, paths.lemma):
        print(f"  {stage_path}")
    return 0


def cmd_train(args: argparse.Namespace, config: IntentBotConfig) -> int:
    training = config.training
    handle = initialize(config.models) if training.use_normalizer else None
    classifier = train_classifier(handle, training.corpus_path, TrainingParams.from_config(training))
    cache = args.cache or training.cache_path or DEFAULT_CACHE
    save_classifier(classifier, cache)
    print(f"Trained {len(classifier.labels)} categories: {', '.join(classifier.labels)}")
    print(f"Saved classifier to {cache}")
    return 0


def cmd_classify(args: argparse.Namespace, config: IntentBotConfig) -> int:
    engine = IntentEngine(config)
    engine.load()
    try:
        text = " ".join(args.text)
        result = engine.classify(text)
        for outcome in result.outcomes:
            if isinstance(outcome, ClassifiedSentence):
                print(f"{outcome.category}\t{outcome.score:.4f}\t{outcome.text}")
            else:
                print(f"-\tskipped ({outcome.stage})\t{outcome.text}")
        print(engine.resolver.compose(result).text)
    finally:
        engine.stop()
    return 0


async def chat_loop(engine: IntentEngine) -> None:
    """Answer stdin lines until EOF."""
    loop = asyncio.get_running_loop()
    await engine.start()
    try:
        while True:
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            if not line.strip():
                continue
            reply = await engine.respond_async(line.rstrip("\n"))
            print(reply.text, flush=True)
    finally:
        engine.stop()


def cmd_chat(args: argparse.Namespace, config: IntentBotConfig) -> int:
    asyncio.run(chat_loop(IntentEngine(config)))
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="intentbot",
        description="Intent classification chat responder",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use pretty console logging instead of JSON",
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")

    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build-models", help="Build pipeline artifacts from NLTK")
    build.add_argument("--output-dir", type=Path, help="Directory for the artifacts")
    build.add_argument("--train-text", type=Path, help="Text to train the sentence detector on")
    build.add_argument("--lemma-dict", type=Path, help="word<TAB>tag<TAB>lemma dictionary")
    build.set_defaults(handler=cmd_build_models)

    train = sub.add_parser("train", help="Train and save the category classifier")
    train.add_argument("--cache", type=Path, help="Where to write the classifier")
    train.set_defaults(handler=cmd_train)

    classify = sub.add_parser("classify", help="Classify one message")
    classify.add_argument("text", nargs="+", help="Message text")
    classify.set_defaults(handler=cmd_classify)

    chat = sub.add_parser("chat", help="Answer messages read from stdin")
    chat.set_defaults(handler=cmd_chat)

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the intentbot command."""
    args = parse_args(argv)

    config = load_config(args.config) if args.config else get_config()
    if args.debug:
        config.log.level = "DEBUG"
    if args.console:
        config.log.format = "console"

    setup_logging(
        level=config.log.level,
        format=config.log.format,
        log_file=config.log.file,
    )

    try:
        exit_code = args.handler(args, config)
    except IntentBotError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        exit_code = 1
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
