"""
Intent Engine

Owns the loaded models, the trained classifier and the answer table for
one bot instance, and turns incoming messages into replies.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from uuid import uuid4

import structlog

from intentbot.answers import AnswerResolver, Reply
from intentbot.config import IntentBotConfig
from intentbot.errors import ClassifierUnavailableError
from intentbot.intent.classifier import TrainedClassifier
from intentbot.intent.pipeline import MessageResult, classify_message
from intentbot.intent.trainer import (
    TrainingParams,
    load_classifier,
    save_classifier,
    train_classifier,
)
from intentbot.nlp.models import ModelHandle, initialize
from intentbot.utils.logging import message_context

logger = structlog.get_logger(__name__)


class IntentEngine:
    """
    Classifies messages and resolves replies.

    Startup (``load`` or ``start``) loads the four pipeline models and
    trains the classifier exactly once; both errors are fatal. After that
    every message is handled independently and per-sentence failures
    only drop that sentence's fragment of the reply.
    """

    def __init__(
        self,
        config: IntentBotConfig,
        resolver: AnswerResolver | None = None,
        handle: ModelHandle | None = None,
        classifier: TrainedClassifier | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Application configuration
            resolver: Answer table; built from config when omitted
            handle: Preloaded models (skips loading from disk)
            classifier: Pretrained classifier (skips training)
        """
        self.config = config
        self.resolver = resolver or AnswerResolver.from_config(config)
        self._handle = handle
        self._classifier = classifier
        self._executor: ThreadPoolExecutor | None = None
        self._running = False

    def load(self) -> None:
        """Load models and prepare the classifier (synchronous startup)."""
        if self._running:
            return

        if self._handle is None:
            self._handle = initialize(self.config.models)
        if self._classifier is None:
            self._classifier = self._prepare_classifier()

        missing = self.resolver.unanswered(self._classifier.labels)
        if missing:
            logger.warning("categories_without_answer", categories=missing)

        if self.config.engine.parallel_sentences:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.engine.max_workers,
                thread_name_prefix="intentbot-sentence",
            )

        self._running = True
        logger.info(
            "intent_engine_started",
            labels=list(self._classifier.labels),
            parallel_sentences=self._executor is not None,
        )

    async def start(self) -> None:
        """Run startup in a worker thread so the event loop stays responsive."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.load)

    def stop(self) -> None:
        """Release the sentence pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        self._running = False
        logger.info("intent_engine_stopped")

    def _prepare_classifier(self) -> TrainedClassifier:
        training = self.config.training
        cache = training.cache_path
        params = TrainingParams.from_config(training)
        expected = params.settings(normalized=training.use_normalizer)

        if cache is not None and _is_fresh(cache, training.corpus_path):
            try:
                cached = load_classifier(cache)
            except ClassifierUnavailableError as e:
                logger.warning("classifier_cache_unusable", path=str(cache), error=str(e))
            else:
                if dict(cached.trained_with) == expected:
                    return cached
                logger.info(
                    "classifier_cache_stale",
                    path=str(cache),
                    cached=dict(cached.trained_with),
                    configured=expected,
                )

        handle = self._handle if training.use_normalizer else None
        classifier = train_classifier(handle, training.corpus_path, params)
        if cache is not None:
            save_classifier(classifier, cache)
        return classifier

    @property
    def handle(self) -> ModelHandle:
        if self._handle is None:
            raise ClassifierUnavailableError("Engine not started; models are not loaded")
        return self._handle

    @property
    def classifier(self) -> TrainedClassifier:
        if self._classifier is None:
            raise ClassifierUnavailableError("Engine not started; classifier is not trained")
        return self._classifier

    def classify(self, text: str) -> MessageResult:
        """Per-sentence categories for one message."""
        return classify_message(self.handle, self.classifier, text, self._executor)

    def respond(self, text: str) -> Reply:
        """Classify a message and compose its reply."""
        with message_context(message_id=str(uuid4())[:8]):
            result = self.classify(text)
            reply = self.resolver.compose(result)
            logger.info(
                "message_answered",
                sentences=len(result.outcomes),
                categories=list(reply.categories),
                skipped=reply.skipped,
                complete=reply.conversation_complete,
            )
            return reply

    async def respond_async(self, text: str) -> Reply:
        """``respond`` on a worker thread; safe to await from many tasks at once."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.respond, text)

    @property
    def is_running(self) -> bool:
        return self._running


def _is_fresh(cache: Path, corpus: Path) -> bool:
    """True when the cached classifier is at least as new as the corpus."""
    if not cache.is_file():
        return False
    try:
        return cache.stat().st_mtime >= corpus.stat().st_mtime
    except OSError:
        return False
