"""TranscriptionPipeline — drives one audio event through fetch → transcode → backend → delivery."""
import logging
import tempfile
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from transcribot.bot_client import BotClient
from transcribot.constants import (
    MSG_BACKEND_UNAVAILABLE,
    MSG_DELIVERY_FAILED_REPLY,
    MSG_NO_SELECTION,
    MSG_RUN_DELIVERED,
    MSG_RUN_FAILED,
    MSG_RUN_FAILED_REPLY,
    MSG_RUN_UNEXPECTED,
    MSG_SELECTION_SET,
    MSG_STAGE,
    MSG_TRANSCRIBING,
    RUN_DIR_PREFIX,
)
from transcribot.delivery import ResultDelivery
from transcribot.errors import (
    DeliveryError,
    FetchError,
    NoBackendSelectedError,
    NotSelectedError,
    PipelineError,
    TranscodeError,
    TranscribeError,
    UnknownBackendError,
)
from transcribot.events import AudioEvent, SelectionEvent
from transcribot.media.audio import AudioAsset, Waveform
from transcribot.media.fetcher import MediaFetcher
from transcribot.media.transcoder import Transcoder
from transcribot.selection_store import SelectionStore
from transcribot.transcription.registry import BackendEntry, BackendRegistry

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    FETCHING = "fetching"
    TRANSCODING = "transcoding"
    DISPATCHING = "dispatching"
    TRANSCRIBING = "transcribing"
    DELIVERING = "delivering"
    DELIVERED = "delivered"
    FAILED = "failed"


_ORDER = (
    Stage.FETCHING,
    Stage.TRANSCODING,
    Stage.DISPATCHING,
    Stage.TRANSCRIBING,
    Stage.DELIVERING,
    Stage.DELIVERED,
)

# error type used when a stage raises something outside the taxonomy
_STAGE_ERRORS: dict[Stage, type[PipelineError]] = {
    Stage.FETCHING: FetchError,
    Stage.TRANSCODING: TranscodeError,
    Stage.TRANSCRIBING: TranscribeError,
    Stage.DELIVERING: DeliveryError,
}


@dataclass(frozen=True)
class PipelineFailure:
    stage: Stage
    error: PipelineError

    @property
    def kind(self) -> str:
        return self.error.kind

    def report(self) -> str:
        return f"{self.stage.value}: {self.kind} ({self.error})"


@dataclass
class PipelineRun:
    """State of one audio submission. Owned by a single task; never shared."""

    requester_id: str
    content_id: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    stage: Stage = Stage.FETCHING
    backend_name: Optional[str] = None
    asset: Optional[AudioAsset] = None
    waveform: Optional[Waveform] = None
    transcript: Optional[str] = None
    failure: Optional[PipelineFailure] = None

    @property
    def succeeded(self) -> bool:
        return self.stage is Stage.DELIVERED

    @property
    def failed(self) -> bool:
        return self.stage is Stage.FAILED

    def advance(self, stage: Stage) -> None:
        match self.stage:
            case Stage.FAILED | Stage.DELIVERED:
                raise RuntimeError(f"run {self.run_id} already finished in {self.stage.value}")
            case current if _ORDER.index(stage) != _ORDER.index(current) + 1:
                raise RuntimeError(f"illegal transition {current.value} → {stage.value}")
            case _:
                logger.debug(MSG_STAGE, self.run_id, self.requester_id, stage.value)
                self.stage = stage

    def fail(self, error: PipelineError, stage: Optional[Stage] = None) -> None:
        self.failure = PipelineFailure(stage or self.stage, error)
        self.stage = Stage.FAILED


class TranscriptionPipeline:
    """Routes selection events to the store and audio events through the backends."""

    def __init__(
        self,
        registry: BackendRegistry,
        store: SelectionStore,
        fetcher: MediaFetcher,
        transcoder: Transcoder,
        outbound: BotClient,
        delivery: Optional[ResultDelivery] = None,
        work_dir: Optional[str] = None,
    ) -> None:
        self._registry = registry
        self._store = store
        self._fetcher = fetcher
        self._transcoder = transcoder
        self._outbound = outbound
        self._delivery = delivery or ResultDelivery(outbound)
        self._work_dir = work_dir

    # ── selection ─────────────────────────────────────────────────────────────

    def backend_options(self) -> dict[str, str]:
        return self._registry.options()

    def select(self, requester_id: str, backend_name: str) -> BackendEntry:
        """Record a choice. Raises UnknownBackendError without touching the store."""
        entry = self._registry.entry(backend_name)
        self._store.set_selection(requester_id, backend_name)
        logger.info(MSG_SELECTION_SET, requester_id, backend_name)
        return entry

    def handle_selection(self, event: SelectionEvent) -> BackendEntry:
        return self.select(event.requester_id, event.backend_name)

    def current_selection(self, requester_id: str) -> Optional[str]:
        """Label of the requester's backend, or None when nothing usable is selected."""
        try:
            return self._registry.entry(self._store.get_selection(requester_id)).label
        except (NotSelectedError, UnknownBackendError):
            return None

    # ── audio ─────────────────────────────────────────────────────────────────

    async def run(self, event: AudioEvent) -> PipelineRun:
        run = PipelineRun(requester_id=event.requester_id, content_id=event.content_id)
        start = time.time()

        # early check only; the backend used is read again on entering dispatching
        try:
            run.backend_name = self._store.get_selection(event.requester_id)
        except NotSelectedError:
            run.fail(NoBackendSelectedError(event.requester_id), Stage.DISPATCHING)
            await self._report_failure(run)
            return run

        label = self._label_for(run.backend_name)
        await self._outbound.send_message(event.requester_id, MSG_TRANSCRIBING % label)

        try:
            with tempfile.TemporaryDirectory(
                prefix=RUN_DIR_PREFIX, dir=self._work_dir, ignore_cleanup_errors=True
            ) as tmp:
                await self._run_stages(run, event, Path(tmp))
        except PipelineError as exc:
            run.fail(exc)
        except Exception as exc:
            logger.exception(MSG_RUN_UNEXPECTED, run.stage.value)
            run.fail(self._wrap(run.stage, exc))

        match run.failure:
            case None:
                logger.info(MSG_RUN_DELIVERED, run.requester_id, run.backend_name, time.time() - start)
            case _:
                await self._report_failure(run)
        return run

    async def _run_stages(self, run: PipelineRun, event: AudioEvent, run_dir: Path) -> None:
        run.asset = await self._fetcher.fetch(
            event.remote_ref, event.content_id, run_dir, event.suffix
        )

        run.advance(Stage.TRANSCODING)
        run.waveform = await self._transcoder.transcode(run.asset, run_dir)

        run.advance(Stage.DISPATCHING)
        try:
            run.backend_name = self._store.get_selection(run.requester_id)
        except NotSelectedError as exc:
            raise NoBackendSelectedError(run.requester_id) from exc
        backend = self._registry.resolve(run.backend_name)

        run.advance(Stage.TRANSCRIBING)
        try:
            run.transcript = await backend.transcribe(run.waveform)
        except TranscribeError:
            raise
        except Exception as exc:
            raise TranscribeError(f"{run.backend_name}: {exc}") from exc
        match (run.transcript or "").strip():
            case "":
                raise TranscribeError(f"{run.backend_name} returned an empty transcript")
            case _:
                pass

        run.advance(Stage.DELIVERING)
        await self._delivery.deliver(run.requester_id, run.transcript)
        run.advance(Stage.DELIVERED)

    # ── failure reporting ─────────────────────────────────────────────────────

    @staticmethod
    def _wrap(stage: Stage, exc: Exception) -> PipelineError:
        wrapped = _STAGE_ERRORS.get(stage, PipelineError)(f"{type(exc).__name__}: {exc}")
        wrapped.__cause__ = exc
        return wrapped

    def _label_for(self, backend_name: str) -> str:
        try:
            return self._registry.entry(backend_name).label
        except UnknownBackendError:
            return backend_name

    async def _report_failure(self, run: PipelineRun) -> None:
        failure = run.failure
        logger.error(
            MSG_RUN_FAILED,
            run.run_id,
            run.requester_id,
            failure.stage.value,
            failure.kind,
            failure.error,
        )
        match failure.error:
            case NoBackendSelectedError():
                await self._outbound.send_message(run.requester_id, MSG_NO_SELECTION)
                await self._outbound.prompt_selection(run.requester_id, self.backend_options())
            case UnknownBackendError() as err:
                await self._outbound.send_message(run.requester_id, MSG_BACKEND_UNAVAILABLE % err.name)
                await self._outbound.prompt_selection(run.requester_id, self.backend_options())
            case DeliveryError():
                await self._outbound.send_message(run.requester_id, MSG_DELIVERY_FAILED_REPLY)
            case _:
                await self._outbound.send_message(
                    run.requester_id,
                    MSG_RUN_FAILED_REPLY % (failure.stage.value, failure.kind),
                )
