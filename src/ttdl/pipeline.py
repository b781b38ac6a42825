"""Per-URL orchestration: classify, resolve, retrieve, record."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from ttdl.config import DownloaderConfig, OutcomeStatus
from ttdl.errors import RetrievalFailedError, TtdlError
from ttdl.extractor import ResolutionChain
from ttdl.fetcher import Fetcher
from ttdl.input import classify, media_kind_for
from ttdl.ledger import SessionLedger
from ttdl.media import ProgressCallback, Retriever
from ttdl.models import MediaDescriptor, OutcomeRecord, PhotoSetDescriptor, VideoDescriptor

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def _descriptor_identity(descriptor: MediaDescriptor) -> tuple[str, str]:
    if isinstance(descriptor, VideoDescriptor):
        return descriptor.item_id, descriptor.author_id
    return descriptor.set_id, descriptor.author_id


def _failure_details(exc: TtdlError) -> str:
    if isinstance(exc, RetrievalFailedError) and exc.is_partial:
        return f"{exc} (saved {exc.saved_count}/{exc.total} images)"
    return str(exc)


def process_url(
    url: str,
    *,
    chain: ResolutionChain,
    retriever: Retriever,
    ledger: SessionLedger,
    on_progress: ProgressCallback | None = None,
) -> OutcomeRecord:
    """Run one URL through the pipeline and append exactly one outcome to the ledger."""

    kind = media_kind_for(url)
    item_id, author = UNKNOWN, UNKNOWN
    strategy: str | None = None

    try:
        ref = classify(url)
        kind = ref.kind

        resolution = chain.resolve(ref)
        item_id, author = _descriptor_identity(resolution.descriptor)
        strategy = resolution.strategy

        result = retriever.retrieve(resolution.descriptor, ref.source_url, on_progress=on_progress)
    except TtdlError as exc:
        logger.warning("Processing %s failed: %s", url, exc)
        record = OutcomeRecord(
            media_kind=kind,
            id=item_id,
            author=author,
            status=OutcomeStatus.FAILED,
            details=_failure_details(exc),
            strategy=strategy,
        )
    else:
        if isinstance(resolution.descriptor, PhotoSetDescriptor):
            details = f"{len(result.saved_paths)} Images"
        else:
            details = "MP4 Saved"
        record = OutcomeRecord(
            media_kind=kind,
            id=item_id,
            author=author,
            status=OutcomeStatus.SUCCESS,
            details=details,
            strategy=strategy,
        )

    ledger.record(record)
    return record


class DownloadSession:
    """Bundle the collaborators one interactive run needs."""

    def __init__(self, config: DownloaderConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self.fetcher = Fetcher(config, client=client)
        self.chain = ResolutionChain.default(self.fetcher, config)
        self.retriever = Retriever(self.fetcher, config)
        self.ledger = SessionLedger()

    def __enter__(self) -> "DownloadSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.fetcher.close()

    def process(self, url: str, on_progress: ProgressCallback | None = None) -> OutcomeRecord:
        return process_url(
            url,
            chain=self.chain,
            retriever=self.retriever,
            ledger=self.ledger,
            on_progress=on_progress,
        )

    @property
    def output_dirs(self) -> tuple[Path, Path]:
        return self.config.video_dir, self.config.image_dir
